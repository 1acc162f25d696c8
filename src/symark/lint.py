from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

from .adapters.resolver_index import NoteIndex, block_refs, walk
from .core.model import BlockQueryEmbed, BlockQueryEmbedScript, Note
from .render.blocks import embed_target_id


@dataclass
class Finding:
    severity: str  # "info" | "warn" | "error"
    message: str
    block_id: str = ""


class LintRule(Protocol):
    id: str

    def check(self, note: Note, index: NoteIndex) -> list[Finding]:
        pass


class DeadRefsRule:
    id = "dead-refs"

    def check(self, note: Note, index: NoteIndex) -> list[Finding]:
        out: list[Finding] = []
        for ref in block_refs(note):
            if index.resolve(ref.ref_id) is None:
                out.append(Finding("error", f"Unknown block reference {ref.ref_id}", ref.id))
        return out


class DeadEmbedsRule:
    id = "dead-embeds"

    def check(self, note: Note, index: NoteIndex) -> list[Finding]:
        out: list[Finding] = []
        for block in walk(note.children):
            if not isinstance(block, BlockQueryEmbed):
                continue
            script = next(
                (c for c in block.children if isinstance(c, BlockQueryEmbedScript)), None
            )
            target = embed_target_id(script.script) if script is not None else None
            if target is None:
                out.append(Finding("warn", "Embed query has no id='…' target", block.id))
            elif index.resolve(target) is None:
                out.append(Finding("error", f"Unknown transclusion target {target}", block.id))
        return out


DEFAULT_RULES: tuple[LintRule, ...] = (DeadRefsRule(), DeadEmbedsRule())


def lint_index(
    index: NoteIndex, rules: tuple[LintRule, ...] = DEFAULT_RULES
) -> Iterator[tuple[str, Finding]]:
    for nid in sorted(index):
        for rule in rules:
            for finding in rule.check(index[nid], index):
                yield nid, finding
