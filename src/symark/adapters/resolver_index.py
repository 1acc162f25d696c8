from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass

from ..core.model import Block, BlockId, MarkKind, Note, NoteId, TextMark


@dataclass(frozen=True, eq=False)
class Resolution:
    """Where an identifier points: a whole note or one block inside it."""

    kind: str  # "note" or "block"
    note: Note
    block: Block | None = None

    @property
    def target_id(self) -> str:
        return self.block.id if self.block is not None else self.note.id

    @property
    def content(self) -> Sequence[Block]:
        if self.block is not None:
            return [self.block]
        return self.note.children

    @property
    def url(self) -> str:
        if self.kind == "note":
            return f"{self.note.id}.html"
        return f"{self.note.id}.html#{self.target_id}"


def walk(blocks: Iterable[Block]) -> Iterator[Block]:
    """Depth-first, document order."""
    for b in blocks:
        yield b
        yield from walk(b.children)


class NoteIndex(Mapping[NoteId, Note]):
    """
    The corpus for one generation run: notes by id, plus a precomputed
    block-id table and incoming block references.

    Read-only after construction.
    """

    def __init__(self, notes: Iterable[Note]):
        self._notes: dict[NoteId, Note] = {}
        for note in notes:
            self._notes[note.id] = note

        self._blocks: dict[BlockId, tuple[NoteId, Block]] = {}
        for nid in sorted(self._notes):
            for block in walk(self._notes[nid].children):
                # first occurrence wins, like a depth-first search would
                if block.id and block.id not in self._blocks:
                    self._blocks[block.id] = (nid, block)

        self._backlinks: dict[NoteId, set[NoteId]] = defaultdict(set)
        for nid, note in self._notes.items():
            for ref in block_refs(note):
                owner = self.owner_of(ref.ref_id)
                if owner is not None and owner != nid:
                    self._backlinks[owner].add(nid)

    # Mapping interface
    def __getitem__(self, k: NoteId) -> Note:
        return self._notes[k]

    def __iter__(self) -> Iterator[NoteId]:
        return iter(self._notes)

    def __len__(self) -> int:
        return len(self._notes)

    def find_block(self, block_id: BlockId) -> Resolution | None:
        hit = self._blocks.get(block_id)
        if hit is None:
            return None
        nid, block = hit
        return Resolution(kind="block", note=self._notes[nid], block=block)

    def resolve(self, target_id: str) -> Resolution | None:
        """Note id first, then any block in any note; None when unknown."""
        if not target_id:
            return None
        note = self._notes.get(target_id)
        if note is not None:
            return Resolution(kind="note", note=note)
        return self.find_block(target_id)

    def owner_of(self, target_id: str) -> NoteId | None:
        res = self.resolve(target_id)
        return res.note.id if res is not None else None

    def backlinks(self, note_id: NoteId) -> list[Note]:
        """Notes referencing *note_id* (or any of its blocks), by title."""
        sources = [self._notes[s] for s in self._backlinks.get(note_id, ())]
        return sorted(sources, key=lambda n: (n.display_title, n.id))

    def titled_notes(self) -> list[Note]:
        """Notes with a title, sorted by title."""
        return sorted(
            (n for n in self._notes.values() if n.title), key=lambda n: (n.title, n.id)
        )

    def tagged(self, tag: str) -> list[Note]:
        return sorted(
            (n for n in self._notes.values() if n.has_tag(tag)),
            key=lambda n: (n.display_title, n.id),
        )

    def all_tags(self) -> list[str]:
        tags = {t for n in self._notes.values() for t in n.tag_list}
        tags.discard("index")
        return sorted(tags)


def block_refs(note: Note) -> Iterator[TextMark]:
    """Every block-reference mark in *note*, at any depth."""
    for block in walk(note.children):
        if isinstance(block, TextMark) and block.kind is MarkKind.BLOCK_REF and block.ref_id:
            yield block
