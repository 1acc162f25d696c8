from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

NoteId = str
BlockId = str


class ListKind(Enum):
    UNORDERED = 0
    ORDERED = 1
    TASK = 3


class MarkKind(Enum):
    LINK = "a"
    CODE = "code"
    STRONG = "strong"
    EM = "em"
    UNDERLINE = "u"
    STRIKE = "s"
    SUB = "sub"
    SUP = "sup"
    KBD = "kbd"
    MARK = "mark"
    TEXT = "text"
    STRONG_TEXT = "text strong"
    TAG = "tag"
    INLINE_MATH = "inline-math"
    INLINE_MEMO = "inline-memo"
    BLOCK_REF = "block-ref"
    UNKNOWN = ""

    @classmethod
    def from_raw(cls, raw: str) -> "MarkKind":
        raw = raw.strip()
        if raw == "strong text":
            return cls.STRONG
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


# Blocks are tree nodes: eq=False keeps identity hashing so a block can key a dict.
@dataclass(eq=False)
class Block:
    id: BlockId = ""
    style: str = ""
    parent_style: str = ""
    children: list[Block] = field(default_factory=list)


@dataclass(eq=False)
class Paragraph(Block):
    pass


@dataclass(eq=False)
class Heading(Block):
    level: int = 1


@dataclass(eq=False)
class List(Block):
    kind: ListKind = ListKind.UNORDERED


@dataclass(eq=False)
class ListItem(Block):
    pass


@dataclass(eq=False)
class Blockquote(Block):
    pass


@dataclass(eq=False)
class ThematicBreak(Block):
    pass


@dataclass(eq=False)
class Table(Block):
    aligns: list[int] = field(default_factory=list)


@dataclass(eq=False)
class TableHead(Block):
    pass


@dataclass(eq=False)
class TableRow(Block):
    pass


@dataclass(eq=False)
class TableCell(Block):
    header: bool = False


@dataclass(eq=False)
class CodeBlock(Block):
    info: str = ""  # language tag, possibly base64


@dataclass(eq=False)
class CodeBlockCode(Block):
    code: str = ""


@dataclass(eq=False)
class Text(Block):
    data: str = ""


@dataclass(eq=False)
class TextMark(Block):
    mark_type: str = ""  # raw subtype string as stored
    text: str = ""
    href: str = ""
    ref_id: BlockId = ""
    ref_subtype: str = ""
    memo: str = ""

    @property
    def kind(self) -> MarkKind:
        return MarkKind.from_raw(self.mark_type)


@dataclass(eq=False)
class Image(Block):
    pass


@dataclass(eq=False)
class LinkDest(Block):
    data: str = ""


@dataclass(eq=False)
class LinkText(Block):
    data: str = ""


@dataclass(eq=False)
class LinkTitle(Block):
    data: str = ""


@dataclass(eq=False)
class LineBreak(Block):
    pass


@dataclass(eq=False)
class SuperBlock(Block):
    pass


@dataclass(eq=False)
class SuperBlockOpenMarker(Block):
    pass


@dataclass(eq=False)
class SuperBlockLayoutMarker(Block):
    layout: str = ""


@dataclass(eq=False)
class SuperBlockCloseMarker(Block):
    pass


@dataclass(eq=False)
class TaskListItemMarker(Block):
    checked: bool = False


@dataclass(eq=False)
class BlockQueryEmbed(Block):
    pass


@dataclass(eq=False)
class BlockQueryEmbedScript(Block):
    script: str = ""


@dataclass(eq=False)
class UnknownBlock(Block):
    node_type: str = ""
    data: str = ""


SUPERBLOCK_MARKERS = (SuperBlockOpenMarker, SuperBlockLayoutMarker, SuperBlockCloseMarker)


@dataclass(eq=False)
class Note:
    id: NoteId
    title: str = ""
    tags: str = ""  # comma separated, as stored
    note_type: str = ""
    created: str = ""
    updated: str = ""
    title_img: str = ""
    children: list[Block] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.created and len(self.id) >= 14:
            self.created = self.id[:14]

    @property
    def tag_list(self) -> list[str]:
        return [t.strip() for t in self.tags.split(",") if t.strip()]

    @property
    def display_title(self) -> str:
        return self.title or self.id

    def has_tag(self, tag: str) -> bool:
        return tag in self.tag_list


@dataclass
class TocItem:
    id: str
    text: str
    level: int


@dataclass
class GraphNode:
    id: NoteId
    title: str
    tags: list[str] = field(default_factory=list)
    connections: int = 0


@dataclass(frozen=True)
class GraphEdge:
    source: NoteId
    target: NoteId

    def touches(self, note_id: NoteId) -> bool:
        return note_id in (self.source, self.target)


@dataclass
class LinkGraph:
    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [
                {
                    "id": n.id,
                    "title": n.title,
                    "tags": list(n.tags),
                    "connections": n.connections,
                }
                for n in self.nodes
            ],
            "edges": [{"source": e.source, "target": e.target} for e in self.edges],
        }
