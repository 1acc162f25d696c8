import json
import logging
from typing import Any, Callable

from ..core.model import (
    Block,
    Blockquote,
    BlockQueryEmbed,
    BlockQueryEmbedScript,
    CodeBlock,
    CodeBlockCode,
    Heading,
    Image,
    LineBreak,
    LinkDest,
    LinkText,
    LinkTitle,
    List,
    ListItem,
    ListKind,
    Note,
    Paragraph,
    SuperBlock,
    SuperBlockCloseMarker,
    SuperBlockLayoutMarker,
    SuperBlockOpenMarker,
    Table,
    TableCell,
    TableHead,
    TableRow,
    TaskListItemMarker,
    Text,
    TextMark,
    ThematicBreak,
    UnknownBlock,
)
from ..core.ports import ParserStrategy

logger = logging.getLogger(__name__)


class DocumentParseError(ValueError):
    """A document could not be read as a note."""


def _list_kind(list_data: Any) -> ListKind:
    if isinstance(list_data, dict):
        typ = list_data.get("Typ")
        if isinstance(typ, int) and not isinstance(typ, bool):
            try:
                return ListKind(typ)
            except ValueError:
                pass
    return ListKind.UNORDERED


def _str(node: dict[str, Any], key: str) -> str:
    v = node.get(key)
    return v if isinstance(v, str) else ""


def _int(node: dict[str, Any], key: str, default: int) -> int:
    try:
        return int(node.get(key) or default)
    except (TypeError, ValueError):
        return default


# Node type → constructor of the type-specific fields.
_BUILDERS: dict[str, Callable[[dict[str, Any]], Block]] = {
    "NodeParagraph": lambda n: Paragraph(),
    "NodeHeading": lambda n: Heading(level=_int(n, "HeadingLevel", 1)),
    "NodeList": lambda n: List(kind=_list_kind(n.get("ListData"))),
    "NodeListItem": lambda n: ListItem(),
    "NodeBlockquote": lambda n: Blockquote(),
    "NodeThematicBreak": lambda n: ThematicBreak(),
    "NodeTable": lambda n: Table(
        aligns=[a for a in n.get("TableAligns") or [] if isinstance(a, int)]
    ),
    "NodeTableHead": lambda n: TableHead(),
    "NodeTableRow": lambda n: TableRow(),
    "NodeTableCell": lambda n: TableCell(header=_str(n, "Data") == "th"),
    "NodeCodeBlock": lambda n: CodeBlock(info=_str(n, "CodeBlockInfo")),
    "NodeCodeBlockCode": lambda n: CodeBlockCode(code=_str(n, "Data")),
    "NodeText": lambda n: Text(data=_str(n, "Data")),
    "NodeTextMark": lambda n: TextMark(
        mark_type=_str(n, "TextMarkType"),
        text=_str(n, "TextMarkTextContent"),
        href=_str(n, "TextMarkAHref"),
        ref_id=_str(n, "TextMarkBlockRefID"),
        ref_subtype=_str(n, "TextMarkBlockRefSubtype"),
        memo=_str(n, "TextMarkInlineMemoContent"),
    ),
    "NodeImage": lambda n: Image(),
    "NodeLinkDest": lambda n: LinkDest(data=_str(n, "Data")),
    "NodeLinkText": lambda n: LinkText(data=_str(n, "Data")),
    "NodeLinkTitle": lambda n: LinkTitle(data=_str(n, "Data")),
    "NodeBr": lambda n: LineBreak(),
    "NodeSuperBlock": lambda n: SuperBlock(),
    "NodeSuperBlockOpenMarker": lambda n: SuperBlockOpenMarker(),
    "NodeSuperBlockLayoutMarker": lambda n: SuperBlockLayoutMarker(layout=_str(n, "Data")),
    "NodeSuperBlockCloseMarker": lambda n: SuperBlockCloseMarker(),
    "NodeTaskListItemMarker": lambda n: TaskListItemMarker(
        checked=bool(n.get("TaskListItemChecked"))
    ),
    "NodeBlockQueryEmbed": lambda n: BlockQueryEmbed(),
    "NodeBlockQueryEmbedScript": lambda n: BlockQueryEmbedScript(script=_str(n, "Data")),
}


def parse_block(node: dict[str, Any]) -> Block:
    node_type = _str(node, "Type")
    builder = _BUILDERS.get(node_type)
    if builder is None:
        logger.debug("unknown node type %r kept as opaque block", node_type)
        block: Block = UnknownBlock(node_type=node_type, data=_str(node, "Data"))
    else:
        block = builder(node)

    props = node.get("Properties") or {}
    if not isinstance(props, dict):
        props = {}
    block.id = _str(node, "ID") or _str(props, "id")
    block.style = _str(props, "style")
    block.parent_style = _str(props, "parent-style")
    block.children = [
        parse_block(child) for child in node.get("Children") or [] if isinstance(child, dict)
    ]
    return block


class SyParser(ParserStrategy):
    """Reads the JSON `.sy` document format."""

    def parse(self, text: str) -> Note:
        try:
            doc = json.loads(text)
        except json.JSONDecodeError as e:
            raise DocumentParseError(f"invalid JSON: {e}") from e
        if not isinstance(doc, dict):
            raise DocumentParseError("document root is not an object")
        note_id = _str(doc, "ID")
        if not note_id:
            raise DocumentParseError("document has no ID")

        props = doc.get("Properties") or {}
        if not isinstance(props, dict):
            props = {}
        return Note(
            id=note_id,
            title=_str(props, "title"),
            tags=_str(props, "tags"),
            note_type=_str(props, "type"),
            created=_str(props, "created"),
            updated=_str(props, "updated"),
            title_img=_str(props, "title-img"),
            children=[
                parse_block(child)
                for child in doc.get("Children") or []
                if isinstance(child, dict)
            ],
        )
