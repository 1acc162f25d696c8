"""
Block tree to HTML.

One recursive renderer covers every block kind. It is pure: the only
mutable state is the synthetic heading-id table, owned by the caller of
a single top-level render.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from ..adapters.resolver_index import NoteIndex
from ..core.model import (
    SUPERBLOCK_MARKERS,
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
    SuperBlockLayoutMarker,
    Table,
    TableCell,
    TableHead,
    TableRow,
    TaskListItemMarker,
    Text,
    TextMark,
    ThematicBreak,
)
from ..core.style import style_attrs
from ..core.utils import decode_code_language, escape_attr, escape_html, id_attr
from .inline import render_text_mark
from .toc import HeadingIds, clamp_level, extract_toc, toc_html

logger = logging.getLogger(__name__)

EMBED_ID_PREFIX = "id='"

_CHECKBOX_BASE = (
    "position: absolute; left: 0; top: 2px; display: inline-block; "
    "width: 20px; height: 20px; border: 2px solid #bdc3c7; border-radius: 2px;"
)
_CHECKED_STYLE = _CHECKBOX_BASE + " background-color: #3498db; border-color: #3498db;"
_UNCHECKED_STYLE = _CHECKBOX_BASE + " background-color: #ecf0f1;"
_TASK_ITEM_STYLE = "position: relative; padding-left: 30px; margin-bottom: 12px; list-style: none;"
_COMPLETE_STYLE = "text-decoration: line-through; color: #7f8c8d;"

# Table column alignments as stored: 0 leaves the cell alone.
_CELL_ALIGNS = {1: "left", 2: "center", 3: "right"}


def embed_target_id(script: str) -> str | None:
    """
    The quoted id in an embed query such as
    `select * from blocks where id='20240101120000-abcdefg'`.
    """
    start = script.find(EMBED_ID_PREFIX)
    if start < 0:
        return None
    start += len(EMBED_ID_PREFIX)
    end = script.find("'", start)
    if end < 0:
        return None
    return script[start:end] or None


class BlockRenderer:
    """
    Render block sequences against a note index.

    With *heading_ids* every heading gets an anchor (its own id or a
    synthetic one); without, headings only carry ids they already have.
    """

    def __init__(self, index: NoteIndex, heading_ids: HeadingIds | None = None):
        self.index = index
        self.heading_ids = heading_ids
        self._embedding: set[str] = set()
        self._aligns: list[int] = []
        self._dispatch: dict[type, Callable[[Any], str]] = {
            Paragraph: self._paragraph,
            Heading: self._heading,
            List: self._list,
            ListItem: self._list_item,
            Blockquote: self._wrap("blockquote"),
            ThematicBreak: self._thematic_break,
            Table: self._table,
            TableHead: self._wrap("thead", newline=True),
            TableRow: self._table_row,
            TableCell: self._table_cell,
            CodeBlock: self._code_block,
            Text: self._text,
            TextMark: self._text_mark,
            Image: self._image,
            LineBreak: self._line_break,
            SuperBlock: self._super_block,
            BlockQueryEmbed: self._embed,
        }

    def render(self, blocks: Iterable[Block]) -> str:
        return "".join(self.render_block(b) for b in blocks)

    def render_block(self, block: Block) -> str:
        handler = self._dispatch.get(type(block))
        if handler is None:
            # markers render nothing; unknown kinds render their children
            if isinstance(block, (TaskListItemMarker, *SUPERBLOCK_MARKERS)):
                return ""
            return self.render(block.children)
        return handler(block)

    # -- simple containers -------------------------------------------------

    def _wrap(self, tag: str, newline: bool = False) -> Callable[[Block], str]:
        def render(block: Block) -> str:
            nl = "\n" if newline else ""
            return f"<{tag}{id_attr(block.id)}>{nl}{self.render(block.children)}</{tag}>\n"

        return render

    def _paragraph(self, block: Block) -> str:
        attrs = id_attr(block.id) + style_attrs(block.style)
        return f"<p{attrs}>{self.render(block.children)}</p>\n"

    def _heading(self, block: Heading) -> str:
        level = clamp_level(block.level)
        hid = self.heading_ids.claim(block) if self.heading_ids else block.id
        attrs = id_attr(hid) + style_attrs(block.style)
        return f"<h{level}{attrs}>{self.render(block.children)}</h{level}>\n"

    def _thematic_break(self, block: Block) -> str:
        return f"<hr{id_attr(block.id)}>\n"

    def _line_break(self, block: Block) -> str:
        return f"<br{id_attr(block.id)}>"

    def _table(self, block: Table) -> str:
        outer, self._aligns = self._aligns, block.aligns
        try:
            return f"<table{id_attr(block.id)}>\n{self.render(block.children)}</table>\n"
        finally:
            self._aligns = outer

    def _table_row(self, block: TableRow) -> str:
        parts = []
        column = 0
        for child in block.children:
            if isinstance(child, TableCell):
                parts.append(self._table_cell(child, column))
                column += 1
            else:
                parts.append(self.render_block(child))
        return f"<tr{id_attr(block.id)}>\n{''.join(parts)}</tr>\n"

    def _table_cell(self, block: TableCell, column: int = -1) -> str:
        tag = "th" if block.header else "td"
        align = _CELL_ALIGNS.get(self._aligns[column]) if 0 <= column < len(self._aligns) else None
        style = f' style="text-align: {align}"' if align else ""
        return f"<{tag}{id_attr(block.id)}{style}>{self.render(block.children)}</{tag}>\n"

    # -- lists ---------------------------------------------------------------

    def _list(self, block: List) -> str:
        # task semantics live on the items
        tag = "ol" if block.kind is ListKind.ORDERED else "ul"
        return f"<{tag}{id_attr(block.id)}>\n{self.render(block.children)}</{tag}>\n"

    def _list_item(self, block: Block) -> str:
        ident = id_attr(block.id)
        marker = next((c for c in block.children if isinstance(c, TaskListItemMarker)), None)
        if marker is not None:
            content = self.render(c for c in block.children if c is not marker)
            if marker.checked:
                return (
                    f'<li{ident} style="{_TASK_ITEM_STYLE}">'
                    f'<span class="task-checkbox-checked" style="{_CHECKED_STYLE}"></span>'
                    f'<span class="task-complete" style="{_COMPLETE_STYLE}">{content}</span>'
                    "</li>\n"
                )
            return (
                f'<li{ident} style="{_TASK_ITEM_STYLE}">'
                f'<span class="task-checkbox-unchecked" style="{_UNCHECKED_STYLE}"></span>'
                f"{content}</li>\n"
            )

        # a paragraph right after another one contributes only its content
        parts = []
        after_paragraph = False
        for child in block.children:
            if isinstance(child, Paragraph) and after_paragraph:
                parts.append(self.render(child.children))
            else:
                parts.append(self.render_block(child))
            after_paragraph = isinstance(child, Paragraph)
        return f"<li{ident}>{''.join(parts)}</li>\n"

    # -- leaves --------------------------------------------------------------

    def _code_block(self, block: CodeBlock) -> str:
        lang = decode_code_language(block.info)
        cls = f' class="language-{escape_attr(lang)}"' if lang else ""
        code = "".join(c.code for c in block.children if isinstance(c, CodeBlockCode))
        return f"<pre{id_attr(block.id)}><code{cls}>{escape_html(code)}</code></pre>\n"

    def _text(self, block: Text) -> str:
        text = escape_html(block.data)
        return f"<span{id_attr(block.id)}>{text}</span>" if block.id else text

    def _text_mark(self, block: TextMark) -> str:
        return render_text_mark(block, self.index)

    def _image(self, block: Block) -> str:
        src = alt = caption = ""
        for child in block.children:
            if isinstance(child, LinkDest):
                src = child.data
            elif isinstance(child, LinkText):
                alt = child.data
            elif isinstance(child, LinkTitle):
                caption = child.data
        if not src:
            return ""

        # the id lands on exactly one element: figure, else wrapper, else img
        img_style = f' style="{escape_attr(block.style)}"' if block.style else ""
        img_id = "" if caption or block.parent_style else id_attr(block.id)
        html = f'<img{img_id} src="{escape_attr(src)}" alt="{escape_attr(alt)}"{img_style}/>'
        if block.parent_style:
            wrapper_id = "" if caption else id_attr(block.id)
            html = f'<div{wrapper_id} style="{escape_attr(block.parent_style)}">{html}</div>'
        if caption:
            html = (
                f"<figure{id_attr(block.id)}>{html}"
                f"<figcaption>{escape_html(caption)}</figcaption></figure>"
            )
        return html

    # -- layout --------------------------------------------------------------

    def _super_block(self, block: Block) -> str:
        marker = next(
            (c for c in block.children if isinstance(c, SuperBlockLayoutMarker)), None
        )
        stored = marker.layout if marker is not None else "row"
        # The stored layout is inverted: "row" renders as a column.
        layout = "col" if stored == "row" else "row"

        content = [c for c in block.children if not isinstance(c, SUPERBLOCK_MARKERS)]
        out = [f'<div{id_attr(block.id)} class="superblock superblock-{layout}">\n']
        if layout == "row":
            nested = [c for c in content if isinstance(c, SuperBlock)]
            rest = [c for c in content if not isinstance(c, SuperBlock)]
            out.extend(self.render_block(n) for n in nested)
            if rest:
                out.append(self._column(rest))
        else:
            out.append(self.render(content))
        out.append("</div>\n")
        return "".join(out)

    def _column(self, blocks: Sequence[Block]) -> str:
        return f'<div class="superblock superblock-col">\n{self.render(blocks)}</div>\n'

    # -- transclusion --------------------------------------------------------

    def _embed(self, block: Block) -> str:
        script = next(
            (c for c in block.children if isinstance(c, BlockQueryEmbedScript)), None
        )
        target = embed_target_id(script.script) if script is not None else None
        if target is None:
            return self.render(block.children)

        found = self.index.find_block(target)
        if found is None:
            found = self.index.resolve(target)

        out = [f'<div{id_attr(block.id)} class="transcluded-block">']
        if found is None:
            logger.debug("transcluded content not found: %s", target)
            out.append(f"<p><em>Transcluded content not found: {escape_html(target)}</em></p>")
        elif target in self._embedding:
            logger.debug("circular transclusion of %s", target)
            out.append(f'<a href="{escape_attr(found.url)}" class="source-link">Go to source</a>')
            out.append(f"<p><em>Circular transclusion: {escape_html(target)}</em></p>")
        else:
            out.append(f'<a href="{escape_attr(found.url)}" class="source-link">Go to source</a>')
            self._embedding.add(target)
            try:
                out.append(self.render(found.content))
            finally:
                self._embedding.discard(target)
        out.append("</div>")
        return "".join(out)


def render_blocks(blocks: Iterable[Block], index: NoteIndex) -> str:
    """Plain rendering: headings keep only their own ids."""
    return BlockRenderer(index).render(blocks)


def render_note(note: Note, index: NoteIndex) -> tuple[str, str]:
    """
    TOC-aware rendering of a whole note.

    Returns (content html, toc html); both share one heading-id table.
    """
    ids = HeadingIds()
    toc = extract_toc(note.children, ids)
    content = BlockRenderer(index, heading_ids=ids).render(note.children)
    return content, toc_html(toc)
