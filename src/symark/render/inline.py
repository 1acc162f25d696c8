"""Inline text marks: emphasis, links, code, tags, memos, math, block references."""

import logging

from ..adapters.resolver_index import NoteIndex, Resolution
from ..core.model import Block, MarkKind, Paragraph, TextMark
from ..core.style import style_attrs
from ..core.utils import (
    escape_attr,
    escape_html,
    id_attr,
    paragraph_texts,
    plain_text,
    tag_page_name,
    truncate_markup,
)

logger = logging.getLogger(__name__)

EXCERPT_LIMIT = 300
EXCERPT_PARAGRAPHS = 2

# Marks that are just an element around escaped text.
_SIMPLE_TAGS = {
    MarkKind.CODE: "code",
    MarkKind.UNDERLINE: "u",
    MarkKind.STRIKE: "s",
    MarkKind.SUB: "sub",
    MarkKind.SUP: "sup",
    MarkKind.KBD: "kbd",
    MarkKind.MARK: "mark",
}


def _anchor_open(mark: TextMark, ident: str) -> str:
    return f'<a{ident} href="{escape_attr(mark.href)}" target="_blank" class="link">'


def render_text_mark(mark: TextMark, index: NoteIndex) -> str:
    ident = id_attr(mark.id)
    kind = mark.kind
    text = escape_html(mark.text)

    if kind is MarkKind.LINK:
        return f"{_anchor_open(mark, ident)}{text}</a>"

    if kind in _SIMPLE_TAGS:
        tag = _SIMPLE_TAGS[kind]
        return f"<{tag}{ident}>{text}</{tag}>"

    if kind is MarkKind.STRONG:
        if mark.href:
            return f"{_anchor_open(mark, ident)}<strong{style_attrs(mark.style, True)}>{text}</strong></a>"
        return f"<strong{ident}{style_attrs(mark.style, True)}>{text}</strong>"

    if kind is MarkKind.EM:
        if mark.href:
            return f"{_anchor_open(mark, ident)}<em>{text}</em></a>"
        return f"<em{ident}>{text}</em>"

    if kind in (MarkKind.TEXT, MarkKind.STRONG_TEXT):
        if not mark.style:
            return f"<span{ident}>{text}</span>" if ident else text
        tag = "strong" if kind is MarkKind.STRONG_TEXT else "span"
        return f"<{tag}{ident}{style_attrs(mark.style, True)}>{text}</{tag}>"

    if kind is MarkKind.TAG:
        return (
            f'<a{ident} href="{escape_attr(tag_page_name(mark.text))}" class="tag"># {text}</a>'
        )

    if kind is MarkKind.INLINE_MATH:
        return f'<span{ident} class="math-inline">{text}</span>'

    if kind is MarkKind.INLINE_MEMO:
        return f'<span{ident} title="{escape_attr(mark.memo)}">{text}</span>'

    if kind is MarkKind.BLOCK_REF:
        return render_block_ref(mark, index)

    return f"<span{ident}>{text}</span>" if ident else text


def excerpt_for(res: Resolution) -> str:
    """
    Tooltip body for a reference target: the first two paragraphs as
    plain text, escaped and joined with `<br>`, then cut to 300 characters.
    """
    blocks: list[Block]
    if res.block is None:
        blocks = list(res.note.children)
    elif isinstance(res.block, Paragraph):
        blocks = [res.block]
    else:
        blocks = list(res.block.children)
    paragraphs = [p for p in paragraph_texts(blocks, EXCERPT_PARAGRAPHS) if p]
    if not paragraphs and res.block is not None:
        paragraphs = [plain_text(res.block).strip()]
    excerpt = "<br>".join(escape_html(p) for p in paragraphs)
    return truncate_markup(excerpt, EXCERPT_LIMIT)


def render_block_ref(mark: TextMark, index: NoteIndex) -> str:
    ident = id_attr(mark.id)
    res = index.resolve(mark.ref_id)
    if res is None:
        logger.debug("missing block reference %s", mark.ref_id)
        return (
            f'<span{ident} class="missing-ref" '
            f'title="Missing reference: {escape_attr(mark.ref_id)}">'
            f"{escape_html(mark.text)}</span>"
        )

    label = mark.text or res.note.title or mark.ref_id
    return (
        f'<span{ident} class="tooltip">'
        f'<a href="{escape_attr(res.url)}">{escape_html(label)}</a>'
        f'<span class="right bottom">'
        f'<span class="tooltip-title">{escape_html(res.note.title)}</span>'
        f'<span class="tooltip-excerpt">{excerpt_for(res)}</span>'
        f"<i></i></span></span>"
    )
