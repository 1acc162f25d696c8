"""Utility functions for symark."""

import base64
import binascii
import html
import re
from collections.abc import Iterable

from .model import Block, Paragraph, Text, TextMark

ZERO_WIDTH = "\u200b\u200c\u2060\u200e\u200f"
_ZERO_WIDTH_TABLE = str.maketrans("", "", ZERO_WIDTH)

_LANG_RE = re.compile(r"^[\w+#.\-]+$")


def escape_html(text: str) -> str:
    """Escape `& < > " '` for element content."""
    return html.escape(text, quote=True)


def escape_attr(value: str) -> str:
    return html.escape(value, quote=True)


def id_attr(block_id: str) -> str:
    return f' id="{escape_attr(block_id)}"' if block_id else ""


def remove_zero_width_spaces(text: str) -> str:
    """
    Drop zero-width space, non-joiner, word joiner and LTR/RTL marks.

    The zero-width joiner (U+200D) is left alone so emoji sequences
    survive.
    """
    return text.translate(_ZERO_WIDTH_TABLE)


def truncate(text: str, limit: int, ellipsis: str = "...") -> str:
    """
    Cut *text* to at most *limit* characters, appending *ellipsis* when cut.

    Works on code points, so a multi-byte character is never split.
    """
    if len(text) <= limit:
        return text
    return text[:limit] + ellipsis


def truncate_markup(fragment: str, limit: int, ellipsis: str = "...") -> str:
    """
    Like `truncate`, for escaped text: the cut backs off so it never ends
    inside an `&…;` entity or a tag.
    """
    if len(fragment) <= limit:
        return fragment
    cut = fragment[:limit]
    amp = cut.rfind("&")
    if amp > cut.rfind(";"):
        cut = cut[:amp]
    lt = cut.rfind("<")
    if lt > cut.rfind(">"):
        cut = cut[:lt]
    return cut + ellipsis


def truncate_at_break(text: str, limit: int = 200, floor: int = 150) -> str:
    """
    Cut *text* near *limit*, preferring a space or punctuation between
    *floor* and *limit*; falls back to a hard cut at *floor*.
    """
    if len(text) <= limit:
        return text
    pos = limit
    while pos > floor:
        if text[pos] in " .,;":
            break
        pos -= 1
    return text[:pos] + "..."


def inline_text(blocks: Iterable[Block]) -> str:
    """Text of plain-text and text-mark blocks in *blocks*, not descending."""
    parts = []
    for b in blocks:
        if isinstance(b, Text):
            parts.append(b.data)
        elif isinstance(b, TextMark):
            parts.append(b.text)
    return "".join(parts)


def plain_text(block: Block) -> str:
    """All visible text below *block*, depth-first."""
    if isinstance(block, Text):
        return block.data
    if isinstance(block, TextMark):
        return block.text
    return "".join(plain_text(c) for c in block.children)


def paragraph_texts(blocks: Iterable[Block], limit: int | None = None) -> list[str]:
    """Plain text of the top-level paragraphs in *blocks*, in order."""
    out = []
    for b in blocks:
        if isinstance(b, Paragraph):
            out.append(plain_text(b).strip())
            if limit is not None and len(out) >= limit:
                break
    return out


def tag_page_name(tag: str) -> str:
    """
    File name of a tag page.

    Examples:
        >>> tag_page_name("machine learning")
        'tag_machine_learning.html'
    """
    return f"tag_{tag.strip().replace(' ', '_')}.html"


def decode_code_language(info: str) -> str:
    """
    Language of a code block.

    The stored tag is usually base64; anything that does not decode to a
    plain language name is used as it is.
    """
    info = info.strip()
    if not info:
        return ""
    try:
        decoded = base64.b64decode(info, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return info
    return decoded if _LANG_RE.match(decoded) else info
