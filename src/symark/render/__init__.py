"""Block-tree rendering engine."""

from .blocks import BlockRenderer, render_blocks, render_note
from .inline import render_block_ref, render_text_mark
from .toc import HeadingIds, extract_toc, toc_html

__all__ = [
    "BlockRenderer",
    "HeadingIds",
    "extract_toc",
    "render_block_ref",
    "render_blocks",
    "render_note",
    "render_text_mark",
    "toc_html",
]
