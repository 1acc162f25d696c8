"""Table of contents: heading outline and its HTML list."""

from collections.abc import Iterable, Sequence

from ..core.model import Block, Heading, TocItem
from ..core.utils import escape_attr, escape_html, inline_text

TOC_LEVELS = (2, 3)


class HeadingIds:
    """
    Synthetic heading ids for one render pass.

    Only headings without their own id consume a number, so the TOC and
    the rendered anchors agree as long as both read from the same table.
    """

    def __init__(self, prefix: str = "heading-"):
        self.prefix = prefix
        self.counter = 0
        self._assigned: dict[Block, str] = {}
        self._claimed: set[Block] = set()

    def _next(self) -> str:
        hid = f"{self.prefix}{self.counter}"
        self.counter += 1
        return hid

    def for_heading(self, block: Heading) -> str:
        if block.id:
            return block.id
        hid = self._assigned.get(block)
        if hid is None:
            hid = self._assigned[block] = self._next()
        return hid

    def claim(self, block: Heading) -> str:
        """
        Id for one rendered occurrence of *block*.

        The first occurrence gets the id the TOC saw; a heading rendered
        again (transcluded twice) draws a fresh number each time.
        """
        if block.id:
            return block.id
        hid = self._assigned.get(block)
        if hid is None or block in self._claimed:
            hid = self._next()
        self._claimed.add(block)
        return hid


def clamp_level(level: int) -> int:
    return max(1, min(6, level))


def extract_toc(blocks: Iterable[Block], ids: HeadingIds | None = None) -> list[TocItem]:
    """Every heading at any depth, in document order."""
    ids = ids if ids is not None else HeadingIds()
    items: list[TocItem] = []
    _collect(blocks, items, ids)
    return items


def _collect(blocks: Iterable[Block], items: list[TocItem], ids: HeadingIds) -> None:
    for block in blocks:
        if isinstance(block, Heading):
            items.append(
                TocItem(
                    id=ids.for_heading(block),
                    text=inline_text(block.children),
                    level=clamp_level(block.level),
                )
            )
        _collect(block.children, items, ids)


def toc_html(items: Sequence[TocItem]) -> str:
    out = []
    for item in items:
        if item.level not in TOC_LEVELS:
            continue
        cls = " toc-subitem" if item.level == 3 else ""
        out.append(
            f'<li class="toc-item{cls}"><a class="toc-link" href="#{escape_attr(item.id)}">'
            f"{escape_html(item.text)}</a></li>\n"
        )
    if not out:
        return '<li class="toc-item"><em>No headings found</em></li>\n'
    return "".join(out)
