"""Tests for table of contents extraction."""

from symark.core.model import Blockquote, Heading, Paragraph, Text, TextMark, TocItem
from symark.render.toc import HeadingIds, extract_toc, toc_html


def heading(text, level=2, **kw):
    return Heading(level=level, children=[Text(data=text)], **kw)


def test_extract_toc_depth_first():
    """Test that nested headings are found in document order."""
    blocks = [
        heading("One"),
        Blockquote(children=[heading("Nested", level=3)]),
        heading("Two", id="h2"),
    ]
    items = extract_toc(blocks)
    assert [(i.id, i.text, i.level) for i in items] == [
        ("heading-0", "One", 2),
        ("heading-1", "Nested", 3),
        ("h2", "Two", 2),
    ]


def test_extract_toc_uses_direct_children_only():
    """Test that heading text comes from direct text and mark children."""
    h = Heading(
        level=2,
        children=[
            Text(data="Intro to "),
            TextMark(mark_type="strong", text="Python"),
            Paragraph(children=[Text(data="ignored")]),
        ],
    )
    assert extract_toc([h])[0].text == "Intro to Python"


def test_heading_levels_are_clamped():
    """Test that out-of-range levels are clamped to 1..6."""
    items = extract_toc([heading("a", level=0), heading("b", level=9)])
    assert [i.level for i in items] == [1, 6]


def test_heading_ids_are_stable():
    """Test that a heading keeps the id it was first given."""
    ids = HeadingIds()
    h = heading("x")
    assert ids.for_heading(h) == "heading-0"
    assert ids.for_heading(h) == "heading-0"
    assert ids.for_heading(heading("y")) == "heading-1"


def test_toc_html_levels_two_and_three():
    """Test that only levels 2 and 3 are listed, with level 3 indented."""
    items = [
        TocItem("a", "Title", 1),
        TocItem("b", "Section", 2),
        TocItem("c", "Sub & more", 3),
        TocItem("d", "Deep", 4),
    ]
    assert toc_html(items) == (
        '<li class="toc-item"><a class="toc-link" href="#b">Section</a></li>\n'
        '<li class="toc-item toc-subitem"><a class="toc-link" href="#c">Sub &amp; more</a></li>\n'
    )


def test_toc_html_placeholder():
    """Test the placeholder when no heading qualifies."""
    assert toc_html([TocItem("a", "Title", 1)]) == (
        '<li class="toc-item"><em>No headings found</em></li>\n'
    )
