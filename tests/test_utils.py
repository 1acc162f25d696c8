"""Tests for text utilities."""

from symark.core.model import Heading, Paragraph, Text, TextMark
from symark.core.utils import (
    decode_code_language,
    escape_html,
    id_attr,
    inline_text,
    plain_text,
    remove_zero_width_spaces,
    tag_page_name,
    truncate,
    truncate_at_break,
    truncate_markup,
)


def test_escape_html():
    """Test escaping of the five special characters."""
    assert escape_html("<a href=\"x\">'&'</a>") == (
        "&lt;a href=&quot;x&quot;&gt;&#x27;&amp;&#x27;&lt;/a&gt;"
    )
    assert escape_html("plain text") == "plain text"


def test_id_attr():
    """Test id attribute rendering."""
    assert id_attr("") == ""
    assert id_attr("abc") == ' id="abc"'


def test_remove_zero_width_spaces():
    """Test that zero-width characters are removed but the joiner stays."""
    text = "a\u200bb\u200cc\u2060d\u200ee\u200ff\u200dg"
    assert remove_zero_width_spaces(text) == "abcdef\u200dg"


def test_truncate():
    """Test truncation on code points."""
    assert truncate("short", 10) == "short"
    assert truncate("日本語のテキスト", 3) == "日本語..."


def test_truncate_markup_backs_off_entities_and_tags():
    """Test that a cut never ends inside an entity or a tag."""
    assert truncate_markup("&lt;" * 10, 6) == "&lt;..."
    assert truncate_markup("ab<br>cd", 4) == "ab..."
    assert truncate_markup("abc;def", 5) == "abc;d..."
    assert truncate_markup("a &amp; b", 20) == "a &amp; b"


def test_truncate_at_break():
    """Test that cuts prefer a space between the floor and the limit."""
    text = "word " * 60
    cut = truncate_at_break(text)
    assert cut == text[:199] + "..."
    assert truncate_at_break("x" * 300) == "x" * 150 + "..."
    assert truncate_at_break("tiny") == "tiny"


def test_plain_and_inline_text():
    """Test recursive and direct text extraction."""
    p = Paragraph(
        children=[
            Text(data="a"),
            TextMark(mark_type="em", text="b"),
            Heading(children=[Text(data="c")]),
        ]
    )
    assert plain_text(p) == "abc"
    assert inline_text(p.children) == "ab"


def test_tag_page_name():
    """Test tag page file names."""
    assert tag_page_name("machine learning") == "tag_machine_learning.html"
    assert tag_page_name("python") == "tag_python.html"


def test_decode_code_language():
    """Test base64 language tags and raw fallbacks."""
    assert decode_code_language("cHl0aG9u") == "python"
    assert decode_code_language("rust") == "rust"
    assert decode_code_language("") == ""
    assert decode_code_language("not base64!") == "not base64!"
