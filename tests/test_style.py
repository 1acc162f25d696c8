"""Tests for the style classifier."""

from symark.core.style import classify_style, style_attrs

INFO = "background-color: var(--b3-card-info-background); color: var(--b3-card-info-color);"
ERROR = "background-color: var(--b3-card-error-background); color: var(--b3-card-error-color);"


def test_themed_boxes():
    """Test that themed background/color pairs map onto box classes."""
    assert classify_style(INFO).name == "info-box"
    assert classify_style(ERROR).name == "error-box"
    assert classify_style(INFO).keep_style is False


def test_inline_prefix():
    """Test that inline classification prefixes the class."""
    assert classify_style(INFO, inline=True).name == "inline-info-box"


def test_half_a_theme_is_a_custom_box():
    """Test that a themed background without its colour is a custom box."""
    cls = classify_style("background-color: var(--b3-card-info-background);")
    assert cls.name == "custom-box"
    assert cls.keep_style is True


def test_no_background_no_class():
    """Test that styles without a background get no class."""
    assert classify_style("color: red;").name is None
    assert classify_style("").name is None


def test_style_attrs():
    """Test the rendered class and style attributes."""
    assert style_attrs("") == ""
    assert style_attrs(INFO) == ' class="info-box"'
    assert style_attrs("color: red") == ' style="color: red"'
    assert style_attrs('background: url("a.png")') == (
        ' class="custom-box" style="background: url(&quot;a.png&quot;)"'
    )
