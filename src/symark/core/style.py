"""Map raw block style strings onto the themed CSS classes."""

import re
from dataclasses import dataclass

from .utils import escape_attr

# (class name, background variable, color variable)
_THEMED_BOXES = (
    ("info-box", "var(--b3-card-info-background)", "var(--b3-card-info-color)"),
    ("success-box", "var(--b3-card-success-background)", "var(--b3-card-success-color)"),
    ("warning-box", "var(--b3-card-warning-background)", "var(--b3-card-warning-color)"),
    ("error-box", "var(--b3-card-error-background)", "var(--b3-card-error-color)"),
)

CUSTOM_BOX = "custom-box"

_BACKGROUND_RE = re.compile(r"(^|[;\s])background(-color)?\s*:", re.IGNORECASE)


@dataclass(frozen=True)
class StyleClass:
    name: str | None = None
    keep_style: bool = False


def classify_style(style: str, inline: bool = False) -> StyleClass:
    """
    Classify a style string.

    A themed info/success/warning/error pair wins outright and the raw
    style is dropped. Any other background declaration gets the generic
    custom box class and keeps the raw style so its colour still applies.
    Everything else has no class.
    """
    prefix = "inline-" if inline else ""
    for name, background, color in _THEMED_BOXES:
        if background in style and color in style:
            return StyleClass(prefix + name, keep_style=False)
    if _BACKGROUND_RE.search(style):
        return StyleClass(prefix + CUSTOM_BOX, keep_style=True)
    return StyleClass()


def style_attrs(style: str, inline: bool = False) -> str:
    """
    Render ` class="…"` and/or ` style="…"` for a block's style property.

    Raw styles without any class are kept as they are.
    """
    if not style:
        return ""
    cls = classify_style(style, inline)
    out = ""
    if cls.name:
        out += f' class="{cls.name}"'
    if cls.name is None or cls.keep_style:
        out += f' style="{escape_attr(style)}"'
    return out
