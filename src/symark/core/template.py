"""Placeholder substitution for page templates."""

import logging
import re
from collections.abc import Mapping
from pathlib import Path

from .utils import remove_zero_width_spaces

logger = logging.getLogger(__name__)

BUNDLED_TEMPLATES = Path(__file__).parent.parent / "templates"

_PLACEHOLDER_RE = re.compile(r"\{\{.*?\}\}", re.DOTALL)


def read_template(name: str, template_dir: Path | None = None) -> str:
    """
    Read *name* from *template_dir*, falling back to the bundled copy
    when the directory does not provide it.
    """
    if template_dir is not None:
        path = template_dir / name
        if path.is_file():
            return remove_zero_width_spaces(path.read_text(encoding="utf-8"))
        logger.debug("%s not in %s, using bundled template", name, template_dir)
    return (BUNDLED_TEMPLATES / name).read_text(encoding="utf-8")


def protect(fragment: str) -> str:
    """Keep `{{` in generated content from reading as a placeholder."""
    return fragment.replace("{{", "&#123;{")


def fill(template: str, values: Mapping[str, str]) -> str:
    """Replace each `{{name}}` with its value."""
    out = template
    for key, value in values.items():
        out = out.replace("{{" + key + "}}", value)
    return out


def toggle_section(template: str, name: str, enabled: bool) -> str:
    """
    Keep or drop a `{{#name}}…{{/name}}` section.

    Kept sections lose only their markers.
    """
    open_tag, close_tag = "{{#" + name + "}}", "{{/" + name + "}}"
    if enabled:
        return template.replace(open_tag, "").replace(close_tag, "")
    pattern = re.compile(re.escape(open_tag) + ".*?" + re.escape(close_tag), re.DOTALL)
    return pattern.sub("", template)


def cleanup_template_variables(html: str) -> str:
    """
    Strip leftover placeholders and OpenGraph/article meta lines with no content.
    """
    result = _PLACEHOLDER_RE.sub("", html)
    lines = []
    for line in result.splitlines():
        trimmed = line.strip()
        is_meta = trimmed.startswith('<meta property="og:') or trimmed.startswith(
            '<meta property="article:'
        )
        if is_meta and 'content=""' in trimmed:
            continue
        lines.append(line)
    return "\n".join(lines) + "\n"


def finalize(html: str) -> str:
    return remove_zero_width_spaces(cleanup_template_variables(html))
