"""Configuration loader for symark.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

CONFIG_NAME = "symark.toml"


@dataclass
class SiteConfig:
    """Site identity used on every page."""
    name: str = "SyMark"
    base_url: str = "https://example.org/notes"
    author: str = "Notes Author"
    description: str = "A collection of notes"


@dataclass
class PathsConfig:
    """Input, output and template locations."""
    input: Path = Path("input")
    output: Path = Path("output")
    template: Path | None = None


@dataclass
class GraphConfig:
    """Link graph page configuration."""
    enabled: bool = True


@dataclass
class SymarkConfig:
    """Complete symark configuration."""
    site: SiteConfig = field(default_factory=SiteConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    graph: GraphConfig = field(default_factory=GraphConfig)
    source: Path | None = None


def load_config(config_path: Path | None = None, input_path: Path | None = None) -> SymarkConfig:
    """
    Load configuration from symark.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/symark.toml
    3. input_path/symark.toml

    Args:
        config_path: Explicit path to config file
        input_path: Input directory for fallback search

    Returns:
        SymarkConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}
    source = None

    if config_path and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    # Search for config file
    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_NAME)
    if input_path:
        search_paths.append(input_path / CONFIG_NAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            source = path
            break

    # Parse site config
    site_data = toml_data.get("site", {})
    defaults = SiteConfig()
    site_config = SiteConfig(
        name=site_data.get("name", defaults.name),
        base_url=site_data.get("base_url", defaults.base_url),
        author=site_data.get("author", defaults.author),
        description=site_data.get("description", defaults.description),
    )

    # Parse paths config
    paths_data = toml_data.get("paths", {})
    template = paths_data.get("template", "")
    paths_config = PathsConfig(
        input=Path(paths_data.get("input", input_path or "input")),
        output=Path(paths_data.get("output", "output")),
        template=Path(template) if template else None,
    )

    # Parse graph config
    graph_data = toml_data.get("graph", {})
    graph_config = GraphConfig(enabled=graph_data.get("enabled", True))

    return SymarkConfig(
        site=site_config,
        paths=paths_config,
        graph=graph_config,
        source=source,
    )
