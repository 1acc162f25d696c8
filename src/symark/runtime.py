"""Runtime wiring helper for CLI applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.fs_storage import FsStorage
from .adapters.resolver_index import NoteIndex
from .adapters.sy_parser import SyParser
from .config import SymarkConfig, load_config
from .core.vault import Vault


@dataclass
class Runtime:
    """Container for all wired components."""
    storage: FsStorage
    vault: Vault
    index: NoteIndex
    config: SymarkConfig


def build_runtime(
    input_path: Path | None = None,
    output_path: Path | None = None,
    template_path: Path | None = None,
    config_path: Path | None = None,
) -> Runtime:
    """Load configuration and every note below the input directory."""
    # Load configuration
    config = load_config(config_path=config_path, input_path=input_path)

    # CLI args win over config values
    if input_path is not None:
        config.paths.input = input_path
    if output_path is not None:
        config.paths.output = output_path
    if template_path is not None:
        config.paths.template = template_path

    storage = FsStorage(config.paths.input)
    vault = Vault(storage, SyParser())
    index = vault.load()

    return Runtime(
        storage=storage,
        vault=vault,
        index=index,
        config=config,
    )
