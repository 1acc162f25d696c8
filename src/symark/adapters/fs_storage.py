import logging
import shutil
from pathlib import Path
from typing import Iterable

from ..core.ports import StorageStrategy

logger = logging.getLogger(__name__)


class FsStorage(StorageStrategy):
    def __init__(self, root: Path, suffix: str = ".sy"):
        self.root = root
        self.suffix = suffix

    def list_documents(self) -> Iterable[Path]:
        if not self.root.exists():
            raise FileNotFoundError(f"Input directory not found: {self.root}")
        return sorted(p for p in self.root.rglob(f"*{self.suffix}") if p.is_file())

    def read_raw(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def asset_dirs(self) -> Iterable[Path]:
        if not self.root.exists():
            return []
        found = [self.root] if self.root.name == "assets" else []
        found.extend(p for p in self.root.rglob("assets") if p.is_dir())
        return sorted(found)


def copy_assets(storage: StorageStrategy, dest: Path) -> int:
    """Merge every `assets` directory of the source tree into *dest*."""
    dest.mkdir(parents=True, exist_ok=True)
    copied = 0
    for src in storage.asset_dirs():
        shutil.copytree(src, dest, dirs_exist_ok=True)
        logger.debug("copied assets from %s to %s", src, dest)
        copied += 1
    return copied
