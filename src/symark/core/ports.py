from pathlib import Path
from typing import Iterable, Protocol

from .model import Note


class StorageStrategy(Protocol):
    """
    Source tree: any directory layout, documents named <id>.sy
    """

    def list_documents(self) -> Iterable[Path]:
        pass

    def read_raw(self, path: Path) -> str:
        pass

    def asset_dirs(self) -> Iterable[Path]:
        pass


class ParserStrategy(Protocol):
    """
    Parse one serialized document into a Note. Unknown node kinds MUST
    survive as opaque blocks rather than fail.
    """

    def parse(self, text: str) -> Note:
        pass


class ExportAdapter(Protocol):
    def export_all(self, out_dir: str | None = None) -> int:
        pass
