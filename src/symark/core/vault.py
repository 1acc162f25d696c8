import logging
from collections.abc import Iterable

from ..adapters.resolver_index import NoteIndex
from ..adapters.sy_parser import DocumentParseError
from .model import Note, NoteId
from .ports import ParserStrategy, StorageStrategy

logger = logging.getLogger(__name__)

INDEX_TAG = "index"


class Vault:
    def __init__(self, storage: StorageStrategy, parser: ParserStrategy):
        self.storage = storage
        self.parser = parser
        self.failed: list[str] = []

    def load_notes(self) -> Iterable[Note]:
        """Parse every document; unreadable ones are logged and skipped."""
        self.failed = []
        for path in self.storage.list_documents():
            try:
                note = self.parser.parse(self.storage.read_raw(path))
            except (DocumentParseError, UnicodeDecodeError, OSError) as e:
                logger.error("Error parsing file %s: %s", path, e)
                self.failed.append(str(path))
                continue
            yield note

    def load(self) -> NoteIndex:
        return NoteIndex(self.load_notes())


def find_index_note(index: NoteIndex) -> NoteId | None:
    """Id of the note tagged `index`; the last one by id wins."""
    found = [nid for nid in sorted(index) if index[nid].has_tag(INDEX_TAG)]
    if len(found) > 1:
        logger.warning(
            "Multiple notes with 'index' tag found (%s). Using %s.",
            ", ".join(found),
            found[-1],
        )
    return found[-1] if found else None
