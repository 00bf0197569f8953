"""
JSON file document store
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Union

from ..documents.types import Document
from ..exceptions import ErrorCodes, StorageError
from .base import DocumentStore
from .serialization import dumps_documents, loads_documents

logger = logging.getLogger(__name__)


class JsonFileDocumentStore(DocumentStore):
    """
    Document store backed by a single JSON file

    Writes go to a temporary file in the same directory which then replaces
    the store file, so readers never observe a half-written collection.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def load_all(self) -> List[Document]:
        if not self.path.exists():
            return []

        try:
            text = self.path.read_text(encoding='utf-8')
        except OSError as e:
            raise StorageError(
                f"Failed to read document store {self.path}: {e}",
                ErrorCodes.STORAGE_FAILED,
                {'path': str(self.path)}
            )

        return loads_documents(text)

    def save_all(self, documents: Iterable[Document]) -> None:
        documents = list(documents)
        payload = dumps_documents(documents)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(
                f"Failed to write document store {self.path}: {e}",
                ErrorCodes.STORAGE_FAILED,
                {'path': str(self.path)}
            )

        logger.debug(f"Saved {len(documents)} documents to {self.path}")
