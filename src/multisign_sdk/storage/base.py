"""
Document store interface

The store is the single source of truth for document collections. The core
only ever loads and saves whole collections through this interface, and
every read-modify-write cycle runs under the store's write lock so that
services sharing one store never overwrite each other's changes.
"""

import copy
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional, TypeVar

from ..documents.types import Document
from ..exceptions import DocumentNotFoundError

logger = logging.getLogger(__name__)

T = TypeVar('T')

_LOCK_GUARD = threading.Lock()


class DocumentStore(ABC):
    """
    Abstract document collection store

    The write lock only serializes writers within one process.
    """

    @abstractmethod
    def load_all(self) -> List[Document]:
        """
        Load every stored document.

        Raises:
            StorageError: If the backing store cannot be read
        """

    @abstractmethod
    def save_all(self, documents: Iterable[Document]) -> None:
        """
        Replace the stored collection.

        Raises:
            StorageError: If the backing store cannot be written
        """

    @property
    def write_lock(self) -> threading.RLock:
        """Lock held across every read-modify-write cycle on this store."""
        lock = self.__dict__.get('_write_lock')
        if lock is None:
            with _LOCK_GUARD:
                lock = self.__dict__.setdefault('_write_lock', threading.RLock())
        return lock

    def get(self, document_id: str) -> Document:
        """
        Load one document by id.

        Raises:
            DocumentNotFoundError: If no document has the id
        """
        document = self.find(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    def find(self, document_id: str) -> Optional[Document]:
        for document in self.load_all():
            if document.id == document_id:
                return document
        return None

    def insert(self, document: Document, index: int = 0) -> None:
        """Insert a new document, at the front of the collection by default."""
        with self.write_lock:
            documents = self.load_all()
            documents.insert(index, document)
            self.save_all(documents)

    def upsert(self, document: Document) -> None:
        """Insert or replace one document, keeping collection order."""
        with self.write_lock:
            documents = self.load_all()
            for index, existing in enumerate(documents):
                if existing.id == document.id:
                    documents[index] = document
                    break
            else:
                documents.append(document)
            self.save_all(documents)

    def update(self, document_id: str, mutate: Callable[[Document], T]) -> T:
        """
        Atomically modify one stored document.

        The collection is reloaded under the write lock, `mutate` changes the
        freshly loaded document in place and the collection is saved before
        the lock is released. Nothing is saved when `mutate` raises.

        Args:
            document_id: Document to modify
            mutate: Callback receiving the current document

        Returns:
            Whatever `mutate` returned

        Raises:
            DocumentNotFoundError: If no document has the id
        """
        with self.write_lock:
            documents = self.load_all()
            for document in documents:
                if document.id == document_id:
                    break
            else:
                raise DocumentNotFoundError(document_id)

            result = mutate(document)
            self.save_all(documents)
            return result


class InMemoryDocumentStore(DocumentStore):
    """
    Store keeping deep copies of documents in process memory
    """

    def __init__(self, documents: Optional[Iterable[Document]] = None):
        self._lock = threading.Lock()
        self._documents: List[Document] = [copy.deepcopy(d) for d in documents or []]

    def load_all(self) -> List[Document]:
        with self._lock:
            return copy.deepcopy(self._documents)

    def save_all(self, documents: Iterable[Document]) -> None:
        with self._lock:
            self._documents = copy.deepcopy(list(documents))
        logger.debug(f"Saved {len(self._documents)} documents in memory")
