from __future__ import annotations

import copy
import logging
import uuid
from abc import ABC, abstractmethod
from functools import lru_cache
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional

from .settings import get_settings

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


class StoreError(Exception):
    """Raised when the document store cannot complete an operation."""


# PUBLIC_INTERFACE
class DocumentStore(ABC):
    """
    Generic document store contract.

    Documents are plain dicts grouped in named collections. The store assigns
    a string ``id`` on insert and returns it as part of every fetched document.
    """

    @abstractmethod
    def insert_one(self, collection: str, document: Mapping[str, Any]) -> str:
        """Insert a document and return its new identifier."""

    @abstractmethod
    def find(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Document]:
        """
        Return every document whose fields equal all ``filters``.
        - No filters returns the whole collection
        - ``order_by`` sorts on a document field; insertion order otherwise
        """

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Return a document by id, or None if not found."""

    @abstractmethod
    def update_field(self, collection: str, doc_id: str, field: str, value: Any) -> bool:
        """Set one field of a document. Return False if the document does not exist."""


def new_document_id() -> str:
    return uuid.uuid4().hex


def matches_filters(document: Mapping[str, Any], filters: Optional[Mapping[str, Any]]) -> bool:
    if not filters:
        return True
    return all(document.get(key) == value for key, value in filters.items())


class InMemoryDocumentStore(DocumentStore):
    """
    Thread-safe in-memory store suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._collections: Dict[str, Dict[str, Document]] = {}

    def insert_one(self, collection: str, document: Mapping[str, Any]) -> str:
        doc_id = new_document_id()
        stored = copy.deepcopy(dict(document))
        stored["id"] = doc_id
        with self._lock:
            self._collections.setdefault(collection, {})[doc_id] = stored
        logger.debug("Inserted %s/%s", collection, doc_id)
        return doc_id

    def find(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Document]:
        with self._lock:
            docs = [d for d in self._collections.get(collection, {}).values() if matches_filters(d, filters)]
            if order_by:
                docs = sorted(docs, key=lambda d: d[order_by], reverse=descending)
            # Return copies to avoid external mutation
            return [copy.deepcopy(d) for d in docs]

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            item = self._collections.get(collection, {}).get(doc_id)
            return None if item is None else copy.deepcopy(item)

    def update_field(self, collection: str, doc_id: str, field: str, value: Any) -> bool:
        with self._lock:
            existing = self._collections.get(collection, {}).get(doc_id)
            if existing is None:
                return False
            existing[field] = copy.deepcopy(value)
        logger.debug("Updated %s/%s field %s", collection, doc_id, field)
        return True


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_store() -> DocumentStore:
    """
    Return the process-wide document store configured in settings.
    - memory: InMemoryDocumentStore
    - sqlite: SQLiteDocumentStore at SQLITE_DB_PATH
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteDocumentStore

        logger.info("Using sqlite document store at %s", settings.sqlite_db_path)
        return SQLiteDocumentStore(settings.sqlite_db_path)
    logger.info("Using in-memory document store")
    return InMemoryDocumentStore()
