from __future__ import annotations

import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Generator, List, Mapping, Optional

from .store import Document, DocumentStore, StoreError, matches_filters, new_document_id

logger = logging.getLogger(__name__)

_DATETIME_TAG = "$datetime"


@dataclass(frozen=True)
class _Cols:
    table: str = "documents"
    seq: str = "seq"
    collection: str = "collection"
    id: str = "id"
    body: str = "body"


_COLS = _Cols()


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_DATETIME_TAG: value.isoformat()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode(obj: dict) -> Any:
    if len(obj) == 1 and _DATETIME_TAG in obj:
        return datetime.fromisoformat(obj[_DATETIME_TAG])
    return obj


class SQLiteDocumentStore(DocumentStore):
    """
    Lightweight SQLite store keeping each document as a JSON row.

    Filtering and ordering happen after loading a collection, which keeps the
    schema independent of document shape.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open {self._db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            logger.error("SQLite operation failed: %s", exc)
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.seq} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.collection} TEXT NOT NULL,
                    {_COLS.id} TEXT NOT NULL UNIQUE,
                    {_COLS.body} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_collection ON {_COLS.table}({_COLS.collection})"
            )

    def _row_to_document(self, row: sqlite3.Row) -> Document:
        document = json.loads(row[_COLS.body], object_hook=_decode)
        document["id"] = str(row[_COLS.id])
        return document

    def insert_one(self, collection: str, document: Mapping[str, Any]) -> str:
        doc_id = new_document_id()
        body = {k: v for k, v in document.items() if k != "id"}
        with self._conn() as conn:
            conn.execute(
                f"INSERT INTO {_COLS.table} ({_COLS.collection}, {_COLS.id}, {_COLS.body}) VALUES (?, ?, ?)",
                (collection, doc_id, json.dumps(body, default=_encode)),
            )
        return doc_id

    def find(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Document]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {_COLS.table} WHERE {_COLS.collection} = ? ORDER BY {_COLS.seq}",
                (collection,),
            ).fetchall()
        docs = [d for d in (self._row_to_document(r) for r in rows) if matches_filters(d, filters)]
        if order_by:
            docs.sort(key=lambda d: d[order_by], reverse=descending)
        return docs

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT * FROM {_COLS.table} WHERE {_COLS.collection} = ? AND {_COLS.id} = ?",
                (collection, doc_id),
            ).fetchone()
            return self._row_to_document(row) if row else None

    def update_field(self, collection: str, doc_id: str, field: str, value: Any) -> bool:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT * FROM {_COLS.table} WHERE {_COLS.collection} = ? AND {_COLS.id} = ?",
                (collection, doc_id),
            ).fetchone()
            if not row:
                return False
            body = json.loads(row[_COLS.body], object_hook=_decode)
            body[field] = value
            conn.execute(
                f"UPDATE {_COLS.table} SET {_COLS.body} = ? WHERE {_COLS.id} = ?",
                (json.dumps(body, default=_encode), doc_id),
            )
            return True
