# Overview: SQL-backed document store (Flask-SQLAlchemy) for local runs and tests.

"""
SQL Document Store

Each document is one row of the `documents` table keyed by its full path.
The body is JSON; datetimes round-trip as tagged objects so callers get
datetime values back, the same as from Firestore.

Optimistic concurrency: Document.version is SQLAlchemy's version_id_col.
A commit that races another commit on the same row raises StaleDataError,
and run_with_retry re-runs the transaction function from its first read.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Callable

from sqlalchemy import text

from ..extensions import db
from ..models import Document
from ..time_utils import utcnow
from .base import (
    DocumentStore,
    DocumentStoreError,
    MAX_BATCH_WRITES,
    Snapshot,
    T,
    Transaction,
    WriteBatch,
    apply_updates,
    check_query_op,
    matches,
    parent_collection,
    validate_collection_path,
    validate_document_path,
)
from .concurrency import run_with_retry

_DATETIME_TAG = "__datetime__"


def _default(value: Any):
    if isinstance(value, datetime):
        return {_DATETIME_TAG: value.isoformat()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _object_hook(obj: dict):
    if len(obj) == 1 and _DATETIME_TAG in obj:
        return datetime.fromisoformat(obj[_DATETIME_TAG])
    return obj


def encode_body(data: dict[str, Any]) -> str:
    return json.dumps(data, default=_default, ensure_ascii=False, sort_keys=True)


def decode_body(body: str | None) -> dict[str, Any]:
    if not body:
        return {}
    return json.loads(body, object_hook=_object_hook)


def _snapshot(path: str, row: Document | None) -> Snapshot:
    if row is None:
        return Snapshot(path=path, exists=False)
    return Snapshot(path=path, exists=True, data=decode_body(row.body))


def _write_row(path: str, kind: str, payload: dict[str, Any], row: Document | None = None) -> None:
    """
    Stage one write on the session.

    `row` is the object a transaction read; writing through it keeps the
    UPDATE guarded by the version seen at read time.
    """
    if row is None:
        row = db.session.get(Document, path)
    now = utcnow()
    if kind == "update":
        if row is None:
            raise DocumentStoreError(f"No document to update: {path}")
        row.body = encode_body(apply_updates(decode_body(row.body), payload))
        row.updated_at = now
    elif kind == "set":
        if row is None:
            parts = path.split("/")
            row = Document(
                path=path,
                collection_path=parent_collection(path),
                doc_id=parts[-1],
                created_at=now,
            )
            db.session.add(row)
        row.body = encode_body(payload)
        row.updated_at = now
    else:
        raise DocumentStoreError(f"Unknown write kind: {kind}")


class _SqlTransaction(Transaction):
    def __init__(self):
        self._writes: list[tuple[str, str, dict]] = []
        # Rows as read; commit writes through them so each UPDATE carries the read version.
        self._rows: dict[str, Document] = {}

    def get(self, path: str) -> Snapshot:
        if self._writes:
            raise DocumentStoreError("Transaction reads must happen before writes")
        path = validate_document_path(path)
        if path in self._rows:
            return _snapshot(path, self._rows[path])
        row = db.session.get(Document, path, populate_existing=True)
        if row is not None:
            self._rows[path] = row
        return _snapshot(path, row)

    def update(self, path: str, updates: dict[str, Any]) -> None:
        self._writes.append((validate_document_path(path), "update", updates))

    def set(self, path: str, data: dict[str, Any]) -> None:
        self._writes.append((validate_document_path(path), "set", data))

    def commit(self) -> None:
        for path, kind, payload in self._writes:
            _write_row(path, kind, payload, self._rows.get(path))
        db.session.commit()


class _SqlWriteBatch(WriteBatch):
    def __init__(self):
        self._writes: list[tuple[str, str, dict]] = []
        self._committed = False

    def update(self, path: str, updates: dict[str, Any]) -> None:
        if self._committed:
            raise DocumentStoreError("Batch already committed")
        if len(self._writes) >= MAX_BATCH_WRITES:
            raise DocumentStoreError(f"Batch cannot exceed {MAX_BATCH_WRITES} writes")
        self._writes.append((validate_document_path(path), "update", updates))

    def commit(self) -> int:
        if self._committed:
            raise DocumentStoreError("Batch already committed")
        try:
            for path, kind, payload in self._writes:
                _write_row(path, kind, payload)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        self._committed = True
        return len(self._writes)


class SqlDocumentStore(DocumentStore):
    backend_name = "sql"

    def __init__(self, *, attempts: int = 3, backoff_base: float = 0.05):
        self.attempts = attempts
        self.backoff_base = backoff_base

    def get(self, path: str) -> Snapshot:
        path = validate_document_path(path)
        return _snapshot(path, db.session.get(Document, path, populate_existing=True))

    def set(self, path: str, data: dict[str, Any]) -> None:
        path = validate_document_path(path)
        try:
            _write_row(path, "set", data)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    def list_documents(self, collection_path: str) -> list[Snapshot]:
        collection_path = validate_collection_path(collection_path)
        rows = (
            db.session.query(Document)
            .filter_by(collection_path=collection_path)
            .order_by(Document.path)
            .populate_existing()
            .all()
        )
        return [_snapshot(row.path, row) for row in rows]

    def query(self, collection_path: str, field_path: str, op: str, value: Any) -> list[Snapshot]:
        check_query_op(op)
        return [
            snap for snap in self.list_documents(collection_path)
            if matches(snap.data, field_path, op, value)
        ]

    def run_transaction(self, func: Callable[[Transaction], T]) -> T:
        def _op():
            txn = _SqlTransaction()
            try:
                result = func(txn)
                txn.commit()
            except Exception:
                db.session.rollback()
                raise
            return result

        return run_with_retry(_op, attempts=self.attempts, backoff_base=self.backoff_base)

    def batch(self) -> WriteBatch:
        return _SqlWriteBatch()

    def ping(self) -> None:
        db.session.execute(text("SELECT 1"))
