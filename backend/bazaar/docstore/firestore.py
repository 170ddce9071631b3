# Overview: Cloud Firestore document store built on the Firebase Admin SDK.

"""
Firestore Document Store

Thin adapter from the DocumentStore interface to firebase_admin's Firestore
client. Transactions use firestore.transactional, which re-runs the callback
on contention; dotted update keys are passed straight through because
Firestore interprets them as field paths natively.

Local development against the emulator only needs FIRESTORE_EMULATOR_HOST
(and FIREBASE_AUTH_EMULATOR_HOST for ID tokens) in the environment.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from .base import (
    DocumentStore,
    DocumentStoreError,
    MAX_BATCH_WRITES,
    Snapshot,
    T,
    Transaction,
    WriteBatch,
    check_query_op,
    validate_collection_path,
    validate_document_path,
)

logger = logging.getLogger(__name__)


def ensure_firebase_app(credentials_path: str = "") -> firebase_admin.App:
    """Initialize the default Firebase app once (service account file or ADC)."""
    if firebase_admin._apps:
        return firebase_admin.get_app()
    if credentials_path and os.path.isfile(credentials_path):
        app = firebase_admin.initialize_app(credentials.Certificate(credentials_path))
    else:
        app = firebase_admin.initialize_app()
    logger.info("Firebase app initialized (project=%s)", app.project_id)
    return app


def _snapshot(doc) -> Snapshot:
    return Snapshot(path=doc.reference.path, exists=doc.exists, data=doc.to_dict() or {})


class _FirestoreTransaction(Transaction):
    def __init__(self, client, transaction):
        self._client = client
        self._transaction = transaction

    def get(self, path: str) -> Snapshot:
        ref = self._client.document(validate_document_path(path))
        return _snapshot(ref.get(transaction=self._transaction))

    def update(self, path: str, updates: dict[str, Any]) -> None:
        self._transaction.update(self._client.document(validate_document_path(path)), updates)

    def set(self, path: str, data: dict[str, Any]) -> None:
        self._transaction.set(self._client.document(validate_document_path(path)), data)


class _FirestoreWriteBatch(WriteBatch):
    def __init__(self, client):
        self._client = client
        self._batch = client.batch()
        self._count = 0
        self._committed = False

    def update(self, path: str, updates: dict[str, Any]) -> None:
        if self._committed:
            raise DocumentStoreError("Batch already committed")
        if self._count >= MAX_BATCH_WRITES:
            raise DocumentStoreError(f"Batch cannot exceed {MAX_BATCH_WRITES} writes")
        self._batch.update(self._client.document(validate_document_path(path)), updates)
        self._count += 1

    def commit(self) -> int:
        if self._committed:
            raise DocumentStoreError("Batch already committed")
        self._batch.commit()
        self._committed = True
        return self._count


class FirestoreDocumentStore(DocumentStore):
    backend_name = "firestore"

    def __init__(self, client):
        self.client = client

    @classmethod
    def from_config(cls, config) -> "FirestoreDocumentStore":
        ensure_firebase_app(config.get("GOOGLE_APPLICATION_CREDENTIALS", ""))
        return cls(firestore.client())

    def get(self, path: str) -> Snapshot:
        return _snapshot(self.client.document(validate_document_path(path)).get())

    def set(self, path: str, data: dict[str, Any]) -> None:
        self.client.document(validate_document_path(path)).set(data)

    def list_documents(self, collection_path: str) -> list[Snapshot]:
        ref = self.client.collection(validate_collection_path(collection_path))
        return [_snapshot(doc) for doc in ref.stream()]

    def query(self, collection_path: str, field_path: str, op: str, value: Any) -> list[Snapshot]:
        check_query_op(op)
        ref = self.client.collection(validate_collection_path(collection_path))
        return [_snapshot(doc) for doc in ref.where(filter=FieldFilter(field_path, op, value)).stream()]

    def run_transaction(self, func: Callable[[Transaction], T]) -> T:
        @firestore.transactional
        def _txn(transaction):
            return func(_FirestoreTransaction(self.client, transaction))

        return _txn(self.client.transaction())

    def batch(self) -> WriteBatch:
        return _FirestoreWriteBatch(self.client)

    def ping(self) -> None:
        list(self.client.collection("organizations").limit(1).stream())
