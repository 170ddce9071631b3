# Overview: Document store package; Flask extension that picks the configured backend.

from flask import current_app

from .base import (
    DocumentStore,
    DocumentStoreError,
    MAX_BATCH_WRITES,
    Snapshot,
    Transaction,
    WriteBatch,
    apply_updates,
    get_field,
)

BACKENDS = ("sql", "firestore")


class Documents:
    """
    Flask extension holding the app's DocumentStore.

    DOCUMENT_BACKEND selects the implementation:
    - "sql": SqlDocumentStore on the Flask-SQLAlchemy session
    - "firestore": FirestoreDocumentStore on the firebase_admin client
    """

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        backend = app.config.get("DOCUMENT_BACKEND", "sql")
        if backend == "sql":
            from .sql import SqlDocumentStore
            store = SqlDocumentStore()
        elif backend == "firestore":
            from .firestore import FirestoreDocumentStore
            store = FirestoreDocumentStore.from_config(app.config)
        else:
            raise ValueError(f"Invalid DOCUMENT_BACKEND: {backend}. Must be one of {BACKENDS}")
        app.extensions["documents"] = store

    @property
    def store(self) -> DocumentStore:
        return current_app.extensions["documents"]


__all__ = [
    "BACKENDS",
    "Documents",
    "DocumentStore",
    "DocumentStoreError",
    "MAX_BATCH_WRITES",
    "Snapshot",
    "Transaction",
    "WriteBatch",
    "apply_updates",
    "get_field",
]
