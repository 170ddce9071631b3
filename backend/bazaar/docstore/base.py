# Overview: Backend-neutral document store interface (paths, snapshots, transactions, batches).

"""
Hierarchical Document Store Interface

Documents live at slash-separated paths with an even number of segments
(collection/doc/collection/doc...). Collection paths have an odd number.

Updates use dotted field paths ("dailyRevenue.today"), the same way a
Firestore update() does: intermediate maps are created as needed and sibling
fields are left alone.

Transactions follow the optimistic model: reads first, writes are staged and
applied together at commit. A conflicting concurrent commit makes the store
re-run the whole transaction function; callers never retry themselves.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, TypeVar

T = TypeVar("T")

# Firestore caps a single commit at 500 writes
MAX_BATCH_WRITES = 500

QUERY_OPS = ("==", "array-contains")


class DocumentStoreError(Exception):
    """Raised for invalid paths or unsupported store operations."""
    pass


@dataclass
class Snapshot:
    """Point-in-time view of one document."""
    path: str
    exists: bool
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def get(self, field_path: str, default: Any = None) -> Any:
        return get_field(self.data, field_path, default)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.data, id=self.id)


# =============================================================================
# PATH HELPERS
# =============================================================================

def split_path(path: str) -> list[str]:
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts:
        raise DocumentStoreError("Empty path")
    return parts


def validate_document_path(path: str) -> str:
    parts = split_path(path)
    if len(parts) % 2 != 0:
        raise DocumentStoreError(f"Not a document path: {path}")
    return "/".join(parts)


def validate_collection_path(path: str) -> str:
    parts = split_path(path)
    if len(parts) % 2 != 1:
        raise DocumentStoreError(f"Not a collection path: {path}")
    return "/".join(parts)


def parent_collection(path: str) -> str:
    return validate_document_path(path).rsplit("/", 1)[0]


# =============================================================================
# FIELD HELPERS
# =============================================================================

def get_field(data: dict[str, Any], field_path: str, default: Any = None) -> Any:
    """Read a dotted field path; missing or non-map intermediates yield default."""
    current: Any = data
    for key in field_path.split("."):
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current


def apply_updates(data: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of data with dotted-path updates applied."""
    result = copy.deepcopy(data)
    for field_path, value in updates.items():
        keys = field_path.split(".")
        target = result
        for key in keys[:-1]:
            child = target.get(key)
            if not isinstance(child, dict):
                child = {}
                target[key] = child
            target = child
        target[keys[-1]] = copy.deepcopy(value)
    return result


def matches(data: dict[str, Any], field_path: str, op: str, value: Any) -> bool:
    current = get_field(data, field_path)
    if op == "==":
        return current == value
    if op == "array-contains":
        return isinstance(current, list) and value in current
    raise DocumentStoreError(f"Unsupported query operator: {op}")


# =============================================================================
# INTERFACES
# =============================================================================

class Transaction:
    """Read-then-write unit of work handed to run_transaction callbacks."""

    def get(self, path: str) -> Snapshot:
        raise NotImplementedError

    def update(self, path: str, updates: dict[str, Any]) -> None:
        raise NotImplementedError

    def set(self, path: str, data: dict[str, Any]) -> None:
        raise NotImplementedError


class WriteBatch:
    """Blind writes committed together; no reads, no preconditions."""

    def update(self, path: str, updates: dict[str, Any]) -> None:
        raise NotImplementedError

    def commit(self) -> int:
        """Commit staged writes, returning how many were written."""
        raise NotImplementedError


class DocumentStore:
    """Operations every backend provides."""

    backend_name = "abstract"

    def get(self, path: str) -> Snapshot:
        raise NotImplementedError

    def set(self, path: str, data: dict[str, Any]) -> None:
        raise NotImplementedError

    def list_documents(self, collection_path: str) -> list[Snapshot]:
        raise NotImplementedError

    def query(self, collection_path: str, field_path: str, op: str, value: Any) -> list[Snapshot]:
        raise NotImplementedError

    def run_transaction(self, func: Callable[[Transaction], T]) -> T:
        raise NotImplementedError

    def batch(self) -> WriteBatch:
        raise NotImplementedError

    def ping(self) -> None:
        """Cheap connectivity probe; raises on failure."""
        raise NotImplementedError


def check_query_op(op: str) -> None:
    if op not in QUERY_OPS:
        raise DocumentStoreError(f"Unsupported query operator: {op}. Must be one of {QUERY_OPS}")


def sorted_by_path(snapshots: Iterable[Snapshot]) -> list[Snapshot]:
    return sorted(snapshots, key=lambda s: s.path)
