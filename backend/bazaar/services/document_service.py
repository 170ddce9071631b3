# Overview: Service-layer operations for document lookup; builds tenant paths and reads snapshots.

"""
All business documents live under one event:

    organizations/{orgId}/events/{eventId}/{collection}/{docId}

Lookups are plain reads with no caching. get_* returns None for a missing
document; require_* raises NotFound with a message the caller can show.
"""

from __future__ import annotations

from ..docstore import Snapshot
from ..errors import InvalidArgument, NotFound
from ..extensions import documents

EVENT_COLLECTIONS = ("users", "merchants", "transactions", "cashSubmissions", "pointCards")


def _check_id(value: str, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"缺少{label}")
    if "/" in value:
        raise InvalidArgument(f"{label}格式错误")
    return value


def organization_path(org_id: str) -> str:
    return f"organizations/{_check_id(org_id, '组织ID')}"


def event_path(org_id: str, event_id: str) -> str:
    return f"{organization_path(org_id)}/events/{_check_id(event_id, '活动ID')}"


def collection_path(org_id: str, event_id: str, collection: str) -> str:
    if collection not in EVENT_COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection}")
    return f"{event_path(org_id, event_id)}/{collection}"


def document_path(org_id: str, event_id: str, collection: str, doc_id: str) -> str:
    return f"{collection_path(org_id, event_id, collection)}/{_check_id(doc_id, '文档ID')}"


def get_document(org_id: str, event_id: str, collection: str, doc_id: str) -> Snapshot | None:
    snapshot = documents.store.get(document_path(org_id, event_id, collection, doc_id))
    return snapshot if snapshot.exists else None


def require_document(
    org_id: str,
    event_id: str,
    collection: str,
    doc_id: str,
    message: str | None = None,
) -> Snapshot:
    snapshot = get_document(org_id, event_id, collection, doc_id)
    if snapshot is None:
        raise NotFound(message or f"{collection}/{doc_id} 不存在")
    return snapshot


def require_event(org_id: str, event_id: str) -> Snapshot:
    snapshot = documents.store.get(event_path(org_id, event_id))
    if not snapshot.exists:
        raise NotFound("活动不存在")
    return snapshot


def query_users(org_id: str, event_id: str, field_path: str, op: str, value) -> list[Snapshot]:
    return documents.store.query(collection_path(org_id, event_id, "users"), field_path, op, value)
