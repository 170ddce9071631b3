# Overview: Service-layer operations for point cards; read-only balance lookup by card id.

from __future__ import annotations

from typing import Any

from ..time_utils import to_json_safe
from . import document_service, permission_service


def query_point_card_balance(uid: str, org_id: str, event_id: str, card_id: str) -> dict[str, Any]:
    """
    Look up a point card scanned from its QR code.

    Missing balance figures read as 0 and missing status flags as False.
    """
    caller = permission_service.resolve_caller(uid, org_id, event_id)
    permission_service.require_capability(
        caller,
        "QUERY_POINT_CARD",
        resource=f"pointCards/{card_id}",
        message="没有权限查询点数卡",
    )

    card = document_service.require_document(
        org_id, event_id, "pointCards", card_id,
        message="找不到该点数卡，请确认QR Code是否正确",
    )

    balance = card.get("balance") or {}
    status = card.get("status") or {}
    issuer = card.get("issuer") or {}

    return {
        "success": True,
        "message": "查询成功",
        "data": to_json_safe({
            "cardId": card_id,
            "cardNumber": card.get("cardNumber"),
            "balance": {
                "initial": balance.get("initial") or 0,
                "current": balance.get("current") or 0,
                "spent": balance.get("spent") or 0,
                "reserved": balance.get("reserved") or 0,
            },
            "status": {
                "isActive": bool(status.get("isActive")),
                "isExpired": bool(status.get("isExpired")),
                "isDestroyed": bool(status.get("isDestroyed")),
                "isEmpty": bool(status.get("isEmpty")),
                "expiresAt": status.get("expiresAt"),
                "lastUsedAt": status.get("lastUsedAt"),
            },
            "issuer": {
                "pointSellerName": issuer.get("pointSellerName") or "未知",
                "issuedAt": issuer.get("issuedAt"),
            },
        }),
    }
