# Overview: Service-layer operations for dashboards; read-only views for seller managers and customers.

from __future__ import annotations

import logging
from typing import Any

from ..time_utils import to_json_safe
from . import document_service, permission_service

logger = logging.getLogger(__name__)


def _managed_departments(event_data: dict[str, Any], uid: str) -> list[str]:
    for manager in event_data.get("sellerManagers") or []:
        if isinstance(manager, dict) and manager.get("userId") == uid:
            return list(manager.get("managedDepartments") or [])
    return []


def seller_manager_dashboard(uid: str, org_id: str, event_id: str) -> dict[str, Any]:
    caller = permission_service.resolve_caller(uid, org_id, event_id)
    permission_service.require_capability(
        caller,
        "VIEW_SELLER_MANAGER_DASHBOARD",
        resource="dashboard/seller-manager",
        message="只有SellerManager可以查看此页面",
    )

    managed_users = document_service.query_users(org_id, event_id, "managedBy", "array-contains", uid)
    logger.info("Seller manager dashboard for %s: %d managed users", uid, len(managed_users))

    return {
        "success": True,
        "data": to_json_safe({
            "smStats": caller.user.get("sellerManager"),
            "managedDepartments": _managed_departments(caller.event.data, uid),
            "managedUsers": [user.to_dict() for user in managed_users],
            "eventData": caller.event.to_dict(),
        }),
    }


def customer_dashboard(uid: str, org_id: str, event_id: str) -> dict[str, Any]:
    """The caller's own user document."""
    caller = permission_service.resolve_caller(uid, org_id, event_id)
    permission_service.require_capability(
        caller,
        "VIEW_CUSTOMER_DASHBOARD",
        resource="dashboard/customer",
        message="只有顾客可以查看此页面",
    )
    return {
        "success": True,
        "data": to_json_safe(caller.user.to_dict()),
    }
