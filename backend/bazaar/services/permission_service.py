# Overview: Service-layer operations for permission; resolves caller roles and enforces capabilities.

"""
Role Resolution and Capability Checks

Roles come from two places inside one event:
- the event document: admins[] grants eventManager, sellerManagers[] grants
  sellerManager
- the caller's user document under the event: roles[] grants everything else

Manager tags written into a user's roles[] are ignored; only the event
arrays can grant them.

DESIGN PRINCIPLES:
- Fail closed: a capability nobody grants is denied
- Log denials only: grants are not logged
- The acting-as role is the first granting role the caller holds, in the
  capability's declared order
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from ..docstore import Snapshot
from ..errors import NotFound, PermissionDenied
from ..permissions import MANAGER_ROLES, VALID_ROLES, Role, get_roles_for_capability
from . import document_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerContext:
    """Authenticated caller resolved against one event."""
    uid: str
    org_id: str
    event_id: str
    event: Snapshot
    user: Snapshot
    roles: tuple[str, ...]

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @property
    def display_name(self) -> str:
        basic = self.user.get("basicInfo") or {}
        return basic.get("chineseName") or basic.get("englishName") or self.uid


def log_security_event(
    uid: str | None,
    event_type: str,
    resource: str | None = None,
    reason: str | None = None,
    org_id: str | None = None,
    event_id: str | None = None,
) -> dict[str, Any]:
    """
    Log a security event.

    event_type examples:
    - PERMISSION_DENIED
    - AUTH_FAILED
    """
    record = {
        "uid": uid,
        "eventType": event_type,
        "resource": resource,
        "reason": reason,
        "organizationId": org_id,
        "eventId": event_id,
    }
    logger.warning(
        "%s uid=%s resource=%s org=%s event=%s reason=%s",
        event_type, uid, resource, org_id, event_id, reason,
        extra={"security_event": record},
    )
    return record


def has_any_role(held_roles: Iterable[str], required_roles: Iterable[str]) -> bool:
    held = set(held_roles)
    return any(role in held for role in required_roles)


def first_matching_role(held_roles: Iterable[str], required_roles: Iterable[str]) -> str | None:
    held = set(held_roles)
    for role in required_roles:
        if role in held:
            return role
    return None


def resolve_event_roles(event_data: dict[str, Any], uid: str) -> list[str]:
    """Manager roles granted to uid by the event document's arrays."""
    roles = []

    for admin in event_data.get("admins") or []:
        if not isinstance(admin, dict):
            continue
        phone = admin.get("phone")
        if admin.get("userId") == uid or (phone and f"phone_{phone}" == uid):
            roles.append(Role.EVENT_MANAGER)
            break

    for manager in event_data.get("sellerManagers") or []:
        if isinstance(manager, dict) and manager.get("userId") == uid:
            roles.append(Role.SELLER_MANAGER)
            break

    return roles


def resolve_user_roles(user_data: dict[str, Any]) -> list[str]:
    """Non-manager roles from a user document; unknown tags are dropped."""
    roles = []
    for role in user_data.get("roles") or []:
        if role in VALID_ROLES and role not in MANAGER_ROLES and role not in roles:
            roles.append(role)
    return roles


def resolve_caller(uid: str, org_id: str, event_id: str) -> CallerContext:
    """
    Load the event and the caller's user document and compute held roles.

    Raises NotFound when the event or the caller's user document is missing.
    """
    event = document_service.require_event(org_id, event_id)
    user = document_service.get_document(org_id, event_id, "users", uid)
    if user is None:
        raise NotFound("用户不存在")

    roles = resolve_event_roles(event.data, uid) + resolve_user_roles(user.data)
    return CallerContext(
        uid=uid,
        org_id=org_id,
        event_id=event_id,
        event=event,
        user=user,
        roles=tuple(roles),
    )


def require_capability(
    caller: CallerContext,
    capability: str,
    *,
    resource: str | None = None,
    message: str | None = None,
) -> str:
    """
    Check that the caller holds a role granting capability.

    Returns the acting-as role. Raises PermissionDenied (and logs it)
    otherwise.
    """
    required = get_roles_for_capability(capability)
    acting_role = first_matching_role(caller.roles, required)
    if acting_role is not None:
        return acting_role

    log_security_event(
        caller.uid,
        "PERMISSION_DENIED",
        resource=resource or capability,
        reason=f"Missing capability: {capability}",
        org_id=caller.org_id,
        event_id=caller.event_id,
    )
    raise PermissionDenied(message or f"需要以下角色之一: {', '.join(required)}")


def deny(caller: CallerContext, resource: str, message: str, reason: str | None = None) -> PermissionDenied:
    """Log an ownership denial and return the error for the caller to raise."""
    log_security_event(
        caller.uid,
        "PERMISSION_DENIED",
        resource=resource,
        reason=reason or message,
        org_id=caller.org_id,
        event_id=caller.event_id,
    )
    return PermissionDenied(message)
