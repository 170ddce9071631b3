# Overview: Service-layer operations for merchants; payment cancellation, stall status and assistants.

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..docstore import Snapshot
from ..errors import FailedPrecondition, InvalidArgument, PermissionDenied
from ..permissions import Role
from ..time_utils import to_utc_z
from . import document_service, permission_service
from .transition_service import (
    STATUS_CANCELLED,
    STATUS_PENDING,
    Mutation,
    Precondition,
    SecondaryEffect,
    field_equals,
    run_guarded_transition,
    status_is,
)

logger = logging.getLogger(__name__)

MAX_ASISTS_PER_MERCHANT = 5
DEFAULT_CANCEL_REASON = "商家取消"
CUSTOMER_TO_MERCHANT = "customer_to_merchant"


# =============================================================================
# PAYMENT CANCELLATION
# =============================================================================

def cancel_merchant_payment(
    uid: str,
    org_id: str,
    event_id: str,
    transaction_id: str,
    cancel_reason: str | None = None,
) -> dict[str, Any]:
    """
    Cancel a pending customer-to-merchant payment.

    The merchant is taken from the caller's own role block
    (merchantOwner.merchantId or merchantAsist.merchantId), so a caller can
    only cancel payments made to the stall they work at.
    """
    caller = permission_service.resolve_caller(uid, org_id, event_id)
    acting_role = permission_service.require_capability(
        caller,
        "CANCEL_MERCHANT_PAYMENT",
        resource=f"transactions/{transaction_id}",
        message="只有商家摊主或助理可以取消交易",
    )

    merchant_id = caller.user.get(f"{acting_role}.merchantId")
    if not merchant_id:
        raise FailedPrecondition("用户未关联到商家")

    reason = cancel_reason or DEFAULT_CANCEL_REASON
    preconditions = [
        status_is(STATUS_PENDING, "交易状态为 {actual}，无法取消"),
        field_equals("transactionType", CUSTOMER_TO_MERCHANT, "交易类型错误", error=InvalidArgument),
        field_equals("merchantId", merchant_id, "此交易不属于您的商家", error=PermissionDenied),
    ]

    def build_mutation(_txn_doc: Snapshot, _secondary, now: datetime) -> Mutation:
        return Mutation(
            updates={
                "status": STATUS_CANCELLED,
                "cancelledAt": now,
                "cancelledBy": uid,
                "cancellerRole": acting_role,
                "cancelReason": reason,
            },
            audit={
                "status": STATUS_CANCELLED,
                "timestamp": now,
                "updatedBy": uid,
                "updaterRole": acting_role,
                "note": reason,
            },
        )

    try:
        result = run_guarded_transition(
            document_service.document_path(org_id, event_id, "transactions", transaction_id),
            preconditions=preconditions,
            build_mutation=build_mutation,
            missing_message="交易不存在",
        )
    except PermissionDenied as exc:
        raise permission_service.deny(caller, f"transactions/{transaction_id}", exc.message)

    return {
        "success": True,
        "message": "交易已取消",
        "data": {
            "transactionId": transaction_id,
            "cancelledBy": uid,
            "cancellerRole": acting_role,
            "cancelReason": reason,
            "cancelledAt": to_utc_z(result.committed_at),
        },
    }


# =============================================================================
# STALL STATUS
# =============================================================================

def toggle_merchant_status(
    uid: str,
    org_id: str,
    event_id: str,
    merchant_id: str,
    is_active: bool,
    pause_reason: str | None = None,
) -> dict[str, Any]:
    """
    Open or pause a stall.

    Setting the status it already has is a no-op reported as
    statusChanged=False.
    """
    if not isinstance(is_active, bool):
        raise InvalidArgument("isActive 必须是布尔值")

    caller = permission_service.resolve_caller(uid, org_id, event_id)
    acting_role = permission_service.require_capability(
        caller,
        "TOGGLE_MERCHANT_STATUS",
        resource=f"merchants/{merchant_id}",
        message="没有权限修改此摊位状态",
    )

    preconditions = []
    if acting_role == Role.MERCHANT_OWNER:
        preconditions.append(
            field_equals("merchantOwnerId", uid, "您只能修改自己的摊位状态", error=PermissionDenied)
        )

    new_pause_reason = None if is_active else (pause_reason or "")

    def build_mutation(merchant: Snapshot, _secondary, now: datetime) -> Mutation | None:
        if bool(merchant.get("operationStatus.isActive", False)) == is_active:
            return None
        return Mutation(
            updates={
                "operationStatus.isActive": is_active,
                "operationStatus.lastStatusChange": now,
                "operationStatus.pauseReason": new_pause_reason or "",
                "metadata.updatedAt": now,
                "metadata.lastUpdatedBy": uid,
            },
            audit={
                "isActive": is_active,
                "timestamp": now,
                "updatedBy": uid,
                "updaterRole": acting_role,
                "note": new_pause_reason or "",
            },
            history_field="operationStatus.statusHistory",
        )

    try:
        result = run_guarded_transition(
            document_service.document_path(org_id, event_id, "merchants", merchant_id),
            preconditions=preconditions,
            build_mutation=build_mutation,
            missing_message="摊位不存在",
        )
    except PermissionDenied as exc:
        raise permission_service.deny(caller, f"merchants/{merchant_id}", exc.message)

    if not result.changed:
        return {
            "success": True,
            "message": f"摊位已经是{'营业中' if is_active else '已暂停'}状态",
            "data": {
                "statusChanged": False,
                "isActive": is_active,
            },
        }

    logger.info("Merchant %s set active=%s by %s (%s)", merchant_id, is_active, uid, acting_role)
    return {
        "success": True,
        "message": f"摊位已{'开始营业' if is_active else '暂停营业'}",
        "data": {
            "statusChanged": True,
            "merchantId": merchant_id,
            "oldStatus": not is_active,
            "newStatus": is_active,
            "pauseReason": new_pause_reason,
            "changedBy": uid,
            "changerRole": acting_role,
            "changedAt": to_utc_z(result.committed_at),
        },
    }


# =============================================================================
# ASSISTANTS
# =============================================================================

def _asist_block_updates(merchant_id: str, merchant: Snapshot, assigned_by: str, now: datetime) -> dict[str, Any]:
    return {
        "merchantAsist.merchantId": merchant_id,
        "merchantAsist.merchantOwnerId": merchant.get("merchantOwnerId"),
        "merchantAsist.stallName": merchant.get("stallName"),
        "merchantAsist.assignmentInfo.assignedAt": now,
        "merchantAsist.assignmentInfo.assignedBy": assigned_by,
        "merchantAsist.assignmentInfo.isActive": True,
        "merchantAsist.permissions.canCollectPayments": True,
        "merchantAsist.permissions.canViewOwnTransactions": True,
        "merchantAsist.permissions.canCancelPending": True,
        "merchantAsist.permissions.cannotViewAllTransactions": True,
        "merchantAsist.permissions.cannotEditProfile": True,
        "merchantAsist.permissions.cannotRefund": True,
        "merchantAsist.statistics.totalCollected": 0,
        "merchantAsist.statistics.transactionCount": 0,
        "merchantAsist.statistics.lastCollectionAt": None,
        "merchantAsist.statistics.todayCollected": 0,
        "merchantAsist.statistics.todayTransactionCount": 0,
        "activityData.updatedAt": now,
    }


def assign_merchant_asist(
    uid: str,
    org_id: str,
    event_id: str,
    merchant_id: str,
    asist_user_id: str,
) -> dict[str, Any]:
    """
    Attach a user holding the merchantAsist tag to a merchant.

    The assistant's user document is the transition target and the merchant
    is the secondary document. Re-assigning to the same merchant succeeds
    without writing.
    """
    caller = permission_service.resolve_caller(uid, org_id, event_id)
    permission_service.require_capability(
        caller,
        "ASSIGN_MERCHANT_ASIST",
        resource=f"merchants/{merchant_id}",
        message="只有 Merchant Manager 可以分派助理",
    )

    preconditions = [
        Precondition(
            "roles",
            lambda roles: isinstance(roles, list) and Role.MERCHANT_ASIST in roles,
            Role.MERCHANT_ASIST,
            "目标用户没有 merchantAsist 角色，请先由 Event Manager 授予角色",
        ),
        Precondition(
            "merchantAsist.merchantId",
            lambda current: not current or current == merchant_id,
            f"unassigned or {merchant_id}",
            "该用户已被分派到其他商家，请先解除现有分派",
        ),
    ]

    def build_mutation(asist: Snapshot, merchant: Snapshot, now: datetime) -> Mutation | None:
        if asist.get("merchantAsist.merchantId") == merchant_id:
            return None
        if (merchant.get("merchantAsistsCount") or 0) >= MAX_ASISTS_PER_MERCHANT:
            raise FailedPrecondition(f"商家助理已达上限（{MAX_ASISTS_PER_MERCHANT}人）")
        return Mutation(updates=_asist_block_updates(merchant_id, merchant, uid, now))

    def build_merchant_updates(asist: Snapshot, merchant: Snapshot, now: datetime) -> dict[str, Any]:
        asists = list(merchant.get("merchantAsists") or [])
        if asist_user_id not in asists:
            asists.append(asist_user_id)
        return {
            "merchantAsists": asists,
            "merchantAsistsCount": (merchant.get("merchantAsistsCount") or 0) + 1,
            "activityData.updatedAt": now,
        }

    result = run_guarded_transition(
        document_service.document_path(org_id, event_id, "users", asist_user_id),
        preconditions=preconditions,
        build_mutation=build_mutation,
        secondary=SecondaryEffect(
            path=document_service.document_path(org_id, event_id, "merchants", merchant_id),
            build_updates=build_merchant_updates,
            missing_message="商家不存在",
        ),
        missing_message="目标用户不存在",
    )

    if not result.changed:
        return {
            "success": True,
            "message": "该用户已是此商家的助理",
            "data": {"merchantId": merchant_id, "asistUserId": asist_user_id},
        }

    logger.info("Assistant %s assigned to merchant %s by %s", asist_user_id, merchant_id, uid)
    return {
        "success": True,
        "message": "助理分派成功",
        "data": {
            "merchantId": merchant_id,
            "asistUserId": asist_user_id,
            "stallName": result.updates.get("merchantAsist.stallName"),
        },
    }