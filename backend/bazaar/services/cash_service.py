# Overview: Service-layer operations for cash submissions; seller manager confirms received cash.

"""
Cash Submission Confirmation

A seller hands cash to a seller manager, producing a cashSubmissions
document in "pending" status with receivedBy set to that manager. Only the
named receiver can confirm it. Confirmation flips the submission to
"confirmed" and moves the amount inside the manager's cashStats from
pendingFromSellers to confirmedFromSellers and cashOnHand, all in one
transaction.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ..docstore import Snapshot
from ..errors import PermissionDenied
from ..time_utils import to_utc_z
from . import document_service, permission_service
from .transition_service import (
    STATUS_CONFIRMED,
    STATUS_PENDING,
    Mutation,
    SecondaryEffect,
    field_equals,
    positive_number,
    run_guarded_transition,
    status_is,
)

CASH_STATS = "sellerManager.cashStats"


def confirm_cash_submission(
    uid: str,
    org_id: str,
    event_id: str,
    submission_id: str,
    note: str | None = None,
) -> dict[str, Any]:
    caller = permission_service.resolve_caller(uid, org_id, event_id)
    acting_role = permission_service.require_capability(
        caller,
        "CONFIRM_SELLER_CASH",
        resource=f"cashSubmissions/{submission_id}",
        message="只有SellerManager可以确认收款",
    )

    preconditions = [
        field_equals("receivedBy", uid, "您不是此笔现金的接收人", error=PermissionDenied),
        status_is(STATUS_PENDING, "此记录状态为 {actual}，无法确认"),
        field_equals("submitterRole", "seller", "只能确认Seller提交的现金"),
        positive_number("amount", "现金金额无效"),
    ]

    def build_mutation(submission: Snapshot, _manager: Snapshot, now: datetime) -> Mutation:
        return Mutation(
            updates={
                "status": STATUS_CONFIRMED,
                "confirmedAt": now,
                "confirmedBy": uid,
                "confirmationNote": note or "",
                "metadata.updatedAt": now,
            },
            audit={
                "status": STATUS_CONFIRMED,
                "timestamp": now,
                "updatedBy": uid,
                "updaterRole": acting_role,
                "note": note or "确认收款",
            },
        )

    def build_stats(submission: Snapshot, manager: Snapshot, now: datetime) -> dict[str, Any]:
        amount = submission.get("amount")
        stats = manager.get(CASH_STATS) or {}
        return {
            f"{CASH_STATS}.pendingFromSellers": (stats.get("pendingFromSellers") or 0) - amount,
            f"{CASH_STATS}.confirmedFromSellers": (stats.get("confirmedFromSellers") or 0) + amount,
            f"{CASH_STATS}.cashOnHand": (stats.get("cashOnHand") or 0) + amount,
            f"{CASH_STATS}.lastConfirmedAt": now,
        }

    try:
        result = run_guarded_transition(
            document_service.document_path(org_id, event_id, "cashSubmissions", submission_id),
            preconditions=preconditions,
            build_mutation=build_mutation,
            secondary=SecondaryEffect(
                path=caller.user.path,
                build_updates=build_stats,
                missing_message="用户不存在",
            ),
            missing_message="提交记录不存在",
        )
    except PermissionDenied as exc:
        raise permission_service.deny(caller, f"cashSubmissions/{submission_id}", exc.message)

    submission = result.before
    amount = submission.get("amount")
    seller_name = submission.get("submitterName") or "未知"
    return {
        "success": True,
        "message": f"已确认收到 {seller_name} 的 RM {amount}",
        "data": {
            "submissionId": submission_id,
            "submissionNumber": submission.get("submissionNumber"),
            "amount": amount,
            "sellerName": seller_name,
            "confirmedAt": to_utc_z(result.committed_at),
        },
    }
