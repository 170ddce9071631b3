# Overview: Flask API routes for callable operations; parses input and returns callable-protocol JSON.

"""
Callable Operations

Each route takes a POST body {"data": {...}} carrying organizationId and
eventId plus the operation's own fields, and answers {"result": {...}}.

ROUTES:
- POST /api/callable/confirmCashSubmission
- POST /api/callable/cancelMerchantPayment
- POST /api/callable/toggleMerchantStatus
- POST /api/callable/queryPointCardBalance
- POST /api/callable/assignMerchantAsist
"""

from flask import Blueprint, g

from ..decorators import callable_endpoint
from ..services import cash_service, merchant_service, point_card_service
from ..validation import (
    optional_str,
    require_bool,
    require_event_scope,
    require_payload,
    require_str,
)


callables_bp = Blueprint("callables", __name__, url_prefix="/api/callable")


# =============================================================================
# CASH
# =============================================================================

@callables_bp.post("/confirmCashSubmission")
@callable_endpoint
def confirm_cash_submission_route(data):
    """
    Confirm cash a seller handed to the calling seller manager.

    Request data:
    {
        "organizationId": "org1",
        "eventId": "evt1",
        "submissionId": "sub1",
        "note": "..."  (optional)
    }
    """
    data = require_payload(data)
    org_id, event_id = require_event_scope(data)
    submission_id = require_str(data, "submissionId", "缺少提交记录ID")

    return cash_service.confirm_cash_submission(
        g.caller_uid,
        org_id,
        event_id,
        submission_id,
        note=optional_str(data, "note"),
    )


# =============================================================================
# MERCHANTS
# =============================================================================

@callables_bp.post("/cancelMerchantPayment")
@callable_endpoint
def cancel_merchant_payment_route(data):
    """
    Cancel a pending customer payment at the caller's stall.

    Request data:
    {
        "organizationId": "org1",
        "eventId": "evt1",
        "transactionId": "txn1",
        "cancelReason": "..."  (optional, default 商家取消)
    }
    """
    data = require_payload(data)
    org_id, event_id = require_event_scope(data)
    transaction_id = require_str(data, "transactionId", "缺少交易ID")

    return merchant_service.cancel_merchant_payment(
        g.caller_uid,
        org_id,
        event_id,
        transaction_id,
        cancel_reason=optional_str(data, "cancelReason"),
    )


@callables_bp.post("/toggleMerchantStatus")
@callable_endpoint
def toggle_merchant_status_route(data):
    """
    Open or pause a stall.

    Request data:
    {
        "organizationId": "org1",
        "eventId": "evt1",
        "merchantId": "m1",
        "isActive": false,
        "pauseReason": "..."  (optional)
    }
    """
    data = require_payload(data)
    org_id, event_id = require_event_scope(data)
    merchant_id = require_str(data, "merchantId", "缺少摊位ID")
    is_active = require_bool(data, "isActive", "isActive 必须是布尔值")

    return merchant_service.toggle_merchant_status(
        g.caller_uid,
        org_id,
        event_id,
        merchant_id,
        is_active,
        pause_reason=optional_str(data, "pauseReason"),
    )


@callables_bp.post("/assignMerchantAsist")
@callable_endpoint
def assign_merchant_asist_route(data):
    data = require_payload(data)
    org_id, event_id = require_event_scope(data)
    merchant_id = require_str(data, "merchantId", "缺少商家ID")
    asist_user_id = require_str(data, "asistUserId", "缺少助理用户ID")

    return merchant_service.assign_merchant_asist(
        g.caller_uid, org_id, event_id, merchant_id, asist_user_id,
    )


# =============================================================================
# POINT CARDS
# =============================================================================

@callables_bp.post("/queryPointCardBalance")
@callable_endpoint
def query_point_card_balance_route(data):
    data = require_payload(data)
    org_id, event_id = require_event_scope(data)
    card_id = require_str(data, "cardId", "缺少点数卡ID")

    return point_card_service.query_point_card_balance(g.caller_uid, org_id, event_id, card_id)
