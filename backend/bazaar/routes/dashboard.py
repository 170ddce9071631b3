# Overview: Flask API routes for dashboards; parses query parameters and returns JSON responses.

"""
Dashboard Queries

Read-only views over one event. organizationId and eventId come from the
query string, falling back to the same-named claims on the caller's token.

Errors use {"error": {"code": "<kind>", "message": "..."}}.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth
from ..errors import InvalidArgument, ServiceError
from ..services import dashboard_service


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


def _event_scope():
    claims = g.identity.claims
    org_id = request.args.get("organizationId") or claims.get("organizationId")
    event_id = request.args.get("eventId") or claims.get("eventId")
    if not org_id or not event_id:
        raise InvalidArgument("缺少必填参数")
    return org_id, event_id


@dashboard_bp.get("/seller-manager")
@require_auth
def seller_manager_dashboard_route():
    """
    Seller manager's own stats, managed departments, managed users and the
    event document.

    Returns:
        200: {"success": true, "data": {...}}
        400: Missing organizationId/eventId
        403: Caller is not a seller manager of the event
        404: Event or caller's user document not found
    """
    try:
        org_id, event_id = _event_scope()
        return jsonify(dashboard_service.seller_manager_dashboard(g.caller_uid, org_id, event_id)), 200
    except ServiceError as e:
        return jsonify({"error": e.to_http_error()}), e.http_status
    except Exception:
        current_app.logger.exception("Seller manager dashboard failed")
        return jsonify({"error": {"code": "internal", "message": "获取数据失败"}}), 500


@dashboard_bp.get("/customer")
@require_auth
def customer_dashboard_route():
    """The caller's own user document."""
    try:
        org_id, event_id = _event_scope()
        return jsonify(dashboard_service.customer_dashboard(g.caller_uid, org_id, event_id)), 200
    except ServiceError as e:
        return jsonify({"error": e.to_http_error()}), e.http_status
    except Exception:
        current_app.logger.exception("Customer dashboard failed")
        return jsonify({"error": {"code": "internal", "message": "获取数据失败"}}), 500
