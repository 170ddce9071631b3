# backend/bazaar/routes/system.py
"""
System health endpoint.

Probes the configured document store so deployments can tell a dead
backend from a dead app.
"""

import time
from flask import Blueprint, current_app

from ..extensions import documents
from ..time_utils import utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_document_store_health() -> dict:
    """
    Check document store connectivity.

    Returns dict with status and details.
    """
    start_time = time.time()
    store = documents.store
    try:
        store.ping()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"backend": store.backend_name},
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Document store health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Document store error",
        }


@system_bp.get("/health")
def health():
    """
    Health check endpoint (no auth).

    Returns:
    - 200: document store reachable
    - 503: document store unreachable
    """
    store_health = check_document_store_health()
    http_status = 200 if store_health["status"] == "healthy" else 503

    response = {
        "status": store_health["status"],
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {
            "document_store": store_health,
        },
    }
    return response, http_status
