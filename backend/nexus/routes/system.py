# Overview: System health endpoint.
"""
System health endpoint.

Reports database connectivity and the in-process order store so a load
balancer or an operator can tell which dependency is failing.
"""

import time

from flask import Blueprint, current_app, jsonify

from ..extensions import db
from ..models import Order, Retailer, SessionToken, User
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        details = {
            "retailers": db.session.query(Retailer).count(),
            "users": db.session.query(User).count(),
            "orders": db.session.query(Order).count(),
            "active_sessions": db.session.query(SessionToken).filter_by(is_revoked=False).count(),
        }
        return {
            "status": "healthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "details": details,
        }
    except Exception:
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "error": "Database error",
        }


@system_bp.get("/api/health")
def health():
    database = check_database_health()
    store = current_app.extensions["order_store"]
    healthy = database["status"] == "healthy"
    return jsonify({
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": to_utc_z(utcnow()),
        "checks": {
            "database": database,
            "order_store": {"status": "healthy", "recent_orders": store.count()},
        },
    }), 200 if healthy else 503
