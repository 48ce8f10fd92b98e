# Overview: Flask API routes for order operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_capability
from ..services import order_service
from ..services import order_transform_service as transforms
from ..services.access_service import AccessDeniedError
from ..validation import ValidationError, parse_limit, require_json_object

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")

MAX_LIMIT = 200


def _error_response(exc: Exception):
    if isinstance(exc, order_service.OrderNotFoundError):
        return jsonify({"error": str(exc)}), 404
    if isinstance(exc, order_service.OrderValidationError):
        return jsonify({"error": "Validation failed", "errors": exc.errors}), 400
    if isinstance(exc, ValidationError):
        return jsonify({"error": str(exc), "errors": exc.errors}), 400
    if isinstance(exc, AccessDeniedError):
        body = {"error": "Access denied"}
        if exc.required_capability:
            body["required_capability"] = exc.required_capability
        else:
            body["message"] = str(exc)
        return jsonify(body), 403
    if isinstance(exc, order_service.OrderError):
        return jsonify({"error": str(exc)}), 409
    raise exc


@orders_bp.get("")
@require_auth
@require_capability("can_see_orders")
def list_orders():
    try:
        limit = parse_limit(request.args.get("limit"), default=MAX_LIMIT, maximum=MAX_LIMIT)
        orders = order_service.list_orders(g.actor, status=request.args.get("status"), limit=limit)
    except (order_service.OrderError, ValidationError, AccessDeniedError) as exc:
        return _error_response(exc)
    return jsonify({"orders": [order.to_dict() for order in orders], "count": len(orders)}), 200


@orders_bp.post("")
@require_auth
@require_capability("can_create_orders")
def create_order():
    try:
        payload = require_json_object(request.get_json(silent=True))
        order = order_service.create_order(g.actor, payload)
    except (order_service.OrderError, ValidationError, AccessDeniedError) as exc:
        return _error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(order.to_dict()), 201


@orders_bp.post("/validate")
@require_auth
def validate_order():
    """Report missing required fields without saving anything."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    return jsonify(transforms.validate(payload).to_dict()), 200


@orders_bp.get("/recent")
@require_auth
@require_capability("can_see_orders")
def recent_orders():
    try:
        limit = parse_limit(request.args.get("limit"), default=20, maximum=MAX_LIMIT)
        orders = order_service.recent_orders(g.actor, limit=limit)
    except (ValidationError, AccessDeniedError) as exc:
        return _error_response(exc)
    return jsonify({"orders": [order.to_dict() for order in orders], "count": len(orders)}), 200


@orders_bp.get("/<order_id>")
@require_auth
@require_capability("can_see_orders")
def get_order(order_id: str):
    try:
        order = order_service.get_order(g.actor, order_id)
    except (order_service.OrderError, AccessDeniedError) as exc:
        return _error_response(exc)
    return jsonify(order.to_dict()), 200


@orders_bp.patch("/<order_id>")
@require_auth
@require_capability("can_edit_orders")
def update_order(order_id: str):
    try:
        patch = require_json_object(request.get_json(silent=True))
        order = order_service.update_order(g.actor, order_id, patch)
    except (order_service.OrderError, ValidationError, AccessDeniedError) as exc:
        return _error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to update order %s", order_id)
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(order.to_dict()), 200
