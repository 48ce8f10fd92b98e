# Overview: Flask API routes for customer operations; scoped to the caller's retailer/location.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_capability
from ..services import customer_service
from ..services.access_service import AccessDeniedError
from ..validation import ConflictError, ValidationError, parse_limit, require_json_object

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")

MAX_LIMIT = 200


def _error_response(exc: Exception):
    if isinstance(exc, customer_service.CustomerNotFoundError):
        return jsonify({"error": str(exc)}), 404
    if isinstance(exc, ValidationError):
        return jsonify({"error": str(exc), "errors": exc.errors}), 400
    if isinstance(exc, ConflictError):
        return jsonify({"error": str(exc)}), 409
    if isinstance(exc, AccessDeniedError):
        body = {"error": "Access denied"}
        if exc.required_capability:
            body["required_capability"] = exc.required_capability
        else:
            body["message"] = str(exc)
        return jsonify(body), 403
    raise exc


@customers_bp.get("")
@require_auth
@require_capability("can_see_customers")
def list_customers():
    try:
        limit = parse_limit(request.args.get("limit"), default=MAX_LIMIT, maximum=MAX_LIMIT)
        customers = customer_service.list_customers(g.actor, search=request.args.get("search"), limit=limit)
    except (ValidationError, AccessDeniedError) as exc:
        return _error_response(exc)
    return jsonify({"customers": [customer.to_dict() for customer in customers], "count": len(customers)}), 200


@customers_bp.post("")
@require_auth
@require_capability("can_edit_customers")
def create_customer():
    try:
        payload = require_json_object(request.get_json(silent=True))
        customer = customer_service.create_customer(g.actor, payload)
    except (ValidationError, ConflictError, AccessDeniedError) as exc:
        return _error_response(exc)
    return jsonify(customer.to_dict()), 201


@customers_bp.get("/<customer_id>")
@require_auth
@require_capability("can_see_customers")
def get_customer(customer_id: str):
    try:
        customer = customer_service.get_customer(g.actor, customer_id)
    except (customer_service.CustomerError, AccessDeniedError) as exc:
        return _error_response(exc)
    return jsonify(customer.to_dict()), 200


@customers_bp.patch("/<customer_id>")
@require_auth
@require_capability("can_edit_customers")
def update_customer(customer_id: str):
    try:
        patch = require_json_object(request.get_json(silent=True))
        customer = customer_service.update_customer(g.actor, customer_id, patch)
    except (customer_service.CustomerError, ValidationError, ConflictError, AccessDeniedError) as exc:
        return _error_response(exc)
    return jsonify(customer.to_dict()), 200
