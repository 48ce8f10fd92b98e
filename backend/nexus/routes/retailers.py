# Overview: Flask API routes for retailer and location operations.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_capability
from ..services import retailer_service
from ..validation import ConflictError, ValidationError, clean_str, require_json_object

retailers_bp = Blueprint("retailers", __name__, url_prefix="/api/retailers")


@retailers_bp.get("")
@require_auth
@require_capability("can_see_retailers")
def list_retailers():
    retailers = retailer_service.list_retailers(g.actor)
    return jsonify([retailer.to_dict() for retailer in retailers]), 200


@retailers_bp.post("")
@require_auth
@require_capability("can_manage_retailers")
def create_retailer():
    try:
        data = require_json_object(request.get_json(silent=True))
        retailer = retailer_service.create_retailer(
            g.actor,
            name=clean_str(data.get("name"), field="name", required=True, max_length=255),
            website=clean_str(data.get("website"), field="website", max_length=255),
        )
    except ValidationError as exc:
        return jsonify({"error": str(exc), "errors": exc.errors}), 400
    except ConflictError as exc:
        return jsonify({"error": str(exc)}), 409
    except retailer_service.RetailerError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify(retailer.to_dict()), 201


@retailers_bp.get("/<retailer_id>/locations")
@require_auth
def list_locations(retailer_id: str):
    try:
        locations = retailer_service.list_locations(g.actor, retailer_id)
    except retailer_service.RetailerNotFoundError as exc:
        return jsonify({"error": str(exc)}), 404
    return jsonify([location.to_dict() for location in locations]), 200


@retailers_bp.post("/<retailer_id>/locations")
@require_auth
@require_capability("can_manage_retailers")
def create_location(retailer_id: str):
    try:
        data = require_json_object(request.get_json(silent=True))
        location = retailer_service.create_location(
            g.actor,
            retailer_id,
            name=clean_str(data.get("name"), field="name", required=True, max_length=255),
            address=data.get("address"),
            phone=clean_str(data.get("phone"), field="phone", max_length=32),
            timezone=clean_str(data.get("timezone"), field="timezone", max_length=64),
        )
    except ValidationError as exc:
        return jsonify({"error": str(exc), "errors": exc.errors}), 400
    except ConflictError as exc:
        return jsonify({"error": str(exc)}), 409
    except retailer_service.RetailerNotFoundError as exc:
        return jsonify({"error": str(exc)}), 404
    except retailer_service.RetailerError as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify(location.to_dict()), 201
