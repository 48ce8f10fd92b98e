# Overview: Flask API routes for role-based navigation and route checks.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth
from ..services.access_service import (
    can_access_route,
    capabilities_for,
    role_landing_route,
    visible_navigation,
)

navigation_bp = Blueprint("navigation", __name__, url_prefix="/api/navigation")


@navigation_bp.get("")
@require_auth
def navigation_route():
    return jsonify({
        "items": [item.to_dict() for item in visible_navigation(g.actor)],
        "landing_route": role_landing_route(g.actor.role),
    }), 200


@navigation_bp.get("/capabilities")
@require_auth
def capabilities_route():
    return jsonify(capabilities_for(g.actor.role).to_dict()), 200


@navigation_bp.get("/check")
@require_auth
def check_route():
    path = request.args.get("path", "").strip()
    if not path:
        return jsonify({"error": "path query parameter is required"}), 400

    allowed = can_access_route(g.actor, path)
    body = {"path": path, "allowed": allowed}
    if not allowed:
        body["redirect"] = role_landing_route(g.actor.role)
    return jsonify(body), 200
