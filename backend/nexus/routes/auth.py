# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

Login issues a bearer token; the response also carries the capability set
and landing route so the client can render navigation without a second call.
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import bearer_token, require_auth
from ..services import auth_service, session_service
from ..services.access_service import actor_from_user, capabilities_for, is_known_role, role_landing_route


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_payload(user) -> dict:
    return {
        "user": user.to_dict(),
        "capabilities": capabilities_for(user.role).to_dict()["capabilities"],
        "landing_route": role_landing_route(user.role),
    }


@auth_bp.post("/login")
def login_route():
    """
    Authenticate by email and password and create a session token.

    Token must be included in the Authorization header for protected routes.
    """
    data = request.get_json(silent=True) or {}
    email = data.get("email") or data.get("username")
    password = data.get("password")

    if not email or not password:
        return jsonify({"error": "email and password required"}), 400

    try:
        user = auth_service.authenticate(email, password)
        if not user:
            return jsonify({"error": "Invalid credentials"}), 401

        if not is_known_role(user.role):
            current_app.logger.error("Login refused for user %s: unrecognized role %r", user.id, user.role)
            return jsonify({"error": "Account role is not recognized. Contact an administrator."}), 403

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500

    payload = _session_payload(user)
    payload.update({
        "token": token,
        "session": session.to_dict(),
        "message": "Login successful",
    })
    return jsonify(payload), 200


@auth_bp.post("/logout")
def logout_route():
    """Revoke the bearer token so it cannot be reused."""
    token = bearer_token()
    if not token:
        return jsonify({"error": "Authorization header required"}), 401

    try:
        revoked = session_service.revoke_session(token, reason="User logout")
    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500

    if not revoked:
        return jsonify({"error": "Invalid or expired token"}), 401
    return jsonify({"message": "Logout successful"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    payload = _session_payload(g.current_user)
    payload["actor"] = actor_from_user(g.current_user).to_dict()
    return jsonify(payload), 200
