# Overview: Request authentication and capability decorators for API routes.

from functools import wraps

from flask import current_app, g, jsonify, request

from .permissions.routes import LOGIN
from .services import session_service
from .services.access_service import actor_from_user, capabilities_for, is_known_role


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user') and hasattr(g, 'actor')


def _unauthorized(message: str):
    return jsonify({"error": message, "redirect": LOGIN.path}), 401


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a valid session and build the request's Actor.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User row
    - g.actor: Immutable Actor derived from the user
    - g.session_context: The full SessionContext object

    Returns 401 with a login redirect if the token is missing, invalid or
    expired, or if the user's role is not a known role.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return _unauthorized("Authentication required")

        context = session_service.validate_session(token)
        if not context:
            return _unauthorized("Invalid or expired token")

        if not is_known_role(context.user.role):
            # Surfaces the configuration error in the log; the client just sees a login redirect
            capabilities_for(context.user.role)
            current_app.logger.error(
                "User %s has unrecognized role %r; treating as unauthenticated",
                context.user.id, context.user.role,
            )
            return _unauthorized("Unrecognized role")

        g.current_user = context.user
        g.actor = actor_from_user(context.user)
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_capability(capability_code: str):
    """Require the authenticated actor's role to grant a capability. Use after @require_auth."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return _unauthorized("Authentication required")

            if not capabilities_for(g.actor.role).allows(capability_code):
                current_app.logger.info(
                    "Capability %s denied to user %s (%s) on %s %s",
                    capability_code, g.actor.id, g.actor.role, request.method, request.path,
                )
                return jsonify({
                    "error": "Access denied",
                    "required_capability": capability_code,
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
