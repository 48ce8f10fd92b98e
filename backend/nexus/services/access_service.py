# Overview: Access control resolver; answers "can this actor see/do X" from role and scope alone.

"""
Access Control Resolver

Pure and synchronous: every decision is derived from the Actor's role,
retailer_id and location_id. Nothing here touches the database, so it is
safe to call on every request and every navigation render.

SCOPE RULES:
- owner, backoffice: unbounded (all retailers, all locations)
- retailer: one retailer and every location under it
- location_user: exactly one location, never retailer-wide

FAIL CLOSED: an actor with no role, or a role outside the Role enumeration,
gets an all-false capability set and is treated as unauthenticated. Unknown
roles are reported as configuration errors, distinct from normal denials.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..permissions import (
    DEFAULT_ROLE_CAPABILITIES,
    NAVIGATION_MASTER_LIST,
    ROLE_LANDING_ROUTES,
    Role,
    UNBOUNDED_ROLES,
    get_all_capability_codes,
    resolve_route,
)
from ..permissions.routes import LOGIN

logger = logging.getLogger(__name__)


class AccessDeniedError(Exception):
    """Raised by services when the actor lacks a capability or the record is out of scope."""

    def __init__(self, message: str = "Access denied", required_capability: str | None = None):
        super().__init__(message)
        self.required_capability = required_capability


@dataclass(frozen=True)
class Actor:
    """The authenticated user making a request."""

    id: str
    role: str | None
    retailer_id: str | None = None
    location_id: str | None = None
    email: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role,
            "retailer_id": self.retailer_id,
            "location_id": self.location_id,
            "email": self.email,
        }


@dataclass(frozen=True)
class CapabilitySet:
    """
    Fully populated capability flags for one role.

    configuration_error is set only when the role was not part of the
    Role enumeration; an unauthenticated (role-less) set has no error.
    """

    role: str | None
    flags: Mapping[str, bool]
    configuration_error: str | None = None

    def __getitem__(self, code: str) -> bool:
        return self.flags[code]

    def allows(self, code: str | None) -> bool:
        if code is None:
            return True
        return bool(self.flags.get(code, False))

    def granted(self) -> frozenset[str]:
        return frozenset(code for code, allowed in self.flags.items() if allowed)

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "role": self.role,
            "capabilities": dict(self.flags),
        }
        if self.configuration_error:
            data["configuration_error"] = self.configuration_error
        return data


@dataclass(frozen=True)
class NavigationItem:
    label: str
    path: str
    route_name: str
    icon: str
    visible: bool = field(default=True)

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "path": self.path,
            "route": self.route_name,
            "icon": self.icon,
            "visible": self.visible,
        }


def coerce_role(role: Any) -> Role | None:
    """Map a raw role value to the Role enumeration, or None when it is not a member."""
    if isinstance(role, Role):
        return role
    if not isinstance(role, str) or not role:
        return None
    try:
        return Role(role)
    except ValueError:
        return None


def is_known_role(role: Any) -> bool:
    return coerce_role(role) is not None


def is_authenticated(actor: Actor | None) -> bool:
    return actor is not None and bool(actor.id) and is_known_role(actor.role)


def _all_false() -> dict[str, bool]:
    return {code: False for code in get_all_capability_codes()}


def capabilities_for(role: Any) -> CapabilitySet:
    """
    Return the capability set for a role.

    Every capability code is present in the result. Unknown roles fail closed
    and carry a configuration_error instead of raising.
    """
    if role is None or role == "":
        return CapabilitySet(role=None, flags=_all_false())

    resolved = coerce_role(role)
    if resolved is None:
        message = f"Unknown role {role!r}: role enumeration mismatch, all capabilities denied"
        logger.error(message)
        return CapabilitySet(role=str(role), flags=_all_false(), configuration_error=message)

    flags = _all_false()
    for code in DEFAULT_ROLE_CAPABILITIES[resolved]:
        flags[code] = True
    return CapabilitySet(role=resolved.value, flags=flags)


def require_capability(actor: Actor | None, code: str) -> None:
    """Raise AccessDeniedError unless the actor's role grants code."""
    if actor is None or not capabilities_for(actor.role).allows(code):
        logger.info("Denied %s to actor %s (role %r)", code, getattr(actor, "id", None), getattr(actor, "role", None))
        raise AccessDeniedError(required_capability=code)


def can_access_retailer(actor: Actor | None, retailer_id: str | None) -> bool:
    if actor is None:
        return False
    role = coerce_role(actor.role)
    if role is None:
        return False
    if role in UNBOUNDED_ROLES:
        return True
    if role is Role.RETAILER:
        return actor.retailer_id is not None and actor.retailer_id == retailer_id
    # location users never get retailer-wide access, even to their own retailer
    return False


def can_access_location(actor: Actor | None, location_id: str | None) -> bool:
    if actor is None:
        return False
    role = coerce_role(actor.role)
    if role is None:
        return False
    if role in UNBOUNDED_ROLES:
        return True
    if role is Role.RETAILER:
        # Coarse: does not check that the location belongs to actor.retailer_id.
        # Record-level checks go through can_access_order, which does.
        return bool(actor.retailer_id)
    if role is Role.LOCATION_USER:
        return actor.location_id is not None and actor.location_id == location_id
    return False


def can_access_order(actor: Actor | None, retailer_id: str | None, location_id: str | None) -> bool:
    """Record-level eligibility for an order (or any record carrying retailer and location)."""
    if actor is None:
        return False
    role = coerce_role(actor.role)
    if role is None:
        return False
    if role in UNBOUNDED_ROLES:
        return True
    if role is Role.RETAILER:
        return can_access_retailer(actor, retailer_id)
    if role is Role.LOCATION_USER:
        return location_id is not None and can_access_location(actor, location_id)
    return False


def can_access_customer(actor: Actor | None, retailer_id: str | None, primary_location_id: str | None) -> bool:
    """Customers are scoped like orders: by retailer, and by primary location for location users."""
    return can_access_order(actor, retailer_id, primary_location_id)


def visible_navigation(actor: Actor | None) -> list[NavigationItem]:
    """Sidebar items visible to the actor, in master list order."""
    if not is_authenticated(actor):
        return []

    capabilities = capabilities_for(actor.role)
    items = [
        NavigationItem(
            label=entry.label,
            path=entry.route.path,
            route_name=entry.route.name,
            icon=entry.icon,
            # Dashboard is unconditional for any authenticated actor
            visible=entry.label == "Dashboard" or capabilities.allows(entry.route.required_capability),
        )
        for entry in NAVIGATION_MASTER_LIST
    ]
    return [item for item in items if item.visible]


def role_landing_route(role: Any) -> str:
    """Default post-login path for a role; the login page for anything unknown."""
    resolved = coerce_role(role)
    if resolved is None:
        return LOGIN.path
    return ROLE_LANDING_ROUTES[resolved.value].path


def can_access_route(actor: Actor | None, path: str) -> bool:
    route = resolve_route(path)
    if route is not None and route.public:
        return True
    if not is_authenticated(actor):
        return False
    if route is None:
        # Paths outside the route table are owner-only
        return coerce_role(actor.role) is Role.OWNER
    return capabilities_for(actor.role).allows(route.required_capability)


def actor_from_user(user) -> Actor:
    """Build an Actor from a User row (or anything with the same attributes)."""
    return Actor(
        id=str(user.id),
        role=user.role,
        retailer_id=user.retailer_id,
        location_id=user.location_id,
        email=getattr(user, "email", None),
    )
