# Overview: Fixed role enumeration and default role -> capability grants.

from enum import Enum


class Role(str, Enum):
    """Roles an authenticated actor can hold."""

    OWNER = "owner"
    BACKOFFICE = "backoffice"
    RETAILER = "retailer"
    LOCATION_USER = "location_user"


# Roles with access to every retailer and location.
UNBOUNDED_ROLES = frozenset({Role.OWNER, Role.BACKOFFICE})


_RETAILER_STAFF = [
    "can_see_dashboard",
    "can_see_settings",
    "can_see_orders",
    "can_create_orders",
    "can_edit_orders",
    "can_see_customers",
    "can_edit_customers",
    "can_see_products",
    "can_see_claims",
    "can_create_claims",
]

_DISTRIBUTOR_STAFF = [
    "can_see_dashboard",
    "can_see_settings",
    "can_see_orders",
    "can_edit_orders",
    "can_see_customers",
    "can_edit_customers",
    "can_see_products",
    "can_manage_products",
    "can_see_claims",
    "can_see_shipping",
    "can_see_retailers",
    "can_manage_retailers",
    "can_see_admin",
    "can_manage_users",
    "can_see_reports",
]


DEFAULT_ROLE_CAPABILITIES = {
    # Owner holds the union of every other role's grants
    Role.OWNER: sorted(set(_DISTRIBUTOR_STAFF) | set(_RETAILER_STAFF)),

    # Backoffice manages orders and shipments but does not originate orders or claims
    Role.BACKOFFICE: list(_DISTRIBUTOR_STAFF),

    # Retailer managers see every location under their retailer, plus retailer reports
    Role.RETAILER: _RETAILER_STAFF + ["can_see_reports"],

    # Location staff are limited to their own location
    Role.LOCATION_USER: list(_RETAILER_STAFF),
}
