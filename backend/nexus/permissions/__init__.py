# Overview: Capability system package.
# Re-exports all public APIs so callers import from nexus.permissions directly.

from .categories import CapabilityCategory
from .definitions import (
    CAPABILITY_DEFINITIONS,
    NAVIGATION_CAPABILITIES,
    ORDER_CAPABILITIES,
    CUSTOMER_CAPABILITIES,
    CATALOG_CAPABILITIES,
    CLAIM_CAPABILITIES,
    FULFILLMENT_CAPABILITIES,
    ORGANIZATION_CAPABILITIES,
    ADMINISTRATION_CAPABILITIES,
    REPORTING_CAPABILITIES,
)
from .roles import Role, UNBOUNDED_ROLES, DEFAULT_ROLE_CAPABILITIES
from .routes import (
    RouteDefinition,
    NavigationEntry,
    ROUTE_TABLE,
    ROUTES_BY_NAME,
    NAVIGATION_MASTER_LIST,
    ROLE_LANDING_ROUTES,
    resolve_route,
)
from .helpers import (
    get_all_capability_codes,
    get_capabilities_by_category,
    get_capability_definition,
)

__all__ = [
    "CapabilityCategory",
    "CAPABILITY_DEFINITIONS",
    "NAVIGATION_CAPABILITIES",
    "ORDER_CAPABILITIES",
    "CUSTOMER_CAPABILITIES",
    "CATALOG_CAPABILITIES",
    "CLAIM_CAPABILITIES",
    "FULFILLMENT_CAPABILITIES",
    "ORGANIZATION_CAPABILITIES",
    "ADMINISTRATION_CAPABILITIES",
    "REPORTING_CAPABILITIES",
    "Role",
    "UNBOUNDED_ROLES",
    "DEFAULT_ROLE_CAPABILITIES",
    "RouteDefinition",
    "NavigationEntry",
    "ROUTE_TABLE",
    "ROUTES_BY_NAME",
    "NAVIGATION_MASTER_LIST",
    "ROLE_LANDING_ROUTES",
    "resolve_route",
    "get_all_capability_codes",
    "get_capabilities_by_category",
    "get_capability_definition",
]
