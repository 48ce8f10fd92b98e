# Overview: Named route table and the master navigation list built on top of it.
# Adding a route here requires a matching capability in DEFAULT_ROLE_CAPABILITIES
# and, when it appears in the sidebar, an entry in NAVIGATION_MASTER_LIST.

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class RouteDefinition:
    name: str
    path: str
    required_capability: str | None
    description: str
    public: bool = False

    def matches(self, path: str) -> bool:
        if self.path == path:
            return True
        return _pattern_for(self.path).match(path) is not None


def _pattern_for(route_path: str) -> re.Pattern:
    # "/orders/:id" matches "/orders/123" but not "/orders/123/edit"
    parts = [
        "[^/]+" if segment.startswith(":") else re.escape(segment)
        for segment in route_path.split("/")
    ]
    return re.compile("^" + "/".join(parts) + "$")


LOGIN = RouteDefinition("LOGIN", "/auth/login", None, "Sign-in page", public=True)
DASHBOARD = RouteDefinition("DASHBOARD", "/dashboard", "can_see_dashboard", "Unified dashboard, data filtered by scope")
ORDERS = RouteDefinition("ORDERS", "/orders", "can_see_orders", "Order list filtered by role and location")
NEW_ORDER = RouteDefinition("NEW_ORDER", "/orders/new", "can_create_orders", "Create a new customer order")
ORDER_DETAIL = RouteDefinition("ORDER_DETAIL", "/orders/:id", "can_see_orders", "Order detail")
CUSTOMERS = RouteDefinition("CUSTOMERS", "/customers", "can_see_customers", "Customer list filtered by retailer/location")
CUSTOMER_DETAIL = RouteDefinition("CUSTOMER_DETAIL", "/customers/:id", "can_see_customers", "Customer detail")
PRODUCTS = RouteDefinition("PRODUCTS", "/products", "can_see_products", "Product catalog")
CLAIMS = RouteDefinition("CLAIMS", "/claims", "can_see_claims", "Claims and repairs")
SHIPPING = RouteDefinition("SHIPPING", "/shipping", "can_see_shipping", "Warehouse fulfillment dashboard")
RETAILERS = RouteDefinition("RETAILERS", "/retailers", "can_see_retailers", "Retailer management")
ADMIN = RouteDefinition("ADMIN", "/admin", "can_see_admin", "Admin dashboard")
REPORTS = RouteDefinition("REPORTS", "/reports", "can_see_reports", "Reports")
SETTINGS = RouteDefinition("SETTINGS", "/settings", "can_see_settings", "Profile and notification settings")

# Literal routes come before parameterized ones so "/orders/new" never resolves to ORDER_DETAIL.
ROUTE_TABLE = (
    LOGIN,
    DASHBOARD,
    ORDERS,
    NEW_ORDER,
    ORDER_DETAIL,
    CUSTOMERS,
    CUSTOMER_DETAIL,
    PRODUCTS,
    CLAIMS,
    SHIPPING,
    RETAILERS,
    ADMIN,
    REPORTS,
    SETTINGS,
)

ROUTES_BY_NAME = {route.name: route for route in ROUTE_TABLE}


def resolve_route(path: str) -> RouteDefinition | None:
    """Find the route definition for a concrete path, ignoring query strings."""
    if not path:
        return None
    clean = path.split("?", 1)[0].split("#", 1)[0]
    if len(clean) > 1:
        clean = clean.rstrip("/")
    for route in ROUTE_TABLE:
        if route.matches(clean):
            return route
    return None


@dataclass(frozen=True)
class NavigationEntry:
    label: str
    route: RouteDefinition
    icon: str


# Fixed sidebar order
NAVIGATION_MASTER_LIST = (
    NavigationEntry("Dashboard", DASHBOARD, "LayoutDashboard"),
    NavigationEntry("Orders", ORDERS, "ShoppingCart"),
    NavigationEntry("New Order", NEW_ORDER, "Plus"),
    NavigationEntry("Customers", CUSTOMERS, "Users"),
    NavigationEntry("Products", PRODUCTS, "Package"),
    NavigationEntry("Claims", CLAIMS, "AlertCircle"),
    NavigationEntry("Shipping", SHIPPING, "Truck"),
    NavigationEntry("Retailers", RETAILERS, "Building2"),
    NavigationEntry("Admin", ADMIN, "Settings"),
    NavigationEntry("Reports", REPORTS, "BarChart3"),
)


# Default post-login route per role value
ROLE_LANDING_ROUTES = {
    "owner": ADMIN,
    "backoffice": ORDERS,
    "retailer": DASHBOARD,
    "location_user": NEW_ORDER,
}
