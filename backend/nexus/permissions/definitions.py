# Overview: All capability definitions organized by category.
# Each capability is defined as: (code, name, description, category)

from .categories import CapabilityCategory


# -- NAVIGATION --

NAVIGATION_CAPABILITIES = [
    (
        "can_see_dashboard",
        "See Dashboard",
        "Open the role dashboard (granted to every authenticated role)",
        CapabilityCategory.NAVIGATION,
    ),
    (
        "can_see_settings",
        "See Settings",
        "Manage own profile and notification settings",
        CapabilityCategory.NAVIGATION,
    ),
]


# -- ORDERS --

ORDER_CAPABILITIES = [
    (
        "can_see_orders",
        "See Orders",
        "View orders inside the actor's retailer/location scope",
        CapabilityCategory.ORDERS,
    ),
    (
        "can_create_orders",
        "Create Orders",
        "Draft and submit new customer orders",
        CapabilityCategory.ORDERS,
    ),
    (
        "can_edit_orders",
        "Edit Orders",
        "Change status, items and addresses of existing orders",
        CapabilityCategory.ORDERS,
    ),
]


# -- CUSTOMERS --

CUSTOMER_CAPABILITIES = [
    (
        "can_see_customers",
        "See Customers",
        "View customers (filtered by retailer/location)",
        CapabilityCategory.CUSTOMERS,
    ),
    (
        "can_edit_customers",
        "Edit Customers",
        "Create and edit customer records",
        CapabilityCategory.CUSTOMERS,
    ),
]


# -- CATALOG --

CATALOG_CAPABILITIES = [
    (
        "can_see_products",
        "See Products",
        "Browse the product catalog",
        CapabilityCategory.CATALOG,
    ),
    (
        "can_manage_products",
        "Manage Products",
        "Create and edit products and variants (distributor only)",
        CapabilityCategory.CATALOG,
    ),
]


# -- CLAIMS --

CLAIM_CAPABILITIES = [
    (
        "can_see_claims",
        "See Claims",
        "View claims and repairs (filtered by role and location)",
        CapabilityCategory.CLAIMS,
    ),
    (
        "can_create_claims",
        "Create Claims",
        "Submit new claims",
        CapabilityCategory.CLAIMS,
    ),
]


# -- FULFILLMENT --

FULFILLMENT_CAPABILITIES = [
    (
        "can_see_shipping",
        "See Shipping",
        "Warehouse fulfillment dashboard",
        CapabilityCategory.FULFILLMENT,
    ),
]


# -- ORGANIZATION --

ORGANIZATION_CAPABILITIES = [
    (
        "can_see_retailers",
        "See Retailers",
        "View retailers and their locations (distributor only)",
        CapabilityCategory.ORGANIZATION,
    ),
    (
        "can_manage_retailers",
        "Manage Retailers",
        "Create retailers and locations (distributor only)",
        CapabilityCategory.ORGANIZATION,
    ),
]


# -- ADMINISTRATION --

ADMINISTRATION_CAPABILITIES = [
    (
        "can_see_admin",
        "See Admin",
        "Open the admin dashboard (distributor only)",
        CapabilityCategory.ADMINISTRATION,
    ),
    (
        "can_manage_users",
        "Manage Users",
        "Create users and assign roles (distributor only)",
        CapabilityCategory.ADMINISTRATION,
    ),
]


# -- REPORTING --

REPORTING_CAPABILITIES = [
    (
        "can_see_reports",
        "See Reports",
        "Access reports (retailer-scoped for retailer managers)",
        CapabilityCategory.REPORTING,
    ),
]


CAPABILITY_DEFINITIONS = (
    NAVIGATION_CAPABILITIES
    + ORDER_CAPABILITIES
    + CUSTOMER_CAPABILITIES
    + CATALOG_CAPABILITIES
    + CLAIM_CAPABILITIES
    + FULFILLMENT_CAPABILITIES
    + ORGANIZATION_CAPABILITIES
    + ADMINISTRATION_CAPABILITIES
    + REPORTING_CAPABILITIES
)
