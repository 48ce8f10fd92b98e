# Overview: Capability category constants for grouping related capabilities.


class CapabilityCategory:
    """Capability categories for organization and UI display."""
    NAVIGATION = "NAVIGATION"
    ORDERS = "ORDERS"
    CUSTOMERS = "CUSTOMERS"
    CATALOG = "CATALOG"
    CLAIMS = "CLAIMS"
    FULFILLMENT = "FULFILLMENT"
    ORGANIZATION = "ORGANIZATION"
    ADMINISTRATION = "ADMINISTRATION"
    REPORTING = "REPORTING"
