# Overview: All capability definitions organized by category.
# Each capability is defined as: (code, name, description, category)

from .categories import CapabilityCategory


# -- CASH --

CASH_CAPABILITIES = [
    (
        "CONFIRM_SELLER_CASH",
        "Confirm Seller Cash",
        "Confirm cash handed over by a seller and move it into cash on hand",
        CapabilityCategory.CASH,
    ),
]


# -- MERCHANTS --

MERCHANT_CAPABILITIES = [
    (
        "CANCEL_MERCHANT_PAYMENT",
        "Cancel Merchant Payment",
        "Cancel a pending customer payment to the caller's own stall",
        CapabilityCategory.MERCHANTS,
    ),
    (
        "TOGGLE_MERCHANT_STATUS",
        "Toggle Merchant Status",
        "Open or pause a stall (owners only for their own stall)",
        CapabilityCategory.MERCHANTS,
    ),
    (
        "ASSIGN_MERCHANT_ASIST",
        "Assign Merchant Assistant",
        "Attach a merchantAsist user to a stall",
        CapabilityCategory.MERCHANTS,
    ),
]


# -- POINT CARDS --

POINT_CARD_CAPABILITIES = [
    (
        "QUERY_POINT_CARD",
        "Query Point Card",
        "Read a scanned point card's balance and status",
        CapabilityCategory.POINT_CARDS,
    ),
]


# -- DASHBOARDS --

DASHBOARD_CAPABILITIES = [
    (
        "VIEW_SELLER_MANAGER_DASHBOARD",
        "View Seller Manager Dashboard",
        "Read own cash statistics and managed users",
        CapabilityCategory.DASHBOARDS,
    ),
    (
        "VIEW_CUSTOMER_DASHBOARD",
        "View Customer Dashboard",
        "Read own customer account",
        CapabilityCategory.DASHBOARDS,
    ),
]


# -- MAINTENANCE --

MAINTENANCE_CAPABILITIES = [
    (
        "RESET_DAILY_REVENUE",
        "Reset Daily Revenue",
        "Zero daily merchant and assistant counters (scheduled job)",
        CapabilityCategory.MAINTENANCE,
    ),
]


# Combined list of all capabilities (preserves ordering)
CAPABILITY_DEFINITIONS = (
    CASH_CAPABILITIES
    + MERCHANT_CAPABILITIES
    + POINT_CARD_CAPABILITIES
    + DASHBOARD_CAPABILITIES
    + MAINTENANCE_CAPABILITIES
)
