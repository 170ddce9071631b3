# Overview: Capability category constants for grouping related capabilities.


class CapabilityCategory:
    """Capability categories for organization and CLI display."""
    CASH = "CASH"
    MERCHANTS = "MERCHANTS"
    POINT_CARDS = "POINT_CARDS"
    DASHBOARDS = "DASHBOARDS"
    MAINTENANCE = "MAINTENANCE"
