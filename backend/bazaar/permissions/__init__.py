# Overview: Role and capability package.
# Re-exports all public APIs for package-level imports.

from .categories import CapabilityCategory
from .definitions import (
    CAPABILITY_DEFINITIONS,
    CASH_CAPABILITIES,
    MERCHANT_CAPABILITIES,
    POINT_CARD_CAPABILITIES,
    DASHBOARD_CAPABILITIES,
    MAINTENANCE_CAPABILITIES,
)
from .roles import Role, VALID_ROLES, MANAGER_ROLES, CAPABILITY_ROLES
from .helpers import (
    get_all_capability_codes,
    get_capabilities_by_category,
    get_capability_definition,
    get_capabilities_for_role,
    get_roles_for_capability,
    validate_capability_code,
    validate_role,
)

__all__ = [
    "CapabilityCategory",
    "CAPABILITY_DEFINITIONS",
    "CASH_CAPABILITIES",
    "MERCHANT_CAPABILITIES",
    "POINT_CARD_CAPABILITIES",
    "DASHBOARD_CAPABILITIES",
    "MAINTENANCE_CAPABILITIES",
    "Role",
    "VALID_ROLES",
    "MANAGER_ROLES",
    "CAPABILITY_ROLES",
    "get_all_capability_codes",
    "get_capabilities_by_category",
    "get_capability_definition",
    "get_capabilities_for_role",
    "get_roles_for_capability",
    "validate_capability_code",
    "validate_role",
]
