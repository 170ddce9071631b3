# Overview: Utility functions for capability lookups and validation.

from .definitions import CAPABILITY_DEFINITIONS
from .roles import CAPABILITY_ROLES, VALID_ROLES


def get_all_capability_codes():
    """Get list of all capability codes."""
    return [cap[0] for cap in CAPABILITY_DEFINITIONS]


def get_capabilities_by_category(category):
    """Get all capabilities in a category."""
    return [cap for cap in CAPABILITY_DEFINITIONS if cap[3] == category]


def get_capability_definition(code):
    """Get full definition for a capability code."""
    for cap in CAPABILITY_DEFINITIONS:
        if cap[0] == code:
            return {
                "code": cap[0],
                "name": cap[1],
                "description": cap[2],
                "category": cap[3],
                "roles": list(CAPABILITY_ROLES.get(cap[0], ())),
            }
    return None


def validate_capability_code(code):
    """Check if a capability code is valid."""
    return code in CAPABILITY_ROLES


def validate_role(role):
    """Check if a role tag belongs to the closed role set."""
    return role in VALID_ROLES


def get_roles_for_capability(code):
    """Roles granting a capability, in preferred order."""
    if code not in CAPABILITY_ROLES:
        raise ValueError(f"Unknown capability: {code}")
    return CAPABILITY_ROLES[code]


def get_capabilities_for_role(role):
    """Capability codes granted by one role tag."""
    return [code for code, roles in CAPABILITY_ROLES.items() if role in roles]
