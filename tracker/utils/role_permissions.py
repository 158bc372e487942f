"""
Role-based capability table for tracker users.

Every user holds at most one role. Capabilities are looked up here so the
route layer never hard-codes role lists.
"""

from typing import Dict, FrozenSet, Optional, Set
from enum import Enum


# Central role constants to ensure consistency across the codebase
ROLE_REQUESTER = "atendente"
ROLE_PRODUCER = "produtor"
ROLE_EXECUTIVE = "ceo"
ROLE_ADMIN = "admin"

ROLE_LABELS: Dict[str, str] = {
    ROLE_REQUESTER: "Atendente",
    ROLE_PRODUCER: "Produtor",
    ROLE_EXECUTIVE: "CEO",
    ROLE_ADMIN: "Admin",
}

ALLOWED_ROLES = frozenset(ROLE_LABELS.keys())

# Derived role groups
MANAGER_ROLES: FrozenSet[str] = frozenset({ROLE_REQUESTER, ROLE_EXECUTIVE, ROLE_ADMIN})

CAP_CREATE_DEMAND = "create_demand"
CAP_MANAGE_DEMANDS = "manage_demands"
CAP_FILTER_DEMANDS = "filter_demands"
CAP_UPLOAD_DELIVERABLE = "upload_deliverable"
CAP_DOWNLOAD_DELIVERABLE = "download_deliverable"
CAP_MANAGE_OWN_AVAILABILITY = "manage_own_availability"
CAP_VIEW_ALL_AVAILABILITY = "view_all_availability"
CAP_MANAGE_USERS = "manage_users"
CAP_VIEW_AUDIT = "view_audit"

ROLE_CAPABILITIES: Dict[str, FrozenSet[str]] = {
    CAP_CREATE_DEMAND: frozenset({ROLE_REQUESTER, ROLE_PRODUCER, ROLE_EXECUTIVE, ROLE_ADMIN}),
    CAP_MANAGE_DEMANDS: MANAGER_ROLES,
    CAP_FILTER_DEMANDS: MANAGER_ROLES,
    # Producers additionally need to be assigned to the demand
    CAP_UPLOAD_DELIVERABLE: frozenset({ROLE_PRODUCER, ROLE_REQUESTER, ROLE_EXECUTIVE, ROLE_ADMIN}),
    CAP_DOWNLOAD_DELIVERABLE: MANAGER_ROLES,
    CAP_MANAGE_OWN_AVAILABILITY: frozenset({ROLE_PRODUCER}),
    CAP_VIEW_ALL_AVAILABILITY: MANAGER_ROLES,
    CAP_MANAGE_USERS: frozenset({ROLE_ADMIN}),
    CAP_VIEW_AUDIT: frozenset({ROLE_ADMIN}),
}


class RoleEnum(str, Enum):
    """Enum for tracker roles used in schemas and validation."""
    atendente = ROLE_REQUESTER
    produtor = ROLE_PRODUCER
    ceo = ROLE_EXECUTIVE
    admin = ROLE_ADMIN


def get_allowed_roles() -> Set[str]:
    """Get the set of all allowed roles."""
    return set(ALLOWED_ROLES)


def get_manager_roles() -> Set[str]:
    """Roles that see every demand and may edit, delete and filter them."""
    return set(MANAGER_ROLES)


def validate_role(role: str) -> None:
    """
    Validate that a role is allowed.

    Raises:
        ValueError: If role is not allowed
    """
    if role not in ALLOWED_ROLES:
        raise ValueError(f"Invalid role '{role}'. Allowed roles: {sorted(ALLOWED_ROLES)}")


def roles_for(capability: str) -> FrozenSet[str]:
    if capability not in ROLE_CAPABILITIES:
        raise ValueError(f"Unknown capability: {capability}")
    return ROLE_CAPABILITIES[capability]


def role_has_capability(role: Optional[str], capability: str) -> bool:
    """Return True if the role is granted the capability. Missing roles are denied."""
    if not role:
        return False
    return role in roles_for(capability)


def role_label(role: Optional[str]) -> Optional[str]:
    if not role:
        return None
    return ROLE_LABELS.get(role, role)


def is_manager(role: Optional[str]) -> bool:
    return bool(role) and role in MANAGER_ROLES
