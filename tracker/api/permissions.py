"""
Permission checks for demand access control.

Key helpers:
- assigned_scope(current_user)
- can_view_demand(demand, current_user)
- can_edit_details(demand, current_user)
- can_upload_deliverable(demand, current_user)
- can_view_deliverable(demand, current_user)
"""
from typing import Optional, Dict, Any
from tracker.utils.role_permissions import (
    ROLE_ADMIN,
    ROLE_PRODUCER,
    CAP_DOWNLOAD_DELIVERABLE,
    CAP_MANAGE_DEMANDS,
    CAP_UPLOAD_DELIVERABLE,
    role_has_capability,
)
from tracker.utils.workflow import STATUS_IN_PRODUCTION, STATUS_DONE


def _role(current_user: Optional[Dict[str, Any]]) -> Optional[str]:
    if not current_user:
        return None
    return current_user.get("role")


def is_assigned_producer(demand, current_user: Optional[Dict[str, Any]]) -> bool:
    if demand is None or _role(current_user) != ROLE_PRODUCER:
        return False
    return demand.producer_id == current_user.get("id")


def assigned_scope(current_user: Optional[Dict[str, Any]]):
    """Producers only see their own demands; returns the producer id to narrow by."""
    if _role(current_user) == ROLE_PRODUCER:
        return current_user.get("id")
    return None


def can_view_demand(demand, current_user: Optional[Dict[str, Any]]) -> bool:
    if demand is None:
        return False
    role = _role(current_user)
    if not role:
        return False
    if role == ROLE_PRODUCER:
        return demand.producer_id == current_user.get("id")
    return True


def can_manage_demands(current_user: Optional[Dict[str, Any]]) -> bool:
    return role_has_capability(_role(current_user), CAP_MANAGE_DEMANDS)


def can_edit_details(demand, current_user: Optional[Dict[str, Any]]) -> bool:
    """Details and dates stay with the creator; admins may always change them."""
    if demand is None or not current_user:
        return False
    if _role(current_user) == ROLE_ADMIN:
        return True
    return demand.created_by == current_user.get("id")


def can_edit_phases(demand, current_user: Optional[Dict[str, Any]]) -> bool:
    return is_assigned_producer(demand, current_user) or can_manage_demands(current_user)


def can_upload_deliverable(demand, current_user: Optional[Dict[str, Any]]) -> bool:
    role = _role(current_user)
    if not role_has_capability(role, CAP_UPLOAD_DELIVERABLE):
        return False
    if role == ROLE_PRODUCER:
        return is_assigned_producer(demand, current_user)
    return True


def can_download_deliverable(current_user: Optional[Dict[str, Any]]) -> bool:
    return role_has_capability(_role(current_user), CAP_DOWNLOAD_DELIVERABLE)


def can_view_deliverable(demand, current_user: Optional[Dict[str, Any]]) -> bool:
    """Producers see it once production starts; everyone else once it is done."""
    if not can_view_demand(demand, current_user):
        return False
    if _role(current_user) == ROLE_PRODUCER:
        return demand.status in (STATUS_IN_PRODUCTION, STATUS_DONE)
    return demand.status == STATUS_DONE
