"""
Audit logging helpers and enums.

Centralized helpers to persist normalized audit records with consistent
schema; includes convenience wrappers per target type. Callers treat audit
writes as best-effort via ``safe_log``.
"""
from __future__ import annotations
import logging
import uuid
from enum import Enum
from typing import Any, Optional, Dict
from sqlalchemy.orm import Session

from tracker.db import schemas
from tracker.db.repositories import audits as audit_repo

logger = logging.getLogger(__name__)


class AuditAction(str, Enum):
    # Demand
    DEMAND_CREATE = "demand_create"
    DEMAND_UPDATE = "demand_update"
    DEMAND_DELETE = "demand_delete"
    DEMAND_STATUS_CHANGE = "demand_status_change"
    DEMAND_PHASE_CHANGE = "demand_phase_change"
    # Deliverable
    DELIVERABLE_UPLOAD = "deliverable_upload"
    DELIVERABLE_COMMENT = "deliverable_comment"
    # Availability
    AVAILABILITY_CREATE = "availability_create"
    AVAILABILITY_DELETE = "availability_delete"
    # Users
    USER_CREATE = "user_create"
    USER_ROLE_CHANGE = "user_role_change"
    SETUP_COMPLETE = "setup_complete"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


def log(
    db: Session,
    *,
    action: AuditAction | str,
    status: AuditStatus | str = AuditStatus.SUCCESS,
    target_type: str,
    target_id: Optional[uuid.UUID] = None,
    actor_user_id: Optional[uuid.UUID],
    reason: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> schemas.AuditLog:
    """Central audit logging helper."""
    # Persist pure string values, not Enum reprs
    action_value = action.value if isinstance(action, AuditAction) else str(action)
    status_value = status.value if isinstance(status, AuditStatus) else str(status)
    audit_log = schemas.AuditLogCreate(
        action_type=action_value,
        status=status_value,
        target_type=target_type,
        target_id=target_id,
        reason=reason,
        metadata=metadata or {},
    )
    return audit_repo.create_audit_log(db, audit_log=audit_log, actor_user_id=actor_user_id)


def safe_log(db: Session, **kwargs) -> None:
    """Write an audit row; failures are logged and never reach the caller."""
    try:
        log(db, **kwargs)
    except Exception as exc:
        db.rollback()
        logger.warning("audit_write_failed: action=%s error=%s", kwargs.get("action"), exc)


__all__ = ["AuditAction", "AuditStatus", "log", "safe_log"]


def log_demand(db: Session, *, actor_user_id: uuid.UUID, demand_id: uuid.UUID, action: AuditAction, status: AuditStatus | str = AuditStatus.SUCCESS, metadata: Optional[Dict[str, Any]] = None):
    safe_log(
        db,
        action=action,
        status=status,
        target_type="demand",
        target_id=demand_id,
        actor_user_id=actor_user_id,
        metadata=metadata,
    )


def log_user(db: Session, *, actor_user_id: Optional[uuid.UUID], user_id: uuid.UUID, action: AuditAction, metadata: Optional[Dict[str, Any]] = None):
    safe_log(
        db,
        action=action,
        target_type="user",
        target_id=user_id,
        actor_user_id=actor_user_id,
        metadata=metadata,
    )


__all__.extend(["log_demand", "log_user"])
