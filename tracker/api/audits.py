"""
Audit log API endpoints.

Query and present audit logs; administrators only.
"""
from typing import Optional, List
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tracker.db.database import get_db
from tracker.db import schemas
from tracker.db.repositories import audits as audit_repo
from tracker.api.deps import require_capability
from tracker.utils.role_permissions import CAP_VIEW_AUDIT

router = APIRouter(prefix="/audits", tags=["audits"])


@router.get("/", response_model=List[schemas.AuditLog])
def list_audit_logs(
    user_id: Optional[uuid.UUID] = None,
    action_type: Optional[str] = None,
    target_type: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_context=Depends(require_capability(CAP_VIEW_AUDIT)),
):
    audit_logs = audit_repo.get_audit_logs(
        db,
        user_id=user_id,
        action_type=action_type,
        target_type=target_type,
        skip=skip,
        limit=limit,
    )
    # Schema expects .metadata but the model attribute is metadata_json
    return [
        schemas.AuditLog(
            id=log.id,
            action_type=log.action_type,
            status=log.status,
            target_type=log.target_type,
            target_id=log.target_id,
            reason=log.reason,
            metadata=log.metadata_json,
            actor_user_id=log.actor_user_id,
            created_at=log.created_at,
        )
        for log in audit_logs
    ]
