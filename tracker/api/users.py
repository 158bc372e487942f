"""
Users API endpoints.

Admin-only account provisioning and role management, plus self-profile
update for display name. Sign-in itself is handled by the upstream proxy, so
provisioning records the email, name and role only.
"""
import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tracker.db.database import get_db
from tracker.api.deps import get_current_user_context, require_roles
from tracker.db import schemas
from tracker.db.repositories import users as user_repo
from tracker.audit import AuditAction, log_user
from tracker.utils.role_permissions import ROLE_ADMIN, role_label

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])  # normalized prefix


@router.post("/", response_model=schemas.CreatedUser, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: schemas.UserCreate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(ROLE_ADMIN)),
):
    admin, _ctx = user_context
    if user_repo.get_user_by_email(db, payload.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A user with this email already exists")
    try:
        user = user_repo.create_user_with_role(
            db,
            email=payload.email,
            display_name=payload.display_name,
            role=payload.role.value,
            auth_provider="admin",
        )
    except RuntimeError as exc:
        logger.error("user_provision_failed: email=%s error=%s", payload.email, exc)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Could not create user")
    logger.info("user_provisioned: email=%s role=%s by=%s", user.email, user.role, admin.email)
    log_user(
        db,
        actor_user_id=admin.id,
        user_id=user.id,
        action=AuditAction.USER_CREATE,
        metadata={"email": user.email, "role": user.role},
    )
    return schemas.CreatedUser(id=user.id, email=user.email, display_name=user.display_name, role=user.role)


@router.get("/", response_model=List[schemas.UserWithRole])
def list_users(
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(ROLE_ADMIN)),
):
    return [
        schemas.UserWithRole(
            user_id=u.id,
            display_name=u.display_name,
            email=u.email,
            role=u.role,
            role_label=role_label(u.role),
        )
        for u in user_repo.list_users_with_roles(db)
    ]


@router.patch("/me")
def update_me(
    payload: dict,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ctx = user_context
    display_name = (payload.get("display_name") or None)

    if display_name is not None:
        s = str(display_name).strip()
        if len(s) == 0 or len(s) > 80:
            raise HTTPException(status_code=422, detail="display_name must be 1..80 characters")
        user = user_repo.update_display_name(db, user, s)

    return {"id": str(user.id), "email": user.email, "display_name": user.display_name, "role": user.role}


@router.patch("/{user_id}/role", response_model=schemas.UserWithRole)
def change_role(
    user_id: uuid.UUID,
    payload: schemas.RoleUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(require_roles(ROLE_ADMIN)),
):
    admin, _ctx = user_context
    user = user_repo.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    previous = user.role
    user = user_repo.set_role(db, user, payload.role.value)
    if previous != user.role:
        logger.info("user_role_changed: email=%s %s->%s by=%s", user.email, previous, user.role, admin.email)
        log_user(
            db,
            actor_user_id=admin.id,
            user_id=user.id,
            action=AuditAction.USER_ROLE_CHANGE,
            metadata={"old_role": previous, "new_role": user.role},
        )
    return schemas.UserWithRole(
        user_id=user.id,
        display_name=user.display_name,
        email=user.email,
        role=user.role,
        role_label=role_label(user.role),
    )
