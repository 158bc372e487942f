"""
First-run setup endpoints.

Until ``app_config.setup_complete`` is true, anyone may register the first
administrator. Afterwards the endpoint answers 409.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tracker.db.database import get_db
from tracker.db import schemas
from tracker.db.repositories import app_config as config_repo
from tracker.db.repositories import users as user_repo
from tracker.audit import AuditAction, log_user
from tracker.utils.role_permissions import ROLE_ADMIN

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/setup", tags=["setup"])


@router.get("/status", response_model=schemas.SetupStatus)
def setup_status(db: Session = Depends(get_db)):
    return schemas.SetupStatus(complete=config_repo.is_setup_complete(db))


@router.post("/admin", response_model=schemas.CreatedUser, status_code=status.HTTP_201_CREATED)
def create_first_admin(
    payload: schemas.SetupAdminCreate,
    db: Session = Depends(get_db),
):
    if config_repo.is_setup_complete(db):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Setup already completed")

    user = user_repo.get_user_by_email(db, payload.email)
    if user is None:
        user = user_repo.create_user_with_role(
            db,
            email=payload.email,
            display_name=payload.display_name,
            role=ROLE_ADMIN,
            auth_provider="setup",
        )
    else:
        user.display_name = payload.display_name.strip()
        user_repo.set_role(db, user, ROLE_ADMIN)
    config_repo.set_value(db, config_repo.SETUP_COMPLETE_KEY, True)
    logger.info("setup_completed: admin=%s", user.email)
    log_user(db, actor_user_id=user.id, user_id=user.id, action=AuditAction.SETUP_COMPLETE)
    return schemas.CreatedUser(id=user.id, email=user.email, display_name=user.display_name, role=user.role)
