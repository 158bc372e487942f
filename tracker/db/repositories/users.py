"""
User and role repository functions.

One role row per user; users without a role row cannot use the tracker.
"""
from __future__ import annotations

import uuid
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from tracker.db import models
from tracker.utils.role_permissions import ROLE_PRODUCER, validate_role


def get_user(db: Session, user_id: uuid.UUID) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(func.lower(models.User.email) == (email or "").strip().lower()).first()


def get_role(db: Session, user_id: uuid.UUID) -> Optional[str]:
    row = db.query(models.UserRole).filter(models.UserRole.user_id == user_id).first()
    return row.role if row else None


def set_role(db: Session, user: models.User, role: str, *, commit: bool = True) -> models.User:
    """Assign ``role`` to ``user``, replacing any previous role."""
    validate_role(role)
    if user.role_assignment is None:
        user.role_assignment = models.UserRole(role=role)
    else:
        user.role_assignment.role = role
    if commit:
        db.commit()
        db.refresh(user)
    return user


def create_user_with_role(db: Session, *, email: str, display_name: str, role: str, auth_provider: Optional[str] = None) -> models.User:
    validate_role(role)
    try:
        user = models.User(
            email=email.strip().lower(),
            display_name=display_name.strip(),
            auth_provider=auth_provider,
        )
        user.role_assignment = models.UserRole(role=role)
        db.add(user)
        db.commit()
    except Exception as e:
        db.rollback()
        raise RuntimeError(f"Failed to create user {email}: {str(e)}")
    db.refresh(user)
    return user


def list_users_with_roles(db: Session) -> List[models.User]:
    return (
        db.query(models.User)
        .join(models.UserRole, models.UserRole.user_id == models.User.id)
        .order_by(func.lower(models.User.display_name), models.User.email)
        .all()
    )


def list_producers(db: Session) -> List[models.User]:
    return (
        db.query(models.User)
        .join(models.UserRole, models.UserRole.user_id == models.User.id)
        .filter(models.UserRole.role == ROLE_PRODUCER)
        .order_by(func.lower(models.User.display_name))
        .all()
    )


def is_producer(db: Session, user_id: uuid.UUID) -> bool:
    return get_role(db, user_id) == ROLE_PRODUCER


def update_display_name(db: Session, user: models.User, display_name: str) -> models.User:
    user.display_name = display_name
    db.commit()
    db.refresh(user)
    return user
