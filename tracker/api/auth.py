"""
Authentication helpers and identity resolution.

Parses proxy headers, normalizes emails, and upserts users. Emails listed in
ADMIN_EMAILS receive the admin role when they have none.
"""
import logging
import os
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from tracker.db import models
from tracker.db.repositories import users as user_repo
from tracker.utils.role_permissions import ROLE_ADMIN

logger = logging.getLogger(__name__)


def _normalize_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    email = email.strip().lower()
    return email or None


def _normalize_list_env(var_name: str) -> set:
    raw = os.getenv(var_name, "")
    values = set()
    for entry in raw.split(","):
        cleaned = entry.strip().strip('"').strip("'")
        if cleaned:
            values.add(cleaned.lower())
    return values


def _admin_emails() -> set:
    return _normalize_list_env("ADMIN_EMAILS")


def resolve_identity_from_headers(
    x_auth_request_user: Optional[str],
    x_auth_request_email: Optional[str],
    x_forwarded_user: Optional[str],
    x_forwarded_email: Optional[str],
) -> Tuple[Optional[str], Optional[str]]:
    user = x_auth_request_user or x_forwarded_user
    email = _normalize_email(x_auth_request_email or x_forwarded_email)
    return user, email


def get_or_create_user(db: Session, email: str, display_name: Optional[str] = None, *, default_role: Optional[str] = None) -> models.User:
    email = _normalize_email(email)
    user = user_repo.get_user_by_email(db, email)
    if not user:
        user = models.User(
            email=email,
            display_name=(display_name or "").strip() or email.split("@")[0],
            auth_provider="proxy",
        )
        db.add(user)
        db.flush()
        db.commit()
        db.refresh(user)
        logger.info("user_first_seen: email=%s", email)

    if user.role is None:
        role = ROLE_ADMIN if email in _admin_emails() else default_role
        if role:
            user_repo.set_role(db, user, role)
            logger.info("user_role_granted: email=%s role=%s", email, role)
    return user
