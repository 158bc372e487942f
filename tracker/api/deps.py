"""
API dependency helpers.

Provides dependency-resolved user context and role gates for routes.
"""
import logging
from typing import Optional, Tuple, Dict, Any

from fastapi import Header, HTTPException, status, Depends
from sqlalchemy.orm import Session

from tracker.db.database import get_db
from tracker.api.auth import resolve_identity_from_headers, get_or_create_user
from tracker.utils.role_permissions import role_has_capability
from tracker.utils.runtime import dev_mode_active, dev_mode_role

logger = logging.getLogger(__name__)

DEV_USER_EMAIL = "dev@localhost"
DEV_USER_NAME = "Development User"


def _dev_mode() -> bool:
    try:
        return dev_mode_active()
    except RuntimeError as exc:
        logger.error("DEV_MODE misconfiguration detected: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="DEV_MODE misconfigured")


# Contract:
# Returns (sqlalchemy User model, current_user_context_dict)
# Raises 401 if identity cannot be resolved.

def get_current_user_context(
    db: Session = Depends(get_db),
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
) -> Tuple[Any, Dict[str, Any]]:
    if _dev_mode():
        user = get_or_create_user(db, email=DEV_USER_EMAIL, display_name=DEV_USER_NAME, default_role=dev_mode_role())
    else:
        name, email = resolve_identity_from_headers(
            x_auth_request_user=x_auth_request_user,
            x_auth_request_email=x_auth_request_email,
            x_forwarded_user=x_forwarded_user,
            x_forwarded_email=x_forwarded_email,
        )
        if not email:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
        user = get_or_create_user(db, email=email, display_name=name)

    current_user = {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "role": user.role,
    }
    return user, current_user


def require_roles(*roles: str):
    """Dependency factory: resolve the user and reject roles outside ``roles``."""
    allowed = frozenset(roles)

    def _dependency(user_context=Depends(get_current_user_context)):
        _user, current_user = user_context
        role = current_user.get("role")
        if not role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No role assigned to this account")
        if role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return user_context

    return _dependency


def require_capability(capability: str):
    """Same as ``require_roles`` but keyed by a capability name."""

    def _dependency(user_context=Depends(get_current_user_context)):
        _user, current_user = user_context
        role = current_user.get("role")
        if not role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No role assigned to this account")
        if not role_has_capability(role, capability):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return user_context

    return _dependency


def require_any_role(user_context=Depends(get_current_user_context)):
    _user, current_user = user_context
    if not current_user.get("role"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No role assigned to this account")
    return user_context
