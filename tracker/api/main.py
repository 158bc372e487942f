"""
FastAPI app assembly: middleware and router wiring.
Includes the identity endpoint that spans multiple resource modules.
"""
import logging
import os
from typing import Optional

from fastapi import FastAPI, Header, Depends, HTTPException, status, APIRouter
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from sqlalchemy.orm import Session

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)


from tracker.db.database import get_db
from tracker.api.auth import resolve_identity_from_headers, get_or_create_user
from tracker.api.deps import DEV_USER_EMAIL, DEV_USER_NAME
from tracker.api.demands import router as demands_router
from tracker.api.deliverables import router as deliverables_router
from tracker.api.availability import router as availability_router
from tracker.api.producers import router as producers_router
from tracker.api.users import router as users_router
from tracker.api.setup import router as setup_router
from tracker.api.audits import router as audits_router
from tracker.api.support import router as support_router
from tracker.utils.feature_flags import get_feature_flags
from tracker.utils.role_permissions import role_label
from tracker.utils.runtime import cors_origins, dev_mode_active, dev_mode_requested, dev_mode_role

# Database schema is managed by Alembic migrations.

app = FastAPI(
    title="Demand Tracker Service",
    description="API for tracking production demands, deliverables and producer availability.",
    version="1.0.0",
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ANONYMOUS_WRITE_PATHS = ("/setup/admin",)


# Middleware: enforce read-only for unauthenticated requests
@app.middleware("http")
async def enforce_readonly_for_guests(request: Request, call_next):
    if request.method in ("POST", "PUT", "PATCH", "DELETE") and not dev_mode_requested():
        path = request.url.path or ""
        if path in _ANONYMOUS_WRITE_PATHS:
            return await call_next(request)
        h = request.headers
        user_present = (
            h.get("x-auth-request-user")
            or h.get("x-auth-request-email")
            or h.get("x-forwarded-user")
            or h.get("x-forwarded-email")
        )
        if not user_present:
            return JSONResponse(
                {"detail": "Guest mode is read-only. Sign in to perform changes."},
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
    return await call_next(request)


router = APIRouter()


def _user_info_payload(user) -> dict:
    flags = get_feature_flags()
    return {
        "authenticated": True,
        "user_id": str(user.id),
        "email": user.email,
        "display_name": user.display_name,
        "role": user.role,
        "role_label": role_label(user.role),
        "conflict_check_enabled": flags["conflict_check_enabled"],
        "availability_enabled": flags["availability_enabled"],
    }


@router.get("/user-info")
def get_user_info(
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
):
    """
    Return authenticated user info and role.
    - Dev mode (DEV_MODE=true): returns a stable dev user and ensures it exists.
    - Normal mode: reads headers set by the auth proxy and upserts the user.
    """
    try:
        is_dev_mode = dev_mode_active()
    except RuntimeError as exc:
        logger.error("DEV_MODE misconfiguration detected: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="DEV_MODE misconfigured")

    if is_dev_mode:
        user = get_or_create_user(db, email=DEV_USER_EMAIL, display_name=DEV_USER_NAME, default_role=dev_mode_role())
        return _user_info_payload(user)

    name, email = resolve_identity_from_headers(
        x_auth_request_user=x_auth_request_user,
        x_auth_request_email=x_auth_request_email,
        x_forwarded_user=x_forwarded_user,
        x_forwarded_email=x_forwarded_email,
    )
    if not email:
        return JSONResponse({"authenticated": False}, status_code=status.HTTP_401_UNAUTHORIZED)

    user = get_or_create_user(db, email=email, display_name=name)
    return _user_info_payload(user)


app.include_router(router)
app.include_router(demands_router)
app.include_router(deliverables_router)
app.include_router(availability_router)
app.include_router(producers_router)
app.include_router(users_router)
app.include_router(setup_router)
app.include_router(audits_router)
app.include_router(support_router)
