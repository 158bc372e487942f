"""Runtime environment helpers: DEV_MODE guard and service settings."""

import os
from urllib.parse import urlparse
from typing import List, Optional, Set
from zoneinfo import ZoneInfo

from tracker.utils.role_permissions import ALLOWED_ROLES, ROLE_ADMIN

_LOCAL_HOSTS: Set[str] = {"localhost", "127.0.0.1", "::1"}

DEFAULT_TIMEZONE = "America/Sao_Paulo"
DEFAULT_DUE_SOON_HOURS = 48
DEFAULT_STORAGE_DIR = "./var/deliverables"
DEFAULT_MAX_DELIVERABLE_BYTES = 100 * 1024 * 1024
DEFAULT_CORS_ORIGINS = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8000",
]


def _extract_hostname(url_value: str) -> Optional[str]:
    """Return hostname from a URL or bare host string."""
    if not url_value:
        return None
    url_value = url_value.strip()
    if not url_value:
        return None
    candidate = url_value if "://" in url_value else f"http://{url_value}"
    parsed = urlparse(candidate)
    return parsed.hostname


def _allowed_dev_hosts() -> Set[str]:
    """Hosts that are allowed to run with DEV_MODE enabled."""
    extra = os.getenv("DEV_MODE_ALLOWED_HOSTS", "")
    allowed = set(_LOCAL_HOSTS)
    if extra:
        allowed.update({host.strip().lower() for host in extra.split(",") if host.strip()})
    return allowed


def dev_mode_requested() -> bool:
    """Return True when DEV_MODE env var is set to a truthy value."""
    return os.getenv("DEV_MODE", "false").lower() == "true"


def dev_mode_active() -> bool:
    """Return True if dev mode is enabled and allowed; raise if misconfigured.

    DEV_MODE can only be used when APP_BASE_URL points at localhost/127.0.0.1 (or
    an explicitly whitelisted host via DEV_MODE_ALLOWED_HOSTS). Without any
    APP_BASE_URL, ALLOW_DEV_MODE=true is required outside of pytest.
    """
    if not dev_mode_requested():
        return False

    hostname = _extract_hostname(os.getenv("APP_BASE_URL", ""))
    allowed_hosts = _allowed_dev_hosts()

    if hostname:
        if hostname.lower() not in allowed_hosts:
            raise RuntimeError(
                "DEV_MODE=true is not permitted when APP_BASE_URL points to "
                f"'{hostname}'. Allowed hosts: {sorted(allowed_hosts)}"
            )
    else:
        if os.getenv("ALLOW_DEV_MODE", "false").lower() != "true" and not os.getenv("PYTEST_CURRENT_TEST"):
            raise RuntimeError(
                "DEV_MODE=true requires APP_BASE_URL to be set to a localhost URL "
                "or ALLOW_DEV_MODE=true for non-local execution."
            )

    dev_mode_role()
    return True


def dev_mode_role() -> str:
    """Role granted to the impersonated dev user; raises on an unknown role."""
    role = (os.getenv("DEV_MODE_ROLE") or ROLE_ADMIN).strip().lower()
    if role not in ALLOWED_ROLES:
        raise RuntimeError(f"DEV_MODE_ROLE '{role}' is not one of {sorted(ALLOWED_ROLES)}")
    return role


def app_timezone() -> ZoneInfo:
    """Timezone used for calendar-day boundaries (conflicts, periods, busy days)."""
    return ZoneInfo(os.getenv("APP_TIMEZONE") or DEFAULT_TIMEZONE)


def _int_env(var_name: str, default: int) -> int:
    raw = os.getenv(var_name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def due_soon_hours() -> int:
    return _int_env("DUE_SOON_HOURS", DEFAULT_DUE_SOON_HOURS)


def deliverable_storage_dir() -> str:
    return os.getenv("DELIVERABLE_STORAGE_DIR") or DEFAULT_STORAGE_DIR


def deliverable_max_bytes() -> int:
    return _int_env("DELIVERABLE_MAX_BYTES", DEFAULT_MAX_DELIVERABLE_BYTES)


def cors_origins() -> List[str]:
    raw = os.getenv("CORS_ORIGINS", "")
    origins = [entry.strip() for entry in raw.split(",") if entry.strip()]
    return origins or list(DEFAULT_CORS_ORIGINS)
