"""
Demand status workflow and deadline helpers.

Statuses move ``aguardando -> em_producao -> concluido``. The assigned
producer advances one step at a time; requesters, executives and admins can
reopen a completed demand, and through the edit form may set any status.
"""
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional

from tracker.utils.dates import ensure_aware, start_of_day, day_bounds, local_date
from tracker.utils.role_permissions import ROLE_PRODUCER, is_manager
from tracker.utils.runtime import app_timezone, due_soon_hours

STATUS_WAITING = "aguardando"
STATUS_IN_PRODUCTION = "em_producao"
STATUS_DONE = "concluido"

STATUS_ORDER: List[str] = [STATUS_WAITING, STATUS_IN_PRODUCTION, STATUS_DONE]

STATUS_LABELS = {
    STATUS_WAITING: "Aguardando",
    STATUS_IN_PRODUCTION: "Em produção",
    STATUS_DONE: "Concluído",
}

PERIOD_PRESETS = ("7", "30", "month", "all")


class TransitionError(ValueError):
    """Raised when a status change is not allowed for the acting role."""


def validate_status(status: str) -> None:
    if status not in STATUS_ORDER:
        raise ValueError(f"Invalid status '{status}'. Allowed statuses: {STATUS_ORDER}")


def next_status(status: str) -> Optional[str]:
    validate_status(status)
    idx = STATUS_ORDER.index(status)
    if idx + 1 < len(STATUS_ORDER):
        return STATUS_ORDER[idx + 1]
    return None


def allowed_transitions(current: str, role: Optional[str], *, is_assigned: bool = False, via_edit: bool = False) -> List[str]:
    """Statuses reachable from ``current`` for the given actor."""
    validate_status(current)
    if is_manager(role):
        if via_edit:
            return [s for s in STATUS_ORDER if s != current]
        if current == STATUS_DONE:
            return [STATUS_IN_PRODUCTION]
        return []
    if role == ROLE_PRODUCER and is_assigned:
        nxt = next_status(current)
        return [nxt] if nxt else []
    return []


def check_transition(current: str, target: str, role: Optional[str], *, is_assigned: bool = False, via_edit: bool = False) -> bool:
    """Return True when the status actually changes; False for a no-op.

    Raises TransitionError when the change is not permitted.
    """
    validate_status(target)
    if current == target:
        return False
    if target not in allowed_transitions(current, role, is_assigned=is_assigned, via_edit=via_edit):
        raise TransitionError(f"Transition {current} -> {target} not allowed for role {role or 'none'}")
    return True


def _now() -> datetime:
    return datetime.now(timezone.utc)


def is_due_soon(due_at: Optional[datetime], status: str, now: Optional[datetime] = None) -> bool:
    if due_at is None or status == STATUS_DONE:
        return False
    now = ensure_aware(now) or _now()
    remaining = ensure_aware(due_at) - now
    return timedelta(0) <= remaining <= timedelta(hours=due_soon_hours())


def is_overdue(due_at: Optional[datetime], status: str, now: Optional[datetime] = None) -> bool:
    if due_at is None or status == STATUS_DONE:
        return False
    now = ensure_aware(now) or _now()
    return ensure_aware(due_at) < now


def count_due_soon(demands: Iterable, now: Optional[datetime] = None) -> int:
    now = ensure_aware(now) or _now()
    return sum(1 for d in demands if is_due_soon(d.due_at, d.status, now))


def get_period_start(preset: Optional[str], now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Start of the created_at window for a period preset ("7", "30", "month")."""
    tz = tz or app_timezone()
    now = ensure_aware(now) or _now()
    if preset == "7":
        return start_of_day(now - timedelta(days=7), tz)
    if preset == "30":
        return start_of_day(now - timedelta(days=30), tz)
    if preset == "month":
        start, _end = day_bounds(local_date(now, tz).replace(day=1), tz)
        return start
    return None
