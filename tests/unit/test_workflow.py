from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from tracker.utils.workflow import (
    STATUS_DONE,
    STATUS_IN_PRODUCTION,
    STATUS_WAITING,
    TransitionError,
    allowed_transitions,
    check_transition,
    count_due_soon,
    get_period_start,
    is_due_soon,
    is_overdue,
    next_status,
    validate_status,
)

SP = ZoneInfo("America/Sao_Paulo")
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def test_next_status_follows_workflow_order():
    assert next_status(STATUS_WAITING) == STATUS_IN_PRODUCTION
    assert next_status(STATUS_IN_PRODUCTION) == STATUS_DONE
    assert next_status(STATUS_DONE) is None


def test_validate_status_rejects_unknown_value():
    with pytest.raises(ValueError):
        validate_status("arquivado")


def test_assigned_producer_advances_one_step():
    assert allowed_transitions(STATUS_WAITING, "produtor", is_assigned=True) == [STATUS_IN_PRODUCTION]
    assert allowed_transitions(STATUS_IN_PRODUCTION, "produtor", is_assigned=True) == [STATUS_DONE]
    assert allowed_transitions(STATUS_DONE, "produtor", is_assigned=True) == []


def test_unassigned_producer_cannot_move_anything():
    assert allowed_transitions(STATUS_WAITING, "produtor", is_assigned=False) == []


@pytest.mark.parametrize("role", ["atendente", "ceo", "admin"])
def test_managers_only_reopen_completed_outside_edit_form(role):
    assert allowed_transitions(STATUS_WAITING, role) == []
    assert allowed_transitions(STATUS_IN_PRODUCTION, role) == []
    assert allowed_transitions(STATUS_DONE, role) == [STATUS_IN_PRODUCTION]


def test_edit_form_lets_managers_pick_any_status():
    assert allowed_transitions(STATUS_WAITING, "atendente", via_edit=True) == [STATUS_IN_PRODUCTION, STATUS_DONE]
    assert allowed_transitions(STATUS_WAITING, "produtor", is_assigned=False, via_edit=True) == []


def test_check_transition_noop_and_denied():
    assert check_transition(STATUS_WAITING, STATUS_WAITING, "produtor", is_assigned=True) is False
    assert check_transition(STATUS_WAITING, STATUS_IN_PRODUCTION, "produtor", is_assigned=True) is True
    with pytest.raises(TransitionError):
        check_transition(STATUS_WAITING, STATUS_DONE, "produtor", is_assigned=True)
    with pytest.raises(TransitionError):
        check_transition(STATUS_WAITING, STATUS_IN_PRODUCTION, None)


def test_due_soon_window_and_overdue():
    assert is_due_soon(NOW + timedelta(hours=47), STATUS_WAITING, NOW) is True
    assert is_due_soon(NOW + timedelta(hours=49), STATUS_WAITING, NOW) is False
    assert is_due_soon(NOW + timedelta(hours=1), STATUS_DONE, NOW) is False
    assert is_due_soon(None, STATUS_WAITING, NOW) is False
    assert is_overdue(NOW - timedelta(minutes=1), STATUS_IN_PRODUCTION, NOW) is True
    assert is_overdue(NOW - timedelta(minutes=1), STATUS_DONE, NOW) is False


def test_due_soon_hours_configurable(monkeypatch):
    monkeypatch.setenv("DUE_SOON_HOURS", "2")
    assert is_due_soon(NOW + timedelta(hours=3), STATUS_WAITING, NOW) is False
    assert is_due_soon(NOW + timedelta(hours=1), STATUS_WAITING, NOW) is True


def test_naive_due_dates_are_read_as_utc():
    naive = (NOW + timedelta(hours=5)).replace(tzinfo=None)
    assert is_due_soon(naive, STATUS_WAITING, NOW) is True


def test_count_due_soon():
    class D:
        def __init__(self, due_at, status):
            self.due_at = due_at
            self.status = status

    demands = [
        D(NOW + timedelta(hours=1), STATUS_WAITING),
        D(NOW + timedelta(hours=2), STATUS_DONE),
        D(NOW + timedelta(days=10), STATUS_IN_PRODUCTION),
        D(None, STATUS_WAITING),
    ]
    assert count_due_soon(demands, NOW) == 1


def test_period_start_presets():
    assert get_period_start("7", NOW, SP) == datetime(2026, 3, 8, 3, 0, tzinfo=timezone.utc)
    assert get_period_start("30", NOW, SP) == datetime(2026, 2, 13, 3, 0, tzinfo=timezone.utc)
    assert get_period_start("month", NOW, SP) == datetime(2026, 3, 1, 3, 0, tzinfo=timezone.utc)
    assert get_period_start("all", NOW, SP) is None
    assert get_period_start(None, NOW, SP) is None
