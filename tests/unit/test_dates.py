from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from tracker.utils.dates import day_bounds, ensure_aware, local_date, same_day_bounds, start_of_day, to_utc

SP = ZoneInfo("America/Sao_Paulo")


def test_ensure_aware_and_to_utc():
    naive = datetime(2026, 3, 10, 12, 0)
    assert ensure_aware(naive).tzinfo is timezone.utc
    assert ensure_aware(None) is None
    assert to_utc(datetime(2026, 3, 10, 9, 0, tzinfo=SP)) == datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_local_date_crosses_midnight_in_app_timezone():
    # 01:30 UTC on the 11th is still the 10th in Sao Paulo
    assert local_date(datetime(2026, 3, 11, 1, 30, tzinfo=timezone.utc), SP) == date(2026, 3, 10)


def test_day_bounds_are_utc_half_open_range():
    start, end = day_bounds(date(2026, 3, 10), SP)
    assert start == datetime(2026, 3, 10, 3, 0, tzinfo=timezone.utc)
    assert end == datetime(2026, 3, 11, 3, 0, tzinfo=timezone.utc)


def test_same_day_bounds_and_start_of_day():
    value = datetime(2026, 3, 10, 22, 0, tzinfo=SP)
    assert same_day_bounds(value, SP) == day_bounds(date(2026, 3, 10), SP)
    assert start_of_day(value, SP) == datetime(2026, 3, 10, 3, 0, tzinfo=timezone.utc)


def test_app_timezone_from_env(monkeypatch):
    monkeypatch.setenv("APP_TIMEZONE", "UTC")
    assert local_date(datetime(2026, 3, 11, 1, 30, tzinfo=timezone.utc)) == date(2026, 3, 11)
