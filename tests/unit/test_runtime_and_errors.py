import pytest

from tracker.utils.errors import UNKNOWN_ERROR_MESSAGE, get_error_message
from tracker.utils.runtime import (
    DEFAULT_CORS_ORIGINS,
    cors_origins,
    deliverable_max_bytes,
    dev_mode_active,
    dev_mode_role,
    due_soon_hours,
)


def test_dev_mode_off_by_default(monkeypatch):
    monkeypatch.delenv("DEV_MODE", raising=False)
    assert dev_mode_active() is False


def test_dev_mode_allowed_on_localhost(monkeypatch):
    monkeypatch.setenv("DEV_MODE", "true")
    monkeypatch.setenv("APP_BASE_URL", "http://localhost:3000")
    assert dev_mode_active() is True


def test_dev_mode_rejected_on_public_host(monkeypatch):
    monkeypatch.setenv("DEV_MODE", "true")
    monkeypatch.setenv("APP_BASE_URL", "https://tracker.example.com")
    with pytest.raises(RuntimeError):
        dev_mode_active()


def test_dev_mode_extra_allowed_hosts(monkeypatch):
    monkeypatch.setenv("DEV_MODE", "true")
    monkeypatch.setenv("APP_BASE_URL", "http://studio.lan")
    monkeypatch.setenv("DEV_MODE_ALLOWED_HOSTS", "studio.lan")
    assert dev_mode_active() is True


def test_dev_mode_role_default_and_override(monkeypatch):
    monkeypatch.delenv("DEV_MODE_ROLE", raising=False)
    assert dev_mode_role() == "admin"
    monkeypatch.setenv("DEV_MODE_ROLE", " Produtor ")
    assert dev_mode_role() == "produtor"


def test_dev_mode_unknown_role_raises(monkeypatch):
    monkeypatch.setenv("DEV_MODE_ROLE", "superuser")
    with pytest.raises(RuntimeError):
        dev_mode_role()
    monkeypatch.setenv("DEV_MODE", "true")
    monkeypatch.setenv("APP_BASE_URL", "http://localhost:3000")
    with pytest.raises(RuntimeError):
        dev_mode_active()


def test_integer_settings_fall_back_on_garbage(monkeypatch):
    monkeypatch.setenv("DUE_SOON_HOURS", "soon")
    assert due_soon_hours() == 48
    monkeypatch.setenv("DELIVERABLE_MAX_BYTES", "512")
    assert deliverable_max_bytes() == 512


def test_cors_origins(monkeypatch):
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    assert cors_origins() == DEFAULT_CORS_ORIGINS
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example.com, https://b.example.com")
    assert cors_origins() == ["https://a.example.com", "https://b.example.com"]


def test_get_error_message():
    assert get_error_message(ValueError("boom")) == "boom"
    assert get_error_message(KeyError()) == "KeyError"
    assert get_error_message({"message": "from api"}) == "from api"
    assert get_error_message(42) == UNKNOWN_ERROR_MESSAGE
