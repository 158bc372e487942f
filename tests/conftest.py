import os
import uuid

import pytest

# Calendar-day assertions in the suite assume a fixed UTC-3 zone
os.environ["APP_TIMEZONE"] = "America/Sao_Paulo"
for _var in ("DEV_MODE", "ADMIN_EMAILS", "TRACKER_TEST_DB"):
    os.environ.pop(_var, None)

from fastapi.testclient import TestClient

from tracker.db import models
from tracker.db.database import engine, SessionLocal, get_db
from tracker.api.main import app
from tracker.services.storage_service import reset_storage_service_for_tests
from tracker.utils.feature_flags import refresh_feature_flag_cache
from tracker.utils.workflow import STATUS_WAITING

_ENV_VARS_RESET_PER_TEST = (
    "DEV_MODE",
    "DEV_MODE_ROLE",
    "APP_BASE_URL",
    "ADMIN_EMAILS",
    "FEATURE_CONFLICT_CHECK_ENABLED",
    "FEATURE_AVAILABILITY_ENABLED",
    "DELIVERABLE_MAX_BYTES",
    "DUE_SOON_HOURS",
)

_GLOBAL_SESSION = None


@pytest.fixture(scope="session", autouse=True)
def _schema():
    models.Base.metadata.create_all(bind=engine)
    yield
    models.Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for name in _ENV_VARS_RESET_PER_TEST:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DELIVERABLE_STORAGE_DIR", str(tmp_path / "deliverables"))
    refresh_feature_flag_cache()
    reset_storage_service_for_tests()
    yield
    refresh_feature_flag_cache()
    reset_storage_service_for_tests()


# Per-test session shared with the app; tables are emptied afterwards
@pytest.fixture(autouse=True)
def db_session(_schema):
    global _GLOBAL_SESSION
    session = SessionLocal()
    _GLOBAL_SESSION = session
    try:
        yield session
    finally:
        _GLOBAL_SESSION = None
        session.rollback()
        for table in reversed(models.Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()


def _override_get_db():
    if _GLOBAL_SESSION is not None:
        yield _GLOBAL_SESSION
        return
    # Last resort: ad-hoc session
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture
def db(db_session):
    return db_session


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def user_factory(db_session):
    """Create a user; ``role=None`` leaves the account without a role row."""

    def _make(role="atendente", *, email=None, display_name=None):
        email = email or f"{role or 'norole'}_{uuid.uuid4().hex[:8]}@example.com"
        user = models.User(email=email, display_name=display_name or email.split("@")[0], auth_provider="proxy")
        if role:
            user.role_assignment = models.UserRole(role=role)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def demand_factory(db_session):
    def _make(*, producer, creator, name="Demanda", status=STATUS_WAITING, artist_name=None, start_at=None, due_at=None):
        demand = models.Demand(
            name=name,
            producer_id=producer.id,
            created_by=creator.id,
            status=status,
            artist_name=artist_name,
            start_at=start_at,
            due_at=due_at,
        )
        db_session.add(demand)
        db_session.commit()
        db_session.refresh(demand)
        return demand

    return _make
