import uuid
from types import SimpleNamespace

from tracker.api.permissions import (
    assigned_scope,
    can_download_deliverable,
    can_edit_details,
    can_edit_phases,
    can_upload_deliverable,
    can_view_deliverable,
    can_view_demand,
)

PRODUCER_ID = uuid.uuid4()
CREATOR_ID = uuid.uuid4()


def _demand(status="aguardando"):
    return SimpleNamespace(id=uuid.uuid4(), producer_id=PRODUCER_ID, created_by=CREATOR_ID, status=status)


def _ctx(role, user_id=None):
    return {"id": user_id or uuid.uuid4(), "role": role}


def test_assigned_scope_only_narrows_producers():
    assert assigned_scope(_ctx("produtor", PRODUCER_ID)) == PRODUCER_ID
    assert assigned_scope(_ctx("atendente")) is None
    assert assigned_scope(None) is None


def test_view_demand():
    d = _demand()
    assert can_view_demand(d, _ctx("produtor", PRODUCER_ID)) is True
    assert can_view_demand(d, _ctx("produtor")) is False
    assert can_view_demand(d, _ctx("ceo")) is True
    assert can_view_demand(d, _ctx(None)) is False


def test_edit_details_creator_or_admin():
    d = _demand()
    assert can_edit_details(d, _ctx("atendente", CREATOR_ID)) is True
    assert can_edit_details(d, _ctx("atendente")) is False
    assert can_edit_details(d, _ctx("admin")) is True


def test_phases_and_upload():
    d = _demand("em_producao")
    assert can_edit_phases(d, _ctx("produtor", PRODUCER_ID)) is True
    assert can_edit_phases(d, _ctx("produtor")) is False
    assert can_upload_deliverable(d, _ctx("produtor", PRODUCER_ID)) is True
    assert can_upload_deliverable(d, _ctx("produtor")) is False
    assert can_upload_deliverable(d, _ctx("ceo")) is True


def test_deliverable_visibility_by_status():
    producer = _ctx("produtor", PRODUCER_ID)
    requester = _ctx("atendente")
    assert can_view_deliverable(_demand("aguardando"), producer) is False
    assert can_view_deliverable(_demand("em_producao"), producer) is True
    assert can_view_deliverable(_demand("em_producao"), requester) is False
    assert can_view_deliverable(_demand("concluido"), requester) is True


def test_download_requires_manager_role():
    assert can_download_deliverable(_ctx("ceo")) is True
    assert can_download_deliverable(_ctx("produtor", PRODUCER_ID)) is False
