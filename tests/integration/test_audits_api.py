from tracker.audit import AuditAction, log, safe_log
from tracker.db import schemas
from tracker.db.repositories import audits as audit_repo


def _h(user):
    return {"x-auth-request-user": user.display_name, "x-auth-request-email": user.email}


def test_create_and_filter_audit_logs(db_session, user_factory):
    actor1 = user_factory("admin")
    actor2 = user_factory("atendente")

    for i in range(3):
        payload = schemas.AuditLogCreate(action_type="test_event", status="success", target_type="thing", metadata={"seq": i})
        audit_repo.create_audit_log(db_session, payload, actor_user_id=actor1.id)
    payload2 = schemas.AuditLogCreate(action_type="other_event", status="failure", target_type="item")
    audit_repo.create_audit_log(db_session, payload2, actor_user_id=actor2.id)

    assert len(audit_repo.get_audit_logs(db_session, user_id=actor1.id)) == 3
    assert len(audit_repo.get_audit_logs(db_session, action_type="other_event")) == 1
    assert len(audit_repo.get_audit_logs(db_session, status="failure")) == 1
    assert len(audit_repo.get_audit_logs(db_session, limit=2)) == 2


def test_log_stores_enum_values(db_session, user_factory):
    actor = user_factory("admin")
    row = log(db_session, action=AuditAction.USER_CREATE, target_type="user", target_id=actor.id, actor_user_id=actor.id)
    assert row.action_type == "user_create"
    assert row.status == "success"
    assert row.metadata_json == {}


def test_safe_log_swallows_write_failures(db_session, monkeypatch):
    def _boom(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(audit_repo, "create_audit_log", _boom)
    safe_log(db_session, action=AuditAction.DEMAND_CREATE, target_type="demand", actor_user_id=None)


def test_audits_endpoint_admin_only(client, user_factory):
    admin = user_factory("admin")
    requester = user_factory("atendente")
    producer = user_factory("produtor")
    r = client.post(
        "/demands/",
        json={"name": "Spot rádio", "producer_id": str(producer.id)},
        headers=_h(requester),
    )
    assert r.status_code == 201

    assert client.get("/audits/", headers=_h(requester)).status_code == 403

    logs = client.get("/audits/", params={"action_type": "demand_create"}, headers=_h(admin)).json()
    assert len(logs) == 1
    entry = logs[0]
    assert entry["actor_user_id"] == str(requester.id)
    assert entry["target_type"] == "demand"
    assert entry["target_id"] == r.json()["id"]
    assert entry["metadata"]["name"] == "Spot rádio"
