def test_health_and_build_info(client, monkeypatch):
    assert client.get("/health").json() == {"status": "ok", "service": "demand-tracker"}

    monkeypatch.setenv("BUILD_SHA", "abc123")
    info = client.get("/build-info").json()
    assert info["build_sha"] == "abc123"
    assert info["service_name"] == "demand-tracker"


def test_user_info_requires_identity(client):
    r = client.get("/user-info")
    assert r.status_code == 401
    assert r.json() == {"authenticated": False}


def test_user_info_reports_role_and_flags(client, user_factory):
    user = user_factory("produtor", display_name="Pedro")
    r = client.get("/user-info", headers={"x-forwarded-email": user.email, "x-forwarded-user": "Pedro"})
    assert r.status_code == 200
    body = r.json()
    assert body["authenticated"] is True
    assert body["user_id"] == str(user.id)
    assert body["role"] == "produtor"
    assert body["role_label"] == "Produtor"
    assert body["conflict_check_enabled"] is True
    assert body["availability_enabled"] is True


def test_dev_mode_user(client, monkeypatch):
    monkeypatch.setenv("DEV_MODE", "true")
    monkeypatch.setenv("APP_BASE_URL", "http://localhost:3000")
    monkeypatch.setenv("DEV_MODE_ROLE", "ceo")
    r = client.get("/user-info")
    assert r.status_code == 200
    assert r.json()["email"] == "dev@localhost"
    assert r.json()["role"] == "ceo"

    # Writes are allowed without proxy headers in dev mode
    r = client.post("/demands/", json={"name": "x", "producer_id": r.json()["user_id"]})
    assert r.status_code == 422


def test_dev_mode_misconfigured(client, monkeypatch):
    monkeypatch.setenv("DEV_MODE", "true")
    monkeypatch.setenv("APP_BASE_URL", "https://tracker.example.com")
    assert client.get("/user-info").status_code == 500
    assert client.get("/demands/").status_code == 500


def test_dev_mode_unknown_role_is_misconfiguration(client, monkeypatch):
    monkeypatch.setenv("DEV_MODE", "true")
    monkeypatch.setenv("APP_BASE_URL", "http://localhost:3000")
    monkeypatch.setenv("DEV_MODE_ROLE", "superuser")
    r = client.get("/demands/")
    assert r.status_code == 500
    assert r.json()["detail"] == "DEV_MODE misconfigured"
    assert client.get("/user-info").status_code == 500
