from tracker.db.repositories import app_config as config_repo


def _h(user):
    return {"x-auth-request-user": user.display_name, "x-auth-request-email": user.email}


def test_admin_creates_users(client, user_factory):
    admin = user_factory("admin")
    r = client.post(
        "/users/",
        json={"email": "  Nova@Example.com ", "display_name": "Nova", "role": "produtor"},
        headers=_h(admin),
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["email"] == "nova@example.com"
    assert body["role"] == "produtor"

    r = client.post(
        "/users/",
        json={"email": "nova@example.com", "display_name": "Outra", "role": "ceo"},
        headers=_h(admin),
    )
    assert r.status_code == 409

    producers = client.get("/producers/", headers=_h(admin)).json()
    assert [p["display_name"] for p in producers] == ["Nova"]


def test_user_creation_validation_and_permissions(client, user_factory):
    admin = user_factory("admin")
    ceo = user_factory("ceo")
    body = {"email": "x@example.com", "display_name": "X", "role": "atendente"}

    assert client.post("/users/", json=body, headers=_h(ceo)).status_code == 403
    assert client.post("/users/", json={**body, "role": "owner"}, headers=_h(admin)).status_code == 422
    assert client.post("/users/", json={**body, "email": "sem-arroba"}, headers=_h(admin)).status_code == 422
    assert client.post("/users/", json={**body, "display_name": "   "}, headers=_h(admin)).status_code == 422


def test_list_users_and_change_role(client, user_factory):
    admin = user_factory("admin", display_name="Admin")
    target = user_factory("atendente", display_name="Beatriz")
    user_factory(None, display_name="Sem Papel")

    users = client.get("/users/", headers=_h(admin)).json()
    assert [u["display_name"] for u in users] == ["Admin", "Beatriz"]
    assert users[1]["role_label"] == "Atendente"

    r = client.patch(f"/users/{target.id}/role", json={"role": "ceo"}, headers=_h(admin))
    assert r.status_code == 200
    assert r.json()["role"] == "ceo"
    assert r.json()["role_label"] == "CEO"

    assert client.get("/users/", headers=_h(target)).status_code == 403


def test_update_own_display_name(client, user_factory):
    user = user_factory("produtor")
    r = client.patch("/users/me", json={"display_name": "  DJ Novo  "}, headers=_h(user))
    assert r.status_code == 200
    assert r.json()["display_name"] == "DJ Novo"
    assert client.patch("/users/me", json={"display_name": "x" * 81}, headers=_h(user)).status_code == 422


def test_admin_emails_bootstrap(client, monkeypatch):
    monkeypatch.setenv("ADMIN_EMAILS", "boss@example.com")
    r = client.get("/user-info", headers={"x-auth-request-email": "Boss@Example.com", "x-auth-request-user": "Boss"})
    assert r.status_code == 200
    assert r.json()["role"] == "admin"

    r = client.get("/user-info", headers={"x-auth-request-email": "guest@example.com"})
    assert r.status_code == 200
    assert r.json()["role"] is None
    assert r.json()["display_name"] == "guest"


def test_first_run_setup(client, db_session):
    assert client.get("/setup/status").json() == {"complete": False}

    r = client.post("/setup/admin", json={"email": "root@example.com", "display_name": "Root"})
    assert r.status_code == 201, r.text
    assert r.json()["role"] == "admin"
    assert client.get("/setup/status").json() == {"complete": True}
    assert config_repo.is_setup_complete(db_session) is True

    r = client.post("/setup/admin", json={"email": "late@example.com", "display_name": "Late"})
    assert r.status_code == 409

    info = client.get("/user-info", headers={"x-auth-request-email": "root@example.com"}).json()
    assert info["role"] == "admin"


def test_setup_promotes_existing_user(client, user_factory, db_session):
    user = user_factory("atendente", email="first@example.com")
    r = client.post("/setup/admin", json={"email": "first@example.com", "display_name": "Primeira"})
    assert r.status_code == 201
    assert r.json()["id"] == str(user.id)
    assert r.json()["role"] == "admin"


def test_setup_flag_must_be_exactly_true(db_session):
    config_repo.set_value(db_session, config_repo.SETUP_COMPLETE_KEY, "true")
    assert config_repo.is_setup_complete(db_session) is False
    config_repo.set_value(db_session, config_repo.SETUP_COMPLETE_KEY, True)
    assert config_repo.is_setup_complete(db_session) is True
