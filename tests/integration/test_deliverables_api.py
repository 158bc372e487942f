import os

from tracker.services.storage_service import reset_storage_service_for_tests


def _h(user):
    return {"x-auth-request-user": user.display_name, "x-auth-request-email": user.email}


def _upload(client, demand, user, *, name="Beat Final.wav", data=b"RIFF0000WAVE", content_type="audio/wav", comments=None):
    form = {"comments": comments} if comments is not None else None
    return client.post(
        f"/demands/{demand.id}/deliverable/file",
        files={"file": (name, data, content_type)},
        data=form,
        headers=_h(user),
    )


def test_upload_requires_production_started(client, user_factory, demand_factory):
    requester = user_factory("atendente")
    producer = user_factory("produtor")
    demand = demand_factory(producer=producer, creator=requester)
    r = _upload(client, demand, producer)
    assert r.status_code == 409


def test_assigned_producer_uploads_and_replaces(client, user_factory, demand_factory, tmp_path):
    requester = user_factory("atendente")
    producer = user_factory("produtor")
    demand = demand_factory(producer=producer, creator=requester, status="em_producao")

    r = _upload(client, demand, producer, comments="primeira versão")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["file_name"] == "Beat Final.wav"
    assert body["storage_path"] == f"{demand.id}/Beat-Final.wav"
    assert body["size_bytes"] == len(b"RIFF0000WAVE")
    assert body["comments"] == "primeira versão"
    assert body["has_file"] is True
    assert (tmp_path / "deliverables" / str(demand.id) / "Beat-Final.wav").is_file()

    # Replacing the file keeps the earlier comments
    r = _upload(client, demand, producer, name="Beat v2.mp3", data=b"ID3", content_type="audio/mpeg")
    assert r.status_code == 200
    assert r.json()["file_name"] == "Beat v2.mp3"
    assert r.json()["comments"] == "primeira versão"


def test_upload_permissions_and_type(client, user_factory, demand_factory):
    requester = user_factory("atendente")
    producer = user_factory("produtor")
    other = user_factory("produtor")
    demand = demand_factory(producer=producer, creator=requester, status="em_producao")

    assert _upload(client, demand, other).status_code == 404
    assert _upload(client, demand, producer, name="notes.pdf", content_type="application/pdf").status_code == 422
    assert _upload(client, demand, requester).status_code == 200


def test_upload_too_large(client, user_factory, demand_factory, monkeypatch):
    monkeypatch.setenv("DELIVERABLE_MAX_BYTES", "4")
    reset_storage_service_for_tests()
    requester = user_factory("atendente")
    producer = user_factory("produtor")
    demand = demand_factory(producer=producer, creator=requester, status="em_producao")

    r = _upload(client, demand, producer, data=b"0123456789")
    assert r.status_code == 413


def test_comments_only(client, user_factory, demand_factory):
    requester = user_factory("atendente")
    producer = user_factory("produtor")
    demand = demand_factory(producer=producer, creator=requester, status="em_producao")

    r = client.put(f"/demands/{demand.id}/deliverable/comments", json={"comments": "  ajustar voz "}, headers=_h(producer))
    assert r.status_code == 200
    body = r.json()
    assert body["comments"] == "ajustar voz"
    assert body["has_file"] is False
    assert body["uploaded_by"] == str(producer.id)

    r = client.put(f"/demands/{demand.id}/deliverable/comments", json={"comments": ""}, headers=_h(requester))
    assert r.status_code == 200
    assert r.json()["comments"] is None
    assert r.json()["uploaded_by"] == str(producer.id)


def test_deliverable_visibility_by_status(client, user_factory, demand_factory):
    requester = user_factory("atendente")
    producer = user_factory("produtor")
    demand = demand_factory(producer=producer, creator=requester, status="em_producao")
    assert _upload(client, demand, producer).status_code == 200

    assert client.get(f"/demands/{demand.id}", headers=_h(requester)).json()["deliverable"] is None
    assert client.get(f"/demands/{demand.id}", headers=_h(producer)).json()["deliverable"]["has_file"] is True
    assert client.get(f"/demands/{demand.id}/deliverable", headers=_h(requester)).status_code == 404
    assert client.get("/deliverables/", headers=_h(requester)).json() == []
    assert len(client.get("/deliverables/", headers=_h(producer)).json()) == 1

    client.patch(f"/demands/{demand.id}/status", json={"status": "concluido"}, headers=_h(producer))
    r = client.get(f"/demands/{demand.id}/deliverable", headers=_h(requester))
    assert r.status_code == 200
    assert r.json()["file_name"] == "Beat Final.wav"


def test_download(client, user_factory, demand_factory):
    requester = user_factory("atendente")
    producer = user_factory("produtor")
    demand = demand_factory(producer=producer, creator=requester, status="em_producao")
    _upload(client, demand, producer, name="Canção.wav", data=b"audio-bytes")
    url = f"/demands/{demand.id}/deliverable/download"

    assert client.get(url, headers=_h(requester)).status_code == 404
    assert client.get(url, headers=_h(producer)).status_code == 403

    client.patch(f"/demands/{demand.id}/status", json={"status": "concluido"}, headers=_h(producer))
    r = client.get(url, headers=_h(requester))
    assert r.status_code == 200
    assert r.content == b"audio-bytes"
    assert r.headers["content-type"].startswith("audio/wav")
    assert "filename*=UTF-8''Can%C3%A7%C3%A3o.wav" in r.headers["content-disposition"]


def test_delete_demand_removes_stored_files(client, user_factory, demand_factory, tmp_path):
    requester = user_factory("atendente")
    producer = user_factory("produtor")
    demand = demand_factory(producer=producer, creator=requester, status="em_producao")
    demand_id = demand.id
    assert _upload(client, demand, producer).status_code == 200
    folder = tmp_path / "deliverables" / str(demand_id)
    assert folder.is_dir()

    assert client.delete(f"/demands/{demand_id}", headers=_h(requester)).status_code == 200
    assert not os.path.exists(folder)


def test_replacing_file_removes_previous_object(client, user_factory, demand_factory, tmp_path):
    requester = user_factory("atendente")
    producer = user_factory("produtor")
    demand = demand_factory(producer=producer, creator=requester, status="em_producao")
    folder = tmp_path / "deliverables" / str(demand.id)

    assert _upload(client, demand, producer, name="take 1.wav").status_code == 200
    assert _upload(client, demand, producer, name="take 1.wav", data=b"again").status_code == 200
    assert sorted(p.name for p in folder.iterdir()) == ["take-1.wav"]

    r = _upload(client, demand, producer, name="take 2.mp3", data=b"ID3", content_type="audio/mpeg")
    assert r.status_code == 200
    assert r.json()["storage_path"] == f"{demand.id}/take-2.mp3"
    assert sorted(p.name for p in folder.iterdir()) == ["take-2.mp3"]
