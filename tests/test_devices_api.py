import os
from datetime import timedelta

from src.Core.timeutils import utc_now
from src.Models.device import Device
from src.Models.measure import Measure
from src.Models.sensor import Sensor
from src.Repositories import blob as blob_repo
from src.Repositories import measure as measure_repo
from src.Repositories import sensor as sensor_repo
from src.Repositories import session as session_repo
from src.Services import blob_storage


def _headers(user):
    return {"X-Account-ID": str(user.id)}


def test_requires_account_header(client):
    assert client.get("/devices/").status_code == 401
    assert client.get("/devices/", headers={"X-Account-ID": "77"}).status_code == 401


def test_register_device(client, user):
    response = client.post("/devices/", json={
        "name": "station7",
        "passphrase": "pw",
        "desc": "Roof"
    }, headers=_headers(user))

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "jan:station7"
    assert data["monitoring"] is False
    assert len(data["json_token"]) == 40
    assert len(data["blob_token"]) == 40
    assert "passphrase" not in data


def test_register_rejects_bad_name(client, user):
    response = client.post("/devices/", json={
        "name": "bad name!",
        "passphrase": "pw",
        "desc": "Roof"
    }, headers=_headers(user))
    assert response.status_code == 422


def test_register_duplicate(client, user, device):
    response = client.post("/devices/", json={
        "name": "meteo1",
        "passphrase": "pw",
        "desc": "again"
    }, headers=_headers(user))
    assert response.status_code == 409


def test_list_only_own_devices(client, user, other_user, device):
    assert client.get("/devices/", headers=_headers(user)).json()["total"] == 1
    assert client.get("/devices/", headers=_headers(other_user)).json()["total"] == 0


def test_foreign_device_is_forbidden(client, other_user, device):
    assert client.get(f"/devices/{device.id}", headers=_headers(other_user)).status_code == 403


def test_missing_device(client, user):
    assert client.get("/devices/999", headers=_headers(user)).status_code == 404


def test_detail_problem_mark_and_warning_icons(client, db, user, device, session_device):
    late = sensor_repo.process_channel_definition(db, session_device, 1, 1, 1, 60, "late", None)
    fresh = sensor_repo.process_channel_definition(db, session_device, 2, 1, 1, 600, "fresh", None)
    sensor_repo.process_channel_definition(db, session_device, 3, 1, 1, 60, "silent", None)
    measure_repo.save_data(db, session_device, late, 3600, 1.0, None, 1.0, None, "")
    measure_repo.save_data(db, session_device, fresh, 0, 2.0, None, 2.0, None, "")

    stored = db.get(Device, device.id)
    stored.last_bad_login = utc_now() + timedelta(seconds=5)
    db.commit()

    response = client.get(f"/devices/{device.id}", headers=_headers(user))

    assert response.status_code == 200
    data = response.json()
    assert data["problem_mark"] is True
    icons = {s["name"]: s["warning_icon"] for s in data["sensors"]}
    assert icons == {"late": 2, "fresh": 0, "silent": 0}
    assert data["json_url"].endswith(f"/json/data/{device.json_token}/{device.id}/")
    assert data["blob_url"].endswith(f"/gallery/{device.blob_token}/{device.id}/")
    assert data["blob_count"] == 0


def test_monitored_late_sensor(client, db, user, device, session_device):
    sensor = sensor_repo.process_channel_definition(db, session_device, 1, 1, 1, 60, "late", None)
    measure_repo.save_data(db, session_device, sensor, 3600, 1.0, None, 1.0, None, "")
    stored = db.get(Device, device.id)
    stored.monitoring = True
    db.commit()

    data = client.get(f"/devices/{device.id}", headers=_headers(user)).json()

    assert data["problem_mark"] is False
    assert data["sensors"][0]["warning_icon"] == 1


def test_edit_view_and_update(client, user, device):
    view = client.get(f"/devices/{device.id}/edit", headers=_headers(user)).json()
    assert view["name"] == "meteo1"
    assert view["full_name"] == "jan:meteo1"
    assert view["passphrase"] == "secret"

    response = client.put(f"/devices/{device.id}", json={
        "name": "meteo9",
        "passphrase": "changed",
        "desc": "Moved",
        "json_token": "",
        "blob_token": view["blob_token"],
        "monitoring": True
    }, headers=_headers(user))

    assert response.status_code == 200
    assert response.json()["name"] == "jan:meteo9"
    view = client.get(f"/devices/{device.id}/edit", headers=_headers(user)).json()
    assert view["passphrase"] == "changed"
    assert view["monitoring"] is True

    detail = client.get(f"/devices/{device.id}", headers=_headers(user)).json()
    assert detail["json_url"] is None


def test_update_without_tokens_keeps_links(client, user, device):
    response = client.put(f"/devices/{device.id}", json={
        "name": "meteo1",
        "passphrase": "secret",
        "desc": "Same place"
    }, headers=_headers(user))

    assert response.status_code == 200
    data = response.json()
    assert data["json_token"] == device.json_token
    assert data["blob_token"] == device.blob_token
    assert data["desc"] == "Same place"


def test_config_push_bumps_version_and_drops_sessions(client, db, user, device, session_device):
    response = client.post(f"/devices/{device.id}/config", json={"config_data": "rate=30"}, headers=_headers(user))
    assert response.status_code == 200
    assert response.json()["config_ver"] == 1
    assert session_repo.count_sessions(db, device.id) == 0

    response = client.post(f"/devices/{device.id}/config", json={"config_data": "rate=60"}, headers=_headers(user))
    assert response.json()["config_ver"] == 2
    assert response.json()["config_data"] == "rate=60"


def test_config_push_requires_data(client, user, device):
    response = client.post(f"/devices/{device.id}/config", json={"config_data": ""}, headers=_headers(user))
    assert response.status_code == 422


def test_blob_download(client, db, user, device, session_device):
    blob_id = blob_repo.save_blob(db, session_device, 1700000000, "Garden cam", "jpg", 4, None)
    name = blob_storage.blob_file_name(device.id, blob_id, "jpg")
    blob_storage.save_blob_file(name, b"\xff\xd8\xff\xe0")
    blob_repo.update_blob(db, blob_id, name)

    listing = client.get(f"/devices/{device.id}/blobs", headers=_headers(user)).json()
    assert listing["total"] == 1

    response = client.get(f"/devices/{device.id}/blobs/{blob_id}", headers=_headers(user))
    assert response.status_code == 200
    assert response.content == b"\xff\xd8\xff\xe0"
    assert response.headers["content-type"] == "image/jpeg"
    assert f"20231114_221320_{device.id}_garden-cam.jpg" in response.headers["content-disposition"]


def test_pending_blob_not_downloadable(client, db, user, device, session_device):
    blob_id = blob_repo.save_blob(db, session_device, 1700000000, "x", "csv", 4, None)

    response = client.get(f"/devices/{device.id}/blobs/{blob_id}", headers=_headers(user))
    assert response.status_code == 404


def test_delete_preview_and_delete(client, db, user, device, session_device):
    sensor = sensor_repo.process_channel_definition(db, session_device, 1, 1, 1, 60, "temp", None)
    measure_repo.save_data(db, session_device, sensor, 0, 1.0, None, 1.0, None, "")
    measure_repo.save_data(db, session_device, sensor, 0, 2.0, None, 2.0, None, "")
    blob_id = blob_repo.save_blob(db, session_device, 1700000000, "x", "csv", 3, None)
    name = blob_storage.blob_file_name(device.id, blob_id, "csv")
    blob_storage.save_blob_file(name, b"a,b")
    blob_repo.update_blob(db, blob_id, name)

    preview = client.get(f"/devices/{device.id}/delete", headers=_headers(user)).json()
    assert preview["sensor_count"] == 1
    assert preview["measure_count"] == 2
    assert preview["blob_count"] == 1

    response = client.post(f"/devices/{device.id}/delete", json={"confirm": False}, headers=_headers(user))
    assert response.status_code == 422

    response = client.post(f"/devices/{device.id}/delete", json={"confirm": True}, headers=_headers(user))
    assert response.status_code == 200
    assert response.json() == {"id": device.id, "status": "deleted"}

    db.expire_all()
    assert db.query(Device).filter(Device.id == device.id).first() is None
    assert db.query(Sensor).count() == 0
    assert db.query(Measure).count() == 0
    assert session_repo.count_sessions(db, device.id) == 0
    assert not os.path.exists(blob_storage.blob_path(name))
