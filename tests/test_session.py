from datetime import timedelta

import pytest

from src.Core.exceptions import NoSessionException, SessionInvalid, SessionNotFound
from src.Models.device import Device
from src.Models.session import DeviceSession
from src.Repositories import device as device_repo
from src.Repositories import session as session_repo
from src.Schemas.device import Device_create


def test_create_session_replaces_previous(db, device):
    first = session_repo.create_session(db, device.id, True, "h1", "k1", "1.2.3.4", "app")
    second = session_repo.create_session(db, device.id, False, "h2", "k2", "1.2.3.5", "app")

    rows = db.query(DeviceSession).filter(DeviceSession.device_id == device.id).all()
    assert [r.id for r in rows] == [second]
    assert first != second
    assert rows[0].hash == "h2"
    assert rows[0].remote_ip == "1.2.3.5"


def test_first_login_is_set_once(db, device):
    session_repo.create_session(db, device.id, True, "h1", "k1", "1.2.3.4", "app")
    db.expire_all()
    first_login = db.get(Device, device.id).first_login
    assert first_login is not None

    session_repo.create_session(db, device.id, False, "h2", "k2", "1.2.3.5", "app-v2")
    db.expire_all()
    refreshed = db.get(Device, device.id)
    assert refreshed.first_login == first_login
    assert refreshed.last_login >= first_login
    assert refreshed.app_name == "app-v2"


def test_sessions_of_other_devices_survive(db, user, device):
    other = device_repo.create_device(db, Device_create(name="meteo2", passphrase="x", desc="d"), user)

    session_repo.create_session(db, other.id, True, "ho", "ko", None, None)
    session_repo.create_session(db, device.id, True, "h1", "k1", None, None)
    session_repo.create_session(db, device.id, False, "h2", "k2", None, None)

    assert session_repo.count_sessions(db, other.id) == 1
    assert session_repo.count_sessions(db, device.id) == 1


def test_check_session_returns_session_device(db, device):
    session_id = session_repo.create_session(db, device.id, True, "h1", "k1", None, "app")

    result = session_repo.check_session(db, session_id, "h1")

    assert result.session_id == session_id
    assert result.session_key == "k1"
    assert result.device_id == device.id


def test_check_session_unknown_id(db):
    with pytest.raises(SessionNotFound) as exc:
        session_repo.check_session(db, 999, "whatever")
    assert exc.value.reason == "session 999 not found"


def test_check_session_bad_hash(db, device):
    session_id = session_repo.create_session(db, device.id, True, "h1", "k1", None, None)

    with pytest.raises(SessionInvalid) as exc:
        session_repo.check_session(db, session_id, "h2")
    assert exc.value.reason == "bad hash"


def test_check_session_expired(db, device):
    session_id = session_repo.create_session(db, device.id, True, "h1", "k1", None, None)
    row = db.get(DeviceSession, session_id)
    row.started = row.started - timedelta(days=1, seconds=1)
    db.commit()

    with pytest.raises(SessionInvalid) as exc:
        session_repo.check_session(db, session_id, "h1")
    assert exc.value.reason == "session expired"


def test_check_session_still_valid_within_a_day(db, device):
    session_id = session_repo.create_session(db, device.id, True, "h1", "k1", None, None)
    row = db.get(DeviceSession, session_id)
    row.started = row.started - timedelta(hours=23)
    db.commit()

    assert session_repo.check_session(db, session_id, "h1").device_id == device.id


def test_session_errors_share_base_class():
    assert issubclass(SessionNotFound, NoSessionException)
    assert issubclass(SessionInvalid, NoSessionException)


def test_bad_login_stamps_device(db, device):
    assert device.last_bad_login is None

    assert device_repo.bad_login(db, device.id) is True
    db.expire_all()
    assert db.get(Device, device.id).last_bad_login is not None


def test_bad_login_unknown_device(db):
    assert device_repo.bad_login(db, 12345) is False


def test_delete_sessions(db, device):
    session_repo.create_session(db, device.id, True, "h1", "k1", None, None)

    assert session_repo.delete_sessions(db, device.id) == 1
    assert session_repo.count_sessions(db, device.id) == 0
