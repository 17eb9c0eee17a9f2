import os
from datetime import datetime

import pytest

from src.Core.config import settings
from src.Models.blob import Blob, BLOB_STATUS_PENDING, BLOB_STATUS_STORED
from src.Repositories import blob as blob_repo
from src.Services import blob_storage


def test_save_blob_is_pending(db, session_device):
    blob_id = blob_repo.save_blob(db, session_device, 1700000000, "garden cam", "jpg", 1234, "1.2.3.4")

    blob = db.get(Blob, blob_id)
    assert blob.status == BLOB_STATUS_PENDING
    assert blob.filename is None
    assert blob.data_time == datetime(2023, 11, 14, 22, 13, 20)
    assert blob.session_id == session_device.session_id


def test_update_blob_marks_stored(db, session_device):
    blob_id = blob_repo.save_blob(db, session_device, 1700000000, None, "csv", 10, None)

    assert blob_repo.update_blob(db, blob_id, "1/1.csv") is True

    db.expire_all()
    blob = db.get(Blob, blob_id)
    assert blob.status == BLOB_STATUS_STORED
    assert blob.filename == "1/1.csv"


def test_update_blob_unknown(db):
    assert blob_repo.update_blob(db, 404, "x.bin") is False


def test_get_blobs_newest_first(db, session_device):
    older = blob_repo.save_blob(db, session_device, 1600000000, "a", "jpg", 1, None)
    newer = blob_repo.save_blob(db, session_device, 1700000000, "b", "jpg", 1, None)

    assert [b.id for b in blob_repo.get_blobs(db, session_device.device_id)] == [newer, older]
    assert blob_repo.get_blob_count(db, session_device.device_id) == 2
    assert blob_repo.get_blob(db, session_device.device_id + 1, older) is None


def test_save_and_remove_file():
    name = blob_storage.blob_file_name(7, 12, ".JPG")
    assert name == "7/12.jpg"

    assert blob_storage.save_blob_file(name, b"\xff\xd8data") == 6
    path = blob_storage.blob_path(name)
    assert os.path.exists(path)
    assert path.startswith(settings.DATA_DIR)

    blob_storage.remove_blob_file(name)
    assert not os.path.exists(path)


def test_save_rejects_empty_and_oversized(monkeypatch):
    with pytest.raises(ValueError):
        blob_storage.save_blob_file("1/1.bin", b"")

    monkeypatch.setattr(settings, "MAX_BLOB_BYTES", 4)
    with pytest.raises(ValueError):
        blob_storage.save_blob_file("1/2.bin", b"12345")


def test_download_name():
    name = blob_storage.download_name(datetime(2024, 3, 5, 7, 8, 9), 42, "Kamera Zahrada 1", "jpg")
    assert name == "20240305_070809_42_kamera-zahrada-1.jpg"


def test_webalize_strips_accents():
    assert blob_storage.webalize("Žluťoučký kůň!") == "zlutoucky-kun"


def test_content_types():
    assert blob_storage.content_type_for("csv") == "text/csv"
    assert blob_storage.content_type_for("JPG") == "image/jpeg"
    assert blob_storage.content_type_for("png") == "application/octet-stream"
    assert blob_storage.content_type_for(None) == "application/octet-stream"


def test_check_blob_size(monkeypatch):
    monkeypatch.setattr(settings, "MAX_BLOB_BYTES", 10)

    blob_storage.check_blob_size(10)
    with pytest.raises(ValueError):
        blob_storage.check_blob_size(0)
    with pytest.raises(ValueError):
        blob_storage.check_blob_size(11)
