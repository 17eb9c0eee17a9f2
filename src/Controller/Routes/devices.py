# src/Controller/Routes/devices.py

"""
Device Management REST API

REST endpoints used by device owners to manage their RA devices.

Endpoints:
- GET    /devices/                              List the caller's devices
- POST   /devices/                              Register new device
- GET    /devices/{device_id}                   Device detail with sensors
- GET    /devices/{device_id}/edit              Values for the edit form
- PUT    /devices/{device_id}                   Update device
- GET    /devices/{device_id}/blobs             List uploaded files
- GET    /devices/{device_id}/blobs/{blob_id}   Download a file
- GET    /devices/{device_id}/delete            Delete preview (data statistics)
- POST   /devices/{device_id}/delete            Delete device and all its data
- POST   /devices/{device_id}/config            Push configuration to the device

Security:
- Caller is identified by the X-Account-ID header (see deps.get_current_user)
- Every device endpoint checks ownership; violations are audited

Usage:
    # In main.py
    from src.Controller.Routes import devices
    app.include_router(devices.router, prefix="/devices", tags=["devices"])
"""

import os
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from src.Controller.deps import get_current_user, get_owned_device, get_remote_ip
from src.Core.config import settings
from src.Core.log_ws import audit
from src.Core.timeutils import utc_now
from src.DB.database import get_db
from src.Models.blob import BLOB_STATUS_STORED
from src.Models.device import Device
from src.Models.user import User
from src.Repositories import blob as blob_repo
from src.Repositories import device as device_repo
from src.Repositories import measure as measure_repo
from src.Repositories import sensor as sensor_repo
from src.Repositories import session as session_repo
from src.Schemas import blob as blob_schema
from src.Schemas import device as device_schema
from src.Schemas import sensor as sensor_schema
from src.Services import blob_storage, device_status
from src.Services.crypto import passphrase_cipher

router = APIRouter()


# ==========================================================
# 📌 List and Create
# ==========================================================

@router.get("/", response_model=device_schema.Device_list_response)
def list_devices(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Devices owned by the caller.

    Returns:
        {"devices": [...], "total": 3}
    """
    devices = device_repo.get_devices_by_user(db, user.id)
    return {
        "devices": [device_schema.Device_get.model_validate(d) for d in devices],
        "total": len(devices)
    }


@router.post("/", response_model=device_schema.Device_get, status_code=201)
def register_device(
    device: device_schema.Device_create,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Register a new device.

    The local name is prefixed with the caller's prefix; the device logs
    in with the full name and the passphrase given here.

    Raises:
        409: A device with this name already exists
        422: Validation error (name pattern, missing passphrase/description)
    """
    full_name = device_repo.full_device_name(user, device.name)
    if device_repo.device_name_exists(db, full_name):
        raise HTTPException(status_code=409, detail=f"Device '{full_name}' already exists")

    return device_repo.create_device(db, device, user)


# ==========================================================
# 📌 Detail
# ==========================================================

@router.get("/{device_id}", response_model=device_schema.Device_detail)
def get_device(
    device: Device = Depends(get_owned_device),
    db: Session = Depends(get_db)
):
    """
    Device detail.

    Includes:
        - problem_mark: the last login attempt failed after the last success
        - sensors with warning_icon (0 ok, 1 late + monitored, 2 late)
        - blob_count
        - json_url / blob_url for anonymous access (null when token empty)
    """
    now = utc_now()
    sensors = []
    for sensor in sensor_repo.get_device_sensors(db, device.id):
        item = sensor_schema.Sensor_status.model_validate(sensor)
        item.warning_icon = device_status.sensor_warning_icon(sensor, device.monitoring, now)
        sensors.append(item)

    return {
        "device": device_schema.Device_get.model_validate(device),
        "problem_mark": device_status.problem_mark(device),
        "blob_count": blob_repo.get_blob_count(db, device.id),
        "sensors": sensors,
        "json_url": device_status.json_data_url(settings.PUBLIC_BASE_URL, device),
        "blob_url": device_status.gallery_url(settings.PUBLIC_BASE_URL, device)
    }


# ==========================================================
# 📌 Edit
# ==========================================================

@router.get("/{device_id}/edit", response_model=device_schema.Device_edit_view)
def get_device_edit_view(device: Device = Depends(get_owned_device)):
    """
    Values to prefill the edit form: local name and decrypted passphrase.
    """
    try:
        passphrase = passphrase_cipher.decrypt(device.passphrase, device.name)
    except ValueError:
        raise HTTPException(status_code=500, detail="Stored passphrase cannot be decrypted")

    return {
        "id": device.id,
        "full_name": device.name,
        "name": device_repo.local_device_name(device.name),
        "passphrase": passphrase,
        "desc": device.desc or "",
        "json_token": device.json_token,
        "blob_token": device.blob_token,
        "monitoring": device.monitoring
    }


@router.put("/{device_id}", response_model=device_schema.Device_get)
def update_device(
    payload: device_schema.Device_update,
    device: Device = Depends(get_owned_device),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update a device from the edit form.

    Raises:
        409: The new name collides with another device
    """
    full_name = device_repo.full_device_name(user, payload.name)
    if device_repo.device_name_exists(db, full_name, exclude_id=device.id):
        raise HTTPException(status_code=409, detail=f"Device '{full_name}' already exists")

    return device_repo.update_device(db, device, payload, user)


# ==========================================================
# 📌 Blobs
# ==========================================================

@router.get("/{device_id}/blobs", response_model=blob_schema.Blob_list_response)
def list_blobs(
    device: Device = Depends(get_owned_device),
    db: Session = Depends(get_db)
):
    blobs = blob_repo.get_blobs(db, device.id)
    return {
        "device_id": device.id,
        "blobs": [blob_schema.Blob_get.model_validate(b) for b in blobs],
        "total": len(blobs)
    }


@router.get("/{device_id}/blobs/{blob_id}")
def download_blob(
    blob_id: int,
    device: Device = Depends(get_owned_device),
    db: Session = Depends(get_db)
):
    """
    Download a stored blob.

    The offered file name is YYYYmmdd_HHMMSS_<device id>_<description>.<ext>.

    Raises:
        404: Blob not found for this device, not stored yet or file missing
    """
    blob = blob_repo.get_blob(db, device.id, blob_id)
    if blob is None or blob.status != BLOB_STATUS_STORED or not blob.filename:
        raise HTTPException(status_code=404, detail="File not found")

    path = blob_storage.blob_path(blob.filename)
    if not os.path.exists(path):
        print(f"[BLOB] ❌ Blob #{blob.id} points to missing file {path}")
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(
        path,
        filename=blob_storage.download_name(blob.data_time, device.id, blob.description, blob.extension),
        media_type=blob_storage.content_type_for(blob.extension)
    )


# ==========================================================
# 📌 Delete
# ==========================================================

@router.get("/{device_id}/delete", response_model=device_schema.Device_delete_preview)
def delete_preview(
    device: Device = Depends(get_owned_device),
    db: Session = Depends(get_db)
):
    """
    What a delete would remove: sensors, measures and blobs of the device.
    """
    return {
        "device": device_schema.Device_get.model_validate(device),
        "sensor_count": sensor_repo.count_sensors(db, device.id),
        "measure_count": measure_repo.count_measures_for_device(db, device.id),
        "blob_count": blob_repo.get_blob_count(db, device.id)
    }


@router.post("/{device_id}/delete", response_model=device_schema.Device_delete)
def delete_device(
    payload: device_schema.Device_delete_request,
    request: Request,
    device: Device = Depends(get_owned_device),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete a device and everything it recorded.

    Raises:
        422: confirm is not true
    """
    if not payload.confirm:
        raise HTTPException(status_code=422, detail="Deletion must be confirmed")

    device_id = device.id
    file_names = [b.filename for b in blob_repo.get_blobs(db, device_id)]

    audit(f"[{get_remote_ip(request)}, {user.username}] Deleting device {device_id} '{device.name}'")
    device_repo.delete_device(db, device_id)

    for file_name in file_names:
        try:
            blob_storage.remove_blob_file(file_name)
        except OSError as e:
            print(f"[BLOB] ⚠️  Could not remove {file_name}: {e}")

    return {"id": device_id, "status": "deleted"}


# ==========================================================
# 📌 Configuration Push
# ==========================================================

@router.post("/{device_id}/config", response_model=device_schema.Device_get)
def push_config(
    payload: device_schema.Device_config_push,
    device: Device = Depends(get_owned_device),
    db: Session = Depends(get_db)
):
    """
    Queue a configuration payload for the device.

    config_ver is bumped and the device's session is dropped so the device
    logs in again and picks up the new version.
    """
    updated = device_repo.push_config(db, device, payload.config_data)
    session_repo.delete_sessions(db, device.id)
    print(f"[DEVICE] Config v{updated.config_ver} queued for device #{device.id}")
    return updated
