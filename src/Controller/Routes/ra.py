# src/Controller/Routes/ra.py

"""
Device-facing REST API (/ra)

Endpoints used by the RA devices themselves.

Endpoints:
- POST /ra/login      Authenticate with name + passphrase, get a session
- POST /ra/channels   Send a channel definition (sensor name <-> channel)
- POST /ra/data       Send one reading for a channel
- POST /ra/blobs      Upload a file (multipart)
- GET  /ra/config     Fetch the pending configuration (delivered once)

Authentication:
    Every endpoint except /ra/login requires the X-Session-Id and
    X-Session-Hash headers returned by /ra/login. A session is replaced
    by the next login of the same device and expires after a day.

Flow:
    login -> channels (once per sensor) -> data / blobs ... -> config poll
"""

import secrets
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.orm import Session

from src.Controller.deps import get_remote_ip, get_session_device
from src.Core.config import settings
from src.Core.log_ws import audit, log_from_thread
from src.DB.database import get_db
from src.Repositories import blob as blob_repo
from src.Repositories import device as device_repo
from src.Repositories import measure as measure_repo
from src.Repositories import sensor as sensor_repo
from src.Repositories import session as session_repo
from src.Schemas import blob as blob_schema
from src.Schemas import ra as ra_schema
from src.Schemas import sensor as sensor_schema
from src.Services import blob_storage, device_status

router = APIRouter()


# ==========================================================
# 📌 Login
# ==========================================================

@router.post("/login", response_model=ra_schema.Login_response)
def login(
    payload: ra_schema.Login_request,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Authenticate a device and open its session.

    On a wrong passphrase the device's last_bad_login is stamped and the
    request is rejected. On success previous sessions of the device are
    replaced by the new one.

    Raises:
        403: Unknown device or wrong passphrase
    """
    remote_ip = get_remote_ip(request)
    device = device_repo.get_device_by_name(db, payload.name)
    if device is None:
        audit(f"Login of unknown device '{payload.name}' from {remote_ip}", "warning")
        raise HTTPException(status_code=403, detail="Login failed")

    if not device_repo.verify_passphrase(device, payload.passphrase):
        device_repo.bad_login(db, device.id)
        audit(f"Bad login of device #{device.id} '{device.name}' from {remote_ip}", "warning")
        raise HTTPException(status_code=403, detail="Login failed")

    session_hash = secrets.token_hex(32)
    session_key = secrets.token_hex(16)
    session_id = session_repo.create_session(
        db,
        device.id,
        device.first_login is None,
        session_hash,
        session_key,
        remote_ip,
        payload.app_name
    )
    db.refresh(device)

    return {
        "session_id": session_id,
        "session_hash": session_hash,
        "session_key": session_key,
        "config_ver": device.config_ver
    }


# ==========================================================
# 📌 Telemetry
# ==========================================================

@router.post("/channels", response_model=sensor_schema.Sensor_get)
def define_channel(
    payload: ra_schema.Channel_definition,
    session_device: ra_schema.SessionDevice = Depends(get_session_device),
    db: Session = Depends(get_db)
):
    """
    Bind a sensor name to a channel number.

    Creates the sensor on first definition. The channel is taken away from
    any other sensor of the device that held it.
    """
    return sensor_repo.process_channel_definition(
        db,
        session_device,
        payload.channel,
        payload.device_class,
        payload.value_type,
        payload.msg_rate,
        payload.name,
        payload.factor
    )


@router.post("/data", response_model=ra_schema.Data_response, status_code=201)
def send_data(
    payload: ra_schema.Data_reading,
    request: Request,
    session_device: ra_schema.SessionDevice = Depends(get_session_device),
    db: Session = Depends(get_db)
):
    """
    Record one reading.

    time_diff is how many seconds ago the reading was taken on the device.

    Raises:
        404: No sensor is bound to the channel (channel definition missing)
    """
    sensor = sensor_repo.get_sensor_by_channel(db, session_device.device_id, payload.channel)
    if sensor is None:
        print(f"[INGEST] Device #{session_device.device_id}: no sensor on channel {payload.channel}")
        raise HTTPException(status_code=404, detail=f"No sensor defined for channel {payload.channel}")

    out_value = device_status.compute_output_value(sensor, payload.value)
    measure = measure_repo.save_data(
        db,
        session_device,
        sensor,
        payload.time_diff,
        payload.value,
        get_remote_ip(request),
        out_value,
        payload.impulse_count,
        payload.data_session
    )

    return {
        "measure_id": measure.id,
        "sensor_id": sensor.id,
        "out_value": out_value
    }


@router.post("/blobs", response_model=blob_schema.Blob_upload_response, status_code=201)
def upload_blob(
    request: Request,
    time: float = Form(..., ge=0, le=ra_schema.MAX_CAPTURE_TIME, description="Capture time, unix seconds"),
    description: Optional[str] = Form(None),
    extension: Optional[str] = Form(None),
    file: UploadFile = File(...),
    session_device: ra_schema.SessionDevice = Depends(get_session_device),
    db: Session = Depends(get_db)
):
    """
    Upload a file captured by the device.

    Size is checked before anything is recorded. The metadata row is then
    written (pending), then the bytes; only when the write succeeds is the
    row marked stored.

    Raises:
        400: Empty or oversized file
        422: Capture time out of range
        500: File could not be written (row stays pending)
    """
    # one byte past the limit is enough to detect an oversized upload
    content = file.file.read(settings.MAX_BLOB_BYTES + 1)
    try:
        blob_storage.check_blob_size(len(content))
    except ValueError as e:
        print(f"[INGEST] Device #{session_device.device_id}: blob rejected, {e}")
        raise HTTPException(status_code=400, detail=str(e))

    ext = blob_storage.normalize_extension(extension)
    blob_id = blob_repo.save_blob(
        db,
        session_device,
        time,
        description,
        ext,
        len(content),
        get_remote_ip(request)
    )

    file_name = blob_storage.blob_file_name(session_device.device_id, blob_id, ext)
    try:
        size = blob_storage.save_blob_file(file_name, content)
    except OSError as e:
        log_from_thread(f"[INGEST] ❌ Blob #{blob_id} write failed: {e}", "error")
        raise HTTPException(status_code=500, detail="File could not be stored")

    blob_repo.update_blob(db, blob_id, file_name)
    log_from_thread(f"[INGEST] Blob #{blob_id} stored for device #{session_device.device_id} ({size} B)")

    return {"blob_id": blob_id, "filename": file_name, "filesize": size}


# ==========================================================
# 📌 Configuration
# ==========================================================

@router.get("/config", response_model=ra_schema.Config_response)
def fetch_config(
    session_device: ra_schema.SessionDevice = Depends(get_session_device),
    db: Session = Depends(get_db)
):
    """
    Deliver the pending configuration once.

    The payload is cleared after it is read, so a second poll on the same
    version returns config_data = null.
    """
    device = device_repo.get_device_by_id(db, session_device.device_id)
    if device is None:
        raise HTTPException(status_code=404, detail="Device not found")

    response = {"config_ver": device.config_ver, "config_data": device.config_data}
    if device.config_data is not None:
        device_repo.delete_config_request(db, device.id)
        print(f"[DEVICE] Config v{device.config_ver} delivered to device #{device.id}")
    return response
