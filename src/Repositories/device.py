# src/Repositories/device.py

"""
Device Repository Module

This module provides database access functions for Device model operations.

Responsibilities:
- CRUD operations for devices owned by a user
- Login bookkeeping (bad login stamp)
- Configuration push and pull-based delivery
- Cascade delete of a device and everything it recorded

Usage:
    from src.Repositories import device as device_repo
    from src.DB.session import SessionLocal

    db = SessionLocal()
    my_devices = device_repo.get_devices_by_user(db, user.id)

Design Pattern:
    Repository Pattern: routes never build queries themselves; absent rows
    are reported as None / False and the caller decides how to respond.
"""

import hmac
from sqlalchemy.orm import Session
from typing import List, Optional
from src.Core.timeutils import utc_now
from src.Models.blob import Blob
from src.Models.device import Device
from src.Models.measure import Measure
from src.Models.sensor import Sensor
from src.Models.session import DeviceSession
from src.Models.user import User
from src.Schemas.device import Device_create, Device_update
from src.Services.crypto import passphrase_cipher


def full_device_name(user: User, local_name: str) -> str:
    """Login name of a device: owner prefix + ':' + local name."""
    return f"{user.prefix}:{local_name}"


def local_device_name(full_name: str) -> str:
    """Local part of a device name (prefix stripped)."""
    parts = full_name.split(":", 1)
    return parts[1] if len(parts) == 2 else full_name


# ==========================================================
# 📌 BASIC CRUD OPERATIONS
# ==========================================================

def get_device_by_id(db: Session, device_id: int) -> Optional[Device]:
    """
    Get a specific device by its ID.

    Returns:
        Device object or None if not found
    """
    return db.query(Device).filter(Device.id == device_id).first()


def get_device_by_name(db: Session, name: str) -> Optional[Device]:
    """
    Get a device by its full login name, used by device login.

    Example:
        device = get_device_by_name(db, "jan:meteo1")
    """
    return db.query(Device).filter(Device.name == name).first()


def get_devices_by_user(db: Session, user_id: int) -> List[Device]:
    """All devices owned by a user, ordered by name."""
    return (
        db.query(Device)
        .filter(Device.user_id == user_id)
        .order_by(Device.name)
        .all()
    )


def device_name_exists(db: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    """
    Check whether a full device name is taken.

    Args:
        exclude_id: Device to ignore (the one being edited)
    """
    query = db.query(Device).filter(Device.name == name)
    if exclude_id is not None:
        query = query.filter(Device.id != exclude_id)
    return query.count() > 0


def create_device(db: Session, device: Device_create, user: User) -> Device:
    """
    Create a new device for a user.

    The local name gets the user's prefix and the passphrase is encrypted
    with the resulting full name.

    Raises:
        IntegrityError: If the full name already exists
    """
    values = device.model_dump()
    values["name"] = full_device_name(user, device.name)
    values["passphrase"] = passphrase_cipher.encrypt(device.passphrase, values["name"])
    values["user_id"] = user.id

    new_device = Device(**values)
    db.add(new_device)
    db.commit()
    db.refresh(new_device)
    print(f"[DEVICE] Created device #{new_device.id} '{new_device.name}' for user #{user.id}")
    return new_device


def update_device(db: Session, db_device: Device, device: Device_update, user: User) -> Device:
    """
    Apply the edit form to an existing device.

    The passphrase is re-encrypted because the name may have changed.
    """
    values = device.model_dump()
    for token in ("json_token", "blob_token"):
        if values[token] is None:
            del values[token]
    values["name"] = full_device_name(user, device.name)
    values["passphrase"] = passphrase_cipher.encrypt(device.passphrase, values["name"])

    for key, value in values.items():
        setattr(db_device, key, value)

    db.commit()
    db.refresh(db_device)
    return db_device


def delete_device(db: Session, device_id: int) -> bool:
    """
    Delete a device with its sessions, sensors, measures and blobs.

    Blob files on disk are not touched here; the caller removes them
    after the rows are gone.

    Returns:
        True if deleted, False if not found
    """
    db_device = get_device_by_id(db, device_id)
    if not db_device:
        return False

    sensor_ids = [row[0] for row in db.query(Sensor.id).filter(Sensor.device_id == device_id).all()]
    if sensor_ids:
        db.query(Measure).filter(Measure.sensor_id.in_(sensor_ids)).delete(synchronize_session=False)
    db.query(Sensor).filter(Sensor.device_id == device_id).delete(synchronize_session=False)
    db.query(Blob).filter(Blob.device_id == device_id).delete(synchronize_session=False)
    db.query(DeviceSession).filter(DeviceSession.device_id == device_id).delete(synchronize_session=False)
    db.delete(db_device)
    db.commit()
    return True


# ==========================================================
# 📌 LOGIN BOOKKEEPING
# ==========================================================

def bad_login(db: Session, device_id: int) -> bool:
    """
    Stamp a rejected login attempt.

    The admin UI flags the device when last_bad_login is newer than
    last_login.
    """
    updated = db.query(Device).filter(Device.id == device_id).update(
        {"last_bad_login": utc_now()}, synchronize_session=False
    )
    db.commit()
    return updated > 0


def verify_passphrase(device: Device, passphrase: str) -> bool:
    """Compare a supplied passphrase with the stored encrypted one."""
    try:
        stored = passphrase_cipher.decrypt(device.passphrase, device.name)
    except ValueError:
        print(f"[DEVICE] ❌ Stored passphrase of '{device.name}' cannot be decrypted")
        return False
    return hmac.compare_digest(stored.encode("utf-8"), passphrase.encode("utf-8"))


# ==========================================================
# 📌 CONFIGURATION DELIVERY
# ==========================================================

def push_config(db: Session, db_device: Device, config_data: str) -> Device:
    """
    Store a configuration payload for the device and bump config_ver.

    The version starts at 1 and increases by one with every push.
    """
    db_device.config_data = config_data
    db_device.config_ver = 1 if not db_device.config_ver else db_device.config_ver + 1
    db.commit()
    db.refresh(db_device)
    return db_device


def delete_config_request(db: Session, device_id: int) -> None:
    """
    Clear the pending configuration once the device has fetched it.
    """
    db.query(Device).filter(Device.id == device_id).update(
        {"config_data": None}, synchronize_session=False
    )
    db.commit()
