# src/Repositories/session.py

"""
Session Repository Module

Creation and validation of device login sessions.

Responsibilities:
- Keep at most one session per device (new login replaces the old one)
- Stamp login bookkeeping on the device row
- Validate session id + hash sent with every device request

Usage:
    from src.Repositories import session as session_repo

    session_id = session_repo.create_session(
        db, device.id, device.first_login is None, hash, key, ip, "meteo-fw"
    )
    session_device = session_repo.check_session(db, session_id, hash)
"""

import hmac
from sqlalchemy.orm import Session
from src.Core.exceptions import SessionNotFound, SessionInvalid
from src.Core.timeutils import utc_now
from src.Models.device import Device
from src.Models.session import DeviceSession
from src.Schemas.ra import SessionDevice


# ==========================================================
# 📌 SESSION LIFECYCLE
# ==========================================================

def create_session(
    db: Session,
    device_id: int,
    save_first_login: bool,
    session_hash: str,
    session_key: str,
    remote_ip: str | None,
    app_name: str | None
) -> int:
    """
    Replace the device's sessions with a new one.

    Deletes every existing session of the device, inserts the new session
    stamped with the current time and updates the device's last_login and
    app_name. first_login is written only when save_first_login is set.

    Args:
        db: SQLAlchemy session
        device_id: Device that logged in
        save_first_login: True on the device's first successful login
        session_hash: Credential proof checked on later requests
        session_key: Symmetric key handed to the device
        remote_ip: Address of the login request
        app_name: Application name reported by the device

    Returns:
        ID of the new session
    """
    db.query(DeviceSession).filter(DeviceSession.device_id == device_id).delete(
        synchronize_session=False
    )

    now = utc_now()
    new_session = DeviceSession(
        hash=session_hash,
        device_id=device_id,
        started=now,
        session_key=session_key,
        remote_ip=remote_ip
    )
    db.add(new_session)
    db.flush()

    values = {"last_login": now, "app_name": app_name}
    if save_first_login:
        values["first_login"] = now
    db.query(Device).filter(Device.id == device_id).update(values, synchronize_session=False)

    db.commit()
    print(f"[SESSION] Device #{device_id} logged in from {remote_ip}, session #{new_session.id}")
    return new_session.id


def delete_sessions(db: Session, device_id: int) -> int:
    """
    Drop all sessions of a device, forcing it to log in again.

    Returns:
        Number of deleted sessions
    """
    deleted = db.query(DeviceSession).filter(DeviceSession.device_id == device_id).delete(
        synchronize_session=False
    )
    db.commit()
    return deleted


def count_sessions(db: Session, device_id: int) -> int:
    return db.query(DeviceSession).filter(DeviceSession.device_id == device_id).count()


# ==========================================================
# 📌 SESSION VALIDATION
# ==========================================================

def check_session(db: Session, session_id: int, session_hash: str) -> SessionDevice:
    """
    Validate a session presented by a device.

    A session expires once a whole day has elapsed since it started.

    Args:
        db: SQLAlchemy session
        session_id: Session identifier sent by the device
        session_hash: Hash sent by the device

    Returns:
        SessionDevice with session id, session key and device id

    Raises:
        SessionNotFound: No session with this id
        SessionInvalid: Hash mismatch ("bad hash") or expired ("session expired")
    """
    row = db.query(DeviceSession).filter(DeviceSession.id == session_id).first()
    if row is None:
        raise SessionNotFound(f"session {session_id} not found")

    if not hmac.compare_digest(row.hash.encode("utf-8"), (session_hash or "").encode("utf-8")):
        raise SessionInvalid("bad hash")

    if (utc_now() - row.started).days > 0:
        raise SessionInvalid("session expired")

    return SessionDevice(
        session_id=row.id,
        session_key=row.session_key,
        device_id=row.device_id
    )
