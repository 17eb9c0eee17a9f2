# src/Repositories/blob.py

from sqlalchemy.orm import Session
from typing import List, Optional
from src.Core.timeutils import utc_now, from_epoch
from src.Models.blob import Blob, BLOB_STATUS_PENDING, BLOB_STATUS_STORED
from src.Schemas.ra import SessionDevice


# ==========================================================
# 📌 TWO-PHASE UPLOAD
# ==========================================================

def save_blob(
    db: Session,
    session_device: SessionDevice,
    time: float,
    description: Optional[str],
    extension: Optional[str],
    filesize: int,
    remote_ip: Optional[str]
) -> int:
    """
    Insert blob metadata in pending state.

    `time` is the absolute capture time (unix seconds) reported by the
    device, unlike readings which carry a relative offset.

    Returns:
        ID of the new blob row
    """
    blob = Blob(
        device_id=session_device.device_id,
        data_time=from_epoch(time),
        server_time=utc_now(),
        description=description,
        extension=extension,
        session_id=session_device.session_id,
        remote_ip=remote_ip,
        filesize=filesize,
        status=BLOB_STATUS_PENDING
    )
    db.add(blob)
    db.commit()
    db.refresh(blob)
    return blob.id


def update_blob(db: Session, blob_id: int, file_name: str) -> bool:
    """
    Mark a blob as stored once its bytes are on disk.

    Returns:
        True if updated, False if the row does not exist
    """
    updated = db.query(Blob).filter(Blob.id == blob_id).update(
        {"filename": file_name, "status": BLOB_STATUS_STORED},
        synchronize_session=False
    )
    db.commit()
    return updated > 0


# ==========================================================
# 📌 LOOKUPS
# ==========================================================

def get_blobs(db: Session, device_id: int) -> List[Blob]:
    """Blobs of a device, newest capture first."""
    return (
        db.query(Blob)
        .filter(Blob.device_id == device_id)
        .order_by(Blob.data_time.desc(), Blob.id.desc())
        .all()
    )


def get_blob(db: Session, device_id: int, blob_id: int) -> Optional[Blob]:
    """
    Blob by id, restricted to the given device so one device's id cannot
    be used to reach another device's file.
    """
    return (
        db.query(Blob)
        .filter(Blob.id == blob_id, Blob.device_id == device_id)
        .first()
    )


def get_blob_count(db: Session, device_id: int) -> int:
    return db.query(Blob).filter(Blob.device_id == device_id).count()
