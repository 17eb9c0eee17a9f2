# src/Services/blob_storage.py

"""
Blob File Storage
=================

Writes uploaded device files under DATA_DIR and builds download names.
The database only keeps the relative filename; this module is the only
place touching the filesystem.
"""

import os
import re
import unicodedata
from datetime import datetime
from typing import Optional

from src.Core.config import settings


CONTENT_TYPES = {
    "csv": "text/csv",
    "jpg": "image/jpeg",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def ensure_storage() -> None:
    os.makedirs(settings.DATA_DIR, exist_ok=True)


def normalize_extension(extension: Optional[str]) -> str:
    ext = (extension or "").strip().lower().lstrip(".")
    ext = "".join(ch for ch in ext if ch.isalnum())
    return ext or "bin"


def blob_file_name(device_id: int, blob_id: int, extension: Optional[str]) -> str:
    """Relative path of a stored blob: <device id>/<blob id>.<ext>"""
    return f"{device_id}/{blob_id}.{normalize_extension(extension)}"


def blob_path(file_name: str) -> str:
    return os.path.join(settings.DATA_DIR, file_name)


def check_blob_size(size: int) -> None:
    """
    Raises:
        ValueError: Empty or oversized payload
    """
    if size <= 0:
        raise ValueError("empty file")
    if size > settings.MAX_BLOB_BYTES:
        raise ValueError(f"file exceeds {settings.MAX_BLOB_BYTES} bytes")


def save_blob_file(file_name: str, content: bytes) -> int:
    """
    Write blob bytes to DATA_DIR/file_name.

    Returns:
        Number of bytes written

    Raises:
        ValueError: Empty or oversized payload
        OSError: Write failed
    """
    check_blob_size(len(content))

    path = blob_path(file_name)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(content)
    return len(content)


def remove_blob_file(file_name: Optional[str]) -> None:
    if not file_name:
        return
    path = blob_path(file_name)
    if os.path.exists(path):
        os.remove(path)


def webalize(text: Optional[str], allowed: str = "._") -> str:
    """
    URL/file safe form of a free text: ASCII, lowercase, runs of other
    characters collapsed to '-'.

    Example:
        webalize("Kamera Zahrada 1") -> "kamera-zahrada-1"
    """
    value = unicodedata.normalize("NFKD", text or "").encode("ascii", "ignore").decode("ascii")
    value = value.lower()
    value = re.sub(r"[^a-z0-9" + re.escape(allowed) + r"]+", "-", value)
    return value.strip("-")


def download_name(data_time: datetime, device_id: int, description: Optional[str], extension: Optional[str]) -> str:
    """
    File name offered on download:
    YYYYmmdd_HHMMSS_<device id>_<webalized description>.<ext>
    """
    return (
        f"{data_time.strftime('%Y%m%d_%H%M%S')}_{device_id}_"
        f"{webalize(description)}.{extension or ''}"
    )


def content_type_for(extension: Optional[str]) -> str:
    return CONTENT_TYPES.get((extension or "").lower(), DEFAULT_CONTENT_TYPE)
