# src/Schemas/blob.py

from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import List, Optional


class Blob_get(BaseModel):
    """
    Blob metadata as listed in the admin API.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    device_id: int
    data_time: datetime
    server_time: datetime
    description: Optional[str] = None
    extension: Optional[str] = None
    filesize: Optional[int] = None
    status: int
    filename: Optional[str] = None
    remote_ip: Optional[str] = None


class Blob_list_response(BaseModel):
    device_id: int
    blobs: List[Blob_get]
    total: int


class Blob_upload_response(BaseModel):
    blob_id: int
    filename: str
    filesize: int
