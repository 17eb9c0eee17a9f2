# src/Schemas/device.py

import secrets
import string
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional

from src.Schemas.sensor import Sensor_status


TOKEN_LENGTH = 40
_TOKEN_ALPHABET = string.digits + string.ascii_lowercase


def generate_token(length: int = TOKEN_LENGTH) -> str:
    """Random token for the anonymous JSON / gallery links."""
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


class Device_form(BaseModel):
    """
    Fields an owner fills in when creating or editing a device.
    `name` is the local part only; the owner's prefix is added on save.
    """
    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., min_length=1, max_length=50, pattern=r'^[0-9A-Za-z]+$',
                      description="Local device name, letters and digits only")
    passphrase: str = Field(..., min_length=1, max_length=200, description="Communication passphrase")
    desc: str = Field(..., min_length=1, description="Device description")
    json_token: Optional[str] = Field(default_factory=generate_token, max_length=100,
                                      description="Token for anonymous JSON data access (empty disables)")
    blob_token: Optional[str] = Field(default_factory=generate_token, max_length=100,
                                      description="Token for anonymous gallery access (empty disables)")
    monitoring: bool = Field(False, description="Notify when sensors stop reporting")


class Device_create(Device_form):
    """
    Schema for registering a new device.
    """
    pass


class Device_update(Device_form):
    """
    Schema for editing a device.
    Tokens left out keep their stored value; an empty string disables the link.
    """
    json_token: Optional[str] = Field(None, max_length=100)
    blob_token: Optional[str] = Field(None, max_length=100)


class Device_edit_view(Device_form):
    """
    Values used to prefill the edit form: local name and decrypted passphrase.
    """
    id: int
    full_name: str


class Device_get(BaseModel):
    """
    Device as returned by the admin API. Never includes the passphrase.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    desc: Optional[str] = None
    user_id: int
    monitoring: bool
    json_token: Optional[str] = None
    blob_token: Optional[str] = None
    app_name: Optional[str] = None
    config_data: Optional[str] = None
    config_ver: Optional[int] = None
    created_at: Optional[datetime] = None
    first_login: Optional[datetime] = None
    last_login: Optional[datetime] = None
    last_bad_login: Optional[datetime] = None


class Device_list_response(BaseModel):
    devices: List[Device_get]
    total: int


class Device_detail(BaseModel):
    """
    Device detail page: the device, its sensors with freshness markers and
    the derived login problem marker.
    """
    device: Device_get
    problem_mark: bool = Field(..., description="Last login attempt failed after the last success")
    blob_count: int
    sensors: List[Sensor_status]
    json_url: Optional[str] = None
    blob_url: Optional[str] = None


class Device_delete_preview(BaseModel):
    device: Device_get
    sensor_count: int
    measure_count: int
    blob_count: int


class Device_delete_request(BaseModel):
    confirm: bool = Field(..., description="Must be true to delete the device and all of its data")


class Device_delete(BaseModel):
    id: int
    status: str


class Device_config_push(BaseModel):
    config_data: str = Field(..., min_length=1, description="Configuration payload delivered on next poll")
