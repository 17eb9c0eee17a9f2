# src/Schemas/ra.py

"""
Payloads of the device-facing API (/ra).

Devices authenticate once with /ra/login and then send the returned
session id and hash with every request (X-Session-Id / X-Session-Hash).
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


# ten years; older readings are rejected
MAX_TIME_DIFF = 10 * 365 * 24 * 3600

# 2100-01-01T00:00:00Z, upper bound of blob capture times
MAX_CAPTURE_TIME = 4102444800


class SessionDevice(BaseModel):
    """
    Authenticated context of a device request, produced by check_session.
    """
    model_config = ConfigDict(frozen=True)

    session_id: int
    session_key: str
    device_id: int


class Login_request(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Full device name including prefix")
    passphrase: str = Field(..., min_length=1)
    app_name: Optional[str] = Field(None, max_length=100)


class Login_response(BaseModel):
    session_id: int
    session_hash: str
    session_key: str
    config_ver: Optional[int] = None


class Channel_definition(BaseModel):
    channel: int = Field(..., ge=0, description="Device local channel number")
    device_class: int
    value_type: int
    msg_rate: int = Field(..., ge=0, description="Expected reporting period in seconds")
    name: str = Field(..., min_length=1, max_length=100)
    factor: Optional[float] = Field(None, description="Preprocessing multiplier, null disables preprocessing")


class Data_reading(BaseModel):
    channel: int = Field(..., ge=0)
    time_diff: int = Field(0, ge=0, le=MAX_TIME_DIFF, description="How many seconds ago the reading was taken")
    value: float
    impulse_count: Optional[int] = None
    data_session: Optional[str] = Field("", max_length=100)


class Data_response(BaseModel):
    measure_id: int
    sensor_id: int
    out_value: float


class Config_response(BaseModel):
    config_ver: Optional[int] = None
    config_data: Optional[str] = None
