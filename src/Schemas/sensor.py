# src/Schemas/sensor.py

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional


"""
Sensor as stored, with the denormalized last reading.
"""
class Sensor_get(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    device_id: int
    channel_id: Optional[int] = None
    name: str
    desc: Optional[str] = None
    device_class: int
    value_type: int
    msg_rate: int
    preprocess_data: bool
    preprocess_factor: Optional[float] = None
    last_data_time: Optional[datetime] = None
    last_out_value: Optional[float] = None
    imp_count: Optional[int] = None
    data_session: Optional[str] = None


"""
Sensor row on the device detail.
warning_icon: 0 = ok or no data yet, 1 = late and monitored, 2 = late, not monitored.
"""
class Sensor_status(Sensor_get):
    warning_icon: int = Field(0, ge=0, le=2)
