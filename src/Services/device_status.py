# src/Services/device_status.py

"""
Derived device and sensor state for the admin views.

Nothing here is stored: the markers are recomputed from the login and
last-reading timestamps on every request.
"""

from datetime import datetime
from typing import Optional

from src.Core.timeutils import utc_now
from src.Models.device import Device
from src.Models.sensor import Sensor


SENSOR_OK = 0
SENSOR_LATE_MONITORED = 1
SENSOR_LATE = 2


def problem_mark(device: Device) -> bool:
    """
    True when the most recent login attempt failed: last_bad_login is set
    and either there was never a successful login or it is older.
    """
    if device.last_bad_login is None:
        return False
    if device.last_login is None:
        return True
    return device.last_bad_login > device.last_login


def sensor_warning_icon(sensor: Sensor, monitoring: bool, now: Optional[datetime] = None) -> int:
    """
    Freshness marker of a sensor.

    Returns:
        SENSOR_OK when no data yet or the last reading is within msg_rate,
        SENSOR_LATE_MONITORED when late on a monitored device,
        SENSOR_LATE when late on an unmonitored device
    """
    if sensor.last_data_time is None:
        return SENSOR_OK
    current = now or utc_now()
    if (current - sensor.last_data_time).total_seconds() > sensor.msg_rate:
        return SENSOR_LATE_MONITORED if monitoring else SENSOR_LATE
    return SENSOR_OK


def compute_output_value(sensor: Sensor, value: float) -> float:
    """Raw value scaled by the sensor's preprocessing factor when enabled."""
    if sensor.preprocess_data and sensor.preprocess_factor is not None:
        return value * sensor.preprocess_factor
    return value


def json_data_url(base_url: str, device: Device) -> Optional[str]:
    if not device.json_token:
        return None
    return f"{base_url.rstrip('/')}/json/data/{device.json_token}/{device.id}/"


def gallery_url(base_url: str, device: Device) -> Optional[str]:
    if not device.blob_token:
        return None
    return f"{base_url.rstrip('/')}/gallery/{device.blob_token}/{device.id}/"
