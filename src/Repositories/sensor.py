# src/Repositories/sensor.py

"""
Sensor Repository Module

Sensor records are created and rebound from the channel definitions a
device sends after login. The sensor name is the stable identity; the
channel number is whatever the device currently uses for it.
"""

from sqlalchemy.orm import Session
from typing import List, Optional
from src.Models.sensor import Sensor
from src.Schemas.ra import SessionDevice


# ==========================================================
# 📌 CHANNEL DEFINITIONS
# ==========================================================

def process_channel_definition(
    db: Session,
    session_device: SessionDevice,
    channel: int,
    device_class: int,
    value_type: int,
    msg_rate: int,
    name: str,
    factor: Optional[float]
) -> Sensor:
    """
    Create or rebind the sensor `name` of the device to `channel`.

    - Unknown name: a new sensor is created on the channel; preprocessing
      is enabled when a factor is given.
    - Known name on another channel: the sensor moves to `channel`.
    - Any other sensor of the device holding `channel` loses it.

    The sensor matching by name always wins the channel, so after the call
    the channel is bound to exactly one sensor of the device.

    Returns:
        The sensor named `name`
    """
    device_id = session_device.device_id
    sensor = (
        db.query(Sensor)
        .filter(Sensor.device_id == device_id, Sensor.name == name)
        .first()
    )

    if sensor is None:
        sensor = Sensor(
            device_id=device_id,
            channel_id=channel,
            name=name,
            device_class=device_class,
            value_type=value_type,
            msg_rate=msg_rate,
            preprocess_data=factor is not None,
            preprocess_factor=factor
        )
        db.add(sensor)
        print(f"[INGEST] Device #{device_id}: new sensor '{name}' on channel {channel}")
    elif sensor.channel_id != channel:
        print(f"[INGEST] Device #{device_id}: sensor '{name}' moved from channel {sensor.channel_id} to {channel}")
        sensor.channel_id = channel

    db.query(Sensor).filter(
        Sensor.device_id == device_id,
        Sensor.channel_id == channel,
        Sensor.name != name
    ).update({"channel_id": None}, synchronize_session="fetch")

    db.commit()
    db.refresh(sensor)
    return sensor


# ==========================================================
# 📌 LOOKUPS
# ==========================================================

def get_sensor_by_channel(db: Session, device_id: int, channel: int) -> Optional[Sensor]:
    """
    Sensor currently bound to `channel` on the device, or None.
    Used before recording a measurement.
    """
    return (
        db.query(Sensor)
        .filter(Sensor.device_id == device_id, Sensor.channel_id == channel)
        .first()
    )


def get_device_sensors(db: Session, device_id: int) -> List[Sensor]:
    """
    All sensors of a device ordered by channel, unbound ones last.
    """
    return (
        db.query(Sensor)
        .filter(Sensor.device_id == device_id)
        .order_by(Sensor.channel_id.is_(None), Sensor.channel_id, Sensor.name)
        .all()
    )


def count_sensors(db: Session, device_id: int) -> int:
    return db.query(Sensor).filter(Sensor.device_id == device_id).count()
