# src/Models/sensor.py

"""
Sensor Model

A sensor is a named measurement source of a device. The name is its
stable identity; channel_id is the number the device currently uses for
it in data messages and is renegotiated by every channel definition.

Invariant: within one device, a non-null channel_id belongs to at most
one sensor.
"""

from sqlalchemy.orm import declared_attr
from sqlalchemy import (
    Column, Integer, String, Float, DateTime, Boolean, Text,
    ForeignKey, UniqueConstraint, Index
)
from src.DB.base_class import Base


IMPULSE_DEVICE_CLASS = 3
"""Counter/impulse sensors. Their output value is not a point value."""


class Sensor(Base):

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "sensors"

    # ========================================
    # PRIMARY KEY
    # ========================================
    id = Column(Integer, primary_key=True, autoincrement=True)

    # ========================================
    # IDENTITY
    # ========================================
    device_id = Column(
        Integer,
        ForeignKey('devices.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )

    channel_id = Column(
        Integer,
        nullable=True,
        doc="Device local channel number, NULL when no longer bound"
    )

    name = Column(
        String(100),
        nullable=False,
        doc="Sensor name, unique per device"
    )

    desc = Column(Text, nullable=True)

    # ========================================
    # DEFINITION (sent by the device)
    # ========================================
    device_class = Column(Integer, nullable=False)

    value_type = Column(Integer, nullable=False)

    msg_rate = Column(
        Integer,
        nullable=False,
        doc="Expected reporting period in seconds"
    )

    preprocess_data = Column(
        Boolean,
        nullable=False,
        default=False,
        doc="Multiply raw values by preprocess_factor"
    )

    preprocess_factor = Column(Float, nullable=True)

    # ========================================
    # DENORMALIZED LAST READING
    # ========================================
    last_data_time = Column(DateTime, nullable=True)

    last_out_value = Column(Float, nullable=True)

    imp_count = Column(
        Integer,
        nullable=True,
        doc="Cumulative impulse count of the current counting run"
    )

    data_session = Column(
        String(100),
        nullable=True,
        doc="Token of the continuous counting run reported by the device"
    )

    __table_args__ = (
        UniqueConstraint('device_id', 'name', name='uq_sensor_device_name'),
        Index('idx_sensor_device_channel', 'device_id', 'channel_id'),
    )

    def __repr__(self) -> str:
        return (
            f"<Sensor(id={self.id}, device_id={self.device_id}, "
            f"name={self.name!r}, channel_id={self.channel_id})>"
        )
