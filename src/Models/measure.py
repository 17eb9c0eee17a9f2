# src/Models/measure.py
from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, BigInteger, Integer, String, Float, DateTime, ForeignKey, Index
from src.DB.base_class import Base


class Measure(Base):
    """
    Append-only sensor reading.

    data_time is when the reading happened (server time minus the offset
    reported by the device), server_time is when it was received.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "measures"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    sensor_id = Column(
        Integer,
        ForeignKey('sensors.id', ondelete='CASCADE'),
        nullable=False
    )

    data_time = Column(DateTime, nullable=False)
    server_time = Column(DateTime, nullable=False)

    # Raw value as sent, and value after preprocessing
    s_value = Column(Float, nullable=True)
    out_value = Column(Float, nullable=True)

    session_id = Column(Integer, nullable=True)
    remote_ip = Column(String(50), nullable=True)

    __table_args__ = (
        Index('idx_measure_sensor_time', 'sensor_id', 'data_time'),
    )

    def __repr__(self) -> str:
        return (
            f"<Measure(id={self.id}, sensor_id={self.sensor_id}, "
            f"data_time={self.data_time}, out_value={self.out_value})>"
        )
