# src/Repositories/measure.py

from datetime import timedelta
from sqlalchemy.orm import Session
from typing import Optional
from src.Core.timeutils import utc_now
from src.Models.measure import Measure
from src.Models.sensor import Sensor, IMPULSE_DEVICE_CLASS
from src.Schemas.ra import SessionDevice


"""
save_data appends a reading and refreshes the sensor's last reading fields
in the same commit.
"""
def save_data(
    db: Session,
    session_device: SessionDevice,
    sensor: Sensor,
    time_diff: int,
    value: float,
    remote_ip: Optional[str],
    out_value: float,
    imp_count: Optional[int],
    data_session: Optional[str]
) -> Measure:
    now = utc_now()
    data_time = now - timedelta(seconds=time_diff)

    measure = Measure(
        sensor_id=sensor.id,
        data_time=data_time,
        server_time=now,
        s_value=value,
        out_value=out_value,
        session_id=session_device.session_id,
        remote_ip=remote_ip
    )
    db.add(measure)

    sensor.last_data_time = data_time
    # impulse counters have no meaningful point value
    if sensor.device_class != IMPULSE_DEVICE_CLASS:
        sensor.last_out_value = out_value
    if data_session:
        sensor.imp_count = imp_count
        sensor.data_session = data_session

    db.commit()
    db.refresh(measure)
    return measure


"""
count_measures_for_device counts readings of all sensors of a device
"""
def count_measures_for_device(db: Session, device_id: int) -> int:
    return (
        db.query(Measure)
        .join(Sensor, Sensor.id == Measure.sensor_id)
        .filter(Sensor.device_id == device_id)
        .count()
    )


"""
get_measures_by_sensor returns the newest readings of a sensor
"""
def get_measures_by_sensor(db: Session, sensor_id: int, limit: int = 100) -> list[Measure]:
    return (
        db.query(Measure)
        .filter(Measure.sensor_id == sensor_id)
        .order_by(Measure.id.desc())
        .limit(limit)
        .all()
    )
