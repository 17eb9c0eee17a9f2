from datetime import timedelta

from src.Core.timeutils import utc_now
from src.Models.sensor import Sensor, IMPULSE_DEVICE_CLASS
from src.Repositories import measure as measure_repo
from src.Repositories import sensor as sensor_repo
from src.Services.device_status import compute_output_value


def _sensor(db, session_device, device_class=1, factor=None):
    return sensor_repo.process_channel_definition(
        db, session_device, 1, device_class, 1, 60, "s1", factor
    )


def test_data_time_is_offset_by_time_diff(db, session_device):
    sensor = _sensor(db, session_device)
    before = utc_now()

    measure = measure_repo.save_data(db, session_device, sensor, 120, 21.5, "1.2.3.4", 21.5, None, "")

    assert measure.server_time - measure.data_time == timedelta(seconds=120)
    assert measure.data_time <= before
    assert measure.session_id == session_device.session_id
    assert measure.s_value == 21.5


def test_last_values_follow_reading(db, session_device):
    sensor = _sensor(db, session_device)

    measure = measure_repo.save_data(db, session_device, sensor, 0, 10.0, None, 10.0, None, "")

    db.expire_all()
    stored = db.get(Sensor, sensor.id)
    assert stored.last_data_time == measure.data_time
    assert stored.last_out_value == 10.0


def test_impulse_class_keeps_last_out_value(db, session_device):
    sensor = _sensor(db, session_device, device_class=IMPULSE_DEVICE_CLASS)

    measure_repo.save_data(db, session_device, sensor, 0, 5.0, None, 5.0, None, "")

    db.expire_all()
    stored = db.get(Sensor, sensor.id)
    assert stored.last_out_value is None
    assert stored.last_data_time is not None


def test_empty_data_session_keeps_counter(db, session_device):
    sensor = _sensor(db, session_device, device_class=IMPULSE_DEVICE_CLASS)
    measure_repo.save_data(db, session_device, sensor, 0, 1.0, None, 1.0, 17, "run-a")

    measure_repo.save_data(db, session_device, sensor, 0, 1.0, None, 1.0, 99, "")

    db.expire_all()
    stored = db.get(Sensor, sensor.id)
    assert stored.imp_count == 17
    assert stored.data_session == "run-a"


def test_data_session_updates_counter(db, session_device):
    sensor = _sensor(db, session_device, device_class=IMPULSE_DEVICE_CLASS)

    measure_repo.save_data(db, session_device, sensor, 0, 1.0, None, 1.0, 3, "run-b")

    db.expire_all()
    stored = db.get(Sensor, sensor.id)
    assert stored.imp_count == 3
    assert stored.data_session == "run-b"


def test_output_value_uses_factor(db, session_device):
    plain = _sensor(db, session_device)
    assert compute_output_value(plain, 4.0) == 4.0

    scaled = sensor_repo.process_channel_definition(db, session_device, 2, 1, 1, 60, "s2", 0.5)
    assert compute_output_value(scaled, 4.0) == 2.0


def test_count_measures_for_device(db, session_device):
    sensor = _sensor(db, session_device)
    for value in (1.0, 2.0, 3.0):
        measure_repo.save_data(db, session_device, sensor, 0, value, None, value, None, "")

    assert measure_repo.count_measures_for_device(db, session_device.device_id) == 3
    assert len(measure_repo.get_measures_by_sensor(db, sensor.id)) == 3
