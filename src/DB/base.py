"""
src/DB/base.py
==========================
SQLAlchemy Model Registry
==========================

Imports every model so that Base.metadata is complete before Alembic
autogeneration or create_all() runs.

Models Registered:
-----------------
- User: Owners of devices (admin accounts)
- Device: Registered RA devices with credentials and config payload
- DeviceSession: Active login session of a device
- Sensor: Named measurement source of a device, bound to a channel
- Measure: Append-only sensor readings
- Blob: Uploaded files (images, CSV) of a device

Important:
----------
Any new model class MUST be imported here.
"""

from src.DB.base_class import Base

# ============================================================
# MODEL IMPORTS - DO NOT REMOVE
# ============================================================
from src.Models.user import User
from src.Models.device import Device
from src.Models.session import DeviceSession
from src.Models.sensor import Sensor
from src.Models.measure import Measure
from src.Models.blob import Blob
