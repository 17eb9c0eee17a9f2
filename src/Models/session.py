# src/Models/session.py

from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from src.DB.base_class import Base


class DeviceSession(Base):
    """
    Login session of a device.

    A device has at most one row here: creating a session deletes the
    previous ones. The session is valid until a whole day has elapsed
    since `started`.

    Schema:
    - id (PK): Session identifier sent by the device with every request
    - hash: Credential proof compared on every request
    - device_id: Device owning the session
    - session_key: Symmetric key material for subsequent requests
    - started: Creation time (UTC)
    - remote_ip: Address the login came from
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)

    hash = Column(String(200), nullable=False)

    device_id = Column(
        Integer,
        ForeignKey('devices.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )

    session_key = Column(String(200), nullable=False)

    started = Column(DateTime, nullable=False)

    remote_ip = Column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<DeviceSession(id={self.id}, device_id={self.device_id}, started={self.started})>"
