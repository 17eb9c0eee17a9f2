# src/Models/device.py

"""
Device Model - RA Device Registry

This module defines the SQLAlchemy model for registered RA devices.

The devices table is the authoritative registry of all devices allowed to
log in and send data. It holds the device credentials (encrypted
passphrase), the public data access tokens, the pending configuration
payload and the login bookkeeping timestamps.

Database Table: devices
Primary Key: id (Integer)

Usage:
    from src.Models.device import Device
    from src.DB.session import SessionLocal

    db = SessionLocal()
    device = Device(
        name="jan:meteo1",
        passphrase=passphrase_cipher.encrypt("secret", "jan:meteo1"),
        desc="Weather station on the roof",
        user_id=1,
    )
    db.add(device)
    db.commit()
"""

from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, ForeignKey
from sqlalchemy.sql import func
from src.DB.base_class import Base


class Device(Base):
    """
    SQLAlchemy model representing a registered RA device.

    Schema:
    - id (PK): Numeric device identifier
    - name: Login name "<user prefix>:<local name>" (unique)
    - passphrase: Encrypted communication passphrase, keyed by name
    - desc: Free text description
    - user_id: Owning user
    - monitoring: Notify the owner when sensors stop reporting
    - json_token / blob_token: Secrets for the public JSON and gallery links
    - app_name: Application name reported by the device on last login
    - config_data / config_ver: Pending configuration payload and its version
    - first_login / last_login / last_bad_login: Login bookkeeping

    Relationships:
    - One-to-many with sensors, sessions and blobs (cascade on delete)
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "devices"

    # ============================================================
    # Primary Key
    # ============================================================
    id = Column(Integer, primary_key=True, autoincrement=True)

    # ============================================================
    # Identity & Credentials
    # ============================================================
    name = Column(
        String(100),
        nullable=False,
        unique=True,
        doc="Login name, user prefix + ':' + local name (e.g. 'jan:meteo1')"
    )

    passphrase = Column(
        String(500),
        nullable=False,
        doc="Encrypted communication passphrase"
    )

    desc = Column(
        Text,
        nullable=True,
        doc="Description shown in the admin UI"
    )

    user_id = Column(
        Integer,
        ForeignKey('users.id'),
        nullable=False,
        index=True,
        doc="Owner of the device"
    )

    # ============================================================
    # Monitoring & Public Access
    # ============================================================
    monitoring = Column(
        Boolean,
        default=False,
        nullable=False,
        doc="Send a notification when sensors report less often than msg_rate"
    )

    json_token = Column(
        String(100),
        nullable=True,
        doc="Token for anonymous access to the JSON data export"
    )

    blob_token = Column(
        String(100),
        nullable=True,
        doc="Token for anonymous access to the image gallery"
    )

    # ============================================================
    # Device Reported State
    # ============================================================
    app_name = Column(
        String(100),
        nullable=True,
        doc="Firmware / application name reported at login"
    )

    config_data = Column(
        Text,
        nullable=True,
        doc="Configuration payload waiting to be fetched by the device"
    )

    config_ver = Column(
        Integer,
        nullable=True,
        doc="Version counter of the pushed configuration"
    )

    # ============================================================
    # Timestamps
    # ============================================================
    created_at = Column(
        DateTime,
        server_default=func.now(),
        nullable=False
    )

    first_login = Column(
        DateTime,
        nullable=True,
        doc="First successful login, set only once"
    )

    last_login = Column(
        DateTime,
        nullable=True,
        doc="Most recent successful login"
    )

    last_bad_login = Column(
        DateTime,
        nullable=True,
        doc="Most recent rejected login"
    )

    def __repr__(self) -> str:
        return f"<Device(id={self.id}, name={self.name!r}, user_id={self.user_id})>"
