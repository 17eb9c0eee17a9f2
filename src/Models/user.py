# src/Models/user.py

from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from src.DB.base_class import Base


class User(Base):
    """
    Admin account owning devices.

    The prefix namespaces device login names: a device "meteo1" created by
    a user with prefix "jan" logs in as "jan:meteo1".
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    username = Column(String(100), nullable=False, unique=True)

    prefix = Column(
        String(50),
        nullable=False,
        unique=True,
        doc="Device name prefix for this user"
    )

    role = Column(
        String(20),
        nullable=False,
        server_default='user',
        doc="Role: 'user' or 'admin'"
    )

    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r}, prefix={self.prefix!r})>"
