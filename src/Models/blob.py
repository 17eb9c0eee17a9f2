# src/Models/blob.py
from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from src.DB.base_class import Base


BLOB_STATUS_PENDING = 0
BLOB_STATUS_STORED = 1


class Blob(Base):
    """
    File uploaded by a device (camera image, CSV export...).

    Written in two phases: the metadata row is inserted with status
    pending, then filename and status stored are set once the bytes are
    on disk. A pending row without filename means the write never
    completed.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "blobs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    device_id = Column(
        Integer,
        ForeignKey('devices.id', ondelete='CASCADE'),
        nullable=False
    )

    data_time = Column(DateTime, nullable=False, doc="Capture time reported by the device")
    server_time = Column(DateTime, nullable=False)

    description = Column(Text, nullable=True)
    extension = Column(String(20), nullable=True)

    session_id = Column(Integer, nullable=True)
    remote_ip = Column(String(50), nullable=True)

    filesize = Column(Integer, nullable=True)

    status = Column(
        Integer,
        nullable=False,
        default=BLOB_STATUS_PENDING,
        doc="0 = metadata only, 1 = file stored"
    )

    filename = Column(String(255), nullable=True, doc="Path relative to DATA_DIR")

    __table_args__ = (
        Index('idx_blob_device_time', 'device_id', 'data_time'),
    )

    def __repr__(self) -> str:
        return f"<Blob(id={self.id}, device_id={self.device_id}, status={self.status}, filename={self.filename!r})>"
