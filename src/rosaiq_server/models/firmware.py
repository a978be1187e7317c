"""
SQLAlchemy model for Firmware entity.

Catalog of uploaded firmware images. The newest upload is the one offered to devices.
"""
from sqlalchemy import Column, Integer, BigInteger, String, Text, DateTime, Index

from ..clock import utc_now
from ..database import Base


class Firmware(Base):
    """Firmware model representing one stored binary artifact."""

    __tablename__ = "firmware"

    # Columns
    id = Column(Integer, primary_key=True, autoincrement=True)
    version = Column(String(32), nullable=False, unique=True)
    filename = Column(String(255), nullable=False)
    file_path = Column(String(512), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    uploaded_by = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)
    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        Index("idx_firmware_uploaded_at", "uploaded_at"),
    )

    def __repr__(self):
        return f"<Firmware(id={self.id}, version={self.version}, size={self.file_size})>"
