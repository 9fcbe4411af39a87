from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Index, Integer, String

from ..database import Base


# Bounds of the 32-bit Integer columns
INTEGER_MIN = -(2**31)
INTEGER_MAX = 2**31 - 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Detection(Base):
    __tablename__ = "detections"

    id = Column(Integer, primary_key=True, index=True)
    camera_id = Column(String, nullable=False)
    video_id = Column(String, nullable=False, index=True)
    item = Column(String, nullable=False, index=True)
    confidence = Column(Float, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    timestamp_sec = Column(Integer, nullable=False)  # offset into the clip
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_detections_timestamp_id", "timestamp", "id"),
    )
