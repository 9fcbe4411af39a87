import math
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..models.detection import INTEGER_MAX

# Field names as sent by camera devices
TRUTHY_FIELDS = ("cameraId", "videoId", "item", "confidence", "timestamp")
DEFINED_FIELDS = ("timestampSec",)


def missing_fields(payload: dict[str, Any]) -> list[str]:
    """Names of required fields that count as missing.

    Everything except timestampSec must be truthy, so "" and 0 are rejected.
    timestampSec only has to be present, since 0 is a valid offset.
    """
    missing = [name for name in TRUTHY_FIELDS if not payload.get(name)]
    missing += [name for name in DEFINED_FIELDS if payload.get(name) is None]
    return missing


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class DetectionCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    camera_id: str
    video_id: str
    item: str
    confidence: float = Field(allow_inf_nan=False)
    timestamp: datetime
    timestamp_sec: int = Field(ge=0, le=INTEGER_MAX)

    @field_validator("camera_id", "video_id", "item", mode="before")
    @classmethod
    def _stringify(cls, v):
        if isinstance(v, bool):
            raise ValueError("expected a string")
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("confidence", mode="before")
    @classmethod
    def _reject_bool(cls, v):
        if isinstance(v, bool):
            raise ValueError("expected a number")
        return v

    @field_validator("confidence")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return min(1.0, max(0.0, v))

    @field_validator("timestamp_sec", mode="before")
    @classmethod
    def _truncate(cls, v):
        if isinstance(v, bool):
            raise ValueError("expected an integer")
        if isinstance(v, str):
            v = v.strip()
            try:
                return int(v)
            except ValueError:
                v = float(v)
        if isinstance(v, float):
            if not math.isfinite(v):
                raise ValueError("expected a finite number")
            return int(v)
        return v

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return _as_utc(v)


class DetectionOut(BaseModel):
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True,
    )

    id: int
    camera_id: str
    video_id: str
    item: str
    confidence: float
    timestamp: datetime
    timestamp_sec: int
    created_at: datetime | None = None

    @field_validator("timestamp", "created_at")
    @classmethod
    def _utc(cls, v: datetime | None) -> datetime | None:
        # SQLite hands back naive values; everything is written as UTC
        return _as_utc(v) if v is not None else None


class VideoGroup(BaseModel):
    video_id: str
    camera_id: str
    detections: list[DetectionOut] = Field(default_factory=list)


class LastSeenOut(BaseModel):
    found: bool
    detection: DetectionOut | None = None
    message: str | None = None


class ItemsOut(BaseModel):
    items: list[str]
