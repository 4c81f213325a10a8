"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from models.records import Reading


def format_timestamp(value: datetime) -> str:
    """Render a UTC timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ReadingOut(BaseModel):
    """Wire representation of a stored reading."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    time_occurred: Any = Field(..., alias="timeOccurred")
    angle: Optional[float] = Field(
        ..., description="Measured angle in degrees; null when the stored value is not finite."
    )
    received_at: datetime = Field(..., alias="receivedAt")

    @field_serializer("angle")
    def _serialize_angle(self, angle: Optional[float]) -> Optional[float]:
        if angle is None or not math.isfinite(angle):
            return None
        return angle

    @field_serializer("received_at")
    def _serialize_received_at(self, received_at: datetime) -> str:
        return format_timestamp(received_at)

    @classmethod
    def from_reading(cls, reading: Reading) -> "ReadingOut":
        return cls(
            id=reading.id,
            time_occurred=reading.time_occurred,
            angle=reading.angle,
            received_at=reading.received_at,
        )


class IngestResponse(BaseModel):
    """Payload returned after a reading has been stored."""

    message: str = "Data received successfully"
    reading: ReadingOut


class ReadingListResponse(BaseModel):
    count: int = Field(..., ge=0, description="Number of readings currently retained.")
    readings: List[ReadingOut] = Field(default_factory=list)


class LatestReadingResponse(BaseModel):
    reading: Optional[ReadingOut] = None


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: str
