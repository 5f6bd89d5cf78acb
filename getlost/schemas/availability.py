"""Availability window schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from getlost.schemas.common import UTCDateTime, as_utc


class AvailabilityWindowDates(BaseModel):
    """Date range shared by create and update requests."""

    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, v: datetime, info) -> datetime:
        start_date = info.data.get("start_date")
        if start_date and v < start_date:
            raise ValueError("end_date must not be before start_date")
        return v


class AvailabilityWindowCreate(AvailabilityWindowDates):
    """Schema for opening an availability window."""

    capacity: int = Field(..., ge=1, le=10000)


class AvailabilityWindowUpdate(AvailabilityWindowDates):
    """Schema for rescheduling a window. Capacity cannot change."""


class AvailabilityWindowResponse(BaseModel):
    """Schema for availability window response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    service_id: int
    start_date: UTCDateTime
    end_date: UTCDateTime
    capacity: int
    remaining_spots: int


class AvailabilityListResponse(BaseModel):
    """Schema for a service's windows."""

    availability: list[AvailabilityWindowResponse]
