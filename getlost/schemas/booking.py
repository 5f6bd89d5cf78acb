"""Booking-related Pydantic schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from getlost.schemas.common import UTCDateTime


class ETicketResponse(BaseModel):
    """Schema for e-ticket response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    booking_id: int
    ticket_code: str
    issued_at: UTCDateTime
    qr_code_url: str | None


class BookingServiceSummary(BaseModel):
    """Service fields shown alongside a booking."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    agency_id: int
    title: str
    price: Decimal
    location: str
    duration: int | None


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    service_id: int
    window_id: int | None
    booking_date: UTCDateTime

    # Status
    status: str

    # Timestamps
    confirmed_at: UTCDateTime | None
    completed_at: UTCDateTime | None
    cancelled_at: UTCDateTime | None

    service: BookingServiceSummary
    eticket: ETicketResponse | None = None


class BookingListResponse(BaseModel):
    """Schema for booking list."""

    bookings: list[BookingResponse]
    total: int
