"""Pydantic schemas for API validation."""

from getlost.schemas.availability import (
    AvailabilityListResponse,
    AvailabilityWindowCreate,
    AvailabilityWindowResponse,
    AvailabilityWindowUpdate,
)
from getlost.schemas.booking import (
    BookingListResponse,
    BookingResponse,
    BookingServiceSummary,
    ETicketResponse,
)
from getlost.schemas.dispute import (
    DisputeListResponse,
    DisputeRespond,
    DisputeResponse,
    DisputeVerdict,
    RefundRequest,
)
from getlost.schemas.service import (
    ServiceCreate,
    ServiceListResponse,
    ServiceResponse,
    ServiceUpdate,
)

__all__ = [
    # Availability
    "AvailabilityWindowCreate",
    "AvailabilityWindowUpdate",
    "AvailabilityWindowResponse",
    "AvailabilityListResponse",
    # Booking
    "BookingResponse",
    "BookingListResponse",
    "BookingServiceSummary",
    "ETicketResponse",
    # Dispute
    "RefundRequest",
    "DisputeRespond",
    "DisputeVerdict",
    "DisputeResponse",
    "DisputeListResponse",
    # Service
    "ServiceCreate",
    "ServiceUpdate",
    "ServiceResponse",
    "ServiceListResponse",
]
