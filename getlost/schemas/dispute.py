"""Refund dispute schemas."""

from pydantic import BaseModel, ConfigDict, Field

from getlost.schemas.common import UTCDateTime


class RefundRequest(BaseModel):
    """Schema for a customer requesting a refund on a booking."""

    reason: str = Field(..., min_length=3, max_length=2000)
    customer_explanation: str | None = Field(None, max_length=5000)
    payment_id: int | None = None


class DisputeRespond(BaseModel):
    """Schema for an agency's response to a dispute."""

    response: str = Field(..., min_length=3, max_length=5000)


class DisputeVerdict(BaseModel):
    """Schema for an admin verdict on a dispute."""

    verdict: str = Field(..., min_length=3, max_length=5000)


class DisputeResponse(BaseModel):
    """Schema for dispute response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    booking_id: int
    payment_id: int | None
    opened_by: int
    status: str
    reason: str
    customer_explanation: str | None
    agency_response: str | None
    admin_verdict: str | None
    opened_at: UTCDateTime
    resolved_at: UTCDateTime | None
    resolved_by: int | None


class DisputeListResponse(BaseModel):
    """Schema for dispute list."""

    disputes: list[DisputeResponse]
    total: int
