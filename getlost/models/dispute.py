"""Refund dispute model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from getlost.core.permissions import Ownership
from getlost.database import Base, utcnow
from getlost.domain.dispute_state import DisputeStatus

if TYPE_CHECKING:
    from getlost.models.booking import Booking
    from getlost.models.payment import Payment
    from getlost.models.user import User


class RefundDispute(Base):
    """Customer refund request against a booking."""

    __tablename__ = "refund_disputes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("bookings.id"), nullable=False, index=True
    )
    payment_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("payments.id"))
    opened_by: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )

    # Status: open → agency_responded → resolved
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DisputeStatus.OPEN.value, index=True
    )

    # Details
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    customer_explanation: Mapped[str | None] = mapped_column(Text)
    agency_response: Mapped[str | None] = mapped_column(Text)
    admin_verdict: Mapped[str | None] = mapped_column(Text)

    # Resolution
    opened_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    resolved_by: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"))

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="refund_disputes")
    payment: Mapped["Payment | None"] = relationship("Payment")
    opener: Mapped["User"] = relationship("User", foreign_keys=[opened_by])
    resolver: Mapped["User | None"] = relationship("User", foreign_keys=[resolved_by])

    @property
    def ownership(self) -> Ownership:
        """Ownership of the disputed booking (booking and its service must be loaded)."""
        return self.booking.ownership
