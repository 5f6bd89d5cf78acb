"""Payment database model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from getlost.database import Base, utcnow

if TYPE_CHECKING:
    from getlost.models.booking import Booking


class Payment(Base):
    """Payment recorded against a booking.

    Payments are captured by the payment provider integration; disputes only
    reference them.
    """

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("bookings.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=utcnow)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="completed"
    )  # pending, completed, failed, refunded

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="payments")
