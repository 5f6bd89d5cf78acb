"""Booking-related database models."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from getlost.core.permissions import Ownership
from getlost.database import Base, utcnow
from getlost.domain.booking_state import BookingStatus

if TYPE_CHECKING:
    from getlost.models.dispute import RefundDispute
    from getlost.models.payment import Payment
    from getlost.models.service import Service
    from getlost.models.user import User


class Booking(Base):
    """Booking model."""

    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    service_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("services.id"), nullable=False, index=True
    )
    # Window holding this booking's spot; cleared if the window is deleted
    window_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("availability_windows.id", ondelete="SET NULL"), index=True
    )
    booking_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # Status: pending, confirmed, completed, cancelled
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BookingStatus.PENDING.value, index=True
    )

    # Timestamps
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="bookings")
    service: Mapped["Service"] = relationship("Service", back_populates="bookings")
    eticket: Mapped["ETicket | None"] = relationship(
        "ETicket", back_populates="booking", uselist=False, cascade="all, delete-orphan"
    )
    payments: Mapped[list["Payment"]] = relationship("Payment", back_populates="booking")
    refund_disputes: Mapped[list["RefundDispute"]] = relationship(
        "RefundDispute", back_populates="booking"
    )

    @property
    def ownership(self) -> Ownership:
        """Customer who booked and agency selling the service (service must be loaded)."""
        return Ownership(customer_id=self.user_id, agency_id=self.service.agency_id)


class ETicket(Base):
    """Proof-of-booking ticket, issued once per booking."""

    __tablename__ = "etickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    ticket_code: Mapped[str] = mapped_column(
        String(40), unique=True, nullable=False, index=True
    )  # TKT-<booking id>-XXXXXXXX
    qr_code_url: Mapped[str | None] = mapped_column(Text)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="eticket")
