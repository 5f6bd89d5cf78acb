"""Service (tour) and availability window models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from getlost.core.permissions import Ownership
from getlost.database import Base, utcnow

if TYPE_CHECKING:
    from getlost.models.booking import Booking
    from getlost.models.user import Agency


class Service(Base):
    """A bookable tour or travel service published by an agency."""

    __tablename__ = "services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    agency_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("agencies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    duration: Mapped[int | None] = mapped_column(Integer)  # days
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Relationships
    agency: Mapped["Agency"] = relationship("Agency", back_populates="services")
    availability_windows: Mapped[list["AvailabilityWindow"]] = relationship(
        "AvailabilityWindow", back_populates="service", cascade="all, delete-orphan"
    )
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="service")

    @property
    def ownership(self) -> Ownership:
        return Ownership(agency_id=self.agency_id)


class AvailabilityWindow(Base):
    """Bookable date range of a service with a capacity counter.

    ``remaining_spots`` only moves through conditional updates in the
    availability service, so it stays within [0, capacity].
    """

    __tablename__ = "availability_windows"
    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_window_capacity_positive"),
        CheckConstraint(
            "remaining_spots >= 0 AND remaining_spots <= capacity",
            name="ck_window_remaining_in_range",
        ),
        CheckConstraint("end_date >= start_date", name="ck_window_dates_ordered"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    service_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    remaining_spots: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Relationships
    service: Mapped["Service"] = relationship("Service", back_populates="availability_windows")

    @property
    def held_spots(self) -> int:
        """Spots currently reserved by bookings."""
        return self.capacity - self.remaining_spots
