"""User and agency database models."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from getlost.database import Base, utcnow

if TYPE_CHECKING:
    from getlost.models.booking import Booking
    from getlost.models.service import Service


class User(Base):
    """User account model.

    Accounts are created by the identity service; this backend reads them to
    resolve who is acting.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="customer"
    )  # customer, agency, webadmin
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Relationships
    agency: Mapped["Agency | None"] = relationship(
        "Agency", back_populates="user", uselist=False
    )
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="user")


class Agency(Base):
    """Travel agency publishing services."""

    __tablename__ = "agencies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(String(30))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="agency")
    services: Mapped[list["Service"]] = relationship("Service", back_populates="agency")
