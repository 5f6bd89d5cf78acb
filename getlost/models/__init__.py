"""Database models."""

from getlost.models.booking import Booking, ETicket
from getlost.models.dispute import RefundDispute
from getlost.models.payment import Payment
from getlost.models.service import AvailabilityWindow, Service
from getlost.models.user import Agency, User

__all__ = [
    # User
    "User",
    "Agency",
    # Service
    "Service",
    "AvailabilityWindow",
    # Booking
    "Booking",
    "ETicket",
    # Payment
    "Payment",
    # Dispute
    "RefundDispute",
]
