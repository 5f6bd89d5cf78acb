"""Booking state machine.

States: pending → confirmed → completed; pending/confirmed → cancelled
"""

from enum import Enum

from getlost.core.exceptions import InvalidTransition


class BookingStatus(str, Enum):
    """Booking lifecycle states."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


BOOKING_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}

# Bookings in these states hold a spot in their availability window
HOLDING_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

# A refund dispute can only be opened against these
DISPUTABLE_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.COMPLETED})


def can_transition(current: str | BookingStatus, target: str | BookingStatus) -> bool:
    return BookingStatus(target) in BOOKING_TRANSITIONS.get(BookingStatus(current), set())


def assert_booking_transition(current: str | BookingStatus, target: str | BookingStatus) -> None:
    if not can_transition(current, target):
        raise InvalidTransition(
            f"Invalid booking transition: {BookingStatus(current).value} → {BookingStatus(target).value}"
        )
