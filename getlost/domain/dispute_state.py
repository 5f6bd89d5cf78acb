"""Refund dispute state machine.

States: open → agency_responded → resolved

An admin may resolve straight from open; an agency may only answer once.
"""

from enum import Enum

from getlost.core.exceptions import InvalidTransition


class DisputeStatus(str, Enum):
    """Refund dispute states."""

    OPEN = "open"
    AGENCY_RESPONDED = "agency_responded"
    RESOLVED = "resolved"


DISPUTE_TRANSITIONS: dict[DisputeStatus, set[DisputeStatus]] = {
    DisputeStatus.OPEN: {DisputeStatus.AGENCY_RESPONDED, DisputeStatus.RESOLVED},
    DisputeStatus.AGENCY_RESPONDED: {DisputeStatus.RESOLVED},
    DisputeStatus.RESOLVED: set(),  # Terminal state
}


def assert_dispute_transition(current: str | DisputeStatus, target: str | DisputeStatus) -> None:
    """Validate dispute state transition."""
    allowed = DISPUTE_TRANSITIONS.get(DisputeStatus(current), set())
    if DisputeStatus(target) not in allowed:
        raise InvalidTransition(
            f"Invalid dispute transition: {DisputeStatus(current).value} → {DisputeStatus(target).value}"
        )
