"""E-ticket code generation utilities."""

import re
import secrets

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

TICKET_CODE_PATTERN = re.compile(r"^TKT-(\d+)-([A-F0-9]{8})$")


def build_ticket_code(booking_id: int) -> str:
    """Build a ticket code in format TKT-<booking id>-XXXXXXXX.

    Args:
        booking_id: Booking the ticket belongs to

    Returns:
        str: Ticket code like 'TKT-42-9F3A0C1B'
    """
    random_part = secrets.token_hex(4).upper()
    return f"TKT-{booking_id}-{random_part}"


async def generate_ticket_code(db: AsyncSession, booking_id: int) -> str:
    """Generate a ticket code not yet used by any e-ticket.

    Args:
        db: Database session for uniqueness check
        booking_id: Booking the ticket belongs to

    Returns:
        str: Unique ticket code
    """
    from getlost.models.booking import ETicket

    while True:
        ticket_code = build_ticket_code(booking_id)

        # Check uniqueness
        result = await db.execute(
            select(ETicket.id).where(ETicket.ticket_code == ticket_code)
        )
        if result.scalar_one_or_none() is None:
            return ticket_code


def is_valid_ticket_code(ticket_code: str, booking_id: int | None = None) -> bool:
    """Check a ticket code's format, optionally against its booking id."""
    match = TICKET_CODE_PATTERN.match(ticket_code)
    if not match:
        return False
    return booking_id is None or int(match.group(1)) == booking_id
