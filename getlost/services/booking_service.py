"""Booking lifecycle service.

Drives bookings through pending → confirmed → completed (or cancelled),
keeping the availability ledger in step. Callers run each operation inside a
single transaction; a booking row and its spot reservation are flushed
together and committed or rolled back as one.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from getlost.core.exceptions import NotFoundError
from getlost.core.permissions import Actor, Permission, UserRole, authorize, require_role
from getlost.domain.booking_state import BookingStatus, assert_booking_transition
from getlost.models.booking import Booking, ETicket
from getlost.models.service import Service
from getlost.services.availability_service import AvailabilityService, availability_service
from getlost.utils.ticket_code import generate_ticket_code

logger = logging.getLogger(__name__)


class BookingService:
    """Service for the booking state machine and e-ticket issuance."""

    def __init__(self, availability: AvailabilityService | None = None):
        self.availability = availability or availability_service

    async def create_booking(
        self,
        db: AsyncSession,
        actor: Actor,
        service_id: int,
        booked_at: datetime | None = None,
    ) -> Booking:
        """Book a service for the acting customer.

        Reserves a spot in the window open at ``booked_at`` (now by default),
        inserts the booking as pending and issues its e-ticket.

        Raises:
            NotFoundError: If the service does not exist
            NoAvailability: If no window is open with spots left
            CapacityExhausted: If the last spot was taken concurrently
        """
        authorize(actor, Permission.CREATE_BOOKING)

        service = await db.get(Service, service_id)
        if not service:
            raise NotFoundError("Service", str(service_id))

        booked_at = booked_at or datetime.now(UTC)
        window = await self.availability.find_open_window(db, service.id, booked_at)
        await self.availability.reserve(db, window)

        booking = Booking(
            user_id=actor.user_id,
            service_id=service.id,
            window_id=window.id,
            booking_date=booked_at,
            status=BookingStatus.PENDING.value,
        )
        booking.service = service
        db.add(booking)
        await db.flush()

        # Issue the e-ticket now that the booking id exists
        ticket = ETicket(
            booking_id=booking.id,
            ticket_code=await generate_ticket_code(db, booking.id),
            issued_at=datetime.now(UTC),
        )
        db.add(ticket)
        await db.flush()
        await db.refresh(booking, attribute_names=["eticket"])

        logger.info(
            f"Booking {booking.id} created for service {service.id} by user {actor.user_id} "
            f"(window {window.id}, {window.remaining_spots} spots left)"
        )
        return booking

    async def confirm_booking(self, db: AsyncSession, actor: Actor, booking_id: int) -> Booking:
        """Confirm a pending booking (owning agency only)."""
        booking = await self._get_booking(db, booking_id)
        authorize(actor, Permission.CONFIRM_BOOKING, booking.ownership)
        assert_booking_transition(booking.status, BookingStatus.CONFIRMED)

        booking.status = BookingStatus.CONFIRMED.value
        booking.confirmed_at = datetime.now(UTC)
        await db.flush()

        logger.info(f"Booking {booking.id} confirmed by user {actor.user_id}")
        return booking

    async def complete_booking(self, db: AsyncSession, actor: Actor, booking_id: int) -> Booking:
        """Mark a confirmed booking as completed (owning agency only)."""
        booking = await self._get_booking(db, booking_id)
        authorize(actor, Permission.COMPLETE_BOOKING, booking.ownership)
        assert_booking_transition(booking.status, BookingStatus.COMPLETED)

        booking.status = BookingStatus.COMPLETED.value
        booking.completed_at = datetime.now(UTC)
        await db.flush()

        logger.info(f"Booking {booking.id} completed by user {actor.user_id}")
        return booking

    async def cancel_booking(self, db: AsyncSession, actor: Actor, booking_id: int) -> Booking:
        """Cancel a pending or confirmed booking and free its spot (customer only)."""
        booking = await self._get_booking(db, booking_id)
        authorize(actor, Permission.CANCEL_BOOKING, booking.ownership)
        assert_booking_transition(booking.status, BookingStatus.CANCELLED)

        booking.status = BookingStatus.CANCELLED.value
        booking.cancelled_at = datetime.now(UTC)

        window = await self.availability.find_window_for_booking(db, booking)
        if window:
            await self.availability.release(db, window)
        else:
            logger.warning(f"Booking {booking.id} cancelled with no availability window to release")
        await db.flush()

        logger.info(f"Booking {booking.id} cancelled by user {actor.user_id}")
        return booking

    async def get_booking(self, db: AsyncSession, actor: Actor, booking_id: int) -> Booking:
        """Get a booking visible to the actor."""
        booking = await self._get_booking(db, booking_id)
        authorize(actor, Permission.VIEW_BOOKING, booking.ownership)
        return booking

    async def get_ticket(self, db: AsyncSession, actor: Actor, booking_id: int) -> ETicket:
        """Get the e-ticket of a booking visible to the actor."""
        booking = await self.get_booking(db, actor, booking_id)
        if not booking.eticket:
            raise NotFoundError("E-ticket for booking", str(booking_id))
        return booking.eticket

    async def list_customer_bookings(self, db: AsyncSession, actor: Actor) -> list[Booking]:
        """List the acting customer's own bookings, newest first."""
        require_role(actor, UserRole.CUSTOMER)
        return await self._list_bookings(db, Booking.user_id == actor.user_id)

    async def list_agency_bookings(self, db: AsyncSession, actor: Actor) -> list[Booking]:
        """List bookings for the acting agency's services, newest first."""
        require_role(actor, UserRole.AGENCY)
        return await self._list_bookings(
            db, Booking.service.has(Service.agency_id == actor.agency_id)
        )

    async def list_all_bookings(self, db: AsyncSession, actor: Actor) -> list[Booking]:
        """List every booking (web admin only), newest first."""
        authorize(actor, Permission.VIEW_ALL_BOOKINGS)
        return await self._list_bookings(db)

    async def _list_bookings(self, db: AsyncSession, *criteria) -> list[Booking]:
        query = (
            select(Booking)
            .options(selectinload(Booking.service), selectinload(Booking.eticket))
            .where(*criteria)
            .order_by(Booking.booking_date.desc(), Booking.id.desc())
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def _get_booking(self, db: AsyncSession, booking_id: int) -> Booking:
        """Get booking with its service and ticket loaded, or raise NotFoundError."""
        result = await db.execute(
            select(Booking)
            .options(selectinload(Booking.service), selectinload(Booking.eticket))
            .where(Booking.id == booking_id)
        )
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        return booking


booking_service = BookingService()
