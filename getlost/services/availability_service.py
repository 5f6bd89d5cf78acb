"""Availability ledger: capacity windows per service.

Spot counters only change through conditional UPDATE statements so that two
requests racing for the last spot cannot both win, whatever the isolation
level of the surrounding transaction.
"""

import logging
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from getlost.core.exceptions import (
    CapacityExhausted,
    ConflictError,
    NoAvailability,
    NotFoundError,
    ValidationError,
)
from getlost.core.permissions import Actor, Permission, authorize
from getlost.domain.booking_state import HOLDING_STATUSES
from getlost.models.booking import Booking
from getlost.models.service import AvailabilityWindow, Service

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Service for availability windows and spot reservations."""

    # ============ LEDGER ============

    async def find_open_window(
        self,
        db: AsyncSession,
        service_id: int,
        at_time: datetime,
    ) -> AvailabilityWindow:
        """Find the window covering ``at_time`` that still has spots.

        When several qualify the earliest-starting one wins (lowest id on ties).

        Raises:
            NoAvailability: If no window covers the time with spots left
        """
        result = await db.execute(
            select(AvailabilityWindow)
            .where(
                AvailabilityWindow.service_id == service_id,
                AvailabilityWindow.start_date <= at_time,
                AvailabilityWindow.end_date >= at_time,
                AvailabilityWindow.remaining_spots > 0,
            )
            .order_by(AvailabilityWindow.start_date, AvailabilityWindow.id)
            .limit(1)
        )
        window = result.scalar_one_or_none()
        if not window:
            raise NoAvailability()
        return window

    async def reserve(self, db: AsyncSession, window: AvailabilityWindow) -> AvailabilityWindow:
        """Take one spot from a window.

        Raises:
            CapacityExhausted: If the window has no spots left at update time
        """
        result = await db.execute(
            update(AvailabilityWindow)
            .where(
                AvailabilityWindow.id == window.id,
                AvailabilityWindow.remaining_spots > 0,
            )
            .values(remaining_spots=AvailabilityWindow.remaining_spots - 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.warning(f"Reservation lost on window {window.id}: no spots remaining")
            raise CapacityExhausted()

        await db.refresh(window, attribute_names=["remaining_spots"])
        return window

    async def release(self, db: AsyncSession, window: AvailabilityWindow) -> bool:
        """Give one spot back to a window, never beyond its capacity.

        Returns:
            bool: False if the window was already at capacity
        """
        result = await db.execute(
            update(AvailabilityWindow)
            .where(
                AvailabilityWindow.id == window.id,
                AvailabilityWindow.remaining_spots < AvailabilityWindow.capacity,
            )
            .values(remaining_spots=AvailabilityWindow.remaining_spots + 1)
            .execution_options(synchronize_session=False)
        )
        await db.refresh(window, attribute_names=["remaining_spots"])

        if result.rowcount == 0:
            logger.warning(f"Release skipped on window {window.id}: already at capacity")
            return False
        return True

    async def find_window_for_booking(
        self, db: AsyncSession, booking: Booking
    ) -> AvailabilityWindow | None:
        """Find the window a booking's spot belongs to.

        Uses the window recorded at booking time, falling back to the
        service's window whose range covers the booking date.
        """
        if booking.window_id is not None:
            window = await db.get(AvailabilityWindow, booking.window_id)
            if window:
                return window

        result = await db.execute(
            select(AvailabilityWindow)
            .where(
                AvailabilityWindow.service_id == booking.service_id,
                AvailabilityWindow.start_date <= booking.booking_date,
                AvailabilityWindow.end_date >= booking.booking_date,
            )
            .order_by(AvailabilityWindow.start_date, AvailabilityWindow.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    # ============ MANAGEMENT ============

    async def list_windows(self, db: AsyncSession, service_id: int) -> list[AvailabilityWindow]:
        """List a service's windows by start date."""
        await self._get_service(db, service_id)
        result = await db.execute(
            select(AvailabilityWindow)
            .where(AvailabilityWindow.service_id == service_id)
            .order_by(AvailabilityWindow.start_date, AvailabilityWindow.id)
        )
        return list(result.scalars().all())

    async def create_window(
        self,
        db: AsyncSession,
        actor: Actor,
        service_id: int,
        start_date: datetime,
        end_date: datetime,
        capacity: int,
    ) -> AvailabilityWindow:
        """Open a new window with all of its spots free."""
        service = await self._get_service(db, service_id)
        authorize(actor, Permission.MANAGE_AVAILABILITY, service.ownership)

        self._validate_dates(start_date, end_date)
        if capacity < 1:
            raise ValidationError("capacity must be at least 1")

        window = AvailabilityWindow(
            service_id=service.id,
            start_date=start_date,
            end_date=end_date,
            capacity=capacity,
            remaining_spots=capacity,
        )
        db.add(window)
        await db.flush()

        logger.info(
            f"Availability window {window.id} created for service {service.id} "
            f"(capacity {capacity}) by user {actor.user_id}"
        )
        return window

    async def update_window(
        self,
        db: AsyncSession,
        actor: Actor,
        service_id: int,
        window_id: int,
        start_date: datetime,
        end_date: datetime,
    ) -> AvailabilityWindow:
        """Reschedule a window. Capacity is fixed once the window exists."""
        service = await self._get_service(db, service_id)
        authorize(actor, Permission.MANAGE_AVAILABILITY, service.ownership)
        window = await self._get_window(db, service_id, window_id)

        self._validate_dates(start_date, end_date)
        window.start_date = start_date
        window.end_date = end_date
        await db.flush()
        return window

    async def delete_window(
        self,
        db: AsyncSession,
        actor: Actor,
        service_id: int,
        window_id: int,
    ) -> None:
        """Delete a window that no active booking holds a spot in.

        Raises:
            ConflictError: If pending or confirmed bookings hold spots in it
        """
        service = await self._get_service(db, service_id)
        authorize(actor, Permission.MANAGE_AVAILABILITY, service.ownership)
        window = await self._get_window(db, service_id, window_id)

        held = await db.execute(
            select(func.count())
            .select_from(Booking)
            .where(
                Booking.window_id == window.id,
                Booking.status.in_([s.value for s in HOLDING_STATUSES]),
            )
        )
        if held.scalar_one() > 0:
            raise ConflictError("Window has active bookings and cannot be deleted")

        # Detach finished bookings from the window before it goes
        await db.execute(
            update(Booking)
            .where(Booking.window_id == window.id)
            .values(window_id=None)
            .execution_options(synchronize_session=False)
        )
        await db.delete(window)
        await db.flush()

        logger.info(f"Availability window {window_id} deleted by user {actor.user_id}")

    # ============ HELPERS ============

    async def _get_service(self, db: AsyncSession, service_id: int) -> Service:
        """Get service by ID or raise NotFoundError."""
        service = await db.get(Service, service_id)
        if not service:
            raise NotFoundError("Service", str(service_id))
        return service

    async def _get_window(
        self, db: AsyncSession, service_id: int, window_id: int
    ) -> AvailabilityWindow:
        """Get a window of the given service or raise NotFoundError."""
        result = await db.execute(
            select(AvailabilityWindow).where(
                AvailabilityWindow.id == window_id,
                AvailabilityWindow.service_id == service_id,
            )
        )
        window = result.scalar_one_or_none()
        if not window:
            raise NotFoundError("Availability window", str(window_id))
        return window

    @staticmethod
    def _validate_dates(start_date: datetime, end_date: datetime) -> None:
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date")


availability_service = AvailabilityService()
