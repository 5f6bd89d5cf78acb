"""Service catalog: the tours agencies publish and customers browse."""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from getlost.core.exceptions import ConflictError, NotFoundError, ValidationError
from getlost.core.permissions import (
    Actor,
    Ownership,
    Permission,
    UserRole,
    authorize,
    require_role,
)
from getlost.models.booking import Booking
from getlost.models.service import Service
from getlost.models.user import Agency

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "price", "location")
UPDATABLE_FIELDS = (*REQUIRED_FIELDS, "duration", "description")


class ServiceService:
    """Service for browsing and managing the tour catalog."""

    # ============ BROWSING ============

    async def list_services(
        self,
        db: AsyncSession,
        search: str | None = None,
        location: str | None = None,
        agency_id: int | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Service], int]:
        """Search the catalog, ordered by title.

        Returns:
            tuple: The requested page of services and the total match count
        """
        query = select(Service)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(Service.title.ilike(pattern), Service.description.ilike(pattern))
            )
        if location:
            query = query.where(Service.location.ilike(f"%{location}%"))
        if agency_id is not None:
            query = query.where(Service.agency_id == agency_id)
        if min_price is not None:
            query = query.where(Service.price >= min_price)
        if max_price is not None:
            query = query.where(Service.price <= max_price)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        offset = (page - 1) * page_size
        result = await db.execute(
            query.order_by(Service.title, Service.id).offset(offset).limit(page_size)
        )
        return list(result.scalars().all()), total

    async def get_service(self, db: AsyncSession, service_id: int) -> Service:
        """Get service by ID or raise NotFoundError."""
        service = await db.get(Service, service_id)
        if not service:
            raise NotFoundError("Service", str(service_id))
        return service

    async def list_agency_services(self, db: AsyncSession, actor: Actor) -> list[Service]:
        """List the services published by the actor's own agency."""
        require_role(actor, UserRole.AGENCY)
        result = await db.execute(
            select(Service)
            .where(Service.agency_id == actor.agency_id)
            .order_by(Service.title, Service.id)
        )
        return list(result.scalars().all())

    # ============ MANAGEMENT ============

    async def create_service(
        self,
        db: AsyncSession,
        actor: Actor,
        title: str,
        price: Decimal,
        location: str,
        duration: int | None = None,
        description: str | None = None,
        agency_id: int | None = None,
    ) -> Service:
        """Publish a service.

        Agencies publish under their own agency. Web admins must name the
        agency the service belongs to.

        Raises:
            AuthorizationError: If the actor cannot publish for that agency
            ValidationError: If an admin omits the agency
            NotFoundError: If the agency does not exist
        """
        if actor.role == UserRole.AGENCY and agency_id is None:
            agency_id = actor.agency_id
        if agency_id is None:
            authorize(actor, Permission.MANAGE_SERVICES)
            raise ValidationError("agency_id is required")

        authorize(actor, Permission.MANAGE_SERVICES, Ownership(agency_id=agency_id))
        if not await db.get(Agency, agency_id):
            raise NotFoundError("Agency", str(agency_id))

        service = Service(
            agency_id=agency_id,
            title=title,
            price=price,
            location=location,
            duration=duration,
            description=description,
        )
        db.add(service)
        await db.flush()

        logger.info(f"Service {service.id} published for agency {agency_id} by user {actor.user_id}")
        return service

    async def update_service(
        self,
        db: AsyncSession,
        actor: Actor,
        service_id: int,
        **fields: Any,
    ) -> Service:
        """Update catalog fields of a service. The owning agency never changes."""
        service = await self.get_service(db, service_id)
        authorize(actor, Permission.MANAGE_SERVICES, service.ownership)

        for field, value in fields.items():
            if field not in UPDATABLE_FIELDS:
                raise ValidationError(f"Field '{field}' cannot be updated")
            if value is None and field in REQUIRED_FIELDS:
                raise ValidationError(f"Field '{field}' cannot be empty")
            setattr(service, field, value)
        await db.flush()
        return service

    async def delete_service(self, db: AsyncSession, actor: Actor, service_id: int) -> None:
        """Delete a service and its availability windows.

        Raises:
            ConflictError: If any booking references the service
        """
        service = await self.get_service(db, service_id)
        authorize(actor, Permission.MANAGE_SERVICES, service.ownership)

        booked = await db.execute(
            select(func.count()).select_from(Booking).where(Booking.service_id == service.id)
        )
        if booked.scalar_one() > 0:
            raise ConflictError("Service has bookings and cannot be deleted")

        await db.delete(service)
        await db.flush()

        logger.info(f"Service {service_id} deleted by user {actor.user_id}")


service_service = ServiceService()
