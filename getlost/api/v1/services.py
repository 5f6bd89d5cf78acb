"""Service catalog, availability and booking endpoints."""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query, Response, status

from getlost.api.deps import CurrentActor, DbSession
from getlost.core.middleware import booking_limiter
from getlost.models.booking import Booking
from getlost.models.service import AvailabilityWindow, Service
from getlost.schemas.availability import (
    AvailabilityListResponse,
    AvailabilityWindowCreate,
    AvailabilityWindowResponse,
    AvailabilityWindowUpdate,
)
from getlost.schemas.booking import BookingResponse
from getlost.schemas.service import (
    ServiceCreate,
    ServiceListResponse,
    ServiceResponse,
    ServiceUpdate,
)
from getlost.services.availability_service import availability_service
from getlost.services.booking_service import booking_service
from getlost.services.service_service import service_service

router = APIRouter()


# ============ CATALOG ============


@router.get("/", response_model=ServiceListResponse)
async def list_services(
    db: DbSession,
    search: str | None = Query(default=None, max_length=100),
    location: str | None = Query(default=None, max_length=200),
    agency_id: int | None = Query(default=None),
    min_price: Decimal | None = Query(default=None, ge=0),
    max_price: Decimal | None = Query(default=None, ge=0),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
) -> ServiceListResponse:
    """Browse the service catalog."""
    services, total = await service_service.list_services(
        db,
        search=search,
        location=location,
        agency_id=agency_id,
        min_price=min_price,
        max_price=max_price,
        page=page,
        page_size=page_size,
    )
    return ServiceListResponse(
        services=[ServiceResponse.model_validate(s) for s in services],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/my", response_model=list[ServiceResponse])
async def list_my_services(actor: CurrentActor, db: DbSession) -> list[Service]:
    """List the current agency's services."""
    return await service_service.list_agency_services(db, actor)


@router.post("/", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    data: ServiceCreate,
    actor: CurrentActor,
    db: DbSession,
) -> Service:
    """Publish a service (agency, or admin on behalf of an agency)."""
    return await service_service.create_service(db, actor, **data.model_dump())


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(service_id: int, db: DbSession) -> Service:
    """Get a service by ID."""
    return await service_service.get_service(db, service_id)


@router.put("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    actor: CurrentActor,
    db: DbSession,
) -> Service:
    """Update a service (owning agency or admin)."""
    return await service_service.update_service(
        db, actor, service_id, **data.model_dump(exclude_unset=True)
    )


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(service_id: int, actor: CurrentActor, db: DbSession) -> Response:
    """Delete a service that has never been booked."""
    await service_service.delete_service(db, actor, service_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============ AVAILABILITY ============


@router.get("/{service_id}/availability", response_model=AvailabilityListResponse)
async def list_availability(
    service_id: int,
    db: DbSession,
) -> AvailabilityListResponse:
    """List the availability windows of a service."""
    windows = await availability_service.list_windows(db, service_id)
    return AvailabilityListResponse(
        availability=[AvailabilityWindowResponse.model_validate(w) for w in windows]
    )


@router.post(
    "/{service_id}/availability",
    response_model=AvailabilityWindowResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_availability(
    service_id: int,
    data: AvailabilityWindowCreate,
    actor: CurrentActor,
    db: DbSession,
) -> AvailabilityWindow:
    """Open an availability window (owning agency or admin)."""
    return await availability_service.create_window(
        db,
        actor,
        service_id,
        start_date=data.start_date,
        end_date=data.end_date,
        capacity=data.capacity,
    )


@router.put("/{service_id}/availability/{window_id}", response_model=AvailabilityWindowResponse)
async def update_availability(
    service_id: int,
    window_id: int,
    data: AvailabilityWindowUpdate,
    actor: CurrentActor,
    db: DbSession,
) -> AvailabilityWindow:
    """Reschedule an availability window (owning agency or admin)."""
    return await availability_service.update_window(
        db,
        actor,
        service_id,
        window_id,
        start_date=data.start_date,
        end_date=data.end_date,
    )


@router.delete("/{service_id}/availability/{window_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_availability(
    service_id: int,
    window_id: int,
    actor: CurrentActor,
    db: DbSession,
) -> Response:
    """Delete an availability window with no active bookings."""
    await availability_service.delete_window(db, actor, service_id, window_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============ BOOKING ============


@router.post(
    "/{service_id}/book",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_limiter)],
)
async def book_service(
    service_id: int,
    actor: CurrentActor,
    db: DbSession,
) -> Booking:
    """Book a service in its currently open window (customers only)."""
    return await booking_service.create_booking(db, actor, service_id)
