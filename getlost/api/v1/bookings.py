"""Booking endpoints."""

from fastapi import APIRouter, status

from getlost.api.deps import CurrentActor, DbSession
from getlost.models.booking import Booking, ETicket
from getlost.models.dispute import RefundDispute
from getlost.schemas.booking import BookingListResponse, BookingResponse, ETicketResponse
from getlost.schemas.dispute import DisputeResponse, RefundRequest
from getlost.services.booking_service import booking_service
from getlost.services.dispute_service import dispute_service

router = APIRouter()


def _booking_list(bookings: list[Booking]) -> BookingListResponse:
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=len(bookings),
    )


# ============ LISTINGS ============


@router.get("/my", response_model=BookingListResponse)
async def get_my_bookings(actor: CurrentActor, db: DbSession) -> BookingListResponse:
    """Get the current customer's bookings."""
    return _booking_list(await booking_service.list_customer_bookings(db, actor))


@router.get("/agency", response_model=BookingListResponse)
async def get_agency_bookings(actor: CurrentActor, db: DbSession) -> BookingListResponse:
    """Get bookings for the current agency's services."""
    return _booking_list(await booking_service.list_agency_bookings(db, actor))


@router.get("/all", response_model=BookingListResponse)
async def get_all_bookings(actor: CurrentActor, db: DbSession) -> BookingListResponse:
    """Get every booking (admin only)."""
    return _booking_list(await booking_service.list_all_bookings(db, actor))


# ============ SINGLE BOOKING ============


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: int, actor: CurrentActor, db: DbSession) -> Booking:
    """Get a booking by ID."""
    return await booking_service.get_booking(db, actor, booking_id)


@router.get("/{booking_id}/eticket", response_model=ETicketResponse)
async def get_booking_eticket(booking_id: int, actor: CurrentActor, db: DbSession) -> ETicket:
    """Get the e-ticket issued for a booking."""
    return await booking_service.get_ticket(db, actor, booking_id)


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
async def confirm_booking(booking_id: int, actor: CurrentActor, db: DbSession) -> Booking:
    """Confirm a pending booking (agency only)."""
    return await booking_service.confirm_booking(db, actor, booking_id)


@router.post("/{booking_id}/complete", response_model=BookingResponse)
async def complete_booking(booking_id: int, actor: CurrentActor, db: DbSession) -> Booking:
    """Mark a confirmed booking as completed (agency only)."""
    return await booking_service.complete_booking(db, actor, booking_id)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(booking_id: int, actor: CurrentActor, db: DbSession) -> Booking:
    """Cancel a booking and free its spot (customer only)."""
    return await booking_service.cancel_booking(db, actor, booking_id)


@router.post(
    "/{booking_id}/refund",
    response_model=DisputeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_refund(
    booking_id: int,
    data: RefundRequest,
    actor: CurrentActor,
    db: DbSession,
) -> RefundDispute:
    """Open a refund dispute on a confirmed or completed booking."""
    return await dispute_service.open_dispute(
        db,
        actor,
        booking_id,
        reason=data.reason,
        customer_explanation=data.customer_explanation,
        payment_id=data.payment_id,
    )
