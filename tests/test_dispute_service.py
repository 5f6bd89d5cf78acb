"""Refund dispute workflow."""

from decimal import Decimal

import pytest

from getlost.core.exceptions import AuthorizationError, InvalidTransition, NotFoundError
from getlost.models import Payment
from getlost.services.booking_service import booking_service
from getlost.services.dispute_service import dispute_service
from tests.conftest import make_window


async def _confirmed_booking(db, seed, actor=None, service=None):
    service = service or seed.service
    await make_window(db, service)
    booking = await booking_service.create_booking(db, actor or seed.customer_actor, service.id)
    owner = seed.agency_actor if service is seed.service else seed.rival_actor
    return await booking_service.confirm_booking(db, owner, booking.id)


@pytest.mark.asyncio
async def test_open_respond_resolve(db, seed):
    booking = await _confirmed_booking(db, seed)

    dispute = await dispute_service.open_dispute(
        db,
        seed.customer_actor,
        booking.id,
        reason="Guide never showed up",
        customer_explanation="Waited two hours at the meeting point",
    )
    assert dispute.status == "open"
    assert dispute.opened_by == seed.customer.id
    assert dispute.opened_at is not None

    dispute = await dispute_service.agency_respond(
        db, seed.agency_actor, dispute.id, "Guide was sick, we offered a new date"
    )
    assert dispute.status == "agency_responded"
    assert dispute.agency_response == "Guide was sick, we offered a new date"

    dispute = await dispute_service.admin_resolve(db, seed.admin_actor, dispute.id, "Full refund")
    assert dispute.status == "resolved"
    assert dispute.admin_verdict == "Full refund"
    assert dispute.resolved_by == seed.admin.id
    assert dispute.resolved_at is not None


@pytest.mark.asyncio
async def test_admin_may_resolve_without_agency_response(db, seed):
    booking = await _confirmed_booking(db, seed)
    dispute = await dispute_service.open_dispute(db, seed.customer_actor, booking.id, "Bus broke down")

    resolved = await dispute_service.admin_resolve(db, seed.admin_actor, dispute.id, "Partial refund")

    assert resolved.status == "resolved"
    assert resolved.agency_response is None


@pytest.mark.asyncio
async def test_agency_can_respond_only_once_and_not_after_resolution(db, seed):
    booking = await _confirmed_booking(db, seed)
    dispute = await dispute_service.open_dispute(db, seed.customer_actor, booking.id, "Late pickup")
    await dispute_service.agency_respond(db, seed.agency_actor, dispute.id, "Traffic")

    with pytest.raises(InvalidTransition):
        await dispute_service.agency_respond(db, seed.agency_actor, dispute.id, "Again")

    await dispute_service.admin_resolve(db, seed.admin_actor, dispute.id, "No refund")
    with pytest.raises(InvalidTransition):
        await dispute_service.admin_resolve(db, seed.admin_actor, dispute.id, "Changed my mind")


@pytest.mark.asyncio
async def test_pending_and_cancelled_bookings_cannot_be_disputed(db, seed):
    await make_window(db, seed.service, capacity=5)
    pending = await booking_service.create_booking(db, seed.customer_actor, seed.service.id)

    with pytest.raises(InvalidTransition):
        await dispute_service.open_dispute(db, seed.customer_actor, pending.id, "Not yet")

    await booking_service.cancel_booking(db, seed.customer_actor, pending.id)
    with pytest.raises(InvalidTransition):
        await dispute_service.open_dispute(db, seed.customer_actor, pending.id, "Cancelled")


@pytest.mark.asyncio
async def test_completed_booking_can_be_disputed_more_than_once(db, seed):
    booking = await _confirmed_booking(db, seed)
    await booking_service.complete_booking(db, seed.agency_actor, booking.id)

    first = await dispute_service.open_dispute(db, seed.customer_actor, booking.id, "Hotel swap")
    second = await dispute_service.open_dispute(db, seed.customer_actor, booking.id, "Missing meal")

    assert first.id != second.id


@pytest.mark.asyncio
async def test_only_the_booking_customer_opens_disputes(db, seed):
    booking = await _confirmed_booking(db, seed)

    with pytest.raises(AuthorizationError):
        await dispute_service.open_dispute(db, seed.other_customer_actor, booking.id, "Not mine")
    with pytest.raises(AuthorizationError):
        await dispute_service.open_dispute(db, seed.agency_actor, booking.id, "Agency")
    with pytest.raises(NotFoundError):
        await dispute_service.open_dispute(db, seed.customer_actor, 9999, "Missing")


@pytest.mark.asyncio
async def test_dispute_payment_must_belong_to_booking(db, seed):
    booking = await _confirmed_booking(db, seed)
    other = await _confirmed_booking(db, seed, actor=seed.other_customer_actor)
    payment = Payment(booking_id=booking.id, amount=Decimal("149.00"))
    foreign = Payment(booking_id=other.id, amount=Decimal("149.00"))
    db.add_all([payment, foreign])
    await db.flush()

    dispute = await dispute_service.open_dispute(
        db, seed.customer_actor, booking.id, "Charged twice", payment_id=payment.id
    )
    assert dispute.payment_id == payment.id

    with pytest.raises(NotFoundError):
        await dispute_service.open_dispute(
            db, seed.customer_actor, booking.id, "Wrong payment", payment_id=foreign.id
        )


@pytest.mark.asyncio
async def test_respond_and_resolve_are_role_bound(db, seed):
    booking = await _confirmed_booking(db, seed)
    dispute = await dispute_service.open_dispute(db, seed.customer_actor, booking.id, "Rain")

    with pytest.raises(AuthorizationError):
        await dispute_service.agency_respond(db, seed.rival_actor, dispute.id, "Not ours")
    with pytest.raises(AuthorizationError):
        await dispute_service.agency_respond(db, seed.customer_actor, dispute.id, "Me")
    with pytest.raises(AuthorizationError):
        await dispute_service.admin_resolve(db, seed.agency_actor, dispute.id, "Self-judged")
    with pytest.raises(NotFoundError):
        await dispute_service.admin_resolve(db, seed.admin_actor, 9999, "Nothing")


@pytest.mark.asyncio
async def test_list_disputes_scoped_by_role(db, seed):
    mine = await _confirmed_booking(db, seed)
    theirs = await _confirmed_booking(
        db, seed, actor=seed.other_customer_actor, service=seed.rival_service
    )
    d1 = await dispute_service.open_dispute(db, seed.customer_actor, mine.id, "One")
    d2 = await dispute_service.open_dispute(db, seed.other_customer_actor, theirs.id, "Two")

    customer_view = await dispute_service.list_disputes(db, seed.customer_actor)
    agency_view = await dispute_service.list_disputes(db, seed.agency_actor)
    rival_view = await dispute_service.list_disputes(db, seed.rival_actor)
    admin_view = await dispute_service.list_disputes(db, seed.admin_actor)

    assert [d.id for d in customer_view] == [d1.id]
    assert [d.id for d in agency_view] == [d1.id]
    assert [d.id for d in rival_view] == [d2.id]
    assert {d.id for d in admin_view} == {d1.id, d2.id}

    assert (await dispute_service.get_dispute(db, seed.agency_actor, d1.id)).id == d1.id
    with pytest.raises(AuthorizationError):
        await dispute_service.get_dispute(db, seed.rival_actor, d1.id)
