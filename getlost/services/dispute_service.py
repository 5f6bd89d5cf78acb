"""Refund dispute service."""

import logging
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from getlost.core.exceptions import InvalidTransition, NotFoundError
from getlost.core.permissions import Actor, Permission, UserRole, authorize
from getlost.domain.booking_state import DISPUTABLE_STATUSES, BookingStatus
from getlost.domain.dispute_state import DisputeStatus, assert_dispute_transition
from getlost.models.booking import Booking
from getlost.models.dispute import RefundDispute
from getlost.models.payment import Payment
from getlost.models.service import Service

logger = logging.getLogger(__name__)


class DisputeService:
    """Service for the refund dispute lifecycle.

    The admin verdict is advisory; reversing the payment is handled by
    the payments team outside this workflow.
    """

    async def open_dispute(
        self,
        db: AsyncSession,
        actor: Actor,
        booking_id: int,
        reason: str,
        customer_explanation: str | None = None,
        payment_id: int | None = None,
    ) -> RefundDispute:
        """Open a refund dispute on a confirmed or completed booking."""
        result = await db.execute(
            select(Booking)
            .options(selectinload(Booking.service))
            .where(Booking.id == booking_id)
        )
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))

        authorize(actor, Permission.OPEN_DISPUTE, booking.ownership)

        if BookingStatus(booking.status) not in DISPUTABLE_STATUSES:
            raise InvalidTransition(
                "Refunds can only be requested for confirmed or completed bookings"
            )

        if payment_id is not None:
            payment = await db.get(Payment, payment_id)
            if not payment or payment.booking_id != booking.id:
                raise NotFoundError("Payment", str(payment_id))

        dispute = RefundDispute(
            booking_id=booking.id,
            payment_id=payment_id,
            opened_by=actor.user_id,
            status=DisputeStatus.OPEN.value,
            reason=reason,
            customer_explanation=customer_explanation,
            opened_at=datetime.now(UTC),
        )
        dispute.booking = booking
        db.add(dispute)
        await db.flush()

        logger.info(f"Refund dispute {dispute.id} opened on booking {booking.id} by user {actor.user_id}")
        return dispute

    async def agency_respond(
        self,
        db: AsyncSession,
        actor: Actor,
        dispute_id: int,
        response: str,
    ) -> RefundDispute:
        """Record the owning agency's single response to an open dispute."""
        dispute = await self._get_dispute(db, dispute_id)
        authorize(actor, Permission.RESPOND_DISPUTE, dispute.ownership)
        assert_dispute_transition(dispute.status, DisputeStatus.AGENCY_RESPONDED)

        dispute.status = DisputeStatus.AGENCY_RESPONDED.value
        dispute.agency_response = response
        await db.flush()

        logger.info(f"Refund dispute {dispute.id} answered by agency {actor.agency_id}")
        return dispute

    async def admin_resolve(
        self,
        db: AsyncSession,
        actor: Actor,
        dispute_id: int,
        verdict: str,
    ) -> RefundDispute:
        """Resolve a dispute with a verdict (web admin only).

        Allowed whether or not the agency has responded.
        """
        dispute = await self._get_dispute(db, dispute_id)
        authorize(actor, Permission.RESOLVE_DISPUTE, dispute.ownership)
        assert_dispute_transition(dispute.status, DisputeStatus.RESOLVED)

        dispute.status = DisputeStatus.RESOLVED.value
        dispute.admin_verdict = verdict
        dispute.resolved_by = actor.user_id
        dispute.resolved_at = datetime.now(UTC)
        await db.flush()

        logger.info(f"Refund dispute {dispute.id} resolved by user {actor.user_id}")
        return dispute

    async def get_dispute(self, db: AsyncSession, actor: Actor, dispute_id: int) -> RefundDispute:
        """Get a dispute visible to the actor."""
        dispute = await self._get_dispute(db, dispute_id)
        authorize(actor, Permission.VIEW_DISPUTE, dispute.ownership)
        return dispute

    async def list_disputes(self, db: AsyncSession, actor: Actor) -> list[RefundDispute]:
        """List disputes in the actor's scope, newest first.

        Customers see disputes they opened, agencies those on their services,
        web admins all of them.
        """
        authorize(actor, Permission.VIEW_DISPUTE)

        query = select(RefundDispute).order_by(
            RefundDispute.opened_at.desc(), RefundDispute.id.desc()
        )
        if actor.role == UserRole.CUSTOMER:
            query = query.where(RefundDispute.opened_by == actor.user_id)
        elif actor.role == UserRole.AGENCY:
            query = query.where(
                RefundDispute.booking.has(
                    Booking.service.has(Service.agency_id == actor.agency_id)
                )
            )

        result = await db.execute(query)
        return list(result.scalars().all())

    async def _get_dispute(self, db: AsyncSession, dispute_id: int) -> RefundDispute:
        """Get dispute with its booking and service loaded, or raise NotFoundError."""
        result = await db.execute(
            select(RefundDispute)
            .options(selectinload(RefundDispute.booking).selectinload(Booking.service))
            .where(RefundDispute.id == dispute_id)
        )
        dispute = result.scalar_one_or_none()
        if not dispute:
            raise NotFoundError("Dispute", str(dispute_id))
        return dispute


dispute_service = DisputeService()
