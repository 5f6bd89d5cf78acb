"""Refund dispute endpoints."""

from fastapi import APIRouter

from getlost.api.deps import CurrentActor, DbSession
from getlost.models.dispute import RefundDispute
from getlost.schemas.dispute import (
    DisputeListResponse,
    DisputeRespond,
    DisputeResponse,
    DisputeVerdict,
)
from getlost.services.dispute_service import dispute_service

router = APIRouter()


@router.get("/", response_model=DisputeListResponse)
async def list_disputes(actor: CurrentActor, db: DbSession) -> DisputeListResponse:
    """List refund disputes visible to the current user."""
    disputes = await dispute_service.list_disputes(db, actor)
    return DisputeListResponse(
        disputes=[DisputeResponse.model_validate(d) for d in disputes],
        total=len(disputes),
    )


@router.get("/{dispute_id}", response_model=DisputeResponse)
async def get_dispute(dispute_id: int, actor: CurrentActor, db: DbSession) -> RefundDispute:
    """Get a refund dispute by ID."""
    return await dispute_service.get_dispute(db, actor, dispute_id)


@router.post("/{dispute_id}/respond", response_model=DisputeResponse)
async def respond_to_dispute(
    dispute_id: int,
    data: DisputeRespond,
    actor: CurrentActor,
    db: DbSession,
) -> RefundDispute:
    """Record the agency's response to an open dispute."""
    return await dispute_service.agency_respond(db, actor, dispute_id, data.response)


@router.post("/{dispute_id}/verdict", response_model=DisputeResponse)
async def resolve_dispute(
    dispute_id: int,
    data: DisputeVerdict,
    actor: CurrentActor,
    db: DbSession,
) -> RefundDispute:
    """Resolve a dispute with a verdict (admin only)."""
    return await dispute_service.admin_resolve(db, actor, dispute_id, data.verdict)
