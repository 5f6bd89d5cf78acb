"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from getlost.api.v1 import bookings, disputes, services

api_router = APIRouter()

# Services and availability
api_router.include_router(services.router, prefix="/services", tags=["Services"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Refund disputes
api_router.include_router(disputes.router, prefix="/refunds", tags=["Refunds"])
