"""Service catalog schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from getlost.schemas.common import UTCDateTime


class ServiceBase(BaseModel):
    """Catalog fields an agency controls."""

    title: str = Field(..., min_length=3, max_length=200)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    location: str = Field(..., min_length=2, max_length=200)
    duration: int | None = Field(None, ge=1, le=365)
    description: str | None = Field(None, max_length=10000)


class ServiceCreate(ServiceBase):
    """Schema for publishing a service. Admins must name the agency."""

    agency_id: int | None = None


class ServiceUpdate(BaseModel):
    """Schema for updating a service. Only the given fields change."""

    title: str | None = Field(None, min_length=3, max_length=200)
    price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    location: str | None = Field(None, min_length=2, max_length=200)
    duration: int | None = Field(None, ge=1, le=365)
    description: str | None = Field(None, max_length=10000)


class ServiceResponse(BaseModel):
    """Schema for service response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    agency_id: int
    title: str
    price: Decimal
    location: str
    duration: int | None
    description: str | None
    created_at: UTCDateTime


class ServiceListResponse(BaseModel):
    """Schema for a page of the catalog."""

    services: list[ServiceResponse]
    total: int
    page: int
    page_size: int
