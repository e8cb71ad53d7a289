"""
Pydantic schemas for Vehicle.
"""
from pydantic import Field
from datetime import datetime
from typing import ClassVar, Optional

from garageops.schemas.common import CamelModel, PatchModel


class VehicleBase(CamelModel):
    """Base vehicle schema with common fields."""
    customer_id: str
    make: str = Field(min_length=1)
    model: str = Field(min_length=1)
    year: int = Field(ge=1886, le=2100)
    license_plate: str = Field(min_length=1)
    vin: Optional[str] = None
    color: Optional[str] = None


class VehicleCreate(VehicleBase):
    """Schema for creating a vehicle."""
    garage_id: str = Field(min_length=1)


class VehicleUpdate(PatchModel):
    """Schema for updating a vehicle."""
    not_nullable: ClassVar[frozenset[str]] = frozenset({"customer_id", "make", "model", "year", "license_plate"})

    customer_id: Optional[str] = None
    make: Optional[str] = Field(default=None, min_length=1)
    model: Optional[str] = Field(default=None, min_length=1)
    year: Optional[int] = Field(default=None, ge=1886, le=2100)
    license_plate: Optional[str] = Field(default=None, min_length=1)
    vin: Optional[str] = None
    color: Optional[str] = None


class Vehicle(VehicleBase):
    """Schema for vehicle responses."""
    id: str
    garage_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None
