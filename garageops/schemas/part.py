"""
Pydantic schemas for job card part lines.
"""
from pydantic import Field, StringConstraints
from datetime import datetime
from decimal import Decimal
from typing import Annotated, ClassVar, Optional

from garageops.models.part import PartStatus
from garageops.schemas.common import CamelModel, Money, PatchModel

Quantity = Annotated[int, Field(ge=0, strict=True)]


class JobCardPartCreate(CamelModel):
    """Schema for allocating a part to a job card."""
    part_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    part_id: Optional[str] = None
    part_number: Optional[str] = None
    manufacturer: Optional[str] = None
    status: PartStatus = PartStatus.ALLOCATED
    quantity_allocated: Quantity = 0
    quantity_used: Quantity = 0
    quantity_returned: Quantity = 0
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    source: str = "inventory"
    notes: Optional[str] = None


class JobCardPartUpdate(PatchModel):
    """Schema for updating a part line."""
    not_nullable: ClassVar[frozenset[str]] = frozenset(
        {"status", "quantity_allocated", "quantity_used", "quantity_returned", "unit_price"}
    )

    status: Optional[PartStatus] = None
    quantity_allocated: Optional[Quantity] = None
    quantity_used: Optional[Quantity] = None
    quantity_returned: Optional[Quantity] = None
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


class JobCardPart(CamelModel):
    """Schema for part line responses."""
    id: str
    job_card_id: str
    part_id: Optional[str] = None
    part_name: str
    part_number: Optional[str] = None
    manufacturer: Optional[str] = None
    status: PartStatus
    quantity_allocated: int
    quantity_used: int
    quantity_returned: int
    unit_price: Money
    total_price: Money
    source: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class JobCardPartResponse(CamelModel):
    success: bool = True
    part: JobCardPart


class JobCardPartListResponse(CamelModel):
    success: bool = True
    parts: list[JobCardPart]
    count: int
