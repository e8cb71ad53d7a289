"""
Pydantic schemas for the parts inventory.
"""
from pydantic import Field
from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Literal, Optional

from garageops.models.inventory import DEFAULT_LOW_STOCK_THRESHOLD
from garageops.schemas.common import CamelModel, Money, PatchModel

StockStatus = Literal["in-stock", "low-stock", "out-of-stock"]


class InventoryPartBase(CamelModel):
    """Base inventory part schema with common fields."""
    part_number: str = Field(min_length=1)
    part_name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    make: Optional[str] = None
    model: Optional[str] = None
    used_for: Optional[str] = None
    description: Optional[str] = None
    on_hand_stock: int = Field(default=0, ge=0)
    warehouse_stock: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=DEFAULT_LOW_STOCK_THRESHOLD, ge=0)
    purchase_price: Decimal = Field(default=Decimal("0"), ge=0)
    selling_price: Decimal = Field(default=Decimal("0"), ge=0)
    location: Optional[str] = None
    supplier: Optional[str] = None


class InventoryPartCreate(InventoryPartBase):
    """Schema for adding a part to the inventory."""
    garage_id: str = Field(min_length=1)


class InventoryPartUpdate(PatchModel):
    """Schema for updating an inventory part."""
    not_nullable: ClassVar[frozenset[str]] = frozenset({
        "part_number", "part_name", "category", "on_hand_stock", "warehouse_stock",
        "low_stock_threshold", "purchase_price", "selling_price",
    })

    part_number: Optional[str] = Field(default=None, min_length=1)
    part_name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    make: Optional[str] = None
    model: Optional[str] = None
    used_for: Optional[str] = None
    description: Optional[str] = None
    on_hand_stock: Optional[int] = Field(default=None, ge=0)
    warehouse_stock: Optional[int] = Field(default=None, ge=0)
    low_stock_threshold: Optional[int] = Field(default=None, ge=0)
    purchase_price: Optional[Decimal] = Field(default=None, ge=0)
    selling_price: Optional[Decimal] = Field(default=None, ge=0)
    location: Optional[str] = None
    supplier: Optional[str] = None


class InventoryPart(InventoryPartBase):
    """Schema for inventory part responses."""
    id: str
    garage_id: str
    purchase_price: Money
    selling_price: Money
    profit_margin_pct: Money
    stock_status: StockStatus
    created_at: datetime
    updated_at: Optional[datetime] = None


class FieldOption(CamelModel):
    value: str
    label: str
    usage_count: int


class FieldOptionsResponse(CamelModel):
    success: bool = True
    field: str
    options: list[FieldOption]
