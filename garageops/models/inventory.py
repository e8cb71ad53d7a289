"""
Inventory part model for database.
"""
import uuid
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from garageops.database import Base

DEFAULT_LOW_STOCK_THRESHOLD = 5


class InventoryPart(Base):
    """A part a garage keeps in stock and can allocate to job cards."""

    __tablename__ = "parts"
    __table_args__ = (
        UniqueConstraint("garage_id", "part_number", name="uq_part_garage_number"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    garage_id = Column(String(36), nullable=False, index=True)
    part_number = Column(String, nullable=False, index=True)
    part_name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False)
    make = Column(String, nullable=True)
    model = Column(String, nullable=True)
    used_for = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    on_hand_stock = Column(Integer, default=0, nullable=False)
    warehouse_stock = Column(Integer, default=0, nullable=False)
    low_stock_threshold = Column(Integer, default=DEFAULT_LOW_STOCK_THRESHOLD, nullable=False)
    purchase_price = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    selling_price = Column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    location = Column(String, nullable=True)
    supplier = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def stock_status(self) -> str:
        if not self.on_hand_stock:
            return "out-of-stock"
        if self.on_hand_stock <= self.low_stock_threshold:
            return "low-stock"
        return "in-stock"

    @property
    def profit_margin_pct(self) -> Decimal:
        purchase = Decimal(self.purchase_price or 0)
        if purchase <= 0:
            return Decimal("0")
        return ((Decimal(self.selling_price or 0) - purchase) / purchase * 100).quantize(Decimal("0.01"))
