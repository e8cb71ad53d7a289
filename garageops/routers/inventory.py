"""
Inventory routes.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import and_, func, or_, select
from typing import List, Optional

from garageops.auth import get_current_active_employee, resolve_garage_id
from garageops.database import commit_or_raise, get_db
from garageops.models.employee import Employee
from garageops.models.inventory import InventoryPart
from garageops.schemas.inventory import (
    FieldOption, FieldOptionsResponse, InventoryPart as InventoryPartSchema,
    InventoryPartCreate, InventoryPartUpdate, StockStatus,
)

router = APIRouter(prefix="/inventory", tags=["inventory"])

# Dropdown values offered for the free-text classification fields
FIELD_OPTIONS = {
    "category": (
        "Engine", "Brakes", "Body", "Electrical", "Suspension", "Transmission",
        "Exhaust", "Tires & Wheels", "Filters", "Fluids", "Accessories", "Other",
    ),
    "usedFor": (
        "Engine", "Brakes", "Body", "Electrical", "Suspension", "Transmission",
        "Exhaust", "General",
    ),
}

FIELD_COLUMNS = {
    "category": InventoryPart.category,
    "usedFor": InventoryPart.used_for,
}

STOCK_CONDITIONS = {
    "out-of-stock": InventoryPart.on_hand_stock == 0,
    "low-stock": and_(
        InventoryPart.on_hand_stock > 0,
        InventoryPart.on_hand_stock <= InventoryPart.low_stock_threshold,
    ),
    "in-stock": InventoryPart.on_hand_stock > InventoryPart.low_stock_threshold,
}


async def get_inventory_part_or_404(db: AsyncSession, part_id: str, garage_id: str) -> InventoryPart:
    result = await db.execute(
        select(InventoryPart).where(InventoryPart.id == part_id, InventoryPart.garage_id == garage_id)
    )
    part = result.scalar_one_or_none()

    if not part:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Part not found"
        )

    return part


async def ensure_part_number_available(db: AsyncSession, garage_id: str, part_number: str):
    result = await db.execute(
        select(InventoryPart.id).where(
            InventoryPart.garage_id == garage_id, InventoryPart.part_number == part_number
        )
    )
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f'A part with part number "{part_number}" already exists'
        )


@router.get("", response_model=List[InventoryPartSchema])
async def get_inventory_parts(
    garage_id: Optional[str] = Query(default=None, alias="garageId"),
    search: Optional[str] = None,
    category: Optional[str] = None,
    stock_status: Optional[StockStatus] = Query(default=None, alias="stockStatus"),
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Get a garage's parts, newest first.
    """
    garage_id = resolve_garage_id(garage_id, current_user)
    query = select(InventoryPart).where(InventoryPart.garage_id == garage_id)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                InventoryPart.part_name.ilike(pattern),
                InventoryPart.part_number.ilike(pattern),
                InventoryPart.make.ilike(pattern),
                InventoryPart.model.ilike(pattern),
            )
        )
    if category:
        query = query.where(InventoryPart.category == category)
    if stock_status:
        query = query.where(STOCK_CONDITIONS[stock_status])

    result = await db.execute(
        query.order_by(InventoryPart.created_at.desc(), InventoryPart.part_name).offset(skip).limit(limit)
    )
    return result.scalars().all()


@router.get("/field-options", response_model=FieldOptionsResponse)
async def get_field_options(
    field: str,
    garage_id: Optional[str] = Query(default=None, alias="garageId"),
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Dropdown options for a field, the garage's most used values first.
    """
    if field not in FIELD_OPTIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown field: {field}"
        )

    garage_id = resolve_garage_id(garage_id, current_user)
    column = FIELD_COLUMNS[field]
    result = await db.execute(
        select(column, func.count()).where(InventoryPart.garage_id == garage_id).group_by(column)
    )
    usage = {value: count for value, count in result.all() if value}

    # sorted() is stable, so equally used options keep their listed order
    options = sorted(FIELD_OPTIONS[field], key=lambda value: -usage.get(value, 0))
    return FieldOptionsResponse(
        field=field,
        options=[FieldOption(value=value, label=value, usage_count=usage.get(value, 0)) for value in options],
    )


@router.get("/{part_id}", response_model=InventoryPartSchema)
async def get_inventory_part(
    part_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Get a specific part by ID.
    """
    return await get_inventory_part_or_404(db, part_id, current_user.garage_id)


@router.post("", response_model=InventoryPartSchema, status_code=status.HTTP_201_CREATED)
async def create_inventory_part(
    part: InventoryPartCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Add a part to the inventory.
    """
    resolve_garage_id(part.garage_id, current_user)
    await ensure_part_number_available(db, part.garage_id, part.part_number)

    db_part = InventoryPart(**part.model_dump())
    db.add(db_part)
    await commit_or_raise(db, "Failed to add part")
    await db.refresh(db_part)

    return db_part


@router.patch("/{part_id}", response_model=InventoryPartSchema)
async def update_inventory_part(
    part_id: str,
    part_update: InventoryPartUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Update a part.
    """
    db_part = await get_inventory_part_or_404(db, part_id, current_user.garage_id)
    update_data = part_update.changes()

    if update_data.get("part_number", db_part.part_number) != db_part.part_number:
        await ensure_part_number_available(db, db_part.garage_id, update_data["part_number"])

    for field, value in update_data.items():
        setattr(db_part, field, value)

    await commit_or_raise(db, "Failed to update part")
    await db.refresh(db_part)

    return db_part


@router.delete("/{part_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_inventory_part(
    part_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Remove a part from the inventory. Job card part lines keep their copy
    of its name, number and price.
    """
    db_part = await get_inventory_part_or_404(db, part_id, current_user.garage_id)

    await db.delete(db_part)
    await commit_or_raise(db, "Failed to delete part")

    return None
