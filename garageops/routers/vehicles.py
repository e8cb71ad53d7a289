"""
Vehicle routes.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional

from garageops.auth import get_current_active_employee, resolve_garage_id
from garageops.database import commit_or_raise, get_db
from garageops.models.customer import Customer
from garageops.models.employee import Employee
from garageops.models.vehicle import Vehicle
from garageops.schemas.vehicle import Vehicle as VehicleSchema, VehicleCreate, VehicleUpdate

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


async def get_vehicle_or_404(db: AsyncSession, vehicle_id: str, garage_id: str) -> Vehicle:
    result = await db.execute(
        select(Vehicle).where(Vehicle.id == vehicle_id, Vehicle.garage_id == garage_id)
    )
    vehicle = result.scalar_one_or_none()

    if not vehicle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vehicle not found"
        )

    return vehicle


async def ensure_plate_available(db: AsyncSession, garage_id: str, license_plate: str):
    result = await db.execute(
        select(Vehicle.id).where(Vehicle.garage_id == garage_id, Vehicle.license_plate == license_plate)
    )
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="License plate already registered"
        )


async def ensure_customer_exists(db: AsyncSession, garage_id: str, customer_id: str):
    result = await db.execute(
        select(Customer.id).where(Customer.id == customer_id, Customer.garage_id == garage_id)
    )
    if not result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )


@router.get("", response_model=List[VehicleSchema])
async def get_vehicles(
    garage_id: Optional[str] = Query(default=None, alias="garageId"),
    customer_id: Optional[str] = Query(default=None, alias="customerId"),
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Get a garage's vehicles, optionally only one customer's.
    """
    garage_id = resolve_garage_id(garage_id, current_user)
    query = select(Vehicle).where(Vehicle.garage_id == garage_id)
    if customer_id:
        query = query.where(Vehicle.customer_id == customer_id)

    result = await db.execute(query.order_by(Vehicle.license_plate).offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/{vehicle_id}", response_model=VehicleSchema)
async def get_vehicle(
    vehicle_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Get a specific vehicle by ID.
    """
    return await get_vehicle_or_404(db, vehicle_id, current_user.garage_id)


@router.post("", response_model=VehicleSchema, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle: VehicleCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Register a vehicle for a customer.
    """
    resolve_garage_id(vehicle.garage_id, current_user)
    await ensure_customer_exists(db, vehicle.garage_id, vehicle.customer_id)
    await ensure_plate_available(db, vehicle.garage_id, vehicle.license_plate)

    db_vehicle = Vehicle(**vehicle.model_dump())
    db.add(db_vehicle)
    await commit_or_raise(db, "Failed to create vehicle")
    await db.refresh(db_vehicle)

    return db_vehicle


@router.patch("/{vehicle_id}", response_model=VehicleSchema)
async def update_vehicle(
    vehicle_id: str,
    vehicle_update: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Update a vehicle.
    """
    db_vehicle = await get_vehicle_or_404(db, vehicle_id, current_user.garage_id)
    update_data = vehicle_update.changes()

    if "customer_id" in update_data:
        await ensure_customer_exists(db, db_vehicle.garage_id, update_data["customer_id"])
    if update_data.get("license_plate", db_vehicle.license_plate) != db_vehicle.license_plate:
        await ensure_plate_available(db, db_vehicle.garage_id, update_data["license_plate"])

    for field, value in update_data.items():
        setattr(db_vehicle, field, value)

    await commit_or_raise(db, "Failed to update vehicle")
    await db.refresh(db_vehicle)

    return db_vehicle


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Delete a vehicle.
    """
    db_vehicle = await get_vehicle_or_404(db, vehicle_id, current_user.garage_id)

    await db.delete(db_vehicle)
    await commit_or_raise(db, "Failed to delete vehicle")

    return None
