"""
Customer routes.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import or_, select
from typing import List, Optional

from garageops.auth import get_current_active_employee, resolve_garage_id
from garageops.database import commit_or_raise, get_db
from garageops.models.customer import Customer
from garageops.models.employee import Employee
from garageops.schemas.customer import Customer as CustomerSchema, CustomerCreate, CustomerUpdate

router = APIRouter(prefix="/customers", tags=["customers"])


async def get_customer_or_404(db: AsyncSession, customer_id: str, garage_id: str) -> Customer:
    result = await db.execute(
        select(Customer).where(Customer.id == customer_id, Customer.garage_id == garage_id)
    )
    customer = result.scalar_one_or_none()

    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )

    return customer


@router.get("", response_model=List[CustomerSchema])
async def get_customers(
    garage_id: Optional[str] = Query(default=None, alias="garageId"),
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Get a garage's customers with pagination.
    """
    garage_id = resolve_garage_id(garage_id, current_user)
    query = select(Customer).where(Customer.garage_id == garage_id)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Customer.first_name.ilike(pattern),
                Customer.last_name.ilike(pattern),
                Customer.phone_number.ilike(pattern),
                Customer.email.ilike(pattern),
            )
        )

    result = await db.execute(query.order_by(Customer.last_name, Customer.first_name).offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/{customer_id}", response_model=CustomerSchema)
async def get_customer(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Get a specific customer by ID.
    """
    return await get_customer_or_404(db, customer_id, current_user.garage_id)


@router.post("", response_model=CustomerSchema, status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer: CustomerCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Create a new customer.
    """
    resolve_garage_id(customer.garage_id, current_user)
    db_customer = Customer(**customer.model_dump())
    db.add(db_customer)
    await commit_or_raise(db, "Failed to create customer")
    await db.refresh(db_customer)

    return db_customer


@router.patch("/{customer_id}", response_model=CustomerSchema)
async def update_customer(
    customer_id: str,
    customer_update: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Update a customer.
    """
    db_customer = await get_customer_or_404(db, customer_id, current_user.garage_id)

    # Update only provided fields
    for field, value in customer_update.changes().items():
        setattr(db_customer, field, value)

    await commit_or_raise(db, "Failed to update customer")
    await db.refresh(db_customer)

    return db_customer


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Delete a customer and their vehicles.
    """
    db_customer = await get_customer_or_404(db, customer_id, current_user.garage_id)

    await db.delete(db_customer)
    await commit_or_raise(db, "Failed to delete customer")

    return None
