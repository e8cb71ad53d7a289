"""
Employee routes.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional

from garageops.auth import get_current_active_employee, get_employee_by_login_id, hash_password, resolve_garage_id
from garageops.config import get_settings
from garageops.database import commit_or_raise, get_db
from garageops.models.checklist import ChecklistItem
from garageops.models.employee import Employee
from garageops.models.job_card import JobCard
from garageops.schemas.employee import Employee as EmployeeSchema, EmployeeCreate, EmployeeUpdate

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/employees", tags=["employees"])


async def get_employee_or_404(db: AsyncSession, employee_id: str, garage_id: str) -> Employee:
    employee = await db.get(Employee, employee_id)

    if not employee or employee.garage_id != garage_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found"
        )

    return employee


async def is_assigned_to_work(db: AsyncSession, employee_id: str) -> bool:
    """True while any job card or checklist item, deleted or not, points at the employee."""
    lead = await db.execute(select(JobCard.id).where(JobCard.lead_mechanic_id == employee_id).limit(1))
    if lead.scalar_one_or_none():
        return True

    item = await db.execute(select(ChecklistItem.id).where(ChecklistItem.mechanic_id == employee_id).limit(1))
    return item.scalar_one_or_none() is not None


@router.get("", response_model=List[EmployeeSchema])
async def get_employees(
    garage_id: Optional[str] = Query(default=None, alias="garageId"),
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Get a garage's employees.
    """
    garage_id = resolve_garage_id(garage_id, current_user)
    result = await db.execute(
        select(Employee).where(Employee.garage_id == garage_id).order_by(Employee.last_name, Employee.first_name)
    )
    return result.scalars().all()


@router.get("/by-login/{login_id}", response_model=EmployeeSchema)
async def get_employee_by_login(
    login_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Get an employee by login id.
    """
    employee = await get_employee_by_login_id(db, login_id)
    if not employee or employee.garage_id != current_user.garage_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found"
        )
    return employee


@router.get("/{employee_id}", response_model=EmployeeSchema)
async def get_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Get a specific employee by ID.
    """
    return await get_employee_or_404(db, employee_id, current_user.garage_id)


@router.post("", response_model=EmployeeSchema, status_code=status.HTTP_201_CREATED)
async def create_employee(
    employee: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Create a new employee.
    """
    resolve_garage_id(employee.garage_id, current_user)

    if await get_employee_by_login_id(db, employee.login_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Login ID already in use"
        )

    if employee.password is not None and len(employee.password) < settings.min_password_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {settings.min_password_length} characters"
        )

    db_employee = Employee(**employee.model_dump(exclude={"password"}))
    if employee.password:
        db_employee.password_hash = hash_password(employee.password)

    db.add(db_employee)
    await commit_or_raise(db, "Failed to create employee")
    await db.refresh(db_employee)

    logger.info("Employee %s created for garage %s", db_employee.login_id, db_employee.garage_id)
    return db_employee


@router.patch("/{employee_id}", response_model=EmployeeSchema)
async def update_employee(
    employee_id: str,
    employee_update: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Update an employee.
    """
    db_employee = await get_employee_or_404(db, employee_id, current_user.garage_id)

    for field, value in employee_update.changes().items():
        setattr(db_employee, field, value)

    await commit_or_raise(db, "Failed to update employee")
    await db.refresh(db_employee)

    return db_employee


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Employee = Depends(get_current_active_employee)
):
    """
    Delete an employee who has never been assigned any work.

    Employees named on job cards or checklist items stay on record; set
    ``isActive`` to false instead.
    """
    db_employee = await get_employee_or_404(db, employee_id, current_user.garage_id)

    if await is_assigned_to_work(db, employee_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Employee is assigned to job cards; deactivate the employee instead"
        )

    await db.delete(db_employee)
    await commit_or_raise(db, "Failed to delete employee")
    logger.info("Employee %s deleted", db_employee.login_id)

    return None
