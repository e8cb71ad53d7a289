"""
Authentication routes.

Sign-in is two steps: the client looks up a login id, learns whether the
employee already has a password, then either sets one or verifies it.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from garageops.auth import create_access_token, get_employee_by_login_id, hash_password, verify_password
from garageops.config import get_settings
from garageops.database import commit_or_raise, get_db
from garageops.exceptions import AuthenticationError, NotFoundError, ValidationError
from garageops.models.employee import Employee
from garageops.schemas.common import SuccessResponse
from garageops.schemas.employee import LoginProfile, LoginRequest, LoginResponse, PasswordRequest, Token

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/auth", tags=["auth"])


def login_profile(employee: Employee) -> LoginProfile:
    return LoginProfile(
        user_uid=employee.id,
        garage_id=employee.garage_id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        user_role=employee.role,
        login_id=employee.login_id,
        has_password=employee.has_password,
    )


async def get_active_employee_by_login(db: AsyncSession, login_id: str) -> Employee:
    employee = await get_employee_by_login_id(db, login_id.strip())
    if employee is None:
        raise NotFoundError("Employee not found")
    if not employee.is_active:
        raise AuthenticationError("Inactive employee")
    return employee


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Look up an employee by login id."""
    employee = await get_active_employee_by_login(db, request.login_id)
    return LoginResponse(user=login_profile(employee))


@router.post("/set-password", response_model=SuccessResponse)
async def set_password(request: PasswordRequest, db: AsyncSession = Depends(get_db)):
    """Set the password of an employee who does not have one yet."""
    if len(request.password) < settings.min_password_length:
        raise ValidationError(
            "Validation failed",
            details=[{
                "field": "password",
                "message": f"Password must be at least {settings.min_password_length} characters",
            }],
        )

    employee = await get_active_employee_by_login(db, request.login_id)
    if employee.has_password:
        raise ValidationError("Password already set")

    employee.password_hash = hash_password(request.password)
    await commit_or_raise(db, "Failed to set password")

    logger.info("Password set for employee %s", employee.login_id)
    return SuccessResponse(message="Password set successfully")


@router.post("/verify-password", response_model=Token)
async def verify(request: PasswordRequest, db: AsyncSession = Depends(get_db)):
    """Check a password and issue a bearer token."""
    employee = await get_active_employee_by_login(db, request.login_id)

    if not verify_password(request.password, employee.password_hash):
        logger.warning("Failed password verification for %s", employee.login_id)
        raise AuthenticationError("Invalid credentials")

    return Token(access_token=create_access_token(employee.id), user=login_profile(employee))
