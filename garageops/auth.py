"""
Password hashing, JWT tokens and the current-employee dependencies.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from garageops.config import get_settings
from garageops.database import get_db
from garageops.exceptions import AuthenticationError, NotFoundError, ValidationError
from garageops.models.employee import Employee
from garageops.schemas.employee import MAX_PASSWORD_BYTES

logger = logging.getLogger(__name__)

settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            "Validation failed",
            details=[{"field": "password", "message": f"Password must be at most {MAX_PASSWORD_BYTES} bytes"}],
        )
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: Optional[str]) -> bool:
    """Check a password against a stored bcrypt hash."""
    encoded = plain_password.encode("utf-8")
    if not password_hash or len(encoded) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT whose subject is the employee id."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": subject, "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> str:
    """Return the subject of a valid token or raise AuthenticationError."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise AuthenticationError("Could not validate credentials") from exc

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Could not validate credentials")
    return subject


async def get_employee_by_login_id(db: AsyncSession, login_id: str) -> Optional[Employee]:
    result = await db.execute(select(Employee).where(Employee.login_id == login_id))
    return result.scalar_one_or_none()


async def get_current_employee(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Employee:
    """Resolve the bearer token to an employee."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    employee_id = decode_access_token(credentials.credentials)
    employee = await db.get(Employee, employee_id)
    if employee is None:
        raise AuthenticationError("Could not validate credentials")
    return employee


async def get_current_active_employee(
    current_employee: Employee = Depends(get_current_employee),
) -> Employee:
    """Like ``get_current_employee`` but rejects deactivated accounts."""
    if not current_employee.is_active:
        logger.warning("Inactive employee %s attempted access", current_employee.login_id)
        raise AuthenticationError("Inactive employee")
    return current_employee


def resolve_garage_id(requested_garage_id: Optional[str], current_employee: Employee) -> str:
    """
    The garage a request operates on.

    Employees only ever see their own garage. Naming another garage is
    answered the same way as naming one that does not exist.
    """
    if requested_garage_id and requested_garage_id != current_employee.garage_id:
        logger.warning(
            "Employee %s asked for garage %s outside their own", current_employee.login_id, requested_garage_id
        )
        raise NotFoundError("Garage not found")
    return current_employee.garage_id
