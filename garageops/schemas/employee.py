"""
Pydantic schemas for Employee and Authentication.
"""
from pydantic import AfterValidator, EmailStr, Field
from datetime import datetime
from typing import Annotated, ClassVar, Optional

from garageops.models.employee import EmployeeRole
from garageops.schemas.common import CamelModel, PatchModel

# bcrypt rejects anything longer
MAX_PASSWORD_BYTES = 72


def check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


Password = Annotated[str, Field(min_length=1), AfterValidator(check_password_bytes)]


class EmployeeBase(CamelModel):
    """Base employee schema with common fields."""
    login_id: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    role: EmployeeRole = EmployeeRole.STAFF


class EmployeeCreate(EmployeeBase):
    """Schema for creating an employee."""
    garage_id: str = Field(min_length=1)
    password: Optional[Password] = None


class EmployeeUpdate(PatchModel):
    """Schema for updating an employee."""
    not_nullable: ClassVar[frozenset[str]] = frozenset({"first_name", "last_name", "role", "is_active"})

    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    role: Optional[EmployeeRole] = None
    is_active: Optional[bool] = None


class Employee(EmployeeBase):
    """Schema for employee responses."""
    id: str
    garage_id: str
    email: Optional[str] = None
    is_active: bool = True
    has_password: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None


class LoginRequest(CamelModel):
    """Schema for the login-id lookup."""
    login_id: str = Field(min_length=1)


class LoginProfile(CamelModel):
    """Profile returned by a login-id lookup."""
    user_uid: str
    garage_id: str
    first_name: str
    last_name: str
    user_role: EmployeeRole
    login_id: str
    has_password: bool


class LoginResponse(CamelModel):
    """Schema for login-id lookup responses."""
    success: bool = True
    user: LoginProfile


class PasswordRequest(CamelModel):
    """Schema for setting or verifying a password."""
    login_id: str = Field(min_length=1)
    password: Password


class Token(CamelModel):
    """Schema for authentication token."""
    access_token: str
    token_type: str = "bearer"
    user: LoginProfile
