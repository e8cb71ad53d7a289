"""
Pydantic schemas for Customer.
"""
from pydantic import EmailStr, Field
from datetime import datetime
from typing import ClassVar, Optional

from garageops.schemas.common import CamelModel, PatchModel


class CustomerBase(CamelModel):
    """Base customer schema with common fields."""
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    address: Optional[str] = None


class CustomerCreate(CustomerBase):
    """Schema for creating a customer."""
    garage_id: str = Field(min_length=1)


class CustomerUpdate(PatchModel):
    """Schema for updating a customer."""
    not_nullable: ClassVar[frozenset[str]] = frozenset({"first_name", "last_name", "phone_number"})

    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    phone_number: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    address: Optional[str] = None


class Customer(CustomerBase):
    """Schema for customer responses."""
    id: str
    garage_id: str
    email: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
