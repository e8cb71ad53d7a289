"""
Employee model for database.
"""
import uuid

from sqlalchemy import Boolean, Column, String, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
from garageops.database import Base, enum_values
import enum


class EmployeeRole(str, enum.Enum):
    """Employee role enumeration."""
    OWNER = "owner"
    MANAGER = "manager"
    SERVICE_ADVISOR = "service_advisor"
    MECHANIC = "mechanic"
    STAFF = "staff"


class Employee(Base):
    """Employee database model. Employees sign in with their login id."""

    __tablename__ = "employees"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    garage_id = Column(String(36), nullable=False, index=True)
    login_id = Column(String, unique=True, nullable=False, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    password_hash = Column(String, nullable=True)
    role = Column(SQLEnum(EmployeeRole, values_callable=enum_values), default=EmployeeRole.STAFF, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def has_password(self) -> bool:
        return self.password_hash is not None
