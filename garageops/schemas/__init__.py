"""
Pydantic schemas for request/response validation.
"""
from garageops.schemas.common import CamelModel, PatchModel, ErrorResponse, FieldError, SuccessResponse
from garageops.schemas.customer import CustomerBase, CustomerCreate, CustomerUpdate, Customer
from garageops.schemas.vehicle import VehicleBase, VehicleCreate, VehicleUpdate, Vehicle
from garageops.schemas.employee import EmployeeBase, EmployeeCreate, EmployeeUpdate, Employee, Token
from garageops.schemas.checklist import (
    ChecklistItem, ChecklistItemCreate, ChecklistItemUpdate,
    Subtask, SubtaskCreate, SubtaskUpdate, TimeEntry,
)
from garageops.schemas.part import JobCardPart, JobCardPartCreate, JobCardPartUpdate
from garageops.schemas.inventory import InventoryPart, InventoryPartCreate, InventoryPartUpdate
from garageops.schemas.job_card import (
    JobCard, JobCardCreate, JobCardUpdate, JobCardDetail, JobCardFilters,
    StatusUpdate, StatusHistoryEntry,
)

__all__ = [
    "CamelModel", "PatchModel", "ErrorResponse", "FieldError", "SuccessResponse",
    "CustomerBase", "CustomerCreate", "CustomerUpdate", "Customer",
    "VehicleBase", "VehicleCreate", "VehicleUpdate", "Vehicle",
    "EmployeeBase", "EmployeeCreate", "EmployeeUpdate", "Employee", "Token",
    "ChecklistItem", "ChecklistItemCreate", "ChecklistItemUpdate",
    "Subtask", "SubtaskCreate", "SubtaskUpdate", "TimeEntry",
    "JobCardPart", "JobCardPartCreate", "JobCardPartUpdate",
    "InventoryPart", "InventoryPartCreate", "InventoryPartUpdate",
    "JobCard", "JobCardCreate", "JobCardUpdate", "JobCardDetail", "JobCardFilters",
    "StatusUpdate", "StatusHistoryEntry",
]
