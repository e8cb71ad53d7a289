"""
SQLAlchemy database models.
"""
from garageops.models.customer import Customer
from garageops.models.vehicle import Vehicle
from garageops.models.employee import Employee, EmployeeRole
from garageops.models.job_card import JobCard, JobCardStatus, JobCardStatusHistory, JobType, Priority
from garageops.models.checklist import ChecklistItem, ChecklistItemStatus, TimeEntry
from garageops.models.part import JobCardPart, PartStatus
from garageops.models.inventory import InventoryPart

__all__ = [
    "Customer", "Vehicle", "Employee", "EmployeeRole",
    "JobCard", "JobCardStatus", "JobCardStatusHistory", "JobType", "Priority",
    "ChecklistItem", "ChecklistItemStatus", "TimeEntry",
    "JobCardPart", "PartStatus", "InventoryPart",
]
