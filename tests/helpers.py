"""
Shared fixtures for the test suite.

Every test case gets its own SQLite file so tests never see each other's
rows. Service tests talk to an ``AsyncSession`` directly; API tests drive the
FastAPI app in-process with ``TestClient`` and override ``get_db`` and the
authentication dependency.
"""
import itertools
import os
import tempfile
import unittest
from contextlib import contextmanager
from datetime import date

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from garageops.auth import get_current_active_employee
from garageops.database import Base, get_db
from garageops.main import app
from garageops.models import Customer, Employee, EmployeeRole, Vehicle

GARAGE_ID = "garage-1"
OTHER_GARAGE_ID = "garage-2"
TODAY = date(2025, 1, 24)

TEST_EMPLOYEE = Employee(
    id="employee-1",
    garage_id=GARAGE_ID,
    login_id="advisor",
    first_name="Sam",
    last_name="Rivera",
    role=EmployeeRole.SERVICE_ADVISOR,
    is_active=True,
)

OTHER_GARAGE_EMPLOYEE = Employee(
    id="employee-2",
    garage_id=OTHER_GARAGE_ID,
    login_id="other.advisor",
    first_name="Kai",
    last_name="Moreno",
    role=EmployeeRole.SERVICE_ADVISOR,
    is_active=True,
)

EMPLOYEES_BY_GARAGE = {GARAGE_ID: TEST_EMPLOYEE, OTHER_GARAGE_ID: OTHER_GARAGE_EMPLOYEE}


def create_database(directory: str) -> str:
    """Create the schema in a fresh SQLite file and return its path."""
    path = os.path.join(directory, "garageops-test.db")
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    engine.dispose()
    return path


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Base class for service tests; ``self.db`` is an open AsyncSession."""

    async def asyncSetUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        path = create_database(self.tmpdir.name)
        self.engine = create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
        self.session_factory = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)
        self.db = self.session_factory()

    async def asyncTearDown(self):
        await self.db.close()
        await self.engine.dispose()
        self.tmpdir.cleanup()

    async def seed_customer_and_vehicle(self, garage_id=GARAGE_ID, plate="AB-123"):
        """Insert a customer with one vehicle; returns their ids."""
        customer = Customer(garage_id=garage_id, first_name="Ada", last_name="Lovelace", phone_number="555-0100")
        self.db.add(customer)
        await self.db.flush()

        vehicle = Vehicle(
            garage_id=garage_id,
            customer_id=customer.id,
            make="Honda",
            model="CB500F",
            year=2021,
            license_plate=plate,
        )
        self.db.add(vehicle)
        await self.db.commit()
        return customer.id, vehicle.id


class ApiTestCase(unittest.TestCase):
    """Base class for HTTP tests against a throwaway database."""

    api = "/api/v1"

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        path = create_database(self.tmpdir.name)
        engine = create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
        session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

        async def override_get_db():
            async with session_factory() as session:
                yield session

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_current_active_employee] = lambda: TEST_EMPLOYEE
        self.client = TestClient(app)
        self.plate_numbers = itertools.count(1)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.client.close()
        self.tmpdir.cleanup()

    @contextmanager
    def acting_as(self, garage_id):
        """Send the enclosed requests as an advisor of ``garage_id``."""
        previous = app.dependency_overrides[get_current_active_employee]
        employee = EMPLOYEES_BY_GARAGE[garage_id]
        app.dependency_overrides[get_current_active_employee] = lambda: employee
        try:
            yield employee
        finally:
            app.dependency_overrides[get_current_active_employee] = previous

    def create_customer(self, garage_id=GARAGE_ID, **overrides):
        payload = {
            "garageId": garage_id,
            "firstName": "Ada",
            "lastName": "Lovelace",
            "phoneNumber": "555-0100",
            **overrides,
        }
        with self.acting_as(garage_id):
            response = self.client.post(f"{self.api}/customers", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def create_vehicle(self, customer_id, garage_id=GARAGE_ID, **overrides):
        payload = {
            "garageId": garage_id,
            "customerId": customer_id,
            "make": "Yamaha",
            "model": "MT-07",
            "year": 2022,
            "licensePlate": f"KX-{next(self.plate_numbers):04d}",
            **overrides,
        }
        with self.acting_as(garage_id):
            response = self.client.post(f"{self.api}/vehicles", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def create_employee(self, login_id, garage_id=GARAGE_ID, **overrides):
        payload = {
            "garageId": garage_id,
            "loginId": login_id,
            "firstName": "Jo",
            "lastName": "Mechanic",
            "role": "mechanic",
            **overrides,
        }
        with self.acting_as(garage_id):
            response = self.client.post(f"{self.api}/employees", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def create_job_card(self, garage_id=GARAGE_ID, **overrides):
        """Create a customer, vehicle and job card; returns the job card JSON."""
        customer = self.create_customer(garage_id=garage_id)
        vehicle = self.create_vehicle(customer["id"], garage_id=garage_id)
        payload = {
            "garageId": garage_id,
            "customerId": customer["id"],
            "vehicleId": vehicle["id"],
            "jobType": "repair",
            "priority": "medium",
            "customerComplaint": "Front brake squeals",
            **overrides,
        }
        with self.acting_as(garage_id):
            response = self.client.post(f"{self.api}/job-cards", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["jobCard"]

    def create_checklist_item(self, job_card_id, **overrides):
        payload = {"itemName": "Inspect brake pads", **overrides}
        response = self.client.post(f"{self.api}/job-cards/{job_card_id}/checklist", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["checklistItem"]

    def create_inventory_part(self, garage_id=GARAGE_ID, **overrides):
        payload = {
            "garageId": garage_id,
            "partNumber": f"BP-{next(self.plate_numbers):04d}",
            "partName": "Brake pad set",
            "category": "Brakes",
            "make": "Brembo",
            "onHandStock": 10,
            "purchasePrice": 20,
            "sellingPrice": 35.5,
            **overrides,
        }
        with self.acting_as(garage_id):
            response = self.client.post(f"{self.api}/inventory", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()
