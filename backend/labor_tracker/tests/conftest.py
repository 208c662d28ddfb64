"""
Pytest configuration and fixtures for backend testing.

Provides an in-memory database, a FastAPI test client wired to it,
real bearer tokens for two independent tenants, and factories for
service-level test data.
"""
import pytest
from datetime import date
from decimal import Decimal
from typing import Dict, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy import update
from sqlalchemy.orm import Session, sessionmaker

from labor_tracker.api.main import app
from labor_tracker.database.connection import build_engine, create_tables, drop_tables, get_db
from labor_tracker.database.models import (
    Employee, EmployeeType, Project, RecordState, Tenant, TimeEntry
)
from labor_tracker.services.tenant_scope import TenantScope
from labor_tracker.services.time_entries import TimeEntryService

API = "/api/v1"


@pytest.fixture(scope="function")
def engine():
    """Create a fresh in-memory database for each test."""
    test_engine = build_engine("sqlite://")
    create_tables(bind=test_engine)
    yield test_engine
    drop_tables(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Generator[Session, None, None]:
    """Create a database session for service-level tests."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """Create FastAPI test client with database dependency override."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def register_tenant(client: TestClient, tenant_name: str, email: str,
                    password: str = "secure_password123") -> Dict[str, str]:
    """Register a tenant with its admin and return bearer headers."""
    response = client.post(f"{API}/auth/register", json={
        "email": email,
        "password": password,
        "display_name": "Admin",
        "tenant_name": tenant_name
    })
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client) -> Dict[str, str]:
    """Bearer headers for the admin of tenant Acme."""
    return register_tenant(client, "Acme", "admin@acme.example.com")


@pytest.fixture
def different_tenant_headers(client) -> Dict[str, str]:
    """Bearer headers for the admin of an unrelated tenant."""
    return register_tenant(client, "Globex", "admin@globex.example.com")


@pytest.fixture
def tenant(db_session) -> Tenant:
    tenant = Tenant(name="Service Tenant")
    db_session.add(tenant)
    db_session.commit()
    return tenant


@pytest.fixture
def scope(db_session, tenant) -> TenantScope:
    return TenantScope(db_session, tenant.id)


@pytest.fixture
def other_scope(db_session) -> TenantScope:
    other = Tenant(name="Other Tenant")
    db_session.add(other)
    db_session.commit()
    return TenantScope(db_session, other.id)


class ServiceDataFactory:
    """Creates committed employees, projects and entries inside a scope."""

    def __init__(self, scope: TenantScope):
        self.scope = scope

    def employee(self, name: str = "Alice", type: EmployeeType = EmployeeType.REGULAR,
                 work_type: Optional[str] = None, is_active: bool = True) -> Employee:
        employee = self.scope.add(Employee(name=name, type=type, work_type=work_type, is_active=is_active))
        self.scope.commit()
        return employee

    def project(self, name: str = "Project A") -> Project:
        project = self.scope.add(Project(name=name))
        self.scope.commit()
        return project

    def entry(self, employee: Employee, work_date: date, normal_hours="8", overtime_hours="0",
              project: Optional[Project] = None) -> TimeEntry:
        entry = self.scope.add(TimeEntry(
            employee_id=employee.id,
            project_id=project.id if project else None,
            work_date=work_date,
            normal_hours=Decimal(normal_hours),
            overtime_hours=Decimal(overtime_hours)
        ))
        self.scope.commit()
        return entry


@pytest.fixture
def factory(scope) -> ServiceDataFactory:
    return ServiceDataFactory(scope)


class APIDataFactory:
    """Creates employees and projects through the HTTP API."""

    def __init__(self, client: TestClient, headers: Dict[str, str]):
        self.client = client
        self.headers = headers

    def employee(self, name: str = "Alice", type: str = "regular", work_type: Optional[str] = None) -> Dict:
        response = self.client.post(f"{API}/employees/", headers=self.headers, json={
            "name": name, "type": type, "work_type": work_type
        })
        assert response.status_code == 201, response.text
        return response.json()

    def project(self, name: str = "Project A", **fields) -> Dict:
        response = self.client.post(f"{API}/projects/", headers=self.headers, json={"name": name, **fields})
        assert response.status_code == 201, response.text
        return response.json()

    def entry(self, employee_id: str, work_date: str, normal_hours=8, overtime_hours=0,
              project_id: Optional[str] = None, remark: Optional[str] = None) -> Dict:
        response = self.client.post(f"{API}/time-entries/", headers=self.headers, json={
            "employee_id": employee_id,
            "work_date": work_date,
            "normal_hours": normal_hours,
            "overtime_hours": overtime_hours,
            "project_id": project_id,
            "remark": remark
        })
        assert response.status_code == 201, response.text
        return response.json()


@pytest.fixture
def api_data(client, auth_headers) -> APIDataFactory:
    return APIDataFactory(client, auth_headers)


def restored_elsewhere(db_session: Session, normal_hours=6):
    """
    Replacement for ``TimeEntryService.find_entry`` that hands back a deleted
    row after another writer has already reactivated it.
    """
    original = TimeEntryService.find_entry

    def find_entry(self, employee_id, work_date, include_deleted=False):
        found = original(self, employee_id, work_date, include_deleted)
        if found is not None and found.is_deleted:
            db_session.execute(
                update(TimeEntry)
                .where(TimeEntry.id == found.id)
                .values(state=RecordState.ACTIVE, normal_hours=normal_hours)
                .execution_options(synchronize_session=False)
            )
        return found

    return find_entry
