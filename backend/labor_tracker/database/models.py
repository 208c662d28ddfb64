"""
SQLAlchemy database models for the labor tracker.

Defines all database tables and relationships for tenants, users, employees,
projects and daily time entries.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Boolean, Date, DateTime, Text, Numeric, Uuid,
    ForeignKey, UniqueConstraint, Index, Enum
)
from sqlalchemy.orm import declarative_base, relationship
import enum

Base = declarative_base()


def utcnow():
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    """User roles within a tenant."""
    ADMIN = "admin"
    MEMBER = "member"


class EmployeeType(str, enum.Enum):
    """Employment category of an employee."""
    REGULAR = "regular"
    TEMPORARY = "temporary"


class ProjectStatus(str, enum.Enum):
    """Project status values."""
    ACTIVE = "active"
    PENDING = "pending"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class RecordState(str, enum.Enum):
    """Lifecycle state of a soft-deletable record."""
    ACTIVE = "active"
    DELETED = "deleted"


class InvalidStateTransition(ValueError):
    """Raised when a soft-delete transition does not apply to the current state."""


class SoftDeleteMixin:
    """
    Tagged soft-delete state with explicit transitions.

    Records are never removed from storage; they move between
    ``RecordState.ACTIVE`` and ``RecordState.DELETED``.
    """
    state = Column(Enum(RecordState), nullable=False, default=RecordState.ACTIVE)

    @property
    def is_deleted(self) -> bool:
        return self.state == RecordState.DELETED

    def mark_deleted(self):
        if self.state != RecordState.ACTIVE:
            raise InvalidStateTransition(f"cannot delete a record in state '{self.state.value}'")
        self.state = RecordState.DELETED

    def restore(self):
        if self.state != RecordState.DELETED:
            raise InvalidStateTransition(f"cannot restore a record in state '{self.state.value}'")
        self.state = RecordState.ACTIVE


class Tenant(Base):
    """Tenant model for multi-tenancy support."""
    __tablename__ = "tenants"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, unique=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    users = relationship("User", back_populates="tenant", cascade="all, delete-orphan")
    employees = relationship("Employee", back_populates="tenant", cascade="all, delete-orphan")
    projects = relationship("Project", back_populates="tenant", cascade="all, delete-orphan")
    time_entries = relationship("TimeEntry", back_populates="tenant", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Tenant(id={self.id}, name='{self.name}')>"


class User(Base):
    """User model with tenant association."""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(100), nullable=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.MEMBER)
    active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    tenant = relationship("Tenant", back_populates="users")

    # Constraints
    __table_args__ = (
        Index('idx_user_tenant_email', 'tenant_id', 'email'),
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', tenant_id={self.tenant_id})>"


class Employee(SoftDeleteMixin, Base):
    """Employee whose daily hours are booked."""
    __tablename__ = "employees"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    name = Column(String(100), nullable=False)
    type = Column(Enum(EmployeeType), nullable=False, default=EmployeeType.REGULAR)
    work_type = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    id_card_number = Column(String(50), nullable=True)
    tags = Column(String(255), nullable=True)
    remark = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    tenant = relationship("Tenant", back_populates="employees")
    time_entries = relationship("TimeEntry", back_populates="employee")

    # Constraints
    __table_args__ = (
        Index('idx_employee_tenant_state', 'tenant_id', 'state'),
        Index('idx_employee_tenant_type', 'tenant_id', 'type'),
    )

    def __repr__(self):
        return f"<Employee(id={self.id}, name='{self.name}', tenant_id={self.tenant_id})>"


class Project(SoftDeleteMixin, Base):
    """Project that time entries may be booked against."""
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=True)
    status = Column(Enum(ProjectStatus), nullable=False, default=ProjectStatus.ACTIVE)
    planned_start_date = Column(Date, nullable=True)
    planned_end_date = Column(Date, nullable=True)
    remark = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    tenant = relationship("Tenant", back_populates="projects")
    time_entries = relationship("TimeEntry", back_populates="project")

    # Constraints
    __table_args__ = (
        UniqueConstraint('tenant_id', 'name', name='uq_project_name_per_tenant'),
        Index('idx_project_tenant_state', 'tenant_id', 'state'),
    )

    def __repr__(self):
        return f"<Project(id={self.id}, name='{self.name}', tenant_id={self.tenant_id})>"


class TimeEntry(SoftDeleteMixin, Base):
    """One employee's booked hours for one calendar day."""
    __tablename__ = "time_entries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    employee_id = Column(Uuid, ForeignKey("employees.id"), nullable=False)
    project_id = Column(Uuid, ForeignKey("projects.id"), nullable=True)
    work_date = Column(Date, nullable=False)
    normal_hours = Column(Numeric(5, 1), nullable=False, default=8)
    overtime_hours = Column(Numeric(5, 1), nullable=False, default=0)
    remark = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    tenant = relationship("Tenant", back_populates="time_entries")
    employee = relationship("Employee", back_populates="time_entries")
    project = relationship("Project", back_populates="time_entries")

    # One row per (tenant, employee, day); deletion is soft and creation restores
    __table_args__ = (
        UniqueConstraint('tenant_id', 'employee_id', 'work_date', name='uq_time_entry_employee_day'),
        Index('idx_time_entry_tenant_date', 'tenant_id', 'work_date'),
        Index('idx_time_entry_project', 'project_id'),
    )

    def __repr__(self):
        return f"<TimeEntry(id={self.id}, employee_id={self.employee_id}, work_date={self.work_date})>"
