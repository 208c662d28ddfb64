"""
Time entry-related Pydantic schemas.

Defines request/response models for booking daily hours, batch booking
and work-unit summaries.
"""
import datetime as dt
from datetime import date, datetime
from typing import Optional, List, Literal
from pydantic import BaseModel, Field
from uuid import UUID
from decimal import Decimal


class TimeEntryCreateRequest(BaseModel):
    """Time entry creation request schema."""
    employee_id: UUID = Field(..., description="Employee ID")
    work_date: date = Field(..., description="Work date (YYYY-MM-DD)")
    project_id: Optional[UUID] = Field(None, description="Project ID")
    normal_hours: Decimal = Field(default=Decimal(8), description="Normal hours, in steps of 0.5")
    overtime_hours: Decimal = Field(default=Decimal(0), description="Overtime hours, in steps of 0.5")
    remark: Optional[str] = Field(None, max_length=500, description="Remark")


class TimeEntryUpdateRequest(BaseModel):
    """Time entry update request schema."""
    employee_id: UUID = Field(..., description="Employee ID")
    work_date: date = Field(..., description="Work date (YYYY-MM-DD)")
    project_id: Optional[UUID] = Field(None, description="Project ID")
    normal_hours: Decimal = Field(..., description="Normal hours, in steps of 0.5")
    overtime_hours: Decimal = Field(..., description="Overtime hours, in steps of 0.5")
    remark: Optional[str] = Field(None, max_length=500, description="Remark (null keeps the current one)")


class TimeEntryResponse(BaseModel):
    """Time entry response schema."""
    id: UUID = Field(..., description="Time entry ID")
    tenant_id: UUID = Field(..., description="Tenant ID")
    employee_id: UUID = Field(..., description="Employee ID")
    employee_name: str = Field(..., description="Employee name")
    employee_type: str = Field(..., description="Employee type")
    work_type: Optional[str] = Field(None, description="Employee work type")
    project_id: Optional[UUID] = Field(None, description="Project ID")
    project_name: Optional[str] = Field(None, description="Project name")
    work_date: date = Field(..., description="Work date")
    normal_hours: Decimal = Field(..., description="Normal hours")
    overtime_hours: Decimal = Field(..., description="Overtime hours")
    total_hours: Decimal = Field(..., description="Normal plus overtime hours")
    work_units: Decimal = Field(..., description="normal / 8 + overtime / 6")
    remark: Optional[str] = Field(None, description="Remark")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class BatchCreateRequest(BaseModel):
    """Batch time entry creation request schema."""
    employee_ids: List[UUID] = Field(default_factory=list, description="Employees to book")
    work_dates: List[date] = Field(default_factory=list, description="Days to book")
    project_id: Optional[UUID] = Field(None, description="Project ID")
    normal_hours: Decimal = Field(default=Decimal(8), description="Normal hours, in steps of 0.5")
    overtime_hours: Decimal = Field(default=Decimal(0), description="Overtime hours, in steps of 0.5")
    remark: Optional[str] = Field(None, max_length=500, description="Remark")


class BatchCreateDetail(BaseModel):
    """Outcome of one employee/day cell."""
    employee_id: UUID = Field(..., description="Employee ID")
    work_date: date = Field(..., description="Work date")
    status: Literal["created", "skipped"] = Field(..., description="Cell outcome")
    reason: Optional[str] = Field(None, description="Why the cell was skipped")

    class Config:
        from_attributes = True


class BatchCreateResponse(BaseModel):
    """Batch time entry creation response schema."""
    total: int = Field(..., description="Number of employee/day cells")
    created: int = Field(..., description="Cells booked or restored")
    skipped: int = Field(..., description="Cells left untouched")
    details: List[BatchCreateDetail] = Field(..., description="Per-cell outcomes")

    class Config:
        from_attributes = True


class DailySummary(BaseModel):
    """Totals for one calendar day."""
    date: dt.date = Field(..., description="Day")
    normal_hours: Decimal = Field(..., description="Normal hours")
    overtime_hours: Decimal = Field(..., description="Overtime hours")
    total_hours: Decimal = Field(..., description="Normal plus overtime hours")
    total_work_units: Decimal = Field(..., description="Work units")
    headcount: int = Field(..., description="Distinct employees booked")

    class Config:
        from_attributes = True


class ProjectWorkUnits(BaseModel):
    """Totals for one project across a range."""
    project_id: Optional[UUID] = Field(None, description="Project ID (null when unassigned)")
    project_name: str = Field(..., description="Project name")
    normal_hours: Decimal = Field(..., description="Normal hours")
    overtime_hours: Decimal = Field(..., description="Overtime hours")
    total_hours: Decimal = Field(..., description="Normal plus overtime hours")
    work_units: Decimal = Field(..., description="Work units")
    headcount: int = Field(..., description="Distinct employees booked")

    class Config:
        from_attributes = True


class EmployeeWorkUnits(BaseModel):
    """Totals for one employee across a range."""
    employee_id: UUID = Field(..., description="Employee ID")
    employee_name: str = Field(..., description="Employee name")
    employee_type: Optional[str] = Field(None, description="Employee type")
    normal_hours: Decimal = Field(..., description="Normal hours")
    overtime_hours: Decimal = Field(..., description="Overtime hours")
    total_hours: Decimal = Field(..., description="Normal plus overtime hours")
    work_units: Decimal = Field(..., description="Work units")
    days: int = Field(..., description="Days booked")

    class Config:
        from_attributes = True
