"""
Employee and project Pydantic schemas.

Defines request/response models for employee and project management.
"""
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field
from uuid import UUID

from ..database.models import EmployeeType, ProjectStatus


class EmployeeCreateRequest(BaseModel):
    """Employee creation request schema."""
    name: str = Field(..., max_length=100, description="Employee name")
    type: str = Field(..., description="Employee type (regular or temporary)")
    work_type: Optional[str] = Field(None, max_length=100, description="Work type classification")
    phone: Optional[str] = Field(None, max_length=50, description="Contact phone")
    id_card_number: Optional[str] = Field(None, max_length=50, description="Identity card number")
    tags: Optional[str] = Field(None, max_length=255, description="Comma-separated labels")
    remark: Optional[str] = Field(None, description="Free-form remark")


class EmployeeUpdateRequest(BaseModel):
    """Employee update request schema."""
    name: Optional[str] = Field(None, max_length=100, description="Employee name")
    type: Optional[str] = Field(None, description="Employee type (regular or temporary)")
    work_type: Optional[str] = Field(None, max_length=100, description="Work type classification")
    phone: Optional[str] = Field(None, max_length=50, description="Contact phone")
    id_card_number: Optional[str] = Field(None, max_length=50, description="Identity card number")
    tags: Optional[str] = Field(None, max_length=255, description="Comma-separated labels")
    is_active: Optional[bool] = Field(None, description="Whether employee can be booked")
    remark: Optional[str] = Field(None, description="Free-form remark")


class EmployeeResponse(BaseModel):
    """Employee response schema."""
    id: UUID = Field(..., description="Employee ID")
    name: str = Field(..., description="Employee name")
    type: EmployeeType = Field(..., description="Employee type")
    work_type: Optional[str] = Field(None, description="Work type classification")
    phone: Optional[str] = Field(None, description="Contact phone")
    id_card_number: Optional[str] = Field(None, description="Identity card number")
    tags: Optional[str] = Field(None, description="Comma-separated labels")
    is_active: bool = Field(..., description="Whether employee can be booked")
    remark: Optional[str] = Field(None, description="Free-form remark")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    class Config:
        from_attributes = True


class EmployeeImportResult(BaseModel):
    """Employee CSV import result schema."""
    imported: int = Field(..., description="Rows imported")
    skipped: int = Field(..., description="Rows skipped as invalid")


class ProjectCreateRequest(BaseModel):
    """Project creation request schema."""
    name: str = Field(..., max_length=255, description="Project name")
    code: Optional[str] = Field(None, max_length=50, description="Project code")
    status: Optional[str] = Field(None, description="Project status")
    planned_start_date: Optional[date] = Field(None, description="Planned start date")
    planned_end_date: Optional[date] = Field(None, description="Planned end date")
    remark: Optional[str] = Field(None, description="Free-form remark")


class ProjectUpdateRequest(BaseModel):
    """Project update request schema."""
    name: Optional[str] = Field(None, max_length=255, description="Project name")
    code: Optional[str] = Field(None, max_length=50, description="Project code")
    status: Optional[str] = Field(None, description="Project status")
    planned_start_date: Optional[date] = Field(None, description="Planned start date")
    planned_end_date: Optional[date] = Field(None, description="Planned end date")
    remark: Optional[str] = Field(None, description="Free-form remark")


class ProjectResponse(BaseModel):
    """Project response schema."""
    id: UUID = Field(..., description="Project ID")
    name: str = Field(..., description="Project name")
    code: Optional[str] = Field(None, description="Project code")
    status: ProjectStatus = Field(..., description="Project status")
    planned_start_date: Optional[date] = Field(None, description="Planned start date")
    planned_end_date: Optional[date] = Field(None, description="Planned end date")
    remark: Optional[str] = Field(None, description="Free-form remark")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    class Config:
        from_attributes = True
