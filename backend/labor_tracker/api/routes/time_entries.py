"""
Time entry API routes.

Provides endpoints for booking daily hours, batch booking, listing,
CSV export and work-unit summaries within tenant context.
"""
import csv
import io
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from uuid import UUID

from ...database.models import TimeEntry
from ...schemas.common import PagedResult
from ...schemas.time_entry import (
    TimeEntryCreateRequest, TimeEntryUpdateRequest, TimeEntryResponse,
    BatchCreateRequest, BatchCreateResponse, BatchCreateDetail,
    DailySummary, ProjectWorkUnits, EmployeeWorkUnits
)
from ...auth.dependencies import get_tenant_scope
from ...services.summaries import SummaryService, parse_date, resolve_range
from ...services.tenant_scope import TenantScope
from ...services.time_entries import (
    DEFAULT_PAGE_SIZE, EntryFilters, TimeEntryService, clean_text, parse_employee_type
)
from ...services.work_units import total_hours, work_units

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/time-entries", tags=["Time Entries"])

EXPORT_HEADER = [
    "work_date", "employee_name", "employee_type", "work_type", "project_name",
    "normal_hours", "overtime_hours", "total_hours", "work_units", "remark"
]


def to_response(entry: TimeEntry) -> TimeEntryResponse:
    """Flatten an entry together with its employee and project for display."""
    employee = entry.employee
    project = entry.project
    return TimeEntryResponse(
        id=entry.id,
        tenant_id=entry.tenant_id,
        employee_id=entry.employee_id,
        employee_name=employee.name,
        employee_type=employee.type.value,
        work_type=employee.work_type,
        project_id=entry.project_id,
        project_name=project.name if project else None,
        work_date=entry.work_date,
        normal_hours=entry.normal_hours,
        overtime_hours=entry.overtime_hours,
        total_hours=total_hours(entry.normal_hours, entry.overtime_hours),
        work_units=work_units(entry.normal_hours, entry.overtime_hours),
        remark=entry.remark,
        created_at=entry.created_at,
        updated_at=entry.updated_at
    )


def summary_filters(
    employee_id: Optional[UUID] = Query(None, description="Only this employee"),
    employee_type: Optional[str] = Query(None, description="regular or temporary"),
    work_type: Optional[str] = Query(None, description="Only employees of this work type"),
    project_id: Optional[UUID] = Query(None, description="Only this project")
) -> EntryFilters:
    """Query-string filters shared by the summary endpoints."""
    return EntryFilters(
        employee_id=employee_id,
        employee_type=parse_employee_type(employee_type),
        work_type=clean_text(work_type),
        project_id=project_id
    )


# PUBLIC_INTERFACE
@router.get("/", response_model=PagedResult[TimeEntryResponse],
           summary="List time entries",
           description="Get a paginated list of time entries booked on one day.")
async def list_time_entries(
    date: str = Query(..., description="Work date (YYYY-MM-DD)"),
    keyword: Optional[str] = Query(None, description="Employee name contains"),
    employee_type: Optional[str] = Query(None, description="regular or temporary"),
    sort: Optional[str] = Query(None, description="hours_asc, hours_desc or updated_desc"),
    page: int = Query(1, description="Page number"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, description="Items per page"),
    scope: TenantScope = Depends(get_tenant_scope)
):
    """List active time entries for a single day."""
    result = TimeEntryService(scope).list_entries(
        work_date=parse_date(date),
        keyword=clean_text(keyword),
        employee_type=parse_employee_type(employee_type),
        sort=clean_text(sort),
        page=page,
        page_size=page_size
    )
    return PagedResult[TimeEntryResponse](
        items=[to_response(entry) for entry in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size
    )


# PUBLIC_INTERFACE
@router.post("/", response_model=TimeEntryResponse, status_code=status.HTTP_201_CREATED,
            summary="Create time entry",
            description="Book one employee's hours for one day, restoring a deleted booking if present.")
async def create_time_entry(
    request: TimeEntryCreateRequest,
    response: Response,
    scope: TenantScope = Depends(get_tenant_scope)
):
    """
    Create a time entry.

    An active booking for the same employee and day is a conflict. Restoring
    a deleted booking answers 200 rather than 201.
    """
    booking = TimeEntryService(scope).book_entry(
        employee_id=request.employee_id,
        work_date=request.work_date,
        normal_hours=request.normal_hours,
        overtime_hours=request.overtime_hours,
        project_id=request.project_id,
        remark=request.remark
    )
    if booking.restored:
        response.status_code = status.HTTP_200_OK
    return to_response(booking.entry)


# PUBLIC_INTERFACE
@router.post("/batch", response_model=BatchCreateResponse,
            summary="Batch create time entries",
            description="Book the same hours for every employee on every given day.")
async def batch_create_time_entries(
    request: BatchCreateRequest,
    scope: TenantScope = Depends(get_tenant_scope)
):
    """
    Batch create time entries.

    Cells that cannot be booked are reported as skipped with a reason.
    """
    outcome = TimeEntryService(scope).batch_create(
        employee_ids=request.employee_ids,
        work_dates=request.work_dates,
        normal_hours=request.normal_hours,
        overtime_hours=request.overtime_hours,
        project_id=request.project_id,
        remark=request.remark
    )
    return BatchCreateResponse(
        total=outcome.total,
        created=outcome.created,
        skipped=outcome.skipped,
        details=[BatchCreateDetail.model_validate(detail) for detail in outcome.details]
    )


# PUBLIC_INTERFACE
@router.get("/summary", response_model=List[DailySummary],
           summary="Daily summary",
           description="Hours and work units per day; days without bookings are zero rows.")
async def daily_summary(
    date: Optional[str] = Query(None, description="Single day (YYYY-MM-DD); wins over month"),
    month: Optional[str] = Query(None, description="Month (YYYY-MM)"),
    filters: EntryFilters = Depends(summary_filters),
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Summarize a day or month, one row per calendar day."""
    start_date, end_date = resolve_range(date, month)
    rows = SummaryService(scope).by_date(start_date, end_date, filters)
    return [DailySummary.model_validate(row) for row in rows]


# PUBLIC_INTERFACE
@router.get("/summary/by-project", response_model=List[ProjectWorkUnits],
           summary="Work units by project",
           description="Hours and work units per project, largest first.")
async def project_summary(
    date: Optional[str] = Query(None, description="Single day (YYYY-MM-DD); wins over month"),
    month: Optional[str] = Query(None, description="Month (YYYY-MM)"),
    filters: EntryFilters = Depends(summary_filters),
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Summarize a day or month grouped by project."""
    start_date, end_date = resolve_range(date, month)
    rows = SummaryService(scope).by_project(start_date, end_date, filters)
    return [ProjectWorkUnits.model_validate(row) for row in rows]


# PUBLIC_INTERFACE
@router.get("/summary/by-employee", response_model=List[EmployeeWorkUnits],
           summary="Work units by employee",
           description="Hours and work units per employee, largest first.")
async def employee_summary(
    date: Optional[str] = Query(None, description="Single day (YYYY-MM-DD); wins over month"),
    month: Optional[str] = Query(None, description="Month (YYYY-MM)"),
    filters: EntryFilters = Depends(summary_filters),
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Summarize a day or month grouped by employee."""
    start_date, end_date = resolve_range(date, month)
    rows = SummaryService(scope).by_employee(start_date, end_date, filters)
    return [EmployeeWorkUnits.model_validate(row) for row in rows]


# PUBLIC_INTERFACE
@router.get("/export",
           summary="Export time entries",
           description="Download the time entries of a date range as CSV.")
async def export_time_entries(
    start_date: str = Query(..., description="First day (YYYY-MM-DD)"),
    end_date: str = Query(..., description="Last day (YYYY-MM-DD)"),
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Export active entries ordered by day, then employee name."""
    first = parse_date(start_date, "start_date")
    last = parse_date(end_date, "end_date")
    entries = TimeEntryService(scope).export_entries(first, last)

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_HEADER)
    for entry in entries:
        row = to_response(entry)
        writer.writerow([
            row.work_date.isoformat(),
            row.employee_name,
            row.employee_type,
            row.work_type or "",
            row.project_name or "",
            row.normal_hours,
            row.overtime_hours,
            row.total_hours,
            f"{row.work_units:.2f}",
            row.remark or ""
        ])

    filename = f"time_entries_{first:%Y-%m-%d}_{last:%Y-%m-%d}.csv"
    return Response(
        content=buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


# PUBLIC_INTERFACE
@router.put("/{entry_id}", response_model=TimeEntryResponse,
           summary="Update time entry",
           description="Replace the values of an active time entry.")
async def update_time_entry(
    entry_id: UUID,
    request: TimeEntryUpdateRequest,
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Update a time entry; a null remark keeps the stored one."""
    entry = TimeEntryService(scope).update_entry(
        entry_id=entry_id,
        employee_id=request.employee_id,
        work_date=request.work_date,
        normal_hours=request.normal_hours,
        overtime_hours=request.overtime_hours,
        project_id=request.project_id,
        remark=request.remark
    )
    return to_response(entry)


# PUBLIC_INTERFACE
@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT,
              summary="Delete time entry",
              description="Soft delete a time entry; booking it again restores it.")
async def delete_time_entry(
    entry_id: UUID,
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Soft delete a time entry."""
    TimeEntryService(scope).delete_entry(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
