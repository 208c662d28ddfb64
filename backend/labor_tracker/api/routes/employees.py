"""
Employee management API routes.

Provides endpoints for employee CRUD, CSV import and CSV export within
tenant context.
"""
import csv
import io
import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from uuid import UUID

from ...database.models import Employee, RecordState
from ...schemas.common import PagedResult
from ...schemas.employee import (
    EmployeeCreateRequest, EmployeeUpdateRequest, EmployeeResponse, EmployeeImportResult
)
from ...auth.dependencies import get_tenant_scope
from ...services.errors import InvalidArgument, NotFound
from ...services.tenant_scope import TenantScope
from ...services.time_entries import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, clean_text, parse_employee_type

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["Employees"])

CSV_HEADER = ["name", "type", "work_type", "is_active"]


def _require_name(name: Optional[str]) -> str:
    if name is None or not name.strip():
        raise InvalidArgument("name must not be empty")
    return name.strip()


def _require_type(value: Optional[str]):
    employee_type = parse_employee_type(value, "type")
    if employee_type is None:
        raise InvalidArgument("type must not be empty")
    return employee_type


def _get_employee(scope: TenantScope, employee_id: UUID) -> Employee:
    employee = scope.get(Employee, employee_id)
    if not employee or employee.is_deleted:
        raise NotFound("Employee not found")
    return employee


# PUBLIC_INTERFACE
@router.get("/", response_model=PagedResult[EmployeeResponse],
           summary="List employees",
           description="Get a paginated list of employees with optional filtering.")
async def list_employees(
    keyword: Optional[str] = Query(None, description="Name contains"),
    type: Optional[str] = Query(None, description="Filter by employee type"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    sort: Optional[str] = Query(None, description="name_asc or created_at_desc"),
    page: int = Query(1, description="Page number"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, description="Items per page"),
    scope: TenantScope = Depends(get_tenant_scope)
):
    """
    List employees in the current tenant.

    Deleted employees are never listed.
    """
    page = page if page > 0 else 1
    page_size = min(page_size if page_size > 0 else DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)

    query = scope.query(Employee).filter(Employee.state == RecordState.ACTIVE)

    if keyword and keyword.strip():
        query = query.filter(Employee.name.contains(keyword.strip()))

    employee_type = parse_employee_type(type, "type")
    if employee_type is not None:
        query = query.filter(Employee.type == employee_type)

    if is_active is not None:
        query = query.filter(Employee.is_active == is_active)

    if sort == "name_asc":
        query = query.order_by(Employee.name.asc())
    else:
        query = query.order_by(Employee.created_at.desc())

    total = query.count()
    employees = query.offset((page - 1) * page_size).limit(page_size).all()

    return PagedResult[EmployeeResponse](
        items=[EmployeeResponse.model_validate(e) for e in employees],
        total=total,
        page=page,
        page_size=page_size
    )


# PUBLIC_INTERFACE
@router.post("/", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED,
            summary="Create employee",
            description="Create a new employee in the current tenant.")
async def create_employee(
    request: EmployeeCreateRequest,
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Create a new employee."""
    employee = Employee(
        name=_require_name(request.name),
        type=_require_type(request.type),
        work_type=clean_text(request.work_type),
        phone=clean_text(request.phone),
        id_card_number=clean_text(request.id_card_number),
        tags=clean_text(request.tags),
        remark=clean_text(request.remark),
        is_active=True
    )
    scope.add(employee)
    scope.commit()
    scope.refresh(employee)

    logger.info(f"Created employee {employee.id} in tenant {scope.tenant_id}")
    return EmployeeResponse.model_validate(employee)


# PUBLIC_INTERFACE
@router.post("/import", response_model=EmployeeImportResult,
            summary="Import employees",
            description="Import employees from a CSV file with name,type[,work_type] rows.")
async def import_employees(
    file: UploadFile = File(..., description="CSV file"),
    scope: TenantScope = Depends(get_tenant_scope)
):
    """
    Import employees from CSV.

    A leading header row is skipped. Rows without a name or with an unknown
    type are counted as skipped.
    """
    content = await file.read()
    if not content:
        raise InvalidArgument("file must not be empty")

    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise InvalidArgument("file must be UTF-8 encoded")

    imported = 0
    skipped = 0
    for index, row in enumerate(csv.reader(io.StringIO(text))):
        cells = [cell.strip() for cell in row]
        if not any(cells):
            continue
        if index == 0 and cells[0].lower() == "name":
            continue
        if len(cells) < 2 or not cells[0]:
            skipped += 1
            continue
        try:
            employee_type = _require_type(cells[1])
        except InvalidArgument:
            skipped += 1
            continue

        scope.add(Employee(
            name=cells[0],
            type=employee_type,
            work_type=clean_text(cells[2]) if len(cells) > 2 else None,
            is_active=True
        ))
        imported += 1

    if imported:
        scope.commit()

    logger.info(f"Imported {imported} employees into tenant {scope.tenant_id}, skipped {skipped}")
    return EmployeeImportResult(imported=imported, skipped=skipped)


# PUBLIC_INTERFACE
@router.get("/export",
           summary="Export employees",
           description="Download employees as CSV.")
async def export_employees(
    format: Optional[str] = Query(None, description="Export format (csv only)"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Export employees, ordered by name, as a CSV download."""
    if format and format.lower() != "csv":
        raise InvalidArgument("format only supports csv")

    query = scope.query(Employee).filter(Employee.state == RecordState.ACTIVE)
    if is_active is not None:
        query = query.filter(Employee.is_active == is_active)

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for employee in query.order_by(Employee.name.asc()).all():
        writer.writerow([
            employee.name,
            employee.type.value,
            employee.work_type or "",
            "true" if employee.is_active else "false"
        ])

    filename = f"employees_{datetime.now(timezone.utc):%Y-%m-%d}.csv"
    return Response(
        content=buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


# PUBLIC_INTERFACE
@router.get("/{employee_id}", response_model=EmployeeResponse,
           summary="Get employee",
           description="Get a single employee.")
async def get_employee(
    employee_id: UUID,
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Get employee details."""
    return EmployeeResponse.model_validate(_get_employee(scope, employee_id))


# PUBLIC_INTERFACE
@router.put("/{employee_id}", response_model=EmployeeResponse,
           summary="Update employee",
           description="Update an employee's details or active flag.")
async def update_employee(
    employee_id: UUID,
    request: EmployeeUpdateRequest,
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Update an employee; omitted fields are left unchanged."""
    employee = _get_employee(scope, employee_id)

    if request.name is not None:
        employee.name = _require_name(request.name)
    if request.type is not None:
        employee.type = _require_type(request.type)
    if request.work_type is not None:
        employee.work_type = clean_text(request.work_type)
    if request.phone is not None:
        employee.phone = clean_text(request.phone)
    if request.id_card_number is not None:
        employee.id_card_number = clean_text(request.id_card_number)
    if request.tags is not None:
        employee.tags = clean_text(request.tags)
    if request.remark is not None:
        employee.remark = clean_text(request.remark)
    if request.is_active is not None:
        employee.is_active = request.is_active

    scope.commit()
    scope.refresh(employee)
    return EmployeeResponse.model_validate(employee)


# PUBLIC_INTERFACE
@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT,
              summary="Delete employee",
              description="Soft delete an employee; booked hours are kept.")
async def delete_employee(
    employee_id: UUID,
    scope: TenantScope = Depends(get_tenant_scope)
):
    """Soft delete an employee."""
    employee = _get_employee(scope, employee_id)
    employee.mark_deleted()
    scope.commit()
    logger.info(f"Deleted employee {employee_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
