"""
Work-unit summaries over a tenant's time entries.

Three views share the same range and filter inputs: one row per calendar day
(including empty days), totals per project, and totals per employee.
"""
import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterator, List, Optional, Tuple
from uuid import UUID

from ..database.models import Employee, Project
from .errors import InvalidArgument
from .tenant_scope import TenantScope
from .time_entries import EntryFilters, TimeEntryService
from .work_units import HourTotals

logger = logging.getLogger(__name__)

UNASSIGNED_PROJECT_NAME = "unassigned"
UNKNOWN_NAME = "unknown"


def parse_date(value: str, field_name: str = "date") -> date:
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidArgument(f"{field_name} must be formatted as YYYY-MM-DD")


def parse_month(value: str) -> Tuple[date, date]:
    """Return the first and last day of a YYYY-MM month."""
    try:
        first = datetime.strptime(value.strip(), "%Y-%m").date()
    except ValueError:
        raise InvalidArgument("month must be formatted as YYYY-MM")
    last_day = calendar.monthrange(first.year, first.month)[1]
    return first, first.replace(day=last_day)


def resolve_range(day: Optional[str] = None, month: Optional[str] = None) -> Tuple[date, date]:
    """
    Turn a ``date`` or ``month`` query value into an inclusive date range.

    ``date`` wins when both are supplied.
    """
    if day and day.strip():
        single = parse_date(day)
        return single, single
    if month and month.strip():
        return parse_month(month)
    raise InvalidArgument("Either month or date is required")


def iter_days(start_date: date, end_date: date) -> Iterator[date]:
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


@dataclass
class DaySummary:
    date: date
    normal_hours: Decimal
    overtime_hours: Decimal
    total_hours: Decimal
    total_work_units: Decimal
    headcount: int

    @classmethod
    def from_totals(cls, day: date, totals: HourTotals) -> "DaySummary":
        return cls(
            date=day,
            normal_hours=totals.normal_hours,
            overtime_hours=totals.overtime_hours,
            total_hours=totals.total_hours,
            total_work_units=totals.work_units,
            headcount=totals.headcount,
        )


@dataclass
class ProjectSummary:
    project_id: Optional[UUID]
    project_name: str
    normal_hours: Decimal
    overtime_hours: Decimal
    total_hours: Decimal
    work_units: Decimal
    headcount: int


@dataclass
class EmployeeSummary:
    employee_id: UUID
    employee_name: str
    employee_type: Optional[str]
    normal_hours: Decimal
    overtime_hours: Decimal
    total_hours: Decimal
    work_units: Decimal
    days: int


class SummaryService:
    """Read-only aggregation over time entries in one tenant."""

    def __init__(self, scope: TenantScope):
        self.scope = scope
        self.entries = TimeEntryService(scope)

    def _grouped(self, start_date: date, end_date: date, filters: Optional[EntryFilters], key) -> Dict:
        groups: Dict = {}
        for entry in self.entries.query_entries(start_date, end_date, filters).all():
            groups.setdefault(key(entry), HourTotals()).add(entry)
        return groups

    def by_date(self, start_date: date, end_date: date, filters: Optional[EntryFilters] = None) -> List[DaySummary]:
        """One row per day of the range, ascending; days without entries are zero rows."""
        per_day = self._grouped(start_date, end_date, filters, lambda entry: entry.work_date)
        return [
            DaySummary.from_totals(day, per_day.get(day, HourTotals()))
            for day in iter_days(start_date, end_date)
        ]

    def by_project(self, start_date: date, end_date: date, filters: Optional[EntryFilters] = None) -> List[ProjectSummary]:
        """Work units per project across the range, largest first."""
        per_project = self._grouped(start_date, end_date, filters, lambda entry: entry.project_id)
        names = self._names(Project, [pid for pid in per_project if pid is not None])

        rows = []
        for project_id, totals in per_project.items():
            if project_id is None:
                name = UNASSIGNED_PROJECT_NAME
            else:
                name = names.get(project_id, UNKNOWN_NAME)
            rows.append(ProjectSummary(
                project_id=project_id,
                project_name=name,
                normal_hours=totals.normal_hours,
                overtime_hours=totals.overtime_hours,
                total_hours=totals.total_hours,
                work_units=totals.work_units,
                headcount=totals.headcount,
            ))
        rows.sort(key=lambda row: row.project_name)
        rows.sort(key=lambda row: row.work_units, reverse=True)
        return rows

    def by_employee(self, start_date: date, end_date: date, filters: Optional[EntryFilters] = None) -> List[EmployeeSummary]:
        """Work units per employee across the range, largest first."""
        per_employee = self._grouped(start_date, end_date, filters, lambda entry: entry.employee_id)
        employees = {
            employee.id: employee
            for employee in self.scope.query(Employee).filter(Employee.id.in_(list(per_employee))).all()
        } if per_employee else {}

        rows = []
        for employee_id, totals in per_employee.items():
            employee = employees.get(employee_id)
            if employee is None:
                logger.warning(f"Time entries reference unknown employee {employee_id}")
            rows.append(EmployeeSummary(
                employee_id=employee_id,
                employee_name=employee.name if employee else UNKNOWN_NAME,
                employee_type=employee.type.value if employee else None,
                normal_hours=totals.normal_hours,
                overtime_hours=totals.overtime_hours,
                total_hours=totals.total_hours,
                work_units=totals.work_units,
                days=totals.entry_count,
            ))
        rows.sort(key=lambda row: row.employee_name)
        rows.sort(key=lambda row: row.work_units, reverse=True)
        return rows

    def _names(self, model_class, ids: List[UUID]) -> Dict[UUID, str]:
        if not ids:
            return {}
        rows = self.scope.query(model_class, model_class.id, model_class.name).filter(
            model_class.id.in_(ids)
        ).all()
        return {row.id: row.name for row in rows}
