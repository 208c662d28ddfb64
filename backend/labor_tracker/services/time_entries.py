"""
Time entry business rules.

Owns the create / restore / duplicate decision for single and batch bookings,
plus update, soft delete and the filtered range query shared by the
summaries and exports.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import desc, asc
from sqlalchemy.exc import IntegrityError

from ..database.models import (
    Employee, EmployeeType, Project, RecordState, TimeEntry
)
from .errors import Conflict, InvalidArgument, NotFound
from .tenant_scope import TenantScope
from .work_units import is_valid_hour

logger = logging.getLogger(__name__)

STATUS_CREATED = "created"
STATUS_SKIPPED = "skipped"
REASON_EMPLOYEE_NOT_FOUND = "employee not found"
REASON_ALREADY_EXISTS = "already exists"

SORT_OPTIONS = ("hours_asc", "hours_desc", "updated_desc")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 200


def clean_text(value: Optional[str]) -> Optional[str]:
    """Blank text is stored as null, other text trimmed."""
    if value is None or not value.strip():
        return None
    return value.strip()


def distinct(values: Iterable) -> list:
    """Drop repeats, keeping the first occurrence of each value."""
    return list(dict.fromkeys(values))


def parse_employee_type(value: Optional[str], field_name: str = "employee_type") -> Optional[EmployeeType]:
    if value is None or not value.strip():
        return None
    try:
        return EmployeeType(value.strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in EmployeeType)
        raise InvalidArgument(f"{field_name} must be one of: {allowed}")


@dataclass
class EntryFilters:
    """Optional narrowing applied on top of tenant and date range."""

    employee_id: Optional[UUID] = None
    employee_type: Optional[EmployeeType] = None
    work_type: Optional[str] = None
    project_id: Optional[UUID] = None

    @property
    def filters_employees(self) -> bool:
        return self.employee_type is not None or bool(self.work_type)


@dataclass
class BatchDetail:
    employee_id: UUID
    work_date: date
    status: str
    reason: Optional[str] = None


@dataclass
class BatchOutcome:
    total: int = 0
    created: int = 0
    skipped: int = 0
    details: List[BatchDetail] = field(default_factory=list)

    def record(self, employee_id: UUID, work_date: date, status: str, reason: Optional[str] = None):
        self.details.append(BatchDetail(employee_id, work_date, status, reason))
        if status == STATUS_CREATED:
            self.created += 1
        else:
            self.skipped += 1


@dataclass
class Booking:
    entry: TimeEntry
    restored: bool = False


@dataclass
class EntryPage:
    items: List[TimeEntry]
    total: int
    page: int
    page_size: int


class TimeEntryService:
    """
    Service for booking daily hours within one tenant.

    Usage:
        service = TimeEntryService(TenantScope(db, tenant_id))

        entry = service.create_entry(
            employee_id=employee.id,
            work_date=date(2024, 3, 1),
            normal_hours=Decimal("8"),
            overtime_hours=Decimal("1.5"),
        )
    """

    def __init__(self, scope: TenantScope):
        self.scope = scope

    # Lookups

    def find_active_employee(self, employee_id: UUID) -> Optional[Employee]:
        """Bookable employee: present, not deleted and not deactivated."""
        employee = self.find_employee(employee_id)
        if employee is None or not employee.is_active:
            return None
        return employee

    def find_employee(self, employee_id: UUID) -> Optional[Employee]:
        return self.scope.query(Employee).filter(
            Employee.id == employee_id,
            Employee.state == RecordState.ACTIVE
        ).first()

    def find_active_project(self, project_id: UUID) -> Optional[Project]:
        return self.scope.query(Project).filter(
            Project.id == project_id,
            Project.state == RecordState.ACTIVE
        ).first()

    def find_entry(self, employee_id: UUID, work_date: date, include_deleted: bool = False) -> Optional[TimeEntry]:
        query = self.scope.query(TimeEntry).filter(
            TimeEntry.employee_id == employee_id,
            TimeEntry.work_date == work_date
        )
        if not include_deleted:
            query = query.filter(TimeEntry.state == RecordState.ACTIVE)
        return query.first()

    def get_entry(self, entry_id: UUID) -> TimeEntry:
        entry = self.scope.query(TimeEntry).filter(
            TimeEntry.id == entry_id,
            TimeEntry.state == RecordState.ACTIVE
        ).first()
        if entry is None:
            raise NotFound("Time entry not found")
        return entry

    # Validation

    @staticmethod
    def validate_hours(normal_hours: Decimal, overtime_hours: Decimal):
        if not is_valid_hour(normal_hours) or not is_valid_hour(overtime_hours):
            raise InvalidArgument("Hours must be non-negative and in steps of 0.5")

    def require_employee(self, employee_id: UUID) -> Employee:
        employee = self.find_employee(employee_id)
        if employee is None:
            raise NotFound("Employee not found")
        if not employee.is_active:
            raise InvalidArgument("Employee is inactive")
        return employee

    def require_project(self, project_id: Optional[UUID]) -> Optional[Project]:
        if project_id is None:
            return None
        project = self.find_active_project(project_id)
        if project is None:
            raise NotFound("Project not found")
        return project

    # Writes

    def create_entry(
        self,
        employee_id: UUID,
        work_date: date,
        normal_hours: Decimal,
        overtime_hours: Decimal,
        project_id: Optional[UUID] = None,
        remark: Optional[str] = None,
    ) -> TimeEntry:
        return self.book_entry(employee_id, work_date, normal_hours, overtime_hours, project_id, remark).entry

    def book_entry(
        self,
        employee_id: UUID,
        work_date: date,
        normal_hours: Decimal,
        overtime_hours: Decimal,
        project_id: Optional[UUID] = None,
        remark: Optional[str] = None,
    ) -> Booking:
        """
        Book one employee's hours for one day.

        A soft-deleted booking for the same employee and day is restored in
        place with the new values instead of inserting a second row; the
        returned ``Booking`` says which of the two happened.

        Raises:
            InvalidArgument: If the hours are not bookable or the employee is inactive
            NotFound: If the employee or project does not resolve
            Conflict: If an active booking already exists
        """
        self.validate_hours(normal_hours, overtime_hours)
        self.require_employee(employee_id)
        self.require_project(project_id)

        existing = self.find_entry(employee_id, work_date, include_deleted=True)
        if existing is not None and not existing.is_deleted:
            raise Conflict("Duplicate time entry for this employee and date")

        if existing is not None:
            if not self._restore(existing, normal_hours, overtime_hours, project_id, remark):
                self.scope.rollback()
                logger.warning(f"Concurrent restore for employee {employee_id} on {work_date}")
                raise Conflict("Duplicate time entry for this employee and date")
            self.scope.commit()
            entry = existing
            logger.info(f"Restored time entry {entry.id} for employee {employee_id} on {work_date}")
        else:
            entry = TimeEntry(
                employee_id=employee_id,
                project_id=project_id,
                work_date=work_date,
                normal_hours=normal_hours,
                overtime_hours=overtime_hours,
                remark=clean_text(remark)
            )
            self.scope.add(entry)
            try:
                self.scope.commit()
            except IntegrityError:
                self.scope.rollback()
                logger.warning(f"Concurrent booking for employee {employee_id} on {work_date}")
                raise Conflict("Duplicate time entry for this employee and date")
            logger.info(f"Created time entry {entry.id} for employee {employee_id} on {work_date}")

        self.scope.refresh(entry)
        return Booking(entry=entry, restored=existing is not None)

    def batch_create(
        self,
        employee_ids: List[UUID],
        work_dates: List[date],
        normal_hours: Decimal,
        overtime_hours: Decimal,
        project_id: Optional[UUID] = None,
        remark: Optional[str] = None,
    ) -> BatchOutcome:
        """
        Apply one booking template across employees x dates.

        Cells are visited employee by employee, then date by date, in input
        order after duplicates are dropped. Per-cell problems are reported in
        the outcome; only whole-batch problems raise. Deactivated employees
        are reported as not found.

        Raises:
            InvalidArgument: If either list is empty or the hours are invalid
            NotFound: If the project does not resolve
        """
        employee_ids = distinct(employee_ids)
        work_dates = distinct(work_dates)
        if not employee_ids:
            raise InvalidArgument("employee_ids must not be empty")
        if not work_dates:
            raise InvalidArgument("work_dates must not be empty")
        self.validate_hours(normal_hours, overtime_hours)
        self.require_project(project_id)

        outcome = BatchOutcome(total=len(employee_ids) * len(work_dates))
        for employee_id in employee_ids:
            if self.find_active_employee(employee_id) is None:
                for work_date in work_dates:
                    outcome.record(employee_id, work_date, STATUS_SKIPPED, REASON_EMPLOYEE_NOT_FOUND)
                continue

            for work_date in work_dates:
                if self._book_cell(employee_id, work_date, normal_hours, overtime_hours, project_id, remark):
                    outcome.record(employee_id, work_date, STATUS_CREATED)
                else:
                    outcome.record(employee_id, work_date, STATUS_SKIPPED, REASON_ALREADY_EXISTS)

        self.scope.commit()
        logger.info(
            f"Batch booking for tenant {self.scope.tenant_id}: "
            f"total={outcome.total} created={outcome.created} skipped={outcome.skipped}"
        )
        return outcome

    def _book_cell(self, employee_id, work_date, normal_hours, overtime_hours, project_id, remark) -> bool:
        existing = self.find_entry(employee_id, work_date, include_deleted=True)
        if existing is not None and not existing.is_deleted:
            return False
        if existing is not None:
            restored = self._restore(existing, normal_hours, overtime_hours, project_id, remark)
            if not restored:
                logger.debug(f"Lost restore race for employee {employee_id} on {work_date}")
            return restored

        try:
            with self.scope.savepoint():
                self.scope.add(TimeEntry(
                    employee_id=employee_id,
                    project_id=project_id,
                    work_date=work_date,
                    normal_hours=normal_hours,
                    overtime_hours=overtime_hours,
                    remark=clean_text(remark)
                ))
                self.scope.flush()
        except IntegrityError:
            logger.debug(f"Lost booking race for employee {employee_id} on {work_date}")
            return False
        return True

    def _restore(self, entry: TimeEntry, normal_hours, overtime_hours, project_id, remark) -> bool:
        """
        Reactivate a deleted row with new values.

        The UPDATE only matches while the row is still deleted, so of two
        writers restoring the same row exactly one sees a row count of 1.
        """
        matched = self.scope.query(TimeEntry).filter(
            TimeEntry.id == entry.id,
            TimeEntry.state == RecordState.DELETED
        ).update({
            TimeEntry.state: RecordState.ACTIVE,
            TimeEntry.normal_hours: normal_hours,
            TimeEntry.overtime_hours: overtime_hours,
            TimeEntry.project_id: project_id,
            TimeEntry.remark: clean_text(remark)
        }, synchronize_session=False)
        return matched == 1

    def update_entry(
        self,
        entry_id: UUID,
        employee_id: UUID,
        work_date: date,
        normal_hours: Decimal,
        overtime_hours: Decimal,
        project_id: Optional[UUID] = None,
        remark: Optional[str] = None,
    ) -> TimeEntry:
        """
        Replace an active entry's values.

        A ``remark`` of ``None`` keeps the stored remark; a blank one clears it.
        Any other row holding the target employee and day, deleted or not,
        blocks the update.
        """
        self.validate_hours(normal_hours, overtime_hours)
        entry = self.get_entry(entry_id)
        self.require_employee(employee_id)
        self.require_project(project_id)

        clash = self.scope.query(TimeEntry).filter(
            TimeEntry.id != entry_id,
            TimeEntry.employee_id == employee_id,
            TimeEntry.work_date == work_date
        ).first()
        if clash is not None:
            raise Conflict("Duplicate time entry for this employee and date")

        entry.employee_id = employee_id
        entry.work_date = work_date
        entry.normal_hours = normal_hours
        entry.overtime_hours = overtime_hours
        entry.project_id = project_id
        if remark is not None:
            entry.remark = clean_text(remark)

        try:
            self.scope.commit()
        except IntegrityError:
            self.scope.rollback()
            raise Conflict("Duplicate time entry for this employee and date")
        self.scope.refresh(entry)
        logger.info(f"Updated time entry {entry.id}")
        return entry

    def delete_entry(self, entry_id: UUID):
        entry = self.get_entry(entry_id)
        entry.mark_deleted()
        self.scope.commit()
        logger.info(f"Deleted time entry {entry_id}")

    # Reads

    def query_entries(self, start_date: date, end_date: date, filters: Optional[EntryFilters] = None):
        """
        Active entries in the inclusive date range, narrowed by ``filters``.

        Employee type and work type filters are resolved to the matching
        employee ids first; entries are then filtered by membership.
        """
        filters = filters or EntryFilters()
        query = self.scope.query(TimeEntry).filter(
            TimeEntry.state == RecordState.ACTIVE,
            TimeEntry.work_date >= start_date,
            TimeEntry.work_date <= end_date
        )

        if filters.employee_id is not None:
            query = query.filter(TimeEntry.employee_id == filters.employee_id)

        if filters.project_id is not None:
            query = query.filter(TimeEntry.project_id == filters.project_id)

        if filters.filters_employees:
            employee_query = self.scope.query(Employee, Employee.id)
            if filters.employee_type is not None:
                employee_query = employee_query.filter(Employee.type == filters.employee_type)
            if filters.work_type:
                employee_query = employee_query.filter(Employee.work_type == filters.work_type)
            employee_ids = [row.id for row in employee_query.all()]
            query = query.filter(TimeEntry.employee_id.in_(employee_ids))

        return query

    def list_entries(
        self,
        work_date: date,
        keyword: Optional[str] = None,
        employee_type: Optional[EmployeeType] = None,
        sort: Optional[str] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> EntryPage:
        """Paginated active entries for one day."""
        if sort and sort not in SORT_OPTIONS:
            raise InvalidArgument(f"sort must be one of: {', '.join(SORT_OPTIONS)}")
        page = page if page > 0 else 1
        page_size = page_size if page_size > 0 else DEFAULT_PAGE_SIZE
        page_size = min(page_size, MAX_PAGE_SIZE)

        query = self.scope.query(TimeEntry).join(
            Employee, Employee.id == TimeEntry.employee_id
        ).filter(
            TimeEntry.state == RecordState.ACTIVE,
            TimeEntry.work_date == work_date
        )

        if keyword:
            query = query.filter(Employee.name.contains(keyword.strip()))

        if employee_type is not None:
            query = query.filter(Employee.type == employee_type)

        hours = TimeEntry.normal_hours + TimeEntry.overtime_hours
        if sort == "hours_asc":
            query = query.order_by(asc(hours), asc(Employee.name))
        elif sort == "hours_desc":
            query = query.order_by(desc(hours), asc(Employee.name))
        else:
            query = query.order_by(desc(TimeEntry.updated_at))

        total = query.count()
        items = query.offset((page - 1) * page_size).limit(page_size).all()
        return EntryPage(items=items, total=total, page=page, page_size=page_size)

    def export_entries(self, start_date: date, end_date: date) -> List[TimeEntry]:
        """Active entries in the range ordered by day, then employee name."""
        if end_date < start_date:
            raise InvalidArgument("end_date must not be before start_date")
        return self.query_entries(start_date, end_date).join(
            Employee, Employee.id == TimeEntry.employee_id
        ).order_by(asc(TimeEntry.work_date), asc(Employee.name)).all()
