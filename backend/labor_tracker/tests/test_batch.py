"""
Batch booking tests.
"""
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from labor_tracker.database.models import RecordState, TimeEntry
from labor_tracker.services.errors import InvalidArgument, NotFound
from labor_tracker.services.time_entries import (
    REASON_ALREADY_EXISTS, REASON_EMPLOYEE_NOT_FOUND, STATUS_CREATED, STATUS_SKIPPED,
    TimeEntryService
)

from .conftest import API, restored_elsewhere
from .test_base import BaseAPITest

MON = date(2024, 3, 4)
TUE = date(2024, 3, 5)


class TestBatchCreateService:

    def test_mixed_outcomes(self, scope, factory, db_session):
        alice = factory.employee(name="Alice")
        bob = factory.employee(name="Bob")
        missing = uuid4()
        factory.entry(alice, TUE)

        outcome = TimeEntryService(scope).batch_create(
            [alice.id, bob.id, missing], [MON, TUE], Decimal("8"), Decimal("0")
        )

        assert (outcome.total, outcome.created, outcome.skipped) == (6, 3, 3)
        assert [(d.employee_id, d.work_date, d.status, d.reason) for d in outcome.details] == [
            (alice.id, MON, STATUS_CREATED, None),
            (alice.id, TUE, STATUS_SKIPPED, REASON_ALREADY_EXISTS),
            (bob.id, MON, STATUS_CREATED, None),
            (bob.id, TUE, STATUS_CREATED, None),
            (missing, MON, STATUS_SKIPPED, REASON_EMPLOYEE_NOT_FOUND),
            (missing, TUE, STATUS_SKIPPED, REASON_EMPLOYEE_NOT_FOUND),
        ]
        assert db_session.query(TimeEntry).filter(TimeEntry.tenant_id == scope.tenant_id).count() == 4

    def test_duplicates_are_dropped_in_input_order(self, scope, factory):
        alice = factory.employee(name="Alice")
        bob = factory.employee(name="Bob")

        outcome = TimeEntryService(scope).batch_create(
            [bob.id, alice.id, bob.id], [TUE, MON, TUE], Decimal("8"), Decimal("0")
        )

        assert outcome.total == 4
        assert [(d.employee_id, d.work_date) for d in outcome.details] == [
            (bob.id, TUE), (bob.id, MON), (alice.id, TUE), (alice.id, MON)
        ]

    def test_deleted_cell_is_restored_and_reported_created(self, scope, factory):
        alice = factory.employee()
        service = TimeEntryService(scope)
        entry = service.create_entry(alice.id, MON, Decimal("8"), Decimal("0"))
        entry_id = entry.id
        service.delete_entry(entry_id)

        outcome = service.batch_create([alice.id], [MON], Decimal("4"), Decimal("1"))

        assert outcome.created == 1
        restored = service.get_entry(entry_id)
        assert restored.state == RecordState.ACTIVE
        assert restored.normal_hours == Decimal("4")

    def test_inactive_employee_is_skipped(self, scope, factory):
        idle = factory.employee(name="Idle", is_active=False)
        outcome = TimeEntryService(scope).batch_create([idle.id], [MON], Decimal("8"), Decimal("0"))
        assert outcome.skipped == 1
        assert outcome.details[0].reason == REASON_EMPLOYEE_NOT_FOUND

    def test_empty_lists_rejected(self, scope, factory):
        alice = factory.employee()
        service = TimeEntryService(scope)
        with pytest.raises(InvalidArgument):
            service.batch_create([], [MON], Decimal("8"), Decimal("0"))
        with pytest.raises(InvalidArgument):
            service.batch_create([alice.id], [], Decimal("8"), Decimal("0"))

    def test_whole_batch_preconditions_write_nothing(self, scope, factory, db_session):
        alice = factory.employee()
        service = TimeEntryService(scope)

        with pytest.raises(InvalidArgument):
            service.batch_create([alice.id], [MON], Decimal("7.25"), Decimal("0"))
        with pytest.raises(NotFound):
            service.batch_create([alice.id], [MON], Decimal("8"), Decimal("0"), project_id=uuid4())

        assert db_session.query(TimeEntry).count() == 0


class TestBatchConcurrentWriters:
    """Another writer takes a cell between the batch's lookup and its write."""

    def test_insert_race_skips_cell_and_keeps_siblings(self, scope, factory, db_session, monkeypatch):
        alice = factory.employee()
        factory.entry(alice, MON, normal_hours="6")
        original = TimeEntryService.find_entry

        def find_entry(self, employee_id, work_date, include_deleted=False):
            if work_date == MON:
                return None
            return original(self, employee_id, work_date, include_deleted)

        monkeypatch.setattr(TimeEntryService, "find_entry", find_entry)

        outcome = TimeEntryService(scope).batch_create([alice.id], [MON, TUE], Decimal("8"), Decimal("0"))

        assert [(d.work_date, d.status, d.reason) for d in outcome.details] == [
            (MON, STATUS_SKIPPED, REASON_ALREADY_EXISTS),
            (TUE, STATUS_CREATED, None),
        ]
        rows = db_session.query(TimeEntry).order_by(TimeEntry.work_date).all()
        assert [(row.work_date, row.normal_hours) for row in rows] == [(MON, Decimal("6")), (TUE, Decimal("8"))]

    def test_restore_race_skips_cell_without_overwriting(self, scope, factory, db_session, monkeypatch):
        alice = factory.employee()
        service = TimeEntryService(scope)
        service.delete_entry(factory.entry(alice, MON).id)
        monkeypatch.setattr(TimeEntryService, "find_entry", restored_elsewhere(db_session, normal_hours=6))

        outcome = service.batch_create([alice.id], [MON, TUE], Decimal("4"), Decimal("0"))

        assert (outcome.created, outcome.skipped) == (1, 1)
        assert outcome.details[0].reason == REASON_ALREADY_EXISTS
        rows = db_session.query(TimeEntry).order_by(TimeEntry.work_date).all()
        assert [(row.work_date, row.state, row.normal_hours) for row in rows] == [
            (MON, RecordState.ACTIVE, Decimal("6")),
            (TUE, RecordState.ACTIVE, Decimal("4")),
        ]


class TestBatchAPI(BaseAPITest):

    def test_batch_endpoint_reports_cells(self, client, auth_headers, api_data):
        alice = api_data.employee(name="Alice")
        bob = api_data.employee(name="Bob")
        project = api_data.project(name="Tower")
        api_data.entry(bob["id"], "2024-03-05")

        response = client.post(f"{API}/time-entries/batch", headers=auth_headers, json={
            "employee_ids": [alice["id"], bob["id"], str(uuid4())],
            "work_dates": ["2024-03-04", "2024-03-05"],
            "project_id": project["id"],
            "normal_hours": 8,
            "overtime_hours": 1.5
        })

        self.assert_success_response(response)
        data = response.json()
        assert (data["total"], data["created"], data["skipped"]) == (6, 3, 3)
        assert data["details"][0] == {
            "employee_id": alice["id"], "work_date": "2024-03-04", "status": "created", "reason": None
        }
        reasons = [d["reason"] for d in data["details"] if d["status"] == "skipped"]
        assert reasons == ["already exists", "employee not found", "employee not found"]

    def test_batch_with_empty_dates(self, client, auth_headers, api_data):
        alice = api_data.employee()
        response = client.post(f"{API}/time-entries/batch", headers=auth_headers, json={
            "employee_ids": [alice["id"]], "work_dates": []
        })
        self.assert_invalid_argument(response, "work_dates")
