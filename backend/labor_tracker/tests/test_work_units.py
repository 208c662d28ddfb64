"""
Tests for work-unit conversion and hour validation.
"""
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from labor_tracker.services.work_units import HourTotals, is_valid_hour, total_hours, work_units


class TestIsValidHour:

    @pytest.mark.parametrize("value", [0, "0.5", 8, "7.5", Decimal("12.0"), "24"])
    def test_accepts_half_hour_steps(self, value):
        assert is_valid_hour(value)

    @pytest.mark.parametrize("value", ["-0.5", "0.25", "7.3", Decimal("NaN"), Decimal("Infinity")])
    def test_rejects_negative_fractional_and_non_finite(self, value):
        assert not is_valid_hour(value)


class TestWorkUnits:

    def test_full_normal_day_is_one_unit(self):
        assert work_units(8, 0) == Decimal(1)

    def test_full_overtime_shift_is_one_unit(self):
        assert work_units(0, 6) == Decimal(1)

    def test_mixed_hours(self):
        assert work_units(Decimal("8"), Decimal("3")) == Decimal("1.5")
        assert work_units("4", "0") == Decimal("0.5")
        assert work_units(4, 3) == Decimal("1.0")

    def test_total_hours(self):
        assert total_hours("7.5", "1.5") == Decimal("9.0")


class TestHourTotals:

    def _entry(self, employee_id, normal, overtime):
        return SimpleNamespace(
            employee_id=employee_id,
            normal_hours=Decimal(normal),
            overtime_hours=Decimal(overtime)
        )

    def test_empty_totals_are_zero(self):
        totals = HourTotals()
        assert totals.total_hours == 0
        assert totals.work_units == 0
        assert totals.headcount == 0

    def test_headcount_counts_distinct_employees(self):
        alice, bob = uuid4(), uuid4()
        totals = HourTotals()
        totals.add(self._entry(alice, "8", "0"))
        totals.add(self._entry(alice, "8", "6"))
        totals.add(self._entry(bob, "4", "0"))

        assert totals.normal_hours == Decimal("20")
        assert totals.overtime_hours == Decimal("6")
        assert totals.total_hours == Decimal("26")
        assert totals.work_units == Decimal("3.5")
        assert totals.headcount == 2
        assert totals.entry_count == 3
