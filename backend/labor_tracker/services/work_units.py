"""
Work-unit conversion and hour arithmetic.

A work unit normalizes a day's booking: eight normal hours or six overtime
hours each count as one unit.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Set, Union
from uuid import UUID

NORMAL_HOURS_PER_UNIT = Decimal(8)
OVERTIME_HOURS_PER_UNIT = Decimal(6)
HOUR_STEP = Decimal("0.5")

ZERO = Decimal(0)

Number = Union[Decimal, int, str]


def _to_decimal(value: Number) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


# PUBLIC_INTERFACE
def is_valid_hour(value: Number) -> bool:
    """
    Check that an hour value is non-negative and a multiple of 0.5.

    Args:
        value: Hours as a decimal, int or numeric string

    Returns:
        bool: True if the value can be booked
    """
    hours = _to_decimal(value)
    if not hours.is_finite() or hours < 0:
        return False
    doubled = hours * 2
    return doubled == doubled.to_integral_value()


# PUBLIC_INTERFACE
def work_units(normal_hours: Number, overtime_hours: Number) -> Decimal:
    """
    Convert hours to work units: normal / 8 + overtime / 6.

    Args:
        normal_hours: Normal hours booked
        overtime_hours: Overtime hours booked

    Returns:
        Decimal: Unrounded work units
    """
    return (_to_decimal(normal_hours) / NORMAL_HOURS_PER_UNIT
            + _to_decimal(overtime_hours) / OVERTIME_HOURS_PER_UNIT)


def total_hours(normal_hours: Number, overtime_hours: Number) -> Decimal:
    return _to_decimal(normal_hours) + _to_decimal(overtime_hours)


@dataclass
class HourTotals:
    """Running sums over a group of time entries."""

    normal_hours: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    employee_ids: Set[UUID] = field(default_factory=set)
    entry_count: int = 0

    def add(self, entry) -> "HourTotals":
        self.normal_hours += _to_decimal(entry.normal_hours)
        self.overtime_hours += _to_decimal(entry.overtime_hours)
        self.employee_ids.add(entry.employee_id)
        self.entry_count += 1
        return self

    @property
    def total_hours(self) -> Decimal:
        return total_hours(self.normal_hours, self.overtime_hours)

    @property
    def work_units(self) -> Decimal:
        return work_units(self.normal_hours, self.overtime_hours)

    @property
    def headcount(self) -> int:
        return len(self.employee_ids)
