"""Type definitions for the hour and pay calculations."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

ZERO = Decimal("0")


@dataclass(frozen=True)
class HoursResult:
    """Derived hours for a single timesheet entry."""

    hours_worked: Decimal
    ot_hours: Decimal

    @property
    def regular_hours(self) -> Decimal:
        return max(ZERO, self.hours_worked - self.ot_hours)


class TimesheetLike(Protocol):
    """Fields of a timesheet entry the monthly roll-up reads."""

    total_hours_worked: Decimal
    ot_hours: Decimal
    is_vacation_work: bool
    is_holiday_work: bool


class PayRatesLike(Protocol):
    """Pay rate fields of an employee."""

    pay_rate: Decimal
    ot_rate: Decimal
    vacation_pay_rate: Decimal


@dataclass
class MonthlyHours:
    """Hour buckets accumulated over a month."""

    regular: Decimal = ZERO
    overtime: Decimal = ZERO
    vacation: Decimal = ZERO
    holiday: Decimal = ZERO
    entry_count: int = 0


@dataclass(frozen=True)
class PayBreakdown:
    """Pay per bucket plus the payable total."""

    regular_pay: Decimal
    ot_pay: Decimal
    vacation_pay: Decimal
    holiday_pay: Decimal

    @property
    def total(self) -> Decimal:
        return self.regular_pay + self.ot_pay + self.vacation_pay + self.holiday_pay
