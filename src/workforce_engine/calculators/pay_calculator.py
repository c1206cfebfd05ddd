"""Monthly hour roll-up and pay calculation."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from workforce_engine.calculators.types import (
    ZERO,
    MonthlyHours,
    PayBreakdown,
    PayRatesLike,
    TimesheetLike,
)

CENTS = Decimal("0.01")


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (cents)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def accumulate_hours(entries: Iterable[TimesheetLike]) -> MonthlyHours:
    """Sum timesheet hours into regular, overtime, vacation and holiday buckets.

    Every entry contributes its regular/overtime split. Vacation- and
    holiday-flagged entries additionally add their full hours worked to the
    vacation or holiday bucket, so flagged hours are counted twice across the
    buckets (vacation and holiday pay sit on top of worked-hours pay).
    """
    totals = MonthlyHours()
    for entry in entries:
        worked = Decimal(entry.total_hours_worked or ZERO)
        overtime = Decimal(entry.ot_hours or ZERO)

        totals.regular += max(ZERO, worked - overtime)
        totals.overtime += overtime

        if entry.is_vacation_work:
            totals.vacation += worked
        if entry.is_holiday_work:
            totals.holiday += worked

        totals.entry_count += 1
    return totals


def calculate_pay(hours: MonthlyHours, rates: PayRatesLike) -> PayBreakdown:
    """Multiply hour buckets by the employee's rates. Holiday hours use the regular rate."""
    pay_rate = Decimal(rates.pay_rate)
    return PayBreakdown(
        regular_pay=round_to_cents(hours.regular * pay_rate),
        ot_pay=round_to_cents(hours.overtime * Decimal(rates.ot_rate)),
        vacation_pay=round_to_cents(hours.vacation * Decimal(rates.vacation_pay_rate)),
        holiday_pay=round_to_cents(hours.holiday * pay_rate),
    )
