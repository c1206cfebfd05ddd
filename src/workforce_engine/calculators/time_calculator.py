"""Hours-worked and overtime calculation for a daily timesheet entry."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal

from workforce_engine.calculators.types import ZERO, HoursResult

# H:MM or HH:MM, 00-23 hours, 00-59 minutes
TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"
_TIME_RE = re.compile(TIME_PATTERN)

MINUTES_PER_DAY = 24 * 60
MAX_BREAK_MINUTES = 480
DEFAULT_REGULAR_HOURS = Decimal("8")
HOURS_PRECISION = Decimal("0.0001")


def is_valid_time(value: str) -> bool:
    """Check the HH:MM format used at the input boundary."""
    return bool(_TIME_RE.match(value))


def parse_time(value: str) -> int:
    """Convert ``HH:MM`` to minutes since midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def calculate_hours(
    start_time: str,
    end_time: str,
    break_minutes: int = 0,
    regular_hours_threshold: Decimal = DEFAULT_REGULAR_HOURS,
) -> HoursResult:
    """Compute hours worked and overtime for one shift.

    An end time earlier than the start time is an overnight shift ending on
    the next day. Break minutes are deducted and the result never goes below
    zero. Hours above ``regular_hours_threshold`` are overtime.

    Inputs are assumed to be well formed; validate them first.
    """
    delta = parse_time(end_time) - parse_time(start_time)
    if delta < 0:
        delta += MINUTES_PER_DAY

    work_minutes = max(0, delta - break_minutes)
    hours_worked = (Decimal(work_minutes) / Decimal(60)).quantize(
        HOURS_PRECISION, rounding=ROUND_HALF_UP
    )
    ot_hours = max(ZERO, hours_worked - Decimal(regular_hours_threshold))

    return HoursResult(hours_worked=hours_worked, ot_hours=ot_hours)
