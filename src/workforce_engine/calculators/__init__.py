"""Hour and pay calculations."""

from workforce_engine.calculators.pay_calculator import (
    accumulate_hours,
    calculate_pay,
    round_to_cents,
)
from workforce_engine.calculators.time_calculator import (
    TIME_PATTERN,
    calculate_hours,
    is_valid_time,
    parse_time,
)
from workforce_engine.calculators.types import HoursResult, MonthlyHours, PayBreakdown

__all__ = [
    "HoursResult",
    "MonthlyHours",
    "PayBreakdown",
    "TIME_PATTERN",
    "accumulate_hours",
    "calculate_hours",
    "calculate_pay",
    "is_valid_time",
    "parse_time",
    "round_to_cents",
]
