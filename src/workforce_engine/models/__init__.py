"""ORM models."""

from workforce_engine.models.base import Base, TimestampMixin
from workforce_engine.models.employee import EMPLOYEE_STATUSES, Employee
from workforce_engine.models.expense import EXPENSE_CATEGORIES, EXPENSE_CURRENCIES, ExpenseEntry
from workforce_engine.models.password_reset import PasswordResetToken
from workforce_engine.models.summary import MonthlySummary
from workforce_engine.models.timesheet import TimesheetEntry
from workforce_engine.models.user import USER_ROLES, UserAccount

__all__ = [
    "Base",
    "TimestampMixin",
    "Employee",
    "EMPLOYEE_STATUSES",
    "ExpenseEntry",
    "EXPENSE_CATEGORIES",
    "EXPENSE_CURRENCIES",
    "MonthlySummary",
    "PasswordResetToken",
    "TimesheetEntry",
    "UserAccount",
    "USER_ROLES",
]
