"""Business services."""

from workforce_engine.services.access_policy import AccessPolicy, Action, Decision, Principal, Role
from workforce_engine.services.auth_service import AuthService, principal_for_user
from workforce_engine.services.employee_service import EmployeeService
from workforce_engine.services.expense_service import ExpenseService
from workforce_engine.services.report_service import ReportService
from workforce_engine.services.state_machine import (
    ExpenseStateMachine,
    ExpenseStatus,
    SummaryStateMachine,
    SummaryStatus,
    TimesheetStateMachine,
    TimesheetStatus,
)
from workforce_engine.services.timesheet_service import TimesheetService
from workforce_engine.services.user_service import UserService

__all__ = [
    "AccessPolicy",
    "Action",
    "Decision",
    "Principal",
    "Role",
    "AuthService",
    "principal_for_user",
    "EmployeeService",
    "ExpenseService",
    "ReportService",
    "TimesheetService",
    "UserService",
    "ExpenseStateMachine",
    "ExpenseStatus",
    "SummaryStateMachine",
    "SummaryStatus",
    "TimesheetStateMachine",
    "TimesheetStatus",
]
