"""Tests for the employee service."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select, text

from workforce_engine.errors import AuthorizationError, ConflictError, ValidationError
from workforce_engine.models import (
    Employee,
    ExpenseEntry,
    MonthlySummary,
    PasswordResetToken,
    TimesheetEntry,
    UserAccount,
)
from workforce_engine.security import verify_password
from workforce_engine.services.auth_service import AuthService
from workforce_engine.services.employee_service import EmployeeService
from workforce_engine.services.expense_service import ExpenseService
from workforce_engine.services.report_service import ReportService
from workforce_engine.services.timesheet_service import TimesheetService

pytestmark = pytest.mark.asyncio


def _payload(**overrides):
    values = {
        "employee_code": "emp100",
        "name": "Sunil Fernando",
        "position": "Driver",
        "pay_rate": Decimal("20"),
        "ot_rate": Decimal("30"),
        "vacation_pay_rate": Decimal("18"),
    }
    values.update(overrides)
    return values


class TestCreateEmployee:
    """Creation, normalization and linked login accounts."""

    async def test_code_is_upper_cased(self, session, admin):
        employee = await EmployeeService(session).create_employee(admin, **_payload())
        assert employee.employee_code == "EMP100"
        assert employee.status == "active"
        assert employee.date_of_employment == date.today()

    async def test_duplicate_code(self, session, employee, admin):
        with pytest.raises(ConflictError):
            await EmployeeService(session).create_employee(admin, **_payload(employee_code="emp001"))

    async def test_with_login_account(self, session, admin):
        employee = await EmployeeService(session).create_employee(
            admin, **_payload(email="Sunil@Example.com", password="secret123")
        )

        user = await session.scalar(
            select(UserAccount).where(UserAccount.linked_employee_id == employee.employee_id)
        )
        assert user is not None
        assert user.role == "employee"
        assert user.username == "sunil@example.com"
        assert verify_password("secret123", user.password_hash)

    async def test_login_email_taken(self, session, admin_user, admin):
        with pytest.raises(ConflictError):
            await EmployeeService(session).create_employee(
                admin, **_payload(email=admin_user.email, password="secret123")
            )

    async def test_short_password(self, session, admin):
        with pytest.raises(ValidationError):
            await EmployeeService(session).create_employee(
                admin, **_payload(email="s@example.com", password="123")
            )

    async def test_email_without_password_creates_no_account(self, session, admin):
        employee = await EmployeeService(session).create_employee(admin, **_payload(email="s@example.com"))
        user = await session.scalar(
            select(UserAccount).where(UserAccount.linked_employee_id == employee.employee_id)
        )
        assert user is None

    async def test_manager_cannot_create(self, session, manager):
        with pytest.raises(AuthorizationError):
            await EmployeeService(session).create_employee(manager, **_payload())


class TestEmployeeQueries:
    """Listing, search and reads."""

    async def test_search(self, session, employee, other_employee, manager):
        service = EmployeeService(session)

        items, total = await service.list_employees(manager, search="silva")
        assert total == 1
        assert items[0].employee_code == "EMP002"

        _, by_code = await service.list_employees(manager, search="emp00")
        assert by_code == 2

        _, by_position = await service.list_employees(manager, search="TECH")
        assert by_position == 1

    async def test_status_filter(self, session, employee, other_employee, manager):
        service = EmployeeService(session)
        await service.deactivate_employee(manager, other_employee.employee_id)

        items, total = await service.list_employees(manager, status="active")
        assert total == 1
        assert items[0].employee_id == employee.employee_id

    async def test_employee_cannot_list(self, session, employee_principal):
        with pytest.raises(AuthorizationError):
            await EmployeeService(session).list_employees(employee_principal)

    async def test_employee_reads_own_record_only(self, session, employee, other_employee, employee_principal):
        service = EmployeeService(session)
        own = await service.get_employee(employee_principal, employee.employee_id)
        assert own.employee_id == employee.employee_id

        with pytest.raises(AuthorizationError):
            await service.get_employee(employee_principal, other_employee.employee_id)


class TestEmployeeChanges:
    """Update, activate/deactivate and delete."""

    async def test_update(self, session, employee, admin):
        updated = await EmployeeService(session).update_employee(
            admin, employee.employee_id, {"position": "Senior Technician", "pay_rate": Decimal("28")}
        )
        assert updated.position == "Senior Technician"
        assert updated.pay_rate == Decimal("28")

    async def test_update_to_taken_code(self, session, employee, other_employee, admin):
        with pytest.raises(ConflictError):
            await EmployeeService(session).update_employee(
                admin, employee.employee_id, {"employee_code": "emp002"}
            )

    async def test_manager_cannot_update(self, session, employee, manager):
        with pytest.raises(AuthorizationError):
            await EmployeeService(session).update_employee(manager, employee.employee_id, {"name": "X"})

    async def test_deactivate_and_activate(self, session, employee, manager):
        service = EmployeeService(session)

        deactivated = await service.deactivate_employee(manager, employee.employee_id)
        assert deactivated.status == "inactive"
        with pytest.raises(ValidationError):
            await service.deactivate_employee(manager, employee.employee_id)

        activated = await service.activate_employee(manager, employee.employee_id)
        assert activated.status == "active"
        with pytest.raises(ValidationError):
            await service.activate_employee(manager, employee.employee_id)

    async def test_delete(self, session, other_employee, admin, manager):
        service = EmployeeService(session)
        with pytest.raises(AuthorizationError):
            await service.delete_employee(manager, other_employee.employee_id)

        await service.delete_employee(admin, other_employee.employee_id)
        _, total = await service.list_employees(admin)
        assert total == 0

    async def test_null_required_fields_are_rejected(self, session, employee, admin):
        with pytest.raises(ValidationError) as exc_info:
            await EmployeeService(session).update_employee(
                admin,
                employee.employee_id,
                {"break_duration": None, "date_of_employment": None, "phone": None},
            )
        assert {e["field"] for e in exc_info.value.errors} == {"break_duration", "date_of_employment"}


class TestEmployeeDelete:
    """Hard delete removes everything that belongs to the employee."""

    async def test_foreign_keys_enforced_on_sqlite(self, session):
        assert await session.scalar(text("PRAGMA foreign_keys")) == 1

    async def test_delete_removes_entries_summaries_and_login(
        self, session, employee, employee_user, employee_principal, other_employee, admin
    ):
        await TimesheetService(session).create_timesheet(
            employee_principal,
            employee_id=employee.employee_id,
            work_date=date(2025, 3, 3),
            start_time="09:00",
            end_time="17:00",
        )
        await ExpenseService(session).create_expense(
            employee_principal,
            employee_id=employee.employee_id,
            expense_date=date(2025, 3, 3),
            category="meals",
            description="Lunch",
            amount=Decimal("800"),
        )
        await ReportService(session).generate_monthly(admin, 2025, 3)
        await AuthService(session).request_reset("nimal@example.com")

        await EmployeeService(session).delete_employee(admin, employee.employee_id)

        for model in (TimesheetEntry, ExpenseEntry, MonthlySummary):
            remaining = await session.scalar(
                select(func.count()).select_from(model).where(model.employee_id == employee.employee_id)
            )
            assert remaining == 0
        assert await session.scalar(select(func.count()).select_from(PasswordResetToken)) == 0
        assert await session.get(UserAccount, employee_user.user_id) is None

        # Other employees keep their data
        assert await session.get(Employee, other_employee.employee_id) is not None
        summaries = await session.scalar(select(func.count()).select_from(MonthlySummary))
        assert summaries == 1
