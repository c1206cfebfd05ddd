"""Tests for the expense service."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from workforce_engine.errors import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from workforce_engine.services.expense_service import ExpenseService

pytestmark = pytest.mark.asyncio


async def _create(service, principal, employee_id, **kwargs):
    values = {
        "expense_date": date(2025, 3, 5),
        "category": "transport",
        "description": "Taxi to client site",
        "amount": Decimal("1250.00"),
    }
    values.update(kwargs)
    return await service.create_expense(principal, employee_id=employee_id, **values)


class TestCreateExpense:
    """Creation and field validation."""

    async def test_create_draft(self, session, employee, employee_principal):
        expense = await _create(ExpenseService(session), employee_principal, employee.employee_id, currency="usd")

        assert expense.status == "draft"
        assert expense.currency == "USD"
        assert expense.amount == Decimal("1250.00")
        assert expense.created_by == employee_principal.user_id

    async def test_default_currency(self, session, employee, admin):
        expense = await _create(ExpenseService(session), admin, employee.employee_id)
        assert expense.currency == "LKR"

    async def test_invalid_fields(self, session, employee, admin):
        with pytest.raises(ValidationError) as exc_info:
            await _create(
                ExpenseService(session),
                admin,
                employee.employee_id,
                category="travel",
                description="  ",
                amount=Decimal("-1"),
                currency="GBP",
            )
        fields = {e["field"] for e in exc_info.value.errors}
        assert fields == {"category", "description", "amount", "currency"}

    async def test_employee_cannot_create_for_someone_else(self, session, employee_principal, other_employee):
        with pytest.raises(AuthorizationError):
            await _create(ExpenseService(session), employee_principal, other_employee.employee_id)

    async def test_unknown_employee(self, session, admin):
        with pytest.raises(NotFoundError):
            await _create(ExpenseService(session), admin, uuid4())


class TestExpenseLifecycle:
    """Submit, approve, reject."""

    async def test_approve_stamps_approver(self, session, employee, employee_principal, manager):
        service = ExpenseService(session)
        expense = await _create(service, employee_principal, employee.employee_id)
        await service.submit_expense(employee_principal, expense.expense_id)

        approved = await service.approve_expense(manager, expense.expense_id)
        assert approved.status == "approved"
        assert approved.approved_by == manager.user_id
        assert approved.approved_at is not None

    async def test_reject_with_reason(self, session, employee, employee_principal, manager):
        service = ExpenseService(session)
        expense = await _create(service, employee_principal, employee.employee_id)
        await service.submit_expense(employee_principal, expense.expense_id)

        rejected = await service.reject_expense(manager, expense.expense_id, "Missing receipt")
        assert rejected.status == "rejected"
        assert rejected.rejection_reason == "Missing receipt"

        # rejected → approved is allowed
        approved = await service.approve_expense(manager, expense.expense_id)
        assert approved.status == "approved"

    async def test_reject_without_reason(self, session, employee, admin):
        service = ExpenseService(session)
        expense = await _create(service, admin, employee.employee_id)
        await service.submit_expense(admin, expense.expense_id)

        rejected = await service.reject_expense(admin, expense.expense_id)
        assert rejected.rejection_reason == ""

    async def test_reason_too_long(self, session, employee, admin):
        service = ExpenseService(session)
        expense = await _create(service, admin, employee.employee_id)
        await service.submit_expense(admin, expense.expense_id)

        with pytest.raises(ValidationError):
            await service.reject_expense(admin, expense.expense_id, "x" * 501)

    async def test_draft_cannot_be_approved_or_rejected(self, session, employee, admin):
        service = ExpenseService(session)
        expense = await _create(service, admin, employee.employee_id)

        with pytest.raises(InvalidTransitionError):
            await service.approve_expense(admin, expense.expense_id)
        with pytest.raises(InvalidTransitionError):
            await service.reject_expense(admin, expense.expense_id)

    async def test_reimbursed_is_terminal(self, session, employee, admin):
        service = ExpenseService(session)
        expense = await _create(service, admin, employee.employee_id)
        expense.status = "reimbursed"
        await session.commit()

        with pytest.raises(InvalidTransitionError):
            await service.reject_expense(admin, expense.expense_id)

    async def test_employee_cannot_review(self, session, employee, employee_principal):
        service = ExpenseService(session)
        expense = await _create(service, employee_principal, employee.employee_id)
        await service.submit_expense(employee_principal, expense.expense_id)

        with pytest.raises(AuthorizationError):
            await service.approve_expense(employee_principal, expense.expense_id)


class TestExpenseEdits:
    """Updates, deletes and listing."""

    async def test_owner_edits_draft(self, session, employee, employee_principal):
        service = ExpenseService(session)
        expense = await _create(service, employee_principal, employee.employee_id)

        updated = await service.update_expense(
            employee_principal, expense.expense_id, {"amount": Decimal("900"), "status": "approved"}
        )
        assert updated.amount == Decimal("900")
        # Status is not editable through update
        assert updated.status == "draft"

    async def test_null_required_fields_are_rejected(self, session, employee, admin):
        service = ExpenseService(session)
        expense = await _create(service, admin, employee.employee_id)

        with pytest.raises(ValidationError) as exc_info:
            await service.update_expense(
                admin, expense.expense_id, {"expense_date": None, "amount": None, "notes": None}
            )
        assert {e["field"] for e in exc_info.value.errors} == {"expense_date", "amount"}

        # Nullable fields can still be cleared
        updated = await service.update_expense(admin, expense.expense_id, {"receipt": None, "notes": None})
        assert updated.expense_date == date(2025, 3, 5)
        assert updated.notes is None

    async def test_owner_cannot_edit_approved(self, session, employee, employee_principal, admin):
        service = ExpenseService(session)
        expense = await _create(service, employee_principal, employee.employee_id)
        await service.submit_expense(employee_principal, expense.expense_id)
        await service.approve_expense(admin, expense.expense_id)

        with pytest.raises(AuthorizationError):
            await service.update_expense(employee_principal, expense.expense_id, {"notes": "changed"})

        updated = await service.update_expense(admin, expense.expense_id, {"notes": "checked"})
        assert updated.notes == "checked"

    async def test_owner_deletes_draft_only(self, session, employee, employee_principal):
        service = ExpenseService(session)
        draft = await _create(service, employee_principal, employee.employee_id)
        submitted = await _create(service, employee_principal, employee.employee_id)
        await service.submit_expense(employee_principal, submitted.expense_id)

        await service.delete_expense(employee_principal, draft.expense_id)
        with pytest.raises(AuthorizationError):
            await service.delete_expense(employee_principal, submitted.expense_id)

    async def test_list_scoped_and_filtered(
        self, session, employee, other_employee, employee_principal, admin
    ):
        service = ExpenseService(session)
        await _create(service, admin, employee.employee_id, category="meals")
        await _create(service, admin, employee.employee_id)
        await _create(service, admin, other_employee.employee_id)

        _, own = await service.list_expenses(employee_principal)
        assert own == 2

        items, meals = await service.list_expenses(admin, category="meals")
        assert meals == 1
        assert items[0].category == "meals"

    async def test_employee_cannot_read_others(self, session, other_employee, employee_principal, admin):
        service = ExpenseService(session)
        expense = await _create(service, admin, other_employee.employee_id)

        with pytest.raises(AuthorizationError):
            await service.get_expense(employee_principal, expense.expense_id)
