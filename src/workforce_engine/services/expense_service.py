"""Expense service - reimbursable expense entries and their lifecycle."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_engine.database import commit_or_conflict
from workforce_engine.errors import NotFoundError, ValidationError, null_field_errors
from workforce_engine.models import EXPENSE_CATEGORIES, EXPENSE_CURRENCIES, Employee, ExpenseEntry
from workforce_engine.models.base import utcnow
from workforce_engine.services.access_policy import AccessPolicy, Action, Principal
from workforce_engine.services.state_machine import ExpenseStateMachine, ExpenseStatus

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "expense_date",
    "category",
    "description",
    "amount",
    "currency",
    "receipt",
    "notes",
)
REQUIRED_FIELDS = ("expense_date", "category", "description", "amount", "currency")


def _validate_fields(values: dict[str, Any]) -> dict[str, Any]:
    """Check and normalize expense fields; returns the cleaned values."""
    errors = null_field_errors(values, REQUIRED_FIELDS)
    if errors:
        raise ValidationError(errors)
    cleaned = dict(values)

    if "category" in values and values["category"] not in EXPENSE_CATEGORIES:
        errors.append({"field": "category", "message": "Valid category is required"})
    if "description" in values:
        description = (values["description"] or "").strip()
        if not description:
            errors.append({"field": "description", "message": "Description is required"})
        elif len(description) > 500:
            errors.append({"field": "description", "message": "Description cannot exceed 500 characters"})
        cleaned["description"] = description
    if "amount" in values:
        amount = values["amount"]
        if amount is None or Decimal(amount) < 0:
            errors.append({"field": "amount", "message": "Amount must be positive"})
    if "currency" in values:
        currency = (values["currency"] or "").upper()
        if currency not in EXPENSE_CURRENCIES:
            errors.append({"field": "currency", "message": "Valid currency is required"})
        cleaned["currency"] = currency
    notes = values.get("notes")
    if notes is not None and len(notes) > 1000:
        errors.append({"field": "notes", "message": "Notes cannot exceed 1000 characters"})

    if errors:
        raise ValidationError(errors)
    return cleaned


class ExpenseService:
    """Service for expense entries.

    Unlike timesheets, expenses have dedicated approve and reject
    operations; approval stamps approver and time, rejection records a
    reason.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load(self, principal: Principal, expense_id: UUID) -> ExpenseEntry:
        expense = await self.session.get(ExpenseEntry, expense_id)
        if expense is None:
            raise AccessPolicy.missing(principal, "Expense", expense_id)
        return expense

    async def list_expenses(
        self,
        principal: Principal,
        employee_id: UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        status: str | None = None,
        category: str | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[ExpenseEntry], int]:
        """List expenses, newest first. Employees only ever see their own."""
        employee_id = AccessPolicy.scope_employee_id(principal, employee_id)

        query = select(ExpenseEntry)
        if employee_id is not None:
            query = query.where(ExpenseEntry.employee_id == employee_id)
        if start_date is not None:
            query = query.where(ExpenseEntry.expense_date >= start_date)
        if end_date is not None:
            query = query.where(ExpenseEntry.expense_date <= end_date)
        if status:
            query = query.where(ExpenseEntry.status == status)
        if category:
            query = query.where(ExpenseEntry.category == category)

        count_query = select(func.count()).select_from(query.subquery())
        total = await self.session.scalar(count_query) or 0

        query = query.order_by(ExpenseEntry.expense_date.desc(), ExpenseEntry.created_at.desc())
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def get_expense(self, principal: Principal, expense_id: UUID) -> ExpenseEntry:
        expense = await self._load(principal, expense_id)
        AccessPolicy.enforce(principal, Action.VIEW_ENTRY, expense.employee_id)
        return expense

    async def create_expense(
        self,
        principal: Principal,
        *,
        employee_id: UUID,
        expense_date: date,
        category: str,
        description: str,
        amount: Decimal,
        currency: str = "LKR",
        receipt: str | None = None,
        notes: str | None = None,
    ) -> ExpenseEntry:
        """Create a draft expense."""
        AccessPolicy.enforce(principal, Action.CREATE_ENTRY, employee_id)
        values = _validate_fields(
            {
                "category": category,
                "description": description,
                "amount": amount,
                "currency": currency,
                "notes": notes,
            }
        )

        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)

        expense = ExpenseEntry(
            employee_id=employee_id,
            expense_date=expense_date,
            category=values["category"],
            description=values["description"],
            amount=Decimal(amount),
            currency=values["currency"],
            receipt=receipt.strip() if receipt else receipt,
            notes=notes,
            status=ExpenseStatus.DRAFT.value,
            created_by=principal.user_id,
        )
        self.session.add(expense)
        await self.session.commit()

        logger.info(
            "Expense created: id=%s employee=%s amount=%s %s",
            expense.expense_id,
            employee_id,
            expense.amount,
            expense.currency,
        )
        return expense

    async def update_expense(
        self,
        principal: Principal,
        expense_id: UUID,
        changes: dict[str, Any],
    ) -> ExpenseEntry:
        """Apply field changes. Owners may only edit draft or rejected expenses."""
        expense = await self._load(principal, expense_id)
        AccessPolicy.enforce(
            principal,
            Action.EDIT_ENTRY,
            expense.employee_id,
            expense.status,
            ExpenseStateMachine,
        )

        changes = _validate_fields({k: v for k, v in changes.items() if k in EDITABLE_FIELDS})
        for field, value in changes.items():
            setattr(expense, field, value)

        expense.last_modified_by = principal.user_id
        await commit_or_conflict(self.session, "Expense could not be updated")

        logger.info("Expense updated: id=%s", expense.expense_id)
        return expense

    async def submit_expense(self, principal: Principal, expense_id: UUID) -> ExpenseEntry:
        expense = await self._load(principal, expense_id)
        AccessPolicy.enforce(principal, Action.SUBMIT_ENTRY, expense.employee_id)
        ExpenseStateMachine.validate_submit(expense.status)

        expense.status = ExpenseStatus.SUBMITTED.value
        expense.last_modified_by = principal.user_id
        await self.session.commit()

        logger.info("Expense submitted: id=%s", expense.expense_id)
        return expense

    async def approve_expense(self, principal: Principal, expense_id: UUID) -> ExpenseEntry:
        expense = await self._load(principal, expense_id)
        AccessPolicy.enforce(principal, Action.REVIEW_ENTRY)
        ExpenseStateMachine.validate_approve(expense.status)

        expense.status = ExpenseStatus.APPROVED.value
        expense.approved_by = principal.user_id
        expense.approved_at = utcnow()
        expense.last_modified_by = principal.user_id
        await self.session.commit()

        logger.info("Expense approved: id=%s by=%s", expense.expense_id, principal.user_id)
        return expense

    async def reject_expense(
        self,
        principal: Principal,
        expense_id: UUID,
        rejection_reason: str | None = None,
    ) -> ExpenseEntry:
        expense = await self._load(principal, expense_id)
        AccessPolicy.enforce(principal, Action.REVIEW_ENTRY)

        reason = (rejection_reason or "").strip()
        if len(reason) > 500:
            raise ValidationError(
                "Rejection reason cannot exceed 500 characters", field="rejection_reason"
            )
        ExpenseStateMachine.validate_reject(expense.status)

        expense.status = ExpenseStatus.REJECTED.value
        expense.rejection_reason = reason
        expense.last_modified_by = principal.user_id
        await self.session.commit()

        logger.info("Expense rejected: id=%s by=%s", expense.expense_id, principal.user_id)
        return expense

    async def delete_expense(self, principal: Principal, expense_id: UUID) -> None:
        expense = await self._load(principal, expense_id)
        AccessPolicy.enforce(
            principal,
            Action.DELETE_ENTRY,
            expense.employee_id,
            expense.status,
            ExpenseStateMachine,
        )
        await self.session.delete(expense)
        await self.session.commit()

        logger.info("Expense deleted: id=%s by=%s", expense_id, principal.user_id)
