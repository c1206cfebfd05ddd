"""Employee service - employee records and their login accounts."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_engine.database import commit_or_conflict
from workforce_engine.errors import ConflictError, NotFoundError, ValidationError, null_field_errors
from workforce_engine.models import Employee, ExpenseEntry, MonthlySummary, TimesheetEntry, UserAccount
from workforce_engine.security import hash_password
from workforce_engine.services.access_policy import AccessPolicy, Action, Principal, Role

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

EDITABLE_FIELDS = (
    "employee_code",
    "name",
    "position",
    "date_of_employment",
    "pay_rate",
    "ot_rate",
    "vacation_pay_rate",
    "break_is_paid",
    "break_duration",
    "status",
    "email",
    "phone",
    "address",
    "date_of_birth",
)
REQUIRED_FIELDS = (
    "employee_code",
    "name",
    "position",
    "date_of_employment",
    "pay_rate",
    "ot_rate",
    "vacation_pay_rate",
    "break_is_paid",
    "break_duration",
    "status",
)


def _normalize(values: dict[str, Any]) -> dict[str, Any]:
    """Upper-case the code, lower-case the email and check the numbers."""
    errors = null_field_errors(values, REQUIRED_FIELDS)
    if errors:
        raise ValidationError(errors)
    cleaned = dict(values)

    if "employee_code" in values:
        code = (values["employee_code"] or "").strip().upper()
        if not code:
            errors.append({"field": "employee_code", "message": "Employee ID is required"})
        cleaned["employee_code"] = code
    for name in ("name", "position"):
        if name in values:
            text = (values[name] or "").strip()
            if not text:
                errors.append({"field": name, "message": f"{name.capitalize()} is required"})
            elif len(text) > 100:
                errors.append({"field": name, "message": f"{name.capitalize()} cannot exceed 100 characters"})
            cleaned[name] = text
    for name in ("pay_rate", "ot_rate", "vacation_pay_rate"):
        if name in values and (values[name] is None or Decimal(values[name]) < 0):
            errors.append({"field": name, "message": f"{name} must be a positive number"})
    if "break_duration" in values and (values["break_duration"] or 0) < 0:
        errors.append({"field": "break_duration", "message": "break_duration cannot be negative"})
    if values.get("email"):
        cleaned["email"] = values["email"].strip().lower()

    if errors:
        raise ValidationError(errors)
    return cleaned


class EmployeeService:
    """Service for employee records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load(self, employee_id: UUID) -> Employee:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    async def _code_taken(self, code: str, exclude: UUID | None = None) -> bool:
        query = select(Employee.employee_id).where(Employee.employee_code == code)
        if exclude is not None:
            query = query.where(Employee.employee_id != exclude)
        return await self.session.scalar(query) is not None

    async def list_employees(
        self,
        principal: Principal,
        search: str | None = None,
        status: str | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[Employee], int]:
        """List employees with a case-insensitive search over name, code and position."""
        AccessPolicy.enforce(principal, Action.VIEW_EMPLOYEES)

        query = select(Employee)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    Employee.name.ilike(pattern),
                    Employee.employee_code.ilike(pattern),
                    Employee.position.ilike(pattern),
                )
            )
        if status:
            query = query.where(Employee.status == status)

        count_query = select(func.count()).select_from(query.subquery())
        total = await self.session.scalar(count_query) or 0

        query = query.order_by(Employee.created_at.desc())
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def get_employee(self, principal: Principal, employee_id: UUID) -> Employee:
        # Employees may look at their own record
        if principal.role == Role.EMPLOYEE:
            if not principal.owns(employee_id):
                raise AccessPolicy.missing(principal, "Employee", employee_id)
        else:
            AccessPolicy.enforce(principal, Action.VIEW_EMPLOYEES)
        return await self._load(employee_id)

    async def create_employee(
        self,
        principal: Principal,
        *,
        employee_code: str,
        name: str,
        position: str,
        pay_rate: Decimal,
        ot_rate: Decimal,
        vacation_pay_rate: Decimal,
        date_of_employment: date | None = None,
        break_is_paid: bool = False,
        break_duration: int = 0,
        email: str | None = None,
        phone: str | None = None,
        address: str | None = None,
        date_of_birth: date | None = None,
        password: str | None = None,
    ) -> Employee:
        """Create an employee.

        When both ``email`` and ``password`` are given an employee-role login
        account is created and linked in the same transaction; its username
        is the email address.
        """
        AccessPolicy.enforce(principal, Action.MANAGE_EMPLOYEES)
        values = _normalize(
            {
                "employee_code": employee_code,
                "name": name,
                "position": position,
                "pay_rate": pay_rate,
                "ot_rate": ot_rate,
                "vacation_pay_rate": vacation_pay_rate,
                "break_duration": break_duration,
                "email": email,
            }
        )
        if password is not None and len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
            )

        if await self._code_taken(values["employee_code"]):
            raise ConflictError("Employee ID already exists")

        login_email = values["email"] if password else None
        if login_email:
            existing = await self.session.scalar(
                select(UserAccount.user_id).where(
                    or_(UserAccount.email == login_email, UserAccount.username == login_email)
                )
            )
            if existing is not None:
                raise ConflictError("User with this email already exists")

        employee = Employee(
            employee_code=values["employee_code"],
            name=values["name"],
            position=values["position"],
            date_of_employment=date_of_employment or date.today(),
            pay_rate=Decimal(pay_rate),
            ot_rate=Decimal(ot_rate),
            vacation_pay_rate=Decimal(vacation_pay_rate),
            break_is_paid=break_is_paid,
            break_duration=break_duration,
            status="active",
            email=values["email"],
            phone=phone,
            address=address,
            date_of_birth=date_of_birth,
        )
        self.session.add(employee)

        if login_email:
            await self.session.flush()
            self.session.add(
                UserAccount(
                    username=login_email,
                    email=login_email,
                    password_hash=hash_password(password),
                    role=Role.EMPLOYEE.value,
                    linked_employee_id=employee.employee_id,
                )
            )

        await commit_or_conflict(self.session, "Employee ID or email already exists")

        logger.info(
            "Employee created: id=%s code=%s login=%s",
            employee.employee_id,
            employee.employee_code,
            bool(login_email),
        )
        return employee

    async def update_employee(
        self,
        principal: Principal,
        employee_id: UUID,
        changes: dict[str, Any],
    ) -> Employee:
        AccessPolicy.enforce(principal, Action.MANAGE_EMPLOYEES)
        employee = await self._load(employee_id)

        changes = _normalize({k: v for k, v in changes.items() if k in EDITABLE_FIELDS})
        code = changes.get("employee_code")
        if code and code != employee.employee_code and await self._code_taken(code, employee_id):
            raise ConflictError("Employee ID already exists")

        for field, value in changes.items():
            setattr(employee, field, value)
        await commit_or_conflict(self.session, "Employee ID already exists")

        logger.info("Employee updated: id=%s", employee_id)
        return employee

    async def _set_status(self, principal: Principal, employee_id: UUID, status: str) -> Employee:
        AccessPolicy.enforce(principal, Action.CHANGE_EMPLOYEE_STATUS)
        employee = await self._load(employee_id)
        if employee.status == status:
            raise ValidationError(f"Employee is already {status}", field="status")

        employee.status = status
        await self.session.commit()

        logger.info("Employee %s: id=%s by=%s", status, employee_id, principal.user_id)
        return employee

    async def activate_employee(self, principal: Principal, employee_id: UUID) -> Employee:
        return await self._set_status(principal, employee_id, "active")

    async def deactivate_employee(self, principal: Principal, employee_id: UUID) -> Employee:
        return await self._set_status(principal, employee_id, "inactive")

    async def delete_employee(self, principal: Principal, employee_id: UUID) -> None:
        """Hard delete.

        Timesheets, expenses and summaries go with it, as does the linked
        employee login: an employee-role account cannot exist without its
        employee. Rows are removed explicitly, children first, so the result
        does not depend on the backend enforcing ON DELETE rules.
        """
        AccessPolicy.enforce(principal, Action.MANAGE_EMPLOYEES)
        employee = await self._load(employee_id)

        for model in (TimesheetEntry, ExpenseEntry, MonthlySummary):
            await self.session.execute(delete(model).where(model.employee_id == employee_id))
        accounts = await self.session.execute(
            delete(UserAccount).where(UserAccount.linked_employee_id == employee_id)
        )

        await self.session.delete(employee)
        await commit_or_conflict(self.session, "Employee is still referenced")

        logger.info(
            "Employee deleted: id=%s accounts_removed=%d by=%s",
            employee_id,
            accounts.rowcount,
            principal.user_id,
        )
