"""Timesheet service - daily time entries and their lifecycle."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_engine.calculators.time_calculator import (
    DEFAULT_REGULAR_HOURS,
    MAX_BREAK_MINUTES,
    calculate_hours,
    is_valid_time,
)
from workforce_engine.database import commit_or_conflict
from workforce_engine.errors import ConflictError, NotFoundError, ValidationError, null_field_errors
from workforce_engine.models import Employee, TimesheetEntry
from workforce_engine.services.access_policy import AccessPolicy, Action, Principal
from workforce_engine.services.state_machine import TimesheetStateMachine, TimesheetStatus

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Timesheet already exists for this date and employee"

# Fields a caller may change through update; derived hours are never accepted
EDITABLE_FIELDS = (
    "start_time",
    "end_time",
    "break_time",
    "is_vacation_work",
    "is_holiday_work",
    "notes",
    "status",
)
_HOUR_INPUTS = ("start_time", "end_time", "break_time")
REQUIRED_FIELDS = ("start_time", "end_time", "break_time", "is_vacation_work", "is_holiday_work", "status")


def _validate_fields(values: dict[str, Any]) -> None:
    errors = null_field_errors(values, REQUIRED_FIELDS)
    if errors:
        raise ValidationError(errors)
    for name in ("start_time", "end_time"):
        if name in values and not is_valid_time(values[name]):
            errors.append({"field": name, "message": f"{name} must be in HH:MM format"})
    if "break_time" in values:
        brk = values["break_time"]
        if brk < 0 or brk > MAX_BREAK_MINUTES:
            errors.append(
                {"field": "break_time", "message": f"break_time must be 0-{MAX_BREAK_MINUTES} minutes"}
            )
    notes = values.get("notes")
    if notes is not None and len(notes) > 500:
        errors.append({"field": "notes", "message": "Notes cannot exceed 500 characters"})
    if errors:
        raise ValidationError(errors)


class TimesheetService:
    """Service for timesheet entries.

    Lifecycle rules live in ``TimesheetStateMachine``; who may do what lives
    in ``AccessPolicy``. Derived hours are recomputed here, before every
    write that touches start/end/break.
    """

    def __init__(
        self,
        session: AsyncSession,
        regular_hours_threshold: Decimal = DEFAULT_REGULAR_HOURS,
    ):
        self.session = session
        self.regular_hours_threshold = regular_hours_threshold

    def _recalculate(self, entry: TimesheetEntry) -> None:
        result = calculate_hours(
            entry.start_time,
            entry.end_time,
            entry.break_time or 0,
            self.regular_hours_threshold,
        )
        entry.total_hours_worked = result.hours_worked
        entry.ot_hours = result.ot_hours

    async def _load(self, principal: Principal, timesheet_id: UUID) -> TimesheetEntry:
        entry = await self.session.get(TimesheetEntry, timesheet_id)
        if entry is None:
            raise AccessPolicy.missing(principal, "Timesheet", timesheet_id)
        return entry

    async def list_timesheets(
        self,
        principal: Principal,
        employee_id: UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        status: str | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[TimesheetEntry], int]:
        """List timesheets, newest first. Employees only ever see their own."""
        employee_id = AccessPolicy.scope_employee_id(principal, employee_id)

        query = select(TimesheetEntry)
        if employee_id is not None:
            query = query.where(TimesheetEntry.employee_id == employee_id)
        if start_date is not None:
            query = query.where(TimesheetEntry.work_date >= start_date)
        if end_date is not None:
            query = query.where(TimesheetEntry.work_date <= end_date)
        if status:
            query = query.where(TimesheetEntry.status == status)

        count_query = select(func.count()).select_from(query.subquery())
        total = await self.session.scalar(count_query) or 0

        query = query.order_by(TimesheetEntry.work_date.desc(), TimesheetEntry.created_at.desc())
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def list_for_employee(
        self,
        principal: Principal,
        employee_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[TimesheetEntry], int]:
        """Timesheets of one employee (admin/manager view)."""
        AccessPolicy.enforce(principal, Action.VIEW_EMPLOYEES)
        return await self.list_timesheets(
            principal,
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            page=page,
            page_size=page_size,
        )

    async def get_timesheet(self, principal: Principal, timesheet_id: UUID) -> TimesheetEntry:
        entry = await self._load(principal, timesheet_id)
        AccessPolicy.enforce(principal, Action.VIEW_ENTRY, entry.employee_id)
        return entry

    async def create_timesheet(
        self,
        principal: Principal,
        *,
        employee_id: UUID,
        work_date: date,
        start_time: str,
        end_time: str,
        break_time: int = 0,
        is_vacation_work: bool = False,
        is_holiday_work: bool = False,
        notes: str | None = None,
    ) -> TimesheetEntry:
        """Create a draft entry. One entry per employee and date."""
        AccessPolicy.enforce(principal, Action.CREATE_ENTRY, employee_id)
        _validate_fields(
            {"start_time": start_time, "end_time": end_time, "break_time": break_time, "notes": notes}
        )

        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)

        existing = await self.session.scalar(
            select(TimesheetEntry.timesheet_id).where(
                TimesheetEntry.employee_id == employee_id,
                TimesheetEntry.work_date == work_date,
            )
        )
        if existing is not None:
            raise ConflictError(DUPLICATE_MESSAGE)

        entry = TimesheetEntry(
            employee_id=employee_id,
            work_date=work_date,
            start_time=start_time,
            end_time=end_time,
            break_time=break_time,
            is_vacation_work=is_vacation_work,
            is_holiday_work=is_holiday_work,
            notes=notes,
            status=TimesheetStatus.DRAFT.value,
            created_by=principal.user_id,
        )
        self._recalculate(entry)
        self.session.add(entry)
        await commit_or_conflict(self.session, DUPLICATE_MESSAGE)

        logger.info(
            "Timesheet created: id=%s employee=%s date=%s hours=%s",
            entry.timesheet_id,
            employee_id,
            work_date,
            entry.total_hours_worked,
        )
        return entry

    async def update_timesheet(
        self,
        principal: Principal,
        timesheet_id: UUID,
        changes: dict[str, Any],
    ) -> TimesheetEntry:
        """Apply field changes.

        Owners may only edit draft or rejected entries. A ``status`` in the
        changes must be a valid lifecycle transition; moving to approved or
        rejected requires reviewer rights. This is how timesheets get
        rejected.
        """
        entry = await self._load(principal, timesheet_id)
        AccessPolicy.enforce(
            principal,
            Action.EDIT_ENTRY,
            entry.employee_id,
            entry.status,
            TimesheetStateMachine,
        )

        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        _validate_fields(changes)

        new_status = changes.pop("status", None)
        if new_status is not None and new_status != entry.status:
            TimesheetStateMachine.validate_transition(entry.status, new_status)
            if new_status in TimesheetStateMachine.REVIEW_STATUSES:
                AccessPolicy.enforce(principal, Action.REVIEW_ENTRY)
            else:
                AccessPolicy.enforce(principal, Action.SUBMIT_ENTRY, entry.employee_id)
            entry.status = TimesheetStatus(new_status).value

        recalc = any(k in changes and changes[k] != getattr(entry, k) for k in _HOUR_INPUTS)
        for field, value in changes.items():
            setattr(entry, field, value)
        if recalc:
            self._recalculate(entry)

        entry.last_modified_by = principal.user_id
        await commit_or_conflict(self.session, DUPLICATE_MESSAGE)

        logger.info("Timesheet updated: id=%s status=%s", entry.timesheet_id, entry.status)
        return entry

    async def submit_timesheet(self, principal: Principal, timesheet_id: UUID) -> TimesheetEntry:
        entry = await self._load(principal, timesheet_id)
        AccessPolicy.enforce(principal, Action.SUBMIT_ENTRY, entry.employee_id)
        TimesheetStateMachine.validate_submit(entry.status)

        entry.status = TimesheetStatus.SUBMITTED.value
        entry.last_modified_by = principal.user_id
        await self.session.commit()

        logger.info("Timesheet submitted: id=%s", entry.timesheet_id)
        return entry

    async def approve_timesheet(self, principal: Principal, timesheet_id: UUID) -> TimesheetEntry:
        """Approve a submitted or rejected entry. Only last_modified_by is stamped."""
        entry = await self._load(principal, timesheet_id)
        AccessPolicy.enforce(principal, Action.REVIEW_ENTRY)
        TimesheetStateMachine.validate_approve(entry.status)

        entry.status = TimesheetStatus.APPROVED.value
        entry.last_modified_by = principal.user_id
        await self.session.commit()

        logger.info("Timesheet approved: id=%s by=%s", entry.timesheet_id, principal.user_id)
        return entry

    async def delete_timesheet(self, principal: Principal, timesheet_id: UUID) -> None:
        entry = await self._load(principal, timesheet_id)
        AccessPolicy.enforce(
            principal,
            Action.DELETE_ENTRY,
            entry.employee_id,
            entry.status,
            TimesheetStateMachine,
        )
        await self.session.delete(entry)
        await self.session.commit()

        logger.info("Timesheet deleted: id=%s by=%s", timesheet_id, principal.user_id)
