"""Report service - monthly summary generation, finalization and export.

Generation is idempotent per (employee, year, month): running it again
overwrites the totals of the existing summary instead of adding a second
one. Each employee's summary is committed on its own, so a storage failure
part-way through a batch keeps the summaries already written.
"""

from __future__ import annotations

import calendar
import csv
import io
import logging
from datetime import date
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_engine.calculators.pay_calculator import accumulate_hours, calculate_pay
from workforce_engine.errors import NotFoundError, StorageError, ValidationError
from workforce_engine.models import Employee, MonthlySummary, TimesheetEntry
from workforce_engine.models.base import utcnow
from workforce_engine.services.access_policy import AccessPolicy, Action, Principal
from workforce_engine.services.state_machine import SummaryStateMachine, SummaryStatus

logger = logging.getLogger(__name__)

MIN_YEAR = 2020
MAX_YEAR = 2030

CSV_HEADER = (
    "Employee ID",
    "Name",
    "Position",
    "Regular Hours",
    "OT Hours",
    "Vacation Hours",
    "Holiday Hours",
    "Total Payable",
)


def validate_period(year: int, month: int) -> None:
    """Reject a year outside 2020-2030 or a month outside 1-12."""
    errors = []
    if not MIN_YEAR <= year <= MAX_YEAR:
        errors.append({"field": "year", "message": f"Year must be between {MIN_YEAR} and {MAX_YEAR}"})
    if not 1 <= month <= 12:
        errors.append({"field": "month", "message": "Month must be between 1 and 12"})
    if errors:
        raise ValidationError(errors)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of the month, both inclusive."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


class ReportService:
    """Service for monthly summaries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _upsert_summary(
        self,
        principal: Principal,
        employee: Employee,
        year: int,
        month: int,
    ) -> MonthlySummary:
        """Recompute one employee's month and write it in place."""
        start, end = month_bounds(year, month)
        result = await self.session.execute(
            select(TimesheetEntry).where(
                TimesheetEntry.employee_id == employee.employee_id,
                TimesheetEntry.work_date >= start,
                TimesheetEntry.work_date <= end,
            )
        )
        hours = accumulate_hours(result.scalars().all())
        pay = calculate_pay(hours, employee)

        summary = await self.session.scalar(
            select(MonthlySummary).where(
                MonthlySummary.employee_id == employee.employee_id,
                MonthlySummary.year == year,
                MonthlySummary.month == month,
            )
        )
        if summary is None:
            summary = MonthlySummary(
                employee_id=employee.employee_id,
                year=year,
                month=month,
                status=SummaryStatus.DRAFT.value,
            )
            self.session.add(summary)

        # Status is left as is; a finalized summary keeps its status
        summary.total_regular_hours = hours.regular
        summary.total_ot_hours = hours.overtime
        summary.total_vacation_hours = hours.vacation
        summary.total_holiday_hours = hours.holiday
        summary.regular_pay = pay.regular_pay
        summary.ot_pay = pay.ot_pay
        summary.vacation_pay = pay.vacation_pay
        summary.holiday_pay = pay.holiday_pay
        summary.total_payable_amount = pay.total
        summary.generated_by = principal.user_id
        return summary

    async def _commit_summary(self, summary: MonthlySummary) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(
                "Failed to store monthly summary: employee=%s period=%s-%s",
                summary.employee_id,
                summary.year,
                summary.month,
            )
            raise StorageError("Failed to store monthly summary") from e

    async def generate_monthly(
        self,
        principal: Principal,
        year: int,
        month: int,
    ) -> list[MonthlySummary]:
        """Generate or refresh summaries for every active employee."""
        AccessPolicy.enforce(principal, Action.GENERATE_REPORTS)
        validate_period(year, month)

        result = await self.session.execute(
            select(Employee).where(Employee.status == "active").order_by(Employee.employee_code)
        )
        employees = list(result.scalars().all())

        summaries = []
        for employee in employees:
            summary = await self._upsert_summary(principal, employee, year, month)
            await self._commit_summary(summary)
            summaries.append(summary)

        logger.info(
            "Monthly summaries generated: period=%s-%02d employees=%d by=%s",
            year,
            month,
            len(summaries),
            principal.user_id,
        )
        return summaries

    async def generate_for_employee(
        self,
        principal: Principal,
        employee_id: UUID,
        year: int,
        month: int,
    ) -> MonthlySummary:
        """Generate or refresh a single employee's summary."""
        AccessPolicy.enforce(principal, Action.GENERATE_REPORTS)
        validate_period(year, month)

        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)

        summary = await self._upsert_summary(principal, employee, year, month)
        await self._commit_summary(summary)

        logger.info(
            "Monthly summary generated: employee=%s period=%s-%02d total=%s",
            employee_id,
            year,
            month,
            summary.total_payable_amount,
        )
        return summary

    async def get_monthly_summary(
        self,
        principal: Principal,
        employee_id: UUID,
        year: int,
        month: int,
    ) -> MonthlySummary:
        AccessPolicy.enforce(principal, Action.VIEW_OWN_REPORT, employee_id)
        summary = await self.session.scalar(
            select(MonthlySummary).where(
                MonthlySummary.employee_id == employee_id,
                MonthlySummary.year == year,
                MonthlySummary.month == month,
            )
        )
        if summary is None:
            raise NotFoundError("Monthly summary", (employee_id, year, month))
        return summary

    async def list_summaries(
        self,
        principal: Principal,
        year: int | None = None,
        month: int | None = None,
        employee_id: UUID | None = None,
        status: str | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[MonthlySummary], int]:
        AccessPolicy.enforce(principal, Action.VIEW_REPORTS)

        query = select(MonthlySummary)
        if year is not None:
            query = query.where(MonthlySummary.year == year)
        if month is not None:
            query = query.where(MonthlySummary.month == month)
        if employee_id is not None:
            query = query.where(MonthlySummary.employee_id == employee_id)
        if status:
            query = query.where(MonthlySummary.status == status)

        count_query = select(func.count()).select_from(query.subquery())
        total = await self.session.scalar(count_query) or 0

        query = query.order_by(
            MonthlySummary.year.desc(),
            MonthlySummary.month.desc(),
            MonthlySummary.created_at.desc(),
        )
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def finalize_summary(self, principal: Principal, summary_id: UUID) -> MonthlySummary:
        """Move a draft summary to finalized. There is no way back."""
        AccessPolicy.enforce(principal, Action.GENERATE_REPORTS)
        summary = await self.session.get(MonthlySummary, summary_id)
        if summary is None:
            raise NotFoundError("Monthly summary", summary_id)

        SummaryStateMachine.validate_finalize(summary.status)
        summary.status = SummaryStatus.FINALIZED.value
        summary.finalized_at = utcnow()
        await self.session.commit()

        logger.info("Monthly summary finalized: id=%s by=%s", summary_id, principal.user_id)
        return summary

    async def export_monthly_csv(self, principal: Principal, year: int, month: int) -> str:
        """Render all summaries of a month as CSV, one row per summary."""
        AccessPolicy.enforce(principal, Action.VIEW_REPORTS)
        validate_period(year, month)

        result = await self.session.execute(
            select(MonthlySummary, Employee.employee_code, Employee.name, Employee.position)
            .join(Employee, MonthlySummary.employee_id == Employee.employee_id)
            .where(MonthlySummary.year == year, MonthlySummary.month == month)
            .order_by(Employee.employee_code)
        )

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for summary, code, name, position in result.all():
            writer.writerow(
                [
                    code,
                    name,
                    position,
                    summary.total_regular_hours,
                    summary.total_ot_hours,
                    summary.total_vacation_hours,
                    summary.total_holiday_hours,
                    summary.total_payable_amount,
                ]
            )
        return buffer.getvalue()
