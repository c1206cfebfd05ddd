"""Monthly payroll summary model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workforce_engine.models.base import Base, TimestampMixin

_ZERO = Decimal("0")


class MonthlySummary(Base, TimestampMixin):
    """Derived monthly roll-up of an employee's timesheets.

    Only the monthly aggregator writes the totals; the record is regenerated
    or finalized, never edited by hand.
    """

    __tablename__ = "monthly_summary"

    summary_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)

    total_regular_hours: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False, default=_ZERO)
    total_ot_hours: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False, default=_ZERO)
    total_vacation_hours: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False, default=_ZERO)
    total_holiday_hours: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False, default=_ZERO)
    total_payable_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=_ZERO)

    # Breakdown
    regular_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=_ZERO)
    ot_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=_ZERO)
    vacation_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=_ZERO)
    holiday_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=_ZERO)

    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")
    generated_by: Mapped[UUID] = mapped_column(
        ForeignKey("user_account.user_id", ondelete="RESTRICT"),
        nullable=False,
    )
    finalized_at: Mapped[datetime | None] = mapped_column(nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    __table_args__ = (
        UniqueConstraint("employee_id", "year", "month", name="monthly_summary_period_unique"),
        CheckConstraint("month >= 1 AND month <= 12", name="monthly_summary_month_check"),
        CheckConstraint("year >= 2020 AND year <= 2030", name="monthly_summary_year_check"),
        CheckConstraint(
            "status IN ('draft', 'finalized', 'paid')",
            name="monthly_summary_status_check",
        ),
        Index("ix_monthly_summary_period", "year", "month"),
    )
