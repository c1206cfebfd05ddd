"""Daily timesheet entry model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from workforce_engine.models.base import Base, TimestampMixin


class TimesheetEntry(Base, TimestampMixin):
    """Hours worked by one employee on one date.

    ``total_hours_worked`` and ``ot_hours`` are derived from start/end/break
    by the time calculator and are never written from client input.
    """

    __tablename__ = "timesheet_entry"

    timesheet_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    break_time: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_hours_worked: Mapped[Decimal] = mapped_column(
        Numeric(8, 4), nullable=False, default=Decimal("0")
    )
    ot_hours: Mapped[Decimal] = mapped_column(Numeric(8, 4), nullable=False, default=Decimal("0"))
    is_vacation_work: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_holiday_work: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")
    created_by: Mapped[UUID] = mapped_column(
        ForeignKey("user_account.user_id", ondelete="RESTRICT"),
        nullable=False,
    )
    last_modified_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("user_account.user_id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint("employee_id", "work_date", name="timesheet_employee_date_unique"),
        CheckConstraint(
            "status IN ('draft', 'submitted', 'approved', 'rejected')",
            name="timesheet_status_check",
        ),
        CheckConstraint("break_time >= 0 AND break_time <= 480", name="timesheet_break_check"),
        CheckConstraint(
            "total_hours_worked >= 0 AND total_hours_worked <= 24",
            name="timesheet_hours_check",
        ),
        Index("ix_timesheet_work_date", "work_date"),
        Index("ix_timesheet_status", "status"),
    )
