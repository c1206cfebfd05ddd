"""Employee model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from workforce_engine.models.base import Base, TimestampMixin

EMPLOYEE_STATUSES = ("active", "inactive", "terminated")


class Employee(Base, TimestampMixin):
    """Employee record with pay rates.

    ``employee_code`` is the human-facing identifier (always upper case);
    ``employee_id`` is the surrogate key every other table references.
    """

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[str] = mapped_column(String(100), nullable=False)
    date_of_employment: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)

    pay_rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    ot_rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    vacation_pay_rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Break time configuration
    break_is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    break_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    # Personal info
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(String, nullable=True)

    # Used to verify identity on self-service password reset
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'inactive', 'terminated')",
            name="employee_status_check",
        ),
        CheckConstraint(
            "pay_rate >= 0 AND ot_rate >= 0 AND vacation_pay_rate >= 0",
            name="employee_rates_check",
        ),
        CheckConstraint("break_duration >= 0", name="employee_break_duration_check"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == "active"
