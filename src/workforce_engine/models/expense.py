"""Daily expense entry model."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from workforce_engine.models.base import Base, TimestampMixin

EXPENSE_CATEGORIES = ("transport", "meals", "accommodation", "supplies", "other")
EXPENSE_CURRENCIES = ("LKR", "USD", "EUR")


class ExpenseEntry(Base, TimestampMixin):
    """Reimbursable expense incurred by an employee on a date."""

    __tablename__ = "expense_entry"

    expense_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False, default="other")
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="LKR")
    # Opaque reference (URL or path) to the receipt
    receipt: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")
    approved_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("user_account.user_id", ondelete="SET NULL"),
        nullable=True,
    )
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_by: Mapped[UUID] = mapped_column(
        ForeignKey("user_account.user_id", ondelete="RESTRICT"),
        nullable=False,
    )
    last_modified_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("user_account.user_id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint(
            "category IN ('transport', 'meals', 'accommodation', 'supplies', 'other')",
            name="expense_category_check",
        ),
        CheckConstraint("currency IN ('LKR', 'USD', 'EUR')", name="expense_currency_check"),
        CheckConstraint(
            "status IN ('draft', 'submitted', 'approved', 'rejected', 'reimbursed')",
            name="expense_status_check",
        ),
        CheckConstraint("amount >= 0", name="expense_amount_check"),
        Index("ix_expense_employee_date", "employee_id", "expense_date"),
        Index("ix_expense_status", "status"),
    )
