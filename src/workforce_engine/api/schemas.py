"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from workforce_engine.calculators.time_calculator import MAX_BREAK_MINUTES, TIME_PATTERN

RoleName = Literal["admin", "manager", "employee"]
EmployeeStatusName = Literal["active", "inactive", "terminated"]
TimesheetStatusName = Literal["draft", "submitted", "approved", "rejected"]
ExpenseCategoryName = Literal["transport", "meals", "accommodation", "supplies", "other"]


# ============================================================================
# Common schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """A single field-level error."""

    field: str | None = None
    message: str


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    detail: str
    code: str | None = None
    errors: list[ErrorDetail] | None = None


class MessageResponse(BaseModel):
    """Schema for plain acknowledgements."""

    message: str


# ============================================================================
# Auth schemas
# ============================================================================


class LoginRequest(BaseModel):
    """Login with username or email."""

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserResponse(BaseModel):
    """Schema for user account response. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    username: str
    email: str
    role: str
    linked_employee_id: UUID | None = None
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class TokenResponse(BaseModel):
    """Bearer token issued on login."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class EmployeeIdentityRequest(BaseModel):
    """Employee code and date of birth for self-service password reset."""

    employee_code: str = Field(min_length=1)
    date_of_birth: date


class EmployeePasswordResetRequest(EmployeeIdentityRequest):
    new_password: str


class EmployeeIdentityResponse(BaseModel):
    verified: bool
    username: str


class PasswordResetRequest(BaseModel):
    """Ask for a reset token for the account with this email."""

    email: str = Field(min_length=3, max_length=255)


class PasswordResetRequestResponse(BaseModel):
    """Reset token issued on request.

    No mail is sent, so the token is returned to the caller. Token and expiry
    are empty when the email matches no account.
    """

    message: str
    reset_token: str | None = None
    expires_at: datetime | None = None


class PasswordResetTokenRequest(BaseModel):
    token: str = Field(min_length=1)


class PasswordResetWithTokenRequest(PasswordResetTokenRequest):
    new_password: str


class ResetAccount(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    username: str
    email: str


class PasswordResetTokenResponse(BaseModel):
    valid: bool
    user: ResetAccount


# ============================================================================
# Employee schemas
# ============================================================================


class EmployeeCreate(BaseModel):
    """Schema for creating an employee. ``password`` with ``email`` also creates a login."""

    employee_code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=100)
    position: str = Field(min_length=1, max_length=100)
    date_of_employment: date | None = None
    pay_rate: Decimal = Field(ge=0)
    ot_rate: Decimal = Field(ge=0)
    vacation_pay_rate: Decimal = Field(ge=0)
    break_is_paid: bool = False
    break_duration: int = Field(default=0, ge=0)
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    date_of_birth: date | None = None
    password: str | None = None


class EmployeeUpdate(BaseModel):
    """Schema for updating an employee. Only set fields are applied."""

    employee_code: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, min_length=1, max_length=100)
    position: str | None = Field(default=None, min_length=1, max_length=100)
    date_of_employment: date | None = None
    pay_rate: Decimal | None = Field(default=None, ge=0)
    ot_rate: Decimal | None = Field(default=None, ge=0)
    vacation_pay_rate: Decimal | None = Field(default=None, ge=0)
    break_is_paid: bool | None = None
    break_duration: int | None = Field(default=None, ge=0)
    status: EmployeeStatusName | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    date_of_birth: date | None = None


class EmployeeResponse(BaseModel):
    """Schema for employee response."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    employee_code: str
    name: str
    position: str
    date_of_employment: date
    pay_rate: Decimal
    ot_rate: Decimal
    vacation_pay_rate: Decimal
    break_is_paid: bool
    break_duration: int
    status: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    date_of_birth: date | None = None
    created_at: datetime
    updated_at: datetime


class EmployeeListResponse(BaseModel):
    """Schema for listing employees."""

    items: list[EmployeeResponse]
    total: int
    page: int
    page_size: int


# ============================================================================
# User schemas
# ============================================================================


class UserCreate(BaseModel):
    """Schema for creating a user account."""

    username: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    password: str
    role: RoleName = "employee"
    linked_employee_id: UUID | None = None


class UserUpdate(BaseModel):
    """Schema for updating a user account."""

    username: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    password: str | None = None
    role: RoleName | None = None
    linked_employee_id: UUID | None = None
    is_active: bool | None = None


class UserListResponse(BaseModel):
    """Schema for listing users."""

    items: list[UserResponse]
    total: int
    page: int
    page_size: int


# ============================================================================
# Timesheet schemas
# ============================================================================


class TimesheetCreate(BaseModel):
    """Schema for creating a timesheet entry.

    Hours worked and overtime are always computed server side; values sent
    for them are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    employee_id: UUID | None = None
    work_date: date
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    break_time: int = Field(default=0, ge=0, le=MAX_BREAK_MINUTES)
    is_vacation_work: bool = False
    is_holiday_work: bool = False
    notes: str | None = Field(default=None, max_length=500)


class TimesheetUpdate(BaseModel):
    """Schema for updating a timesheet entry. ``status`` drives review transitions."""

    model_config = ConfigDict(extra="ignore")

    start_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    end_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    break_time: int | None = Field(default=None, ge=0, le=MAX_BREAK_MINUTES)
    is_vacation_work: bool | None = None
    is_holiday_work: bool | None = None
    notes: str | None = Field(default=None, max_length=500)
    status: TimesheetStatusName | None = None


class TimesheetResponse(BaseModel):
    """Schema for timesheet entry response."""

    model_config = ConfigDict(from_attributes=True)

    timesheet_id: UUID
    employee_id: UUID
    work_date: date
    start_time: str
    end_time: str
    break_time: int
    total_hours_worked: Decimal
    ot_hours: Decimal
    is_vacation_work: bool
    is_holiday_work: bool
    notes: str | None = None
    status: str
    created_by: UUID
    last_modified_by: UUID | None = None
    created_at: datetime
    updated_at: datetime


class TimesheetListResponse(BaseModel):
    """Schema for listing timesheet entries."""

    items: list[TimesheetResponse]
    total: int
    page: int
    page_size: int


# ============================================================================
# Expense schemas
# ============================================================================


class ExpenseCreate(BaseModel):
    """Schema for creating an expense entry."""

    employee_id: UUID | None = None
    expense_date: date
    category: ExpenseCategoryName
    description: str = Field(min_length=1, max_length=500)
    amount: Decimal = Field(ge=0)
    currency: str = "LKR"
    receipt: str | None = None
    notes: str | None = Field(default=None, max_length=1000)


class ExpenseUpdate(BaseModel):
    """Schema for updating an expense entry. Status is changed only via lifecycle routes."""

    model_config = ConfigDict(extra="ignore")

    expense_date: date | None = None
    category: ExpenseCategoryName | None = None
    description: str | None = Field(default=None, min_length=1, max_length=500)
    amount: Decimal | None = Field(default=None, ge=0)
    currency: str | None = None
    receipt: str | None = None
    notes: str | None = Field(default=None, max_length=1000)


class ExpenseRejectRequest(BaseModel):
    rejection_reason: str | None = Field(default=None, max_length=500)


class ExpenseResponse(BaseModel):
    """Schema for expense entry response."""

    model_config = ConfigDict(from_attributes=True)

    expense_id: UUID
    employee_id: UUID
    expense_date: date
    category: str
    description: str
    amount: Decimal
    currency: str
    receipt: str | None = None
    notes: str | None = None
    status: str
    approved_by: UUID | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None
    created_by: UUID
    last_modified_by: UUID | None = None
    created_at: datetime
    updated_at: datetime


class ExpenseListResponse(BaseModel):
    """Schema for listing expense entries."""

    items: list[ExpenseResponse]
    total: int
    page: int
    page_size: int


# ============================================================================
# Report schemas
# ============================================================================


class MonthlySummaryResponse(BaseModel):
    """Schema for monthly summary response."""

    model_config = ConfigDict(from_attributes=True)

    summary_id: UUID
    employee_id: UUID
    year: int
    month: int
    total_regular_hours: Decimal
    total_ot_hours: Decimal
    total_vacation_hours: Decimal
    total_holiday_hours: Decimal
    total_payable_amount: Decimal
    regular_pay: Decimal
    ot_pay: Decimal
    vacation_pay: Decimal
    holiday_pay: Decimal
    status: str
    generated_by: UUID
    finalized_at: datetime | None = None
    paid_at: datetime | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class MonthlySummaryListResponse(BaseModel):
    """Schema for listing monthly summaries."""

    items: list[MonthlySummaryResponse]
    total: int
    page: int
    page_size: int


class GenerateReportResponse(BaseModel):
    """Result of a batch generation."""

    year: int
    month: int
    generated: int
    items: list[MonthlySummaryResponse]


def error_body(detail: str, code: str, errors: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    """JSON body shared by the exception handlers."""
    body: dict[str, Any] = {"detail": detail, "code": code}
    if errors is not None:
        body["errors"] = errors
    return body
