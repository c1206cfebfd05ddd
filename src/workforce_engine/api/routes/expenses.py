"""Expense API endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Path, Query, status

from workforce_engine.api.dependencies import CurrentPrincipal, DbSession
from workforce_engine.api.schemas import (
    ErrorResponse,
    ExpenseCategoryName,
    ExpenseCreate,
    ExpenseListResponse,
    ExpenseRejectRequest,
    ExpenseResponse,
    ExpenseUpdate,
)
from workforce_engine.errors import ValidationError
from workforce_engine.services.expense_service import ExpenseService

router = APIRouter(prefix="/expenses", tags=["expenses"])


# ============================================================================
# Expense CRUD
# ============================================================================


@router.get(
    "",
    response_model=ExpenseListResponse,
    responses={403: {"model": ErrorResponse}},
)
async def list_expenses(
    db: DbSession,
    principal: CurrentPrincipal,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 10,
    employee_id: UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
    category: ExpenseCategoryName | None = None,
) -> ExpenseListResponse:
    """List expenses. Employees only see their own."""
    items, total = await ExpenseService(db).list_expenses(
        principal,
        employee_id=employee_id,
        start_date=start_date,
        end_date=end_date,
        status=status_filter,
        category=category,
        page=page,
        page_size=page_size,
    )
    return ExpenseListResponse(
        items=[ExpenseResponse.model_validate(e) for e in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post(
    "",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_expense(
    db: DbSession,
    principal: CurrentPrincipal,
    payload: ExpenseCreate,
) -> ExpenseResponse:
    """Create a draft expense. Defaults to the caller's own employee record."""
    values = payload.model_dump()
    if values["employee_id"] is None:
        values["employee_id"] = principal.linked_employee_id
    if values["employee_id"] is None:
        raise ValidationError("Employee ID is required", field="employee_id")

    expense = await ExpenseService(db).create_expense(principal, **values)
    return ExpenseResponse.model_validate(expense)


@router.get(
    "/{expense_id}",
    response_model=ExpenseResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_expense(
    db: DbSession,
    principal: CurrentPrincipal,
    expense_id: Annotated[UUID, Path()],
) -> ExpenseResponse:
    expense = await ExpenseService(db).get_expense(principal, expense_id)
    return ExpenseResponse.model_validate(expense)


@router.put(
    "/{expense_id}",
    response_model=ExpenseResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_expense(
    db: DbSession,
    principal: CurrentPrincipal,
    expense_id: Annotated[UUID, Path()],
    payload: ExpenseUpdate,
) -> ExpenseResponse:
    expense = await ExpenseService(db).update_expense(
        principal, expense_id, payload.model_dump(exclude_unset=True)
    )
    return ExpenseResponse.model_validate(expense)


@router.delete(
    "/{expense_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_expense(
    db: DbSession,
    principal: CurrentPrincipal,
    expense_id: Annotated[UUID, Path()],
) -> None:
    await ExpenseService(db).delete_expense(principal, expense_id)


# ============================================================================
# Expense State Transitions
# ============================================================================


@router.put(
    "/{expense_id}/submit",
    response_model=ExpenseResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def submit_expense(
    db: DbSession,
    principal: CurrentPrincipal,
    expense_id: Annotated[UUID, Path()],
) -> ExpenseResponse:
    expense = await ExpenseService(db).submit_expense(principal, expense_id)
    return ExpenseResponse.model_validate(expense)


@router.put(
    "/{expense_id}/approve",
    response_model=ExpenseResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def approve_expense(
    db: DbSession,
    principal: CurrentPrincipal,
    expense_id: Annotated[UUID, Path()],
) -> ExpenseResponse:
    expense = await ExpenseService(db).approve_expense(principal, expense_id)
    return ExpenseResponse.model_validate(expense)


@router.put(
    "/{expense_id}/reject",
    response_model=ExpenseResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def reject_expense(
    db: DbSession,
    principal: CurrentPrincipal,
    expense_id: Annotated[UUID, Path()],
    payload: Annotated[ExpenseRejectRequest | None, Body()] = None,
) -> ExpenseResponse:
    reason = payload.rejection_reason if payload else None
    expense = await ExpenseService(db).reject_expense(principal, expense_id, reason)
    return ExpenseResponse.model_validate(expense)
