"""Employee API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from workforce_engine.api.dependencies import CurrentPrincipal, DbSession
from workforce_engine.api.schemas import (
    EmployeeCreate,
    EmployeeListResponse,
    EmployeeResponse,
    EmployeeStatusName,
    EmployeeUpdate,
    ErrorResponse,
)
from workforce_engine.services.employee_service import EmployeeService

router = APIRouter(prefix="/employees", tags=["employees"])


# ============================================================================
# Employee CRUD
# ============================================================================


@router.get(
    "",
    response_model=EmployeeListResponse,
    responses={403: {"model": ErrorResponse}},
)
async def list_employees(
    db: DbSession,
    principal: CurrentPrincipal,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 10,
    search: str | None = None,
    status_filter: Annotated[EmployeeStatusName | None, Query(alias="status")] = None,
) -> EmployeeListResponse:
    """List employees with optional search and status filter."""
    employees, total = await EmployeeService(db).list_employees(
        principal, search=search, status=status_filter, page=page, page_size=page_size
    )
    return EmployeeListResponse(
        items=[EmployeeResponse.model_validate(e) for e in employees],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_employee(
    db: DbSession,
    principal: CurrentPrincipal,
    payload: EmployeeCreate,
) -> EmployeeResponse:
    """Create an employee, optionally with a linked login account."""
    employee = await EmployeeService(db).create_employee(principal, **payload.model_dump())
    return EmployeeResponse.model_validate(employee)


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_employee(
    db: DbSession,
    principal: CurrentPrincipal,
    employee_id: Annotated[UUID, Path()],
) -> EmployeeResponse:
    employee = await EmployeeService(db).get_employee(principal, employee_id)
    return EmployeeResponse.model_validate(employee)


@router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_employee(
    db: DbSession,
    principal: CurrentPrincipal,
    employee_id: Annotated[UUID, Path()],
    payload: EmployeeUpdate,
) -> EmployeeResponse:
    employee = await EmployeeService(db).update_employee(
        principal, employee_id, payload.model_dump(exclude_unset=True)
    )
    return EmployeeResponse.model_validate(employee)


@router.delete(
    "/{employee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_employee(
    db: DbSession,
    principal: CurrentPrincipal,
    employee_id: Annotated[UUID, Path()],
) -> None:
    await EmployeeService(db).delete_employee(principal, employee_id)


# ============================================================================
# Employee status
# ============================================================================


@router.put(
    "/{employee_id}/activate",
    response_model=EmployeeResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def activate_employee(
    db: DbSession,
    principal: CurrentPrincipal,
    employee_id: Annotated[UUID, Path()],
) -> EmployeeResponse:
    employee = await EmployeeService(db).activate_employee(principal, employee_id)
    return EmployeeResponse.model_validate(employee)


@router.put(
    "/{employee_id}/deactivate",
    response_model=EmployeeResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def deactivate_employee(
    db: DbSession,
    principal: CurrentPrincipal,
    employee_id: Annotated[UUID, Path()],
) -> EmployeeResponse:
    employee = await EmployeeService(db).deactivate_employee(principal, employee_id)
    return EmployeeResponse.model_validate(employee)
