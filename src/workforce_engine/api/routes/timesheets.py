"""Timesheet API endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from workforce_engine.api.dependencies import CurrentPrincipal, DbSession, SettingsDep
from workforce_engine.api.schemas import (
    ErrorResponse,
    TimesheetCreate,
    TimesheetListResponse,
    TimesheetResponse,
    TimesheetStatusName,
    TimesheetUpdate,
)
from workforce_engine.errors import ValidationError
from workforce_engine.services.timesheet_service import TimesheetService

router = APIRouter(prefix="/timesheets", tags=["timesheets"])


def _page(items, total: int, page: int, page_size: int) -> TimesheetListResponse:
    return TimesheetListResponse(
        items=[TimesheetResponse.model_validate(t) for t in items],
        total=total,
        page=page,
        page_size=page_size,
    )


# ============================================================================
# Timesheet CRUD
# ============================================================================


@router.get(
    "",
    response_model=TimesheetListResponse,
    responses={403: {"model": ErrorResponse}},
)
async def list_timesheets(
    db: DbSession,
    principal: CurrentPrincipal,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 10,
    employee_id: UUID | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    status_filter: Annotated[TimesheetStatusName | None, Query(alias="status")] = None,
) -> TimesheetListResponse:
    """List timesheets. Employees only see their own."""
    items, total = await TimesheetService(db).list_timesheets(
        principal,
        employee_id=employee_id,
        start_date=start_date,
        end_date=end_date,
        status=status_filter,
        page=page,
        page_size=page_size,
    )
    return _page(items, total, page, page_size)


@router.get(
    "/employee/{employee_id}",
    response_model=TimesheetListResponse,
    responses={403: {"model": ErrorResponse}},
)
async def list_employee_timesheets(
    db: DbSession,
    principal: CurrentPrincipal,
    employee_id: Annotated[UUID, Path()],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 10,
    start_date: date | None = None,
    end_date: date | None = None,
) -> TimesheetListResponse:
    items, total = await TimesheetService(db).list_for_employee(
        principal,
        employee_id,
        start_date=start_date,
        end_date=end_date,
        page=page,
        page_size=page_size,
    )
    return _page(items, total, page, page_size)


@router.post(
    "",
    response_model=TimesheetResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_timesheet(
    db: DbSession,
    settings: SettingsDep,
    principal: CurrentPrincipal,
    payload: TimesheetCreate,
) -> TimesheetResponse:
    """Create a draft timesheet. Defaults to the caller's own employee record."""
    values = payload.model_dump()
    if values["employee_id"] is None:
        values["employee_id"] = principal.linked_employee_id
    if values["employee_id"] is None:
        raise ValidationError("Employee ID is required", field="employee_id")

    service = TimesheetService(db, settings.regular_hours_threshold)
    entry = await service.create_timesheet(principal, **values)
    return TimesheetResponse.model_validate(entry)


@router.get(
    "/{timesheet_id}",
    response_model=TimesheetResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_timesheet(
    db: DbSession,
    principal: CurrentPrincipal,
    timesheet_id: Annotated[UUID, Path()],
) -> TimesheetResponse:
    entry = await TimesheetService(db).get_timesheet(principal, timesheet_id)
    return TimesheetResponse.model_validate(entry)


@router.put(
    "/{timesheet_id}",
    response_model=TimesheetResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_timesheet(
    db: DbSession,
    settings: SettingsDep,
    principal: CurrentPrincipal,
    timesheet_id: Annotated[UUID, Path()],
    payload: TimesheetUpdate,
) -> TimesheetResponse:
    """Update a timesheet. Setting ``status`` to rejected is how reviewers reject."""
    service = TimesheetService(db, settings.regular_hours_threshold)
    entry = await service.update_timesheet(
        principal, timesheet_id, payload.model_dump(exclude_unset=True)
    )
    return TimesheetResponse.model_validate(entry)


@router.delete(
    "/{timesheet_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_timesheet(
    db: DbSession,
    principal: CurrentPrincipal,
    timesheet_id: Annotated[UUID, Path()],
) -> None:
    await TimesheetService(db).delete_timesheet(principal, timesheet_id)


# ============================================================================
# Timesheet State Transitions
# ============================================================================


@router.put(
    "/{timesheet_id}/submit",
    response_model=TimesheetResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def submit_timesheet(
    db: DbSession,
    principal: CurrentPrincipal,
    timesheet_id: Annotated[UUID, Path()],
) -> TimesheetResponse:
    entry = await TimesheetService(db).submit_timesheet(principal, timesheet_id)
    return TimesheetResponse.model_validate(entry)


@router.put(
    "/{timesheet_id}/approve",
    response_model=TimesheetResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def approve_timesheet(
    db: DbSession,
    principal: CurrentPrincipal,
    timesheet_id: Annotated[UUID, Path()],
) -> TimesheetResponse:
    entry = await TimesheetService(db).approve_timesheet(principal, timesheet_id)
    return TimesheetResponse.model_validate(entry)
