"""Monthly report API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from workforce_engine.api.dependencies import CurrentPrincipal, DbSession
from workforce_engine.api.schemas import (
    ErrorResponse,
    GenerateReportResponse,
    MonthlySummaryListResponse,
    MonthlySummaryResponse,
)
from workforce_engine.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])

Year = Annotated[int, Path()]
Month = Annotated[int, Path()]


# ============================================================================
# Generation
# ============================================================================


@router.post(
    "/generate/{year}/{month}",
    response_model=GenerateReportResponse,
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def generate_monthly_reports(
    db: DbSession,
    principal: CurrentPrincipal,
    year: Year,
    month: Month,
) -> GenerateReportResponse:
    """Generate or refresh summaries for all active employees. Idempotent."""
    summaries = await ReportService(db).generate_monthly(principal, year, month)
    return GenerateReportResponse(
        year=year,
        month=month,
        generated=len(summaries),
        items=[MonthlySummaryResponse.model_validate(s) for s in summaries],
    )


@router.post(
    "/generate/{year}/{month}/{employee_id}",
    response_model=MonthlySummaryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def generate_employee_report(
    db: DbSession,
    principal: CurrentPrincipal,
    year: Year,
    month: Month,
    employee_id: Annotated[UUID, Path()],
) -> MonthlySummaryResponse:
    summary = await ReportService(db).generate_for_employee(principal, employee_id, year, month)
    return MonthlySummaryResponse.model_validate(summary)


# ============================================================================
# Summaries
# ============================================================================


@router.get(
    "/monthly",
    response_model=MonthlySummaryListResponse,
    responses={403: {"model": ErrorResponse}},
)
async def list_monthly_summaries(
    db: DbSession,
    principal: CurrentPrincipal,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 10,
    year: int | None = None,
    month: Annotated[int | None, Query(ge=1, le=12)] = None,
    employee_id: UUID | None = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> MonthlySummaryListResponse:
    items, total = await ReportService(db).list_summaries(
        principal,
        year=year,
        month=month,
        employee_id=employee_id,
        status=status_filter,
        page=page,
        page_size=page_size,
    )
    return MonthlySummaryListResponse(
        items=[MonthlySummaryResponse.model_validate(s) for s in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get(
    "/monthly/{employee_id}/{year}/{month}",
    response_model=MonthlySummaryResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_monthly_summary(
    db: DbSession,
    principal: CurrentPrincipal,
    employee_id: Annotated[UUID, Path()],
    year: Year,
    month: Month,
) -> MonthlySummaryResponse:
    """One employee's summary. Employees may only read their own."""
    summary = await ReportService(db).get_monthly_summary(principal, employee_id, year, month)
    return MonthlySummaryResponse.model_validate(summary)


@router.put(
    "/monthly/{summary_id}/finalize",
    response_model=MonthlySummaryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def finalize_monthly_summary(
    db: DbSession,
    principal: CurrentPrincipal,
    summary_id: Annotated[UUID, Path()],
) -> MonthlySummaryResponse:
    summary = await ReportService(db).finalize_summary(principal, summary_id)
    return MonthlySummaryResponse.model_validate(summary)


# ============================================================================
# Export
# ============================================================================


@router.get(
    "/export/{year}/{month}",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}, 403: {"model": ErrorResponse}},
)
async def export_monthly_report(
    db: DbSession,
    principal: CurrentPrincipal,
    year: Year,
    month: Month,
) -> Response:
    """Download a month's summaries as CSV."""
    content = await ReportService(db).export_monthly_csv(principal, year, month)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="monthly-report-{year}-{month}.csv"'},
    )
