"""Part availability and sufficiency endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Request

from src.api.middleware.rate_limit import READ_LIMIT, limiter
from src.api.routers.auth import CurrentUser, get_current_user
from src.engine.shortage import StockStatus
from src.models.availability import (
    AvailabilityListResponse,
    PartAvailabilityDetailResponse,
    PartAvailabilityResponse,
    SufficiencyRequest,
    SufficiencyResponse,
    SufficiencyResultResponse,
    SufficiencySummary,
)

router = APIRouter(prefix="/api/availability", tags=["availability"])

CODE_PATTERN = r"^[A-Za-z0-9\-_.]+$"


@router.get("", response_model=AvailabilityListResponse)
@limiter.limit(READ_LIMIT)
async def list_availability(
    request: Request,
    as_of_date: Optional[date] = Query(None, description="Count receipts due on or before this date"),
    status: Optional[StockStatus] = Query(None, description="Only parts with this status"),
    include_negative: bool = Query(True, description="Include parts with negative availability"),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Safety-stock availability of every active part."""
    handler = request.app.state.requirements_handler
    rows = await handler.list_part_availability(
        as_of_date=as_of_date, status=status, include_negative=include_negative
    )
    return AvailabilityListResponse(
        as_of_date=as_of_date or handler.today(),
        parts=[PartAvailabilityResponse.model_validate(row) for row in rows],
        total_count=len(rows),
        shortage_count=sum(1 for row in rows if row.status == StockStatus.SHORTAGE),
    )


@router.post("/check-sufficiency", response_model=SufficiencyResponse)
@limiter.limit(READ_LIMIT)
async def check_sufficiency(
    request: Request,
    body: SufficiencyRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    """Check whether the requested quantities are available by ``required_date``.

    Unknown parts get an ``Error`` row; the rest of the request is still answered.
    """
    handler = request.app.state.requirements_handler
    report = await handler.check_sufficiency(
        [(item.part_code, item.required_quantity) for item in body.items],
        required_date=body.required_date,
    )
    return SufficiencyResponse(
        required_date=report.required_date,
        results=[SufficiencyResultResponse.model_validate(row) for row in report.results],
        summary=SufficiencySummary(
            total_items=len(report.results),
            sufficient_items=report.sufficient_count,
            overall_status=report.overall_status,
        ),
    )


@router.get("/{part_code}", response_model=PartAvailabilityDetailResponse)
@limiter.limit(READ_LIMIT)
async def get_part_availability(
    request: Request,
    part_code: str = Path(..., min_length=1, max_length=50, pattern=CODE_PATTERN),
    as_of_date: Optional[date] = Query(None, description="Defaults to today"),
    current_user: CurrentUser = Depends(get_current_user),
):
    handler = request.app.state.requirements_handler
    detail = await handler.compute_part_availability(part_code, as_of_date)
    return PartAvailabilityDetailResponse(
        availability=PartAvailabilityResponse.model_validate(detail.availability),
        open_receipts=detail.open_receipts,
        recent_transactions=detail.recent_transactions,
    )
