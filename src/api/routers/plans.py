"""Production plan requirement, reservation and production endpoints."""

from fastapi import APIRouter, Depends, Path, Request

from src.api.middleware.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from src.api.routers.auth import (
    CurrentUser,
    get_current_user,
    require_material_access,
    require_production_access,
)
from src.models.requirements import (
    PlanRequirementsResponse,
    PlanReservationsResponse,
    ProductionResultResponse,
    RequirementResponse,
    ReservationResponse,
)

router = APIRouter(prefix="/api/plans", tags=["plans"])


@router.post("/{plan_id}/requirements", response_model=PlanRequirementsResponse)
@limiter.limit(READ_LIMIT)
async def compute_plan_requirements(
    request: Request,
    plan_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Compute one requirement row per part of the plan's product.

    Recomputed from the current state on every call; nothing is stored.
    """
    handler = request.app.state.requirements_handler
    rows = await handler.compute_plan_requirements(plan_id)
    first = rows[0]
    short = sum(1 for row in rows if not row.is_sufficient)
    return PlanRequirementsResponse(
        plan_id=plan_id,
        product_code=first.product_code,
        start_date=first.start_date,
        requirements=[RequirementResponse.model_validate(row) for row in rows],
        total_parts=len(rows),
        shortage_parts=short,
        is_sufficient=short == 0,
    )


@router.post("/{plan_id}/reservations", response_model=PlanReservationsResponse)
@limiter.limit(WRITE_LIMIT)
async def record_reservations(
    request: Request,
    plan_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(require_material_access),
):
    """Record the plan's reservations and rebalance the parts it uses."""
    service = request.app.state.reservation_service
    reservations = await service.sync_plan(plan_id, actor=current_user.username)
    return PlanReservationsResponse(
        plan_id=plan_id,
        reservations=[ReservationResponse.model_validate(item) for item in reservations],
    )


@router.post("/{plan_id}/start-production", response_model=ProductionResultResponse)
@limiter.limit(WRITE_LIMIT)
async def start_production(
    request: Request,
    plan_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(require_production_access),
):
    """Issue the plan's materials and move it to InProgress."""
    service = request.app.state.reservation_service
    result = await service.start_production(plan_id, actor=current_user.username)
    return ProductionResultResponse.model_validate(result)


@router.post("/{plan_id}/complete-production", response_model=ProductionResultResponse)
@limiter.limit(WRITE_LIMIT)
async def complete_production(
    request: Request,
    plan_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(require_production_access),
):
    service = request.app.state.reservation_service
    result = await service.complete_production(plan_id, actor=current_user.username)
    return ProductionResultResponse.model_validate(result)
