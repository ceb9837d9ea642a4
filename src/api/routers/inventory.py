"""Stock mutation and ledger endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request

from src.api.middleware.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from src.api.routers.auth import CurrentUser, get_current_user, require_material_access
from src.models.commands import (
    InventoryResponse,
    StockAdjustRequest,
    StockMovementRequest,
    StocktakingRequest,
)
from src.readers.models import InventoryModel, LedgerEntryModel, StocktakingRecordModel

router = APIRouter(prefix="/api/inventory", tags=["inventory"])

CODE_PATTERN = r"^[A-Za-z0-9\-_.]+$"


def _inventory_response(row: InventoryModel) -> InventoryResponse:
    return InventoryResponse(
        part_code=row.part_code,
        current_stock=row.current_stock,
        reserved_stock=row.reserved_stock,
        available_to_issue=max(0, row.current_stock - row.reserved_stock),
    )


@router.post("/stocktaking", response_model=StocktakingRecordModel)
@limiter.limit(WRITE_LIMIT)
async def record_stocktaking(
    request: Request,
    body: StocktakingRequest,
    current_user: CurrentUser = Depends(require_material_access),
):
    """Record a physical count and correct book stock to it."""
    service = request.app.state.stock_service
    return await service.stocktake(
        body.part_code,
        body.actual_quantity,
        actor=current_user.username,
        stocktaking_date=body.stocktaking_date,
        reason_code=body.reason_code.value if body.reason_code else None,
        remarks=body.remarks,
    )


@router.get("/{part_code}", response_model=InventoryResponse)
@limiter.limit(READ_LIMIT)
async def get_inventory(
    request: Request,
    part_code: str = Path(..., min_length=1, max_length=50, pattern=CODE_PATTERN),
    current_user: CurrentUser = Depends(get_current_user),
):
    service = request.app.state.stock_service
    return _inventory_response(await service.get_inventory(part_code))


@router.put("/{part_code}", response_model=InventoryResponse)
@limiter.limit(WRITE_LIMIT)
async def adjust_inventory(
    request: Request,
    body: StockAdjustRequest,
    part_code: str = Path(..., min_length=1, max_length=50, pattern=CODE_PATTERN),
    current_user: CurrentUser = Depends(require_material_access),
):
    """Set current stock; rejected when it would fall below reserved stock."""
    service = request.app.state.stock_service
    row = await service.adjust(
        part_code, body.current_stock, actor=current_user.username, remarks=body.remarks
    )
    return _inventory_response(row)


@router.post("/{part_code}/receipt", response_model=InventoryResponse)
@limiter.limit(WRITE_LIMIT)
async def receive_stock(
    request: Request,
    body: StockMovementRequest,
    part_code: str = Path(..., min_length=1, max_length=50, pattern=CODE_PATTERN),
    current_user: CurrentUser = Depends(require_material_access),
):
    service = request.app.state.stock_service
    row = await service.receive(
        part_code, body.quantity, actor=current_user.username, remarks=body.remarks
    )
    return _inventory_response(row)


@router.post("/{part_code}/issue", response_model=InventoryResponse)
@limiter.limit(WRITE_LIMIT)
async def issue_stock(
    request: Request,
    body: StockMovementRequest,
    part_code: str = Path(..., min_length=1, max_length=50, pattern=CODE_PATTERN),
    current_user: CurrentUser = Depends(require_material_access),
):
    """Issue unreserved stock."""
    service = request.app.state.stock_service
    row = await service.issue(
        part_code, body.quantity, actor=current_user.username, remarks=body.remarks
    )
    return _inventory_response(row)


@router.get("/{part_code}/transactions", response_model=List[LedgerEntryModel])
@limiter.limit(READ_LIMIT)
async def list_transactions(
    request: Request,
    part_code: str = Path(..., min_length=1, max_length=50, pattern=CODE_PATTERN),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Ledger entries of a part, oldest first."""
    service = request.app.state.stock_service
    return await service.ledger(part_code, limit=limit)
