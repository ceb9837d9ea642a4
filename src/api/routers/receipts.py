"""Scheduled receipt (purchase order) endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request

from src.api.middleware.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from src.api.routers.auth import CurrentUser, get_current_user, require_material_access
from src.engine.receipt_lifecycle import TransitionPayload
from src.models.commands import (
    CancelReceiptRequest,
    CreateReceiptRequest,
    DeliveryResponseRequest,
    MarkReceivedRequest,
    ReceiptTransitionRequest,
)
from src.readers.models import ReceiptStatus, ScheduledReceiptModel

router = APIRouter(prefix="/api/receipts", tags=["receipts"])

CODE_PATTERN = r"^[A-Za-z0-9\-_.]+$"


@router.post("", response_model=ScheduledReceiptModel, status_code=201)
@limiter.limit(WRITE_LIMIT)
async def create_receipt(
    request: Request,
    body: CreateReceiptRequest,
    current_user: CurrentUser = Depends(require_material_access),
):
    """Open a purchase order awaiting its delivery date."""
    service = request.app.state.receipt_service
    return await service.create_receipt(
        part_code=body.part_code,
        order_quantity=body.order_quantity,
        actor=current_user.username,
        requested_date=body.requested_date,
        order_date=body.order_date,
        order_no=body.order_no,
        remarks=body.remarks,
    )


@router.get("", response_model=List[ScheduledReceiptModel])
@limiter.limit(READ_LIMIT)
async def list_receipts(
    request: Request,
    part_code: Optional[str] = Query(None, min_length=1, max_length=50, pattern=CODE_PATTERN),
    status: Optional[ReceiptStatus] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
):
    service = request.app.state.receipt_service
    return await service.list_receipts(part_code=part_code, status=status)


@router.get("/{receipt_id}", response_model=ScheduledReceiptModel)
@limiter.limit(READ_LIMIT)
async def get_receipt(
    request: Request,
    receipt_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(get_current_user),
):
    service = request.app.state.receipt_service
    return await service.get_receipt(receipt_id)


@router.post("/{receipt_id}/transition", response_model=ScheduledReceiptModel)
@limiter.limit(WRITE_LIMIT)
async def transition_receipt(
    request: Request,
    body: ReceiptTransitionRequest,
    receipt_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(require_material_access),
):
    """Move a receipt to ``target_status``.

    Only adjacent states are reachable: AwaitingDeliveryDate -> Scheduled ->
    Received, and AwaitingDeliveryDate or Scheduled -> Cancelled.
    """
    service = request.app.state.receipt_service
    payload = TransitionPayload(
        scheduled_quantity=body.scheduled_quantity,
        scheduled_date=body.scheduled_date,
        actual_quantity=body.actual_quantity,
        receipt_date=body.receipt_date,
        reason=body.reason,
    )
    return await service.transition(
        receipt_id, body.target_status, payload, actor=current_user.username
    )


@router.post("/{receipt_id}/delivery-response", response_model=ScheduledReceiptModel)
@limiter.limit(WRITE_LIMIT)
async def delivery_response(
    request: Request,
    body: DeliveryResponseRequest,
    receipt_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(require_material_access),
):
    """Record the supplier's confirmed quantity and date."""
    service = request.app.state.receipt_service
    return await service.respond_delivery(
        receipt_id, body.scheduled_quantity, body.scheduled_date, actor=current_user.username
    )


@router.post("/{receipt_id}/mark-received", response_model=ScheduledReceiptModel)
@limiter.limit(WRITE_LIMIT)
async def mark_received(
    request: Request,
    body: MarkReceivedRequest,
    receipt_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(require_material_access),
):
    """Receive the goods and add them to stock."""
    service = request.app.state.receipt_service
    return await service.mark_received(
        receipt_id,
        body.actual_quantity,
        body.receipt_date,
        actor=current_user.username,
        remarks=body.remarks,
    )


@router.post("/{receipt_id}/cancel", response_model=ScheduledReceiptModel)
@limiter.limit(WRITE_LIMIT)
async def cancel_receipt(
    request: Request,
    body: CancelReceiptRequest,
    receipt_id: int = Path(..., ge=1),
    current_user: CurrentUser = Depends(require_material_access),
):
    service = request.app.state.receipt_service
    return await service.cancel(receipt_id, actor=current_user.username, reason=body.reason)
