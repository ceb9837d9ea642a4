"""Pydantic models for receipt and stock mutation requests."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.readers.models import ReceiptStatus, StocktakingReason


class CreateReceiptRequest(BaseModel):
    """Open a purchase order; the supplier comes from the part master."""

    part_code: str = Field(..., min_length=1, max_length=50)
    order_quantity: int = Field(..., gt=0)
    requested_date: Optional[date] = None
    order_date: Optional[date] = None
    order_no: Optional[str] = Field(None, min_length=1, max_length=30)
    remarks: Optional[str] = Field(None, max_length=500)


class ReceiptTransitionRequest(BaseModel):
    """Generic status change; fields required depend on the target status."""

    target_status: ReceiptStatus
    scheduled_quantity: Optional[int] = None
    scheduled_date: Optional[date] = None
    actual_quantity: Optional[int] = None
    receipt_date: Optional[date] = None
    reason: Optional[str] = Field(None, max_length=500)


class DeliveryResponseRequest(BaseModel):
    scheduled_quantity: int = Field(..., gt=0)
    scheduled_date: date


class MarkReceivedRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    actual_quantity: int = Field(..., gt=0)
    receipt_date: date = Field(..., alias="received_date")
    remarks: Optional[str] = Field(None, max_length=500)


class CancelReceiptRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class StockMovementRequest(BaseModel):
    """Receipt or issue of a positive quantity."""

    quantity: int = Field(..., gt=0)
    remarks: Optional[str] = Field(None, max_length=500)


class StockAdjustRequest(BaseModel):
    current_stock: int = Field(..., ge=0)
    remarks: Optional[str] = Field(None, max_length=500)


class StocktakingRequest(BaseModel):
    part_code: str = Field(..., min_length=1, max_length=50)
    actual_quantity: int = Field(..., ge=0)
    stocktaking_date: Optional[date] = None
    reason_code: Optional[StocktakingReason] = None
    remarks: Optional[str] = Field(None, max_length=500)


class InventoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    part_code: str
    current_stock: int
    reserved_stock: int
    available_to_issue: int
