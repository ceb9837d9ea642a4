"""Pydantic models for alert responses."""

from datetime import date
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from src.engine.alerts import AlertCategory, AlertLevel


class OverdueProcurementItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    plan_id: int
    product_code: str
    part_code: str
    part_name: str = ""
    supplier: Optional[str] = None
    start_date: date
    procurement_due_date: date
    overdue_days: int
    shortage_quantity: int
    level: AlertLevel


class DelayedReceiptItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    receipt_id: int
    order_no: str
    part_code: str
    part_name: str = ""
    supplier: str = ""
    scheduled_quantity: int
    scheduled_date: date
    delay_days: int
    affected_plans_count: int
    level: AlertLevel


class ImpendingShortageItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    plan_id: int
    product_code: str
    part_code: str
    part_name: str = ""
    start_date: date
    days_until_start: int
    required_quantity: int
    available_stock: int
    shortage_quantity: int
    shortage_percentage: float
    level: AlertLevel


AlertItem = Union[OverdueProcurementItem, DelayedReceiptItem, ImpendingShortageItem]


class AlertCountsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_count: int
    urgent_count: int
    warning_count: int


class AlertListResponse(BaseModel):
    """Urgent and warning alerts of one category."""

    category: AlertCategory
    urgent: list[AlertItem]
    warning: list[AlertItem]
    summary: AlertCountsResponse


class AlertSummaryResponse(BaseModel):
    """Counts per category plus the grand total."""

    overdue_procurement: AlertCountsResponse
    delayed_receipt: AlertCountsResponse
    impending_shortage: AlertCountsResponse
    total: AlertCountsResponse
