"""Pydantic models for records read from the inventory store."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PlanStatus(str, Enum):
    """Production plan lifecycle."""

    PLANNED = "Planned"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @property
    def is_active(self) -> bool:
        """Only planned and running plans claim inventory."""
        return self in (PlanStatus.PLANNED, PlanStatus.IN_PROGRESS)


ACTIVE_PLAN_STATUSES = (PlanStatus.PLANNED, PlanStatus.IN_PROGRESS)


class ReceiptStatus(str, Enum):
    """Scheduled receipt (purchase order) lifecycle."""

    AWAITING_DELIVERY_DATE = "AwaitingDeliveryDate"
    SCHEDULED = "Scheduled"
    RECEIVED = "Received"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ReceiptStatus.RECEIVED, ReceiptStatus.CANCELLED)


class TransactionType(str, Enum):
    """Ledger entry kinds."""

    RECEIPT = "receipt"
    ISSUE = "issue"
    RESERVATION = "reservation"
    RESERVATION_RELEASE = "reservation_release"
    ADJUSTMENT = "adjustment"
    STOCKTAKING = "stocktaking"
    INITIAL = "initial"


class StocktakingReason(str, Enum):
    """Fixed reason codes for stocktaking differences."""

    THEFT = "theft"
    DAMAGE = "damage"
    MISCOUNT = "miscount"
    OTHER = "other"


class PartModel(BaseModel):
    """Part master record."""

    part_code: str
    part_name: str = ""
    specification: Optional[str] = None
    unit: str = "pcs"
    lead_time_days: int = Field(default=7, ge=0)
    safety_stock: int = Field(default=0, ge=0)
    supplier: Optional[str] = None
    category: Optional[str] = None
    unit_price: Decimal = Decimal("0")
    is_active: bool = True


class BomLineModel(BaseModel):
    """One active BOM row: a part used at a station of a product."""

    product_code: str
    station_code: str
    process_group: str = ""
    part_code: str
    quantity_per_unit: int = Field(..., gt=0)


class ProductionPlanModel(BaseModel):
    """Production plan record."""

    id: int
    product_code: str
    planned_quantity: int = Field(..., gt=0)
    start_date: date
    status: PlanStatus
    building_no: Optional[str] = None
    remarks: Optional[str] = None


class InventoryModel(BaseModel):
    """Inventory row for one part (current and reserved stock)."""

    part_code: str
    current_stock: int = Field(default=0, ge=0)
    reserved_stock: int = Field(default=0, ge=0)
    safety_stock: int = Field(default=0, ge=0)


class ReservationModel(BaseModel):
    """Claim on a part's stock made for a production plan."""

    plan_id: int
    part_code: str
    reserved_quantity: int = Field(..., gt=0)


class ScheduledReceiptModel(BaseModel):
    """Open or closed purchase order for a part."""

    id: int
    order_no: str
    part_code: str
    supplier: str = ""
    order_quantity: int
    scheduled_quantity: Optional[int] = None
    order_date: date
    requested_date: Optional[date] = None
    scheduled_date: Optional[date] = None
    status: ReceiptStatus
    actual_quantity: Optional[int] = None
    received_date: Optional[date] = None
    remarks: Optional[str] = None
    created_by: Optional[str] = None


class LedgerEntryModel(BaseModel):
    """Immutable inventory transaction (before/after quantities)."""

    id: int
    part_code: str
    transaction_type: TransactionType
    quantity: int
    before_stock: int
    after_stock: int
    reference_type: Optional[str] = None
    reference_id: Optional[int] = None
    remarks: Optional[str] = None
    created_by: str = "system"
    transaction_date: Optional[str] = None


class StocktakingRecordModel(BaseModel):
    """Physical count result for one part."""

    id: int
    stocktaking_date: date
    part_code: str
    book_quantity: int
    actual_quantity: int
    difference: int
    reason_code: Optional[StocktakingReason] = None
    remarks: Optional[str] = None
