"""Pydantic models for part availability and sufficiency checks."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.engine.shortage import StockoutRisk, StockStatus
from src.readers.models import LedgerEntryModel, ScheduledReceiptModel


class PartAvailabilityResponse(BaseModel):
    """Safety-stock availability of one part."""

    model_config = ConfigDict(from_attributes=True)

    part_code: str
    part_name: str = ""
    as_of_date: date
    current_stock: int
    reserved_stock: int
    scheduled_receipts: int
    available_stock: int
    safety_stock: int
    status: StockStatus
    recommended_order_quantity: int = Field(..., ge=0)
    stockout_risk: StockoutRisk
    supplier: Optional[str] = None
    lead_time_days: int = 0


class PartAvailabilityDetailResponse(BaseModel):
    """Availability with the open receipts and recent ledger entries behind it."""

    availability: PartAvailabilityResponse
    open_receipts: list[ScheduledReceiptModel] = Field(default_factory=list)
    recent_transactions: list[LedgerEntryModel] = Field(default_factory=list)


class AvailabilityListResponse(BaseModel):
    as_of_date: date
    parts: list[PartAvailabilityResponse]
    total_count: int
    shortage_count: int


class SufficiencyItem(BaseModel):
    part_code: str = Field(..., min_length=1, max_length=50)
    required_quantity: int


class SufficiencyRequest(BaseModel):
    """Parts and quantities to check against availability at a date."""

    items: list[SufficiencyItem] = Field(..., min_length=1, max_length=500)
    required_date: Optional[date] = None


class SufficiencyResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    part_code: str
    required_quantity: int
    status: str = Field(..., description="Sufficient | Insufficient | Error")
    available_stock: int = 0
    shortage_quantity: int = 0
    is_sufficient: bool = False
    message: Optional[str] = None


class SufficiencySummary(BaseModel):
    total_items: int
    sufficient_items: int
    overall_status: str = Field(..., description="ALL_SUFFICIENT | HAS_SHORTAGE")


class SufficiencyResponse(BaseModel):
    required_date: date
    results: list[SufficiencyResultResponse]
    summary: SufficiencySummary
