"""Pydantic models for BOM, plan requirement and production responses."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.readers.models import PlanStatus


class BomLineResponse(BaseModel):
    """One BOM row of a product."""

    model_config = ConfigDict(from_attributes=True)

    station_code: str
    process_group: str = ""
    part_code: str
    quantity_per_unit: int


class BomResponse(BaseModel):
    product_code: str
    lines: list[BomLineResponse]
    total_lines: int


class RequirementResponse(BaseModel):
    """Requirement of one plan for one part."""

    model_config = ConfigDict(from_attributes=True)

    plan_id: int
    part_code: str
    part_name: str = ""
    required_quantity: int
    issued_quantity: int = 0
    current_stock: int
    prior_reserved_quantity: int
    plan_reserved_quantity: int = 0
    scheduled_receipts_until_start: int
    available_stock: int = Field(..., description="May be negative when prior plans exceed supply")
    shortage_quantity: int = Field(..., ge=0)
    allocated_quantity: int = Field(..., ge=0)
    procurement_due_date: date
    supplier: Optional[str] = None
    lead_time_days: int
    unit_price: Decimal = Decimal("0")
    is_sufficient: bool
    is_awaiting_receipt: bool
    used_in_stations: list[str] = Field(default_factory=list)


class PlanRequirementsResponse(BaseModel):
    """All part requirements of a production plan."""

    plan_id: int
    product_code: str
    start_date: date
    requirements: list[RequirementResponse]
    total_parts: int
    shortage_parts: int
    is_sufficient: bool


class ReservationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    plan_id: int
    part_code: str
    reserved_quantity: int


class PlanReservationsResponse(BaseModel):
    plan_id: int
    reservations: list[ReservationResponse]


class ProductionResultResponse(BaseModel):
    """Outcome of starting or completing production."""

    model_config = ConfigDict(from_attributes=True)

    plan_id: int
    status: PlanStatus
    issued: dict[str, int] = Field(default_factory=dict)
    released: dict[str, int] = Field(default_factory=dict)
