"""Pydantic models for StockLens."""

from src.models.alerts import (
    AlertCountsResponse,
    AlertListResponse,
    AlertSummaryResponse,
    DelayedReceiptItem,
    ImpendingShortageItem,
    OverdueProcurementItem,
)
from src.models.availability import (
    AvailabilityListResponse,
    PartAvailabilityDetailResponse,
    PartAvailabilityResponse,
    SufficiencyItem,
    SufficiencyRequest,
    SufficiencyResponse,
    SufficiencyResultResponse,
    SufficiencySummary,
)
from src.models.commands import (
    CancelReceiptRequest,
    CreateReceiptRequest,
    DeliveryResponseRequest,
    InventoryResponse,
    MarkReceivedRequest,
    ReceiptTransitionRequest,
    StockAdjustRequest,
    StockMovementRequest,
    StocktakingRequest,
)
from src.models.errors import ErrorResponse
from src.models.requirements import (
    BomLineResponse,
    BomResponse,
    PlanRequirementsResponse,
    PlanReservationsResponse,
    ProductionResultResponse,
    RequirementResponse,
    ReservationResponse,
)

__all__ = [
    "AlertCountsResponse",
    "AlertListResponse",
    "AlertSummaryResponse",
    "DelayedReceiptItem",
    "ImpendingShortageItem",
    "OverdueProcurementItem",
    "AvailabilityListResponse",
    "PartAvailabilityDetailResponse",
    "PartAvailabilityResponse",
    "SufficiencyItem",
    "SufficiencyRequest",
    "SufficiencyResponse",
    "SufficiencyResultResponse",
    "SufficiencySummary",
    "CancelReceiptRequest",
    "CreateReceiptRequest",
    "DeliveryResponseRequest",
    "InventoryResponse",
    "MarkReceivedRequest",
    "ReceiptTransitionRequest",
    "StockAdjustRequest",
    "StockMovementRequest",
    "StocktakingRequest",
    "ErrorResponse",
    "BomLineResponse",
    "BomResponse",
    "PlanRequirementsResponse",
    "PlanReservationsResponse",
    "ProductionResultResponse",
    "RequirementResponse",
    "ReservationResponse",
]
