"""Record models for the inventory store.

Rows loaded by the snapshot reader are mapped to these models before any
computation touches them.
"""

from src.readers.models import (
    ACTIVE_PLAN_STATUSES,
    BomLineModel,
    InventoryModel,
    LedgerEntryModel,
    PartModel,
    PlanStatus,
    ProductionPlanModel,
    ReceiptStatus,
    ReservationModel,
    ScheduledReceiptModel,
    StocktakingReason,
    StocktakingRecordModel,
    TransactionType,
)

__all__ = [
    # Enums
    "ACTIVE_PLAN_STATUSES",
    "PlanStatus",
    "ReceiptStatus",
    "StocktakingReason",
    "TransactionType",
    # Record models
    "BomLineModel",
    "InventoryModel",
    "LedgerEntryModel",
    "PartModel",
    "ProductionPlanModel",
    "ReservationModel",
    "ScheduledReceiptModel",
    "StocktakingRecordModel",
]
