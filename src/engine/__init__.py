"""Material availability and requirements computation.

Pure functions over explicitly passed snapshots; no database access.
"""

from src.engine.alerts import AlertBucket, AlertCategory, AlertLevel
from src.engine.availability import Availability, allocated_quantity, compute_availability
from src.engine.bom import BomLine, PartDemand, expand_plan, resolve_bom
from src.engine.planner import (
    PartAvailability,
    Requirement,
    Snapshot,
    SufficiencyResult,
    check_sufficiency,
    compute_all_requirements,
    compute_plan_requirements,
    part_availability,
)
from src.engine.priority import PlanDemand, order_plans, prior_plans, prior_requirement
from src.engine.receipt_lifecycle import TransitionPayload, validate_transition
from src.engine.shortage import (
    StockStatus,
    StockoutRisk,
    assess_safety_stock,
    procurement_due_date,
    shortage_quantity,
)

__all__ = [
    # BOM
    "BomLine",
    "PartDemand",
    "expand_plan",
    "resolve_bom",
    # Priority
    "PlanDemand",
    "order_plans",
    "prior_plans",
    "prior_requirement",
    # Availability / shortage
    "Availability",
    "StockStatus",
    "StockoutRisk",
    "allocated_quantity",
    "assess_safety_stock",
    "compute_availability",
    "procurement_due_date",
    "shortage_quantity",
    # Receipts
    "TransitionPayload",
    "validate_transition",
    # Planner
    "PartAvailability",
    "Requirement",
    "Snapshot",
    "SufficiencyResult",
    "check_sufficiency",
    "compute_all_requirements",
    "compute_plan_requirements",
    "part_availability",
    # Alerts
    "AlertBucket",
    "AlertCategory",
    "AlertLevel",
]
