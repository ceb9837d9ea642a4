"""Requirement planning over one consistent snapshot.

Everything here works on a ``Snapshot`` that the caller loaded inside a
single read transaction. Nothing is cached: every call recomputes from the
snapshot it is given.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from src.engine.availability import compute_availability, allocated_quantity
from src.engine.bom import BomLine, PartDemand, expand_plan, resolve_bom
from src.engine.priority import PlanDemand, prior_requirement
from src.engine.shortage import (
    StockStatus,
    StockoutRisk,
    assess_safety_stock,
    procurement_due_date,
    shortage_quantity,
)
from src.exceptions import InvalidInputError, NotFoundError
from src.readers.models import (
    BomLineModel,
    InventoryModel,
    PartModel,
    ProductionPlanModel,
    ReceiptStatus,
    ReservationModel,
    ScheduledReceiptModel,
)

logger = logging.getLogger(__name__)

OPEN_RECEIPT_STATUSES = (ReceiptStatus.AWAITING_DELIVERY_DATE, ReceiptStatus.SCHEDULED)


@dataclass
class Snapshot:
    """Engine inputs read at one instant.

    ``plans`` holds every plan that was asked for (active or not); only
    active plans compete for stock. ``issued`` maps (plan_id, part_code) to
    the quantity already issued to a running plan.
    """

    parts: dict[str, PartModel] = field(default_factory=dict)
    bom_rows: list[BomLineModel] = field(default_factory=list)
    plans: dict[int, ProductionPlanModel] = field(default_factory=dict)
    inventory: dict[str, InventoryModel] = field(default_factory=dict)
    reservations: list[ReservationModel] = field(default_factory=list)
    receipts: list[ScheduledReceiptModel] = field(default_factory=list)
    issued: dict[tuple[int, str], int] = field(default_factory=dict)

    @property
    def active_plans(self) -> list[ProductionPlanModel]:
        return [plan for plan in self.plans.values() if plan.status.is_active]

    @property
    def active_part_codes(self) -> set[str]:
        return {code for code, part in self.parts.items() if part.is_active}

    def current_stock(self, part_code: str) -> int:
        row = self.inventory.get(part_code)
        return row.current_stock if row else 0

    def reserved_stock(self, part_code: str) -> int:
        row = self.inventory.get(part_code)
        return row.reserved_stock if row else 0

    def plan_reservation(self, plan_id: int, part_code: str) -> int:
        return sum(
            reservation.reserved_quantity
            for reservation in self.reservations
            if reservation.plan_id == plan_id and reservation.part_code == part_code
        )

    def open_receipts(self, part_code: str) -> list[ScheduledReceiptModel]:
        return [
            receipt
            for receipt in self.receipts
            if receipt.part_code == part_code and receipt.status in OPEN_RECEIPT_STATUSES
        ]


@dataclass
class Requirement:
    """Derived requirement of one plan for one part."""

    plan_id: int
    product_code: str
    start_date: date
    part_code: str
    part_name: str
    required_quantity: int
    issued_quantity: int
    current_stock: int
    prior_reserved_quantity: int
    plan_reserved_quantity: int
    scheduled_receipts_until_start: int
    available_stock: int
    shortage_quantity: int
    allocated_quantity: int
    procurement_due_date: date
    supplier: Optional[str]
    lead_time_days: int
    unit_price: Decimal
    is_sufficient: bool
    is_awaiting_receipt: bool
    used_in_stations: list[str] = field(default_factory=list)

    @property
    def outstanding_quantity(self) -> int:
        return max(0, self.required_quantity - self.issued_quantity)


@dataclass
class PartAvailability:
    """Safety-stock view of one part at a date."""

    part_code: str
    part_name: str
    as_of_date: date
    current_stock: int
    reserved_stock: int
    scheduled_receipts: int
    available_stock: int
    safety_stock: int
    status: StockStatus
    recommended_order_quantity: int
    stockout_risk: StockoutRisk
    supplier: Optional[str] = None
    lead_time_days: int = 0


@dataclass
class SufficiencyResult:
    """Answer for one requested (part, quantity) pair."""

    part_code: str
    required_quantity: int
    status: str
    available_stock: int = 0
    shortage_quantity: int = 0
    is_sufficient: bool = False
    message: Optional[str] = None


SUFFICIENT = "Sufficient"
INSUFFICIENT = "Insufficient"
ERROR = "Error"


def plan_bom(snapshot: Snapshot, product_code: str) -> list[BomLine]:
    return resolve_bom(product_code, snapshot.bom_rows, snapshot.active_part_codes)


def expand_active_plans(snapshot: Snapshot) -> dict[int, dict[str, PartDemand]]:
    """Expand every active plan; plans whose product has no BOM are skipped."""
    expanded: dict[int, dict[str, PartDemand]] = {}
    for plan in snapshot.active_plans:
        try:
            lines = plan_bom(snapshot, plan.product_code)
        except NotFoundError:
            logger.warning(
                "Plan %s product %s has no active BOM, skipped", plan.id, plan.product_code
            )
            continue
        expanded[plan.id] = expand_plan(plan.planned_quantity, lines)
    return expanded


def competing_demands(
    snapshot: Snapshot, expanded: dict[int, dict[str, PartDemand]]
) -> dict[str, list[PlanDemand]]:
    """Per part, the outstanding demand of every active plan using it."""
    demands: dict[str, list[PlanDemand]] = defaultdict(list)
    for plan_id, parts in expanded.items():
        plan = snapshot.plans[plan_id]
        for part_code, demand in parts.items():
            issued = snapshot.issued.get((plan_id, part_code), 0)
            outstanding = max(0, demand.required_quantity - issued)
            demands[part_code].append(
                PlanDemand(plan_id=plan_id, start_date=plan.start_date, required_quantity=outstanding)
            )
    return demands


def _requirement(
    snapshot: Snapshot,
    plan: ProductionPlanModel,
    demand: PartDemand,
    competitors: Iterable[PlanDemand],
) -> Requirement:
    part = snapshot.parts.get(demand.part_code) or PartModel(part_code=demand.part_code)
    issued = snapshot.issued.get((plan.id, demand.part_code), 0)
    outstanding = max(0, demand.required_quantity - issued)

    prior = prior_requirement(competitors, plan.id, plan.start_date)
    availability = compute_availability(
        current_stock=snapshot.current_stock(demand.part_code),
        receipts=snapshot.receipts,
        prior_reserved=prior,
        part_code=demand.part_code,
        until=plan.start_date,
    )
    # Fully issued parts make no further claim, whatever earlier plans leave.
    shortage = shortage_quantity(outstanding, availability.available_stock) if outstanding else 0

    return Requirement(
        plan_id=plan.id,
        product_code=plan.product_code,
        start_date=plan.start_date,
        part_code=demand.part_code,
        part_name=part.part_name,
        required_quantity=demand.required_quantity,
        issued_quantity=issued,
        current_stock=availability.current_stock,
        prior_reserved_quantity=availability.prior_reserved,
        plan_reserved_quantity=snapshot.plan_reservation(plan.id, demand.part_code),
        scheduled_receipts_until_start=availability.scheduled_receipts,
        available_stock=availability.available_stock,
        shortage_quantity=shortage,
        allocated_quantity=allocated_quantity(outstanding, availability.available_stock),
        procurement_due_date=procurement_due_date(plan.start_date, part.lead_time_days),
        supplier=part.supplier,
        lead_time_days=part.lead_time_days,
        unit_price=part.unit_price,
        is_sufficient=shortage == 0,
        is_awaiting_receipt=bool(snapshot.open_receipts(demand.part_code)),
        used_in_stations=list(demand.used_in_stations),
    )


def compute_plan_requirements(snapshot: Snapshot, plan_id: int) -> list[Requirement]:
    """One requirement row per part used by the plan's product.

    Raises:
        NotFoundError: unknown plan, or its product has no active BOM.
        InvalidInputError: the plan is completed or cancelled.
    """
    plan = snapshot.plans.get(plan_id)
    if plan is None:
        raise NotFoundError(f"Production plan {plan_id} not found")
    if not plan.status.is_active:
        raise InvalidInputError(
            f"Production plan {plan_id} is {plan.status.value}; only active plans have requirements"
        )

    own = expand_plan(plan.planned_quantity, plan_bom(snapshot, plan.product_code))
    competitors = competing_demands(snapshot, expand_active_plans(snapshot))

    return [
        _requirement(snapshot, plan, demand, competitors.get(part_code, []))
        for part_code, demand in own.items()
    ]


def compute_all_requirements(snapshot: Snapshot) -> list[Requirement]:
    """Requirements of every active plan, ordered by plan priority then part."""
    expanded = expand_active_plans(snapshot)
    competitors = competing_demands(snapshot, expanded)

    rows: list[Requirement] = []
    plans = sorted(
        (snapshot.plans[plan_id] for plan_id in expanded),
        key=lambda plan: (plan.start_date, plan.id),
    )
    for plan in plans:
        for part_code, demand in expanded[plan.id].items():
            rows.append(_requirement(snapshot, plan, demand, competitors.get(part_code, [])))
    return rows


def part_availability(snapshot: Snapshot, part_code: str, as_of_date: date) -> PartAvailability:
    """Safety-stock availability; prior claims are the part's reserved stock.

    Raises:
        NotFoundError: unknown part.
    """
    part = snapshot.parts.get(part_code)
    if part is None:
        raise NotFoundError(f"Part {part_code} not found")

    reserved = snapshot.reserved_stock(part_code)
    availability = compute_availability(
        current_stock=snapshot.current_stock(part_code),
        receipts=snapshot.receipts,
        prior_reserved=reserved,
        part_code=part_code,
        until=as_of_date,
    )
    assessment = assess_safety_stock(availability.available_stock, part.safety_stock)

    return PartAvailability(
        part_code=part_code,
        part_name=part.part_name,
        as_of_date=as_of_date,
        current_stock=availability.current_stock,
        reserved_stock=reserved,
        scheduled_receipts=availability.scheduled_receipts,
        available_stock=availability.available_stock,
        safety_stock=part.safety_stock,
        status=assessment.status,
        recommended_order_quantity=assessment.recommended_order_quantity,
        stockout_risk=assessment.stockout_risk,
        supplier=part.supplier,
        lead_time_days=part.lead_time_days,
    )


def check_sufficiency(
    snapshot: Snapshot, items: Iterable[tuple[str, int]], required_date: date
) -> list[SufficiencyResult]:
    """Check requested quantities against part availability at ``required_date``.

    Unknown parts and non-positive quantities yield an ``Error`` row instead
    of failing the whole request.
    """
    results: list[SufficiencyResult] = []
    for part_code, required in items:
        if required <= 0:
            results.append(
                SufficiencyResult(
                    part_code=part_code,
                    required_quantity=required,
                    status=ERROR,
                    message="required_quantity must be positive",
                )
            )
            continue
        try:
            availability = part_availability(snapshot, part_code, required_date)
        except NotFoundError as exc:
            results.append(
                SufficiencyResult(
                    part_code=part_code,
                    required_quantity=required,
                    status=ERROR,
                    message=str(exc),
                )
            )
            continue

        shortage = shortage_quantity(required, availability.available_stock)
        results.append(
            SufficiencyResult(
                part_code=part_code,
                required_quantity=required,
                status=SUFFICIENT if shortage == 0 else INSUFFICIENT,
                available_stock=availability.available_stock,
                shortage_quantity=shortage,
                is_sufficient=shortage == 0,
            )
        )
    return results
