"""Tests for src/engine/planner.py"""

from datetime import date

import pytest

from src.config import AlertThresholdConfig
from src.engine.alerts import overdue_procurement_alerts
from src.engine.planner import (
    ERROR,
    INSUFFICIENT,
    SUFFICIENT,
    Snapshot,
    check_sufficiency,
    compute_all_requirements,
    compute_plan_requirements,
    part_availability,
)
from src.engine.shortage import StockoutRisk, StockStatus
from src.exceptions import InvalidInputError, NotFoundError
from src.readers.models import (
    BomLineModel,
    InventoryModel,
    PartModel,
    PlanStatus,
    ProductionPlanModel,
    ReceiptStatus,
    ReservationModel,
    ScheduledReceiptModel,
)


def _plan(plan_id, product, qty, start, status=PlanStatus.PLANNED):
    return ProductionPlanModel(
        id=plan_id, product_code=product, planned_quantity=qty, start_date=start, status=status
    )


def _receipt(receipt_id, part, qty, scheduled, status=ReceiptStatus.SCHEDULED):
    return ScheduledReceiptModel(
        id=receipt_id,
        order_no=f"PO250101{receipt_id:03d}",
        part_code=part,
        order_quantity=qty,
        scheduled_quantity=qty,
        order_date=date(2025, 1, 1),
        scheduled_date=scheduled,
        status=status,
    )


@pytest.fixture
def snapshot():
    """Two plans competing for 100 units of X."""
    parts = {
        "X": PartModel(part_code="X", part_name="Bracket", lead_time_days=5, safety_stock=20, supplier="Acme"),
        "Y": PartModel(part_code="Y", part_name="Bolt M8", lead_time_days=10, supplier="Bolt Co"),
        "Z": PartModel(part_code="Z", part_name="Retired spacer", is_active=False),
    }
    bom_rows = [
        BomLineModel(product_code="PRD-A", station_code="ST-01", part_code="X", quantity_per_unit=1),
        BomLineModel(product_code="PRD-A", station_code="ST-02", part_code="Y", quantity_per_unit=2),
        BomLineModel(product_code="PRD-A", station_code="ST-02", part_code="Z", quantity_per_unit=1),
        BomLineModel(product_code="PRD-B", station_code="ST-01", part_code="X", quantity_per_unit=1),
    ]
    plans = {
        1: _plan(1, "PRD-A", 60, date(2025, 1, 10)),
        2: _plan(2, "PRD-B", 70, date(2025, 1, 5)),
    }
    inventory = {
        "X": InventoryModel(part_code="X", current_stock=100),
        "Y": InventoryModel(part_code="Y", current_stock=50),
    }
    return Snapshot(parts=parts, bom_rows=bom_rows, plans=plans, inventory=inventory)


def _by_part(rows):
    return {row.part_code: row for row in rows}


class TestPlanRequirements:
    """Tests for compute_plan_requirements()."""

    def test_earlier_plan_sees_all_stock(self, snapshot):
        rows = _by_part(compute_plan_requirements(snapshot, 2))

        assert rows["X"].required_quantity == 70
        assert rows["X"].prior_reserved_quantity == 0
        assert rows["X"].available_stock == 100
        assert rows["X"].shortage_quantity == 0
        assert rows["X"].is_sufficient

    def test_later_plan_sees_remainder(self, snapshot):
        rows = _by_part(compute_plan_requirements(snapshot, 1))

        assert rows["X"].required_quantity == 60
        assert rows["X"].prior_reserved_quantity == 70
        assert rows["X"].available_stock == 30
        assert rows["X"].shortage_quantity == 30
        assert rows["X"].allocated_quantity == 30
        assert not rows["X"].is_sufficient
        assert rows["X"].procurement_due_date == date(2025, 1, 5)

    def test_uncontested_part(self, snapshot):
        rows = _by_part(compute_plan_requirements(snapshot, 1))

        assert rows["Y"].required_quantity == 120
        assert rows["Y"].available_stock == 50
        assert rows["Y"].shortage_quantity == 70
        assert rows["Y"].procurement_due_date == date(2024, 12, 31)
        assert rows["Y"].supplier == "Bolt Co"

    def test_inactive_part_excluded(self, snapshot):
        assert "Z" not in _by_part(compute_plan_requirements(snapshot, 1))

    def test_conservation(self, snapshot):
        """Allocations never exceed stock plus counted receipts."""
        rows = [row for row in compute_all_requirements(snapshot) if row.part_code == "X"]
        assert sum(row.allocated_quantity for row in rows) <= 100

    def test_receipt_before_start_counts(self, snapshot):
        snapshot.receipts = [
            _receipt(1, "X", 30, date(2025, 1, 10)),
            _receipt(2, "X", 500, date(2025, 1, 11)),
            _receipt(3, "X", 500, None, ReceiptStatus.AWAITING_DELIVERY_DATE),
        ]
        rows = _by_part(compute_plan_requirements(snapshot, 1))

        assert rows["X"].scheduled_receipts_until_start == 30
        assert rows["X"].available_stock == 60
        assert rows["X"].is_sufficient
        assert rows["X"].is_awaiting_receipt

    def test_later_plan_does_not_reduce_earlier(self, snapshot):
        """Adding a later plan leaves earlier plans unchanged."""
        before = _by_part(compute_plan_requirements(snapshot, 2))["X"]
        snapshot.plans[3] = _plan(3, "PRD-B", 500, date(2025, 2, 1))
        after = _by_part(compute_plan_requirements(snapshot, 2))["X"]

        assert after.available_stock == before.available_stock

    def test_same_day_tie_lower_id_first(self, snapshot):
        snapshot.plans[2] = _plan(2, "PRD-B", 70, date(2025, 1, 10))
        rows_1 = _by_part(compute_plan_requirements(snapshot, 1))
        rows_2 = _by_part(compute_plan_requirements(snapshot, 2))

        assert rows_1["X"].prior_reserved_quantity == 0
        assert rows_2["X"].prior_reserved_quantity == 60

    def test_completed_plans_do_not_compete(self, snapshot):
        snapshot.plans[2] = _plan(2, "PRD-B", 70, date(2025, 1, 5), PlanStatus.COMPLETED)
        rows = _by_part(compute_plan_requirements(snapshot, 1))

        assert rows["X"].prior_reserved_quantity == 0
        assert rows["X"].available_stock == 100

    def test_issued_quantity_not_counted_twice(self, snapshot):
        """A running plan only competes for what it has not been issued yet."""
        snapshot.plans[2] = _plan(2, "PRD-B", 70, date(2025, 1, 5), PlanStatus.IN_PROGRESS)
        snapshot.inventory["X"] = InventoryModel(part_code="X", current_stock=30)
        snapshot.issued[(2, "X")] = 70

        rows = _by_part(compute_plan_requirements(snapshot, 1))
        assert rows["X"].prior_reserved_quantity == 0
        assert rows["X"].available_stock == 30

        running = _by_part(compute_plan_requirements(snapshot, 2))["X"]
        assert running.issued_quantity == 70
        assert running.outstanding_quantity == 0
        assert running.is_sufficient

    def test_fully_issued_plan_has_no_shortage(self, snapshot):
        """Earlier plans driving availability negative do not touch a consumed plan."""
        snapshot.plans[1] = _plan(1, "PRD-A", 50, date(2025, 1, 10), PlanStatus.IN_PROGRESS)
        snapshot.plans[2] = _plan(2, "PRD-B", 80, date(2025, 1, 5))
        snapshot.inventory["X"] = InventoryModel(part_code="X", current_stock=30)
        snapshot.issued[(1, "X")] = 50

        consumed = _by_part(compute_plan_requirements(snapshot, 1))["X"]
        assert consumed.outstanding_quantity == 0
        assert consumed.available_stock == -50
        assert consumed.shortage_quantity == 0
        assert consumed.allocated_quantity == 0
        assert consumed.is_sufficient

        overdue = overdue_procurement_alerts(
            compute_all_requirements(snapshot), date(2025, 1, 20), AlertThresholdConfig()
        )
        assert [alert.plan_id for alert in overdue.urgent + overdue.warning if alert.part_code == "X"] == [2]

    def test_plan_reservation_reported(self, snapshot):
        snapshot.reservations = [ReservationModel(plan_id=1, part_code="Y", reserved_quantity=50)]
        assert _by_part(compute_plan_requirements(snapshot, 1))["Y"].plan_reserved_quantity == 50

    def test_unknown_plan(self, snapshot):
        with pytest.raises(NotFoundError):
            compute_plan_requirements(snapshot, 99)

    def test_inactive_plan(self, snapshot):
        snapshot.plans[1] = _plan(1, "PRD-A", 60, date(2025, 1, 10), PlanStatus.CANCELLED)
        with pytest.raises(InvalidInputError):
            compute_plan_requirements(snapshot, 1)

    def test_product_without_bom(self, snapshot):
        snapshot.plans[5] = _plan(5, "PRD-NONE", 1, date(2025, 1, 20))
        with pytest.raises(NotFoundError):
            compute_plan_requirements(snapshot, 5)

    def test_plan_without_bom_does_not_break_others(self, snapshot):
        snapshot.plans[5] = _plan(5, "PRD-NONE", 1, date(2025, 1, 1))
        rows = _by_part(compute_plan_requirements(snapshot, 2))
        assert rows["X"].available_stock == 100


class TestAllRequirements:
    """Tests for compute_all_requirements()."""

    def test_ordered_by_priority(self, snapshot):
        rows = compute_all_requirements(snapshot)
        assert [(row.plan_id, row.part_code) for row in rows] == [(2, "X"), (1, "X"), (1, "Y")]

    def test_recomputation_is_identical(self, snapshot):
        assert compute_all_requirements(snapshot) == compute_all_requirements(snapshot)


class TestPartAvailability:
    """Tests for part_availability()."""

    def test_below_safety_stock(self, snapshot):
        snapshot.inventory["X"] = InventoryModel(part_code="X", current_stock=100, reserved_stock=85)
        result = part_availability(snapshot, "X", date(2025, 1, 3))

        assert result.available_stock == 15
        assert result.status == StockStatus.SHORTAGE
        assert result.recommended_order_quantity == 25
        assert result.stockout_risk == StockoutRisk.MEDIUM

    def test_receipts_until_date(self, snapshot):
        snapshot.receipts = [_receipt(1, "X", 40, date(2025, 1, 8))]

        assert part_availability(snapshot, "X", date(2025, 1, 7)).available_stock == 100
        assert part_availability(snapshot, "X", date(2025, 1, 8)).available_stock == 140

    def test_part_without_inventory_row(self, snapshot):
        result = part_availability(snapshot, "Z", date(2025, 1, 3))
        assert result.current_stock == 0
        assert result.status == StockStatus.OK

    def test_unknown_part(self, snapshot):
        with pytest.raises(NotFoundError):
            part_availability(snapshot, "NOPE", date(2025, 1, 3))


class TestCheckSufficiency:
    """Tests for check_sufficiency()."""

    def test_mixed_results(self, snapshot):
        results = check_sufficiency(
            snapshot, [("X", 80), ("Y", 60), ("NOPE", 1), ("X", 0)], date(2025, 1, 3)
        )

        assert [result.status for result in results] == [SUFFICIENT, INSUFFICIENT, ERROR, ERROR]
        assert results[1].shortage_quantity == 10
        assert results[2].message == "Part NOPE not found"
