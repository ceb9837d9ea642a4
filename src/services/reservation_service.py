"""Plan reservations and production start/complete.

Reservations are claims on on-hand stock made for a plan. A part's
``reserved_stock`` is always the sum of its reservation rows; it is
recomputed after every change instead of being incremented.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from src.database.connection import Database
from src.engine.planner import (
    Requirement,
    Snapshot,
    compute_all_requirements,
    compute_plan_requirements,
)
from src.exceptions import InsufficientStockError, InvalidStateTransitionError, NotFoundError
from src.query.snapshot_reader import PRODUCTION_PLAN_REFERENCE, SnapshotReader
from src.readers.models import (
    PlanStatus,
    ProductionPlanModel,
    ReservationModel,
    TransactionType,
)
from src.services.ledger import append_entry
from src.services.stock_service import StockService

logger = logging.getLogger(__name__)


@dataclass
class ProductionResult:
    """Outcome of a production status change."""

    plan_id: int
    status: PlanStatus
    issued: dict[str, int] = field(default_factory=dict)
    released: dict[str, int] = field(default_factory=dict)


class ReservationService:
    """Materialize plan requirements as reservations and consume them."""

    def __init__(self, db: Database, stock_service: StockService):
        self.db = db
        self.stock_service = stock_service
        self.reader = SnapshotReader(db)

    async def sync_plan(self, plan_id: int, actor: str) -> list[ReservationModel]:
        """Record the plan's reservations and rebalance the parts it uses.

        Every plan holding stock of one of those parts is refitted in
        (start_date, id) order: each keeps at most its allocated quantity and
        never more than the on-hand stock left by plans ahead of it. Inactive
        plans end up with no reservations.
        """
        async with self.db.transaction():
            plan = await self._plan_for_update(plan_id)
            snapshot = await self.reader.load_snapshot()
            await self._rebalance(snapshot, plan, actor)
            reservations = await self.reader.get_reservations(plan_id=plan_id)

        logger.info(
            "Plan %s reservations synced: %d parts by %s", plan_id, len(reservations), actor
        )
        return reservations

    async def start_production(self, plan_id: int, actor: str) -> ProductionResult:
        """Issue the plan's materials and mark it InProgress.

        Reservations of later plans on the same parts are trimmed first, so
        the stock this plan is allocated is free to issue.

        Raises:
            NotFoundError: unknown plan.
            InvalidStateTransitionError: plan is not Planned.
            InsufficientStockError: any part is short.
        """
        async with self.db.transaction():
            plan = await self._plan_for_update(plan_id)
            if plan.status != PlanStatus.PLANNED:
                raise InvalidStateTransitionError(
                    f"Plan {plan_id} is {plan.status.value}; only Planned plans can start"
                )

            snapshot = await self.reader.load_snapshot()
            requirements = compute_plan_requirements(snapshot, plan_id)
            short = [row for row in requirements if row.shortage_quantity > 0]
            if short:
                logger.warning(
                    "Plan %s start rejected, short parts: %s (by %s)",
                    plan_id,
                    ", ".join(row.part_code for row in short),
                    actor,
                )
                raise InsufficientStockError(_shortage_message(plan_id, short))

            result = ProductionResult(plan_id=plan_id, status=PlanStatus.IN_PROGRESS)
            result.released = await self._rebalance(snapshot, plan, actor, keep_own=False)
            for row in requirements:
                if row.outstanding_quantity <= 0:
                    continue
                await self.stock_service._issue(
                    row.part_code,
                    row.outstanding_quantity,
                    actor,
                    remarks=f"Production start of plan {plan_id}",
                    reference_type=PRODUCTION_PLAN_REFERENCE,
                    reference_id=plan_id,
                )
                result.issued[row.part_code] = row.outstanding_quantity

            await self._set_status(plan_id, PlanStatus.IN_PROGRESS)

        logger.info("Plan %s started by %s: %d parts issued", plan_id, actor, len(result.issued))
        return result

    async def complete_production(self, plan_id: int, actor: str) -> ProductionResult:
        """Mark an InProgress plan Completed and drop anything still reserved."""
        async with self.db.transaction():
            plan = await self._plan_for_update(plan_id)
            if plan.status != PlanStatus.IN_PROGRESS:
                raise InvalidStateTransitionError(
                    f"Plan {plan_id} is {plan.status.value}; only InProgress plans can complete"
                )
            released = await self._release(plan, actor)
            await self._set_status(plan_id, PlanStatus.COMPLETED)

        logger.info("Plan %s completed by %s", plan_id, actor)
        return ProductionResult(plan_id=plan_id, status=PlanStatus.COMPLETED, released=released)

    async def _plan_for_update(self, plan_id: int) -> ProductionPlanModel:
        plan = await self.reader.get_plan(plan_id)
        if plan is None:
            raise NotFoundError(f"Production plan {plan_id} not found")
        return plan

    async def _set_status(self, plan_id: int, status: PlanStatus) -> None:
        await self.db.execute_write_no_commit(
            "UPDATE production_plans SET status = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            [status.value, plan_id],
        )

    async def _rebalance(
        self, snapshot: Snapshot, plan: ProductionPlanModel, actor: str, keep_own: bool = True
    ) -> dict[str, int]:
        """Refit reservations on the plan's parts to the priority order.

        Holders of each part are walked by (start_date, id) and given their
        allocated quantity out of what on-hand stock is left. With
        ``keep_own=False`` the plan's share is still set aside for it but not
        recorded as a reservation. Returns what the plan itself released.
        """
        own_parts: set[str] = set()
        if plan.status.is_active:
            own_parts = {row.part_code for row in compute_plan_requirements(snapshot, plan.id)}
        part_codes = own_parts | {
            reservation.part_code
            for reservation in snapshot.reservations
            if reservation.plan_id == plan.id
        }
        allocations = {
            (row.plan_id, row.part_code): row.allocated_quantity
            for row in compute_all_requirements(snapshot)
        }
        current = {
            (reservation.plan_id, reservation.part_code): reservation.reserved_quantity
            for reservation in snapshot.reservations
            if reservation.part_code in part_codes
        }

        targets: dict[tuple[int, str], int] = {}
        for part_code in sorted(part_codes):
            holders = {plan_id for plan_id, code in current if code == part_code}
            if part_code in own_parts:
                holders.add(plan.id)
            active = sorted(
                (snapshot.plans[plan_id] for plan_id in holders if plan_id in snapshot.plans),
                key=lambda holder: (holder.start_date, holder.id),
            )
            free = snapshot.current_stock(part_code)
            for holder in active:
                quantity = min(allocations.get((holder.id, part_code), 0), max(0, free))
                free -= quantity
                targets[(holder.id, part_code)] = quantity
            for plan_id in holders - {holder.id for holder in active}:
                targets[(plan_id, part_code)] = 0
        if not keep_own:
            for key in targets:
                if key[0] == plan.id:
                    targets[key] = 0

        changed = sorted(key for key, quantity in targets.items() if current.get(key, 0) != quantity)
        released: dict[str, int] = {}
        for plan_id, part_code in changed:
            if (plan_id, part_code) in current:
                quantity = current[(plan_id, part_code)]
                await self._release_row(plan_id, part_code, quantity, actor)
                if plan_id == plan.id:
                    released[part_code] = quantity
        for plan_id, part_code in changed:
            if targets[(plan_id, part_code)] > 0:
                await self._reserve(plan_id, part_code, targets[(plan_id, part_code)], actor)

        if changed:
            logger.info(
                "Reservations rebalanced for plan %s: %d rows changed by %s",
                plan.id,
                len(changed),
                actor,
            )
        return released

    async def _reserve(self, plan_id: int, part_code: str, quantity: int, actor: str) -> None:
        inventory = await self.stock_service._inventory_for_update(part_code)
        await self.db.execute_write_no_commit(
            """
            INSERT INTO inventory_reservations (
                production_plan_id, part_code, reserved_quantity, created_by
            ) VALUES (?, ?, ?, ?)
            """,
            [plan_id, part_code, quantity, actor],
        )
        await self._refresh_reserved(part_code)
        await append_entry(
            self.db,
            part_code=part_code,
            transaction_type=TransactionType.RESERVATION,
            quantity=quantity,
            before_stock=inventory.current_stock,
            after_stock=inventory.current_stock,
            actor=actor,
            reference_type=PRODUCTION_PLAN_REFERENCE,
            reference_id=plan_id,
            remarks=f"Reserved for plan {plan_id}",
        )

    async def _release(self, plan: ProductionPlanModel, actor: str) -> dict[str, int]:
        """Delete every reservation of the plan; returns released quantities."""
        released: dict[str, int] = {}
        for reservation in await self.reader.get_reservations(plan_id=plan.id):
            await self._release_row(
                plan.id, reservation.part_code, reservation.reserved_quantity, actor
            )
            released[reservation.part_code] = reservation.reserved_quantity
        return released

    async def _release_row(self, plan_id: int, part_code: str, quantity: int, actor: str) -> None:
        await self.db.execute_write_no_commit(
            "DELETE FROM inventory_reservations WHERE production_plan_id = ? AND part_code = ?",
            [plan_id, part_code],
        )
        await self._refresh_reserved(part_code)
        inventory = await self.reader.get_inventory_row(part_code)
        stock = inventory.current_stock if inventory else 0
        await append_entry(
            self.db,
            part_code=part_code,
            transaction_type=TransactionType.RESERVATION_RELEASE,
            quantity=quantity,
            before_stock=stock,
            after_stock=stock,
            actor=actor,
            reference_type=PRODUCTION_PLAN_REFERENCE,
            reference_id=plan_id,
            remarks=f"Released from plan {plan_id}",
        )

    async def _refresh_reserved(self, part_code: str) -> None:
        await self.db.execute_write_no_commit(
            """
            UPDATE inventory
            SET reserved_stock = (
                    SELECT COALESCE(SUM(reserved_quantity), 0)
                    FROM inventory_reservations
                    WHERE part_code = ?
                ),
                updated_at = CURRENT_TIMESTAMP
            WHERE part_code = ?
            """,
            [part_code, part_code],
        )


def _shortage_message(plan_id: int, short: list[Requirement]) -> str:
    parts = ", ".join(f"{row.part_code} (short {row.shortage_quantity})" for row in short)
    return f"Plan {plan_id} cannot start, insufficient stock: {parts}"
