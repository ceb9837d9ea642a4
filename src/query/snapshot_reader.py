"""Snapshot reader for the inventory store.

Loads parts, BOM rows, plans, inventory, reservations and receipts and maps
rows to record models. The reader takes no locks itself: callers wrap a
group of reads in ``Database.snapshot()`` (or ``transaction()``) so that
all of them observe the same committed state.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from src.database.connection import Database
from src.engine.planner import Snapshot
from src.readers.models import (
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

logger = logging.getLogger(__name__)

PRODUCTION_PLAN_REFERENCE = "production_plan"

_PART_COLUMNS = """
    part_code, part_name, specification, unit, lead_time_days, safety_stock,
    supplier, category, unit_price, is_active
"""

_RECEIPT_COLUMNS = """
    id, order_no, part_code, supplier, order_quantity, scheduled_quantity,
    order_date, requested_date, scheduled_date, status, actual_quantity,
    received_date, remarks, created_by
"""

_LEDGER_COLUMNS = """
    id, part_code, transaction_type, quantity, before_stock, after_stock,
    reference_type, reference_id, remarks, created_by, transaction_date
"""


class SnapshotReader:
    """Read engine inputs and ledger records from SQLite."""

    def __init__(self, db: Database):
        self.db = db

    # -------------------------------------------------------------------------
    # Master data
    # -------------------------------------------------------------------------

    async def get_parts(self) -> dict[str, PartModel]:
        rows = await self.db.execute_read(
            f"SELECT {_PART_COLUMNS} FROM parts ORDER BY part_code"
        )
        return {row[0]: self._row_to_part(row) for row in rows}

    async def get_part(self, part_code: str) -> Optional[PartModel]:
        rows = await self.db.execute_read(
            f"SELECT {_PART_COLUMNS} FROM parts WHERE part_code = ?",
            [part_code],
        )
        return self._row_to_part(rows[0]) if rows else None

    async def get_bom_rows(self, product_code: Optional[str] = None) -> list[BomLineModel]:
        """Active BOM rows (optionally of one product), with station process group."""
        query = """
            SELECT b.product_code, b.station_code, COALESCE(w.process_group, ''),
                   b.part_code, b.quantity
            FROM bom_items b
            LEFT JOIN work_stations w ON w.station_code = b.station_code
            WHERE b.is_active = 1
        """
        params: list = []
        if product_code is not None:
            query += " AND b.product_code = ?"
            params.append(product_code)
        rows = await self.db.execute_read(query, params)
        return [self._row_to_bom_line(row) for row in rows]

    # -------------------------------------------------------------------------
    # Plans
    # -------------------------------------------------------------------------

    async def get_plan(self, plan_id: int) -> Optional[ProductionPlanModel]:
        rows = await self.db.execute_read(
            """
            SELECT id, product_code, planned_quantity, start_date, status,
                   building_no, remarks
            FROM production_plans
            WHERE id = ?
            """,
            [plan_id],
        )
        return self._row_to_plan(rows[0]) if rows else None

    async def get_active_plans(self) -> dict[int, ProductionPlanModel]:
        rows = await self.db.execute_read(
            """
            SELECT id, product_code, planned_quantity, start_date, status,
                   building_no, remarks
            FROM production_plans
            WHERE status IN (?, ?)
            """,
            [PlanStatus.PLANNED.value, PlanStatus.IN_PROGRESS.value],
        )
        return {row[0]: self._row_to_plan(row) for row in rows}

    # -------------------------------------------------------------------------
    # Inventory
    # -------------------------------------------------------------------------

    async def get_inventory(self) -> dict[str, InventoryModel]:
        rows = await self.db.execute_read(
            """
            SELECT i.part_code, i.current_stock, i.reserved_stock, p.safety_stock
            FROM inventory i
            JOIN parts p ON p.part_code = i.part_code
            """
        )
        return {row[0]: self._row_to_inventory(row) for row in rows}

    async def get_inventory_row(self, part_code: str) -> Optional[InventoryModel]:
        rows = await self.db.execute_read(
            """
            SELECT i.part_code, i.current_stock, i.reserved_stock, p.safety_stock
            FROM inventory i
            JOIN parts p ON p.part_code = i.part_code
            WHERE i.part_code = ?
            """,
            [part_code],
        )
        return self._row_to_inventory(rows[0]) if rows else None

    async def get_reservations(
        self, plan_id: Optional[int] = None, part_code: Optional[str] = None
    ) -> list[ReservationModel]:
        query = """
            SELECT production_plan_id, part_code, reserved_quantity
            FROM inventory_reservations
            WHERE 1 = 1
        """
        params: list = []
        if plan_id is not None:
            query += " AND production_plan_id = ?"
            params.append(plan_id)
        if part_code is not None:
            query += " AND part_code = ?"
            params.append(part_code)
        query += " ORDER BY production_plan_id, part_code"
        rows = await self.db.execute_read(query, params)
        return [
            ReservationModel(plan_id=row[0], part_code=row[1], reserved_quantity=row[2])
            for row in rows
        ]

    async def get_issued_quantities(self) -> dict[tuple[int, str], int]:
        """Stock already issued to each plan, per part."""
        rows = await self.db.execute_read(
            """
            SELECT reference_id, part_code, -SUM(quantity)
            FROM inventory_transactions
            WHERE transaction_type = ? AND reference_type = ?
            GROUP BY reference_id, part_code
            """,
            [TransactionType.ISSUE.value, PRODUCTION_PLAN_REFERENCE],
        )
        return {(row[0], row[1]): row[2] for row in rows if row[2]}

    # -------------------------------------------------------------------------
    # Receipts
    # -------------------------------------------------------------------------

    async def get_receipt(self, receipt_id: int) -> Optional[ScheduledReceiptModel]:
        rows = await self.db.execute_read(
            f"SELECT {_RECEIPT_COLUMNS} FROM scheduled_receipts WHERE id = ?",
            [receipt_id],
        )
        return self._row_to_receipt(rows[0]) if rows else None

    async def get_receipts(
        self,
        part_code: Optional[str] = None,
        statuses: Optional[list[ReceiptStatus]] = None,
    ) -> list[ScheduledReceiptModel]:
        query = f"SELECT {_RECEIPT_COLUMNS} FROM scheduled_receipts WHERE 1 = 1"
        params: list = []
        if part_code is not None:
            query += " AND part_code = ?"
            params.append(part_code)
        if statuses:
            placeholders = ",".join(["?"] * len(statuses))
            query += f" AND status IN ({placeholders})"
            params.extend(status.value for status in statuses)
        query += " ORDER BY order_no"
        rows = await self.db.execute_read(query, params)
        return [self._row_to_receipt(row) for row in rows]

    # -------------------------------------------------------------------------
    # Ledger
    # -------------------------------------------------------------------------

    async def get_ledger(
        self, part_code: str, limit: Optional[int] = None, newest_first: bool = False
    ) -> list[LedgerEntryModel]:
        query = f"SELECT {_LEDGER_COLUMNS} FROM inventory_transactions WHERE part_code = ?"
        query += " ORDER BY id DESC" if newest_first else " ORDER BY id"
        params: list = [part_code]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        rows = await self.db.execute_read(query, params)
        return [self._row_to_ledger(row) for row in rows]

    async def get_stocktaking(self, part_code: str) -> list[StocktakingRecordModel]:
        rows = await self.db.execute_read(
            """
            SELECT id, stocktaking_date, part_code, book_quantity, actual_quantity,
                   difference, reason_code, remarks
            FROM stocktaking
            WHERE part_code = ?
            ORDER BY stocktaking_date, id
            """,
            [part_code],
        )
        return [self._row_to_stocktaking(row) for row in rows]

    # -------------------------------------------------------------------------
    # Whole snapshot
    # -------------------------------------------------------------------------

    async def load_snapshot(self, extra_plan_ids: Optional[list[int]] = None) -> Snapshot:
        """Load every engine input.

        Active plans are always included; ``extra_plan_ids`` adds plans in any
        status so a caller can report on a completed or cancelled plan.
        """
        plans = await self.get_active_plans()
        for plan_id in extra_plan_ids or []:
            if plan_id not in plans:
                plan = await self.get_plan(plan_id)
                if plan is not None:
                    plans[plan_id] = plan

        snapshot = Snapshot(
            parts=await self.get_parts(),
            bom_rows=await self.get_bom_rows(),
            plans=plans,
            inventory=await self.get_inventory(),
            reservations=await self.get_reservations(),
            receipts=await self.get_receipts(),
            issued=await self.get_issued_quantities(),
        )
        logger.debug(
            "Loaded snapshot: %d parts, %d plans, %d receipts",
            len(snapshot.parts),
            len(snapshot.plans),
            len(snapshot.receipts),
        )
        return snapshot

    # -------------------------------------------------------------------------
    # Row mapping
    # -------------------------------------------------------------------------

    @staticmethod
    def _parse_date(value) -> Optional[date]:
        if value is None or value == "":
            return None
        if isinstance(value, date):
            return value
        return date.fromisoformat(str(value)[:10])

    def _row_to_part(self, row) -> PartModel:
        return PartModel(
            part_code=row[0],
            part_name=row[1] or "",
            specification=row[2],
            unit=row[3] or "pcs",
            lead_time_days=row[4] or 0,
            safety_stock=row[5] or 0,
            supplier=row[6],
            category=row[7],
            unit_price=Decimal(str(row[8] or "0")),
            is_active=bool(row[9]),
        )

    def _row_to_bom_line(self, row) -> BomLineModel:
        return BomLineModel(
            product_code=row[0],
            station_code=row[1],
            process_group=row[2] or "",
            part_code=row[3],
            quantity_per_unit=row[4],
        )

    def _row_to_plan(self, row) -> ProductionPlanModel:
        return ProductionPlanModel(
            id=row[0],
            product_code=row[1],
            planned_quantity=row[2],
            start_date=self._parse_date(row[3]),
            status=PlanStatus(row[4]),
            building_no=row[5],
            remarks=row[6],
        )

    def _row_to_inventory(self, row) -> InventoryModel:
        return InventoryModel(
            part_code=row[0],
            current_stock=row[1] or 0,
            reserved_stock=row[2] or 0,
            safety_stock=row[3] or 0,
        )

    def _row_to_receipt(self, row) -> ScheduledReceiptModel:
        return ScheduledReceiptModel(
            id=row[0],
            order_no=row[1],
            part_code=row[2],
            supplier=row[3] or "",
            order_quantity=row[4],
            scheduled_quantity=row[5],
            order_date=self._parse_date(row[6]),
            requested_date=self._parse_date(row[7]),
            scheduled_date=self._parse_date(row[8]),
            status=ReceiptStatus(row[9]),
            actual_quantity=row[10],
            received_date=self._parse_date(row[11]),
            remarks=row[12],
            created_by=row[13],
        )

    def _row_to_ledger(self, row) -> LedgerEntryModel:
        return LedgerEntryModel(
            id=row[0],
            part_code=row[1],
            transaction_type=TransactionType(row[2]),
            quantity=row[3],
            before_stock=row[4],
            after_stock=row[5],
            reference_type=row[6],
            reference_id=row[7],
            remarks=row[8],
            created_by=row[9] or "system",
            transaction_date=str(row[10]) if row[10] is not None else None,
        )

    def _row_to_stocktaking(self, row) -> StocktakingRecordModel:
        return StocktakingRecordModel(
            id=row[0],
            stocktaking_date=self._parse_date(row[1]),
            part_code=row[2],
            book_quantity=row[3],
            actual_quantity=row[4],
            difference=row[5],
            reason_code=StocktakingReason(row[6]) if row[6] else None,
            remarks=row[7],
        )
