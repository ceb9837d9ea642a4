"""Stock mutations: receipt, issue, adjustment and stocktaking.

Each public method runs in one ``Database.transaction()``: it reads the
inventory row, validates, writes the new level and appends a ledger entry.
A rejected mutation leaves no trace. The underscored variants do the same
work without opening a transaction, for callers that already hold one.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from src.database.connection import Database
from src.exceptions import InsufficientStockError, InvalidInputError, NotFoundError
from src.query.snapshot_reader import SnapshotReader
from src.readers.models import (
    InventoryModel,
    LedgerEntryModel,
    StocktakingReason,
    StocktakingRecordModel,
    TransactionType,
)
from src.services.ledger import append_entry

logger = logging.getLogger(__name__)


def parse_reason_code(value: Optional[str]) -> Optional[StocktakingReason]:
    if value is None:
        return None
    try:
        return StocktakingReason(value)
    except ValueError:
        raise InvalidInputError(f"Unknown stocktaking reason code: {value}") from None


class StockService:
    """Transactional stock changes with ledger entries."""

    def __init__(self, db: Database):
        self.db = db
        self.reader = SnapshotReader(db)

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    async def receive(
        self,
        part_code: str,
        quantity: int,
        actor: str,
        remarks: Optional[str] = None,
        reference_type: Optional[str] = None,
        reference_id: Optional[int] = None,
    ) -> InventoryModel:
        async with self.db.transaction():
            return await self._receive(
                part_code, quantity, actor, remarks, reference_type, reference_id
            )

    async def issue(
        self,
        part_code: str,
        quantity: int,
        actor: str,
        remarks: Optional[str] = None,
        reference_type: Optional[str] = None,
        reference_id: Optional[int] = None,
    ) -> InventoryModel:
        async with self.db.transaction():
            return await self._issue(
                part_code, quantity, actor, remarks, reference_type, reference_id
            )

    async def adjust(
        self, part_code: str, new_stock: int, actor: str, remarks: Optional[str] = None
    ) -> InventoryModel:
        """Set current stock to an absolute level."""
        if new_stock < 0:
            raise InvalidInputError(f"Stock cannot be negative, got {new_stock}")

        async with self.db.transaction():
            row = await self._inventory_for_update(part_code)
            if new_stock < row.reserved_stock:
                logger.warning(
                    "Adjustment of %s to %d rejected: %d reserved (by %s)",
                    part_code,
                    new_stock,
                    row.reserved_stock,
                    actor,
                )
                raise InsufficientStockError(
                    f"Stock of {part_code} cannot go below reserved {row.reserved_stock}"
                )
            updated = await self._write_stock(
                row,
                new_stock,
                TransactionType.ADJUSTMENT,
                actor,
                remarks=remarks or "Manual adjustment",
            )
        logger.info("Adjusted %s to %d by %s", part_code, new_stock, actor)
        return updated

    async def stocktake(
        self,
        part_code: str,
        actual_quantity: int,
        actor: str,
        stocktaking_date: Optional[date] = None,
        reason_code: Optional[str] = None,
        remarks: Optional[str] = None,
    ) -> StocktakingRecordModel:
        """Record a physical count and correct stock to it."""
        if actual_quantity < 0:
            raise InvalidInputError(f"Counted quantity cannot be negative, got {actual_quantity}")
        reason = parse_reason_code(reason_code)
        counted_on = stocktaking_date or date.today()

        async with self.db.transaction():
            row = await self._inventory_for_update(part_code)
            if actual_quantity < row.reserved_stock:
                logger.warning(
                    "Stocktaking of %s at %d rejected: %d reserved (by %s)",
                    part_code,
                    actual_quantity,
                    row.reserved_stock,
                    actor,
                )
                raise InsufficientStockError(
                    f"Counted stock of {part_code} is below reserved {row.reserved_stock}"
                )
            difference = actual_quantity - row.current_stock
            record_id = await self.db.execute_write_no_commit(
                """
                INSERT INTO stocktaking (
                    stocktaking_date, part_code, book_quantity, actual_quantity,
                    difference, reason_code, remarks, created_by
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    counted_on.isoformat(),
                    part_code,
                    row.current_stock,
                    actual_quantity,
                    difference,
                    reason.value if reason else None,
                    remarks,
                    actor,
                ],
            )
            if difference != 0:
                await self._write_stock(
                    row,
                    actual_quantity,
                    TransactionType.STOCKTAKING,
                    actor,
                    reference_type="stocktaking",
                    reference_id=record_id,
                    remarks=remarks or f"Stocktaking ({reason.value if reason else 'unspecified'})",
                )

        logger.info(
            "Stocktaking %s: book %d, counted %d by %s",
            part_code,
            row.current_stock,
            actual_quantity,
            actor,
        )
        return StocktakingRecordModel(
            id=record_id,
            stocktaking_date=counted_on,
            part_code=part_code,
            book_quantity=row.current_stock,
            actual_quantity=actual_quantity,
            difference=difference,
            reason_code=reason,
            remarks=remarks,
        )

    async def get_inventory(self, part_code: str) -> InventoryModel:
        async with self.db.snapshot():
            part = await self.reader.get_part(part_code)
            row = await self.reader.get_inventory_row(part_code)
        if part is None:
            raise NotFoundError(f"Part {part_code} not found")
        return row or InventoryModel(part_code=part_code)

    async def ledger(self, part_code: str, limit: Optional[int] = None) -> list[LedgerEntryModel]:
        """Ledger entries of a part, oldest first."""
        async with self.db.snapshot():
            part = await self.reader.get_part(part_code)
            entries = await self.reader.get_ledger(part_code, limit=limit)
        if part is None:
            raise NotFoundError(f"Part {part_code} not found")
        return entries

    # -------------------------------------------------------------------------
    # Work inside an open transaction
    # -------------------------------------------------------------------------

    async def _receive(
        self,
        part_code: str,
        quantity: int,
        actor: str,
        remarks: Optional[str] = None,
        reference_type: Optional[str] = None,
        reference_id: Optional[int] = None,
    ) -> InventoryModel:
        if quantity <= 0:
            raise InvalidInputError(f"Receipt quantity must be positive, got {quantity}")
        row = await self._inventory_for_update(part_code)
        updated = await self._write_stock(
            row,
            row.current_stock + quantity,
            TransactionType.RECEIPT,
            actor,
            reference_type=reference_type,
            reference_id=reference_id,
            remarks=remarks,
        )
        logger.info("Received %d of %s by %s", quantity, part_code, actor)
        return updated

    async def _issue(
        self,
        part_code: str,
        quantity: int,
        actor: str,
        remarks: Optional[str] = None,
        reference_type: Optional[str] = None,
        reference_id: Optional[int] = None,
    ) -> InventoryModel:
        if quantity <= 0:
            raise InvalidInputError(f"Issue quantity must be positive, got {quantity}")
        row = await self._inventory_for_update(part_code)
        free = row.current_stock - row.reserved_stock
        if quantity > free:
            logger.warning(
                "Issue of %d %s rejected: %d free (by %s)", quantity, part_code, free, actor
            )
            raise InsufficientStockError(
                f"Cannot issue {quantity} of {part_code}: only {max(free, 0)} unreserved"
            )
        updated = await self._write_stock(
            row,
            row.current_stock - quantity,
            TransactionType.ISSUE,
            actor,
            reference_type=reference_type,
            reference_id=reference_id,
            remarks=remarks,
        )
        logger.info("Issued %d of %s by %s", quantity, part_code, actor)
        return updated

    async def _inventory_for_update(self, part_code: str) -> InventoryModel:
        """Current inventory row; created empty for a known part without one."""
        row = await self.reader.get_inventory_row(part_code)
        if row is not None:
            return row
        part = await self.reader.get_part(part_code)
        if part is None:
            raise NotFoundError(f"Part {part_code} not found")
        await self.db.execute_write_no_commit(
            "INSERT INTO inventory (part_code, current_stock, reserved_stock) VALUES (?, 0, 0)",
            [part_code],
        )
        return InventoryModel(part_code=part_code, safety_stock=part.safety_stock)

    async def _write_stock(
        self,
        row: InventoryModel,
        new_stock: int,
        transaction_type: TransactionType,
        actor: str,
        reference_type: Optional[str] = None,
        reference_id: Optional[int] = None,
        remarks: Optional[str] = None,
    ) -> InventoryModel:
        await self.db.execute_write_no_commit(
            """
            UPDATE inventory
            SET current_stock = ?, updated_at = CURRENT_TIMESTAMP
            WHERE part_code = ?
            """,
            [new_stock, row.part_code],
        )
        await append_entry(
            self.db,
            part_code=row.part_code,
            transaction_type=transaction_type,
            quantity=new_stock - row.current_stock,
            before_stock=row.current_stock,
            after_stock=new_stock,
            actor=actor,
            reference_type=reference_type,
            reference_id=reference_id,
            remarks=remarks,
        )
        return row.model_copy(update={"current_stock": new_stock})
