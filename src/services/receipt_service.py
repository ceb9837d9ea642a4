"""Scheduled receipt (purchase order) lifecycle.

Creation draws an order number from the daily sequence in the same
transaction as the insert. Status changes follow the receipt state machine;
receiving a receipt adds its actual quantity to stock with a ledger entry
referencing the receipt.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Optional

from src.config import OrderNumberConfig
from src.database.connection import Database
from src.engine.receipt_lifecycle import TransitionPayload, validate_transition
from src.exceptions import ConflictError, InvalidInputError, NotFoundError, StockLensError
from src.query.snapshot_reader import SnapshotReader
from src.readers.models import ReceiptStatus, ScheduledReceiptModel
from src.services.order_numbers import OrderNumberGenerator
from src.services.stock_service import StockService

logger = logging.getLogger(__name__)

RECEIPT_REFERENCE = "scheduled_receipt"


class ReceiptService:
    """Create, list and transition scheduled receipts."""

    def __init__(
        self,
        db: Database,
        stock_service: StockService,
        order_numbers: Optional[OrderNumberConfig] = None,
        today: Callable[[], date] = date.today,
    ):
        self.db = db
        self.stock_service = stock_service
        self.reader = SnapshotReader(db)
        self.order_numbers = OrderNumberGenerator(db, order_numbers or OrderNumberConfig())
        self._today = today

    async def create_receipt(
        self,
        part_code: str,
        order_quantity: int,
        actor: str,
        requested_date: Optional[date] = None,
        order_date: Optional[date] = None,
        order_no: Optional[str] = None,
        remarks: Optional[str] = None,
    ) -> ScheduledReceiptModel:
        """Open a purchase order awaiting its delivery date.

        The supplier is taken from the part master.

        Raises:
            InvalidInputError: non-positive quantity.
            NotFoundError: unknown part.
            ConflictError: an explicit order number is already used.
        """
        if order_quantity <= 0:
            raise InvalidInputError(f"Order quantity must be positive, got {order_quantity}")
        ordered_on = order_date or self._today()

        async with self.db.transaction():
            part = await self.reader.get_part(part_code)
            if part is None:
                raise NotFoundError(f"Part {part_code} not found")

            if order_no:
                taken = await self.db.execute_read(
                    "SELECT 1 FROM scheduled_receipts WHERE order_no = ?", [order_no]
                )
                if taken:
                    raise ConflictError(f"Order number {order_no} already exists")
            else:
                order_no = await self.order_numbers.next_order_no(ordered_on)

            receipt_id = await self.db.execute_write_no_commit(
                """
                INSERT INTO scheduled_receipts (
                    order_no, part_code, supplier, order_quantity, order_date,
                    requested_date, status, remarks, created_by
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    order_no,
                    part_code,
                    part.supplier or "",
                    order_quantity,
                    ordered_on.isoformat(),
                    requested_date.isoformat() if requested_date else None,
                    ReceiptStatus.AWAITING_DELIVERY_DATE.value,
                    remarks,
                    actor,
                ],
            )
            receipt = await self.reader.get_receipt(receipt_id)

        logger.info(
            "Created receipt %s for %d %s by %s", order_no, order_quantity, part_code, actor
        )
        return receipt

    async def get_receipt(self, receipt_id: int) -> ScheduledReceiptModel:
        async with self.db.snapshot():
            receipt = await self.reader.get_receipt(receipt_id)
        if receipt is None:
            raise NotFoundError(f"Scheduled receipt {receipt_id} not found")
        return receipt

    async def list_receipts(
        self, part_code: Optional[str] = None, status: Optional[ReceiptStatus] = None
    ) -> list[ScheduledReceiptModel]:
        async with self.db.snapshot():
            return await self.reader.get_receipts(
                part_code=part_code, statuses=[status] if status else None
            )

    async def transition(
        self,
        receipt_id: int,
        target: ReceiptStatus,
        payload: TransitionPayload,
        actor: str,
    ) -> ScheduledReceiptModel:
        """Move a receipt to ``target`` and return the updated receipt.

        Raises:
            NotFoundError: unknown receipt.
            InvalidStateTransitionError: target not reachable from current status.
            InvalidInputError: payload incomplete for the target.
        """
        async with self.db.transaction():
            receipt = await self.reader.get_receipt(receipt_id)
            if receipt is None:
                raise NotFoundError(f"Scheduled receipt {receipt_id} not found")

            try:
                validate_transition(receipt.status, target, payload)
            except StockLensError as exc:
                logger.warning(
                    "Receipt %s %s -> %s rejected: %s (by %s)",
                    receipt.order_no,
                    receipt.status.value,
                    target.value,
                    exc,
                    actor,
                )
                raise

            if target == ReceiptStatus.SCHEDULED:
                await self._schedule(receipt, payload)
            elif target == ReceiptStatus.RECEIVED:
                await self._receive(receipt, payload, actor)
            else:
                await self._cancel(receipt, payload, actor)

            updated = await self.reader.get_receipt(receipt_id)

        logger.info(
            "Receipt %s %s -> %s by %s",
            receipt.order_no,
            receipt.status.value,
            target.value,
            actor,
        )
        return updated

    async def respond_delivery(
        self, receipt_id: int, scheduled_quantity: int, scheduled_date: date, actor: str
    ) -> ScheduledReceiptModel:
        return await self.transition(
            receipt_id,
            ReceiptStatus.SCHEDULED,
            TransitionPayload(scheduled_quantity=scheduled_quantity, scheduled_date=scheduled_date),
            actor,
        )

    async def mark_received(
        self,
        receipt_id: int,
        actual_quantity: int,
        receipt_date: date,
        actor: str,
        remarks: Optional[str] = None,
    ) -> ScheduledReceiptModel:
        return await self.transition(
            receipt_id,
            ReceiptStatus.RECEIVED,
            TransitionPayload(
                actual_quantity=actual_quantity, receipt_date=receipt_date, reason=remarks
            ),
            actor,
        )

    async def cancel(
        self, receipt_id: int, actor: str, reason: Optional[str] = None
    ) -> ScheduledReceiptModel:
        return await self.transition(
            receipt_id, ReceiptStatus.CANCELLED, TransitionPayload(reason=reason), actor
        )

    async def _schedule(self, receipt: ScheduledReceiptModel, payload: TransitionPayload) -> None:
        await self.db.execute_write_no_commit(
            """
            UPDATE scheduled_receipts
            SET status = ?, scheduled_quantity = ?, scheduled_date = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            [
                ReceiptStatus.SCHEDULED.value,
                payload.scheduled_quantity,
                payload.scheduled_date.isoformat(),
                receipt.id,
            ],
        )

    async def _receive(
        self, receipt: ScheduledReceiptModel, payload: TransitionPayload, actor: str
    ) -> None:
        await self.db.execute_write_no_commit(
            """
            UPDATE scheduled_receipts
            SET status = ?, actual_quantity = ?, received_date = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            [
                ReceiptStatus.RECEIVED.value,
                payload.actual_quantity,
                payload.receipt_date.isoformat(),
                receipt.id,
            ],
        )
        await self.stock_service._receive(
            receipt.part_code,
            payload.actual_quantity,
            actor,
            remarks=payload.reason or f"Receipt {receipt.order_no}",
            reference_type=RECEIPT_REFERENCE,
            reference_id=receipt.id,
        )

    async def _cancel(
        self, receipt: ScheduledReceiptModel, payload: TransitionPayload, actor: str
    ) -> None:
        remarks = receipt.remarks or ""
        if payload.reason:
            note = f"Cancelled by {actor}: {payload.reason}"
            remarks = f"{remarks}\n{note}" if remarks else note
        await self.db.execute_write_no_commit(
            """
            UPDATE scheduled_receipts
            SET status = ?, remarks = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            [ReceiptStatus.CANCELLED.value, remarks or None, receipt.id],
        )
