"""Purchase order number generation.

Order numbers are ``<prefix><YYMMDD><counter>``, for example ``PO250105001``.
The counter restarts every day and is kept in ``order_number_sequences``;
it must be advanced inside the same transaction that inserts the receipt.
"""

from __future__ import annotations

import logging
from datetime import date

from src.config import OrderNumberConfig
from src.database.connection import Database

logger = logging.getLogger(__name__)


def format_order_no(prefix: str, day: date, sequence: int, width: int = 3) -> str:
    return f"{prefix}{day:%y%m%d}{sequence:0{width}d}"


def sequence_key(prefix: str, day: date) -> str:
    return f"{prefix}{day:%y%m%d}"


class OrderNumberGenerator:
    """Daily order number sequence backed by the database."""

    def __init__(self, db: Database, config: OrderNumberConfig):
        self.db = db
        self.config = config

    async def next_order_no(self, day: date) -> str:
        """Advance the day's counter and return an unused order number."""
        key = sequence_key(self.config.prefix, day)
        while True:
            await self.db.execute_write_no_commit(
                """
                INSERT INTO order_number_sequences (sequence_key, last_value)
                VALUES (?, 1)
                ON CONFLICT(sequence_key) DO UPDATE SET last_value = last_value + 1
                """,
                [key],
            )
            rows = await self.db.execute_read(
                "SELECT last_value FROM order_number_sequences WHERE sequence_key = ?",
                [key],
            )
            order_no = format_order_no(
                self.config.prefix, day, rows[0][0], self.config.sequence_width
            )
            taken = await self.db.execute_read(
                "SELECT 1 FROM scheduled_receipts WHERE order_no = ?", [order_no]
            )
            if not taken:
                return order_no
            logger.debug("Order number %s already used, advancing", order_no)
