"""Append-only inventory ledger.

Every stock or reservation change writes one entry with the stock level
before and after it. Entries are only appended inside an open
``Database.transaction()`` so they commit or roll back with the change.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Optional

from src.database.connection import Database
from src.exceptions import DatabaseError
from src.readers.models import LedgerEntryModel, TransactionType

logger = logging.getLogger(__name__)


async def append_entry(
    db: Database,
    part_code: str,
    transaction_type: TransactionType,
    quantity: int,
    before_stock: int,
    after_stock: int,
    actor: str,
    reference_type: Optional[str] = None,
    reference_id: Optional[int] = None,
    remarks: Optional[str] = None,
) -> int:
    """Write one ledger entry and return its id.

    ``quantity`` is the signed change of current stock for stock movements
    and the reserved amount for reservation entries.
    """
    entry_id = await db.execute_write_no_commit(
        """
        INSERT INTO inventory_transactions (
            part_code, transaction_type, quantity, before_stock, after_stock,
            reference_type, reference_id, remarks, created_by
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            part_code,
            transaction_type.value,
            quantity,
            before_stock,
            after_stock,
            reference_type,
            reference_id,
            remarks,
            actor,
        ],
    )
    logger.debug(
        "Ledger %s %s %+d (%d -> %d) by %s",
        part_code,
        transaction_type.value,
        quantity,
        before_stock,
        after_stock,
        actor,
    )
    return entry_id


def replay_stock(entries: Iterable[LedgerEntryModel], opening_stock: int = 0) -> int:
    """Rebuild current stock by walking entries in id order.

    Each entry must start where the previous one ended.

    Raises:
        DatabaseError: the before/after chain is broken.
    """
    stock = opening_stock
    for entry in sorted(entries, key=lambda item: item.id):
        if entry.before_stock != stock:
            raise DatabaseError(
                f"Ledger entry {entry.id} for {entry.part_code} starts at "
                f"{entry.before_stock}, expected {stock}"
            )
        stock = entry.after_stock
    return stock
