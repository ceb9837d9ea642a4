"""Availability of a part at a point in time.

available = current stock + scheduled receipts due by the date - prior claims

The result may be negative when prior claims alone exceed supply.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from src.readers.models import ReceiptStatus, ScheduledReceiptModel


@dataclass(frozen=True)
class Availability:
    """Inputs and result of one availability computation."""

    current_stock: int
    scheduled_receipts: int
    prior_reserved: int
    available_stock: int


def counted_receipts(
    receipts: Iterable[ScheduledReceiptModel], part_code: str, until: date
) -> list[ScheduledReceiptModel]:
    """Scheduled receipts of the part whose delivery date is on or before ``until``."""
    return [
        receipt
        for receipt in receipts
        if receipt.part_code == part_code
        and receipt.status == ReceiptStatus.SCHEDULED
        and receipt.scheduled_date is not None
        and receipt.scheduled_date <= until
    ]


def scheduled_receipts_until(
    receipts: Iterable[ScheduledReceiptModel], part_code: str, until: date
) -> int:
    return sum(
        receipt.scheduled_quantity or 0
        for receipt in counted_receipts(receipts, part_code, until)
    )


def compute_availability(
    current_stock: int,
    receipts: Iterable[ScheduledReceiptModel],
    prior_reserved: int,
    part_code: str,
    until: date,
) -> Availability:
    """Compute availability from an explicit snapshot; no state is kept."""
    incoming = scheduled_receipts_until(receipts, part_code, until)
    return Availability(
        current_stock=current_stock,
        scheduled_receipts=incoming,
        prior_reserved=prior_reserved,
        available_stock=current_stock + incoming - prior_reserved,
    )


def allocated_quantity(required_quantity: int, available_stock: int) -> int:
    """Quantity a plan is granted: what it needs, capped by what is left."""
    return min(required_quantity, max(0, available_stock))
