"""Scheduled receipt state machine.

AwaitingDeliveryDate -> Scheduled -> Received
AwaitingDeliveryDate | Scheduled -> Cancelled

Received and Cancelled are terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from src.exceptions import InvalidInputError, InvalidStateTransitionError
from src.readers.models import ReceiptStatus

ALLOWED_TRANSITIONS: dict[ReceiptStatus, frozenset[ReceiptStatus]] = {
    ReceiptStatus.AWAITING_DELIVERY_DATE: frozenset(
        {ReceiptStatus.SCHEDULED, ReceiptStatus.CANCELLED}
    ),
    ReceiptStatus.SCHEDULED: frozenset({ReceiptStatus.RECEIVED, ReceiptStatus.CANCELLED}),
    ReceiptStatus.RECEIVED: frozenset(),
    ReceiptStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class TransitionPayload:
    """Fields a transition may carry; which ones are required depends on the target."""

    scheduled_quantity: Optional[int] = None
    scheduled_date: Optional[date] = None
    actual_quantity: Optional[int] = None
    receipt_date: Optional[date] = None
    reason: Optional[str] = None


def can_transition(current: ReceiptStatus, target: ReceiptStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def validate_transition(
    current: ReceiptStatus, target: ReceiptStatus, payload: TransitionPayload
) -> None:
    """Check the state change and its payload.

    Raises:
        InvalidStateTransitionError: target is not adjacent to current.
        InvalidInputError: payload misses or violates a required field.
    """
    if not can_transition(current, target):
        raise InvalidStateTransitionError(
            f"Cannot move receipt from {current.value} to {target.value}"
        )

    if target == ReceiptStatus.SCHEDULED:
        if payload.scheduled_quantity is None or payload.scheduled_quantity <= 0:
            raise InvalidInputError("scheduled_quantity must be positive")
        if payload.scheduled_date is None:
            raise InvalidInputError("scheduled_date is required")
    elif target == ReceiptStatus.RECEIVED:
        if payload.actual_quantity is None or payload.actual_quantity <= 0:
            raise InvalidInputError("actual_quantity must be positive")
        if payload.receipt_date is None:
            raise InvalidInputError("receipt_date is required")
