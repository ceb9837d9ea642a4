"""Tests for src/engine/receipt_lifecycle.py"""

from datetime import date

import pytest

from src.engine.receipt_lifecycle import (
    TransitionPayload,
    can_transition,
    validate_transition,
)
from src.exceptions import InvalidInputError, InvalidStateTransitionError
from src.readers.models import ReceiptStatus

AWAITING = ReceiptStatus.AWAITING_DELIVERY_DATE
SCHEDULED = ReceiptStatus.SCHEDULED
RECEIVED = ReceiptStatus.RECEIVED
CANCELLED = ReceiptStatus.CANCELLED

SCHEDULE = TransitionPayload(scheduled_quantity=10, scheduled_date=date(2025, 1, 8))
RECEIVE = TransitionPayload(actual_quantity=10, receipt_date=date(2025, 1, 8))


class TestTransitions:
    """Tests for the receipt state machine."""

    @pytest.mark.parametrize(
        "current,target",
        [(AWAITING, SCHEDULED), (SCHEDULED, RECEIVED), (AWAITING, CANCELLED), (SCHEDULED, CANCELLED)],
    )
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (AWAITING, RECEIVED),
            (SCHEDULED, AWAITING),
            (RECEIVED, CANCELLED),
            (RECEIVED, SCHEDULED),
            (CANCELLED, SCHEDULED),
            (CANCELLED, RECEIVED),
            (SCHEDULED, SCHEDULED),
        ],
    )
    def test_forbidden(self, current, target):
        assert not can_transition(current, target)

    def test_awaiting_to_received_rejected(self):
        """Skipping the delivery response is an invalid transition."""
        with pytest.raises(InvalidStateTransitionError):
            validate_transition(AWAITING, RECEIVED, RECEIVE)

    def test_cancel_after_receipt_rejected(self):
        with pytest.raises(InvalidStateTransitionError):
            validate_transition(RECEIVED, CANCELLED, TransitionPayload(reason="late"))


class TestPayloadValidation:
    """Tests for transition payload requirements."""

    def test_schedule_requires_positive_quantity(self):
        with pytest.raises(InvalidInputError):
            validate_transition(
                AWAITING,
                SCHEDULED,
                TransitionPayload(scheduled_quantity=0, scheduled_date=date(2025, 1, 8)),
            )

    def test_schedule_requires_date(self):
        with pytest.raises(InvalidInputError):
            validate_transition(AWAITING, SCHEDULED, TransitionPayload(scheduled_quantity=5))

    def test_receive_requires_quantity_and_date(self):
        with pytest.raises(InvalidInputError):
            validate_transition(SCHEDULED, RECEIVED, TransitionPayload(actual_quantity=5))
        with pytest.raises(InvalidInputError):
            validate_transition(
                SCHEDULED, RECEIVED, TransitionPayload(receipt_date=date(2025, 1, 8))
            )

    def test_cancel_needs_no_payload(self):
        validate_transition(SCHEDULED, CANCELLED, TransitionPayload())

    def test_valid_payloads_pass(self):
        validate_transition(AWAITING, SCHEDULED, SCHEDULE)
        validate_transition(SCHEDULED, RECEIVED, RECEIVE)
