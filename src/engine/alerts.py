"""Alert classification for the dashboard.

Three independent categories; a part may show up in more than one:

- overdue procurement: a shortage whose procurement due date has passed
- delayed receipt: a scheduled receipt whose delivery date has passed
- impending shortage: a shortage for a plan starting within the horizon
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Generic, Optional, TypeVar

from src.config import AlertThresholdConfig
from src.engine.planner import Requirement
from src.readers.models import (
    PartModel,
    ReceiptStatus,
    ReservationModel,
    ScheduledReceiptModel,
)


class AlertCategory(str, Enum):
    OVERDUE_PROCUREMENT = "overdue-procurement"
    DELAYED_RECEIPT = "delayed-receipt"
    IMPENDING_SHORTAGE = "impending-shortage"


class AlertLevel(str, Enum):
    URGENT = "urgent"
    WARNING = "warning"


@dataclass
class OverdueProcurementAlert:
    plan_id: int
    product_code: str
    part_code: str
    part_name: str
    supplier: Optional[str]
    start_date: date
    procurement_due_date: date
    overdue_days: int
    shortage_quantity: int
    level: AlertLevel


@dataclass
class DelayedReceiptAlert:
    receipt_id: int
    order_no: str
    part_code: str
    part_name: str
    supplier: str
    scheduled_quantity: int
    scheduled_date: date
    delay_days: int
    affected_plans_count: int
    level: AlertLevel


@dataclass
class ImpendingShortageAlert:
    plan_id: int
    product_code: str
    part_code: str
    part_name: str
    start_date: date
    days_until_start: int
    required_quantity: int
    available_stock: int
    shortage_quantity: int
    shortage_percentage: float
    level: AlertLevel


AlertT = TypeVar("AlertT")


@dataclass
class AlertCounts:
    total_count: int = 0
    urgent_count: int = 0
    warning_count: int = 0


@dataclass
class AlertBucket(Generic[AlertT]):
    """Urgent and warning alerts of one category with their counts."""

    category: AlertCategory
    urgent: list[AlertT] = field(default_factory=list)
    warning: list[AlertT] = field(default_factory=list)

    @property
    def summary(self) -> AlertCounts:
        return AlertCounts(
            total_count=len(self.urgent) + len(self.warning),
            urgent_count=len(self.urgent),
            warning_count=len(self.warning),
        )


def classify_delay(days: int, thresholds: AlertThresholdConfig) -> Optional[AlertLevel]:
    """Urgent at or past ``urgent_days``, warning at or past ``warning_days``."""
    if days >= thresholds.urgent_days:
        return AlertLevel.URGENT
    if days >= thresholds.warning_days:
        return AlertLevel.WARNING
    return None


def _bucket(category: AlertCategory, alerts: list) -> AlertBucket:
    bucket: AlertBucket = AlertBucket(category=category)
    for alert in alerts:
        if alert.level == AlertLevel.URGENT:
            bucket.urgent.append(alert)
        else:
            bucket.warning.append(alert)
    return bucket


def overdue_procurement_alerts(
    requirements: Iterable[Requirement], today: date, thresholds: AlertThresholdConfig
) -> AlertBucket[OverdueProcurementAlert]:
    alerts: list[OverdueProcurementAlert] = []
    for row in requirements:
        if row.shortage_quantity <= 0 or row.procurement_due_date >= today:
            continue
        overdue_days = (today - row.procurement_due_date).days
        level = classify_delay(overdue_days, thresholds)
        if level is None:
            continue
        alerts.append(
            OverdueProcurementAlert(
                plan_id=row.plan_id,
                product_code=row.product_code,
                part_code=row.part_code,
                part_name=row.part_name,
                supplier=row.supplier,
                start_date=row.start_date,
                procurement_due_date=row.procurement_due_date,
                overdue_days=overdue_days,
                shortage_quantity=row.shortage_quantity,
                level=level,
            )
        )

    alerts.sort(
        key=lambda alert: (
            alert.level != AlertLevel.URGENT,
            -alert.overdue_days,
            -alert.shortage_quantity,
        )
    )
    return _bucket(AlertCategory.OVERDUE_PROCUREMENT, alerts)


def delayed_receipt_alerts(
    receipts: Iterable[ScheduledReceiptModel],
    reservations: Iterable[ReservationModel],
    parts: Mapping[str, PartModel],
    today: date,
    thresholds: AlertThresholdConfig,
) -> AlertBucket[DelayedReceiptAlert]:
    """Scheduled receipts past their delivery date.

    ``affected_plans_count`` is the number of reservations held on the part.
    """
    affected = Counter(reservation.part_code for reservation in reservations)

    alerts: list[DelayedReceiptAlert] = []
    for receipt in receipts:
        if receipt.status != ReceiptStatus.SCHEDULED or receipt.scheduled_date is None:
            continue
        if receipt.scheduled_date >= today:
            continue
        delay_days = (today - receipt.scheduled_date).days
        level = classify_delay(delay_days, thresholds)
        if level is None:
            continue
        part = parts.get(receipt.part_code)
        alerts.append(
            DelayedReceiptAlert(
                receipt_id=receipt.id,
                order_no=receipt.order_no,
                part_code=receipt.part_code,
                part_name=part.part_name if part else "",
                supplier=receipt.supplier,
                scheduled_quantity=receipt.scheduled_quantity or 0,
                scheduled_date=receipt.scheduled_date,
                delay_days=delay_days,
                affected_plans_count=affected[receipt.part_code],
                level=level,
            )
        )

    alerts.sort(key=lambda alert: (-alert.delay_days, -alert.affected_plans_count))
    return _bucket(AlertCategory.DELAYED_RECEIPT, alerts)


def impending_shortage_alerts(
    requirements: Iterable[Requirement], today: date, thresholds: AlertThresholdConfig
) -> AlertBucket[ImpendingShortageAlert]:
    """Shortages of plans starting between today and the horizon (inclusive)."""
    alerts: list[ImpendingShortageAlert] = []
    for row in requirements:
        if row.shortage_quantity <= 0:
            continue
        days_until_start = (row.start_date - today).days
        if days_until_start < 0 or days_until_start > thresholds.shortage_horizon_days:
            continue
        level = (
            AlertLevel.URGENT
            if days_until_start <= thresholds.shortage_urgent_days
            else AlertLevel.WARNING
        )
        alerts.append(
            ImpendingShortageAlert(
                plan_id=row.plan_id,
                product_code=row.product_code,
                part_code=row.part_code,
                part_name=row.part_name,
                start_date=row.start_date,
                days_until_start=days_until_start,
                required_quantity=row.required_quantity,
                available_stock=row.available_stock,
                shortage_quantity=row.shortage_quantity,
                shortage_percentage=round(row.shortage_quantity * 100 / row.required_quantity, 1),
                level=level,
            )
        )

    alerts.sort(key=lambda alert: (alert.start_date, -alert.shortage_quantity))
    return _bucket(AlertCategory.IMPENDING_SHORTAGE, alerts)
