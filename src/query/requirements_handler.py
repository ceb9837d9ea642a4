"""Handler for requirement, availability and alert queries.

Every public method reads one snapshot inside ``Database.snapshot()`` and
hands it to the pure engine. Results are never cached: each call sees the
committed state at the moment it runs.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from src.config import AlertThresholdConfig
from src.database.connection import Database
from src.engine.alerts import (
    AlertBucket,
    AlertCategory,
    AlertCounts,
    delayed_receipt_alerts,
    impending_shortage_alerts,
    overdue_procurement_alerts,
)
from src.engine.bom import BomLine, resolve_bom
from src.engine.planner import (
    PartAvailability,
    Requirement,
    Snapshot,
    SufficiencyResult,
    check_sufficiency,
    compute_all_requirements,
    compute_plan_requirements,
    part_availability,
)
from src.engine.shortage import StockStatus
from src.exceptions import InvalidInputError
from src.query.snapshot_reader import SnapshotReader
from src.readers.models import LedgerEntryModel, ScheduledReceiptModel

logger = logging.getLogger(__name__)

ALL_SUFFICIENT = "ALL_SUFFICIENT"
HAS_SHORTAGE = "HAS_SHORTAGE"


@dataclass
class PartAvailabilityDetail:
    """Availability of one part plus the records behind it."""

    availability: PartAvailability
    open_receipts: list[ScheduledReceiptModel] = field(default_factory=list)
    recent_transactions: list[LedgerEntryModel] = field(default_factory=list)


@dataclass
class SufficiencyReport:
    required_date: date
    results: list[SufficiencyResult]

    @property
    def sufficient_count(self) -> int:
        return sum(1 for result in self.results if result.is_sufficient)

    @property
    def overall_status(self) -> str:
        return ALL_SUFFICIENT if all(r.is_sufficient for r in self.results) else HAS_SHORTAGE


@dataclass
class AlertsOverview:
    """Counts of every alert category plus a grand total."""

    categories: dict[AlertCategory, AlertCounts]

    @property
    def total_count(self) -> int:
        return sum(counts.total_count for counts in self.categories.values())

    @property
    def urgent_count(self) -> int:
        return sum(counts.urgent_count for counts in self.categories.values())

    @property
    def warning_count(self) -> int:
        return sum(counts.warning_count for counts in self.categories.values())


class RequirementsHandler:
    """Read-side operations of the requirements engine."""

    def __init__(
        self,
        db: Database,
        thresholds: Optional[AlertThresholdConfig] = None,
        recent_transactions_limit: int = 10,
        today: Callable[[], date] = date.today,
    ):
        self.db = db
        self.reader = SnapshotReader(db)
        self.thresholds = thresholds or AlertThresholdConfig()
        self.recent_transactions_limit = recent_transactions_limit
        self._today = today

    def today(self) -> date:
        return self._today()

    async def resolve_bom(self, product_code: str) -> list[BomLine]:
        async with self.db.snapshot():
            rows = await self.reader.get_bom_rows(product_code)
            parts = await self.reader.get_parts()
        active = {code for code, part in parts.items() if part.is_active}
        return resolve_bom(product_code, rows, active)

    async def compute_plan_requirements(self, plan_id: int) -> list[Requirement]:
        async with self.db.snapshot():
            snapshot = await self.reader.load_snapshot(extra_plan_ids=[plan_id])
        requirements = compute_plan_requirements(snapshot, plan_id)
        logger.info(
            "Plan %s requirements: %d parts, %d short",
            plan_id,
            len(requirements),
            sum(1 for row in requirements if not row.is_sufficient),
        )
        return requirements

    async def compute_part_availability(
        self, part_code: str, as_of_date: Optional[date] = None
    ) -> PartAvailabilityDetail:
        as_of = as_of_date or self.today()
        async with self.db.snapshot():
            snapshot = await self._load_part_snapshot(part_code)
            transactions = await self.reader.get_ledger(
                part_code, limit=self.recent_transactions_limit, newest_first=True
            )
        return PartAvailabilityDetail(
            availability=part_availability(snapshot, part_code, as_of),
            open_receipts=snapshot.open_receipts(part_code),
            recent_transactions=transactions,
        )

    async def list_part_availability(
        self,
        as_of_date: Optional[date] = None,
        status: Optional[StockStatus] = None,
        include_negative: bool = True,
    ) -> list[PartAvailability]:
        """Availability of every active part, ordered by part code."""
        as_of = as_of_date or self.today()
        async with self.db.snapshot():
            snapshot = Snapshot(
                parts=await self.reader.get_parts(),
                inventory=await self.reader.get_inventory(),
                receipts=await self.reader.get_receipts(),
            )

        rows = [
            part_availability(snapshot, part_code, as_of)
            for part_code in sorted(snapshot.active_part_codes)
        ]
        if status is not None:
            rows = [row for row in rows if row.status == status]
        if not include_negative:
            rows = [row for row in rows if row.available_stock >= 0]
        return rows

    async def check_sufficiency(
        self, items: list[tuple[str, int]], required_date: Optional[date] = None
    ) -> SufficiencyReport:
        if not items:
            raise InvalidInputError("At least one item is required")
        needed = required_date or self.today()
        async with self.db.snapshot():
            snapshot = Snapshot(
                parts=await self.reader.get_parts(),
                inventory=await self.reader.get_inventory(),
                receipts=await self.reader.get_receipts(),
            )
        return SufficiencyReport(
            required_date=needed,
            results=check_sufficiency(snapshot, items, needed),
        )

    async def list_alerts(self, category: AlertCategory) -> AlertBucket:
        async with self.db.snapshot():
            snapshot = await self.reader.load_snapshot()
        return self._alerts_for(snapshot, category, self.today())

    async def alert_summary(self) -> AlertsOverview:
        async with self.db.snapshot():
            snapshot = await self.reader.load_snapshot()
        today = self.today()
        return AlertsOverview(
            categories={
                category: self._alerts_for(snapshot, category, today).summary
                for category in AlertCategory
            }
        )

    def _alerts_for(self, snapshot: Snapshot, category: AlertCategory, today: date) -> AlertBucket:
        if category == AlertCategory.DELAYED_RECEIPT:
            return delayed_receipt_alerts(
                snapshot.receipts, snapshot.reservations, snapshot.parts, today, self.thresholds
            )
        requirements = compute_all_requirements(snapshot)
        if category == AlertCategory.OVERDUE_PROCUREMENT:
            return overdue_procurement_alerts(requirements, today, self.thresholds)
        return impending_shortage_alerts(requirements, today, self.thresholds)

    async def _load_part_snapshot(self, part_code: str) -> Snapshot:
        part = await self.reader.get_part(part_code)
        inventory = await self.reader.get_inventory_row(part_code)
        return Snapshot(
            parts={part_code: part} if part else {},
            inventory={part_code: inventory} if inventory else {},
            receipts=await self.reader.get_receipts(part_code=part_code),
        )
