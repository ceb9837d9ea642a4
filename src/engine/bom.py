"""BOM resolution and plan requirement expansion.

Both steps are pure: they take already-loaded BOM rows and return new
structures, so they can be exercised without a database.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from src.exceptions import InvalidInputError, NotFoundError
from src.readers.models import BomLineModel


@dataclass(frozen=True)
class BomLine:
    """One flattened BOM row of a product."""

    station_code: str
    process_group: str
    part_code: str
    quantity_per_unit: int


@dataclass
class PartDemand:
    """Absolute requirement of one part for one plan, summed over stations."""

    part_code: str
    required_quantity: int
    used_in_stations: list[str] = field(default_factory=list)


def resolve_bom(
    product_code: str,
    rows: Iterable[BomLineModel],
    active_parts: Optional[set[str]] = None,
) -> list[BomLine]:
    """Return the product's BOM ordered by station then part code.

    Rows of other products are ignored. When ``active_parts`` is given, rows
    referencing a part outside it are dropped.

    Raises:
        NotFoundError: the product has no active BOM rows.
    """
    lines = [
        BomLine(
            station_code=row.station_code,
            process_group=row.process_group,
            part_code=row.part_code,
            quantity_per_unit=row.quantity_per_unit,
        )
        for row in rows
        if row.product_code == product_code
        and (active_parts is None or row.part_code in active_parts)
    ]
    if not lines:
        raise NotFoundError(f"No active BOM rows for product {product_code}")

    lines.sort(key=lambda line: (line.station_code, line.part_code))
    return lines


def expand_plan(planned_quantity: int, lines: Iterable[BomLine]) -> dict[str, PartDemand]:
    """Multiply per-unit quantities by the plan quantity.

    Stations sharing a part collapse into a single demand for that part, so
    the result has exactly one entry per part code (ordered by part code).
    """
    if planned_quantity <= 0:
        raise InvalidInputError(f"Planned quantity must be positive, got {planned_quantity}")

    demands: dict[str, PartDemand] = {}
    for line in lines:
        demand = demands.get(line.part_code)
        if demand is None:
            demand = PartDemand(part_code=line.part_code, required_quantity=0)
            demands[line.part_code] = demand
        demand.required_quantity += line.quantity_per_unit * planned_quantity
        if line.station_code not in demand.used_in_stations:
            demand.used_in_stations.append(line.station_code)

    return {code: demands[code] for code in sorted(demands)}
