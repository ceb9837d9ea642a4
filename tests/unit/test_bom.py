"""Tests for src/engine/bom.py"""

import pytest

from src.engine.bom import BomLine, expand_plan, resolve_bom
from src.exceptions import InvalidInputError, NotFoundError
from src.readers.models import BomLineModel


def _row(product, station, part, qty, group=""):
    return BomLineModel(
        product_code=product,
        station_code=station,
        process_group=group,
        part_code=part,
        quantity_per_unit=qty,
    )


@pytest.fixture
def bom_rows():
    return [
        _row("PRD-A", "ST-02", "Y", 2, "welding"),
        _row("PRD-A", "ST-01", "X", 1, "assembly"),
        _row("PRD-A", "ST-02", "X", 3, "welding"),
        _row("PRD-A", "ST-01", "Z", 1, "assembly"),
        _row("PRD-B", "ST-01", "X", 1, "assembly"),
    ]


class TestResolveBom:
    """Tests for resolve_bom()."""

    def test_orders_by_station_then_part(self, bom_rows):
        """Rows are ordered by station code, then part code."""
        lines = resolve_bom("PRD-A", bom_rows)

        assert [(line.station_code, line.part_code) for line in lines] == [
            ("ST-01", "X"),
            ("ST-01", "Z"),
            ("ST-02", "X"),
            ("ST-02", "Y"),
        ]

    def test_only_requested_product(self, bom_rows):
        """Rows of other products are ignored."""
        lines = resolve_bom("PRD-B", bom_rows)
        assert lines == [BomLine("ST-01", "assembly", "X", 1)]

    def test_inactive_parts_dropped(self, bom_rows):
        """Parts outside the active set are dropped."""
        lines = resolve_bom("PRD-A", bom_rows, active_parts={"X", "Y"})
        assert {line.part_code for line in lines} == {"X", "Y"}

    def test_unknown_product_raises_not_found(self, bom_rows):
        with pytest.raises(NotFoundError):
            resolve_bom("PRD-C", bom_rows)

    def test_product_with_only_inactive_parts_raises_not_found(self, bom_rows):
        """A BOM left empty after filtering counts as no BOM."""
        with pytest.raises(NotFoundError):
            resolve_bom("PRD-B", bom_rows, active_parts={"Y"})

    def test_deterministic(self, bom_rows):
        """Same input, same output."""
        assert resolve_bom("PRD-A", bom_rows) == resolve_bom("PRD-A", list(reversed(bom_rows)))


class TestExpandPlan:
    """Tests for expand_plan()."""

    def test_multiplies_by_planned_quantity(self, bom_rows):
        demands = expand_plan(10, resolve_bom("PRD-B", bom_rows))
        assert demands["X"].required_quantity == 10

    def test_sums_shared_part_across_stations(self, bom_rows):
        """X used at ST-01 (1) and ST-02 (3) becomes one demand of 4 per unit."""
        demands = expand_plan(5, resolve_bom("PRD-A", bom_rows))

        assert demands["X"].required_quantity == 20
        assert demands["X"].used_in_stations == ["ST-01", "ST-02"]
        assert demands["Y"].required_quantity == 10

    def test_one_entry_per_part_sorted(self, bom_rows):
        demands = expand_plan(1, resolve_bom("PRD-A", bom_rows))
        assert list(demands) == ["X", "Y", "Z"]

    @pytest.mark.parametrize("quantity", [0, -5])
    def test_non_positive_quantity_rejected(self, bom_rows, quantity):
        with pytest.raises(InvalidInputError):
            expand_plan(quantity, resolve_bom("PRD-A", bom_rows))
