"""Shortage, due-date and reorder derivation.

Two shortage notions share the availability calculation:

- plan-driven: a plan's requirement against what is left for it
- safety-stock-driven: a part's available stock against its safety floor
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum


class StockStatus(str, Enum):
    SHORTAGE = "Shortage"
    OK = "Ok"


class StockoutRisk(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


@dataclass(frozen=True)
class SafetyStockAssessment:
    status: StockStatus
    recommended_order_quantity: int
    stockout_risk: StockoutRisk


def shortage_quantity(required_quantity: int, available_stock: int) -> int:
    return max(0, required_quantity - available_stock)


def procurement_due_date(start_date: date, lead_time_days: int) -> date:
    """Latest date an order can be placed and still arrive before start."""
    return start_date - timedelta(days=lead_time_days)


def stockout_risk(available_stock: int, safety_stock: int) -> StockoutRisk:
    if available_stock < 0:
        return StockoutRisk.HIGH
    if available_stock < safety_stock:
        return StockoutRisk.MEDIUM
    return StockoutRisk.LOW


def assess_safety_stock(available_stock: int, safety_stock: int) -> SafetyStockAssessment:
    """Classify a part against its safety floor.

    Parts below the floor are topped up to twice the floor; parts at or
    above it get no recommendation.
    """
    if available_stock < safety_stock:
        return SafetyStockAssessment(
            status=StockStatus.SHORTAGE,
            recommended_order_quantity=max(0, safety_stock * 2 - available_stock),
            stockout_risk=stockout_risk(available_stock, safety_stock),
        )
    return SafetyStockAssessment(
        status=StockStatus.OK,
        recommended_order_quantity=0,
        stockout_risk=stockout_risk(available_stock, safety_stock),
    )
