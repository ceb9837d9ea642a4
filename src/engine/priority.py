"""First-come-first-served ordering of plans competing for a part.

A plan with an earlier start date has the prior claim on shared inventory.
Plans starting on the same day are ordered by plan id so the order is total.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class PlanDemand:
    """Outstanding requirement of one plan for one part."""

    plan_id: int
    start_date: date
    required_quantity: int


def priority_key(plan_id: int, start_date: date) -> tuple[date, int]:
    return (start_date, plan_id)


def order_plans(demands: Iterable[PlanDemand]) -> list[PlanDemand]:
    """Sort competing plans by (start_date, plan_id); zero demands drop out."""
    competing = [demand for demand in demands if demand.required_quantity > 0]
    competing.sort(key=lambda demand: priority_key(demand.plan_id, demand.start_date))
    return competing


def prior_plans(demands: Iterable[PlanDemand], plan_id: int, start_date: date) -> list[PlanDemand]:
    """Plans strictly ahead of the target plan in priority order."""
    target = priority_key(plan_id, start_date)
    return [
        demand
        for demand in order_plans(demands)
        if demand.plan_id != plan_id
        and priority_key(demand.plan_id, demand.start_date) < target
    ]


def prior_requirement(demands: Iterable[PlanDemand], plan_id: int, start_date: date) -> int:
    """Total requirement of the plans that are served before the target."""
    return sum(demand.required_quantity for demand in prior_plans(demands, plan_id, start_date))
