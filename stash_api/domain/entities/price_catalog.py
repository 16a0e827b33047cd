from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


BillingCycle = Literal["monthly", "yearly"]

BILLING_CYCLES: tuple[BillingCycle, ...] = ("monthly", "yearly")


@dataclass(frozen=True)
class PlanPrice:
    plan_id: str
    billing_cycle: BillingCycle
    price_id: str


@dataclass(frozen=True)
class PriceCatalog:
    entries: tuple[PlanPrice, ...]

    def resolve_price_id(self, *, plan_id: str, billing_cycle: str) -> str | None:
        for entry in self.entries:
            if entry.plan_id == plan_id and entry.billing_cycle == billing_cycle:
                return entry.price_id
        return None

    def reverse_lookup(self, *, price_id: str) -> PlanPrice | None:
        for entry in self.entries:
            if entry.price_id == price_id:
                return entry
        return None

    def plans(self) -> dict[str, dict[str, str]]:
        grouped: dict[str, dict[str, str]] = {}
        for entry in self.entries:
            grouped.setdefault(entry.plan_id, {})[entry.billing_cycle] = entry.price_id
        return grouped
