from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from stash_api.domain.entities.price_catalog import BILLING_CYCLES, PlanPrice, PriceCatalog
from stash_api.domain.exceptions import ConfigurationError


def parse_catalog_key(key: str) -> tuple[str, str] | None:
    plan_id, sep, billing_cycle = key.rpartition("_")
    if not sep or not plan_id or billing_cycle not in BILLING_CYCLES:
        return None
    return plan_id, billing_cycle


def build_price_catalog(raw: Mapping[str, Any] | None) -> PriceCatalog:
    """Build the catalog from ``{"<plan>_<monthly|yearly>": "<price id>"}``.

    Raises ConfigurationError when the mapping is empty, a key is malformed,
    a price id is blank or the same price id appears twice.
    """
    if not raw:
        raise ConfigurationError("Stripe price catalog is not configured.")
    if not isinstance(raw, Mapping):
        raise ConfigurationError("Stripe price catalog must be a JSON object.")

    entries: list[PlanPrice] = []
    seen_price_ids: dict[str, str] = {}
    for key, value in raw.items():
        parsed = parse_catalog_key(str(key))
        if parsed is None:
            raise ConfigurationError(
                f"Invalid price catalog key '{key}'; expected '<plan>_monthly' or '<plan>_yearly'."
            )
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(f"Price catalog entry '{key}' must be a non-empty price id.")

        price_id = value.strip()
        if price_id in seen_price_ids:
            raise ConfigurationError(
                f"Price id '{price_id}' is used by both '{seen_price_ids[price_id]}' and '{key}'."
            )
        seen_price_ids[price_id] = str(key)

        plan_id, billing_cycle = parsed
        entries.append(PlanPrice(plan_id=plan_id, billing_cycle=billing_cycle, price_id=price_id))

    return PriceCatalog(entries=tuple(entries))
