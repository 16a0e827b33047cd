from __future__ import annotations

from stash_api.application.dto.billing import PlanOutput
from stash_api.domain.entities.price_catalog import PriceCatalog


class ListPlansUseCase:
    def __init__(self, *, price_catalog: PriceCatalog):
        self._price_catalog = price_catalog

    def execute(self) -> list[PlanOutput]:
        return [
            PlanOutput(plan_id=plan_id, prices=dict(prices))
            for plan_id, prices in self._price_catalog.plans().items()
        ]
