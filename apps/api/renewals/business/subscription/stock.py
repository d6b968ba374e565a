from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field

from renewals.business.catalog.inventory import InventoryQuery
from renewals.business.subscription.models import Installment


@dataclass(slots=True)
class StockPartition:
    available: list[Installment] = field(default_factory=list)
    unavailable: list[Installment] = field(default_factory=list)


@dataclass(slots=True)
class StockAvailabilityFilter:
    """Best-effort pre-check: splits installments by whether their item can ship now.

    Availability is asked once per installment, for the demand already accepted
    for the same variant plus its own quantity. It is not a reservation; the
    checkout confirm step re-checks stock before capturing payment.
    """

    inventory: InventoryQuery

    def partition(self, installments: Sequence[Installment]) -> StockPartition:
        result = StockPartition()
        accepted: dict[uuid.UUID, int] = {}
        for installment in installments:
            line_item = installment.line_item
            variant_id = line_item.subscribable_id
            demand = accepted.get(variant_id, 0) + line_item.quantity
            if self.inventory.is_available(variant_id, demand):
                accepted[variant_id] = demand
                result.available.append(installment)
            else:
                result.unavailable.append(installment)
        return result
