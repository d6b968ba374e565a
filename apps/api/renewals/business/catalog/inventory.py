from __future__ import annotations

import uuid
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from renewals.business.catalog.models import StockItem, Variant


class InventoryQuery(Protocol):
    def is_available(self, variant_id: uuid.UUID, quantity: int) -> bool: ...


class StockItemInventory:
    """Answers availability from the persisted stock items of a variant.

    Untracked variants are always available. Tracked variants are available
    when the on-hand count across all locations covers the quantity, or when
    any location accepts backorders.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def is_available(self, variant_id: uuid.UUID, quantity: int) -> bool:
        variant = self._session.get(Variant, variant_id)
        if variant is None:
            return False
        if not variant.track_inventory:
            return True

        stock_items = self._session.scalars(select(StockItem).where(StockItem.variant_id == variant_id)).all()
        if any(item.backorderable for item in stock_items):
            return True
        return sum(max(item.count_on_hand, 0) for item in stock_items) >= quantity


def unstock(session: Session, variant_id: uuid.UUID, quantity: int) -> None:
    variant = session.get(Variant, variant_id)
    if variant is None or not variant.track_inventory:
        return

    stock_items = session.scalars(
        select(StockItem).where(StockItem.variant_id == variant_id).order_by(StockItem.count_on_hand.desc())
    ).all()
    if not stock_items:
        return

    remaining = quantity
    for item in stock_items:
        if remaining <= 0:
            break
        taken = min(max(item.count_on_hand, 0), remaining)
        item.count_on_hand -= taken
        remaining -= taken
        session.add(item)

    if remaining > 0:
        # backordered units are drawn from the first backorderable location
        backorder_item = next((item for item in stock_items if item.backorderable), stock_items[0])
        backorder_item.count_on_hand -= remaining
        session.add(backorder_item)
