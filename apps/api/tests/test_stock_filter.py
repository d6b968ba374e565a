from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from renewals.business.catalog.inventory import StockItemInventory, unstock
from renewals.business.catalog.models import StockItem
from renewals.business.subscription.stock import StockAvailabilityFilter


def test_inventory_counts_on_hand_and_backorders(seed, db_session: Session) -> None:
    plenty = seed.variant(on_hand=5)
    empty = seed.variant(on_hand=0)
    backordered = seed.variant(on_hand=0, backorderable=True)
    untracked = seed.variant(on_hand=0, track_inventory=False)
    db_session.commit()

    inventory = StockItemInventory(db_session)

    assert inventory.is_available(plenty.id, 5) is True
    assert inventory.is_available(plenty.id, 6) is False
    assert inventory.is_available(empty.id, 1) is False
    assert inventory.is_available(backordered.id, 3) is True
    assert inventory.is_available(untracked.id, 100) is True
    assert inventory.is_available(uuid.uuid4(), 1) is False


def test_unstock_draws_down_on_hand_then_backorders(seed, db_session: Session) -> None:
    variant = seed.variant(on_hand=2, backorderable=True)
    db_session.commit()

    unstock(db_session, variant.id, 3)
    db_session.commit()

    item = db_session.scalar(select(StockItem).where(StockItem.variant_id == variant.id))
    assert item is not None
    assert item.count_on_hand == -1


def test_partition_splits_by_availability_and_keeps_order(seed, db_session: Session) -> None:
    customer = seed.customer()
    root = seed.root_order(customer)
    in_stock = seed.variant(on_hand=3)
    sold_out = seed.variant(on_hand=0)

    first = seed.installment(customer, in_stock, root_order=root)
    second = seed.installment(customer, sold_out, root_order=root)
    third = seed.installment(customer, in_stock, root_order=root, quantity=2)
    db_session.commit()

    partition = StockAvailabilityFilter(StockItemInventory(db_session)).partition([first, second, third])

    assert [item.id for item in partition.available] == [first.id, third.id]
    assert [item.id for item in partition.unavailable] == [second.id]


def test_partition_asks_inventory_with_accumulated_demand(seed, db_session: Session) -> None:
    customer = seed.customer()
    root = seed.root_order(customer)
    variant = seed.variant()
    installments = [seed.installment(customer, variant, root_order=root, quantity=qty) for qty in (1, 4)]
    db_session.commit()

    calls: list[tuple[uuid.UUID, int]] = []

    class RecordingInventory:
        def is_available(self, variant_id: uuid.UUID, quantity: int) -> bool:
            calls.append((variant_id, quantity))
            return quantity < 3

    partition = StockAvailabilityFilter(RecordingInventory()).partition(installments)

    assert calls == [(variant.id, 1), (variant.id, 5)]
    assert [item.id for item in partition.unavailable] == [installments[1].id]


def test_partition_counts_demand_already_accepted_for_a_variant(seed, db_session: Session) -> None:
    customer = seed.customer()
    root = seed.root_order(customer)
    scarce = seed.variant(on_hand=1)
    plenty = seed.variant(on_hand=10)

    first = seed.installment(customer, scarce, root_order=root)
    other = seed.installment(customer, plenty, root_order=root)
    second = seed.installment(customer, scarce, root_order=root)
    db_session.commit()

    partition = StockAvailabilityFilter(StockItemInventory(db_session)).partition([first, other, second])

    assert [item.id for item in partition.available] == [first.id, other.id]
    assert [item.id for item in partition.unavailable] == [second.id]
