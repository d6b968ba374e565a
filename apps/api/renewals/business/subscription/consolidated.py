from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta

from opentelemetry import trace
from sqlalchemy.orm import Session

from renewals.business.catalog.inventory import InventoryQuery, StockItemInventory
from renewals.business.customers.models import Customer
from renewals.business.orders.checkout import CheckoutDriver, CheckoutResult
from renewals.business.orders.models import Order
from renewals.business.payments.gateway import BogusGateway, PaymentGateway
from renewals.business.subscription.assembler import OrderAssembler
from renewals.business.subscription.details import InstallmentDetailRecorder
from renewals.business.subscription.errors import AlreadyProcessed, InvalidInstallmentBatch
from renewals.business.subscription.models import Installment, InstallmentDetail
from renewals.business.subscription.resolvers import select_root_order
from renewals.business.subscription.stock import StockAvailabilityFilter
from renewals.core.config import Settings, get_settings


logger = logging.getLogger("renewals.installments")
tracer = trace.get_tracer("renewals.installments")


class ConsolidatedInstallment:
    """Merges one customer's due installments into a single checkout attempt.

    An instance lives for one processing run. ``order()`` builds the target
    order at most once; ``process()`` drops out-of-stock installments, fills the
    order from the rest and drives it through checkout. Installments are only
    read, apart from the details and reschedule dates written for them.
    """

    def __init__(
        self,
        session: Session,
        installments: Sequence[Installment],
        *,
        inventory: InventoryQuery | None = None,
        gateway: PaymentGateway | None = None,
        settings: Settings | None = None,
    ) -> None:
        if not installments:
            raise InvalidInstallmentBatch("a consolidated installment needs at least one installment")
        customer_ids = {installment.customer_id for installment in installments}
        if len(customer_ids) > 1:
            raise InvalidInstallmentBatch(
                f"installments span {len(customer_ids)} customers; one consolidation handles one customer"
            )

        settings = settings or get_settings()
        interval_days = settings.reprocessing_interval_days
        inventory = inventory or StockItemInventory(session)

        self._session = session
        self._installments: list[Installment] = list(installments)
        self._customer: Customer = self._installments[0].subscription.customer
        self._assembler = OrderAssembler()
        self._stock_filter = StockAvailabilityFilter(inventory)
        self._recorder = InstallmentDetailRecorder(
            reprocessing_interval=timedelta(days=interval_days) if interval_days is not None else None,
        )
        self._checkout = CheckoutDriver(inventory=inventory, gateway=gateway or BogusGateway(), tax_rate=settings.tax_rate)
        self._record_checkout_failures = settings.record_checkout_failure_details

        self._root_order: Order | None = None
        self._order: Order | None = None
        self._processed = False

        self.unavailable: list[Installment] = []
        self.details: list[InstallmentDetail] = []
        self.checkout_result: CheckoutResult | None = None

    @property
    def customer(self) -> Customer:
        return self._customer

    @property
    def installments(self) -> list[Installment]:
        """Installments still part of this run; shrinks when items are dropped for stock."""
        return list(self._installments)

    @property
    def root_order(self) -> Order:
        if self._root_order is None:
            self._root_order = select_root_order(self._installments)
        return self._root_order

    @property
    def processed(self) -> bool:
        return self._processed

    def order(self) -> Order | None:
        """The target order, built on first call; ``None`` once a run found nothing to order."""
        if self._processed and not self._installments:
            return None
        if self._order is None:
            self._order = self._assembler.create_order(self._session, self._customer, self.root_order)
            self._session.commit()
        return self._order

    def process(self) -> Order | None:
        if self._processed:
            raise AlreadyProcessed("this consolidated installment has already been processed")
        self._processed = True

        with tracer.start_as_current_span("installments.consolidated.process") as span:
            span.set_attribute("customer_id", str(self._customer.id))
            span.set_attribute("installment_count", len(self._installments))

            root_order = self.root_order
            self._drop_unavailable()
            if not self._installments:
                if self._order is not None:
                    # an empty cart built by an earlier order() call is not kept
                    self._session.delete(self._order)
                    self._session.commit()
                    self._order = None
                span.set_attribute("outcome", "empty")
                logger.info(
                    "consolidated.nothing_to_order",
                    extra={"installment_ids": [str(item.id) for item in self.unavailable], "status": "empty"},
                )
                return None

            order = self.order()
            self._assembler.add_line_items(order, self._installments)
            self._assembler.apply_defaults(order, self._customer, root_order)
            self._session.add(order)
            self._session.commit()

            result = self._checkout.run(self._session, order)
            self.checkout_result = result
            span.set_attribute("order_id", str(order.id))
            span.set_attribute("outcome", "completed" if result.completed else "halted")

            if result.completed:
                for installment in self._installments:
                    self._recorder.succeeded(self._session, installment, order)
            elif self._record_checkout_failures:
                for installment in self._installments:
                    if result.payment_failure:
                        detail = self._recorder.payment_failed(self._session, installment, order)
                    else:
                        detail = self._recorder.checkout_failed(self._session, installment, order)
                    self.details.append(detail)
            self._session.commit()
            return order

    def _drop_unavailable(self) -> None:
        partition = self._stock_filter.partition(self._installments)
        for installment in partition.unavailable:
            self.details.append(self._recorder.out_of_stock(self._session, installment))

        self.unavailable = partition.unavailable
        self._installments = partition.available
        self._session.commit()
