from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from fastapi import HTTPException, status
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from sqlalchemy import select
from sqlalchemy.orm import Session

from renewals.business.catalog.inventory import InventoryQuery, StockItemInventory
from renewals.business.orders.models import Order
from renewals.business.payments.gateway import BogusGateway, PaymentGateway
from renewals.business.subscription.consolidated import ConsolidatedInstallment
from renewals.business.subscription.errors import InvalidInstallmentBatch
from renewals.business.subscription.models import Installment, InstallmentDetail
from renewals.business.subscription.schemas import (
    InstallmentDetailRead,
    OrderSummaryRead,
    ProcessingResultRead,
    ProcessingStatus,
)
from renewals.context import reset_correlation_id, reset_customer_id, set_correlation_id, set_customer_id
from renewals.metrics import observe_consolidated_run


logger = logging.getLogger("renewals.installments")
tracer = trace.get_tracer("renewals.installments")


def _run_status(order: Order | None) -> ProcessingStatus:
    if order is None:
        return "empty"
    return "completed" if order.is_complete else "halted"


@dataclass(slots=True)
class InstallmentProcessingService:
    gateway: PaymentGateway = field(default_factory=BogusGateway)
    inventory_factory: Callable[[Session], InventoryQuery] = StockItemInventory

    def process_installments(
        self,
        session: Session,
        installment_ids: Sequence[uuid.UUID],
        *,
        correlation_id: str | None = None,
    ) -> ProcessingResultRead:
        installments = self._load_installments(session, installment_ids)
        customer_id = str(installments[0].customer_id)

        correlation_token = set_correlation_id(correlation_id) if correlation_id is not None else None
        customer_token = set_customer_id(customer_id)
        started = time.perf_counter()
        final_status = "failed"

        with tracer.start_as_current_span("installments.process") as span:
            span.set_attribute("customer_id", customer_id)
            span.set_attribute("installment_count", len(installments))
            if correlation_id is not None:
                span.set_attribute("correlation_id", correlation_id)

            logger.info(
                "installments.process.started",
                extra={
                    "installment_ids": [str(item.id) for item in installments],
                    "status": "running",
                    "duration_ms": 0.0,
                },
            )
            try:
                consolidated = ConsolidatedInstallment(
                    session,
                    installments,
                    inventory=self.inventory_factory(session),
                    gateway=self.gateway,
                )
                order = consolidated.process()
                final_status = _run_status(order)
                span.set_attribute("status", final_status)
                logger.info(
                    "installments.process.finished",
                    extra={
                        "order_id": str(order.id) if order is not None else None,
                        "order_number": order.number if order is not None else None,
                        "state": order.state if order is not None else None,
                        "reason": order.checkout_error if order is not None else None,
                        "status": final_status,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    },
                )
                return self._to_result(consolidated, order, final_status)
            except InvalidInstallmentBatch as exc:
                final_status = "rejected"
                session.rollback()
                span.record_exception(exc)
                span.set_status(Status(StatusCode.ERROR, str(exc)))
                logger.warning(
                    "installments.process.rejected",
                    extra={
                        "status": "rejected",
                        "error": str(exc),
                        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    },
                )
                raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
            finally:
                observe_consolidated_run(final_status, time.perf_counter() - started)
                reset_customer_id(customer_token)
                if correlation_token is not None:
                    reset_correlation_id(correlation_token)

    def list_installment_details(self, session: Session, installment_id: uuid.UUID) -> list[InstallmentDetailRead]:
        installment = session.get(Installment, installment_id)
        if installment is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="installment not found")

        rows = session.scalars(
            select(InstallmentDetail)
            .where(InstallmentDetail.installment_id == installment_id)
            .order_by(InstallmentDetail.created_at.desc())
        ).all()
        return [InstallmentDetailRead.model_validate(row) for row in rows]

    @staticmethod
    def _load_installments(session: Session, installment_ids: Sequence[uuid.UUID]) -> list[Installment]:
        ordered_ids = list(dict.fromkeys(installment_ids))
        if not ordered_ids:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="installment_ids must not be empty")

        rows = session.scalars(select(Installment).where(Installment.id.in_(ordered_ids))).all()
        by_id = {row.id: row for row in rows}
        missing = [str(item) for item in ordered_ids if item not in by_id]
        if missing:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"installments not found: {', '.join(missing)}")
        return [by_id[item] for item in ordered_ids]

    @staticmethod
    def _to_result(
        consolidated: ConsolidatedInstallment,
        order: Order | None,
        run_status: ProcessingStatus,
    ) -> ProcessingResultRead:
        billed = [item.id for item in consolidated.installments] if run_status == "completed" else []
        return ProcessingResultRead(
            customer_id=consolidated.customer.id,
            status=run_status,
            order=OrderSummaryRead.model_validate(order) if order is not None else None,
            billed_installment_ids=billed,
            failed_details=[InstallmentDetailRead.model_validate(detail) for detail in consolidated.details],
        )


installment_processing_service = InstallmentProcessingService()
