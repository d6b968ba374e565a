from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import HTTPException

from renewals.business.subscription.dispatchers import register_dispatchers
from renewals.business.subscription.service import installment_processing_service
from renewals.context import reset_correlation_id, set_correlation_id
from renewals.core.celery_app import celery_app
from renewals.core.database import SessionLocal


logger = logging.getLogger("renewals.tasks")


@celery_app.task(name="renewals.tasks.process_installments")
def process_installments_task(installment_ids: list[str], correlation_id: str | None = None) -> dict[str, Any]:
    """Process one customer's due installments; enqueued by the scheduler, one job per customer.

    A batch the service refuses (unknown ids, mixed customers, no origin order)
    is returned as a ``rejected`` result instead of failing the job.
    """
    register_dispatchers()
    correlation_id = correlation_id or str(uuid.uuid4())
    session = SessionLocal()
    try:
        result = installment_processing_service.process_installments(
            session,
            [uuid.UUID(str(item)) for item in installment_ids],
            correlation_id=correlation_id,
        )
        return result.model_dump(mode="json")
    except HTTPException as exc:
        token = set_correlation_id(correlation_id)
        try:
            logger.warning(
                "installments.task.rejected",
                extra={
                    "installment_ids": [str(item) for item in installment_ids],
                    "status": "rejected",
                    "status_code": exc.status_code,
                    "error": str(exc.detail),
                },
            )
        finally:
            reset_correlation_id(token)
        return {
            "status": "rejected",
            "status_code": exc.status_code,
            "detail": exc.detail,
            "installment_ids": [str(item) for item in installment_ids],
        }
    finally:
        session.close()
