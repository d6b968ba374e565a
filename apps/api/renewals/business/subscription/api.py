from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from renewals.business.subscription.schemas import (
    InstallmentDetailRead,
    ProcessingResultRead,
    ProcessInstallmentsRequest,
)
from renewals.business.subscription.service import installment_processing_service
from renewals.context import get_correlation_id
from renewals.core.auth import AuthUser
from renewals.core.database import get_db
from renewals.core.rbac import require_permissions


router = APIRouter(prefix="/subscriptions/installments", tags=["subscriptions"])


@router.post("/process", response_model=ProcessingResultRead)
def process_installments(
    payload: ProcessInstallmentsRequest,
    db: Session = Depends(get_db),
    _: AuthUser = Depends(require_permissions("subscriptions.installments.process")),
) -> ProcessingResultRead:
    return installment_processing_service.process_installments(
        db,
        payload.installment_ids,
        correlation_id=get_correlation_id(),
    )


@router.get("/{installment_id}/details", response_model=list[InstallmentDetailRead])
def list_installment_details(
    installment_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: AuthUser = Depends(require_permissions("subscriptions.installments.read")),
) -> list[InstallmentDetailRead]:
    return installment_processing_service.list_installment_details(db, installment_id)
