from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


ProcessingStatus = Literal["completed", "halted", "empty"]


class ProcessInstallmentsRequest(BaseModel):
    installment_ids: list[UUID] = Field(min_length=1)


class InstallmentDetailRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    installment_id: UUID
    order_id: UUID | None
    successful: bool
    reason: str | None
    message: str | None
    created_at: datetime


class OrderLineRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    variant_id: UUID
    quantity: int
    price: Decimal


class OrderSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    number: str
    state: str
    email: str | None
    currency: str
    channel: str
    ship_address_id: UUID | None
    payment_source_id: UUID | None
    item_total: Decimal
    shipment_total: Decimal
    additional_tax_total: Decimal
    total: Decimal
    payment_state: str | None
    checkout_error: str | None
    completed_at: datetime | None
    line_items: list[OrderLineRead] = Field(default_factory=list)


class ProcessingResultRead(BaseModel):
    customer_id: UUID
    status: ProcessingStatus
    order: OrderSummaryRead | None = None
    billed_installment_ids: list[UUID] = Field(default_factory=list)
    failed_details: list[InstallmentDetailRead] = Field(default_factory=list)
