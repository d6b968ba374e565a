from renewals.business.subscription.errors import (
    AlreadyProcessed,
    CheckoutError,
    ConsolidationError,
    InvalidInstallmentBatch,
    NoAddressAvailable,
    NoRootOrder,
)
from renewals.business.subscription.models import (
    Installment,
    InstallmentDetail,
    Subscription,
    SubscriptionLineItem,
)

__all__ = [
    "Subscription",
    "SubscriptionLineItem",
    "Installment",
    "InstallmentDetail",
    "ConsolidationError",
    "InvalidInstallmentBatch",
    "NoRootOrder",
    "NoAddressAvailable",
    "AlreadyProcessed",
    "CheckoutError",
]
