"""Payment provider implementations"""

from app.payments.providers.base import BasePaymentProvider, PaymentOutcome, ProviderSession
from app.payments.providers.cashfree import CashfreeProvider
from app.payments.providers.phonepe import PhonePeProvider

__all__ = [
    "BasePaymentProvider",
    "PaymentOutcome",
    "ProviderSession",
    "CashfreeProvider",
    "PhonePeProvider",
]
