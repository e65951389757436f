"""Cashfree payment provider"""

import structlog

from app.config import settings
from app.models.order import Order
from app.orders.errors import PaymentProviderError, UnknownPaymentStatus
from app.payments.credentials import MerchantCredentials
from app.payments.providers.base import BasePaymentProvider, PaymentOutcome, ProviderSession

logger = structlog.get_logger()

STATUS_MAP = {
    "PAID": PaymentOutcome.PAID,
    "ACTIVE": PaymentOutcome.PENDING,
    "EXPIRED": PaymentOutcome.FAILED,
    "TERMINATED": PaymentOutcome.FAILED,
    "TERMINATION_REQUESTED": PaymentOutcome.FAILED,
}


def format_amount(total: int) -> float:
    """Minor units to the major-unit amount Cashfree expects"""
    rupees, paise = divmod(total, 100)
    return float(f"{rupees}.{paise:02d}")


class CashfreeProvider(BasePaymentProvider):
    """Cashfree PG orders API"""
    
    name = "cashfree"
    
    def _headers(self, credentials: MerchantCredentials) -> dict:
        return {
            "X-Client-Id": credentials.merchant_id,
            "X-Client-Secret": credentials.secret_key,
            "x-api-version": settings.cashfree_api_version,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
    
    async def create_session(
        self,
        order: Order,
        transaction_id: str,
        credentials: MerchantCredentials,
    ) -> ProviderSession:
        """Create a Cashfree order and return its payment_session_id"""
        payload = {
            "order_id": transaction_id,
            "order_amount": format_amount(order.total),
            "order_currency": settings.payment_currency,
            "customer_details": {
                "customer_id": order.user_id.hex,
                "customer_name": order.user.username if order.user else None,
                "customer_phone": "+919999999999",
            },
        }
        
        logger.debug("Cashfree create order", transaction_id=transaction_id)
        
        data = await self._send(
            "POST",
            f"{settings.cashfree_base_url}/pg/orders",
            json=payload,
            headers=self._headers(credentials),
        )
        
        session_id = data.get("payment_session_id")
        if not session_id:
            raise PaymentProviderError("Cashfree response missing payment_session_id", provider=self.name)
        
        cf_order_id = data.get("cf_order_id")
        return ProviderSession(
            redirect_url=session_id,
            provider_order_id=str(cf_order_id) if cf_order_id is not None else None,
        )
    
    async def fetch_status(
        self,
        transaction_id: str,
        credentials: MerchantCredentials,
    ) -> PaymentOutcome:
        """Fetch the Cashfree order and map its order_status"""
        data = await self._send(
            "GET",
            f"{settings.cashfree_base_url}/pg/orders/{transaction_id}",
            headers=self._headers(credentials),
        )
        
        code = data.get("order_status")
        outcome = STATUS_MAP.get(code)
        if outcome is None:
            raise UnknownPaymentStatus(str(code), provider=self.name)
        return outcome
