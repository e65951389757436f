"""PhonePe payment provider"""

import structlog

from app.config import settings
from app.models.order import Order
from app.orders.errors import PaymentProviderError, UnknownPaymentStatus
from app.payments.credentials import MerchantCredentials
from app.payments.providers.base import BasePaymentProvider, PaymentOutcome, ProviderSession
from app.payments.signing import encode_payload, sign_request

logger = structlog.get_logger()

PAY_PATH = "/pg/v1/pay"
STATUS_PATH = "/pg/v1/status/{merchant_id}/{transaction_id}"

STATUS_MAP = {
    "PAYMENT_SUCCESS": PaymentOutcome.PAID,
    "PAYMENT_PENDING": PaymentOutcome.PENDING,
    "PAYMENT_ERROR": PaymentOutcome.FAILED,
    "PAYMENT_DECLINED": PaymentOutcome.FAILED,
    "TIMED_OUT": PaymentOutcome.FAILED,
    "AUTHORIZATION_FAILED": PaymentOutcome.FAILED,
    "TRANSACTION_NOT_FOUND": PaymentOutcome.FAILED,
}


class PhonePeProvider(BasePaymentProvider):
    """PhonePe standard checkout (pay page) API"""
    
    name = "phonepe"
    
    async def create_session(
        self,
        order: Order,
        transaction_id: str,
        credentials: MerchantCredentials,
    ) -> ProviderSession:
        """Initiate a pay-page transaction and return its redirect URL"""
        payload = encode_payload({
            "merchantId": credentials.merchant_id,
            "merchantTransactionId": transaction_id,
            "merchantUserId": order.user_id.hex,
            "amount": order.total,
            "redirectUrl": settings.phonepe_redirect_url,
            "redirectMode": "REDIRECT",
            "callbackUrl": settings.phonepe_callback_url,
            "paymentInstrument": {"type": "PAY_PAGE"},
        })
        
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-VERIFY": sign_request(payload, PAY_PATH, credentials.secret_key, credentials.key_index),
        }
        
        logger.debug("PhonePe pay request", transaction_id=transaction_id)
        
        data = await self._send(
            "POST",
            f"{settings.phonepe_base_url}{PAY_PATH}",
            json={"request": payload},
            headers=headers,
        )
        
        if not data.get("success"):
            raise PaymentProviderError(
                f"PhonePe rejected pay request: {data.get('code')}",
                provider=self.name,
            )
        
        try:
            redirect_url = data["data"]["instrumentResponse"]["redirectInfo"]["url"]
        except (KeyError, TypeError) as e:
            raise PaymentProviderError("PhonePe response missing redirect URL", provider=self.name) from e
        
        return ProviderSession(redirect_url=redirect_url, provider_order_id=transaction_id)
    
    async def fetch_status(
        self,
        transaction_id: str,
        credentials: MerchantCredentials,
    ) -> PaymentOutcome:
        """Check transaction status and map PhonePe's response code"""
        path = STATUS_PATH.format(
            merchant_id=credentials.merchant_id,
            transaction_id=transaction_id,
        )
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-VERIFY": sign_request("", path, credentials.secret_key, credentials.key_index),
            "X-MERCHANT-ID": credentials.merchant_id,
        }
        
        data = await self._send("GET", f"{settings.phonepe_base_url}{path}", headers=headers)
        
        code = data.get("code")
        outcome = STATUS_MAP.get(code)
        if outcome is None:
            raise UnknownPaymentStatus(str(code), provider=self.name)
        return outcome
