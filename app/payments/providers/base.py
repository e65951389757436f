"""Base payment provider interface"""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from app.models.order import Order
from app.orders.errors import PaymentProviderError
from app.payments.credentials import MerchantCredentials


class PaymentOutcome(str, enum.Enum):
    """Provider status collapsed into what the order lifecycle needs"""
    PAID = "PAID"
    PENDING = "PENDING"
    FAILED = "FAILED"


@dataclass
class ProviderSession:
    """What a provider hands back when a payment session is opened"""
    redirect_url: str
    provider_order_id: Optional[str] = None


class BasePaymentProvider(ABC):
    """Abstract base class for payment providers"""
    
    name: str = ""
    
    def __init__(self, client: httpx.AsyncClient):
        self.client = client
    
    @abstractmethod
    async def create_session(
        self,
        order: Order,
        transaction_id: str,
        credentials: MerchantCredentials,
    ) -> ProviderSession:
        """Open a remote payment session for the order"""
        pass
    
    @abstractmethod
    async def fetch_status(
        self,
        transaction_id: str,
        credentials: MerchantCredentials,
    ) -> PaymentOutcome:
        """Query the remote session and map its status"""
        pass
    
    async def _send(self, method: str, url: str, **kwargs) -> dict:
        """Issue a request, turning transport failures and non-2xx into PaymentProviderError"""
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise PaymentProviderError(f"{self.name} request timed out", provider=self.name) from e
        except httpx.HTTPError as e:
            raise PaymentProviderError(f"{self.name} request failed: {e}", provider=self.name) from e
        
        if not response.is_success:
            raise PaymentProviderError(
                f"{self.name} returned HTTP {response.status_code}",
                provider=self.name,
            )
        
        try:
            return response.json()
        except ValueError as e:
            raise PaymentProviderError(f"{self.name} returned a malformed body", provider=self.name) from e
