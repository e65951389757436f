"""Unified payment gateway interface"""

from datetime import datetime
from typing import AsyncGenerator
from uuid import uuid4

import httpx
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.models.order import Order
from app.models.payment import Payment, PaymentStatus
from app.orders.errors import PaymentNotInitiated
from app.payments.credentials import MerchantCredentials
from app.payments.providers.base import BasePaymentProvider, PaymentOutcome
from app.payments.providers.cashfree import CashfreeProvider
from app.payments.providers.phonepe import PhonePeProvider

logger = structlog.get_logger()

OUTCOME_TO_PAYMENT_STATUS = {
    PaymentOutcome.PAID: PaymentStatus.PAID,
    PaymentOutcome.FAILED: PaymentStatus.FAILED,
    PaymentOutcome.PENDING: PaymentStatus.PENDING,
}

PAYMENT_STATUS_TO_OUTCOME = {status: outcome for outcome, status in OUTCOME_TO_PAYMENT_STATUS.items()}


class PaymentGateway:
    """
    Routes payment calls to the provider recorded on the order's payment row
    and mirrors the remote state into the payments table.
    """
    
    providers = {
        "cashfree": CashfreeProvider,
        "phonepe": PhonePeProvider,
    }
    
    def __init__(self, client: httpx.AsyncClient):
        self.client = client
    
    def _get_provider_instance(self, provider: str) -> BasePaymentProvider:
        """Get the appropriate provider instance"""
        provider_class = self.providers.get(provider)
        if not provider_class:
            raise ValueError(f"Unknown payment provider: {provider}")
        
        return provider_class(self.client)
    
    async def create_session(
        self,
        db: AsyncSession,
        order: Order,
        credentials: MerchantCredentials,
    ) -> bool:
        """
        Open a remote session and store its redirect URL.

        Skipped when a URL is already stored. Returns True if this call
        stored the URL; a concurrent caller that stored one first wins.

        Every attempt registers a new merchant transaction id, so an attempt
        that timed out after the provider accepted it never blocks a retry.
        The id is stored together with the URL it produced.
        """
        payment = self._payment_for(order)
        if payment.redirect_url:
            return False

        provider = self._get_provider_instance(payment.provider)
        transaction_id = uuid4().hex
        session = await provider.create_session(order, transaction_id, credentials)

        result = await db.execute(
            update(Payment)
            .where(Payment.id == payment.id, Payment.redirect_url.is_(None))
            .values(
                provider_transaction_id=transaction_id,
                redirect_url=session.redirect_url,
                provider_order_id=session.provider_order_id,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        stored = result.rowcount == 1
        
        logger.info(
            "Payment session created",
            order_id=str(order.id),
            provider=payment.provider,
            stored=stored,
        )
        return stored
    
    async def verify_status(
        self,
        db: AsyncSession,
        order: Order,
        credentials: MerchantCredentials,
    ) -> PaymentOutcome:
        """
        Query the provider and record a terminal result on the payment row.

        A payment already in a terminal state is not re-queried.
        """
        payment = self._payment_for(order)
        if not payment.redirect_url:
            raise PaymentNotInitiated()
        
        if payment.status != PaymentStatus.PENDING:
            return PAYMENT_STATUS_TO_OUTCOME[PaymentStatus(payment.status)]
        
        provider = self._get_provider_instance(payment.provider)
        outcome = await provider.fetch_status(payment.provider_transaction_id, credentials)
        
        if outcome != PaymentOutcome.PENDING:
            await db.execute(
                update(Payment)
                .where(Payment.id == payment.id, Payment.status == PaymentStatus.PENDING.value)
                .values(
                    status=OUTCOME_TO_PAYMENT_STATUS[outcome].value,
                    updated_at=datetime.utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
        
        logger.info(
            "Payment status checked",
            order_id=str(order.id),
            provider=payment.provider,
            outcome=outcome.value,
        )
        return outcome
    
    @staticmethod
    def _payment_for(order: Order) -> Payment:
        if order.payment is None:
            raise PaymentNotInitiated()
        return order.payment


async def get_payment_gateway() -> AsyncGenerator[PaymentGateway, None]:
    """Dependency yielding a gateway with a bounded-timeout HTTP client"""
    async with httpx.AsyncClient(timeout=settings.payment_timeout_seconds) as client:
        yield PaymentGateway(client)
