# store/checkout.py
"""
Checkout and payment state machine.

    SELECTING_PAYMENT -> AWAITING_ORDER_CREATION -> AWAITING_PAYMENT_INIT
        -> AWAITING_GATEWAY -> SUCCEEDED | FAILED | PENDING

Cash on delivery stops at PENDING as soon as the order exists. Chapa opens the
gateway in a new tab and waits for the customer to ask for verification.
Every step is user triggered; nothing here retries on its own.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from django.utils.translation import gettext as _

from .api import ApiError
from .api import orders as orders_api
from .api import payments as payments_api

logger = logging.getLogger(__name__)

SESSION_KEY = 'checkout'
ORDERS_URL = 'my_orders'


class CheckoutState(str, Enum):
    SELECTING_PAYMENT = 'selecting_payment'
    AWAITING_ORDER_CREATION = 'awaiting_order_creation'
    AWAITING_PAYMENT_INIT = 'awaiting_payment_init'
    AWAITING_GATEWAY = 'awaiting_gateway'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'
    PENDING = 'pending'


class PaymentMethod(str, Enum):
    CHAPA = 'Chapa'
    COD = 'COD'

    @classmethod
    def parse(cls, value):
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class BuyNow:
    product_id: str
    variant_id: Optional[str] = None
    quantity: int = 1


@dataclass
class CheckoutOutcome:
    level: str  # a django.contrib.messages level name
    message: str
    redirect: Optional[str] = None
    payment_url: Optional[str] = None

    @property
    def ok(self):
        return self.level != 'error'


class CheckoutFlow:
    def __init__(self, client, state=CheckoutState.SELECTING_PAYMENT, method=None,
                 order_id=None, invoice_number=None, payment_url=None):
        self.client = client
        self.state = CheckoutState(state)
        self.method = PaymentMethod.parse(method) if method else None
        self.order_id = order_id
        self.invoice_number = invoice_number
        self.payment_url = payment_url

    # -------------------------------
    # persistence between requests
    # -------------------------------
    def to_session(self):
        return {
            'state': self.state.value,
            'method': self.method.value if self.method else None,
            'order_id': self.order_id,
            'invoice_number': self.invoice_number,
            'payment_url': self.payment_url,
        }

    @classmethod
    def from_session(cls, client, data):
        return cls(client, **(data or {}))

    @property
    def awaiting_gateway(self):
        return self.state is CheckoutState.AWAITING_GATEWAY and bool(self.invoice_number)

    @property
    def can_retry_payment(self):
        return self.state is CheckoutState.FAILED and bool(self.invoice_number)

    # -------------------------------
    # transitions
    # -------------------------------
    def finish_payment(self, method, cart=None, buy_now=None):
        method = PaymentMethod.parse(method) if not isinstance(method, PaymentMethod) else method
        if buy_now is None and (cart is None or cart.is_empty):
            return CheckoutOutcome('error', _("Your cart is empty."))
        if method is None:
            return CheckoutOutcome('error', _("Please select a payment method."))

        self.method = method
        self.state = CheckoutState.AWAITING_ORDER_CREATION
        try:
            if buy_now is not None:
                order = orders_api.create_order(
                    self.client, method.value,
                    product_id=buy_now.product_id,
                    variant_id=buy_now.variant_id,
                    quantity=buy_now.quantity,
                )
            else:
                order = orders_api.create_order(self.client, method.value, cart_id=cart.id)
        except ApiError as exc:
            self.state = CheckoutState.SELECTING_PAYMENT
            if exc.status == 400:
                return CheckoutOutcome('error', _("Invalid details. Please check your order and try again."))
            return CheckoutOutcome('error', _("We could not process your payment. Please try again."))

        self.order_id = order.id
        logger.info("Order %s created with %s", order.id, method.value)

        if method is PaymentMethod.COD:
            self.state = CheckoutState.PENDING
            return CheckoutOutcome(
                'success',
                _("Order placed. You will pay on delivery."),
                redirect=ORDERS_URL,
            )

        self.state = CheckoutState.AWAITING_PAYMENT_INIT
        try:
            init = payments_api.initialize_chapa(self.client, order.id)
        except ApiError:
            self.state = CheckoutState.SELECTING_PAYMENT
            return CheckoutOutcome('error', _("We could not process your payment. Please try again."))

        self.invoice_number = order.id
        self.payment_url = init.payment_url
        self.state = CheckoutState.AWAITING_GATEWAY
        return CheckoutOutcome(
            'info',
            _("Chapa opened in a new tab. Come back here to verify your payment."),
            payment_url=init.payment_url,
        )

    def verify_payment(self):
        if not self.invoice_number:
            return CheckoutOutcome('error', _("There is no payment to verify."))
        try:
            result = payments_api.verify_chapa(self.client, self.invoice_number)
        except ApiError:
            return CheckoutOutcome('error', _("Could not verify your payment. Please try again."))

        status = (result.status or '').lower()
        if status == 'succeeded':
            self.state = CheckoutState.SUCCEEDED
            return CheckoutOutcome('success', _("Payment successful."), redirect=ORDERS_URL)
        if status == 'failed':
            self.state = CheckoutState.FAILED
            return CheckoutOutcome('error', _("Payment failed. You can try again."))
        # anything else is treated as "carry on" and sent to the order list
        self.state = CheckoutState.PENDING
        logger.info("Payment for %s still %r after verification", self.invoice_number, status)
        return CheckoutOutcome(
            'info',
            _("Your payment is being processed. Check your orders for updates."),
            redirect=ORDERS_URL,
        )

    def retry_payment(self):
        """Open a fresh Chapa checkout for the same invoice after a failure."""
        if not self.can_retry_payment:
            return CheckoutOutcome('error', _("There is no payment to retry."))
        try:
            init = payments_api.reinitialize_chapa(self.client, self.invoice_number)
        except ApiError:
            return CheckoutOutcome('error', _("We could not process your payment. Please try again."))
        self.payment_url = init.payment_url
        self.state = CheckoutState.AWAITING_GATEWAY
        return CheckoutOutcome(
            'info',
            _("Chapa opened in a new tab. Come back here to verify your payment."),
            payment_url=init.payment_url,
        )

    @property
    def finished(self):
        return self.state in (CheckoutState.SUCCEEDED, CheckoutState.PENDING)
