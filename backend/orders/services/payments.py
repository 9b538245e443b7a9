# backend/orders/services/payments.py
import logging
from typing import Optional

import stripe
from django.conf import settings
from django.db.models import F

from ..models import Order
from .fulfillment import OrderError

LOGGER = logging.getLogger(__name__)


class PaymentsNotConfigured(OrderError):
    status_code = 503
    code = "payments_not_configured"

    def __init__(self):
        super().__init__("Payments are not configured.")


class PaymentGatewayError(OrderError):
    status_code = 502
    code = "payment_gateway_error"


class RefundError(OrderError):
    code = "refund_invalid"


def stripe_ready() -> bool:
    return bool(getattr(settings, "STRIPE_API_KEY", None))


def _init_stripe():
    if not stripe_ready():
        raise PaymentsNotConfigured()
    stripe.api_key = settings.STRIPE_API_KEY


def create_payment_intent(amount_cents: int, metadata: dict) -> dict:
    _init_stripe()
    try:
        intent = stripe.PaymentIntent.create(
            amount=int(amount_cents),
            currency=getattr(settings, "STRIPE_CURRENCY", "usd"),
            automatic_payment_methods={"enabled": True},
            metadata=metadata,
        )
    except stripe.StripeError as exc:
        LOGGER.exception("Stripe PaymentIntent creation failed")
        raise PaymentGatewayError(getattr(exc, "user_message", None) or str(exc)) from exc

    return {"id": intent["id"], "client_secret": intent["client_secret"]}


def refund_order(order: Order, amount_cents: Optional[int] = None) -> Order:
    """
    Refund part or all of what is left on the order. ``amount_cents`` defaults
    to the whole refundable balance.
    """
    if not order.stripe_payment_intent_id:
        raise RefundError("Order has no payment to refund.")

    refundable = order.refundable_cents
    amount = refundable if amount_cents is None else int(amount_cents)
    if amount <= 0:
        raise RefundError("Refund amount must be greater than 0.")
    if amount > refundable:
        raise RefundError(f"Refund amount exceeds the refundable balance ({refundable}).")

    _init_stripe()
    try:
        refund = stripe.Refund.create(payment_intent=order.stripe_payment_intent_id, amount=amount)
    except stripe.StripeError as exc:
        LOGGER.exception("Stripe refund failed for order %s", order.id)
        raise PaymentGatewayError(getattr(exc, "user_message", None) or str(exc)) from exc

    Order.objects.filter(id=order.id).update(refunded_cents=F("refunded_cents") + amount)
    order.refresh_from_db()
    LOGGER.info("Order %s refunded %s cents (refund %s)", order.id, amount, refund["id"])
    return order
