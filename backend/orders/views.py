# backend/orders/views.py
import logging

import stripe
from django.conf import settings
from django.db.models import Prefetch
from django.utils import timezone
from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import ADMIN_PERMISSIONS
from foodsavvy.metrics import (
    track_confirmation_email,
    track_order_created,
    track_payment_intent,
    track_webhook_event,
)
from menus.services.availability import find_capacity_conflicts
from utils.metadata import MetadataError, decode_metadata, merge_metadata

from .emails import send_order_confirmation
from .models import DeliveryGroup, Order
from .serializers import (
    OrderSerializer,
    PaymentIntentRequestSerializer,
    RefundRequestSerializer,
    StatusUpdateSerializer,
)
from .services.fulfillment import UnknownMenuItemsError, change_status, create_order_from_intent
from .services.payments import OrderError, create_payment_intent, refund_order

LOGGER = logging.getLogger(__name__)


def _order_queryset():
    return Order.objects.prefetch_related(
        "order_items__delivery_group",
        "add_ons",
        Prefetch(
            "delivery_groups",
            queryset=DeliveryGroup.objects.prefetch_related("items__delivery_group", "add_ons"),
        ),
    )


def _capacity_conflicts(metadata):
    cart = decode_metadata(metadata)
    requested = [
        (row.menu_item_id, row.service_date or cart.delivery_date, row.quantity) for row in cart.menu_items
    ]
    return find_capacity_conflicts(requested)


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def create_payment_intent_view(request):
    """
    POST /api/create-payment-intent/
    Body: {amount, name, email, type, metadata{...}} -> {client_secret}
    """
    serializer = PaymentIntentRequestSerializer(data=request.data)
    if not serializer.is_valid():
        track_payment_intent("invalid")
        return Response(
            {"detail": "Missing or invalid fields.", "errors": serializer.errors},
            status=status.HTTP_400_BAD_REQUEST,
        )
    data = serializer.validated_data
    metadata = merge_metadata(data["metadata"], type=data["type"], name=data["name"], email=data["email"])

    if getattr(settings, "CHECKOUT_ENFORCE_CAPACITY", False):
        try:
            conflicts = _capacity_conflicts(metadata)
        except MetadataError as exc:
            track_payment_intent("invalid")
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        if conflicts:
            track_payment_intent("sold_out")
            return Response(
                {"detail": "Some items are no longer available in that quantity.", "conflicts": conflicts},
                status=status.HTTP_409_CONFLICT,
            )

    try:
        intent = create_payment_intent(data["amount"], metadata)
    except OrderError:
        track_payment_intent("error")
        raise

    track_payment_intent("created")
    LOGGER.info("PaymentIntent %s created (%s cents, %s)", intent["id"], data["amount"], data["type"])
    return Response({"client_secret": intent["client_secret"]})


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def order_by_intent(request, payment_intent_id: str):
    order = _order_queryset().filter(stripe_payment_intent_id=payment_intent_id).first()
    if not order:
        return Response({"status": "pending"}, status=status.HTTP_404_NOT_FOUND)
    return Response(OrderSerializer(order).data)


def _customer_email(intent):
    """Billing email from the latest charge, then receipt_email."""
    charge = intent.get("latest_charge")
    if not isinstance(charge, dict):
        charges = (intent.get("charges") or {}).get("data") or []
        charge = charges[0] if charges else {}
    billing = charge.get("billing_details") or {}
    return billing.get("email") or intent.get("receipt_email") or ""


def _send_confirmation(order: Order) -> bool:
    # stamp before sending; a concurrent delivery of the same event finds it taken
    claimed = Order.objects.filter(id=order.id, email_sent_at__isnull=True).update(email_sent_at=timezone.now())
    if not claimed:
        LOGGER.info("Confirmation email for order %s already sent or in flight", order.id)
        return False

    sent = send_order_confirmation(order)
    track_confirmation_email(sent)
    if not sent:
        Order.objects.filter(id=order.id).update(email_sent_at=None)
        LOGGER.warning("Confirmation email for order %s not sent; will retry on the next delivery", order.id)
    return sent


class StripeWebhookView(APIView):
    """
    POST /api/stripe/webhook/
    The only place orders are created. Safe to receive the same event twice.
    """

    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        secret = getattr(settings, "STRIPE_WEBHOOK_SECRET", "")
        if not secret:
            LOGGER.error("Stripe webhook received but STRIPE_WEBHOOK_SECRET is not set")
            return Response({"detail": "Webhook not configured."}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        try:
            event = stripe.Webhook.construct_event(
                payload=request.body,
                sig_header=request.META.get("HTTP_STRIPE_SIGNATURE", ""),
                secret=secret,
            )
        except (ValueError, stripe.SignatureVerificationError) as exc:
            LOGGER.warning("Stripe webhook signature failed: %s", exc)
            track_webhook_event("unknown", "bad_signature")
            return Response({"detail": "Invalid signature."}, status=status.HTTP_400_BAD_REQUEST)

        event_type = event["type"]
        intent = event["data"]["object"]

        if event_type == "payment_intent.succeeded":
            return self._handle_succeeded(intent)

        if event_type == "payment_intent.payment_failed":
            error = intent.get("last_payment_error") or {}
            LOGGER.warning("Payment failed: %s %s", intent.get("id"), error.get("message", ""))
            track_webhook_event(event_type, "logged")
            return Response({"received": True})

        LOGGER.info("Unhandled Stripe event: %s", event_type)
        track_webhook_event(event_type, "ignored")
        return Response({"received": True})

    def _handle_succeeded(self, intent):
        event_type = "payment_intent.succeeded"
        payment_intent_id = intent["id"]

        existing = Order.objects.filter(stripe_payment_intent_id=payment_intent_id).first()
        if existing:
            if existing.email_sent_at is None:
                _send_confirmation(existing)
            else:
                LOGGER.info("Order and email already handled for %s", payment_intent_id)
            track_webhook_event(event_type, "duplicate")
            return Response({"received": True})

        metadata = dict(intent.get("metadata") or {})
        gateway_email = _customer_email(intent)
        if gateway_email:
            metadata["email"] = gateway_email
        amount = intent.get("amount_received") or intent.get("amount") or 0

        try:
            order, created = create_order_from_intent(payment_intent_id, amount, metadata)
        except (MetadataError, UnknownMenuItemsError) as exc:
            # acknowledged so the gateway stops retrying a payload that can never succeed
            LOGGER.error("Cannot build order from %s: %s", payment_intent_id, exc)
            track_webhook_event(event_type, "invalid_metadata")
            return Response({"received": True})

        if created:
            track_order_created(order.fulfillment)
            _send_confirmation(order)

        track_webhook_event(event_type, "created" if created else "duplicate")
        return Response({"received": True})


# --------------------------------
# Admin
# --------------------------------

@api_view(["GET"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_orders(request):
    qs = _order_queryset().order_by("-created_at", "-id")
    status_filter = request.query_params.get("status")
    if status_filter:
        qs = qs.filter(status=status_filter)
    return Response(OrderSerializer(qs, many=True).data)


@api_view(["GET", "PATCH"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_order_detail(request, order_id: int):
    order = _order_queryset().filter(id=order_id).first()
    if not order:
        return Response({"detail": "Order not found."}, status=status.HTTP_404_NOT_FOUND)

    if request.method == "PATCH":
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        change_status(order, serializer.validated_data["status"].strip())
        order = _order_queryset().get(id=order.id)

    return Response(OrderSerializer(order).data)


@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_order_refund(request, order_id: int):
    order = Order.objects.filter(id=order_id).first()
    if not order:
        return Response({"detail": "Order not found."}, status=status.HTTP_404_NOT_FOUND)

    serializer = RefundRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    order = refund_order(order, serializer.validated_data.get("amount_cents"))
    return Response(OrderSerializer(_order_queryset().get(id=order.id)).data)
