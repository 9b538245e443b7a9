from django.http import HttpResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

PAYMENT_INTENTS = Counter(
    "foodsavvy_payment_intents_total",
    "PaymentIntent creation attempts",
    ["outcome"],
)
WEBHOOK_EVENTS = Counter(
    "foodsavvy_webhook_events_total",
    "Stripe webhook events received",
    ["event_type", "outcome"],
)
ORDERS_CREATED = Counter(
    "foodsavvy_orders_created_total",
    "Orders materialized from successful payments",
    ["fulfillment"],
)
CONFIRMATION_EMAILS = Counter(
    "foodsavvy_confirmation_emails_total",
    "Order confirmation emails",
    ["sent"],
)


def metrics_view(request):
    payload = generate_latest()
    return HttpResponse(payload, content_type=CONTENT_TYPE_LATEST)


def track_payment_intent(outcome):
    PAYMENT_INTENTS.labels(outcome=outcome or "unknown").inc()


def track_webhook_event(event_type, outcome):
    WEBHOOK_EVENTS.labels(event_type=event_type or "unknown", outcome=outcome or "unknown").inc()


def track_order_created(fulfillment):
    ORDERS_CREATED.labels(fulfillment=fulfillment or "unknown").inc()


def track_confirmation_email(sent):
    CONFIRMATION_EMAILS.labels(sent=str(bool(sent)).lower()).inc()
