import pytest
import stripe
from django.utils import timezone
from rest_framework.test import APIClient

from orders.models import DeliveryGroup, Order, OrderAddOn, OrderItem
from orders.views import _send_confirmation
from utils.metadata import encode_metadata
from tests.factories import AddOnFactory, MenuItemFactory, OrderFactory

WEBHOOK_URL = "/api/stripe/webhook/"


@pytest.fixture
def webhook(settings, monkeypatch):
    """Posts ``event`` to the webhook as if Stripe had signed it."""
    settings.STRIPE_WEBHOOK_SECRET = "whsec_test"
    sent = []
    holder = {}

    monkeypatch.setattr(stripe.Webhook, "construct_event", lambda payload, sig_header, secret: holder["event"])
    monkeypatch.setattr("orders.views.send_order_confirmation", lambda order: sent.append(order.id) or True)

    def post(event):
        holder["event"] = event
        return APIClient().post(WEBHOOK_URL, data=b"{}", content_type="application/json", HTTP_STRIPE_SIGNATURE="t=1,v1=x")

    post.sent = sent
    return post


def _succeeded(pi_id, metadata, amount=3600):
    return {
        "type": "payment_intent.succeeded",
        "data": {"object": {"id": pi_id, "amount": amount, "amount_received": amount, "metadata": metadata}},
    }


def _cart(**overrides):
    jollof = overrides.pop("jollof", None) or MenuItemFactory(name="Jollof")
    fields = {
        "fulfillment": "delivery",
        "name": "Ada",
        "email": "ada@example.com",
        "address": "12 Nassau St",
        "menu_items": [
            {"menu_item_id": jollof.id, "quantity": 2, "price_cents": 1200, "name": "Jollof",
             "service_date": "2030-03-05"},
        ],
        "add_ons": [],
        "schedule": {"2030-03-05": "Lunch"},
    }
    fields.update(overrides)
    return encode_metadata(**fields)


@pytest.mark.django_db
def test_succeeded_event_creates_confirmed_order_with_groups(webhook):
    tue = MenuItemFactory(name="Jollof")
    wed = MenuItemFactory(name="Egusi")
    plantains = AddOnFactory(name="Plantains")
    metadata = _cart(
        menu_items=[
            {"menu_item_id": tue.id, "quantity": 2, "price_cents": 1200, "name": "Jollof", "service_date": "2030-03-05"},
            {"menu_item_id": wed.id, "quantity": 1, "price_cents": 1400, "name": "Egusi", "service_date": "2030-03-06"},
        ],
        add_ons=[{"add_on_id": plantains.id, "name": "Plantains", "quantity": 1, "price_cents": 300,
                  "service_date": "2030-03-05"}],
        schedule={"2030-03-05": "Lunch", "2030-03-06": "Dinner"},
    )

    res = webhook(_succeeded("pi_multi", metadata))

    assert res.status_code == 200
    assert res.data == {"received": True}
    order = Order.objects.get(stripe_payment_intent_id="pi_multi")
    assert order.status == "confirmed"
    assert order.total_cents == 3600
    assert order.customer_email == "ada@example.com"
    assert str(order.delivery_date) == "2030-03-05"
    assert order.delivery_slot == "Lunch"
    groups = list(DeliveryGroup.objects.filter(order=order).values_list("service_date", "slot_label"))
    assert [(str(d), s) for d, s in groups] == [("2030-03-05", "Lunch"), ("2030-03-06", "Dinner")]
    assert OrderItem.objects.get(order=order, menu_item=wed).delivery_group.slot_label == "Dinner"
    assert OrderAddOn.objects.get(order=order).delivery_group.service_date == OrderItem.objects.get(
        order=order, menu_item=tue
    ).delivery_group.service_date
    assert webhook.sent == [order.id]
    order.refresh_from_db()
    assert order.email_sent_at is not None


@pytest.mark.django_db
def test_same_event_twice_creates_one_order_and_one_email(webhook):
    event = _succeeded("pi_dupe", _cart())

    first = webhook(event)
    second = webhook(event)

    assert first.status_code == 200
    assert second.status_code == 200
    assert Order.objects.filter(stripe_payment_intent_id="pi_dupe").count() == 1
    assert len(webhook.sent) == 1


@pytest.mark.django_db
def test_failed_email_is_retried_on_redelivery(webhook, monkeypatch):
    event = _succeeded("pi_retry", _cart())
    monkeypatch.setattr("orders.views.send_order_confirmation", lambda order: False)

    webhook(event)
    order = Order.objects.get(stripe_payment_intent_id="pi_retry")
    assert order.email_sent_at is None

    monkeypatch.setattr("orders.views.send_order_confirmation", lambda order: True)
    webhook(event)
    order.refresh_from_db()
    assert order.email_sent_at is not None
    assert Order.objects.filter(stripe_payment_intent_id="pi_retry").count() == 1


@pytest.mark.django_db
def test_receipt_email_used_when_metadata_has_none(webhook):
    metadata = _cart(email="")
    event = _succeeded("pi_receipt", metadata)
    event["data"]["object"]["receipt_email"] = "receipt@example.com"

    webhook(event)

    assert Order.objects.get(stripe_payment_intent_id="pi_receipt").customer_email == "receipt@example.com"


@pytest.mark.django_db
def test_gateway_emails_win_over_metadata(webhook):
    receipt = _succeeded("pi_receipt_wins", _cart(email="typed@example.com"))
    receipt["data"]["object"]["receipt_email"] = "receipt@example.com"
    billing = _succeeded("pi_billing_wins", _cart(email="typed@example.com"))
    billing["data"]["object"]["receipt_email"] = "receipt@example.com"
    billing["data"]["object"]["latest_charge"] = {"id": "ch_1", "billing_details": {"email": "card@example.com"}}
    legacy = _succeeded("pi_charges_list", _cart(email="typed@example.com"))
    legacy["data"]["object"]["charges"] = {"data": [{"billing_details": {"email": "legacy@example.com"}}]}
    plain = _succeeded("pi_metadata_only", _cart(email="typed@example.com"))

    for event in (receipt, billing, legacy, plain):
        webhook(event)

    emails = dict(Order.objects.values_list("stripe_payment_intent_id", "customer_email"))
    assert emails == {
        "pi_receipt_wins": "receipt@example.com",
        "pi_billing_wins": "card@example.com",
        "pi_charges_list": "legacy@example.com",
        "pi_metadata_only": "typed@example.com",
    }


@pytest.mark.django_db
def test_delivery_that_loses_the_insert_race_sends_nothing(webhook, monkeypatch):
    # stands in for the row the concurrent request inserted
    winner = OrderFactory()
    monkeypatch.setattr("orders.views.create_order_from_intent", lambda pi_id, amount, metadata: (winner, False))

    res = webhook(_succeeded("pi_race", _cart()))

    assert res.status_code == 200
    assert webhook.sent == []
    winner.refresh_from_db()
    assert winner.email_sent_at is None


@pytest.mark.django_db
def test_confirmation_already_claimed_is_not_sent_again(webhook):
    order = OrderFactory()
    stale = Order.objects.get(id=order.id)
    Order.objects.filter(id=order.id).update(email_sent_at=timezone.now())

    assert _send_confirmation(stale) is False
    assert webhook.sent == []


@pytest.mark.django_db
def test_failed_send_releases_the_claim(webhook, monkeypatch):
    order = OrderFactory()
    monkeypatch.setattr("orders.views.send_order_confirmation", lambda o: False)

    assert _send_confirmation(order) is False

    order.refresh_from_db()
    assert order.email_sent_at is None


@pytest.mark.django_db
def test_malformed_metadata_is_acknowledged_without_order(webhook):
    res = webhook(_succeeded("pi_bad", {"menu_items": "[{oops"}))

    assert res.status_code == 200
    assert not Order.objects.filter(stripe_payment_intent_id="pi_bad").exists()
    assert webhook.sent == []


@pytest.mark.django_db
def test_unknown_menu_item_is_acknowledged_without_order(webhook):
    metadata = _cart(menu_items=[{"menu_item_id": 999999, "quantity": 1, "price_cents": 100}])

    res = webhook(_succeeded("pi_ghost", metadata))

    assert res.status_code == 200
    assert not Order.objects.exists()


@pytest.mark.django_db
def test_other_events_are_acknowledged(webhook):
    failed = webhook(
        {"type": "payment_intent.payment_failed",
         "data": {"object": {"id": "pi_x", "last_payment_error": {"message": "card declined"}}}}
    )
    other = webhook({"type": "charge.refunded", "data": {"object": {"id": "ch_1"}}})

    assert failed.data == {"received": True}
    assert other.data == {"received": True}
    assert not Order.objects.exists()


@pytest.mark.django_db
def test_bad_signature_is_rejected(settings, monkeypatch):
    settings.STRIPE_WEBHOOK_SECRET = "whsec_test"

    def _raise(payload, sig_header, secret):
        raise stripe.SignatureVerificationError("bad signature", sig_header)

    monkeypatch.setattr(stripe.Webhook, "construct_event", _raise)

    res = APIClient().post(WEBHOOK_URL, data=b"{}", content_type="application/json", HTTP_STRIPE_SIGNATURE="nope")

    assert res.status_code == 400
    assert not Order.objects.exists()


@pytest.mark.django_db
def test_webhook_without_secret_is_unavailable(settings):
    settings.STRIPE_WEBHOOK_SECRET = ""
    res = APIClient().post(WEBHOOK_URL, data=b"{}", content_type="application/json")
    assert res.status_code == 503


@pytest.mark.django_db
def test_legacy_webhook_path_still_works(webhook):
    webhook(_succeeded("pi_legacy_warmup", _cart()))
    res = APIClient().post("/webhook/", data=b"{}", content_type="application/json", HTTP_STRIPE_SIGNATURE="t=1")
    assert res.status_code == 200


@pytest.mark.django_db
def test_order_by_intent_polling(webhook):
    client = APIClient()
    pending = client.get("/api/orders/by-intent/pi_poll/")
    assert pending.status_code == 404
    assert pending.data == {"status": "pending"}

    webhook(_succeeded("pi_poll", _cart()))

    found = client.get("/api/orders/by-intent/pi_poll/")
    assert found.status_code == 200
    assert found.data["status"] == "confirmed"
    assert found.data["items"][0]["service_date"] == "2030-03-05"
    assert found.data["delivery_groups"][0]["slot_label"] == "Lunch"
