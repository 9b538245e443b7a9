import datetime

import pytest

from orders.emails import build_confirmation, send_order_confirmation
from utils.sendgrid_email import send_email_with_sendgrid
from tests.factories import DeliveryGroupFactory, OrderFactory, OrderItemFactory


@pytest.fixture
def grouped_order():
    order = OrderFactory(customer_name="Ada", total_cents=3900)
    tue = DeliveryGroupFactory(order=order, service_date=datetime.date(2030, 3, 5), slot_label="Lunch")
    wed = DeliveryGroupFactory(order=order, service_date=datetime.date(2030, 3, 6), slot_label="Dinner")
    OrderItemFactory(order=order, delivery_group=tue, name="Jollof", variant_label="Large", quantity=2, price_cents=1200)
    OrderItemFactory(order=order, delivery_group=wed, name="Egusi <spicy>", quantity=1, price_cents=1500)
    return order


@pytest.mark.django_db
def test_confirmation_lists_each_delivery_day(grouped_order):
    subject, text, html = build_confirmation(grouped_order)

    assert subject == f"Your Food Savvy order #{grouped_order.id} is confirmed"
    assert text.index("Tuesday, Mar 5 · Lunch") < text.index("Wednesday, Mar 6 · Dinner")
    assert "2 x Jollof (Large)  $24.00" in text
    assert "Total paid: $39.00" in text
    assert "Egusi &lt;spicy&gt;" in html
    assert "<spicy>" not in html


@pytest.mark.django_db
def test_send_falls_back_to_django_mail(settings, mailoutbox, grouped_order):
    settings.SENDGRID_API_KEY = ""

    assert send_order_confirmation(grouped_order) is True

    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == ["ada@example.com"]
    assert mailoutbox[0].alternatives[0][1] == "text/html"


@pytest.mark.django_db
def test_order_without_email_is_skipped(mailoutbox):
    order = OrderFactory(customer_email="")
    assert send_order_confirmation(order) is False
    assert mailoutbox == []


def test_sendgrid_failure_uses_django_fallback(settings, monkeypatch, mailoutbox):
    settings.SENDGRID_API_KEY = "SG.test"

    class BrokenClient:
        def __init__(self, api_key):
            self.api_key = api_key

        def send(self, message):
            raise OSError("connection reset")

    monkeypatch.setattr("utils.sendgrid_email.SendGridAPIClient", BrokenClient)

    sent = send_email_with_sendgrid(to_email="ada@example.com", subject="Hi", text_body="Hello\n\nthere")

    assert sent is True
    assert mailoutbox[0].subject == "Hi"


def test_sendgrid_success_skips_django(settings, monkeypatch, mailoutbox):
    settings.SENDGRID_API_KEY = "SG.test"
    sent_messages = []

    class OkClient:
        def __init__(self, api_key):
            pass

        def send(self, message):
            sent_messages.append(message)

            class Resp:
                status_code = 202

            return Resp()

    monkeypatch.setattr("utils.sendgrid_email.SendGridAPIClient", OkClient)

    assert send_email_with_sendgrid(to_email="ada@example.com", subject="Hi", text_body="Hello") is True
    assert len(sent_messages) == 1
    assert mailoutbox == []
