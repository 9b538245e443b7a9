import pytest
from rest_framework.test import APIClient

from foodsavvy.metrics import track_payment_intent


def test_metrics_endpoint():
    client = APIClient()
    res = client.get("/metrics/")

    assert res.status_code == 200
    content_type = res.headers.get("Content-Type", "")
    assert "text/plain" in content_type
    content = res.content.decode("utf-8", errors="ignore")
    assert "foodsavvy_payment_intents_total" in content
    assert "foodsavvy_webhook_events_total" in content
    assert "foodsavvy_orders_created_total" in content
    assert "foodsavvy_confirmation_emails_total" in content


def test_tracked_outcomes_show_up_as_labels():
    track_payment_intent("created")

    content = APIClient().get("/metrics/").content.decode("utf-8", errors="ignore")

    assert 'foodsavvy_payment_intents_total{outcome="created"}' in content


def test_health():
    res = APIClient().get("/health/")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


@pytest.mark.django_db
def test_health_db():
    res = APIClient().get("/health/db/")
    assert res.status_code == 200
    assert res.json()["db"] == "ok"
