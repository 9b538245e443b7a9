import datetime

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from delivery.models import BlackoutDate, DeliverySettings, SlotTemplate
from delivery.services.slots import reserved_counts
from tests.factories import (
    AdminUserFactory,
    BlackoutDateFactory,
    DeliveryGroupFactory,
    DeliverySettingsFactory,
    OrderFactory,
    SlotTemplateFactory,
)

DAY = datetime.date(2030, 3, 5)


def _auth_client(user):
    client = APIClient()
    token = RefreshToken.for_user(user).access_token
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


@pytest.mark.django_db
def test_availability_counts_reserved_groups_per_slot():
    DeliverySettingsFactory()
    SlotTemplateFactory(label="Dinner", start_min=17 * 60, end_min=19 * 60, capacity=2)
    SlotTemplateFactory(label="Lunch", start_min=11 * 60, end_min=13 * 60, capacity=3)
    SlotTemplateFactory(label="Brunch", start_min=9 * 60, end_min=10 * 60, active=False)
    DeliveryGroupFactory(service_date=DAY, slot_label="Lunch")
    DeliveryGroupFactory(service_date=DAY, slot_label="Lunch")
    DeliveryGroupFactory(service_date=DAY, slot_label="Dinner")
    DeliveryGroupFactory(service_date=DAY, slot_label="Dinner")
    DeliveryGroupFactory(service_date=DAY, slot_label="Dinner")
    DeliveryGroupFactory(service_date=DAY + datetime.timedelta(days=1), slot_label="Lunch")

    res = APIClient().get("/api/availability/?date=2030-03-05")

    assert res.status_code == 200
    assert res.data["date"] == "2030-03-05"
    slots = {s["label"]: s for s in res.data["slots"]}
    assert [s["label"] for s in res.data["slots"]] == ["Lunch", "Dinner"]
    assert slots["Lunch"]["reserved"] == 2
    assert slots["Lunch"]["remaining"] == 1
    assert slots["Dinner"]["reserved"] == 3
    assert slots["Dinner"]["remaining"] == 0


@pytest.mark.django_db
def test_availability_is_stable_between_calls():
    DeliverySettingsFactory()
    SlotTemplateFactory(label="Lunch", capacity=3)
    DeliveryGroupFactory(service_date=DAY, slot_label="Lunch")

    client = APIClient()
    first = client.get("/api/availability/?date=2030-03-05").data
    second = client.get("/api/availability/?date=2030-03-05").data

    assert first == second


@pytest.mark.django_db
def test_blackout_date_has_no_slots():
    DeliverySettingsFactory()
    SlotTemplateFactory(label="Lunch", capacity=10)
    SlotTemplateFactory(label="Dinner", start_min=17 * 60, end_min=19 * 60, capacity=10)
    BlackoutDateFactory(date=DAY)

    res = APIClient().get("/api/availability/?date=2030-03-05")

    assert res.status_code == 200
    assert res.data["slots"] == []


@pytest.mark.django_db
def test_availability_requires_date_and_settings():
    client = APIClient()
    assert client.get("/api/availability/").status_code == 400
    assert client.get("/api/availability/?date=tomorrow").status_code == 400
    assert client.get("/api/availability/?date=2030-03-05").status_code == 503


@pytest.mark.django_db
def test_orders_without_groups_still_hold_their_slot():
    OrderFactory(delivery_date=DAY, delivery_slot="Lunch")
    grouped = OrderFactory(delivery_date=DAY, delivery_slot="Lunch")
    DeliveryGroupFactory(order=grouped, service_date=DAY, slot_label="Lunch")

    assert reserved_counts(DAY) == {"Lunch": 2}


@pytest.mark.django_db
def test_delivery_config_is_public():
    DeliverySettingsFactory()
    SlotTemplateFactory(label="Lunch")
    BlackoutDateFactory(date=DAY, reason="Holiday")

    res = APIClient().get("/api/delivery/config/")

    assert res.status_code == 200
    assert res.data["settings"]["max_radius_miles"] == 10
    assert res.data["settings"]["fee_tiers"][0] == {"to_miles": 5.0, "fee_cents": 500}
    assert [s["label"] for s in res.data["slots"]] == ["Lunch"]
    assert res.data["blackouts"][0]["date"] == "2030-03-05"


@pytest.mark.django_db
def test_quote_by_miles_uses_fee_tiers():
    DeliverySettingsFactory()
    client = APIClient()

    near = client.post("/api/delivery/quote/", {"miles": 4.2}, format="json")
    far = client.post("/api/delivery/quote/", {"miles": 12}, format="json")

    assert near.data == {"miles": 4.2, "fee_cents": 500, "in_range": True}
    assert far.data["fee_cents"] is None
    assert far.data["in_range"] is False


@pytest.mark.django_db
def test_quote_by_coordinates_measures_from_origin():
    DeliverySettingsFactory()

    res = APIClient().post("/api/delivery/quote/", {"lat": 40.3573, "lng": -74.6672}, format="json")

    assert res.data["miles"] == 0
    assert res.data["fee_cents"] == 500


@pytest.mark.django_db
def test_quote_needs_distance():
    DeliverySettingsFactory()
    assert APIClient().post("/api/delivery/quote/", {}, format="json").status_code == 400


@pytest.mark.django_db
def test_admin_settings_upsert_singleton():
    client = _auth_client(AdminUserFactory())
    payload = {
        "origin_address": "5 Witherspoon St",
        "origin_lat": 40.35,
        "origin_lng": -74.66,
        "max_radius_miles": 8,
        "fee_tiers": [{"to_miles": 8, "fee_cents": 800}, {"to_miles": 3, "fee_cents": 300}],
    }

    first = client.put("/api/admin/delivery/settings/", payload, format="json")
    second = client.put("/api/admin/delivery/settings/", {**payload, "max_radius_miles": 9}, format="json")

    assert first.status_code == 200
    assert second.status_code == 200
    assert DeliverySettings.objects.count() == 1
    settings_obj = DeliverySettings.load()
    assert settings_obj.max_radius_miles == 9
    assert [t["to_miles"] for t in settings_obj.fee_tiers] == [3, 8]


@pytest.mark.django_db
def test_admin_replace_slots_is_all_or_nothing():
    client = _auth_client(AdminUserFactory())
    SlotTemplateFactory(label="Old")

    ok = client.put(
        "/api/admin/delivery/slots/",
        {"slots": [{"label": "Lunch", "start_min": 660, "end_min": 780, "capacity": 4, "active": True}]},
        format="json",
    )
    assert ok.status_code == 200
    assert list(SlotTemplate.objects.values_list("label", flat=True)) == ["Lunch"]

    bad = client.put(
        "/api/admin/delivery/slots/",
        {"slots": [{"label": "Late", "start_min": 900, "end_min": 800, "capacity": 1, "active": True}]},
        format="json",
    )
    assert bad.status_code == 400
    assert list(SlotTemplate.objects.values_list("label", flat=True)) == ["Lunch"]


@pytest.mark.django_db
def test_admin_replace_blackouts():
    client = _auth_client(AdminUserFactory())
    BlackoutDateFactory(date=DAY)

    res = client.put(
        "/api/admin/delivery/blackouts/",
        {"blackouts": [{"date": "2030-12-25", "reason": "Christmas"}]},
        format="json",
    )

    assert res.status_code == 200
    assert list(BlackoutDate.objects.values_list("date", flat=True)) == [datetime.date(2030, 12, 25)]


@pytest.mark.django_db
def test_admin_delivery_requires_token():
    assert APIClient().get("/api/admin/delivery/config/").status_code == 401
