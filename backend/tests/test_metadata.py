import json

import pytest

from utils.metadata import MAX_VALUE_LENGTH, MetadataError, decode_metadata, encode_metadata, merge_metadata


def _encode(**overrides):
    fields = {
        "fulfillment": "delivery",
        "name": "Ada",
        "email": "ada@example.com",
        "address": "12 Nassau St",
        "menu_items": [
            {"menu_item_id": 3, "variant_id": 7, "variant_label": "Large", "quantity": 2,
             "price_cents": 1500, "name": "Jollof", "service_date": "2030-03-05"},
        ],
        "add_ons": [{"add_on_id": 1, "name": "Plantains", "quantity": 1, "price_cents": 300}],
        "schedule": {"2030-03-05": "Lunch"},
    }
    fields.update(overrides)
    return encode_metadata(**fields)


def test_every_value_is_a_string_and_within_limit():
    metadata = _encode()
    assert all(isinstance(v, str) for v in metadata.values())
    assert all(len(v) <= MAX_VALUE_LENGTH for v in metadata.values())
    assert "phone" not in metadata


def test_decode_rebuilds_cart():
    cart = decode_metadata(_encode())

    assert cart.fulfillment == "delivery"
    assert cart.email == "ada@example.com"
    item = cart.menu_items[0]
    assert (item.menu_item_id, item.variant_id, item.quantity, item.price_cents) == (3, 7, 2, 1500)
    assert item.service_date == "2030-03-05"
    assert cart.add_ons[0].service_date is None
    assert cart.slot_for("2030-03-05") == "Lunch"
    assert cart.slot_for("2030-03-06") is None


def test_long_cart_is_chunked_and_joined():
    items = [
        {"menu_item_id": i, "quantity": 1, "price_cents": 1000, "name": f"Dish number {i}",
         "service_date": "2030-03-05"}
        for i in range(1, 40)
    ]
    metadata = _encode(menu_items=items)

    assert "menu_items" not in metadata
    assert "menu_items__0" in metadata and "menu_items__1" in metadata
    assert len(decode_metadata(metadata).menu_items) == 39


def test_decode_rejects_malformed_payloads():
    with pytest.raises(MetadataError):
        decode_metadata({"menu_items": "[{not json"})
    with pytest.raises(MetadataError):
        decode_metadata({"menu_items": json.dumps([{"menu_item_id": "x", "quantity": 1, "price_cents": 1}])})
    with pytest.raises(MetadataError):
        decode_metadata({"menu_items": json.dumps([{"menu_item_id": 1, "quantity": 0, "price_cents": 1}])})
    with pytest.raises(MetadataError):
        decode_metadata({"schedule": "[]"})


def test_decode_of_empty_metadata_is_empty_cart():
    cart = decode_metadata({})
    assert cart.menu_items == []
    assert cart.fulfillment == "delivery"


def test_merge_metadata_encodes_values_and_layers_fields():
    merged = merge_metadata(
        {"menu_items": [{"menu_item_id": 1}], "note": "ring bell", "name": "old"},
        name="Ada",
        email=None,
    )

    assert merged["name"] == "Ada"
    assert merged["note"] == "ring bell"
    assert json.loads(merged["menu_items"]) == [{"menu_item_id": 1}]
    assert "email" not in merged
