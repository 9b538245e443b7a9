# backend/utils/metadata.py
"""
Payment metadata wire contract.

The storefront stashes the whole cart in the PaymentIntent metadata and the
webhook rebuilds the order from it, so both sides must agree on this format:

- every value is a string (the gateway rejects anything else)
- ``menu_items`` / ``add_ons`` are compact JSON lists, ``schedule`` is a JSON
  object ``{"YYYY-MM-DD": "<slot label>"}``
- a value longer than ``MAX_VALUE_LENGTH`` is stored as ``<key>__0``,
  ``<key>__1``... and joined back on decode
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .dates import to_date_key

MAX_VALUE_LENGTH = 500
CHUNK_SEPARATOR = "__"

JSON_KEYS = ("menu_items", "add_ons", "schedule")
PLAIN_KEYS = ("type", "name", "email", "address", "phone", "delivery_date", "delivery_slot")


class MetadataError(ValueError):
    pass


@dataclass
class MetadataItem:
    menu_item_id: int
    quantity: int
    price_cents: int
    name: str = ""
    variant_id: Optional[int] = None
    variant_label: str = ""
    service_date: Optional[str] = None


@dataclass
class MetadataAddOn:
    name: str
    quantity: int
    price_cents: int
    add_on_id: Optional[int] = None
    service_date: Optional[str] = None


@dataclass
class CartMetadata:
    fulfillment: str = "delivery"
    name: str = ""
    email: str = ""
    address: str = ""
    phone: str = ""
    delivery_date: Optional[str] = None
    delivery_slot: Optional[str] = None
    schedule: Dict[str, str] = field(default_factory=dict)
    menu_items: List[MetadataItem] = field(default_factory=list)
    add_ons: List[MetadataAddOn] = field(default_factory=list)

    def slot_for(self, date_key: Optional[str]) -> Optional[str]:
        if date_key and date_key in self.schedule:
            return self.schedule[date_key]
        return self.delivery_slot


def _put(out: dict, key: str, value: str):
    if len(value) <= MAX_VALUE_LENGTH:
        out[key] = value
        return
    for idx in range(0, len(value), MAX_VALUE_LENGTH):
        out[f"{key}{CHUNK_SEPARATOR}{idx // MAX_VALUE_LENGTH}"] = value[idx: idx + MAX_VALUE_LENGTH]


def _get(metadata: dict, key: str) -> Optional[str]:
    if key in metadata:
        return metadata[key]
    parts = []
    idx = 0
    while f"{key}{CHUNK_SEPARATOR}{idx}" in metadata:
        parts.append(metadata[f"{key}{CHUNK_SEPARATOR}{idx}"])
        idx += 1
    return "".join(parts) if parts else None


def encode_metadata(
    *,
    fulfillment: str,
    name: str,
    email: str,
    menu_items: List[dict],
    add_ons: List[dict],
    schedule: Optional[Dict[str, str]] = None,
    address: str = "",
    phone: str = "",
    delivery_date: Optional[str] = None,
    delivery_slot: Optional[str] = None,
) -> Dict[str, str]:
    out: Dict[str, str] = {}
    plain = {
        "type": fulfillment,
        "name": name,
        "email": email,
        "address": address,
        "phone": phone,
        "delivery_date": to_date_key(delivery_date) if delivery_date else "",
        "delivery_slot": delivery_slot or "",
    }
    for key, value in plain.items():
        if value:
            _put(out, key, str(value))

    compact = {"separators": (",", ":"), "sort_keys": True}
    _put(out, "menu_items", json.dumps(menu_items, **compact))
    _put(out, "add_ons", json.dumps(add_ons, **compact))
    _put(out, "schedule", json.dumps(schedule or {}, **compact))
    return out


def merge_metadata(bag, **fields) -> Dict[str, str]:
    """
    Gateway-safe copy of a client metadata bag with ``fields`` layered on top.
    Non-string values are JSON encoded; long values are chunked.
    """
    out: Dict[str, str] = {}
    merged = dict(bag or {})
    merged.update({k: v for k, v in fields.items() if v is not None})
    for key, value in merged.items():
        if value is None:
            continue
        if not isinstance(value, str):
            value = json.dumps(value, separators=(",", ":"), sort_keys=True)
        if CHUNK_SEPARATOR in key and key.rsplit(CHUNK_SEPARATOR, 1)[1].isdigit():
            out[key] = value
        else:
            _put(out, str(key), value)
    return out


def _load_json(metadata: dict, key: str, default):
    raw = _get(metadata, key)
    if raw in (None, ""):
        return default
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MetadataError(f"Invalid JSON in metadata '{key}'") from exc


def _int(value, label: str, minimum: int = 0) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise MetadataError(f"Invalid {label}: {value!r}") from exc
    if number < minimum:
        raise MetadataError(f"Invalid {label}: {value!r}")
    return number


def _date_key(value, label: str) -> Optional[str]:
    try:
        return to_date_key(value)
    except ValueError as exc:
        raise MetadataError(f"Invalid {label}: {value!r}") from exc


def decode_metadata(metadata) -> CartMetadata:
    metadata = dict(metadata or {})

    raw_items = _load_json(metadata, "menu_items", [])
    raw_add_ons = _load_json(metadata, "add_ons", [])
    raw_schedule = _load_json(metadata, "schedule", {})
    if not isinstance(raw_items, list) or not isinstance(raw_add_ons, list):
        raise MetadataError("menu_items and add_ons must be lists")
    if not isinstance(raw_schedule, dict):
        raise MetadataError("schedule must be an object")

    items = []
    for row in raw_items:
        if not isinstance(row, dict):
            raise MetadataError("menu_items entries must be objects")
        variant_id = row.get("variant_id")
        items.append(
            MetadataItem(
                menu_item_id=_int(row.get("menu_item_id"), "menu_item_id", minimum=1),
                quantity=_int(row.get("quantity"), "quantity", minimum=1),
                price_cents=_int(row.get("price_cents"), "price_cents"),
                name=str(row.get("name") or ""),
                variant_id=_int(variant_id, "variant_id") if variant_id is not None else None,
                variant_label=str(row.get("variant_label") or ""),
                service_date=_date_key(row.get("service_date"), "service_date"),
            )
        )

    add_ons = []
    for row in raw_add_ons:
        if not isinstance(row, dict):
            raise MetadataError("add_ons entries must be objects")
        add_on_id = row.get("add_on_id")
        add_ons.append(
            MetadataAddOn(
                name=str(row.get("name") or ""),
                quantity=_int(row.get("quantity"), "quantity", minimum=1),
                price_cents=_int(row.get("price_cents"), "price_cents"),
                add_on_id=_int(add_on_id, "add_on_id") if add_on_id is not None else None,
                service_date=_date_key(row.get("service_date"), "service_date"),
            )
        )

    schedule = {}
    for key, slot in raw_schedule.items():
        date_key = _date_key(key, "schedule date")
        if date_key and slot:
            schedule[date_key] = str(slot)

    return CartMetadata(
        fulfillment=(_get(metadata, "type") or "delivery").strip().lower(),
        name=_get(metadata, "name") or "",
        email=_get(metadata, "email") or "",
        address=_get(metadata, "address") or "",
        phone=_get(metadata, "phone") or "",
        delivery_date=_date_key(_get(metadata, "delivery_date"), "delivery_date"),
        delivery_slot=_get(metadata, "delivery_slot") or None,
        schedule=schedule,
        menu_items=items,
        add_ons=add_ons,
    )
