# backend/storefront/checkout.py
"""
Turns a cart into a create-payment-intent request.

The order itself is only built later by the payment webhook, from the
metadata produced here; ``utils.metadata`` is the shared format.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from utils.dates import UNSCHEDULED
from utils.metadata import encode_metadata
from utils.pricing import DEFAULT_SALES_TAX_RATE, resolve_delivery_fee, sales_tax_cents

from .grouping import group_by_service_date
from .lines import AddOnLine, CartLine, PricedItem

FULFILLMENT_TYPES = ("delivery", "pickup")


class CheckoutNotReady(Exception):
    def __init__(self, message: str, missing_dates: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_dates = missing_dates or []


@dataclass(frozen=True)
class Quote:
    items_cents: int
    fee_cents: Optional[int]
    tax_cents: int
    total_cents: int
    blocked: bool = False
    miles: Optional[float] = None


def quote(
    lines: Iterable[CartLine],
    fulfillment: str,
    miles: Optional[float] = None,
    delivery_settings: Optional[dict] = None,
    tax_rate: Decimal = DEFAULT_SALES_TAX_RATE,
) -> Quote:
    """
    Items + fee + tax. Pickup never pays a fee. A delivery that can't be
    priced (unknown distance, past the radius, no matching tier) is
    ``blocked`` with ``fee_cents=None``.
    """
    if fulfillment not in FULFILLMENT_TYPES:
        raise ValueError(f"Unknown fulfillment type: {fulfillment!r}")

    items_cents = sum(line.line_total_cents for line in lines)
    if fulfillment == "pickup":
        fee = 0
    else:
        settings = delivery_settings or {}
        fee = resolve_delivery_fee(miles, settings.get("fee_tiers") or [], settings.get("max_radius_miles"))

    taxable = items_cents + (fee or 0)
    tax = sales_tax_cents(taxable, tax_rate)
    return Quote(
        items_cents=items_cents,
        fee_cents=fee,
        tax_cents=tax,
        total_cents=taxable + tax,
        blocked=fee is None,
        miles=miles,
    )


def scheduled_dates(lines: Iterable[CartLine]) -> List[str]:
    return [key for key in group_by_service_date(lines) if key != UNSCHEDULED]


def missing_slot_dates(lines: Iterable[CartLine], selected_slots: Optional[Dict[str, str]]) -> List[str]:
    """Service dates in the cart that still have no time slot picked."""
    selected_slots = selected_slots or {}
    return [key for key in scheduled_dates(lines) if not selected_slots.get(key)]


def _item_row(line: PricedItem) -> dict:
    return {
        "menu_item_id": line.menu_item_id,
        "variant_id": line.variant_id,
        "variant_label": line.variant_label,
        "name": line.name,
        "quantity": line.quantity,
        "price_cents": line.price_cents,
        "service_date": line.service_date,
    }


def _add_on_row(line: AddOnLine) -> dict:
    return {
        "add_on_id": line.add_on_id,
        "name": line.name,
        "quantity": line.quantity,
        "price_cents": line.price_cents,
        "service_date": line.service_date,
    }


def build_payment_request(
    lines: Iterable[CartLine],
    *,
    fulfillment: str,
    name: str,
    email: str,
    checkout_quote: Quote,
    selected_slots: Optional[Dict[str, str]] = None,
    address: str = "",
    phone: str = "",
) -> dict:
    """Body for ``POST /api/create-payment-intent/``."""
    lines = list(lines)
    if not lines:
        raise CheckoutNotReady("Your cart is empty.")
    if checkout_quote.blocked:
        raise CheckoutNotReady("That address is outside our delivery area.")
    missing = missing_slot_dates(lines, selected_slots)
    if missing:
        raise CheckoutNotReady("Please choose a time slot for every day in your order.", missing_dates=missing)
    if fulfillment == "delivery" and not address.strip():
        raise CheckoutNotReady("A delivery address is required.")

    selected_slots = selected_slots or {}
    dates = scheduled_dates(lines)
    schedule = {key: selected_slots[key] for key in dates}
    first_date = dates[0] if dates else None

    metadata = encode_metadata(
        fulfillment=fulfillment,
        name=name,
        email=email,
        address=address,
        phone=phone,
        menu_items=[_item_row(line) for line in lines if isinstance(line, PricedItem)],
        add_ons=[_add_on_row(line) for line in lines if isinstance(line, AddOnLine)],
        schedule=schedule,
        delivery_date=first_date,
        delivery_slot=schedule.get(first_date) if first_date else None,
    )
    return {
        "amount": checkout_quote.total_cents,
        "name": name,
        "email": email,
        "type": fulfillment,
        "metadata": metadata,
    }
