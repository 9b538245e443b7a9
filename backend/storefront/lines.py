# backend/storefront/lines.py
"""
Cart lines.

A cart holds two kinds of lines: ``PricedItem`` (a menu item variant, the only
kind subject to per-day capacity) and ``AddOnLine``. Both are immutable; the
cart replaces a line instead of mutating it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from utils.dates import UNSCHEDULED, to_date_key


def item_line_id(menu_item_id: int, variant_id: int, service_date: Optional[str] = None) -> str:
    base = f"{menu_item_id}-{variant_id}"
    return f"{base}-{service_date}" if service_date else base


def add_on_line_id(add_on_id: int, service_date: Optional[str] = None) -> str:
    base = f"addon-{add_on_id}"
    return f"{base}-{service_date}" if service_date else base


@dataclass(frozen=True)
class PricedItem:
    menu_item_id: int
    variant_id: int
    name: str
    price_cents: int
    quantity: int = 1
    service_date: Optional[str] = None
    remaining_at_add: Optional[int] = None
    capacity_per_day: Optional[int] = None
    variant_label: str = ""

    def __post_init__(self):
        object.__setattr__(self, "service_date", to_date_key(self.service_date))

    @property
    def id(self) -> str:
        return item_line_id(self.menu_item_id, self.variant_id, self.service_date)

    @property
    def group_key(self) -> Tuple[int, str]:
        """Lines sharing this key share one capacity allowance."""
        return self.menu_item_id, self.service_date or UNSCHEDULED

    @property
    def line_total_cents(self) -> int:
        return self.quantity * self.price_cents

    def with_quantity(self, quantity: int) -> "PricedItem":
        return replace(self, quantity=quantity)


@dataclass(frozen=True)
class AddOnLine:
    add_on_id: int
    name: str
    price_cents: int
    quantity: int = 1
    service_date: Optional[str] = None
    parent_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "service_date", to_date_key(self.service_date))

    @property
    def id(self) -> str:
        return add_on_line_id(self.add_on_id, self.service_date)

    @property
    def line_total_cents(self) -> int:
        return self.quantity * self.price_cents

    def with_quantity(self, quantity: int) -> "AddOnLine":
        return replace(self, quantity=quantity)


CartLine = Union[PricedItem, AddOnLine]


def priced_item_from_menu(item: dict, variant: dict, service_date=None, quantity: int = 1) -> PricedItem:
    """Build a line from one ``/api/menus/by-day/`` item and one of its variants."""
    return PricedItem(
        menu_item_id=int(item["id"]),
        variant_id=int(variant["id"]),
        name=item.get("name", ""),
        variant_label=variant.get("label", ""),
        price_cents=int(variant["price_cents"]),
        quantity=quantity,
        service_date=service_date,
        remaining_at_add=item.get("remaining"),
        capacity_per_day=item.get("capacity_per_day"),
    )


def add_on_from_menu(add_on: dict, service_date=None, quantity: int = 1, parent_id: Optional[str] = None) -> AddOnLine:
    return AddOnLine(
        add_on_id=int(add_on["id"]),
        name=add_on.get("name", ""),
        price_cents=int(add_on["price_cents"]),
        quantity=quantity,
        service_date=service_date,
        parent_id=parent_id,
    )
