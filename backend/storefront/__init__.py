"""Customer-side cart, capacity guard and checkout, independent of Django."""

from .cart import CartState, CartStore, LineNotFound, reduce
from .checkout import CheckoutNotReady, Quote, build_payment_request, missing_slot_dates, quote
from .client import StorefrontClient, StorefrontError
from .grouping import group_by_service_date, ordered_groups
from .guard import CAPACITY_NOTICE, CapacityExceeded, max_allowed_for_line
from .lines import AddOnLine, CartLine, PricedItem, add_on_from_menu, priced_item_from_menu

__all__ = [
    "AddOnLine",
    "CAPACITY_NOTICE",
    "CapacityExceeded",
    "CartLine",
    "CartState",
    "CartStore",
    "CheckoutNotReady",
    "LineNotFound",
    "PricedItem",
    "Quote",
    "StorefrontClient",
    "StorefrontError",
    "add_on_from_menu",
    "build_payment_request",
    "group_by_service_date",
    "max_allowed_for_line",
    "missing_slot_dates",
    "ordered_groups",
    "priced_item_from_menu",
    "quote",
    "reduce",
]
