# backend/orders/services/fulfillment.py
"""
Turns a paid PaymentIntent into an Order.

The cart travels in the intent metadata (see ``utils.metadata``); lines are
grouped into one DeliveryGroup per (service date, slot) so a multi-day cart
becomes a single order with several drop-offs.
"""
import logging
from typing import Dict, Optional, Tuple

from django.db import IntegrityError, transaction

from menus.models import AddOn, MenuItem
from utils.metadata import CartMetadata, decode_metadata

from ..models import DeliveryGroup, Order, OrderAddOn, OrderItem

LOGGER = logging.getLogger(__name__)

INITIAL_PAID_STATUS = "confirmed"

ALLOWED_TRANSITIONS = {
    "pending": {"confirmed"},
    "confirmed": {"preparing", "pending"},
    "preparing": {"out_for_delivery", "completed", "confirmed"},
    "out_for_delivery": {"completed", "preparing"},
    "completed": set(),
}


class OrderError(Exception):
    status_code = 400
    code = "order_error"


class InvalidStatusError(OrderError):
    code = "invalid_status"

    def __init__(self, value):
        super().__init__(f"Invalid status: {value!r}")
        self.value = value


class InvalidTransitionError(OrderError):
    code = "invalid_transition"

    def __init__(self, current, target):
        super().__init__(f"Cannot move order from {current} to {target}.")
        self.current = current
        self.target = target


class UnknownMenuItemsError(OrderError):
    code = "unknown_menu_items"

    def __init__(self, items):
        super().__init__("Order references unknown menu items")
        self.items = items


def _group_key(cart: CartMetadata, service_date: Optional[str]) -> Optional[Tuple[str, str]]:
    date_key = service_date or cart.delivery_date
    if not date_key:
        return None
    return date_key, cart.slot_for(date_key) or ""


def _first_scheduled(keys) -> Tuple[Optional[str], str]:
    ordered = sorted(k for k in keys if k is not None)
    if not ordered:
        return None, ""
    return ordered[0]


def create_order_from_intent(payment_intent_id: str, amount_cents: int, metadata) -> Tuple[Order, bool]:
    """
    Returns ``(order, created)``. Replaying the same intent returns the existing
    order with ``created=False``.

    Raises ``MetadataError`` for an unreadable cart and ``UnknownMenuItemsError``
    when a line points at a menu item that no longer exists.
    """
    existing = Order.objects.filter(stripe_payment_intent_id=payment_intent_id).first()
    if existing:
        return existing, False

    cart = decode_metadata(metadata)

    item_ids = {row.menu_item_id for row in cart.menu_items}
    known = set(MenuItem.objects.filter(id__in=item_ids).values_list("id", flat=True))
    missing = sorted(item_ids - known)
    if missing:
        raise UnknownMenuItemsError(missing)
    add_on_ids = {row.add_on_id for row in cart.add_ons if row.add_on_id}
    known_add_ons = set(AddOn.objects.filter(id__in=add_on_ids).values_list("id", flat=True))

    item_keys = [_group_key(cart, row.service_date) for row in cart.menu_items]
    add_on_keys = [_group_key(cart, row.service_date) for row in cart.add_ons]
    first_date, first_slot = _first_scheduled(item_keys + add_on_keys)

    try:
        with transaction.atomic():
            order = Order.objects.create(
                fulfillment=cart.fulfillment if cart.fulfillment in ("delivery", "pickup") else "delivery",
                status=INITIAL_PAID_STATUS,
                total_cents=int(amount_cents or 0),
                delivery_date=cart.delivery_date or first_date,
                delivery_slot=cart.delivery_slot or first_slot,
                address=cart.address,
                phone=cart.phone,
                customer_name=cart.name,
                customer_email=cart.email,
                stripe_payment_intent_id=payment_intent_id,
                metadata=dict(metadata or {}),
            )

            groups: Dict[Tuple[str, str], DeliveryGroup] = {}

            def group_for(key):
                if key is None:
                    return None
                if key not in groups:
                    groups[key] = DeliveryGroup.objects.create(order=order, service_date=key[0], slot_label=key[1])
                return groups[key]

            OrderItem.objects.bulk_create(
                [
                    OrderItem(
                        order=order,
                        delivery_group=group_for(key),
                        menu_item_id=row.menu_item_id,
                        name=row.name,
                        variant_label=row.variant_label,
                        quantity=row.quantity,
                        price_cents=row.price_cents,
                    )
                    for row, key in zip(cart.menu_items, item_keys)
                ]
            )
            OrderAddOn.objects.bulk_create(
                [
                    OrderAddOn(
                        order=order,
                        delivery_group=group_for(key),
                        add_on_id=row.add_on_id if row.add_on_id in known_add_ons else None,
                        name=row.name,
                        quantity=row.quantity,
                        price_cents=row.price_cents,
                    )
                    for row, key in zip(cart.add_ons, add_on_keys)
                ]
            )
    except IntegrityError:
        # another delivery of the same event won the race
        existing = Order.objects.filter(stripe_payment_intent_id=payment_intent_id).first()
        if existing is None:
            raise
        return existing, False

    LOGGER.info(
        "Order %s created from %s (%s items, %s groups)",
        order.id,
        payment_intent_id,
        len(cart.menu_items),
        len(groups),
    )
    return order, True


def change_status(order: Order, target: str) -> Order:
    valid = {value for value, _ in Order.STATUS_CHOICES}
    if target not in valid:
        raise InvalidStatusError(target)
    if target == order.status:
        return order
    if target not in ALLOWED_TRANSITIONS.get(order.status, set()):
        raise InvalidTransitionError(order.status, target)
    if target == "out_for_delivery" and order.fulfillment != "delivery":
        raise InvalidTransitionError(order.status, target)
    # delivery orders only complete from out_for_delivery
    if target == "completed" and order.status == "preparing" and order.fulfillment == "delivery":
        raise InvalidTransitionError(order.status, target)

    previous = order.status
    order.status = target
    order.save(update_fields=["status", "updated_at"])
    LOGGER.info("Order %s status %s -> %s", order.id, previous, target)
    return order
