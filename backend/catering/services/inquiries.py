# backend/catering/services/inquiries.py
import logging

from django.db import transaction

from ..models import CateringItem, CateringOrder, Customer

LOGGER = logging.getLogger(__name__)


def get_or_create_guest(email: str, name: str = "") -> Customer:
    customer = Customer.objects.filter(email__iexact=email).first()
    if customer:
        return customer
    return Customer.objects.create(email=email.lower(), name=name, is_guest=True)


@transaction.atomic
def create_catering_order(*, user, event_date, guest_count, special_requests, items) -> CateringOrder:
    customer = get_or_create_guest(user["email"], user.get("name", ""))
    order = CateringOrder.objects.create(
        customer=customer,
        event_date=event_date,
        guest_count=guest_count,
        special_requests=special_requests or "",
        status="pending",
        total_cents=sum(row["quantity"] * row["price_cents"] for row in items),
    )
    CateringItem.objects.bulk_create(
        [
            CateringItem(catering_order=order, name=row["name"], quantity=row["quantity"], price_cents=row["price_cents"])
            for row in items
        ]
    )
    LOGGER.info("Catering inquiry %s from %s (%s guests)", order.id, customer.email, guest_count)
    return order
