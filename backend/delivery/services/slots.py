# backend/delivery/services/slots.py
import logging
from typing import Dict, List

from django.db import transaction
from django.db.models import Count

from orders.models import DeliveryGroup, Order
from utils.dates import parse_date_key

from ..models import BlackoutDate, DeliverySettings, SlotTemplate

LOGGER = logging.getLogger(__name__)


class DeliveryError(Exception):
    pass


class DeliveryNotConfigured(DeliveryError):
    def __init__(self):
        super().__init__("Delivery settings not configured")


def reserved_counts(service_date) -> Dict[str, int]:
    """
    Orders booked per slot label on one date. Each (order, date, slot) group
    counts once; older orders without groups count by their delivery_date/slot.
    """
    day = parse_date_key(service_date)
    counts: Dict[str, int] = {}

    grouped = (
        DeliveryGroup.objects.filter(service_date=day)
        .exclude(slot_label="")
        .values("slot_label")
        .annotate(n=Count("order_id", distinct=True))
    )
    for row in grouped:
        counts[row["slot_label"]] = counts.get(row["slot_label"], 0) + row["n"]

    legacy = (
        Order.objects.filter(delivery_date=day, delivery_groups__isnull=True)
        .exclude(delivery_slot="")
        .values("delivery_slot")
        .annotate(n=Count("id"))
    )
    for row in legacy:
        counts[row["delivery_slot"]] = counts.get(row["delivery_slot"], 0) + row["n"]

    return counts


def slot_availability(service_date) -> List[dict]:
    """
    Active slot templates for ``service_date`` with what is left in each.
    A blackout date has no slots at all.
    """
    day = parse_date_key(service_date)
    if DeliverySettings.load() is None:
        raise DeliveryNotConfigured()
    if BlackoutDate.objects.filter(date=day).exists():
        return []

    reserved = reserved_counts(day)
    slots = []
    for template in SlotTemplate.objects.filter(active=True).order_by("start_min"):
        used = reserved.get(template.label, 0)
        slots.append(
            {
                "label": template.label,
                "start_min": template.start_min,
                "end_min": template.end_min,
                "capacity": template.capacity,
                "reserved": used,
                "remaining": max(0, template.capacity - used),
                "active": template.active,
            }
        )
    return slots


def upsert_settings(**fields) -> DeliverySettings:
    obj, _ = DeliverySettings.objects.update_or_create(id=DeliverySettings.SINGLETON_ID, defaults=fields)
    return obj


@transaction.atomic
def replace_slots(rows: List[dict]) -> List[SlotTemplate]:
    SlotTemplate.objects.all().delete()
    created = SlotTemplate.objects.bulk_create([SlotTemplate(**row) for row in rows])
    LOGGER.info("Slot templates replaced (%s rows)", len(created))
    return list(SlotTemplate.objects.order_by("start_min"))


@transaction.atomic
def replace_blackouts(rows: List[dict]) -> List[BlackoutDate]:
    BlackoutDate.objects.all().delete()
    BlackoutDate.objects.bulk_create([BlackoutDate(**row) for row in rows])
    LOGGER.info("Blackout dates replaced (%s rows)", len(rows))
    return list(BlackoutDate.objects.order_by("date"))
