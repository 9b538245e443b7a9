# backend/menus/services/availability.py
from typing import Dict, Iterable, List, Optional

from django.db.models import Sum

from orders.models import OrderItem
from utils.dates import parse_date_key

from ..models import MenuItem


def used_quantities(service_date, menu_item_ids: Optional[Iterable[int]] = None) -> Dict[int, int]:
    """Units already sold per menu item for one service date (delivery groups only)."""
    day = parse_date_key(service_date)
    qs = OrderItem.objects.filter(delivery_group__service_date=day)
    if menu_item_ids is not None:
        qs = qs.filter(menu_item_id__in=list(menu_item_ids))
    rows = qs.values("menu_item_id").annotate(used=Sum("quantity"))
    return {row["menu_item_id"]: int(row["used"] or 0) for row in rows}


def remaining_for(capacity_per_day: Optional[int], used: int) -> Optional[int]:
    """None means unlimited."""
    if capacity_per_day is None:
        return None
    return max(int(capacity_per_day) - int(used or 0), 0)


def compute_item_remaining(items: Iterable[MenuItem], service_date) -> Dict[int, Optional[int]]:
    items = list(items)
    limited_ids = [item.id for item in items if item.capacity_per_day is not None]
    used = used_quantities(service_date, limited_ids) if limited_ids else {}
    return {item.id: remaining_for(item.capacity_per_day, used.get(item.id, 0)) for item in items}


def find_capacity_conflicts(requested: Iterable[tuple]) -> List[dict]:
    """
    Compare requested ``(menu_item_id, service_date, quantity)`` rows against what
    is left right now. Returns one entry per (item, date) that would oversell.
    """
    wanted: Dict[tuple, int] = {}
    for menu_item_id, service_date, quantity in requested:
        if not service_date:
            continue
        key = (int(menu_item_id), parse_date_key(service_date).isoformat())
        wanted[key] = wanted.get(key, 0) + int(quantity)
    if not wanted:
        return []

    items = {
        item.id: item
        for item in MenuItem.objects.filter(
            id__in={mid for mid, _ in wanted}, capacity_per_day__isnull=False
        )
    }

    conflicts = []
    for date_key in sorted({d for _, d in wanted}):
        ids = [mid for mid, d in wanted if d == date_key and mid in items]
        if not ids:
            continue
        used = used_quantities(date_key, ids)
        for mid in ids:
            remaining = remaining_for(items[mid].capacity_per_day, used.get(mid, 0))
            if wanted[(mid, date_key)] > remaining:
                conflicts.append(
                    {
                        "menu_item_id": mid,
                        "name": items[mid].name,
                        "service_date": date_key,
                        "requested": wanted[(mid, date_key)],
                        "remaining": remaining,
                    }
                )
    return conflicts
