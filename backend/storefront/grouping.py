# backend/storefront/grouping.py
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional

from utils.dates import UNSCHEDULED, label_for_date_key

from .lines import CartLine


def group_by_service_date(lines: Iterable[CartLine]) -> "OrderedDict[str, List[CartLine]]":
    """Date key -> lines, dates ascending, dateless lines last under ``UNSCHEDULED``."""
    buckets: Dict[str, List[CartLine]] = {}
    for line in lines:
        buckets.setdefault(line.service_date or UNSCHEDULED, []).append(line)

    ordered = OrderedDict()
    for key in sorted(k for k in buckets if k != UNSCHEDULED):
        ordered[key] = buckets[key]
    if UNSCHEDULED in buckets:
        ordered[UNSCHEDULED] = buckets[UNSCHEDULED]
    return ordered


def ordered_groups(lines: Iterable[CartLine], selected_slots: Optional[Dict[str, str]] = None) -> List[dict]:
    selected_slots = selected_slots or {}
    return [
        {
            "date_key": key,
            "label": label_for_date_key(key),
            "slot": selected_slots.get(key),
            "lines": group,
        }
        for key, group in group_by_service_date(lines).items()
    ]
