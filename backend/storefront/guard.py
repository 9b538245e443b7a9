# backend/storefront/guard.py
from typing import Iterable, Optional

from .lines import CartLine, PricedItem

CAPACITY_NOTICE = "Sorry, that's the maximum available for this day."


class CapacityExceeded(Exception):
    def __init__(self, line_id: str, allowed: int, message: str = CAPACITY_NOTICE):
        super().__init__(message)
        self.line_id = line_id
        self.allowed = allowed


def baseline_for(line: CartLine) -> Optional[int]:
    """Units the line's (item, day) group may hold in total; None means unlimited."""
    if not isinstance(line, PricedItem):
        return None
    if line.remaining_at_add is not None:
        return int(line.remaining_at_add)
    if line.capacity_per_day is not None:
        return int(line.capacity_per_day)
    return None


def max_allowed_for_line(line: CartLine, lines: Iterable[CartLine]) -> Optional[int]:
    """
    Highest quantity ``line`` may have given every other line of the same
    (menu item, service date) group in ``lines``. None means unlimited.

    ``line`` does not need to be in ``lines`` yet: a line that is not there
    yet simply has no quantity of its own to discount.
    """
    baseline = baseline_for(line)
    if baseline is None:
        return None

    others = sum(
        other.quantity
        for other in lines
        if isinstance(other, PricedItem) and other.group_key == line.group_key and other.id != line.id
    )
    return max(baseline - others, 0)
