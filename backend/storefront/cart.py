# backend/storefront/cart.py
"""
Cart state and the reducer that changes it.

``reduce(state, action)`` is pure: it returns a new ``CartState`` or raises
(``CapacityExceeded``, ``LineNotFound``) leaving the caller's state untouched.
``CartStore`` is the thin owner a checkout flow is handed explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from .guard import CapacityExceeded, max_allowed_for_line
from .lines import CartLine, PricedItem


class LineNotFound(KeyError):
    pass


@dataclass(frozen=True)
class CartState:
    lines: Tuple[CartLine, ...] = ()

    def find(self, line_id: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.id == line_id:
                return line
        return None

    def get(self, line_id: str) -> CartLine:
        line = self.find(line_id)
        if line is None:
            raise LineNotFound(line_id)
        return line

    @property
    def subtotal_cents(self) -> int:
        return sum(line.line_total_cents for line in self.lines)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


# --- actions ---

@dataclass(frozen=True)
class Add:
    line: CartLine


@dataclass(frozen=True)
class Increment:
    line_id: str
    by: int = 1


@dataclass(frozen=True)
class Decrement:
    line_id: str
    by: int = 1


@dataclass(frozen=True)
class SetQuantity:
    line_id: str
    quantity: int


@dataclass(frozen=True)
class Remove:
    line_id: str


@dataclass(frozen=True)
class Clear:
    pass


Action = Union[Add, Increment, Decrement, SetQuantity, Remove, Clear]


def _replace_line(state: CartState, line: CartLine) -> CartState:
    return CartState(tuple(line if existing.id == line.id else existing for existing in state.lines))


def _without(state: CartState, line_id: str) -> CartState:
    return CartState(tuple(line for line in state.lines if line.id != line_id))


def _check_ceiling(line: CartLine, quantity: int, state: CartState):
    allowed = max_allowed_for_line(line, state.lines)
    if allowed is not None and quantity > allowed:
        raise CapacityExceeded(line.id, allowed)


def _add(state: CartState, line: CartLine) -> CartState:
    if line.quantity < 1:
        raise ValueError("quantity must be at least 1")

    if isinstance(line, PricedItem):
        sibling = next(
            (l for l in state.lines if isinstance(l, PricedItem) and l.group_key == line.group_key),
            None,
        )
        if sibling is not None:
            # one snapshot per (item, day) group
            line = replace(line, remaining_at_add=sibling.remaining_at_add, capacity_per_day=sibling.capacity_per_day)

    existing = state.find(line.id)
    current = existing.quantity if existing else 0
    target = current + line.quantity

    allowed = max_allowed_for_line(existing or line, state.lines)
    if allowed is not None:
        if allowed <= current:
            raise CapacityExceeded(line.id, allowed)
        target = min(target, allowed)

    if existing:
        return _replace_line(state, existing.with_quantity(target))
    return CartState(state.lines + (line.with_quantity(target),))


def reduce(state: CartState, action: Action) -> CartState:
    if isinstance(action, Add):
        return _add(state, action.line)

    if isinstance(action, Clear):
        return CartState()

    line = state.get(action.line_id)

    if isinstance(action, Remove):
        return _without(state, line.id)

    if isinstance(action, Increment):
        target = line.quantity + action.by
    elif isinstance(action, Decrement):
        target = line.quantity - action.by
    elif isinstance(action, SetQuantity):
        target = int(action.quantity)
    else:
        raise TypeError(f"Unknown cart action: {action!r}")

    if target < 1:
        return _without(state, line.id)
    if target > line.quantity:
        _check_ceiling(line, target, state)
    return _replace_line(state, line.with_quantity(target))


class CartStore:
    """Owns one ``CartState``; every change goes through ``reduce``."""

    def __init__(self, state: Optional[CartState] = None):
        self.state = state or CartState()

    def dispatch(self, action: Action) -> CartState:
        self.state = reduce(self.state, action)
        return self.state

    @property
    def lines(self):
        return self.state.lines

    def add(self, line: CartLine) -> CartLine:
        """Returns the line as stored; its quantity may be clamped to what is left."""
        self.dispatch(Add(line))
        return self.state.get(line.id)

    def increment(self, line_id: str, by: int = 1) -> CartState:
        return self.dispatch(Increment(line_id, by))

    def decrement(self, line_id: str, by: int = 1) -> CartState:
        return self.dispatch(Decrement(line_id, by))

    def set_quantity(self, line_id: str, quantity: int) -> CartState:
        return self.dispatch(SetQuantity(line_id, quantity))

    def remove(self, line_id: str) -> CartState:
        return self.dispatch(Remove(line_id))

    def clear(self) -> CartState:
        return self.dispatch(Clear())

    def max_allowed(self, line_id: str) -> Optional[int]:
        return max_allowed_for_line(self.state.get(line_id), self.state.lines)

    @property
    def subtotal_cents(self) -> int:
        return self.state.subtotal_cents
