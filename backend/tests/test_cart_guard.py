import pytest

from storefront import (
    CAPACITY_NOTICE,
    AddOnLine,
    CapacityExceeded,
    CartStore,
    LineNotFound,
    PricedItem,
    max_allowed_for_line,
    priced_item_from_menu,
)
from storefront.grouping import group_by_service_date, ordered_groups

TUESDAY = "2030-03-05"


def _jollof(variant_id=1, quantity=1, remaining=5, service_date=TUESDAY, price=1200):
    return PricedItem(
        menu_item_id=10,
        variant_id=variant_id,
        name="Jollof",
        price_cents=price,
        quantity=quantity,
        service_date=service_date,
        remaining_at_add=remaining,
    )


def test_sibling_variants_share_one_allowance():
    cart = CartStore()
    cart.add(_jollof(variant_id=1, quantity=3))

    stored = cart.add(_jollof(variant_id=2, quantity=4))

    assert stored.quantity == 2
    assert sum(line.quantity for line in cart.lines) == 5


def test_add_when_group_is_full_raises_and_keeps_state():
    cart = CartStore()
    cart.add(_jollof(variant_id=1, quantity=5))
    before = cart.state

    with pytest.raises(CapacityExceeded) as excinfo:
        cart.add(_jollof(variant_id=2))

    assert str(excinfo.value) == CAPACITY_NOTICE
    assert excinfo.value.allowed == 0
    assert cart.state is before


def test_increment_past_ceiling_raises_and_keeps_quantity():
    cart = CartStore()
    line = cart.add(_jollof(quantity=2, remaining=3))
    cart.increment(line.id)

    with pytest.raises(CapacityExceeded):
        cart.increment(line.id)

    assert cart.state.get(line.id).quantity == 3
    assert cart.max_allowed(line.id) == 3


def test_set_quantity_respects_other_lines_in_group():
    cart = CartStore()
    first = cart.add(_jollof(variant_id=1, quantity=2))
    second = cart.add(_jollof(variant_id=2, quantity=1))

    with pytest.raises(CapacityExceeded) as excinfo:
        cart.set_quantity(second.id, 4)
    cart.set_quantity(second.id, 3)

    assert excinfo.value.allowed == 3
    assert cart.max_allowed(first.id) == 2


def test_other_days_have_their_own_allowance():
    cart = CartStore()
    cart.add(_jollof(quantity=5))

    wednesday = cart.add(_jollof(quantity=5, service_date="2030-03-06"))

    assert wednesday.quantity == 5
    assert len(cart.lines) == 2


def test_lowering_quantity_is_always_allowed_and_zero_removes():
    cart = CartStore()
    line = cart.add(_jollof(quantity=4))

    cart.decrement(line.id)
    assert cart.state.get(line.id).quantity == 3

    cart.set_quantity(line.id, 0)
    assert cart.lines == ()
    with pytest.raises(LineNotFound):
        cart.increment(line.id)


def test_adding_same_line_merges_quantities():
    cart = CartStore()
    cart.add(_jollof(quantity=1))
    merged = cart.add(_jollof(quantity=2))

    assert merged.quantity == 3
    assert len(cart.lines) == 1


def test_new_line_inherits_group_snapshot():
    cart = CartStore()
    cart.add(_jollof(variant_id=1, quantity=1, remaining=2))

    stored = cart.add(_jollof(variant_id=2, quantity=5, remaining=50))

    assert stored.remaining_at_add == 2
    assert stored.quantity == 1


def test_unlimited_items_and_add_ons_are_never_capped():
    cart = CartStore()
    unlimited = cart.add(_jollof(quantity=40, remaining=None))
    add_on = cart.add(AddOnLine(add_on_id=3, name="Plantains", price_cents=300, quantity=25, service_date=TUESDAY))
    cart.increment(add_on.id, by=100)

    assert unlimited.quantity == 40
    assert max_allowed_for_line(add_on, cart.lines) is None
    assert cart.state.get(add_on.id).quantity == 125


def test_capacity_falls_back_to_capacity_per_day():
    line = PricedItem(menu_item_id=1, variant_id=1, name="Suya", price_cents=900, capacity_per_day=2)
    assert max_allowed_for_line(line, []) == 2


def test_line_ids_and_dates_are_normalized():
    line = _jollof(service_date="2030-03-05T04:00:00Z")
    assert line.service_date == TUESDAY
    assert line.id == "10-1-2030-03-05"
    assert _jollof(service_date=None).id == "10-1"


def test_priced_item_from_menu_snapshots_remaining():
    item = {"id": 7, "name": "Egusi", "remaining": 4, "capacity_per_day": 10}
    line = priced_item_from_menu(item, {"id": 2, "label": "Large", "price_cents": 1500}, TUESDAY)

    assert line.remaining_at_add == 4
    assert line.variant_label == "Large"
    assert line.group_key == (7, TUESDAY)


def test_subtotal_and_clear():
    cart = CartStore()
    cart.add(_jollof(quantity=2, price=1200))
    cart.add(AddOnLine(add_on_id=1, name="Plantains", price_cents=300))

    assert cart.subtotal_cents == 2700
    cart.clear()
    assert cart.lines == ()


def test_grouping_orders_dates_and_puts_unscheduled_last():
    lines = [
        _jollof(service_date="2030-03-07"),
        AddOnLine(add_on_id=1, name="Napkins", price_cents=0),
        _jollof(variant_id=2, service_date=TUESDAY),
    ]

    groups = group_by_service_date(lines)
    assert list(groups) == [TUESDAY, "2030-03-07", "unscheduled"]

    rendered = ordered_groups(lines, {TUESDAY: "Lunch"})
    assert rendered[0]["label"] == "Tuesday, Mar 5"
    assert rendered[0]["slot"] == "Lunch"
    assert rendered[-1]["label"] == ""
