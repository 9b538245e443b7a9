import datetime

import pytest

from menus.services.availability import (
    compute_item_remaining,
    find_capacity_conflicts,
    remaining_for,
    used_quantities,
)
from tests.factories import DeliveryGroupFactory, MenuItemFactory, OrderFactory, OrderItemFactory

SERVICE_DATE = "2030-03-05"


def _sell(item, quantity, service_date=SERVICE_DATE):
    group = DeliveryGroupFactory(service_date=datetime.date.fromisoformat(service_date))
    return OrderItemFactory(order=group.order, delivery_group=group, menu_item=item, quantity=quantity)


def test_remaining_for_is_floored_and_unlimited_without_capacity():
    assert remaining_for(None, 40) is None
    assert remaining_for(5, 2) == 3
    assert remaining_for(5, 9) == 0


@pytest.mark.django_db
def test_capacity_with_no_orders_reports_full_capacity():
    item = MenuItemFactory(capacity_per_day=5)

    first = compute_item_remaining([item], SERVICE_DATE)
    second = compute_item_remaining([item], SERVICE_DATE)

    assert first == {item.id: 5}
    assert second == first


@pytest.mark.django_db
def test_orders_for_the_date_reduce_remaining():
    item = MenuItemFactory(capacity_per_day=5)
    other = MenuItemFactory(capacity_per_day=None)
    _sell(item, 2)
    _sell(item, 1)
    _sell(item, 4, service_date="2030-03-06")
    _sell(other, 7)

    remaining = compute_item_remaining([item, other], SERVICE_DATE)

    assert remaining[item.id] == 2
    assert remaining[other.id] is None


@pytest.mark.django_db
def test_sold_out_item_reports_zero_not_negative():
    item = MenuItemFactory(capacity_per_day=2)
    _sell(item, 3)

    assert compute_item_remaining([item], SERVICE_DATE) == {item.id: 0}


@pytest.mark.django_db
def test_items_without_delivery_group_are_not_counted():
    item = MenuItemFactory(capacity_per_day=5)
    OrderItemFactory(order=OrderFactory(delivery_date=datetime.date(2030, 3, 5)), menu_item=item, quantity=3)

    assert used_quantities(SERVICE_DATE) == {}
    assert compute_item_remaining([item], SERVICE_DATE) == {item.id: 5}


@pytest.mark.django_db
def test_find_capacity_conflicts_sums_lines_per_item_and_date():
    item = MenuItemFactory(capacity_per_day=4)
    unlimited = MenuItemFactory(capacity_per_day=None)
    _sell(item, 2)

    conflicts = find_capacity_conflicts(
        [
            (item.id, SERVICE_DATE, 1),
            (item.id, SERVICE_DATE, 2),
            (item.id, "2030-03-06", 4),
            (unlimited.id, SERVICE_DATE, 99),
        ]
    )

    assert conflicts == [
        {
            "menu_item_id": item.id,
            "name": item.name,
            "service_date": SERVICE_DATE,
            "requested": 3,
            "remaining": 2,
        }
    ]
