from decimal import Decimal

from utils.pricing import haversine_miles, resolve_delivery_fee, sales_tax_cents

TIERS = [{"to_miles": 10, "fee_cents": 900}, {"to_miles": 5, "fee_cents": 500}]


def test_fee_uses_first_covering_tier():
    assert resolve_delivery_fee(4.2, TIERS, 10) == 500
    assert resolve_delivery_fee(5, TIERS, 10) == 500
    assert resolve_delivery_fee(7.5, TIERS, 10) == 900


def test_fee_is_none_outside_radius_or_tiers():
    assert resolve_delivery_fee(12, TIERS, 10) is None
    assert resolve_delivery_fee(9, TIERS, 8) is None
    assert resolve_delivery_fee(11, TIERS, None) is None
    assert resolve_delivery_fee(None, TIERS, 10) is None
    assert resolve_delivery_fee(1, [], 10) is None


def test_fee_accepts_camel_case_tiers():
    assert resolve_delivery_fee(3, [{"toMiles": 4, "feeCents": 350}]) == 350


def test_sales_tax_rounds_half_up():
    assert sales_tax_cents(1000) == 66  # 66.25
    assert sales_tax_cents(200, rate=Decimal("0.0025")) == 1  # 0.5
    assert sales_tax_cents(0) == 0


def test_haversine_zero_and_known_distance():
    assert haversine_miles(40.3573, -74.6672, 40.3573, -74.6672) == 0
    # Princeton to Trenton is a little over ten miles
    miles = haversine_miles(40.3573, -74.6672, 40.2206, -74.7597)
    assert 10 < miles < 11.5
