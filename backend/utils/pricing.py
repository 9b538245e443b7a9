# backend/utils/pricing.py
from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

DEFAULT_SALES_TAX_RATE = Decimal("0.06625")
EARTH_RADIUS_MILES = 3958.8


def haversine_miles(lat1, lng1, lat2, lng2) -> float:
    """Great-circle distance between two coordinates, rounded to 2 decimals."""
    phi1, phi2 = math.radians(float(lat1)), math.radians(float(lat2))
    dphi = phi2 - phi1
    dlmb = math.radians(float(lng2) - float(lng1))
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return round(2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(a)), 2)


def _tier_value(tier, *names):
    for name in names:
        if isinstance(tier, dict) and tier.get(name) is not None:
            return tier[name]
    return None


def resolve_delivery_fee(
    miles: Optional[float],
    fee_tiers: Iterable[dict],
    max_radius_miles: Optional[float] = None,
) -> Optional[int]:
    """
    Fee in cents for a delivery distance, or None when the address can't be served.

    Tiers are ``{"to_miles": 5, "fee_cents": 500}``; the first tier (by distance)
    covering ``miles`` wins. Anything past ``max_radius_miles`` is out of range
    even when a tier would cover it.
    """
    if miles is None:
        return None
    miles = float(miles)
    if max_radius_miles is not None and miles > float(max_radius_miles):
        return None

    tiers = []
    for tier in fee_tiers or []:
        to_miles = _tier_value(tier, "to_miles", "toMiles")
        if to_miles is None:
            continue
        fee = _tier_value(tier, "fee_cents", "feeCents") or 0
        tiers.append((float(to_miles), int(fee)))
    tiers.sort(key=lambda t: t[0])

    for to_miles, fee_cents in tiers:
        if miles <= to_miles:
            return fee_cents
    return None


def sales_tax_cents(taxable_cents: int, rate=DEFAULT_SALES_TAX_RATE) -> int:
    amount = Decimal(int(taxable_cents)) * Decimal(str(rate))
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
