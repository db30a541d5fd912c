"""Order pricing.

``calculate_price`` is the only place a price is decided.  The public
quote endpoint and the acceptance path both call it; a price sent by a
client is never read.

Policy, first match wins:

1. The partner outlet pays a flat per-unit rate, whatever the channel.
2. Any other retail outlet pays the wholesale per-unit rate.
3. Individual orders use the bundle table, falling back to the
   default per-unit rate for totals outside it.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Mapping, NamedTuple, Optional

from modules.orders.constants import (
    INDIVIDUAL_BUNDLE_PRICES,
    INDIVIDUAL_UNIT_PRICE,
    PARTNER_OUTLET,
    PARTNER_UNIT_PRICE,
    WHOLESALE_UNIT_PRICE,
    Channel,
)


class PriceQuote(NamedTuple):
    total_units: int
    price: Decimal


def total_units(quantities: Mapping[str, int]) -> int:
    return sum(quantities.values())


def calculate_price(
    channel: str,
    sales_outlet: Optional[str],
    quantities: Mapping[str, int],
) -> PriceQuote:
    units = total_units(quantities)

    if sales_outlet == PARTNER_OUTLET:
        return PriceQuote(units, units * PARTNER_UNIT_PRICE)
    if channel == Channel.RETAIL_OUTLET:
        return PriceQuote(units, units * WHOLESALE_UNIT_PRICE)

    bundle = INDIVIDUAL_BUNDLE_PRICES.get(units)
    if bundle is not None:
        return PriceQuote(units, bundle)
    return PriceQuote(units, units * INDIVIDUAL_UNIT_PRICE)
