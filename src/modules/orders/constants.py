"""Order domain constants.

Channel and status choices, the closed set of flavor slots shared by the
public pre-check and the acceptance path, and the fixed pricing table.
"""

import calendar
from decimal import Decimal

from django.db import models


class Channel(models.TextChoices):
    INDIVIDUAL = "individual", "Individual"
    RETAIL_OUTLET = "retail-outlet", "Retail outlet"


class PaymentStatus(models.TextChoices):
    UNPAID = "unpaid", "Unpaid"
    PAID = "paid", "Paid"


class FulfillmentStatus(models.TextChoices):
    RECEIVED = "received", "Received"
    DELIVERED = "delivered", "Delivered"


# Slot key -> display label.  "seasonal" is relabeled by the store config.
FLAVOR_SLOTS: dict[str, str] = {
    "cinnamon_sugar": "Azúcar Canela",
    "cold_brew": "Café Cold Brew",
    "seasonal": "Sabor de temporada",
    "cheesecake": "Cheesecake",
    "chocolate": "Chocolate",
    "oreo": "Oreo",
    "carrot": "Zanahoria",
}

SEASONAL_SLOT = "seasonal"

PICKUP_LOCATIONS: tuple[str, ...] = ("Tipi'Oka Lomas", "Vegandra")

# ---------------------------------------------------------------------------
# Quantity rules
# ---------------------------------------------------------------------------

MIN_ORDER_UNITS = 6
MIN_UNITS_PER_FLAVOR = 2
MAX_UNITS_PER_FLAVOR = 1000

# ---------------------------------------------------------------------------
# Pricing (MXN)
# ---------------------------------------------------------------------------

PARTNER_OUTLET = "Karen Donas"
PARTNER_UNIT_PRICE = Decimal("15")
WHOLESALE_UNIT_PRICE = Decimal("20")
INDIVIDUAL_UNIT_PRICE = Decimal("25")
INDIVIDUAL_BUNDLE_PRICES: dict[int, Decimal] = {
    6: Decimal("160"),
    7: Decimal("190"),
    8: Decimal("220"),
    9: Decimal("250"),
    10: Decimal("280"),
    11: Decimal("310"),
}

# ---------------------------------------------------------------------------
# Delivery dates
# ---------------------------------------------------------------------------

CLOSURE_WEEKDAY = calendar.SUNDAY

# compare-and-swap attempts for status toggles before reporting a conflict
STATUS_TOGGLE_MAX_RETRIES = 5


class ListMode(models.TextChoices):
    TODAY = "today", "Today"
    TOMORROW = "tomorrow", "Tomorrow"
    ALL = "all", "All"


ALL_OUTLETS = "ALL"
