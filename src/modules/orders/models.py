"""Order model.

Business rules implemented at the database level as a last line of
defence (the service layer rejects these cases first):
- Every order holds at least 6 donuts (``total_units >= 6``).
- No flavor slot holds exactly one donut.
- Exactly one fulfillment selection is set, matching the channel.

``channel``, ``pickup_location`` and ``sales_outlet`` never change after
creation.  ``total_units`` and ``price`` are always written together with
the quantities they were derived from.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict

from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import (
    FLAVOR_SLOTS,
    MIN_ORDER_UNITS,
    Channel,
    FulfillmentStatus,
    PaymentStatus,
)


def _no_single_unit_constraints() -> list[models.CheckConstraint]:
    return [
        models.CheckConstraint(
            condition=~models.Q(**{slot: 1}),
            name=f"orders_{slot}_not_single",
        )
        for slot in FLAVOR_SLOTS
    ]


class Order(BaseModel):
    """Boxed donut order.

    The UUIDv7 ``id`` is assigned on creation and used for every API lookup.
    """

    channel: models.CharField = models.CharField(
        max_length=20, choices=Channel.choices, editable=False
    )

    # contact
    name: models.CharField = models.CharField(max_length=150)
    email: models.EmailField = models.EmailField(max_length=254)
    phone: models.CharField = models.CharField(max_length=20, blank=True, default="")

    # fulfillment selection (one of the two, by channel)
    pickup_location: models.CharField = models.CharField(
        max_length=100, blank=True, default="", editable=False
    )
    sales_outlet: models.CharField = models.CharField(
        max_length=150, blank=True, default="", editable=False, db_index=True
    )

    delivery_date: models.DateField = models.DateField()

    # quantities, one column per flavor slot
    cinnamon_sugar: models.PositiveIntegerField = models.PositiveIntegerField(default=0)
    cold_brew: models.PositiveIntegerField = models.PositiveIntegerField(default=0)
    seasonal: models.PositiveIntegerField = models.PositiveIntegerField(default=0)
    cheesecake: models.PositiveIntegerField = models.PositiveIntegerField(default=0)
    chocolate: models.PositiveIntegerField = models.PositiveIntegerField(default=0)
    oreo: models.PositiveIntegerField = models.PositiveIntegerField(default=0)
    carrot: models.PositiveIntegerField = models.PositiveIntegerField(default=0)

    total_units: models.PositiveIntegerField = models.PositiveIntegerField()
    price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    payment_status: models.CharField = models.CharField(
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    fulfillment_status: models.CharField = models.CharField(
        max_length=10,
        choices=FulfillmentStatus.choices,
        default=FulfillmentStatus.RECEIVED,
    )

    user_agent: models.CharField = models.CharField(max_length=512, blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-delivery_date", "created_at", "id"]
        indexes = [
            models.Index(fields=["delivery_date"], name="orders_delivery_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_units__gte=MIN_ORDER_UNITS),
                name="orders_minimum_units",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(channel=Channel.INDIVIDUAL, sales_outlet="")
                    & ~models.Q(pickup_location="")
                )
                | (
                    models.Q(channel=Channel.RETAIL_OUTLET, pickup_location="")
                    & ~models.Q(sales_outlet="")
                ),
                name="orders_fulfillment_matches_channel",
            ),
            *_no_single_unit_constraints(),
        ]

    # ------------------------------------------------------------------
    # Quantities
    # ------------------------------------------------------------------

    @property
    def quantities(self) -> Dict[str, int]:
        return {slot: getattr(self, slot) for slot in FLAVOR_SLOTS}

    def set_quantities(self, quantities: Dict[str, int]) -> None:
        for slot in FLAVOR_SLOTS:
            setattr(self, slot, quantities.get(slot, 0))

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    @property
    def fulfillment_point(self) -> str:
        return self.sales_outlet or self.pickup_location

    def __str__(self) -> str:
        return (
            f"{self.name} · {self.total_units} donuts · {self.delivery_date} "
            f"({self.payment_status})"
        )
