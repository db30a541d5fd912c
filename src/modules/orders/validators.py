"""Box composition and delivery-date rules.

Pure functions shared by the public pre-check (``OrderService.quote``) and
the acceptance path (``create_order`` / ``update_quantities``).  Rule
precedence is part of the contract: when several rules fail, the first one
in the order below is the one reported.

Quantities
    1. at least ``MIN_ORDER_UNITS`` donuts in total
    2. no flavor with exactly one donut (checked slot by slot)

Delivery date
    1. well-formed ``YYYY-MM-DD`` calendar date
    2. not the weekly closure day            (staff may bypass)
    3. not inside an enabled blackout range  (nobody may bypass)
    4. strictly after the operational day    (staff may bypass)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Mapping, NamedTuple, Optional

from django.utils import timezone

from modules.orders.constants import (
    CLOSURE_WEEKDAY,
    FLAVOR_SLOTS,
    MIN_ORDER_UNITS,
    MIN_UNITS_PER_FLAVOR,
)
from modules.orders.exceptions import (
    DeliveryDateUnavailable,
    InvalidDeliveryDate,
    QuantityRuleViolation,
)
from modules.orders.pricing import total_units
from modules.storeconfig.dtos import BlackoutConfiguration
from shared.domain.dates import parse_iso_date

# ---------------------------------------------------------------------------
# Quantities
# ---------------------------------------------------------------------------


class RuleViolation(NamedTuple):
    rule: str
    message: str
    slot: Optional[str] = None


def quantity_violations(quantities: Mapping[str, int]) -> List[RuleViolation]:
    """Return every broken composition rule, in precedence order."""
    violations: List[RuleViolation] = []

    if total_units(quantities) < MIN_ORDER_UNITS:
        violations.append(
            RuleViolation(
                "minimum_order",
                f"The minimum order is {MIN_ORDER_UNITS} donuts.",
            )
        )

    for slot in FLAVOR_SLOTS:
        count = quantities.get(slot, 0)
        if 0 < count < MIN_UNITS_PER_FLAVOR:
            violations.append(
                RuleViolation(
                    "single_unit",
                    f"Single donuts are not allowed ({slot}); "
                    f"choose at least {MIN_UNITS_PER_FLAVOR} per flavor.",
                    slot,
                )
            )
    return violations


def validate_quantities(quantities: Mapping[str, int]) -> None:
    """Raise ``QuantityRuleViolation`` naming the first broken rule."""
    violations = quantity_violations(quantities)
    if violations:
        raise QuantityRuleViolation(violations)


# ---------------------------------------------------------------------------
# Delivery date
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DateOverrides:
    """Staff bypasses for the throughput rules.  Blackouts are never bypassed."""

    allow_closure_day: bool = False
    allow_past_dates: bool = False

    @classmethod
    def privileged(cls) -> DateOverrides:
        return cls(allow_closure_day=True, allow_past_dates=True)


NO_OVERRIDES = DateOverrides()

CLOSURE_DAY_MESSAGE = "We do not take orders for Sundays."
LEAD_TIME_MESSAGE = "Orders must be placed at least one day in advance."
BLACKOUT_FALLBACK_MESSAGE = "We are not taking orders for that date."


def validate_delivery_date(
    candidate: object,
    blackout: BlackoutConfiguration,
    *,
    privileged: bool = False,
    overrides: Optional[DateOverrides] = None,
    today: Optional[date] = None,
) -> date:
    """Return the delivery date if acceptable, else raise.

    ``privileged`` alone bypasses both throughput rules.  When ``overrides``
    is given it decides which of them are bypassed instead.  ``today``
    defaults to the local operational day (``settings.TIME_ZONE``).

    Raises:
        InvalidDeliveryDate: the candidate is not a calendar date.
        DeliveryDateUnavailable: a closure-day, blackout or lead-time rule fails.
    """
    try:
        day = parse_iso_date(candidate)
    except ValueError as exc:
        raise InvalidDeliveryDate(f"Invalid delivery date: {exc}") from exc

    if overrides is None:
        overrides = DateOverrides.privileged() if privileged else NO_OVERRIDES

    if not overrides.allow_closure_day and day.weekday() == CLOSURE_WEEKDAY:
        raise DeliveryDateUnavailable(CLOSURE_DAY_MESSAGE, rule="closure_day")

    if blackout.blocks(day):
        raise DeliveryDateUnavailable(
            blackout.message or BLACKOUT_FALLBACK_MESSAGE, rule="blackout"
        )

    if today is None:
        today = timezone.localdate()
    if not overrides.allow_past_dates and day <= today:
        raise DeliveryDateUnavailable(LEAD_TIME_MESSAGE, rule="lead_time")

    return day
