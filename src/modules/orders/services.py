"""Order service layer (Use Cases).

Orchestrates order acceptance and the staff-only lifecycle mutations.  The
service defines the unit-of-work boundary; every rejected call leaves
storage untouched.

Rules enforced, in this order, on both the pre-check and acceptance paths:
- delivery date availability (closure day, blackout, lead time);
- box composition (minimum order, no single donuts);
- price decided server-side by ``calculate_price``.

Concurrency:
- status toggles are compare-and-swap on the single status column, retried
  against the freshly read value;
- quantity edits hold a row lock for the read-validate-write cycle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional
from uuid import UUID

import structlog
import uuid6
from django.db import transaction

from modules.core.authorization import require_privileged
from modules.orders.constants import (
    FLAVOR_SLOTS,
    SEASONAL_SLOT,
    STATUS_TOGGLE_MAX_RETRIES,
    FulfillmentStatus,
    PaymentStatus,
)
from modules.orders.dtos import QuoteIssueDTO, QuoteResultDTO, StatusToggleDTO
from modules.orders.events import OrderSubmitted
from modules.orders.exceptions import (
    ConcurrentUpdateConflict,
    DeliveryDateUnavailable,
    InvalidDeliveryDate,
    OrderNotFound,
)
from modules.orders.pricing import calculate_price
from modules.orders.validators import (
    quantity_violations,
    validate_delivery_date,
    validate_quantities,
)

if TYPE_CHECKING:
    from modules.orders.dtos import QuantitiesPatchDTO, QuoteRequestDTO, SubmitOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.storeconfig.services import StoreConfigService

logger = structlog.get_logger(__name__)

PAYMENT_FLIP = {
    PaymentStatus.UNPAID.value: PaymentStatus.PAID.value,
    PaymentStatus.PAID.value: PaymentStatus.UNPAID.value,
}
FULFILLMENT_FLIP = {
    FulfillmentStatus.RECEIVED.value: FulfillmentStatus.DELIVERED.value,
    FulfillmentStatus.DELIVERED.value: FulfillmentStatus.RECEIVED.value,
}


class OrderService:
    """Application service for Order use-cases.

    Receives the order repository and the configuration service via
    constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        config_service: StoreConfigService,
    ) -> None:
        self._order_repo = order_repository
        self._config = config_service

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def quote(self, dto: QuoteRequestDTO) -> QuoteResultDTO:
        """Advisory pre-check for the order wizard.  Never persists.

        Reports every broken rule instead of stopping at the first one; the
        first issue is the one ``create_order`` would raise.
        """
        quantities = dto.quantities.as_dict()
        issues: List[QuoteIssueDTO] = []

        if dto.delivery_date is not None:
            try:
                validate_delivery_date(dto.delivery_date, self._config.get_blackout())
            except InvalidDeliveryDate as exc:
                issues.append(
                    QuoteIssueDTO(code="invalid", detail=str(exc), attr="delivery_date")
                )
            except DeliveryDateUnavailable as exc:
                issues.append(
                    QuoteIssueDTO(code=exc.rule, detail=str(exc), attr="delivery_date")
                )

        issues.extend(
            QuoteIssueDTO(
                code=violation.rule,
                detail=violation.message,
                attr=f"quantities.{violation.slot}" if violation.slot else "quantities",
            )
            for violation in quantity_violations(quantities)
        )

        total_units, price = calculate_price(dto.channel, dto.sales_outlet, quantities)
        return QuoteResultDTO(total_units=total_units, price=price, issues=tuple(issues))

    def create_order(self, dto: SubmitOrderDTO, *, privileged: bool = False) -> Order:
        """Accept a submitted order.

        The override bundle is honoured only for privileged callers; anyone
        else gets the standard rules and the request is only logged.

        Raises:
            InvalidDeliveryDate: delivery date is not a calendar date.
            DeliveryDateUnavailable: closure day, blackout or lead time.
            QuantityRuleViolation: box composition rules.
        """
        log = logger.bind(channel=dto.channel)
        log.info("order.submission_started")

        overrides = None
        if dto.overrides is not None:
            if privileged:
                overrides = dto.overrides.to_rule()
                log.info(
                    "order.overrides_applied",
                    allow_closure_day=overrides.allow_closure_day,
                    allow_past_dates=overrides.allow_past_dates,
                )
            else:
                log.warning("order.overrides_ignored")

        config = self._config.get_config()
        delivery_date = validate_delivery_date(
            dto.delivery_date, config.blackout, overrides=overrides
        )

        quantities = dto.quantities.as_dict()
        validate_quantities(quantities)
        total_units, price = calculate_price(dto.channel, dto.sales_outlet, quantities)

        order_id = uuid6.uuid7()
        data: Dict[str, Any] = {
            "id": order_id,
            "channel": dto.channel,
            "name": dto.name,
            "email": dto.email,
            "phone": dto.phone or "",
            "pickup_location": dto.pickup_location or "",
            "sales_outlet": dto.sales_outlet or "",
            "delivery_date": delivery_date,
            "quantities": quantities,
            "total_units": total_units,
            "price": price,
            "payment_status": PaymentStatus.UNPAID,
            "fulfillment_status": FulfillmentStatus.RECEIVED,
            "user_agent": dto.user_agent or "",
        }
        event = OrderSubmitted(
            aggregate_id=order_id,
            recipient=dto.email,
            order={
                "id": order_id,
                "name": dto.name,
                "channel": dto.channel,
                "fulfillment_point": dto.sales_outlet or dto.pickup_location,
                "delivery_date": delivery_date,
                "total_units": total_units,
                "price": price,
            },
            items=_confirmation_items(quantities, config.seasonal_label),
        )

        order = self._order_repo.create(data, events=[event])
        log.info(
            "order.created",
            order_id=str(order.id),
            total_units=total_units,
            price=str(price),
            delivery_date=delivery_date.isoformat(),
        )
        return order

    # ------------------------------------------------------------------
    # Staff queries
    # ------------------------------------------------------------------

    def list_orders(
        self, filters: Optional[Dict[str, Any]] = None, *, privileged: bool
    ) -> List[Order]:
        """Raises ``NotAuthorized`` or ``InvalidOrderQuery``."""
        require_privileged(privileged)
        return self._order_repo.list(filters)

    # ------------------------------------------------------------------
    # Staff commands
    # ------------------------------------------------------------------

    def toggle_paid(self, order_id: UUID | str, *, privileged: bool) -> StatusToggleDTO:
        return self._toggle(order_id, "payment_status", PAYMENT_FLIP, privileged=privileged)

    def toggle_delivered(self, order_id: UUID | str, *, privileged: bool) -> StatusToggleDTO:
        return self._toggle(
            order_id, "fulfillment_status", FULFILLMENT_FLIP, privileged=privileged
        )

    @transaction.atomic
    def update_quantities(
        self,
        order_id: UUID | str,
        patch: QuantitiesPatchDTO,
        *,
        privileged: bool,
    ) -> Order:
        """Edit the box of an existing order and re-price it.

        Slots absent from ``patch`` keep their stored value.  The order's own
        channel and outlet decide the new price.

        Raises:
            NotAuthorized: caller is not privileged.
            OrderNotFound: order does not exist.
            QuantityRuleViolation: the merged box breaks a composition rule.
        """
        require_privileged(privileged)
        order = self._order_repo.get_for_update(str(order_id))
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")

        previous_total = order.total_units
        quantities = patch.merged_with(order.quantities)
        validate_quantities(quantities)

        order.set_quantities(quantities)
        order.total_units, order.price = calculate_price(
            order.channel, order.sales_outlet or None, quantities
        )
        self._order_repo.save_quantities(order)

        logger.info(
            "order.quantities_updated",
            order_id=str(order.id),
            previous_total=previous_total,
            total_units=order.total_units,
            price=str(order.price),
        )
        return order

    @transaction.atomic
    def delete_order(self, order_id: UUID | str, *, privileged: bool) -> None:
        require_privileged(privileged)
        if not self._order_repo.delete(str(order_id)):
            raise OrderNotFound(f"Order {order_id} not found.")
        logger.info("order.deleted", order_id=str(order_id))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _toggle(
        self,
        order_id: UUID | str,
        field: str,
        flip: Mapping[str, str],
        *,
        privileged: bool,
    ) -> StatusToggleDTO:
        """Flip a two-state status column without losing concurrent toggles.

        Each attempt reads the stored value and writes its opposite only if
        nobody changed it in between.  A lost race retries against the
        fresh value; after ``STATUS_TOGGLE_MAX_RETRIES`` lost races the call
        fails instead of writing a stale result.
        """
        require_privileged(privileged)
        log = logger.bind(order_id=str(order_id), field=field)

        for attempt in range(1, STATUS_TOGGLE_MAX_RETRIES + 1):
            current = self._order_repo.get_status(str(order_id), field)
            if current is None:
                raise OrderNotFound(f"Order {order_id} not found.")

            new = flip[current]
            if self._order_repo.compare_and_set_status(order_id, field, current, new):
                log.info("order.status_toggled", previous=current, current=new)
                return StatusToggleDTO(
                    order_id=order_id, status_field=field, previous=current, current=new
                )
            log.info("order.toggle_conflict", attempt=attempt)

        log.warning("order.toggle_exhausted", attempts=STATUS_TOGGLE_MAX_RETRIES)
        raise ConcurrentUpdateConflict(
            "The order was changed by someone else. Please retry."
        )


def _confirmation_items(
    quantities: Mapping[str, int], seasonal_label: str
) -> List[Dict[str, Any]]:
    """Non-empty slots with the labels the customer saw in the wizard."""
    return [
        {
            "slot": slot,
            "label": seasonal_label if slot == SEASONAL_SLOT else label,
            "quantity": quantities[slot],
        }
        for slot, label in FLAVOR_SLOTS.items()
        if quantities.get(slot, 0) > 0
    ]
