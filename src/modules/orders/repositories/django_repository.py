"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.

Concurrency control:
- quantity edits lock the row with ``select_for_update()`` for the whole
  read-validate-write cycle;
- status toggles use a conditional ``UPDATE ... WHERE status = <expected>``
  so a stale read can never be written back.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from modules.core.models import OutboxEvent
from modules.orders.constants import FLAVOR_SLOTS
from modules.orders.exceptions import InvalidOrderQuery
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.interfaces import IOrderRepository
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)

STATUS_FIELDS = frozenset({"payment_status", "fulfillment_status"})
LIST_ORDERING = ("-delivery_date", "created_at", "id")


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any], events: Sequence[DomainEvent] = ()) -> Order:
        """Create an order and its outbox rows in one transaction.

        ``data`` keys are ``Order`` field names; quantities come as a
        ``quantities`` dict keyed by flavor slot.
        """
        fields = dict(data)
        quantities = fields.pop("quantities")
        order = Order(**fields)
        order.set_quantities(quantities)
        order.save()

        for event in events:
            OutboxEvent.objects.create(
                event_type=event.event_name,
                aggregate_id=str(order.id),
                payload=event.to_payload(),
                topic=event.topic,
            )

        logger.info("order.persisted", order_id=str(order.id), event_count=len(events))
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Return the order, or ``None`` for non-existent or malformed IDs."""
        try:
            return Order.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders through ``OrderFilter``, in a stable order.

        Raises:
            InvalidOrderQuery: the filters do not validate.
        """
        filterset = OrderFilter(data=filters or {}, queryset=Order.objects.all())
        if not filterset.is_valid():
            detail = "; ".join(
                f"{field}: {' '.join(messages)}" for field, messages in filterset.errors.items()
            )
            raise InvalidOrderQuery(detail)
        return list(filterset.qs.order_by(*LIST_ORDERING))

    def get_status(self, id: str, field: str) -> Optional[str]:
        _check_status_field(field)
        try:
            return Order.objects.filter(id=id).values_list(field, flat=True).first()
        except (ValueError, ValidationError):
            return None

    # ------------------------------------------------------------------
    # Guarded writes
    # ------------------------------------------------------------------

    def compare_and_set_status(
        self, id: UUID | str, field: str, expected: str, new: str
    ) -> bool:
        _check_status_field(field)
        updated = Order.objects.filter(id=id, **{field: expected}).update(
            **{field: new, "updated_at": timezone.now()}
        )
        return updated == 1

    def save_quantities(self, order: Order) -> Order:
        order.save(update_fields=[*FLAVOR_SLOTS, "total_units", "price"])
        return order

    def delete(self, id: str) -> bool:
        """Hard-delete an order by ID."""
        try:
            deleted, _ = Order.objects.filter(id=id).delete()
        except (ValueError, ValidationError):
            return False
        return deleted > 0


def _check_status_field(field: str) -> None:
    if field not in STATUS_FIELDS:
        raise ValueError(f"Unknown status field: {field}")
