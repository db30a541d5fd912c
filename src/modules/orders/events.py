"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from shared.domain.events import DomainEvent

CONFIRMATION_TEMPLATE = "orderConfirmation"


@dataclass(frozen=True, kw_only=True)
class OrderSubmitted(DomainEvent):
    """Raised when an order is accepted.

    Carries everything the external mailer needs for the confirmation
    e-mail, so it never has to read the order table.
    """

    topic = "orders"

    recipient: str
    template: str = CONFIRMATION_TEMPLATE
    order: Dict[str, Any] = field(default_factory=dict)
    items: List[Dict[str, Any]] = field(default_factory=list)
