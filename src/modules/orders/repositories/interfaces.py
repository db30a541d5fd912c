"""Order repository interface.

Extends ``IRepository[Order]`` with the guarded mutations the order engine
needs: creation together with its outbox events, a row lock for
read-modify-write edits, and a compare-and-swap for two-state toggles.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order
    from shared.domain.events import DomainEvent


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate."""

    @abstractmethod
    def create(self, data: Dict[str, Any], events: Sequence[DomainEvent] = ()) -> Order:
        """Insert an order and append ``events`` to the outbox atomically."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (inside a transaction)."""

    @abstractmethod
    def get_status(self, id: str, field: str) -> Optional[str]:
        """Read the current value of a status column straight from storage."""

    @abstractmethod
    def compare_and_set_status(
        self, id: UUID | str, field: str, expected: str, new: str
    ) -> bool:
        """Write ``new`` only if the stored value is still ``expected``.

        Returns ``False`` when another writer changed it first.
        """

    @abstractmethod
    def save_quantities(self, order: Order) -> Order:
        """Persist quantities, ``total_units``, ``price`` and ``updated_at`` together."""
