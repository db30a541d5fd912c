"""Store configuration repository interface.

The configuration is a singleton; there is no ``list`` or ``delete``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from modules.storeconfig.models import StoreConfiguration


class IStoreConfigRepository(ABC):
    @abstractmethod
    def get(self) -> Optional[StoreConfiguration]:
        """Return the configuration row, or ``None`` if never written."""

    @abstractmethod
    def get_for_update(self) -> StoreConfiguration:
        """Return the row locked for a read-modify-write, creating it if needed.

        Must be called inside a transaction.
        """

    @abstractmethod
    def save(self, entity: StoreConfiguration, fields: Sequence[str]) -> StoreConfiguration:
        """Persist the given fields of the configuration row."""
