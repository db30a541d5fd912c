"""Django ORM implementation of the store configuration repository."""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from modules.storeconfig.constants import SINGLETON_KEY
from modules.storeconfig.models import StoreConfiguration
from modules.storeconfig.repositories.interfaces import IStoreConfigRepository

logger = structlog.get_logger(__name__)


class StoreConfigDjangoRepository(IStoreConfigRepository):
    """Concrete repository backed by the ``store_configuration`` table."""

    def get(self) -> Optional[StoreConfiguration]:
        return StoreConfiguration.objects.filter(key=SINGLETON_KEY).first()

    def get_for_update(self) -> StoreConfiguration:
        entity, created = StoreConfiguration.objects.select_for_update().get_or_create(
            key=SINGLETON_KEY
        )
        if created:
            logger.info("config.initialized", config_id=str(entity.id))
        return entity

    def save(self, entity: StoreConfiguration, fields: Sequence[str]) -> StoreConfiguration:
        entity.save(update_fields=list(fields))
        return entity
