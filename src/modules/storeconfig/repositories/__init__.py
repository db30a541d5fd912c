"""Store configuration repositories package."""

from modules.storeconfig.repositories.django_repository import StoreConfigDjangoRepository
from modules.storeconfig.repositories.interfaces import IStoreConfigRepository

__all__ = ["IStoreConfigRepository", "StoreConfigDjangoRepository"]
