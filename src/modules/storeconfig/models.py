"""Store configuration model.

A single row (``key="app"``) holds the mutable operational settings: the
label of the rotating seasonal flavor and the blackout calendar.  Blackout
ranges are stored as ``[{"start": "YYYY-MM-DD", "end": "YYYY-MM-DD"}]``
and only ever written after every range has been validated.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel
from modules.storeconfig.constants import (
    DEFAULT_BLACKOUT_MESSAGE,
    DEFAULT_SEASONAL_LABEL,
    SEASONAL_LABEL_MAX_LENGTH,
    SINGLETON_KEY,
)


class StoreConfiguration(BaseModel):
    key: models.CharField = models.CharField(
        max_length=20, unique=True, default=SINGLETON_KEY, editable=False
    )
    seasonal_label: models.CharField = models.CharField(
        max_length=SEASONAL_LABEL_MAX_LENGTH, default=DEFAULT_SEASONAL_LABEL
    )
    blackout_enabled: models.BooleanField = models.BooleanField(default=False)
    blackout_message: models.TextField = models.TextField(
        blank=True, default=DEFAULT_BLACKOUT_MESSAGE
    )
    blackout_ranges: models.JSONField = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = "store_configuration"

    def __str__(self) -> str:
        state = "on" if self.blackout_enabled else "off"
        return f"{self.seasonal_label} (blackout {state}, {len(self.blackout_ranges)} ranges)"
