"""Store configuration service (ConfigService).

Owns the seasonal flavor label and the blackout calendar.  Reads are
always fully defaulted and never cached: the order engine calls
``get_blackout()`` on every validation so an admin edit applies to the very
next submission.

Writes are read-modify-write under a row lock and all-or-nothing: a patch
with one malformed range, or an empty label, leaves the stored
configuration untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import structlog
from django.db import transaction

from modules.core.authorization import require_privileged
from modules.storeconfig.constants import FALLBACK_BLACKOUT_MESSAGE, SEASONAL_LABEL_MAX_LENGTH
from modules.storeconfig.dtos import BlackoutConfiguration, ConfigPatchDTO, StoreConfigDTO
from modules.storeconfig.exceptions import InvalidConfiguration

if TYPE_CHECKING:
    from modules.storeconfig.models import StoreConfiguration
    from modules.storeconfig.repositories.interfaces import IStoreConfigRepository

logger = structlog.get_logger(__name__)


class StoreConfigService:
    def __init__(self, repository: IStoreConfigRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_config(self) -> StoreConfigDTO:
        return StoreConfigDTO.from_entity(self._repo.get())

    def get_blackout(self) -> BlackoutConfiguration:
        return self.get_config().blackout

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def update_seasonal_label(self, label: str, *, privileged: bool) -> StoreConfigDTO:
        return self.update_config(ConfigPatchDTO(seasonal_label=label), privileged=privileged)

    def update_blackout(
        self, blackout: BlackoutConfiguration, *, privileged: bool
    ) -> StoreConfigDTO:
        return self.update_config(ConfigPatchDTO(blackout=blackout), privileged=privileged)

    @transaction.atomic
    def update_config(self, patch: ConfigPatchDTO, *, privileged: bool) -> StoreConfigDTO:
        """Merge a partial patch into the stored configuration.

        Only the fields present in ``patch`` are written.  The blackout
        block is replaced as a whole; its ranges were already validated by
        ``BlackoutRange`` before this call.

        Raises:
            NotAuthorized: caller is not privileged.
            InvalidConfiguration: empty patch, or empty/too long label.
        """
        require_privileged(privileged)
        if patch.is_empty:
            raise InvalidConfiguration("No changes to save.")

        label = None
        if patch.seasonal_label is not None:
            label = patch.seasonal_label.strip()
            if not label:
                raise InvalidConfiguration("Seasonal label cannot be empty.")
            if len(label) > SEASONAL_LABEL_MAX_LENGTH:
                raise InvalidConfiguration(
                    f"Seasonal label cannot exceed {SEASONAL_LABEL_MAX_LENGTH} characters."
                )

        entity = self._repo.get_for_update()
        fields: List[str] = []

        if label is not None:
            entity.seasonal_label = label
            fields.append("seasonal_label")

        if patch.blackout is not None:
            _apply_blackout(entity, patch.blackout)
            fields.extend(["blackout_enabled", "blackout_message", "blackout_ranges"])

        self._repo.save(entity, fields)
        logger.info(
            "config.updated",
            fields=fields,
            blackout_enabled=entity.blackout_enabled,
            range_count=len(entity.blackout_ranges),
        )
        return StoreConfigDTO.from_entity(entity)


def _apply_blackout(entity: StoreConfiguration, blackout: BlackoutConfiguration) -> None:
    entity.blackout_enabled = blackout.enabled
    entity.blackout_message = blackout.message or FALLBACK_BLACKOUT_MESSAGE
    entity.blackout_ranges = [
        {"start": r.start.isoformat(), "end": r.end.isoformat()} for r in blackout.ranges
    ]
