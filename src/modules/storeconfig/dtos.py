"""Store configuration DTOs.

Framework-agnostic Pydantic v2 models, immutable (``frozen=True``).

- ``BlackoutRange``: inclusive ``start``..``end`` calendar range.
- ``BlackoutConfiguration``: enabled flag, notice message and ranges.
- ``StoreConfigDTO``: the full, always-defaulted configuration.
- ``ConfigPatchDTO``: partial admin update; ``None`` means "leave as is".
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.storeconfig.constants import (
    DEFAULT_BLACKOUT_MESSAGE,
    DEFAULT_SEASONAL_LABEL,
)
from shared.domain.dates import parse_iso_date

if TYPE_CHECKING:
    from modules.storeconfig.models import StoreConfiguration


class BlackoutRange(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    start: date
    end: date

    @field_validator("start", "end", mode="before")
    @classmethod
    def must_be_iso_date(cls, v: Any) -> date:
        try:
            return parse_iso_date(v)
        except ValueError:
            raise ValueError("Invalid date range. Use the YYYY-MM-DD format.") from None

    @model_validator(mode="after")
    def start_not_after_end(self) -> BlackoutRange:
        if self.start > self.end:
            raise ValueError("A date range cannot end before it starts.")
        return self

    def covers(self, day: date) -> bool:
        return self.start <= day <= self.end


class BlackoutConfiguration(BaseModel):
    """Operator-defined dates on which no orders are accepted."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = False
    message: str = DEFAULT_BLACKOUT_MESSAGE
    ranges: Tuple[BlackoutRange, ...] = ()

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    def blocks(self, day: date) -> bool:
        return self.enabled and any(r.covers(day) for r in self.ranges)


class StoreConfigDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    seasonal_label: str = DEFAULT_SEASONAL_LABEL
    blackout: BlackoutConfiguration = BlackoutConfiguration()

    @classmethod
    def from_entity(cls, entity: Optional[StoreConfiguration]) -> StoreConfigDTO:
        if entity is None:
            return cls()
        return cls(
            seasonal_label=entity.seasonal_label or DEFAULT_SEASONAL_LABEL,
            blackout=BlackoutConfiguration(
                enabled=entity.blackout_enabled,
                message=entity.blackout_message,
                ranges=tuple(entity.blackout_ranges or ()),
            ),
        )


class ConfigPatchDTO(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    seasonal_label: Optional[str] = None
    blackout: Optional[BlackoutConfiguration] = None

    @property
    def is_empty(self) -> bool:
        return self.seasonal_label is None and self.blackout is None
