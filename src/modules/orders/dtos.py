"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  They are the
contract between the API views and ``OrderService`` and are immutable
(``frozen=True``).  Anything structurally wrong (wrong type, unknown flavor
slot, missing channel-specific contact field) is rejected here, before any
business rule runs.

- ``OrderQuantities``: the closed set of flavor slots, each between 0 and
  ``MAX_UNITS_PER_FLAVOR``.
- ``QuantitiesPatchDTO``: staff edit; absent slots keep their value.
- ``DateOverridesDTO``: staff-only bypasses requested on submission.
- ``SubmitOrderDTO``: public order submission.
- ``QuoteRequestDTO``: advisory pre-check from the order wizard.
- ``StatusToggleDTO``: outcome of a payment / fulfillment toggle.
- ``QuoteResultDTO``: total, price and every rule the pre-check found broken.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Annotated, Any, Dict, Literal, Mapping, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.orders.constants import MAX_UNITS_PER_FLAVOR, PICKUP_LOCATIONS, Channel
from modules.orders.validators import DateOverrides

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_DIGITS = 10

ChannelValue = Literal["individual", "retail-outlet"]
SlotCount = Annotated[int, Field(ge=0, le=MAX_UNITS_PER_FLAVOR, strict=True)]


class OrderQuantities(BaseModel):
    """Donut count per flavor slot."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cinnamon_sugar: SlotCount = 0
    cold_brew: SlotCount = 0
    seasonal: SlotCount = 0
    cheesecake: SlotCount = 0
    chocolate: SlotCount = 0
    oreo: SlotCount = 0
    carrot: SlotCount = 0

    def as_dict(self) -> Dict[str, int]:
        return self.model_dump()

    @property
    def total(self) -> int:
        return sum(self.as_dict().values())


class QuantitiesPatchDTO(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    cinnamon_sugar: Optional[SlotCount] = None
    cold_brew: Optional[SlotCount] = None
    seasonal: Optional[SlotCount] = None
    cheesecake: Optional[SlotCount] = None
    chocolate: Optional[SlotCount] = None
    oreo: Optional[SlotCount] = None
    carrot: Optional[SlotCount] = None

    def merged_with(self, current: Mapping[str, int]) -> Dict[str, int]:
        """Overlay the provided slots on ``current``."""
        changes = self.model_dump(exclude_none=True)
        return {slot: changes.get(slot, count) for slot, count in current.items()}


class DateOverridesDTO(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    allow_closure_day: bool = False
    allow_past_dates: bool = False

    def to_rule(self) -> DateOverrides:
        return DateOverrides(
            allow_closure_day=self.allow_closure_day,
            allow_past_dates=self.allow_past_dates,
        )


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class SubmitOrderDTO(BaseModel):
    """Immutable DTO for order submission.

    Validates:
    - ``name`` and ``email`` are always required; ``email`` must look valid.
    - individual orders need a 10-digit ``phone`` and a known
      ``pickup_location`` and carry no ``sales_outlet``.
    - retail-outlet orders need a ``sales_outlet`` and carry no
      ``pickup_location``.

    Any client-computed total or price is not part of the contract.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    channel: ChannelValue
    name: str = Field(min_length=1, max_length=150)
    email: str = Field(max_length=254)
    phone: Optional[str] = None
    pickup_location: Optional[str] = None
    sales_outlet: Optional[str] = Field(default=None, max_length=150)
    delivery_date: str
    quantities: OrderQuantities
    user_agent: Optional[str] = Field(default=None, max_length=512)
    overrides: Optional[DateOverridesDTO] = None

    @field_validator("name", "email", "delivery_date", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("phone", "pickup_location", "sales_outlet", mode="before")
    @classmethod
    def blank_is_missing(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("email")
    @classmethod
    def email_must_be_valid(cls, v: str) -> str:
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Enter a valid e-mail address.")
        return v

    @field_validator("phone")
    @classmethod
    def phone_digits_only(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        digits = re.sub(r"\D", "", v)
        if len(digits) != PHONE_DIGITS:
            raise ValueError(f"Phone must have {PHONE_DIGITS} digits.")
        return digits

    @model_validator(mode="after")
    def fulfillment_matches_channel(self) -> SubmitOrderDTO:
        if self.channel == Channel.INDIVIDUAL:
            if self.phone is None:
                raise ValueError("Phone is required for individual orders.")
            if self.pickup_location not in PICKUP_LOCATIONS:
                raise ValueError(
                    "Pickup location must be one of: " + ", ".join(PICKUP_LOCATIONS) + "."
                )
            if self.sales_outlet is not None:
                raise ValueError("Sales outlet is only allowed for retail-outlet orders.")
        else:
            if self.sales_outlet is None:
                raise ValueError("Sales outlet is required for retail-outlet orders.")
            if self.pickup_location is not None:
                raise ValueError("Pickup location is only allowed for individual orders.")
        return self


class QuoteRequestDTO(BaseModel):
    """Advisory pre-check input: same rules, nothing persisted."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    channel: ChannelValue
    sales_outlet: Optional[str] = None
    quantities: OrderQuantities
    delivery_date: Optional[str] = None

    @field_validator("sales_outlet", "delivery_date", mode="before")
    @classmethod
    def blank_is_missing(cls, v: Any) -> Any:
        return _blank_to_none(v)


class StatusToggleDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: UUID
    status_field: str
    previous: str
    current: str


class QuoteIssueDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    detail: str
    attr: Optional[str] = None


class QuoteResultDTO(BaseModel):
    """Pre-check outcome.  ``accepted`` is advisory only."""

    model_config = ConfigDict(frozen=True)

    total_units: int
    price: Decimal
    issues: Tuple[QuoteIssueDTO, ...] = ()

    @property
    def accepted(self) -> bool:
        return not self.issues
