"""Order domain exceptions.

Raised by the rule functions and the Service Layer.  The API layer
(Views) catches these and translates them into HTTP responses.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


class OrderNotFound(Exception):
    """The requested order does not exist."""


class InvalidDeliveryDate(Exception):
    """The delivery date is not a well-formed ``YYYY-MM-DD`` calendar date."""


class DeliveryDateUnavailable(Exception):
    """The delivery date breaks an availability rule.

    ``rule`` is one of ``closure_day``, ``blackout`` or ``lead_time``.
    """

    def __init__(self, message: str, rule: str) -> None:
        super().__init__(message)
        self.rule = rule


class QuantityRuleViolation(Exception):
    """The quantities break the box composition rules.

    The message is the first violation; ``violations`` holds all of them
    (``RuleViolation`` records) in the order the rules are checked.
    """

    def __init__(self, violations: Sequence[Any]) -> None:
        super().__init__(violations[0].message)
        self.violations = list(violations)

    @property
    def rule(self) -> str:
        return self.violations[0].rule

    @property
    def slot(self) -> Optional[str]:
        return self.violations[0].slot


class InvalidOrderQuery(Exception):
    """The order listing filters are malformed."""


class ConcurrentUpdateConflict(Exception):
    """A status toggle kept losing the compare-and-swap race."""
