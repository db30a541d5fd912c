"""Staff authorization gate.

Identity verification is delegated to the authentication backends
(SimpleJWT for local users, Auth0 for the identity provider).  This module
only answers the question the order engine cares about: *is this caller on
the staff allowlist?*  Views hold the gate as an injectable attribute, so
tests can swap in a fake without touching settings.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol

import structlog
from django.conf import settings

from modules.core.exceptions import NotAuthorized

logger = structlog.get_logger(__name__)


class AuthorizationGate(Protocol):
    """Capability consulted per request to derive the privileged-caller flag."""

    def caller_email(self, user: Any) -> Optional[str]: ...

    def is_privileged(self, user: Any) -> bool: ...


def _normalize(email: str) -> str:
    return email.strip().lower()


class AllowlistAuthorizationGate:
    """Grants privilege to authenticated callers whose e-mail is allowlisted.

    When no explicit allowlist is given, ``settings.ADMIN_EMAILS`` is read on
    every call so a settings override takes effect immediately.
    """

    def __init__(self, allowlist: Optional[Iterable[str]] = None) -> None:
        self._allowlist = (
            None if allowlist is None else {_normalize(e) for e in allowlist if e.strip()}
        )

    @property
    def allowlist(self) -> set[str]:
        if self._allowlist is not None:
            return self._allowlist
        return {_normalize(e) for e in getattr(settings, "ADMIN_EMAILS", []) if e.strip()}

    def caller_email(self, user: Any) -> Optional[str]:
        """Return the lower-cased e-mail of an authenticated caller, if any."""
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        email = getattr(user, "email", "") or ""
        return _normalize(email) or None

    def is_privileged(self, user: Any) -> bool:
        email = self.caller_email(user)
        if email is None:
            return False
        privileged = email in self.allowlist
        if not privileged:
            logger.info("authorization.not_allowlisted", email=email)
        return privileged


default_gate = AllowlistAuthorizationGate()


def require_privileged(privileged: bool) -> None:
    """Raise ``NotAuthorized`` before any business logic when not privileged."""
    if not privileged:
        raise NotAuthorized("Not authorized.")
