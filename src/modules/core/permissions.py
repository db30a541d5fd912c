from rest_framework.permissions import BasePermission

from modules.core.authorization import default_gate


class IsAllowlistedStaff(BasePermission):
    """Allow only authenticated callers on the staff allowlist.

    DRF answers 401 for anonymous requests and 403 for authenticated
    callers that fail this check.  The check runs before the handler, so a
    denied caller never learns whether the target resource exists.
    """

    message = "Not authorized."

    def has_permission(self, request, view) -> bool:
        gate = getattr(view, "authorization_gate", None) or default_gate
        return bool(request.user and request.user.is_authenticated) and gate.is_privileged(
            request.user
        )
