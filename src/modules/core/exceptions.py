"""Shared error types and the standardized API error format.

Every error body returned by the API has the same shape::

    {
        "type": "client_error",
        "errors": [{"code": "not_found", "detail": "Order not found.", "attr": null}]
    }

DRF's own exceptions (authentication, permission, parsing, throttling) are
rendered by ``drf_standardized_errors`` (``EXCEPTION_HANDLER`` in
settings).  Domain exceptions caught in views are rendered with
``problem_response`` and pydantic DTO failures with
``validation_error_response``, both in the same shape.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from drf_standardized_errors.types import ErrorType
from rest_framework import status
from rest_framework.response import Response


class NotAuthorized(Exception):
    """The caller is not on the staff allowlist for a privileged operation."""


def _error_type(status_code: int) -> str:
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return ErrorType.SERVER_ERROR.value
    return ErrorType.CLIENT_ERROR.value


def problem_response(
    status_code: int,
    code: str,
    detail: str,
    attr: Optional[str] = None,
    **extra: Any,
) -> Response:
    """Build a single-error response in the standard format."""
    body: Dict[str, Any] = {
        "type": _error_type(status_code),
        "errors": [{"code": code, "detail": detail, "attr": attr}],
    }
    body.update(extra)
    return Response(body, status=status_code)


def _pydantic_attr(loc: Any) -> Optional[str]:
    parts = [str(part) for part in loc]
    return ".".join(parts) or None


def validation_error_response(exc: Any) -> Response:
    """Render a pydantic ``ValidationError`` as a 400 in the standard format."""
    errors = [
        {
            "code": "invalid",
            "detail": str(err["msg"]).removeprefix("Value error, "),
            "attr": _pydantic_attr(err.get("loc", ())),
        }
        for err in exc.errors()
    ]
    return Response(
        {"type": ErrorType.VALIDATION_ERROR.value, "errors": errors},
        status=status.HTTP_400_BAD_REQUEST,
    )
