"""Store configuration API views.

``PublicConfigView`` feeds the order wizard (seasonal label and blackout
notice); ``AdminConfigView`` lets staff patch either part.
"""

from __future__ import annotations

from pydantic import ValidationError
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.authorization import default_gate
from modules.core.exceptions import NotAuthorized, problem_response, validation_error_response
from modules.core.permissions import IsAllowlistedStaff
from modules.core.views import request_body
from modules.storeconfig.dtos import ConfigPatchDTO
from modules.storeconfig.exceptions import InvalidConfiguration
from modules.storeconfig.repositories.django_repository import StoreConfigDjangoRepository
from modules.storeconfig.services import StoreConfigService


class PublicConfigView(APIView):
    """GET /api/v1/config/ (always fully defaulted)."""

    permission_classes = [AllowAny]

    def get(self, request: Request) -> Response:
        service = StoreConfigService(StoreConfigDjangoRepository())
        return Response(service.get_config().model_dump(mode="json"))


class AdminConfigView(APIView):
    """PATCH /api/v1/admin/config/

    Body: ``{"seasonal_label": "...", "blackout": {"enabled", "message", "ranges"}}``,
    either key optional.  Returns the merged configuration.
    """

    permission_classes = [IsAllowlistedStaff]
    authorization_gate = default_gate

    def patch(self, request: Request) -> Response:
        try:
            patch = ConfigPatchDTO.model_validate(request_body(request))
        except ValidationError as exc:
            return validation_error_response(exc)

        service = StoreConfigService(StoreConfigDjangoRepository())
        try:
            config = service.update_config(
                patch, privileged=self.authorization_gate.is_privileged(request.user)
            )
        except InvalidConfiguration as exc:
            return problem_response(status.HTTP_400_BAD_REQUEST, "invalid", str(exc))
        except NotAuthorized as exc:
            return problem_response(status.HTTP_403_FORBIDDEN, "permission_denied", str(exc))
        return Response(config.model_dump(mode="json"))
