"""Order API views.

Exposes ``OrderService`` over HTTP using DRF ViewSets.  Request bodies are
parsed into Pydantic DTOs; domain exceptions are caught and translated into
the standard error format.  The views never swallow generic exceptions.

- ``OrderViewSet``: public submission and pre-check.
- ``AdminOrderViewSet``: staff listing and lifecycle mutations.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import ValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.authorization import default_gate
from modules.core.views import request_body
from modules.core.exceptions import NotAuthorized, problem_response, validation_error_response
from modules.core.permissions import IsAllowlistedStaff
from modules.orders.dtos import QuantitiesPatchDTO, QuoteRequestDTO, SubmitOrderDTO
from modules.orders.exceptions import (
    ConcurrentUpdateConflict,
    DeliveryDateUnavailable,
    InvalidDeliveryDate,
    InvalidOrderQuery,
    OrderNotFound,
    QuantityRuleViolation,
)
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderReceiptSerializer, OrderSerializer
from modules.orders.services import OrderService
from modules.storeconfig.repositories.django_repository import StoreConfigDjangoRepository
from modules.storeconfig.services import StoreConfigService

LIST_FILTER_PARAMS = ("mode", "month", "outlet")


def build_order_service() -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        config_service=StoreConfigService(StoreConfigDjangoRepository()),
    )


def _rule_error(exc: Exception) -> Response:
    """Translate a delivery-date or box-composition failure."""
    if isinstance(exc, InvalidDeliveryDate):
        return problem_response(
            status.HTTP_400_BAD_REQUEST, "invalid", str(exc), attr="delivery_date"
        )
    if isinstance(exc, DeliveryDateUnavailable):
        # blackout is a failed precondition on the calendar, not bad input
        status_code = (
            status.HTTP_409_CONFLICT if exc.rule == "blackout" else status.HTTP_400_BAD_REQUEST
        )
        return problem_response(status_code, exc.rule, str(exc), attr="delivery_date")
    if isinstance(exc, QuantityRuleViolation):
        attr = f"quantities.{exc.slot}" if exc.slot else "quantities"
        return problem_response(status.HTTP_400_BAD_REQUEST, exc.rule, str(exc), attr=attr)
    raise exc


def _not_found() -> Response:
    return problem_response(status.HTTP_404_NOT_FOUND, "not_found", "Order not found.")


def _forbidden(exc: NotAuthorized) -> Response:
    return problem_response(status.HTTP_403_FORBIDDEN, "permission_denied", str(exc))


class OrderViewSet(GenericViewSet):
    """Public order endpoints.

    Anyone may submit; an authenticated, allowlisted caller additionally
    gets its date overrides honoured.
    """

    permission_classes = [AllowAny]
    authorization_gate = default_gate

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_throttles(self) -> list[BaseThrottle]:
        """Per-action throttle scopes."""
        if self.action == "create":
            self.throttle_scope = "order_creation"
        elif self.action == "quote":
            self.throttle_scope = "order_quote"
        return super().get_throttles()

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Price and total are always computed here; any client value is ignored.
        """
        payload: Dict[str, Any] = {
            **request_body(request),
            "user_agent": request.META.get("HTTP_USER_AGENT", "")[:512],
        }
        try:
            dto = SubmitOrderDTO.model_validate(payload)
        except ValidationError as exc:
            return validation_error_response(exc)

        privileged = self.authorization_gate.is_privileged(request.user)
        try:
            order = self._service.create_order(dto, privileged=privileged)
        except (InvalidDeliveryDate, DeliveryDateUnavailable, QuantityRuleViolation) as exc:
            return _rule_error(exc)

        return Response(OrderReceiptSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def quote(self, request: Request) -> Response:
        """POST /api/v1/orders/quote/

        Advisory only: always 200 for a well-formed body, with every broken
        rule listed under ``issues``.
        """
        try:
            dto = QuoteRequestDTO.model_validate(request_body(request))
        except ValidationError as exc:
            return validation_error_response(exc)

        result = self._service.quote(dto)
        return Response({**result.model_dump(mode="json"), "accepted": result.accepted})


class AdminOrderViewSet(GenericViewSet):
    """Staff order endpoints.

    ``IsAllowlistedStaff`` rejects callers before any lookup, so a denied
    caller never learns whether an order exists.
    """

    permission_classes = [IsAllowlistedStaff]
    authorization_gate = default_gate
    throttle_scope = "order_admin"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def _privileged(self, request: Request) -> bool:
        return self.authorization_gate.is_privileged(request.user)

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/admin/orders/?mode=today|tomorrow|all&month=YYYY-MM&outlet=..."""
        filters = {
            key: request.query_params[key]
            for key in LIST_FILTER_PARAMS
            if key in request.query_params
        }
        try:
            orders = self._service.list_orders(filters, privileged=self._privileged(request))
        except InvalidOrderQuery as exc:
            return problem_response(status.HTTP_400_BAD_REQUEST, "invalid", str(exc))
        except NotAuthorized as exc:
            return _forbidden(exc)

        page = self.paginate_queryset(orders)
        if page is not None:
            return self.get_paginated_response(OrderSerializer(page, many=True).data)
        return Response(OrderSerializer(orders, many=True).data)

    # ------------------------------------------------------------------
    # Status toggles
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"], url_path="toggle-paid")
    def toggle_paid(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/admin/orders/{pk}/toggle-paid/"""
        return self._toggle(request, pk, self._service.toggle_paid)

    @action(detail=True, methods=["post"], url_path="toggle-delivered")
    def toggle_delivered(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/admin/orders/{pk}/toggle-delivered/"""
        return self._toggle(request, pk, self._service.toggle_delivered)

    def _toggle(self, request: Request, pk: str | None, toggle) -> Response:
        try:
            result = toggle(pk, privileged=self._privileged(request))
        except OrderNotFound:
            return _not_found()
        except ConcurrentUpdateConflict as exc:
            return problem_response(status.HTTP_409_CONFLICT, "conflict", str(exc))
        except NotAuthorized as exc:
            return _forbidden(exc)
        return Response(result.model_dump(mode="json"))

    # ------------------------------------------------------------------
    # Quantities / delete
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch"])
    def quantities(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/admin/orders/{pk}/quantities/

        Absent flavor slots keep their stored value.
        """
        try:
            patch = QuantitiesPatchDTO.model_validate(request_body(request))
        except ValidationError as exc:
            return validation_error_response(exc)

        try:
            order = self._service.update_quantities(
                pk, patch, privileged=self._privileged(request)
            )
        except OrderNotFound:
            return _not_found()
        except QuantityRuleViolation as exc:
            return _rule_error(exc)
        except NotAuthorized as exc:
            return _forbidden(exc)

        return Response(OrderSerializer(order).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/admin/orders/{pk}/"""
        try:
            self._service.delete_order(pk, privileged=self._privileged(request))
        except OrderNotFound:
            return _not_found()
        except NotAuthorized as exc:
            return _forbidden(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)
