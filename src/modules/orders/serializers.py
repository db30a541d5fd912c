"""Order DRF serializers for API output.

Request bodies are parsed straight into the Pydantic DTOs from ``dtos.py``;
these serializers only render persisted orders.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for a single order, staff view."""

    quantities = serializers.DictField(child=serializers.IntegerField(), read_only=True)
    fulfillment_point = serializers.CharField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "channel",
            "name",
            "email",
            "phone",
            "pickup_location",
            "sales_outlet",
            "fulfillment_point",
            "delivery_date",
            "quantities",
            "total_units",
            "price",
            "payment_status",
            "fulfillment_status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderReceiptSerializer(serializers.ModelSerializer):
    """What the customer gets back after submitting: no contact data echoed."""

    class Meta:
        model = Order
        fields = [
            "id",
            "channel",
            "delivery_date",
            "total_units",
            "price",
            "payment_status",
            "fulfillment_status",
            "created_at",
        ]
        read_only_fields = fields
