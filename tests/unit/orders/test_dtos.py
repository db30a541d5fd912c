"""Unit tests for order DTOs: malformed input is rejected before any rule."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from modules.orders.constants import MAX_UNITS_PER_FLAVOR
from modules.orders.dtos import (
    OrderQuantities,
    QuantitiesPatchDTO,
    QuoteRequestDTO,
    SubmitOrderDTO,
)

pytestmark = pytest.mark.unit


def _individual(**overrides):
    data = {
        "channel": "individual",
        "name": "  Ana Lopez ",
        "email": "ana@example.com",
        "phone": "55 1234 5678",
        "pickup_location": "Vegandra",
        "delivery_date": "2026-10-20",
        "quantities": {"chocolate": 6},
    }
    data.update(overrides)
    return data


def _retail(**overrides):
    data = {
        "channel": "retail-outlet",
        "name": "Karen",
        "email": "karen@example.com",
        "sales_outlet": "Karen Donas",
        "delivery_date": "2026-10-20",
        "quantities": {"oreo": 10},
    }
    data.update(overrides)
    return data


class TestSubmitOrderDTO:
    def test_valid_individual(self):
        dto = SubmitOrderDTO.model_validate(_individual())
        assert dto.name == "Ana Lopez"
        assert dto.phone == "5512345678"
        assert dto.sales_outlet is None
        assert dto.quantities.chocolate == 6

    def test_valid_retail_without_phone(self):
        dto = SubmitOrderDTO.model_validate(_retail())
        assert dto.phone is None
        assert dto.pickup_location is None

    def test_client_price_is_not_part_of_the_contract(self):
        dto = SubmitOrderDTO.model_validate(_individual(price="1.00", total_units=99))
        assert not hasattr(dto, "price")

    def test_unknown_channel(self):
        with pytest.raises(ValidationError):
            SubmitOrderDTO.model_validate(_individual(channel="wholesale"))

    @pytest.mark.parametrize("email", ["", "ana", "ana@example", "a na@example.com"])
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError):
            SubmitOrderDTO.model_validate(_individual(email=email))

    def test_blank_name(self):
        with pytest.raises(ValidationError):
            SubmitOrderDTO.model_validate(_individual(name="   "))

    def test_individual_requires_phone(self):
        with pytest.raises(ValidationError, match="Phone is required"):
            SubmitOrderDTO.model_validate(_individual(phone=""))

    @pytest.mark.parametrize("phone", ["12345", "55 1234 56789"])
    def test_phone_must_have_ten_digits(self, phone):
        with pytest.raises(ValidationError, match="10 digits"):
            SubmitOrderDTO.model_validate(_individual(phone=phone))

    def test_individual_requires_known_pickup_location(self):
        with pytest.raises(ValidationError, match="Pickup location"):
            SubmitOrderDTO.model_validate(_individual(pickup_location="Somewhere"))

    def test_individual_rejects_sales_outlet(self):
        with pytest.raises(ValidationError, match="Sales outlet is only allowed"):
            SubmitOrderDTO.model_validate(_individual(sales_outlet="Karen Donas"))

    def test_retail_requires_outlet(self):
        with pytest.raises(ValidationError, match="Sales outlet is required"):
            SubmitOrderDTO.model_validate(_retail(sales_outlet="  "))

    def test_retail_rejects_pickup_location(self):
        with pytest.raises(ValidationError, match="Pickup location is only allowed"):
            SubmitOrderDTO.model_validate(_retail(pickup_location="Vegandra"))

    def test_is_immutable(self):
        dto = SubmitOrderDTO.model_validate(_individual())
        with pytest.raises(ValidationError):
            dto.name = "Other"


class TestOrderQuantities:
    def test_missing_slots_default_to_zero(self):
        quantities = OrderQuantities(chocolate=6)
        assert quantities.as_dict()["oreo"] == 0
        assert quantities.total == 6
        assert len(quantities.as_dict()) == 7

    def test_unknown_slot_rejected(self):
        with pytest.raises(ValidationError):
            OrderQuantities.model_validate({"chocolate": 6, "sprinkles": 2})

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            OrderQuantities.model_validate({"chocolate": -2})

    def test_slot_cap_is_inclusive(self):
        assert OrderQuantities(chocolate=MAX_UNITS_PER_FLAVOR).total == MAX_UNITS_PER_FLAVOR

    @pytest.mark.parametrize("value", [MAX_UNITS_PER_FLAVOR + 1, 10_000_000, 2**63])
    def test_oversized_slot_rejected(self, value):
        with pytest.raises(ValidationError) as exc_info:
            OrderQuantities.model_validate({"chocolate": value})
        assert exc_info.value.errors()[0]["loc"] == ("chocolate",)

    @pytest.mark.parametrize("value", ["6", 6.0, True])
    def test_non_integer_rejected(self, value):
        with pytest.raises(ValidationError):
            OrderQuantities.model_validate({"chocolate": value})


class TestQuantitiesPatchDTO:
    def test_absent_slots_keep_current_value(self):
        current = OrderQuantities(chocolate=4, oreo=2).as_dict()
        merged = QuantitiesPatchDTO(oreo=4, carrot=2).merged_with(current)
        assert merged["chocolate"] == 4
        assert merged["oreo"] == 4
        assert merged["carrot"] == 2
        assert merged["seasonal"] == 0

    def test_explicit_zero_clears_slot(self):
        current = OrderQuantities(chocolate=4, oreo=2).as_dict()
        assert QuantitiesPatchDTO(oreo=0).merged_with(current)["oreo"] == 0

    def test_unknown_slot_rejected(self):
        with pytest.raises(ValidationError):
            QuantitiesPatchDTO.model_validate({"sprinkles": 2})

    def test_oversized_slot_rejected(self):
        with pytest.raises(ValidationError):
            QuantitiesPatchDTO.model_validate({"oreo": MAX_UNITS_PER_FLAVOR + 1})


class TestQuoteRequestDTO:
    def test_delivery_date_optional(self):
        dto = QuoteRequestDTO.model_validate(
            {"channel": "individual", "quantities": {"oreo": 6}, "delivery_date": ""}
        )
        assert dto.delivery_date is None
        assert dto.sales_outlet is None
