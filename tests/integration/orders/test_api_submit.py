"""Integration tests for the public order endpoints."""

from __future__ import annotations

import pytest

from modules.core.models import OutboxEvent
from modules.orders.constants import FLAVOR_SLOTS, MAX_UNITS_PER_FLAVOR
from modules.orders.models import Order

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"
QUOTE_URL = "/api/v1/orders/quote/"


def _payload(delivery_date, **overrides):
    data = {
        "channel": "individual",
        "name": "Ana",
        "email": "ana@example.com",
        "phone": "5512345678",
        "pickup_location": "Vegandra",
        "delivery_date": str(delivery_date),
        "quantities": {"chocolate": 4, "oreo": 2},
    }
    data.update(overrides)
    return data


def _only_error(response):
    body = response.json()
    assert body["type"] in {"client_error", "validation_error"}
    assert len(body["errors"]) == 1
    return body["errors"][0]


def _block(staff_client, day, message="Holiday break."):
    response = staff_client.patch(
        "/api/v1/admin/config/",
        {
            "blackout": {
                "enabled": True,
                "message": message,
                "ranges": [{"start": str(day), "end": str(day)}],
            }
        },
        format="json",
    )
    assert response.status_code == 200


class TestSubmitOrder:
    def test_anonymous_submission(self, api_client, open_day):
        response = api_client.post(
            URL, _payload(open_day), format="json", HTTP_USER_AGENT="pytest-browser"
        )

        assert response.status_code == 201
        data = response.json()
        assert data["price"] == "160.00"
        assert data["total_units"] == 6
        assert data["payment_status"] == "unpaid"
        assert data["fulfillment_status"] == "received"
        assert "email" not in data

        order = Order.objects.get(id=data["id"])
        assert order.user_agent == "pytest-browser"
        assert OutboxEvent.objects.filter(aggregate_id=data["id"]).count() == 1

    def test_client_price_ignored(self, api_client, open_day):
        response = api_client.post(
            URL, _payload(open_day, price="1.00", total_units=100), format="json"
        )
        assert response.status_code == 201
        assert response.json()["price"] == "160.00"

    def test_retail_outlet_submission(self, api_client, open_day):
        payload = _payload(
            open_day,
            channel="retail-outlet",
            sales_outlet="Cafe Centro",
            quantities={"carrot": 10},
        )
        del payload["pickup_location"]
        del payload["phone"]
        response = api_client.post(URL, payload, format="json")
        assert response.status_code == 201
        assert response.json()["price"] == "200.00"

    def test_malformed_json(self, api_client):
        response = api_client.post(URL, data="{", content_type="application/json")
        assert response.status_code == 400
        assert response.json()["type"] == "client_error"

    def test_missing_contact_field(self, api_client, open_day):
        response = api_client.post(URL, _payload(open_day, phone=""), format="json")
        assert response.status_code == 400
        error = _only_error(response)
        assert error["code"] == "invalid"
        assert error["detail"] == "Phone is required for individual orders."
        assert not Order.objects.exists()

    def test_unknown_flavor_slot(self, api_client, open_day):
        response = api_client.post(
            URL, _payload(open_day, quantities={"sprinkles": 6}), format="json"
        )
        assert response.status_code == 400
        assert _only_error(response)["attr"] == "quantities.sprinkles"

    @pytest.mark.parametrize("count", [MAX_UNITS_PER_FLAVOR + 1, 10_000_000, 2**63])
    def test_oversized_slot_rejected(self, api_client, staff_client, open_day, count):
        response = api_client.post(
            URL, _payload(open_day, quantities={"chocolate": count}), format="json"
        )
        assert response.status_code == 400
        error = _only_error(response)
        assert (error["code"], error["attr"]) == ("invalid", "quantities.chocolate")
        assert not Order.objects.exists()
        assert staff_client.get("/api/v1/admin/orders/", {"mode": "all"}).status_code == 200

    def test_largest_box_is_stored_and_listed(self, api_client, staff_client, open_day):
        full_box = {slot: MAX_UNITS_PER_FLAVOR for slot in FLAVOR_SLOTS}
        response = api_client.post(URL, _payload(open_day, quantities=full_box), format="json")
        assert response.status_code == 201
        assert response.json()["price"] == "175000.00"

        listed = staff_client.get("/api/v1/admin/orders/", {"mode": "all"})
        assert listed.status_code == 200
        assert listed.json()["results"][0]["total_units"] == 7 * MAX_UNITS_PER_FLAVOR

    def test_malformed_delivery_date(self, api_client):
        response = api_client.post(URL, _payload("20-10-2026"), format="json")
        assert response.status_code == 400
        error = _only_error(response)
        assert (error["code"], error["attr"]) == ("invalid", "delivery_date")

    def test_sunday_rejected(self, api_client, next_sunday):
        response = api_client.post(URL, _payload(next_sunday), format="json")
        assert response.status_code == 400
        error = _only_error(response)
        assert error["code"] == "closure_day"
        assert error["attr"] == "delivery_date"

    def test_same_day_rejected(self, api_client, today):
        response = api_client.post(URL, _payload(today), format="json")
        assert response.status_code == 400
        assert _only_error(response)["code"] in {"lead_time", "closure_day"}

    def test_single_donut_rejected(self, api_client, open_day):
        response = api_client.post(
            URL, _payload(open_day, quantities={"chocolate": 5, "oreo": 1}), format="json"
        )
        assert response.status_code == 400
        error = _only_error(response)
        assert error["code"] == "single_unit"
        assert error["attr"] == "quantities.oreo"

    def test_minimum_order(self, api_client, open_day):
        response = api_client.post(
            URL, _payload(open_day, quantities={"chocolate": 4}), format="json"
        )
        assert response.status_code == 400
        assert _only_error(response)["code"] == "minimum_order"

    def test_blackout_is_a_conflict(self, api_client, staff_client, open_day):
        _block(staff_client, open_day)
        response = api_client.post(URL, _payload(open_day), format="json")
        assert response.status_code == 409
        error = _only_error(response)
        assert error["code"] == "blackout"
        assert error["detail"] == "Holiday break."


class TestOverrides:
    OVERRIDES = {"allow_closure_day": True, "allow_past_dates": True}

    def test_ignored_for_anonymous(self, api_client, next_sunday):
        response = api_client.post(
            URL, _payload(next_sunday, overrides=self.OVERRIDES), format="json"
        )
        assert response.status_code == 400
        assert _only_error(response)["code"] == "closure_day"

    def test_ignored_for_non_allowlisted_user(self, outsider_client, next_sunday):
        response = outsider_client.post(
            URL, _payload(next_sunday, overrides=self.OVERRIDES), format="json"
        )
        assert response.status_code == 400

    def test_honoured_for_staff(self, staff_client, next_sunday):
        response = staff_client.post(
            URL, _payload(next_sunday, overrides=self.OVERRIDES), format="json"
        )
        assert response.status_code == 201

    def test_staff_cannot_bypass_blackout(self, staff_client, open_day):
        _block(staff_client, open_day)
        response = staff_client.post(
            URL, _payload(open_day, overrides=self.OVERRIDES), format="json"
        )
        assert response.status_code == 409


class TestQuote:
    def test_accepted_quote(self, api_client, open_day):
        response = api_client.post(
            QUOTE_URL,
            {
                "channel": "individual",
                "quantities": {"chocolate": 7},
                "delivery_date": str(open_day),
            },
            format="json",
        )
        assert response.status_code == 200
        data = response.json()
        assert data["accepted"] is True
        assert data["total_units"] == 7
        assert data["price"] == "190"
        assert data["issues"] == []

    def test_issues_listed(self, api_client, next_sunday):
        response = api_client.post(
            QUOTE_URL,
            {
                "channel": "retail-outlet",
                "sales_outlet": "Karen Donas",
                "quantities": {"chocolate": 1, "oreo": 2},
                "delivery_date": str(next_sunday),
            },
            format="json",
        )
        assert response.status_code == 200
        data = response.json()
        assert data["accepted"] is False
        assert data["price"] == "45"
        assert [i["code"] for i in data["issues"]] == [
            "closure_day",
            "minimum_order",
            "single_unit",
        ]
        assert not Order.objects.exists()

    def test_malformed_body(self, api_client):
        response = api_client.post(QUOTE_URL, {"channel": "individual"}, format="json")
        assert response.status_code == 400
        assert _only_error(response)["attr"] == "quantities"
