"""Unit tests for OrderDjangoRepository."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.core.models import OutboxEvent
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


class BrokenEvent:
    event_name = "Broken"
    topic = "orders"

    def to_payload(self):
        raise RuntimeError("payload failure")


class TestCreate:
    def test_order_and_outbox_are_one_unit_of_work(self, repo, open_day):
        data = {
            "channel": "individual",
            "name": "Ana",
            "email": "ana@example.com",
            "phone": "5512345678",
            "pickup_location": "Vegandra",
            "delivery_date": open_day,
            "quantities": {"oreo": 6},
            "total_units": 6,
            "price": "160.00",
        }
        with pytest.raises(RuntimeError):
            repo.create(data, events=[BrokenEvent()])
        assert not Order.objects.exists()
        assert not OutboxEvent.objects.exists()


class TestReads:
    def test_get_by_id(self, repo, make_order):
        order = make_order()
        assert repo.get_by_id(str(order.id)) == order

    @pytest.mark.parametrize("order_id", ["not-a-uuid", str(uuid4())])
    def test_get_by_id_missing(self, repo, order_id):
        assert repo.get_by_id(order_id) is None

    def test_get_status(self, repo, make_order):
        order = make_order()
        assert repo.get_status(str(order.id), "payment_status") == "unpaid"
        assert repo.get_status(str(order.id), "fulfillment_status") == "received"

    def test_get_status_rejects_other_columns(self, repo, make_order):
        order = make_order()
        with pytest.raises(ValueError):
            repo.get_status(str(order.id), "price")


class TestCompareAndSet:
    def test_swaps_when_expected_matches(self, repo, make_order):
        order = make_order()
        before = order.updated_at

        assert repo.compare_and_set_status(order.id, "payment_status", "unpaid", "paid")

        order.refresh_from_db()
        assert order.payment_status == "paid"
        assert order.updated_at > before

    def test_stale_expected_value_writes_nothing(self, repo, make_order):
        order = make_order(payment_status="paid")

        assert not repo.compare_and_set_status(order.id, "payment_status", "unpaid", "paid")

        order.refresh_from_db()
        assert order.payment_status == "paid"

    def test_other_status_untouched(self, repo, make_order):
        order = make_order()
        repo.compare_and_set_status(order.id, "fulfillment_status", "received", "delivered")
        order.refresh_from_db()
        assert order.payment_status == "unpaid"


class TestWrites:
    def test_save_quantities_writes_derived_fields(self, repo, make_order):
        order = make_order(quantities={"oreo": 6})
        order.set_quantities({"oreo": 4, "carrot": 4})
        order.total_units = 8
        order.price = "220.00"
        order.name = "changed in memory only"

        repo.save_quantities(order)

        stored = Order.objects.get(id=order.id)
        assert stored.quantities["carrot"] == 4
        assert stored.total_units == 8
        assert str(stored.price) == "220.00"
        assert stored.name == "Ana"

    def test_delete(self, repo, make_order):
        order = make_order()
        assert repo.delete(str(order.id)) is True
        assert repo.delete(str(order.id)) is False
        assert repo.delete("not-a-uuid") is False
