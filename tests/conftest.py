from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from modules.orders.constants import Channel
from modules.orders.models import Order
from modules.orders.views import build_order_service
from modules.storeconfig.repositories.django_repository import StoreConfigDjangoRepository
from modules.storeconfig.services import StoreConfigService

User = get_user_model()

# matches ADMIN_EMAILS in config.settings_test (case differs on purpose)
STAFF_EMAIL = "Admin@Donuts.test"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def staff_user():
    return User.objects.create_user(username="staff", email=STAFF_EMAIL, password="x")


@pytest.fixture()
def outsider_user():
    return User.objects.create_user(
        username="outsider", email="someone@example.com", password="x"
    )


@pytest.fixture()
def staff_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


@pytest.fixture()
def outsider_client(outsider_user):
    client = APIClient()
    client.force_authenticate(user=outsider_user)
    return client


# ---------------------------------------------------------------------------
# Dates relative to the operational day
# ---------------------------------------------------------------------------


@pytest.fixture()
def today() -> date:
    return timezone.localdate()


@pytest.fixture()
def open_day(today) -> date:
    """First acceptable delivery day: after today and not a Sunday."""
    day = today + timedelta(days=1)
    while day.weekday() == 6:
        day += timedelta(days=1)
    return day


@pytest.fixture()
def next_sunday(today) -> date:
    return today + timedelta(days=(6 - today.weekday()) % 7 or 7)


# ---------------------------------------------------------------------------
# Services and data
# ---------------------------------------------------------------------------


@pytest.fixture()
def config_service():
    return StoreConfigService(StoreConfigDjangoRepository())


@pytest.fixture()
def order_service():
    return build_order_service()


@pytest.fixture()
def make_order(open_day):
    """Insert an order row directly, bypassing the acceptance rules."""

    def _make(
        *,
        channel=Channel.INDIVIDUAL,
        sales_outlet="",
        pickup_location=None,
        delivery_date=None,
        quantities=None,
        price=Decimal("160.00"),
        **extra,
    ):
        quantities = quantities or {"chocolate": 6}
        if pickup_location is None:
            pickup_location = "Vegandra" if channel == Channel.INDIVIDUAL else ""
        order = Order(
            channel=channel,
            name="Ana",
            email="ana@example.com",
            phone="5512345678",
            pickup_location=pickup_location,
            sales_outlet=sales_outlet,
            delivery_date=delivery_date or open_day,
            total_units=sum(quantities.values()),
            price=price,
            **extra,
        )
        order.set_quantities(quantities)
        order.save()
        return order

    return _make
