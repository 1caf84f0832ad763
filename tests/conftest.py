"""
Test configuration for the settlement server.
"""
import os

import django
import pytest


def pytest_configure():
    """Configure Django settings for testing."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'store_server.settings.test')
    django.setup()


@pytest.fixture
def customer():
    from tests.factories import UserFactory
    return UserFactory()


@pytest.fixture
def admin_user():
    from tests.factories import AdminUserFactory
    return AdminUserFactory()


@pytest.fixture
def address(customer):
    from tests.factories import AddressFactory
    return AddressFactory(user=customer)


@pytest.fixture
def product():
    from tests.factories import ProductFactory
    return ProductFactory(price='600.00', stock_quantity=10)


@pytest.fixture
def save50():
    from tests.factories import CouponFactory
    return CouponFactory(
        code='SAVE50', discount_type='fixed', discount_value='50.00',
        minimum_amount='300.00', usage_limit=200,
    )


@pytest.fixture
def gateway():
    from tests.fakes import FakeGatewayClient
    return FakeGatewayClient()


@pytest.fixture
def api_client():
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def customer_client(api_client, customer):
    api_client.force_authenticate(user=customer)
    return api_client


@pytest.fixture
def admin_client(admin_user):
    from rest_framework.test import APIClient
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client
