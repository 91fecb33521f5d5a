from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from pipeline.models import SalesSet


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@test.com",
        password="testpass123",
        first_name="Admin",
        last_name="User",
        role=User.Role.ADMIN,
        salary=Decimal("2000.00"),
    )


@pytest.fixture
def setter_user(db):
    return User.objects.create_user(
        email="setter@test.com",
        password="testpass123",
        first_name="Setter",
        last_name="User",
        role=User.Role.SETTER,
        salary=Decimal("800.00"),
    )


@pytest.fixture
def closer_user(db):
    return User.objects.create_user(
        email="closer@test.com",
        password="testpass123",
        first_name="Closer",
        last_name="User",
        role=User.Role.CLOSER,
    )


@pytest.fixture
def delivery_user(db):
    return User.objects.create_user(
        email="delivery@test.com",
        password="testpass123",
        first_name="Delivery",
        last_name="User",
        role=User.Role.DELIVERY,
    )


@pytest.fixture
def sales_set(db, setter_user, closer_user):
    return SalesSet.objects.create(
        prospect_name="Panadería La Espiga",
        prospect_whatsapp="+50688887777",
        prospect_ig="laespiga",
        setter=setter_user,
        closer=closer_user,
        scheduled_at=timezone.now() + timedelta(days=1),
    )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def closer_client(closer_user):
    client = APIClient()
    client.force_authenticate(user=closer_user)
    return client


@pytest.fixture
def setter_client(setter_user):
    client = APIClient()
    client.force_authenticate(user=setter_user)
    return client


@pytest.fixture(autouse=True)
def _clear_cache():
    # Login throttling counts live in the cache.
    cache.clear()
    yield
    cache.clear()
