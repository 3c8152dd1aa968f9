import pytest
from django.core.cache import cache
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    # throttle counters live in the default cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def admin_user(db):
    from lab.models import User
    return User.objects.create_superuser(username='admin', password='Adm1n-pass!', display_name='Administrator')


@pytest.fixture
def api(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def memory_repo():
    from lab.repository.memory import MemoryRepository
    return MemoryRepository()
