import pytest
from django.core.cache import caches


@pytest.fixture(autouse=True)
def _clear_caches():
    # Carts and throttle counters live in the cache; start every test empty
    for cache in caches.all():
        cache.clear()
    yield
