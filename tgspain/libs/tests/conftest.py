import pytest

from tgspain.libs import cache_logic


@pytest.fixture(autouse=True)
def clear_django_caches_between_tests():
    """Prevent cached platform settings from leaking across tests."""
    cache_logic.clear_cache()
    yield
    cache_logic.clear_cache()
