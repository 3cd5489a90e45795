"""
Shared test fixtures and helpers for Tessera test suite.
"""

import pytest

from tessera.cookies import Cookie
from tessera.sessions import CookieSessionStorage, MemorySessionFactory, StoreSessionStorage


# ============================================================================
# Header Helpers
# ============================================================================


def cookie_pair(set_cookie: str) -> str:
    """Turn a Set-Cookie value into the Cookie header a browser sends back."""
    return set_cookie.split(";", 1)[0]


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def secrets():
    return ["current-secret", "previous-secret"]


@pytest.fixture
def signed_cookie(secrets):
    return Cookie("prefs", secrets=secrets)


@pytest.fixture
def cookie_storage(secrets):
    return CookieSessionStorage(secrets=secrets)


@pytest.fixture
def memory_factory():
    return MemorySessionFactory()


@pytest.fixture
def store_storage(memory_factory, secrets):
    return StoreSessionStorage(memory_factory, secrets=secrets)
