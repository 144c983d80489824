"""
Pytest configuration and shared fixtures.

Test environment variables are set here, before any payhook settings are
read, and the settings cache is cleared around every test so tests may
override variables with monkeypatch.
"""

import os

import pytest

os.environ.setdefault("WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("WEBHOOK_TOLERANCE", "300")
os.environ.setdefault("API_VERSION", "2020-01-01")

from payhook.config import get_settings  # noqa: E402

get_settings.cache_clear()


TEST_WEBHOOK_SECRET = os.environ["WEBHOOK_SECRET"]
TEST_API_VERSION = os.environ["API_VERSION"]
TEST_TIMESTAMP = 1_600_000_000


@pytest.fixture(autouse=True)
def fresh_settings():
    """Clear cached settings before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def secret() -> str:
    return TEST_WEBHOOK_SECRET


@pytest.fixture
def timestamp() -> int:
    return TEST_TIMESTAMP


@pytest.fixture
def event_body() -> bytes:
    """Return a valid event JSON body using the configured API version."""
    return (
        b'{"id":"evt_1","object":"event","type":"charge.succeeded",'
        b'"api_version":"2020-01-01","created":1600000000,"livemode":false,'
        b'"data":{"object":{"id":"ch_1","object":"charge","amount":2000}}}'
    )
