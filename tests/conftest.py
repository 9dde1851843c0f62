"""Pytest configuration and shared fixtures for tripletex-client tests."""

import os
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from tripletex_client.auth import Credentials, TokenManager
from tripletex_client.testing import SessionTokenEndpoint


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Auto-cleanup: Clear Tripletex environment variables before each test.

    This prevents a developer's real credentials leaking into tests.
    """
    for key in list(os.environ.keys()):
        if key.startswith(("TRIPLETEX_", "TEST_")):
            monkeypatch.delenv(key, raising=False)

    yield


class FakeClock:
    """Controllable time source for TokenManager."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 15, 12, 0, tzinfo=UTC))


@pytest.fixture
def credentials():
    return Credentials(consumer_token="consumer-abc", employee_token="employee-xyz")


@pytest.fixture
def token_endpoint():
    return SessionTokenEndpoint(token="session-123", expiration_date="2025-02-15")


@pytest.fixture
def http_client(token_endpoint):
    return httpx.AsyncClient(transport=httpx.MockTransport(token_endpoint))


@pytest.fixture
def manager(credentials, http_client, clock):
    return TokenManager(
        credentials,
        http_client=http_client,
        base_url="https://tripletex.test/v2",
        clock=clock,
    )
