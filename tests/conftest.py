"""
Shared fixtures: backend settings, a fake HTTP session and client factory.
"""

from __future__ import annotations

import pytest

from dashboard.client.auth import AuthSession
from dashboard.client.pricing_client import PricingAPIClient
from dashboard.config import BackendSettings
from tests.http_fakes import BASE_URL, FakeSession


@pytest.fixture()
def backend_settings() -> BackendSettings:
    return BackendSettings(
        base_url=BASE_URL,
        auth_email="owner@example.com",
        auth_password="secret",
        timeout_seconds=5.0,
    )


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def make_client(backend_settings: BackendSettings, fake_session: FakeSession):
    """Factory for a client bound to `fake_session`, optionally holding a token."""

    def _factory(token: str | None = "valid-token") -> PricingAPIClient:
        auth = AuthSession(
            email=backend_settings.auth_email,
            password=backend_settings.auth_password,
            token=token,
        )
        return PricingAPIClient(settings=backend_settings, auth=auth, session=fake_session)

    return _factory
