"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import MagicMock

import pytest

from cockroach_prod.core.config import OAuthClientConfig
from cockroach_prod.core.models import OAuthToken
from cockroach_prod.interfaces.driver import Driver


class FakeDriver(Driver):
    """Driver recording prepare calls, for orchestrator tests."""

    def __init__(self, args: list[str] | None = None):
        self.args = args or ["--fake-flag", "value"]
        self.prepare_calls = 0

    @property
    def name(self) -> str:
        return "fake"

    def create_args(self) -> list[str]:
        return list(self.args)

    def prepare(self) -> None:
        self.prepare_calls += 1


@pytest.fixture
def fake_driver() -> FakeDriver:
    """Provide a driver with fixed arguments."""
    return FakeDriver()


@pytest.fixture
def mock_docker_machine() -> MagicMock:
    """Mock docker-machine wrapper with no machines."""
    wrapper = MagicMock()
    wrapper.check_version.return_value = "docker-machine version 0.16.2, build bd45ab13"
    wrapper.list_machines.return_value = []
    return wrapper


@pytest.fixture
def oauth_client_config() -> OAuthClientConfig:
    """Provide an OAuth client configuration for testing."""
    return OAuthClientConfig(
        client_id="test-client.apps.googleusercontent.com",
        client_secret="test-secret",
    )


@pytest.fixture
def sample_token() -> OAuthToken:
    """Provide a token valid for another hour."""
    return OAuthToken(
        access_token="ya29.access",
        refresh_token="1//refresh",
        expiry=datetime.now(UTC) + timedelta(hours=1),
    )


@pytest.fixture
def expired_token() -> OAuthToken:
    """Provide a token that expired an hour ago."""
    return OAuthToken(
        access_token="ya29.stale",
        refresh_token="1//refresh",
        expiry=datetime.now(UTC) - timedelta(hours=1),
    )


@pytest.fixture
def sample_inspect_output() -> dict[str, Any]:
    """Sample docker-machine inspect output."""
    return {
        "ConfigVersion": 3,
        "Driver": {
            "IPAddress": "54.1.2.3",
            "MachineName": "cockroach-0",
            "Region": "us-east-1",
        },
        "DriverName": "amazonec2",
        "Name": "cockroach-0",
    }


# ==============================================================================
# Pytest Markers
# ==============================================================================


def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
