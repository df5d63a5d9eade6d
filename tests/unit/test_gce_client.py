"""Unit tests for Google Compute Engine client."""

from unittest.mock import MagicMock, Mock, patch

import pytest
from googleapiclient.errors import HttpError

from cockroach_prod.clients.gce_client import GoogleComputeClient
from cockroach_prod.core.exceptions import GoogleCloudError


def _http_error(status: int) -> HttpError:
    resp = Mock(status=status, reason="error")
    return HttpError(resp, b'{"error": {"message": "error"}}')


@pytest.fixture
def compute_service() -> MagicMock:
    """Mock compute v1 service."""
    return MagicMock()


@pytest.fixture
def gce_client(compute_service: MagicMock) -> GoogleComputeClient:
    """Create client around the mocked service."""
    return GoogleComputeClient("my-project", credentials=Mock(), service=compute_service)


def test_client_builds_compute_service() -> None:
    """Test the compute service is discovered with the given credentials."""
    credentials = Mock()

    with patch("cockroach_prod.clients.gce_client.discovery.build") as mock_build:
        client = GoogleComputeClient("my-project", credentials)

    mock_build.assert_called_once_with(
        "compute", "v1", credentials=credentials, cache_discovery=False
    )
    assert client.service is mock_build.return_value


def test_ensure_firewall_rule_request(
    gce_client: GoogleComputeClient, compute_service: MagicMock
) -> None:
    """Test the rule allows the port over TCP for docker-machine instances."""
    gce_client.ensure_firewall_rule(8080, "cockroach")

    insert = compute_service.firewalls.return_value.insert
    insert.assert_called_once()
    kwargs = insert.call_args[1]
    assert kwargs["project"] == "my-project"
    assert kwargs["body"]["name"] == "cockroach"
    assert kwargs["body"]["allowed"] == [{"IPProtocol": "tcp", "ports": ["8080"]}]
    assert kwargs["body"]["sourceRanges"] == ["0.0.0.0/0"]
    assert kwargs["body"]["targetTags"] == ["docker-machine"]
    insert.return_value.execute.assert_called_once()


def test_ensure_firewall_rule_already_exists(
    gce_client: GoogleComputeClient, compute_service: MagicMock
) -> None:
    """Test an existing rule counts as success."""
    execute = compute_service.firewalls.return_value.insert.return_value.execute
    execute.side_effect = [{}, _http_error(409)]

    gce_client.ensure_firewall_rule(8080)
    gce_client.ensure_firewall_rule(8080)

    assert execute.call_count == 2


def test_ensure_firewall_rule_other_error(
    gce_client: GoogleComputeClient, compute_service: MagicMock
) -> None:
    """Test other HTTP errors raise GoogleCloudError."""
    execute = compute_service.firewalls.return_value.insert.return_value.execute
    execute.side_effect = _http_error(403)

    with pytest.raises(GoogleCloudError, match="Failed to create firewall rule"):
        gce_client.ensure_firewall_rule(8080)
