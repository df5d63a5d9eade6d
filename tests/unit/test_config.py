"""Tests for configuration management."""

import tempfile
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from cockroach_prod.core.config import (
    AWSConfig,
    GoogleConfig,
    OAuthClientConfig,
    ProdConfig,
)
from cockroach_prod.core.exceptions import ConfigurationError


def _write_config(data) -> str:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        if isinstance(data, str):
            f.write(data)
        else:
            yaml.dump(data, f)
        return f.name


def test_prod_config_defaults():
    """Test top-level defaults."""
    config = ProdConfig()
    assert config.certs == "certs"
    assert config.port == 8080
    assert config.region == "aws:us-east-1"
    assert config.docker_machine.binary == "docker-machine"
    assert config.logging.level == "INFO"


def test_aws_config_defaults():
    """Test AWS config defaults."""
    config = AWSConfig()
    assert config.profile is None
    assert config.security_group == "docker-machine"


def test_google_config_defaults():
    """Test Google config defaults."""
    config = GoogleConfig()
    assert config.auth_token_path == "~/.docker/machine/gce_token"
    assert config.firewall_rule == "cockroach"
    assert config.oauth is None


def test_oauth_client_config_defaults():
    """Test OAuth client endpoints default to Google's out-of-band flow."""
    client = OAuthClientConfig(client_id="id", client_secret="secret")
    assert client.redirect_uri == "urn:ietf:wg:oauth:2.0:oob"
    assert client.scopes == ("https://www.googleapis.com/auth/compute",)

    installed = client.to_client_config()["installed"]
    assert installed["client_id"] == "id"
    assert installed["redirect_uris"] == ["urn:ietf:wg:oauth:2.0:oob"]
    assert installed["token_uri"] == client.token_uri


def test_oauth_client_config_is_frozen():
    """Test the OAuth client config cannot be modified."""
    client = OAuthClientConfig(client_id="id", client_secret="secret")

    with pytest.raises(ValidationError):
        client.client_id = "other"


@pytest.mark.parametrize("port", [0, -1, 65536])
def test_port_out_of_range(port):
    """Test the port must be a valid TCP port."""
    with pytest.raises(ValidationError):
        ProdConfig(port=port)


@pytest.mark.parametrize(
    "region,provider,location",
    [
        ("aws:us-east-1", "aws", "us-east-1"),
        ("gce:us-central1-a", "gce", "us-central1-a"),
    ],
)
def test_region_split(region, provider, location):
    """Test region is split into provider and location."""
    config = ProdConfig(region=region)
    assert config.provider == provider
    assert config.location == location


@pytest.mark.parametrize("region", ["us-east-1", "aws:", ":us-east-1"])
def test_region_malformed(region):
    """Test regions without provider and location are rejected."""
    with pytest.raises(ConfigurationError):
        ProdConfig(region=region).provider


def test_region_unsupported_provider():
    """Test unknown providers are rejected."""
    with pytest.raises(ConfigurationError, match="unsupported provider 'azure'"):
        ProdConfig(region="azure:eastus").location


def test_prod_config_from_file():
    """Test loading config from YAML file."""
    temp_path = _write_config(
        {
            "port": 26257,
            "region": "gce:us-central1-a",
            "google": {
                "project": "my-project",
                "oauth": {"client_id": "id", "client_secret": "secret"},
            },
        }
    )

    try:
        config = ProdConfig.from_file(temp_path)
        assert config.port == 26257
        assert config.provider == "gce"
        assert config.google.project == "my-project"
        assert config.google.oauth.client_id == "id"
    finally:
        Path(temp_path).unlink()


def test_prod_config_from_empty_file():
    """Test an empty file gives defaults."""
    temp_path = _write_config("")

    try:
        assert ProdConfig.from_file(temp_path) == ProdConfig()
    finally:
        Path(temp_path).unlink()


def test_prod_config_from_file_not_found():
    """Test error when config file not found."""
    with pytest.raises(ConfigurationError, match="Configuration file not found"):
        ProdConfig.from_file("/nonexistent/config.yaml")


def test_prod_config_optional_file_missing():
    """Test a missing optional file gives defaults."""
    config = ProdConfig.from_file("/nonexistent/config.yaml", must_exist=False)
    assert config == ProdConfig()


def test_prod_config_from_file_invalid_yaml():
    """Test error when YAML is invalid."""
    temp_path = _write_config("invalid: yaml: content: [")

    try:
        with pytest.raises(ConfigurationError, match="Failed to load configuration"):
            ProdConfig.from_file(temp_path)
    finally:
        Path(temp_path).unlink()


def test_prod_config_from_file_invalid_schema():
    """Test error when config schema is invalid."""
    temp_path = _write_config({"port": "not-a-port"})

    try:
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            ProdConfig.from_file(temp_path)
    finally:
        Path(temp_path).unlink()


def test_to_dict():
    """Test converting config to dictionary."""
    data = ProdConfig(port=26257).to_dict()

    assert data["port"] == 26257
    assert data["aws"]["security_group"] == "docker-machine"
    assert data["google"]["oauth"] is None
