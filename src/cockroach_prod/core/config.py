"""Configuration management for cockroach-prod."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from cockroach_prod.core.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = "~/.cockroach-prod/config.yaml"

SUPPORTED_PROVIDERS = ("aws", "gce")


class OAuthClientConfig(BaseModel):
    """OAuth client used for the Google consent flow.

    Immutable: one value is built from the config file and handed to the
    token cache.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str
    auth_uri: str = "https://accounts.google.com/o/oauth2/auth"
    token_uri: str = "https://accounts.google.com/o/oauth2/token"
    redirect_uri: str = "urn:ietf:wg:oauth:2.0:oob"
    scopes: tuple[str, ...] = ("https://www.googleapis.com/auth/compute",)

    def to_client_config(self) -> dict[str, Any]:
        """Convert to the "installed app" client secrets layout.

        Returns:
            Dictionary accepted by google_auth_oauthlib Flow.from_client_config
        """
        return {
            "installed": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": self.auth_uri,
                "token_uri": self.token_uri,
                "redirect_uris": [self.redirect_uri],
            }
        }


class DockerMachineConfig(BaseModel):
    """docker-machine configuration."""

    binary: str = "docker-machine"


class AWSConfig(BaseModel):
    """AWS configuration."""

    profile: str | None = None
    security_group: str = "docker-machine"
    instance_type: str | None = None
    zone: str | None = None
    vpc_id: str | None = None


class GoogleConfig(BaseModel):
    """Google Compute Engine configuration."""

    project: str | None = None
    machine_type: str | None = None
    auth_token_path: str = "~/.docker/machine/gce_token"
    firewall_rule: str = "cockroach"
    oauth: OAuthClientConfig | None = None


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"
    output: str = "stderr"


class ProdConfig(BaseModel):
    """Main cockroach-prod configuration."""

    certs: str = "certs"
    port: int = Field(default=8080, gt=0, lt=65536)
    region: str = "aws:us-east-1"
    docker_machine: DockerMachineConfig = Field(default_factory=DockerMachineConfig)
    aws: AWSConfig = Field(default_factory=AWSConfig)
    google: GoogleConfig = Field(default_factory=GoogleConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def provider(self) -> str:
        """Cloud provider prefix of the region, e.g. "aws"."""
        return self._split_region()[0]

    @property
    def location(self) -> str:
        """Provider-specific location of the region, e.g. "us-east-1"."""
        return self._split_region()[1]

    def _split_region(self) -> tuple[str, str]:
        provider, sep, location = self.region.partition(":")
        if not sep or not location:
            raise ConfigurationError(
                f"invalid region {self.region!r}, expected <provider>:<location>"
            )
        if provider not in SUPPORTED_PROVIDERS:
            raise ConfigurationError(
                f"unsupported provider {provider!r}, expected one of {', '.join(SUPPORTED_PROVIDERS)}"
            )
        return provider, location

    @classmethod
    def from_file(cls, path: str | Path, must_exist: bool = True) -> "ProdConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to configuration file
            must_exist: Raise if the file is missing instead of using defaults

        Returns:
            ProdConfig instance

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        config_path = Path(path).expanduser()

        if not config_path.exists():
            if must_exist:
                raise ConfigurationError(f"Configuration file not found: {config_path}")
            return cls()

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        try:
            return cls(**data)
        except Exception as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation
        """
        return self.model_dump()
