"""Core data models for cockroach-prod."""

from datetime import UTC, datetime, timedelta
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class DriverDescriptor(BaseModel):
    """docker-machine driver name and create arguments for one create call."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="docker-machine driver name")
    args: tuple[str, ...] = Field(default=(), description="Arguments for docker-machine create")


class MachineInfo(BaseModel):
    """Subset of docker-machine inspect output that we display."""

    name: str
    driver_name: str | None = None
    ip_address: str | None = None


class OAuthToken(BaseModel):
    """OAuth access/refresh token pair as stored in the token cache."""

    EXPIRY_DELTA: ClassVar[timedelta] = timedelta(seconds=10)

    access_token: str
    refresh_token: str | None = None
    expiry: datetime | None = None
    token_type: str = "Bearer"

    @property
    def expired(self) -> bool:
        """Whether the access token has expired (tokens without expiry never do)."""
        if self.expiry is None:
            return False
        expiry = self.expiry if self.expiry.tzinfo else self.expiry.replace(tzinfo=UTC)
        return datetime.now(UTC) + self.EXPIRY_DELTA >= expiry

    @classmethod
    def from_token_response(cls, response: dict[str, Any]) -> "OAuthToken":
        """Build a token from an OAuth token endpoint response.

        Args:
            response: Decoded token response (access_token, expires_at/expires_in, ...)

        Returns:
            OAuthToken instance
        """
        expiry = None
        if response.get("expires_at") is not None:
            expiry = datetime.fromtimestamp(float(response["expires_at"]), UTC)
        elif response.get("expires_in") is not None:
            expiry = datetime.now(UTC) + timedelta(seconds=int(response["expires_in"]))

        return cls(
            access_token=response["access_token"],
            refresh_token=response.get("refresh_token"),
            expiry=expiry,
            token_type=response.get("token_type") or "Bearer",
        )
