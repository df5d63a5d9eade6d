"""OAuth token acquisition and caching for Google Compute Engine.

The token is stored as a single JSON record at one well-known path. If that
file is missing or unusable, the user is sent through the browser consent
flow and the resulting token is written back to the file.

The cache file is not locked: two operators sharing a home directory can race
on it. A torn or corrupt file only costs a new consent round trip.
"""

from __future__ import annotations

import contextlib
import os
import subprocess
import tempfile
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from datetime import UTC
from pathlib import Path

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from pydantic import ValidationError

from cockroach_prod.core.config import OAuthClientConfig
from cockroach_prod.core.exceptions import (
    CredentialExchangeError,
    TokenCacheError,
    TokenPersistenceError,
)
from cockroach_prod.core.models import OAuthToken
from cockroach_prod.utils.logging import get_logger

logger = get_logger(__name__)

BROWSER_LAUNCHERS = ("xdg-open", "google-chrome", "open")


def token_to_credentials(token: OAuthToken, client: OAuthClientConfig) -> Credentials:
    """Build google-auth credentials from a cached token.

    Args:
        token: Cached token
        client: OAuth client the token was issued to

    Returns:
        Credentials usable by Google API clients (refreshable if the token
        carries a refresh token)
    """
    expiry = None
    if token.expiry is not None:
        # google-auth compares expiry against naive UTC timestamps
        expiry = token.expiry.astimezone(UTC).replace(tzinfo=None)

    return Credentials(
        token=token.access_token,
        refresh_token=token.refresh_token,
        token_uri=client.token_uri,
        client_id=client.client_id,
        client_secret=client.client_secret,
        scopes=list(client.scopes),
        expiry=expiry,
    )


def credentials_to_token(credentials: Credentials) -> OAuthToken:
    """Convert refreshed google-auth credentials back into a cache record."""
    expiry = credentials.expiry.replace(tzinfo=UTC) if credentials.expiry else None
    return OAuthToken(
        access_token=credentials.token,
        refresh_token=credentials.refresh_token,
        expiry=expiry,
    )


def open_url(url: str, launchers: Sequence[str] = BROWSER_LAUNCHERS) -> bool:
    """Try to open a URL in a local browser.

    Launchers are tried in order and the first one that exits cleanly wins.

    Args:
        url: URL to open
        launchers: Candidate launcher commands

    Returns:
        True if some launcher succeeded, False if the user must open it manually
    """
    for launcher in launchers:
        try:
            subprocess.run([launcher, url], check=True, capture_output=True)
        except (OSError, subprocess.CalledProcessError) as e:
            logger.debug("browser_launcher_failed", launcher=launcher, error=str(e))
            continue
        logger.debug("browser_launched", launcher=launcher)
        return True
    return False


def _make_private_dirs(path: Path) -> None:
    """Create path and any missing ancestors, each with mode 0700."""
    missing = []
    current = path
    while not current.exists() and current != current.parent:
        missing.append(current)
        current = current.parent

    for directory in reversed(missing):
        with contextlib.suppress(FileExistsError):
            os.mkdir(directory, mode=0o700)

    # Fails if some component exists but is not a directory.
    os.makedirs(path, mode=0o700, exist_ok=True)


class TokenSource(ABC):
    """Something that produces an OAuth token."""

    @abstractmethod
    def token(self) -> OAuthToken:
        """Return a token.

        Raises:
            CredentialError: If no token can be produced
        """


class FileTokenSource(TokenSource):
    """Token source backed by a single JSON file."""

    def __init__(self, path: str | Path):
        """Initialize file token source.

        Args:
            path: Token file path (``~`` is expanded)
        """
        self.path = Path(path).expanduser()

    def token(self) -> OAuthToken:
        """Load the cached token.

        Expired tokens are returned only when they can be refreshed.

        Raises:
            TokenCacheError: If the file is missing, unreadable or unusable
        """
        try:
            data = self.path.read_text()
        except OSError as e:
            raise TokenCacheError(f"cannot read token cache {self.path}: {e}") from e
        except UnicodeDecodeError as e:
            raise TokenCacheError(f"corrupt token cache {self.path}") from e

        try:
            token = OAuthToken.model_validate_json(data)
        except ValidationError as e:
            raise TokenCacheError(f"corrupt token cache {self.path}") from e

        if token.expired and not token.refresh_token:
            raise TokenCacheError(f"cached token in {self.path} expired and cannot be refreshed")

        return token

    def put_token(self, token: OAuthToken) -> None:
        """Store the token, replacing any previous one.

        The parent directory is created with mode 0700 and the file is
        written with mode 0600 through a temporary file renamed into place,
        so readers never see a partial record.

        Args:
            token: Token to store

        Raises:
            TokenPersistenceError: On the first failing step (encoding,
                directory creation, write, close or rename)
        """
        try:
            payload = token.model_dump_json()
        except (TypeError, ValueError) as e:
            raise TokenPersistenceError(f"failed to encode token: {e}") from e

        parent = self.path.parent
        try:
            _make_private_dirs(parent)
        except OSError as e:
            raise TokenPersistenceError(f"failed to create directory {parent}: {e}") from e

        try:
            fd, tmp_name = tempfile.mkstemp(dir=parent, prefix=f".{self.path.name}.")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise TokenPersistenceError(f"failed to write token cache {self.path}: {e}") from e

        logger.debug("token_cached", path=str(self.path))


class BrowserTokenSource(TokenSource):
    """Token source that falls back to the browser consent flow.

    The authorization code is read through ``prompt`` (standard input by
    default) after the consent page has been shown.
    """

    def __init__(
        self,
        client: OAuthClientConfig,
        base: FileTokenSource,
        prompt: Callable[[str], str] = input,
        launchers: Sequence[str] = BROWSER_LAUNCHERS,
    ):
        self.client = client
        self.base = base
        self.prompt = prompt
        self.launchers = launchers

    def token(self) -> OAuthToken:
        """Return the cached token, running the consent flow if there is none."""
        try:
            return self.base.token()
        except TokenCacheError as e:
            logger.info("token_cache_miss", reason=str(e))

        return self.authorize()

    def authorize(self) -> OAuthToken:
        """Run the interactive consent flow and cache the resulting token.

        Raises:
            CredentialExchangeError: If no code is entered or the exchange fails
            TokenPersistenceError: If the new token cannot be cached
        """
        flow = Flow.from_client_config(
            self.client.to_client_config(),
            scopes=list(self.client.scopes),
            redirect_uri=self.client.redirect_uri,
        )

        state = f"st{time.time_ns()}"
        auth_url, _ = flow.authorization_url(state=state, prompt="consent")

        logger.info(
            "opening_auth_url",
            url=auth_url,
            hint="If the URL doesn't open please open it manually and copy the code here.",
        )
        if not open_url(auth_url, self.launchers):
            logger.warning("browser_not_opened", url=auth_url)

        try:
            code = self.prompt("Enter code: ").strip()
        except EOFError:
            code = ""
        if not code:
            raise CredentialExchangeError("no authorization code entered")

        try:
            response = flow.fetch_token(code=code)
            token = OAuthToken.from_token_response(response)
        except Exception as e:
            logger.error("code_exchange_failed", error=str(e))
            raise CredentialExchangeError(f"problem exchanging code: {e}") from e

        self.base.put_token(token)
        logger.info("token_acquired", path=str(self.base.path))
        return token


class TokenCache:
    """Process-wide access point for the Google OAuth token.

    Reuses the in-memory token while it is valid, then the cached file,
    refreshing expired tokens and falling back to the consent flow.
    """

    def __init__(
        self,
        path: str | Path,
        client: OAuthClientConfig,
        prompt: Callable[[str], str] = input,
        launchers: Sequence[str] = BROWSER_LAUNCHERS,
    ):
        """Initialize token cache.

        Args:
            path: Token file path
            client: OAuth client configuration
            prompt: Reads the authorization code from the user
            launchers: Browser launcher commands to try
        """
        self.client = client
        self.file_source = FileTokenSource(path)
        self.source = BrowserTokenSource(client, self.file_source, prompt, launchers)
        self._token: OAuthToken | None = None

    @property
    def path(self) -> Path:
        return self.file_source.path

    def get_token(self) -> OAuthToken:
        """Get a valid token.

        Raises:
            CredentialError: If no token can be obtained
        """
        if self._token is not None and not self._token.expired:
            return self._token

        token = self.source.token()
        if token.expired:
            token = self._refresh(token)

        self._token = token
        return token

    def put_token(self, token: OAuthToken) -> None:
        """Store a token in the cache file and in memory."""
        self.file_source.put_token(token)
        self._token = token

    def credentials(self) -> Credentials:
        """Get google-auth credentials for API clients."""
        return token_to_credentials(self.get_token(), self.client)

    def _refresh(self, token: OAuthToken) -> OAuthToken:
        credentials = token_to_credentials(token, self.client)
        try:
            credentials.refresh(Request())
        except RefreshError as e:
            logger.warning("token_refresh_failed", error=str(e))
            return self.source.authorize()

        refreshed = credentials_to_token(credentials)
        self.file_source.put_token(refreshed)
        logger.info("token_refreshed", path=str(self.path))
        return refreshed
