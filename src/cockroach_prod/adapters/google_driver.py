"""Google Compute Engine driver implementing the Driver interface."""

from collections.abc import Callable

from cockroach_prod.clients.gce_client import GoogleComputeClient
from cockroach_prod.core.config import GoogleConfig
from cockroach_prod.core.exceptions import ConfigurationError
from cockroach_prod.interfaces.driver import Driver
from cockroach_prod.utils.logging import get_logger
from cockroach_prod.utils.token_cache import TokenCache

logger = get_logger(__name__)


class GoogleDriver(Driver):
    """docker-machine ``google`` driver.

    Before machines are created, an OAuth token is obtained (from the cache
    or through the consent flow) and used to open the cockroach port in the
    project's firewall.
    """

    def __init__(
        self,
        zone: str,
        port: int,
        config: GoogleConfig,
        token_cache: TokenCache | None = None,
        compute_factory: Callable[..., GoogleComputeClient] = GoogleComputeClient,
    ):
        """Initialize Google driver.

        Args:
            zone: GCE zone, e.g. us-central1-a
            port: Cockroach port to open
            config: Google settings; project and oauth client are required
            token_cache: Token cache (built from config if None)
            compute_factory: Builds the compute client from (project, credentials)

        Raises:
            ConfigurationError: If project or oauth client settings are missing
        """
        if not config.project:
            raise ConfigurationError("google.project must be set to use the gce provider")

        if token_cache is None:
            if config.oauth is None:
                raise ConfigurationError("google.oauth must be set to use the gce provider")
            token_cache = TokenCache(config.auth_token_path, config.oauth)

        self.zone = zone
        self.port = port
        self.config = config
        self.project = config.project
        self.token_cache = token_cache
        self.compute_factory = compute_factory

        logger.debug("google_driver_initialized", project=self.project, zone=zone)

    @property
    def name(self) -> str:
        return "google"

    def create_args(self) -> list[str]:
        args = [
            "--google-project", self.project,
            "--google-zone", self.zone,
        ]  # fmt: skip
        if self.config.machine_type:
            args += ["--google-machine-type", self.config.machine_type]
        return args

    def prepare(self) -> None:
        """Acquire OAuth credentials and open the cockroach port.

        Raises:
            CredentialError: If no token can be obtained
            GoogleCloudError: If the firewall rule cannot be created
        """
        credentials = self.token_cache.credentials()
        compute = self.compute_factory(self.project, credentials)
        compute.ensure_firewall_rule(self.port, self.config.firewall_rule)
