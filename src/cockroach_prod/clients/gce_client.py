"""Google Compute Engine client for firewall operations."""

from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient import discovery
from googleapiclient.errors import HttpError

from cockroach_prod.core.exceptions import GoogleCloudError
from cockroach_prod.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_NETWORK = "global/networks/default"
# Network tag the docker-machine google driver puts on its instances.
DOCKER_MACHINE_TAG = "docker-machine"
ALREADY_EXISTS_STATUS = 409


class GoogleComputeClient:
    """Compute Engine client scoped to one project."""

    def __init__(self, project: str, credentials: Credentials, service: Any | None = None):
        """Initialize Compute Engine client.

        Args:
            project: GCP project ID
            credentials: OAuth credentials
            service: Prebuilt compute service (optional, for testing)
        """
        self.project = project
        self.service = service or discovery.build(
            "compute", "v1", credentials=credentials, cache_discovery=False
        )

        logger.debug("gce_client_initialized", project=project)

    def ensure_firewall_rule(self, port: int, rule_name: str = "cockroach") -> None:
        """Allow inbound TCP on the cockroach port to docker-machine instances.

        An existing rule with the same name counts as success.

        Args:
            port: TCP port to open
            rule_name: Firewall rule name

        Raises:
            GoogleCloudError: If the rule cannot be created
        """
        body = {
            "name": rule_name,
            "network": DEFAULT_NETWORK,
            "direction": "INGRESS",
            "sourceRanges": ["0.0.0.0/0"],
            "allowed": [{"IPProtocol": "tcp", "ports": [str(port)]}],
            "targetTags": [DOCKER_MACHINE_TAG],
        }

        try:
            logger.debug("inserting_firewall_rule", rule_name=rule_name, port=port)
            self.service.firewalls().insert(project=self.project, body=body).execute()
            logger.info("firewall_rule_added", rule_name=rule_name, port=port)

        except HttpError as e:
            if e.resp.status == ALREADY_EXISTS_STATUS:
                logger.info("firewall_rule_exists", rule_name=rule_name)
                return

            logger.error(
                "firewall_rule_failed",
                rule_name=rule_name,
                status=e.resp.status,
                error=str(e),
            )
            raise GoogleCloudError(f"Failed to create firewall rule {rule_name}: {e}") from e
