"""Amazon EC2 driver implementing the Driver interface."""

from cockroach_prod.clients.aws_client import AWSClient
from cockroach_prod.core.config import AWSConfig
from cockroach_prod.interfaces.driver import Driver
from cockroach_prod.utils.logging import get_logger

logger = get_logger(__name__)


class AmazonDriver(Driver):
    """docker-machine ``amazonec2`` driver.

    Credentials come from the default boto3 chain and are passed to
    docker-machine explicitly. Before machines are created, the cockroach
    port is opened on the docker-machine security group.
    """

    def __init__(
        self,
        region: str,
        port: int,
        config: AWSConfig | None = None,
        client: AWSClient | None = None,
    ):
        """Initialize Amazon driver.

        Args:
            region: AWS region, e.g. us-east-1
            port: Cockroach port to open
            config: AWS settings (defaults if None)
            client: AWS client (created from region/profile if None)
        """
        self.region = region
        self.port = port
        self.config = config or AWSConfig()
        self.client = client or AWSClient(region=region, profile=self.config.profile)

        logger.debug("amazon_driver_initialized", region=region)

    @property
    def name(self) -> str:
        return "amazonec2"

    def create_args(self) -> list[str]:
        access_key, secret_key = self.client.load_credentials()

        args = [
            "--amazonec2-access-key", access_key,
            "--amazonec2-secret-key", secret_key,
            "--amazonec2-region", self.region,
        ]  # fmt: skip
        if self.config.zone:
            args += ["--amazonec2-zone", self.config.zone]
        if self.config.vpc_id:
            args += ["--amazonec2-vpc-id", self.config.vpc_id]
        if self.config.instance_type:
            args += ["--amazonec2-instance-type", self.config.instance_type]
        return args

    def prepare(self) -> None:
        """Open the cockroach port on the docker-machine security group.

        Raises:
            SecurityGroupNotFoundError: If docker-machine has not created the group yet
            AWSError: If the rule cannot be added
        """
        group_id = self.client.find_security_group(self.config.security_group)
        self.client.ensure_ingress_rule(self.port, group_id)
