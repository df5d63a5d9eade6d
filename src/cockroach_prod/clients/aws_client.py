"""AWS client for EC2 security group operations."""

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from cockroach_prod.core.exceptions import AWSError, SecurityGroupNotFoundError
from cockroach_prod.utils.logging import get_logger

logger = get_logger(__name__)

# Security group created by the docker-machine amazonec2 driver.
DEFAULT_SECURITY_GROUP = "docker-machine"
ALL_IP_ADDRESSES = "0.0.0.0/0"
COCKROACH_PROTOCOL = "tcp"

SECURITY_RULE_DUPLICATE_ERROR = "InvalidPermission.Duplicate"
SECURITY_GROUP_NOT_FOUND_ERROR = "InvalidGroup.NotFound"


class AWSClient:
    """AWS client for credential lookup and EC2 security groups."""

    def __init__(
        self,
        region: str = "us-east-1",
        profile: str | None = None,
        session: boto3.Session | None = None,
    ):
        """Initialize AWS client.

        Args:
            region: AWS region
            profile: AWS profile name (optional)
            session: Existing boto3 session (optional, overrides profile)
        """
        self.region = region
        self.profile = profile

        if session:
            self.session = session
        elif profile:
            self.session = boto3.Session(profile_name=profile, region_name=region)
        else:
            self.session = boto3.Session(region_name=region)

        self.ec2 = self.session.client("ec2")

        logger.debug("aws_client_initialized", region=region, profile=profile)

    def load_credentials(self) -> tuple[str, str]:
        """Load AWS credentials from the default chain (env, ~/.aws/credentials, ...).

        Returns:
            Tuple of (access_key_id, secret_access_key)

        Raises:
            AWSError: If no credentials are configured
        """
        credentials = self.session.get_credentials()
        if credentials is None:
            raise AWSError("No AWS credentials found. Configure them with `aws configure`.")

        frozen = credentials.get_frozen_credentials()
        return frozen.access_key, frozen.secret_key

    def find_security_group(self, group_name: str = DEFAULT_SECURITY_GROUP) -> str:
        """Find the security group created by docker-machine.

        The group is never created here; its absence is an error.

        Args:
            group_name: Security group name

        Returns:
            Security group ID

        Raises:
            SecurityGroupNotFoundError: If no group has that name
            AWSError: If the lookup fails
        """
        try:
            logger.debug("finding_security_group", group_name=group_name, region=self.region)

            response = self.ec2.describe_security_groups(GroupNames=[group_name])

        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            logger.error(
                "security_group_lookup_failed",
                group_name=group_name,
                error_code=error_code,
            )

            if error_code == SECURITY_GROUP_NOT_FOUND_ERROR:
                raise SecurityGroupNotFoundError(
                    f"security group with name {group_name!r} not found", error_code=error_code
                ) from e
            raise AWSError(
                f"Failed to describe security group {group_name}: {error_code}",
                error_code=error_code,
            ) from e
        except BotoCoreError as e:
            logger.error("security_group_lookup_failed", group_name=group_name, error=str(e))
            raise AWSError(f"Failed to describe security group {group_name}: {e}") from e

        groups = response.get("SecurityGroups", [])
        if not groups:
            raise SecurityGroupNotFoundError(f"security group with name {group_name!r} not found")

        group_id = groups[0]["GroupId"]
        logger.info("security_group_found", group_name=group_name, group_id=group_id)
        return group_id

    def ensure_ingress_rule(self, port: int, group_id: str) -> None:
        """Open the cockroach port to all addresses on the security group.

        A single world-open rule on the client port is used rather than
        per-node rules. An already existing rule counts as success.

        Args:
            port: TCP port to open (from and to)
            group_id: Security group ID

        Raises:
            AWSError: If the rule cannot be added for any other reason
        """
        try:
            logger.debug("authorizing_ingress", group_id=group_id, port=port)

            self.ec2.authorize_security_group_ingress(
                CidrIp=ALL_IP_ADDRESSES,
                FromPort=port,
                ToPort=port,
                IpProtocol=COCKROACH_PROTOCOL,
                GroupId=group_id,
            )

            logger.info("ingress_rule_added", group_id=group_id, port=port)

        except ClientError as e:
            error_code = e.response["Error"]["Code"]

            if error_code == SECURITY_RULE_DUPLICATE_ERROR:
                logger.info("ingress_rule_exists", group_id=group_id, port=port)
                return

            logger.error(
                "ingress_rule_failed",
                group_id=group_id,
                port=port,
                error_code=error_code,
            )
            raise AWSError(
                f"Failed to authorize ingress on {group_id} port {port}: {error_code}",
                error_code=error_code,
            ) from e
        except BotoCoreError as e:
            logger.error("ingress_rule_failed", group_id=group_id, port=port, error=str(e))
            raise AWSError(f"Failed to authorize ingress on {group_id} port {port}: {e}") from e
