"""Integration tests for AWS client."""

import pytest

from cockroach_prod.clients.aws_client import AWSClient
from cockroach_prod.core.exceptions import SecurityGroupNotFoundError


@pytest.mark.integration
class TestAWSClientIntegration:
    """Integration tests for AWSClient with real AWS services."""

    def test_client_initialization(self, aws_test_region: str, skip_if_no_aws_credentials):
        """Test AWS client initializes with valid credentials."""
        client = AWSClient(region=aws_test_region)

        assert client.region == aws_test_region
        assert client.session is not None
        assert client.ec2 is not None

    def test_load_credentials(self, aws_test_region: str, skip_if_no_aws_credentials):
        """Test credentials are resolved from the default chain."""
        client = AWSClient(region=aws_test_region)

        access_key, secret_key = client.load_credentials()

        assert access_key
        assert secret_key

    def test_find_security_group_not_found(
        self, aws_test_region: str, skip_if_no_aws_credentials
    ):
        """Test a missing group raises SecurityGroupNotFoundError."""
        client = AWSClient(region=aws_test_region)

        with pytest.raises(SecurityGroupNotFoundError):
            client.find_security_group("cockroach-prod-nonexistent-12345")

    def test_ensure_ingress_rule_twice(
        self, aws_test_region: str, aws_test_security_group: str, skip_if_no_aws_credentials
    ):
        """Test adding the same rule twice succeeds."""
        client = AWSClient(region=aws_test_region)
        try:
            group_id = client.find_security_group(aws_test_security_group)
        except SecurityGroupNotFoundError:
            pytest.skip(f"security group {aws_test_security_group} not present")

        client.ensure_ingress_rule(8080, group_id)
        client.ensure_ingress_rule(8080, group_id)
