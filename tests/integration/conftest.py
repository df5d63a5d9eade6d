"""Integration test fixtures and configuration."""

import os
import shutil

import boto3
import pytest
from botocore.exceptions import ClientError, NoCredentialsError


@pytest.fixture
def aws_test_region() -> str:
    """AWS region for integration tests."""
    return os.getenv("AWS_TEST_REGION", "us-east-1")


@pytest.fixture
def aws_test_security_group() -> str:
    """Security group expected to exist in the test region."""
    return os.getenv("AWS_TEST_SECURITY_GROUP", "docker-machine")


@pytest.fixture
def skip_if_no_aws_credentials():
    """Skip test if AWS credentials are not available."""
    try:
        sts = boto3.client("sts")
        sts.get_caller_identity()
    except (NoCredentialsError, ClientError) as e:
        pytest.skip(f"AWS credentials not available: {e}")


@pytest.fixture
def docker_machine_binary() -> str:
    """docker-machine executable, skipping the test if it is not installed."""
    binary = os.getenv("DOCKER_MACHINE_BINARY", "docker-machine")
    if shutil.which(binary) is None:
        pytest.skip(f"{binary} not installed")
    return binary
