"""Custom exceptions for cockroach-prod."""


class CockroachProdError(Exception):
    """Base exception for all cockroach-prod errors."""


class ConfigurationError(CockroachProdError):
    """Configuration-related errors."""


class DockerMachineError(CockroachProdError):
    """docker-machine invocation failed or produced unexpected output.

    Attributes:
        returncode: Exit status of the failed invocation, if it ran
        stderr: Captured standard error, if it was captured
    """

    def __init__(self, message: str, returncode: int | None = None, stderr: str | None = None):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class DockerMachineNotFoundError(DockerMachineError):
    """docker-machine binary is not installed or not on PATH."""


class NodeNameParseError(CockroachProdError):
    """A node name could not be parsed into a node index."""

    def __init__(self, node_name: str):
        super().__init__(f"invalid cockroach node name: {node_name}")
        self.node_name = node_name


class AWSError(CockroachProdError):
    """AWS operation failed."""

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code


class SecurityGroupNotFoundError(AWSError):
    """The docker-machine security group does not exist in the region."""


class GoogleCloudError(CockroachProdError):
    """Google Compute Engine operation failed."""


class CredentialError(CockroachProdError):
    """Base class for OAuth credential errors."""


class TokenCacheError(CredentialError):
    """Cached token is missing or unreadable."""


class CredentialExchangeError(CredentialError):
    """Authorization code could not be exchanged for a token."""


class TokenPersistenceError(CredentialError):
    """Token could not be written to the cache file."""
