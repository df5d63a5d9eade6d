"""Driver interface for docker-machine provider backends."""

from abc import ABC, abstractmethod

from cockroach_prod.core.models import DriverDescriptor


class Driver(ABC):
    """Abstract interface for a docker-machine driver.

    A driver names the docker-machine backend for one cloud provider and
    builds the arguments ``docker-machine create`` needs for it. Providers
    that need setup before a machine can be created (network rules,
    credentials) do it in ``prepare``.

    Implementation Note:
    Callers only use this interface; adding a provider means adding a
    subclass, not changing callers.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """docker-machine driver name (value of ``--driver``)."""

    @abstractmethod
    def create_args(self) -> list[str]:
        """Build the provider flags for ``docker-machine create``.

        Returns:
            Ordered flag list

        Raises:
            CockroachProdError: If required settings or credentials are missing
        """

    def prepare(self) -> None:  # noqa: B027
        """Run provider setup before machines are created. No-op by default."""

    def descriptor(self) -> DriverDescriptor:
        """Snapshot driver name and create arguments for one create call."""
        return DriverDescriptor(name=self.name, args=tuple(self.create_args()))
