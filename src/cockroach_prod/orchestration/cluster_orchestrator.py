"""Cluster orchestrator for creating and managing cockroach nodes."""

from typing import Any

from cockroach_prod.clients.docker_machine import DockerMachineWrapper
from cockroach_prod.core.models import MachineInfo
from cockroach_prod.interfaces.driver import Driver
from cockroach_prod.registry.node_registry import NodeRegistry, make_node_name
from cockroach_prod.utils.logging import get_logger

logger = get_logger(__name__)


class ClusterOrchestrator:
    """Orchestrates node creation and lifecycle through docker-machine.

    The orchestrator is written against the Driver interface only. It:
    - Verifies docker-machine is usable
    - Runs the driver's provider setup before creating machines
    - Picks node names from the current inventory
    - Starts, stops and describes existing nodes

    Indices are not reserved anywhere: two operators adding nodes at the
    same time can pick the same name.
    """

    def __init__(
        self,
        driver: Driver,
        docker_machine: DockerMachineWrapper,
        registry: NodeRegistry | None = None,
    ):
        """Initialize cluster orchestrator.

        Args:
            driver: Provider driver
            docker_machine: docker-machine wrapper
            registry: Node registry (built on docker_machine if None)
        """
        self.driver = driver
        self.docker_machine = docker_machine
        self.registry = registry or NodeRegistry(docker_machine)
        logger.debug("cluster_orchestrator_initialized", driver=driver.name)

    def add_nodes(self, count: int = 1) -> list[str]:
        """Create ``count`` new nodes after the highest existing index.

        Args:
            count: Number of nodes to create

        Returns:
            Names of the created nodes

        Raises:
            ValueError: If count is not positive
            CockroachProdError: If any step fails; nodes created before the
                failure are left in place
        """
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")

        self.docker_machine.check_version()

        logger.info("preparing_provider", driver=self.driver.name)
        self.driver.prepare()

        existing = self.registry.list_nodes()
        first_index = self.registry.next_free_index(existing)
        descriptor = self.driver.descriptor()

        logger.info(
            "adding_nodes",
            driver=descriptor.name,
            existing=len(existing),
            first_index=first_index,
            count=count,
        )

        created = []
        for index in range(first_index, first_index + count):
            name = make_node_name(index)
            self.docker_machine.create(descriptor, name)
            created.append(name)

        logger.info("nodes_added", nodes=created)
        return created

    def list_nodes(self) -> list[str]:
        """List cockroach nodes."""
        return self.registry.list_nodes()

    def start_nodes(self, names: list[str] | None = None) -> list[str]:
        """Start the given nodes, or every cockroach node if names is None.

        Returns:
            Names of the nodes started
        """
        nodes = self.registry.list_nodes() if names is None else names
        for name in nodes:
            self.docker_machine.start(name)
        return nodes

    def stop_nodes(self, names: list[str] | None = None) -> list[str]:
        """Stop the given nodes, or every cockroach node if names is None.

        Returns:
            Names of the nodes stopped
        """
        nodes = self.registry.list_nodes() if names is None else names
        for name in nodes:
            self.docker_machine.stop(name)
        return nodes

    def node_flags(self, name: str) -> list[str]:
        """Get docker flags for talking to a node's docker daemon."""
        return self.docker_machine.docker_flags(name)

    def inspect_node(self, name: str) -> dict[str, Any]:
        """Get docker-machine's raw description of a node."""
        return self.docker_machine.inspect(name)

    def node_info(self, name: str) -> MachineInfo:
        """Get the summary fields of a node."""
        return self.docker_machine.machine_info(name)
