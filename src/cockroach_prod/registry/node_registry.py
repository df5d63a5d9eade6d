"""Cockroach node naming and inventory.

Nodes are docker-machine machines named ``cockroach-<index>``. There is no
separate registry: the node list is derived on demand from ``docker-machine ls``
and machines whose names do not match the pattern exactly are ignored.
"""

import re
from collections.abc import Iterable

from cockroach_prod.clients.docker_machine import DockerMachineWrapper
from cockroach_prod.core.exceptions import NodeNameParseError
from cockroach_prod.utils.logging import get_logger

logger = get_logger(__name__)

NODE_NAME_FORMAT = "cockroach-{index}"
NODE_NAME_PATTERN = re.compile(r"cockroach-([0-9]+)")


def make_node_name(index: int) -> str:
    """Generate the node name for the given index."""
    return NODE_NAME_FORMAT.format(index=index)


def is_cluster_node(name: str) -> bool:
    """Check whether a machine name follows the cockroach node convention."""
    return NODE_NAME_PATTERN.fullmatch(name) is not None


def parse_node_index(name: str) -> int | None:
    """Extract the node index from a node name.

    Args:
        name: Candidate machine name

    Returns:
        The index, or None if the name is not a cockroach node name
    """
    match = NODE_NAME_PATTERN.fullmatch(name)
    if match is None:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        return None


def filter_cluster_nodes(names: Iterable[str]) -> list[str]:
    """Keep only cockroach node names, preserving order."""
    return [name for name in names if is_cluster_node(name)]


def get_largest_node_index(names: Iterable[str]) -> int:
    """Return the largest node index in use.

    This is the largest index seen, not the next free one. Duplicate indices
    are not checked.

    Args:
        names: Node names, normally the output of filter_cluster_nodes

    Returns:
        Largest index, or 0 if no names are given

    Raises:
        NodeNameParseError: If any entry is not a valid node name
    """
    largest = 0
    for name in names:
        index = parse_node_index(name)
        if index is None:
            raise NodeNameParseError(name)
        largest = max(largest, index)
    return largest


class NodeRegistry:
    """Derives the cockroach node inventory from docker-machine."""

    def __init__(self, docker_machine: DockerMachineWrapper):
        """Initialize node registry.

        Args:
            docker_machine: docker-machine wrapper used for listing
        """
        self.docker_machine = docker_machine

    def list_nodes(self) -> list[str]:
        """List machines that are cockroach nodes.

        Returns:
            Node names in docker-machine's order
        """
        nodes = filter_cluster_nodes(self.docker_machine.list_machines())

        logger.debug("cluster_nodes_listed", count=len(nodes))
        return nodes

    def next_free_index(self, nodes: list[str] | None = None) -> int:
        """Compute the index of the next node to create.

        Args:
            nodes: Current node names (listed from docker-machine if None)

        Returns:
            0 for an empty cluster, largest index + 1 otherwise
        """
        if nodes is None:
            nodes = self.list_nodes()
        if not nodes:
            return 0
        return get_largest_node_index(nodes) + 1
