"""docker-machine wrapper for node lifecycle operations."""

import json
import subprocess
from typing import Any

from cockroach_prod.core.exceptions import DockerMachineError, DockerMachineNotFoundError
from cockroach_prod.core.models import DriverDescriptor, MachineInfo
from cockroach_prod.utils.logging import get_logger

logger = get_logger(__name__)

VERSION_PREFIX = "docker-machine version "


class DockerMachineWrapper:
    """Wrapper for the docker-machine command-line tool.

    Lifecycle commands (create, start, stop) inherit the caller's terminal so
    provider prompts reach the user. Query commands (ls, inspect, config)
    capture their output.
    """

    def __init__(self, binary: str = "docker-machine"):
        """Initialize docker-machine wrapper.

        Args:
            binary: Name or path of the docker-machine executable
        """
        self.binary = binary

        logger.debug("docker_machine_wrapper_initialized", binary=binary)

    def _run_command(
        self, args: list[str], interactive: bool = False, check: bool = True
    ) -> subprocess.CompletedProcess:
        """Run docker-machine command.

        Args:
            args: Command arguments
            interactive: Attach the command to the caller's stdin/stdout/stderr
            check: Raise exception on non-zero exit code

        Returns:
            CompletedProcess instance; stdout/stderr are None when interactive

        Raises:
            DockerMachineNotFoundError: If the binary cannot be executed
            DockerMachineError: If command fails
        """
        cmd = [self.binary] + args

        logger.debug("running_docker_machine_command", command=" ".join(cmd))

        try:
            if interactive:
                result = subprocess.run(cmd, check=check)
            else:
                result = subprocess.run(cmd, capture_output=True, text=True, check=check)

            logger.debug(
                "docker_machine_command_completed",
                returncode=result.returncode,
            )

            return result

        except subprocess.CalledProcessError as e:
            logger.error(
                "docker_machine_command_failed",
                command=" ".join(cmd),
                returncode=e.returncode,
                stderr=e.stderr,
            )
            raise DockerMachineError(
                f"{' '.join(cmd)} exited with status {e.returncode}: {e.stderr or ''}".rstrip(),
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e
        except FileNotFoundError as e:
            logger.error("docker_machine_not_found", binary=self.binary)
            raise DockerMachineNotFoundError(
                f"{self.binary} command not found. Please install docker-machine."
            ) from e

    def _output_lines(self, args: list[str]) -> list[str]:
        result = self._run_command(args)
        return result.stdout.splitlines()

    def check_version(self) -> str:
        """Verify that docker-machine is installed and runnable.

        Returns:
            The version line reported by docker-machine

        Raises:
            DockerMachineNotFoundError: If docker-machine is not installed
            DockerMachineError: If the version output is not recognized
        """
        result = self._run_command(["-v"])
        output = result.stdout

        if not output.startswith(VERSION_PREFIX):
            logger.error("docker_machine_bad_version_output", output=output)
            raise DockerMachineError(
                f"bad output {output!r} for {self.binary} -v, "
                f"expected string prefix {VERSION_PREFIX!r}"
            )

        version = output.strip()
        logger.debug("docker_machine_version_checked", version=version)
        return version

    def list_machines(self) -> list[str]:
        """List all machine names known to docker-machine.

        Returns:
            Machine names, in docker-machine's order
        """
        machines = [line.strip() for line in self._output_lines(["ls", "-q"])]
        machines = [m for m in machines if m]

        logger.debug("machines_listed", count=len(machines))
        return machines

    def inspect(self, name: str) -> dict[str, Any]:
        """Get the machine description from docker-machine.

        The schema belongs to docker-machine, so the result is returned as
        decoded JSON without further interpretation.

        Args:
            name: Machine name

        Returns:
            Decoded inspect output

        Raises:
            DockerMachineError: If the command fails or returns invalid JSON
        """
        result = self._run_command(["inspect", name])

        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            logger.error("inspect_json_parse_failed", machine=name, error=str(e))
            raise DockerMachineError(f"Failed to parse inspect output for {name}") from e

    def machine_info(self, name: str) -> MachineInfo:
        """Get the few inspect fields we display.

        Args:
            name: Machine name

        Returns:
            MachineInfo record
        """
        data = self.inspect(name)
        driver = data.get("Driver") or {}

        return MachineInfo(
            name=data.get("Name", name),
            driver_name=data.get("DriverName"),
            ip_address=driver.get("IPAddress") if isinstance(driver, dict) else None,
        )

    def docker_flags(self, name: str) -> list[str]:
        """Get the flags docker needs to talk to the machine's daemon.

        docker-machine prints them on a single line.

        Args:
            name: Machine name

        Returns:
            Individual flags

        Raises:
            DockerMachineError: If the output is not a single line
        """
        contents = self._output_lines(["config", name])

        if len(contents) != 1:
            raise DockerMachineError(f"expected a single output line, got: {contents}")
        return contents[0].split(" ")

    def create(self, descriptor: DriverDescriptor, name: str) -> None:
        """Create a new machine with the given driver.

        Args:
            descriptor: Driver name and create arguments
            name: Machine name
        """
        args = ["create", "--driver", descriptor.name, *descriptor.args, name]

        logger.info("creating_machine", machine=name, driver=descriptor.name)
        self._run_command(args, interactive=True)
        logger.info("machine_created", machine=name)

    def start(self, name: str) -> None:
        """Start the given machine.

        Args:
            name: Machine name
        """
        logger.info("starting_machine", machine=name)
        self._run_command(["start", name], interactive=True)

    def stop(self, name: str) -> None:
        """Stop the given machine.

        Args:
            name: Machine name
        """
        logger.info("stopping_machine", machine=name)
        self._run_command(["stop", name], interactive=True)
