"""Main CLI entry point for cockroach-prod."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, NoReturn

import click
from click.core import ParameterSource
from rich.console import Console

from cockroach_prod import __version__
from cockroach_prod.core.config import DEFAULT_CONFIG_PATH
from cockroach_prod.core.exceptions import CockroachProdError, ConfigurationError
from cockroach_prod.utils.logging import get_logger, log_error, setup_logging

if TYPE_CHECKING:
    from cockroach_prod.clients.docker_machine import DockerMachineWrapper
    from cockroach_prod.core.config import ProdConfig
    from cockroach_prod.interfaces.driver import Driver
    from cockroach_prod.orchestration.cluster_orchestrator import ClusterOrchestrator
    from cockroach_prod.utils.token_cache import TokenCache

console = Console()
logger = get_logger(__name__)


class ProdContext:
    """Shared context for CLI commands with lazy initialization."""

    def __init__(self, config_path: str, config_required: bool = False):
        """Initialize context with config path.

        Args:
            config_path: Path to configuration file
            config_required: Fail if the file is missing instead of using defaults
        """
        self.config_path = config_path
        self.config_required = config_required
        self._config: ProdConfig | None = None
        self._docker_machine: DockerMachineWrapper | None = None
        self._driver: Driver | None = None
        self._orchestrator: ClusterOrchestrator | None = None
        self._token_cache: TokenCache | None = None

    @property
    def config(self) -> ProdConfig:
        """Get or load config lazily."""
        if self._config is None:
            from cockroach_prod.core.config import ProdConfig

            self._config = ProdConfig.from_file(self.config_path, must_exist=self.config_required)
        return self._config

    @property
    def docker_machine(self) -> DockerMachineWrapper:
        """Get or create docker-machine wrapper lazily."""
        if self._docker_machine is None:
            from cockroach_prod.clients.docker_machine import DockerMachineWrapper

            self._docker_machine = DockerMachineWrapper(binary=self.config.docker_machine.binary)
        return self._docker_machine

    @property
    def driver(self) -> Driver:
        """Get or create the driver for the configured region lazily."""
        if self._driver is None:
            from cockroach_prod.adapters.factory import create_driver

            self._driver = create_driver(self.config)
        return self._driver

    @property
    def orchestrator(self) -> ClusterOrchestrator:
        """Get or create cluster orchestrator lazily."""
        if self._orchestrator is None:
            from cockroach_prod.orchestration.cluster_orchestrator import ClusterOrchestrator

            self._orchestrator = ClusterOrchestrator(
                driver=self.driver, docker_machine=self.docker_machine
            )
        return self._orchestrator

    @property
    def token_cache(self) -> TokenCache:
        """Get or create the Google token cache lazily."""
        if self._token_cache is None:
            from cockroach_prod.utils.token_cache import TokenCache

            google = self.config.google
            if google.oauth is None:
                raise ConfigurationError("google.oauth must be set to authenticate with GCE")
            self._token_cache = TokenCache(google.auth_token_path, google.oauth)
        return self._token_cache


def _fail(error: Exception, operation: str) -> NoReturn:
    """Report a command failure and exit non-zero."""
    log_error(logger, error, operation=operation)
    console.print(f"[red]Error: {error}[/red]")
    raise SystemExit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    help="Path to configuration file",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Override the configured log level",
)
@click.pass_context
def cli(ctx: click.Context, config: str, log_level: str | None) -> None:
    """cockroach-prod - Provision CockroachDB nodes with docker-machine."""
    explicit = ctx.get_parameter_source("config") != ParameterSource.DEFAULT
    prod_ctx = ProdContext(config_path=config, config_required=explicit)

    try:
        logging_config = prod_ctx.config.logging
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from e

    setup_logging(
        level=log_level or logging_config.level,
        format=logging_config.format,
        output=logging_config.output,
    )

    ctx.obj = prod_ctx


@cli.command(name="add-nodes")
@click.option("--count", type=click.IntRange(min=1), default=1, help="Number of nodes to add")
@click.pass_context
def add_nodes(ctx: click.Context, count: int) -> None:
    """Create new cockroach nodes after the highest existing index."""
    prod_ctx: ProdContext = ctx.obj

    try:
        console.print(f"[bold blue]Adding {count} node(s) in {prod_ctx.config.region}[/bold blue]")
        created = prod_ctx.orchestrator.add_nodes(count)
    except CockroachProdError as e:
        _fail(e, "add_nodes")

    for name in created:
        console.print(f"  [green]✓ {name}[/green]")


@cli.command(name="list")
@click.option("--format", type=click.Choice(["table", "json"]), default="table")
@click.option("--details", is_flag=True, help="Show driver and IP address of each node")
@click.pass_context
def list_nodes(ctx: click.Context, format: str, details: bool) -> None:
    """List cockroach nodes."""
    from rich.table import Table

    prod_ctx: ProdContext = ctx.obj

    try:
        orchestrator = prod_ctx.orchestrator
        nodes = orchestrator.list_nodes()
        infos = [orchestrator.node_info(name) for name in nodes] if details else []
    except CockroachProdError as e:
        _fail(e, "list_nodes")

    if format == "json":
        payload = [i.model_dump() for i in infos] if details else nodes
        click.echo(json.dumps(payload, indent=2))
        return

    if not nodes:
        console.print("[yellow]No cockroach nodes found[/yellow]")
        return

    table = Table(title=f"Cockroach Nodes ({len(nodes)} total)")
    table.add_column("Name", style="cyan")
    if details:
        table.add_column("Driver", style="magenta")
        table.add_column("IP Address", style="green")
        for info in infos:
            table.add_row(info.name, info.driver_name or "-", info.ip_address or "-")
    else:
        for name in nodes:
            table.add_row(name)

    console.print(table)


@cli.command()
@click.argument("names", nargs=-1)
@click.pass_context
def start(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Start the named nodes (all cockroach nodes if none are given)."""
    prod_ctx: ProdContext = ctx.obj

    try:
        started = prod_ctx.orchestrator.start_nodes(list(names) or None)
    except CockroachProdError as e:
        _fail(e, "start_nodes")

    console.print(f"[green]✓ Started {len(started)} node(s)[/green]")


@cli.command()
@click.argument("names", nargs=-1)
@click.pass_context
def stop(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Stop the named nodes (all cockroach nodes if none are given)."""
    prod_ctx: ProdContext = ctx.obj

    try:
        stopped = prod_ctx.orchestrator.stop_nodes(list(names) or None)
    except CockroachProdError as e:
        _fail(e, "stop_nodes")

    console.print(f"[green]✓ Stopped {len(stopped)} node(s)[/green]")


@cli.command()
@click.argument("name")
@click.pass_context
def flags(ctx: click.Context, name: str) -> None:
    """Print the docker flags for talking to a node's docker daemon."""
    prod_ctx: ProdContext = ctx.obj

    try:
        docker_flags = prod_ctx.docker_machine.docker_flags(name)
    except CockroachProdError as e:
        _fail(e, "node_flags")

    click.echo(" ".join(docker_flags))


@cli.command()
@click.argument("name")
@click.pass_context
def inspect(ctx: click.Context, name: str) -> None:
    """Print docker-machine's JSON description of a node."""
    prod_ctx: ProdContext = ctx.obj

    try:
        data = prod_ctx.docker_machine.inspect(name)
    except CockroachProdError as e:
        _fail(e, "inspect_node")

    click.echo(json.dumps(data, indent=2))


@cli.command()
@click.pass_context
def auth(ctx: click.Context) -> None:
    """Obtain (or reuse) the Google OAuth token."""
    prod_ctx: ProdContext = ctx.obj

    try:
        token_cache = prod_ctx.token_cache
        token = token_cache.get_token()
    except CockroachProdError as e:
        _fail(e, "auth")

    expiry = token.expiry.isoformat() if token.expiry else "never"
    console.print(f"[green]✓ Token cached at {token_cache.path} (expires {expiry})[/green]")


@cli.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate configuration and docker-machine installation."""
    prod_ctx: ProdContext = ctx.obj
    ok = True

    console.print("[bold]1. Configuration[/bold]")
    console.print(f"  Path: {prod_ctx.config_path}")
    try:
        console.print(f"  Provider: {prod_ctx.config.provider}")
        console.print(f"  Location: {prod_ctx.config.location}")
        console.print("  [green]✓ Config valid[/green]\n")
    except CockroachProdError as e:
        console.print(f"  [red]✗ Config invalid: {e}[/red]\n")
        ok = False

    console.print("[bold]2. docker-machine[/bold]")
    try:
        version = prod_ctx.docker_machine.check_version()
        console.print(f"  [green]✓ {version}[/green]\n")
    except CockroachProdError as e:
        console.print(f"  [red]✗ {e}[/red]\n")
        ok = False

    console.print("[bold]3. Driver[/bold]")
    try:
        console.print(f"  [green]✓ {prod_ctx.driver.name}[/green]\n")
    except CockroachProdError as e:
        console.print(f"  [red]✗ {e}[/red]\n")
        ok = False

    if not ok:
        raise SystemExit(1)
    console.print("[bold green]✓ Validation complete![/bold green]")


if __name__ == "__main__":
    cli()
