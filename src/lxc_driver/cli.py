"""CLI entry point for the LXC driver.

Thin diagnostic commands over :class:`LXCDriver`.
"""

import logging
from typing import Annotated, NoReturn

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from lxc_driver.config import load_config
from lxc_driver.driver import LXCDriver
from lxc_driver.exceptions import LXCDriverError
from lxc_driver.models import ContainerState

app = typer.Typer(
    name="lxc-driver",
    help="Query and drive LXC containers through the lxc tools",
    no_args_is_help=True,
)

console = Console()

EnvFileOption = Annotated[
    str | None,
    typer.Option("--env-file", "-e", help="Path to a .env file with LXC_DRIVER_* settings"),
]


def _driver(env_file: str | None, name: str | None = None) -> LXCDriver:
    settings = load_config(env_file)
    logging.basicConfig(level=settings.log_level)
    return LXCDriver.from_settings(settings, name)


def _fail(e: Exception) -> NoReturn:
    rprint(f"[red]Error:[/red] {e}")
    raise typer.Exit(1) from None


@app.command("list")
def cmd_list(env_file: EnvFileOption = None) -> None:
    """List containers."""
    try:
        names = _driver(env_file).list_containers()
    except LXCDriverError as e:
        _fail(e)

    if not names:
        rprint("[yellow]No containers found[/yellow]")
        return

    table = Table(title="Containers")
    table.add_column("Name", style="cyan")
    for name in names:
        table.add_row(name)
    console.print(table)


@app.command("version")
def cmd_version(env_file: EnvFileOption = None) -> None:
    """Show the installed lxc version."""
    try:
        rprint(_driver(env_file).version())
    except LXCDriverError as e:
        _fail(e)


@app.command("config")
def cmd_config(
    key: Annotated[str, typer.Argument(help="Config key, e.g. lxc.lxcpath")],
    env_file: EnvFileOption = None,
) -> None:
    """Show an lxc configuration value."""
    try:
        rprint(_driver(env_file).config(key))
    except LXCDriverError as e:
        _fail(e)


@app.command("state")
def cmd_state(
    name: Annotated[str, typer.Argument(help="Container name")],
    env_file: EnvFileOption = None,
) -> None:
    """Show the state of a container."""
    try:
        state = _driver(env_file, name).state()
    except LXCDriverError as e:
        _fail(e)
    rprint(f"[bold]{name}:[/bold] {state}")


@app.command("info")
def cmd_info(
    name: Annotated[str, typer.Argument(help="Container name")],
    env_file: EnvFileOption = None,
) -> None:
    """Show raw lxc-info output for a container."""
    try:
        rprint(_driver(env_file, name).info())
    except LXCDriverError as e:
        _fail(e)


@app.command("wait")
def cmd_wait(
    name: Annotated[str, typer.Argument(help="Container name")],
    state: Annotated[ContainerState, typer.Argument(help="State to wait for")],
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", "-t", help="Maximum wait in seconds"),
    ] = None,
    env_file: EnvFileOption = None,
) -> None:
    """Wait until a container reaches a state."""
    try:
        reached = _driver(env_file, name).transition_to(
            state, lambda driver: None, timeout=timeout
        )
    except LXCDriverError as e:
        _fail(e)
    rprint(f"[green]✓[/green] {name} is {reached}")


# Entry point for the CLI
if __name__ == "__main__":
    app()
