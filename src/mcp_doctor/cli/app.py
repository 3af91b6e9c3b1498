"""MCP Doctor Typer CLI entrypoint."""

from __future__ import annotations

import typer
from rich.console import Console

from mcp_doctor import __version__
from mcp_doctor.cli.commands import categories as categories_command
from mcp_doctor.cli.commands import config as config_command
from mcp_doctor.cli.commands import run as run_command

stderr_console = Console(stderr=True)
stdout_console = Console(stderr=False)

app = typer.Typer(
    help="Diagnose Model Context Protocol servers for protocol compliance and health",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

run_command.register(app, stdout_console=stdout_console, stderr_console=stderr_console)
categories_command.register(app, stdout_console=stdout_console)
config_command.register(app, stdout_console=stdout_console, stderr_console=stderr_console)


@app.command(help="Show the installed MCP Doctor version.")
def version() -> None:
    stdout_console.print(__version__)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, prog_name="mcp-doctor")


__all__ = ["app", "main"]
