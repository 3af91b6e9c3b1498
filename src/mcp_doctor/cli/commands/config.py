"""Config inspection commands for the MCP Doctor CLI."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from mcp_doctor.cli import options as cli_options
from mcp_doctor.cli.helpers import build_invocation, report_error
from mcp_doctor.config.constants import DEFAULT_CONFIG_FILENAME
from mcp_doctor.config.settings import (
    DoctorSettings,
    LoggingSettings,
    local_config_path,
    resolve_doctor_settings,
    resolve_logging_settings,
)
from mcp_doctor.infrastructure.errors import DoctorError

SOURCE_DISPLAY: Final[Mapping[str, str]] = {
    "cli": "CLI",
    "env": "Environment",
    "local": "Local Config",
    "config": "Config File",
    "default": "Default",
}


def _format_value(value: Any) -> str:
    if value is None:
        return "<unset>"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value) or "<empty>"
    if isinstance(value, Mapping):
        return ", ".join(f"{key}={item}" for key, item in value.items()) or "<empty>"
    return str(value)


def effective_rows(
    settings: DoctorSettings,
    logging_settings: LoggingSettings,
    logging_sources: Mapping[str, str],
) -> list[tuple[str, str, str]]:
    """Return ``(key, value, source)`` rows for every effective setting."""

    server = settings.server
    doctor = settings.doctor
    values: list[tuple[str, Any]] = [
        ("server.name", server.name),
        ("server.transport", server.transport or f"{server.resolved_transport()} (inferred)"),
        ("server.command", server.command),
        ("server.args", server.args),
        ("server.url", server.url),
        ("server.cwd", server.cwd),
        ("server.env", server.env),
        ("timeouts.connection", doctor.timeouts.connection),
        ("timeouts.test_execution", doctor.timeouts.test_execution),
        ("timeouts.overall", doctor.timeouts.overall),
        ("categories.enabled", doctor.categories.enabled or "<all>"),
        ("categories.disabled", doctor.categories.disabled),
        ("output.format", doctor.output.format),
        ("output.file", doctor.output.file),
        ("logging.level", logging.getLevelName(logging_settings.level)),
        ("logging.format", logging_settings.format),
        ("logging.file", logging_settings.file_path),
        ("logging.max_bytes", logging_settings.max_bytes),
        ("logging.backup_count", logging_settings.backup_count),
    ]
    sources = {**settings.sources, **logging_sources}
    rows: list[tuple[str, str, str]] = []
    for key, value in values:
        source = sources.get(key, "config" if value else "default")
        rows.append((key, _format_value(value), SOURCE_DISPLAY.get(source, source)))
    return rows


def _print_table(title: str, rows: Sequence[tuple[str, str, str]], console: Console) -> None:
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("Config Key", style="cyan")
    table.add_column("Value", style="magenta", overflow="fold")
    table.add_column("Source", style="green")
    for row in rows:
        table.add_row(*row)
    console.print(table)


def register(app: typer.Typer, *, stdout_console: Console, stderr_console: Console) -> None:
    """Register config commands with the app."""

    config_app = typer.Typer(
        help="Inspect MCP Doctor configuration files and settings.",
        invoke_without_command=True,
        no_args_is_help=True,
    )
    app.add_typer(config_app, name="config")

    @config_app.callback(invoke_without_command=True)
    def config_group_callback(ctx: typer.Context) -> None:
        if ctx.invoked_subcommand is None:
            typer.echo(ctx.get_help())
            raise typer.Exit()

    @config_app.command("show", help="Show configuration files and the effective settings.")
    def config_show(
        config: cli_options.ConfigPathOption = Path(DEFAULT_CONFIG_FILENAME),
        server_command: cli_options.ServerCommandOption = None,
        server_url: cli_options.ServerUrlOption = None,
        log_level: cli_options.LogLevelOption = None,
        log_format: cli_options.LogFormatOption = None,
    ) -> None:
        invocation = build_invocation(
            config_path=config,
            server_command=server_command,
            server_url=server_url,
            log_level=log_level,
            log_format=log_format,
        )
        logging_sources: dict[str, str] = {}
        try:
            settings = resolve_doctor_settings(
                config_path=invocation.config_path,
                server_inputs=invocation.server,
                run_inputs=invocation.run,
                require_target=False,
            )
            logging_settings = resolve_logging_settings(
                config_path=invocation.config_path,
                sources=logging_sources,
                **invocation.logging.as_kwargs(),
            )
        except DoctorError as error:
            report_error(error, stderr_console)
            raise typer.Exit(code=2) from error

        files_table = Table(title="Configuration files", box=box.SIMPLE_HEAVY)
        files_table.add_column("File", style="cyan")
        files_table.add_column("Status", style="magenta")
        for path in (Path(invocation.config_path), local_config_path(invocation.config_path)):
            files_table.add_row(str(path), "exists" if path.exists() else "missing")
        stdout_console.print(files_table)

        if settings.warnings:
            stdout_console.print()
            for warning in settings.warnings:
                stdout_console.print(f"[yellow]Warning:[/yellow] {warning}", highlight=False)

        stdout_console.print()
        _print_table(
            "Effective configuration",
            effective_rows(settings, logging_settings, logging_sources),
            stdout_console,
        )


__all__ = ["effective_rows", "register"]
