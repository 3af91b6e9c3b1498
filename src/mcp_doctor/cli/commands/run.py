"""The ``run`` command: diagnose one server and print its health report."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from mcp_doctor.application.registry import build_default_registry
from mcp_doctor.application.runner import DoctorRunner
from mcp_doctor.cli import options as cli_options
from mcp_doctor.cli.helpers import (
    build_invocation,
    emit_report,
    prepare_logging,
    report_error,
    resolve_settings,
)
from mcp_doctor.cli.sync_bridge import await_sync
from mcp_doctor.config.constants import DEFAULT_CONFIG_FILENAME
from mcp_doctor.infrastructure.errors import DoctorError
from mcp_doctor.infrastructure.logging import log_event

EXIT_CRITICAL_ISSUES = 1
EXIT_DOCTOR_ERROR = 2


def register(app: typer.Typer, *, stdout_console: Console, stderr_console: Console) -> None:
    @app.command(help="Run the compliance probes against a server and print the health report.")
    def run(  # NOSONAR python:S107
        config: cli_options.ConfigPathOption = Path(DEFAULT_CONFIG_FILENAME),
        server_command: cli_options.ServerCommandOption = None,
        server_args: cli_options.ServerArgsOption = None,
        server_url: cli_options.ServerUrlOption = None,
        transport: cli_options.TransportOption = None,
        server_name: cli_options.ServerNameOption = None,
        categories: cli_options.CategoriesOption = None,
        disable_categories: cli_options.DisableCategoriesOption = None,
        output: cli_options.OutputFormatOption = None,
        output_file: cli_options.OutputFileOption = None,
        timeout_connection: cli_options.ConnectionTimeoutOption = None,
        timeout_test: cli_options.TestTimeoutOption = None,
        timeout_overall: cli_options.OverallTimeoutOption = None,
        log_level: cli_options.LogLevelOption = None,
        log_format: cli_options.LogFormatOption = None,
        log_file: cli_options.LogFileOption = None,
    ) -> None:
        invocation = build_invocation(
            config_path=config,
            server_command=server_command,
            server_args=server_args,
            server_url=server_url,
            transport=transport,
            server_name=server_name,
            categories=categories,
            disable_categories=disable_categories,
            output_format=output,
            output_file=output_file,
            connection_timeout=timeout_connection,
            test_timeout=timeout_test,
            overall_timeout=timeout_overall,
            log_level=log_level,
            log_format=log_format,
            log_file=log_file,
        )
        try:
            settings, logging_settings = resolve_settings(invocation)
        except DoctorError as error:
            report_error(error, stderr_console)
            raise typer.Exit(code=EXIT_DOCTOR_ERROR) from error

        logger = prepare_logging(settings, logging_settings)
        runner = DoctorRunner(build_default_registry(), logger=logger)
        try:
            report = await_sync(runner.run(settings.server, settings.doctor))
        except DoctorError as error:
            log_event(logger, "doctor.run.aborted", message=str(error), **error.log_fields())
            report_error(error, stderr_console)
            raise typer.Exit(code=EXIT_DOCTOR_ERROR) from error

        try:
            emit_report(
                report,
                output_format=settings.doctor.output.format,
                output_file=settings.doctor.output.file,
                console=stdout_console,
                logger=logger,
            )
        except DoctorError as error:
            log_event(logger, "doctor.report.failed", message=str(error), **error.log_fields())
            report_error(error, stderr_console)
            raise typer.Exit(code=EXIT_DOCTOR_ERROR) from error
        if report.has_critical_issues:
            raise typer.Exit(code=EXIT_CRITICAL_ISSUES)


__all__ = ["EXIT_CRITICAL_ISSUES", "EXIT_DOCTOR_ERROR", "register"]
