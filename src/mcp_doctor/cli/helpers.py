"""Glue between Typer options, the settings resolver and the runner."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from mcp_doctor.application.rendering import format_report, report_to_json
from mcp_doctor.cli import options as cli_options
from mcp_doctor.config.settings import (
    DoctorSettings,
    LoggingInputs,
    LoggingSettings,
    RunInputs,
    ServerInputs,
    resolve_doctor_settings,
    resolve_logging_settings,
)
from mcp_doctor.domain.models import HealthReport
from mcp_doctor.infrastructure.errors import DoctorError, ReportWriteError
from mcp_doctor.infrastructure.logging import BoundLogger, configure_logging, get_logger, log_event


@dataclass(frozen=True)
class CliInvocation:
    """Normalized command line input for one doctor invocation."""

    config_path: str
    server: ServerInputs
    run: RunInputs
    logging: LoggingInputs


def build_invocation(
    *,
    config_path: Path | str,
    server_command: str | None = None,
    server_args: str | None = None,
    server_url: str | None = None,
    transport: str | None = None,
    server_name: str | None = None,
    categories: str | None = None,
    disable_categories: str | None = None,
    output_format: str | None = None,
    output_file: str | None = None,
    connection_timeout: int | None = None,
    test_timeout: int | None = None,
    overall_timeout: int | None = None,
    log_level: str | None = None,
    log_format: str | None = None,
    log_file: str | None = None,
) -> CliInvocation:
    clean = cli_options.clean_string
    return CliInvocation(
        config_path=str(config_path),
        server=ServerInputs(
            name=clean(server_name),
            transport=cli_options.normalize_transport(transport),
            command=clean(server_command),
            args=clean(server_args),
            url=clean(server_url),
        ),
        run=RunInputs(
            connection_timeout=connection_timeout,
            test_timeout=test_timeout,
            overall_timeout=overall_timeout,
            categories=clean(categories),
            disabled_categories=clean(disable_categories),
            output_format=cli_options.normalize_output_format(output_format),
            output_file=clean(output_file),
        ),
        logging=LoggingInputs(
            level=cli_options.normalize_log_level(log_level),
            format=cli_options.normalize_log_format(log_format),
            file_path=clean(log_file),
        ),
    )


def resolve_settings(
    invocation: CliInvocation, *, require_target: bool = True
) -> tuple[DoctorSettings, LoggingSettings]:
    settings = resolve_doctor_settings(
        config_path=invocation.config_path,
        server_inputs=invocation.server,
        run_inputs=invocation.run,
        require_target=require_target,
    )
    logging_settings = resolve_logging_settings(
        config_path=invocation.config_path,
        **invocation.logging.as_kwargs(),
    )
    return settings, logging_settings


def prepare_logging(settings: DoctorSettings, logging_settings: LoggingSettings) -> BoundLogger:
    """Configure logging and replay the messages gathered while resolving settings."""

    configure_logging(logging_settings)
    logger = get_logger("mcp_doctor.cli")
    for message in settings.overrides:
        logger.info(message)
    for message in settings.warnings:
        logger.warning(message)
    return logger


def render_report(report: HealthReport, output_format: str) -> str:
    if output_format == "json":
        return report_to_json(report)
    return format_report(report)


def emit_report(
    report: HealthReport,
    *,
    output_format: str,
    output_file: str | None,
    console: Console,
    logger: BoundLogger,
) -> None:
    """Write the rendered report to ``output_file`` or print it."""

    rendered = render_report(report, output_format)
    if output_file:
        path = Path(output_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(rendered + "\n", encoding="utf-8")
        except OSError as exc:
            raise ReportWriteError(
                f"Could not write report to {path}: {exc}",
                user_message=f"Could not write the report to {path}: {exc.strerror or exc}",
                hints=("Check that the output directory exists and is writable",),
                path=str(path),
            ) from exc
        log_event(logger, "doctor.report.written", path=str(path), format=output_format)
        return
    # markup and highlighting would mangle JSON and the glyph layout
    console.print(rendered, markup=False, highlight=False, soft_wrap=True)


def report_error(error: DoctorError, console: Console) -> None:
    console.print(f"[red]Error:[/red] {error.user_message}", highlight=False)
    for hint in error.context.hints:
        console.print(f"[dim]Hint:[/dim] {hint}", highlight=False)


__all__ = [
    "CliInvocation",
    "build_invocation",
    "emit_report",
    "prepare_logging",
    "render_report",
    "report_error",
    "resolve_settings",
]
