"""Typer option declarations and normalization helpers."""

from __future__ import annotations

import logging
from collections.abc import Collection
from pathlib import Path
from typing import Annotated, Final

import typer

from mcp_doctor.config.constants import DEFAULT_CONFIG_FILENAME
from mcp_doctor.domain.models import OUTPUT_FORMATS, TRANSPORT_CHOICES

LOG_FORMAT_CHOICES: Final[set[str]] = {"text", "json"}
LOG_LEVEL_CHOICES: Final[list[str]] = sorted(
    name
    for name in logging.getLevelNamesMapping()
    if isinstance(name, str) and not name.isdigit()
)
LOG_LEVEL_SET: Final[set[str]] = {choice.upper() for choice in LOG_LEVEL_CHOICES}

ConfigPathOption = Annotated[
    Path,
    typer.Option(
        "--config",
        help=f"Path to an MCP Doctor configuration TOML file (default: {DEFAULT_CONFIG_FILENAME})",
        envvar="MCP_DOCTOR_CONFIG",
        show_envvar=True,
        rich_help_panel="Configuration",
    ),
]

ServerCommandOption = Annotated[
    str | None,
    typer.Option(
        "--server-command",
        help="Command that starts a stdio server",
        rich_help_panel="Server",
    ),
]

ServerArgsOption = Annotated[
    str | None,
    typer.Option(
        "--server-args",
        help="Arguments for the server command, split like a shell would",
        rich_help_panel="Server",
    ),
]

ServerUrlOption = Annotated[
    str | None,
    typer.Option(
        "--server-url",
        help="URL of an HTTP or SSE server",
        rich_help_panel="Server",
    ),
]

TransportOption = Annotated[
    str | None,
    typer.Option(
        "--transport",
        help=f"Transport to use ({', '.join(sorted(TRANSPORT_CHOICES))}); inferred when omitted",
        rich_help_panel="Server",
    ),
]

ServerNameOption = Annotated[
    str | None,
    typer.Option(
        "--server-name",
        help="Display name for the server in the report",
        rich_help_panel="Server",
    ),
]

CategoriesOption = Annotated[
    str | None,
    typer.Option(
        "--categories",
        help="Comma separated categories to run (default: all)",
        rich_help_panel="Selection",
    ),
]

DisableCategoriesOption = Annotated[
    str | None,
    typer.Option(
        "--disable-categories",
        help="Comma separated categories to skip",
        rich_help_panel="Selection",
    ),
]

OutputFormatOption = Annotated[
    str | None,
    typer.Option(
        "--output",
        help=f"Report format ({', '.join(sorted(OUTPUT_FORMATS))})",
        rich_help_panel="Output",
    ),
]

OutputFileOption = Annotated[
    str | None,
    typer.Option(
        "--output-file",
        help="Write the report to this file instead of standard output",
        rich_help_panel="Output",
    ),
]

ConnectionTimeoutOption = Annotated[
    int | None,
    typer.Option(
        "--timeout-connection",
        min=1,
        help="Milliseconds allowed for connecting to the server",
        rich_help_panel="Timeouts",
    ),
]

TestTimeoutOption = Annotated[
    int | None,
    typer.Option(
        "--timeout-test",
        min=1,
        help="Milliseconds allowed for each probe",
        rich_help_panel="Timeouts",
    ),
]

OverallTimeoutOption = Annotated[
    int | None,
    typer.Option(
        "--timeout-overall",
        min=1,
        help="Milliseconds allowed for the whole run",
        rich_help_panel="Timeouts",
    ),
]

LogLevelOption = Annotated[
    str | None,
    typer.Option(
        "--log-level",
        help="Logging level (e.g. INFO, DEBUG)",
        rich_help_panel="Logging",
    ),
]

LogFormatOption = Annotated[
    str | None,
    typer.Option(
        "--log-format",
        help="Logging format (text or json)",
        rich_help_panel="Logging",
    ),
]

LogFileOption = Annotated[
    str | None,
    typer.Option(
        "--log-file",
        help="Path to a rotating log file",
        rich_help_panel="Logging",
    ),
]


def clean_string(value: str | None) -> str | None:
    """Normalize optional string input."""

    if value is None:
        return None
    candidate = value.strip()
    return candidate or None


def normalize_choice(value: str | None, *, choices: Collection[str], param_hint: str) -> str | None:
    candidate = clean_string(value)
    if candidate is None:
        return None
    candidate = candidate.lower()
    if candidate not in choices:
        raise typer.BadParameter(
            f"Must be one of: {', '.join(sorted(choices))}",
            param_hint=param_hint,
        )
    return candidate


def normalize_log_format(value: str | None) -> str | None:
    return normalize_choice(value, choices=LOG_FORMAT_CHOICES, param_hint="--log-format")


def normalize_log_level(value: str | None) -> str | None:
    """Normalize the log level option."""

    candidate = clean_string(value)
    if candidate is None:
        return None
    candidate = candidate.upper()
    if candidate not in LOG_LEVEL_SET:
        raise typer.BadParameter(
            f"Log level must be one of: {', '.join(LOG_LEVEL_CHOICES)}",
            param_hint="--log-level",
        )
    return candidate


def normalize_transport(value: str | None) -> str | None:
    return normalize_choice(value, choices=TRANSPORT_CHOICES, param_hint="--transport")


def normalize_output_format(value: str | None) -> str | None:
    return normalize_choice(value, choices=OUTPUT_FORMATS, param_hint="--output")


__all__ = [
    "CategoriesOption",
    "ConfigPathOption",
    "ConnectionTimeoutOption",
    "DisableCategoriesOption",
    "LOG_FORMAT_CHOICES",
    "LOG_LEVEL_CHOICES",
    "LogFileOption",
    "LogFormatOption",
    "LogLevelOption",
    "OutputFileOption",
    "OutputFormatOption",
    "OverallTimeoutOption",
    "ServerArgsOption",
    "ServerCommandOption",
    "ServerNameOption",
    "ServerUrlOption",
    "TestTimeoutOption",
    "TransportOption",
    "clean_string",
    "normalize_choice",
    "normalize_log_format",
    "normalize_log_level",
    "normalize_output_format",
    "normalize_transport",
]
