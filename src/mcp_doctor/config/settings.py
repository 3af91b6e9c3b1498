"""Utilities for resolving MCP Doctor configuration layers.

Settings resolve according to the following precedence:

1. Command line inputs
2. Environment variables (``MCP_DOCTOR_*``)
3. Local configuration overlay (``mcp-doctor.local.toml``)
4. Primary configuration file (``mcp-doctor.toml``)
5. Built-in defaults

Blank or whitespace-only values are treated as "not provided" so they do not
override lower-priority sources.
"""

from __future__ import annotations

import logging
import os
import shlex
import tomllib
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from mcp_doctor.config.constants import (
    DEFAULT_CONFIG_FILENAME,
    ENV_PREFIX,
    coerce_positive_int,
    split_names,
)
from mcp_doctor.domain.models import (
    DEFAULT_CONNECTION_TIMEOUT_MS,
    DEFAULT_OVERALL_TIMEOUT_MS,
    DEFAULT_TEST_TIMEOUT_MS,
    OUTPUT_FORMATS,
    TRANSPORT_CHOICES,
    CategoryFilter,
    DoctorConfig,
    OutputSettings,
    ServerConfig,
    Timeouts,
)
from mcp_doctor.infrastructure.errors import ConfigurationError

SERVER_SECTION = "server"
TIMEOUTS_SECTION = "timeouts"
CATEGORIES_SECTION = "categories"
OUTPUT_SECTION = "output"
LOGGING_SECTION = "logging"

LOG_FORMAT_TEXT = "text"
LOG_FORMAT_JSON = "json"
DEFAULT_LOG_FORMAT = LOG_FORMAT_TEXT
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MAX_BYTES = 10_000_000
DEFAULT_BACKUP_COUNT = 5

KIND_STR = "str"
KIND_INT = "int"
KIND_ARGS = "args"
KIND_NAMES = "names"


def _build_key_index(section_map: Mapping[str, Iterable[str]]) -> dict[str, str]:
    owners: dict[str, list[str]] = {}
    for section, keys in section_map.items():
        for key in keys:
            owners.setdefault(key, []).append(section)
    # keys shared by several sections cannot be pointed at a single home
    return {key: sections[0] for key, sections in owners.items() if len(sections) == 1}


CONFIG_SECTION_KEYS: Mapping[str, frozenset[str]] = {
    SERVER_SECTION: frozenset({"name", "transport", "command", "args", "url", "cwd", "env"}),
    TIMEOUTS_SECTION: frozenset({"connection", "test_execution", "overall"}),
    CATEGORIES_SECTION: frozenset({"enabled", "disabled"}),
    OUTPUT_SECTION: frozenset({"format", "file"}),
    LOGGING_SECTION: frozenset({"level", "format", "file", "max_bytes", "backup_count"}),
}

KEY_TO_SECTION: dict[str, str] = _build_key_index(CONFIG_SECTION_KEYS)

SOURCE_LABELS = {
    "cli": "command line arguments",
    "env": "the environment",
    "local": "the local configuration file",
    "config": "the configuration file",
}

_ENV_UNSET = object()


def _env(name: str) -> str:
    return f"{ENV_PREFIX}{name}"


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError:
        return {}
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(
            f"Invalid TOML in {path}: {exc}",
            user_message=f"Configuration file {path} is not valid TOML",
            path=str(path),
        ) from exc


def local_config_path(config_path: str | Path) -> Path:
    path = Path(config_path)
    return path.with_name(f"{path.stem}.local{path.suffix}")


def _merge_overlay(config_data: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    if not overlay:
        return dict(config_data)

    merged = dict(config_data)
    for section, values in overlay.items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged_section = dict(merged[section])
            merged_section.update(values)
            merged[section] = merged_section
        else:
            merged[section] = values
    return merged


def load_config_layers(config_path: str | Path) -> dict[str, Any]:
    """Return the primary configuration with any local overlay applied."""

    config_data, local_data = _load_layered_config(config_path)
    return _merge_overlay(config_data, local_data)


def _load_layered_config(config_path: str | Path) -> tuple[dict[str, Any], dict[str, Any]]:
    return _read_toml(Path(config_path)), _read_toml(local_config_path(config_path))


def _get_section(data: dict[str, Any], name: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        return {}
    section = data.get(name)
    if isinstance(section, dict):
        return section
    return {}


def _collect_sections(
    config_data: dict[str, Any], local_data: dict[str, Any], *names: str
) -> dict[str, dict[str, dict[str, Any]]]:
    return {
        name: {
            "config": _get_section(config_data, name),
            "local": _get_section(local_data, name),
        }
        for name in names
    }


def _normalize_value(key: str, kind: str, raw: object | None) -> tuple[object | None, bool]:
    """Normalize a raw value for ``key`` and report whether it was blank."""

    if raw is None:
        return None, False

    if isinstance(raw, str):
        stripped = raw.strip()
        if not stripped:
            return None, True
        raw = stripped

    if kind == KIND_INT:
        try:
            return coerce_positive_int(raw), False
        except ValueError as exc:
            raise ValueError(f"Invalid value for {key}: {exc}") from exc

    if kind == KIND_ARGS:
        if isinstance(raw, str):
            parts = tuple(shlex.split(raw))
        elif isinstance(raw, Iterable):
            parts = tuple(str(part) for part in raw)
        else:
            parts = (str(raw),)
        return (parts or None), not parts

    if kind == KIND_NAMES:
        names = split_names(raw)
        return (names or None), not names

    return str(raw), False


def _apply_precedence(
    normalized: Sequence[tuple[str, object | None]],
    blanks: Sequence[str],
    *,
    default: object | None,
    blank_warning: str | None,
    warnings: list[str],
) -> tuple[object | None, str | None]:
    """Return the highest-precedence non-null value while respecting blanks."""

    blank_layers = set(blanks)
    for layer, value in normalized:
        if layer in blank_layers:
            if blank_warning:
                warnings.append(blank_warning)
                return default, None
            continue
        if value is not None:
            return value, layer
    return default, None


@dataclass(frozen=True)
class SettingSpec:
    setting_name: str
    key: str
    section: str
    env_var: str | None = None
    default: object | None = None
    kind: str = KIND_STR
    blank_warning: str | None = None
    record_override: bool = True


def _join_labels(names: Iterable[str]) -> str:
    labels = [SOURCE_LABELS.get(name, name) for name in names]
    if not labels:
        return ""
    if len(labels) == 1:
        return labels[0]
    if len(labels) == 2:
        return f"{labels[0]} and {labels[1]}"
    return ", ".join(labels[:-1]) + f", and {labels[-1]}"


def _override_message(
    setting: str,
    normalized: Sequence[tuple[str, object | None]],
    chosen_layer: str,
) -> str | None:
    chosen_index = next(
        (index for index, (layer, _) in enumerate(normalized) if layer == chosen_layer),
        None,
    )
    if chosen_index is None:
        return None

    overridden = [layer for layer, value in normalized[chosen_index + 1 :] if value is not None]
    if not overridden:
        return None

    return (
        f"Using {setting} from {SOURCE_LABELS.get(chosen_layer, chosen_layer)}, "
        f"overriding values from {_join_labels(overridden)}."
    )


def _resolve_setting(
    spec: SettingSpec,
    *,
    cli_value: object | None,
    env_value: object | None,
    section_layers: Mapping[str, dict[str, Any]],
    overrides: list[str],
    warnings: list[str],
) -> tuple[object | None, str | None]:
    if env_value is _ENV_UNSET:
        env_value = os.getenv(spec.env_var) if spec.env_var else None

    sources: list[tuple[str, object | None]] = [
        ("cli", cli_value),
        ("env", env_value),
        ("local", section_layers.get("local", {}).get(spec.key)),
        ("config", section_layers.get("config", {}).get(spec.key)),
    ]

    normalized: list[tuple[str, object | None]] = []
    blanks: list[str] = []
    for layer, raw in sources:
        try:
            value, is_blank = _normalize_value(spec.key, spec.kind, raw)
        except ValueError as exc:
            raise ConfigurationError(
                f"{spec.setting_name} from {SOURCE_LABELS[layer]} is invalid: {exc}",
                setting=spec.setting_name,
                source=layer,
            ) from exc
        if is_blank:
            blanks.append(layer)
        normalized.append((layer, value))

    value, layer = _apply_precedence(
        normalized,
        blanks,
        default=spec.default,
        blank_warning=spec.blank_warning,
        warnings=warnings,
    )
    if layer and spec.record_override:
        message = _override_message(spec.setting_name, normalized, layer)
        if message:
            overrides.append(message)
    return value, layer


def _resolve_group(
    specs: Sequence[SettingSpec],
    *,
    cli_values: Mapping[str, object | None],
    sections: Mapping[str, Mapping[str, dict[str, Any]]],
    overrides: list[str],
    warnings: list[str],
    env_overrides: Mapping[str, object | None] | None = None,
    sources: dict[str, str] | None = None,
) -> dict[str, object | None]:
    """Resolve a batch of settings defined by ``specs``; returns values keyed by spec key."""

    env_overrides = env_overrides or {}
    results: dict[str, object | None] = {}
    for spec in specs:
        value, layer = _resolve_setting(
            spec,
            cli_value=cli_values.get(spec.key),
            env_value=env_overrides.get(spec.key, _ENV_UNSET),
            section_layers=sections.get(spec.section, {}),
            overrides=overrides,
            warnings=warnings,
        )
        results[spec.key] = value
        if sources is not None:
            sources[f"{spec.section}.{spec.key}"] = layer or "default"
    return results


SERVER_SPECS: tuple[SettingSpec, ...] = (
    SettingSpec("SERVER_NAME", "name", SERVER_SECTION, _env("SERVER_NAME")),
    SettingSpec("SERVER_TRANSPORT", "transport", SERVER_SECTION, _env("SERVER_TRANSPORT")),
    SettingSpec("SERVER_COMMAND", "command", SERVER_SECTION, _env("SERVER_COMMAND")),
    SettingSpec(
        "SERVER_ARGS", "args", SERVER_SECTION, _env("SERVER_ARGS"), kind=KIND_ARGS
    ),
    SettingSpec("SERVER_URL", "url", SERVER_SECTION, _env("SERVER_URL")),
    SettingSpec("SERVER_CWD", "cwd", SERVER_SECTION, _env("SERVER_CWD"), record_override=False),
)

TIMEOUT_SPECS: tuple[SettingSpec, ...] = (
    SettingSpec(
        "TIMEOUT_CONNECTION",
        "connection",
        TIMEOUTS_SECTION,
        _env("TIMEOUT_CONNECTION"),
        default=DEFAULT_CONNECTION_TIMEOUT_MS,
        kind=KIND_INT,
    ),
    SettingSpec(
        "TIMEOUT_TEST",
        "test_execution",
        TIMEOUTS_SECTION,
        _env("TIMEOUT_TEST"),
        default=DEFAULT_TEST_TIMEOUT_MS,
        kind=KIND_INT,
    ),
    SettingSpec(
        "TIMEOUT_OVERALL",
        "overall",
        TIMEOUTS_SECTION,
        _env("TIMEOUT_OVERALL"),
        default=DEFAULT_OVERALL_TIMEOUT_MS,
        kind=KIND_INT,
    ),
)

CATEGORY_SPECS: tuple[SettingSpec, ...] = (
    SettingSpec(
        "CATEGORIES",
        "enabled",
        CATEGORIES_SECTION,
        _env("CATEGORIES"),
        kind=KIND_NAMES,
        blank_warning="Empty categories override; running every registered category",
    ),
    SettingSpec(
        "DISABLED_CATEGORIES",
        "disabled",
        CATEGORIES_SECTION,
        _env("DISABLED_CATEGORIES"),
        kind=KIND_NAMES,
    ),
)

OUTPUT_SPECS: tuple[SettingSpec, ...] = (
    SettingSpec(
        "OUTPUT_FORMAT",
        "format",
        OUTPUT_SECTION,
        _env("OUTPUT_FORMAT"),
        default="console",
        record_override=False,
    ),
    SettingSpec("OUTPUT_FILE", "file", OUTPUT_SECTION, _env("OUTPUT_FILE")),
)

LOGGING_SPECS: tuple[SettingSpec, ...] = (
    SettingSpec(
        "LOG_LEVEL",
        "level",
        LOGGING_SECTION,
        _env("LOG_LEVEL"),
        default=DEFAULT_LOG_LEVEL,
        record_override=False,
    ),
    SettingSpec(
        "LOG_FORMAT",
        "format",
        LOGGING_SECTION,
        _env("LOG_FORMAT"),
        default=DEFAULT_LOG_FORMAT,
        record_override=False,
    ),
    SettingSpec("LOG_FILE", "file", LOGGING_SECTION, _env("LOG_FILE"), record_override=False),
    SettingSpec(
        "LOG_MAX_BYTES",
        "max_bytes",
        LOGGING_SECTION,
        _env("LOG_MAX_BYTES"),
        default=DEFAULT_MAX_BYTES,
        kind=KIND_INT,
        record_override=False,
    ),
    SettingSpec(
        "LOG_BACKUP_COUNT",
        "backup_count",
        LOGGING_SECTION,
        _env("LOG_BACKUP_COUNT"),
        default=DEFAULT_BACKUP_COUNT,
        kind=KIND_INT,
        record_override=False,
    ),
)


def _audit_config_sections(
    config_data: dict[str, Any], local_data: dict[str, Any]
) -> list[str]:
    """Validate section/key placement and report misplaced or unused entries."""

    messages: list[str] = []
    for layer_name, layer_data in (("config", config_data), ("local", local_data)):
        if not isinstance(layer_data, dict):
            continue
        label = SOURCE_LABELS.get(layer_name, layer_name).capitalize()
        for section in layer_data:
            if section not in CONFIG_SECTION_KEYS:
                messages.append(f"{label} defines unknown section [{section}].")
        for section, allowed_keys in CONFIG_SECTION_KEYS.items():
            values = layer_data.get(section)
            if not isinstance(values, dict):
                continue
            for key in values:
                if key in allowed_keys:
                    continue
                target_section = KEY_TO_SECTION.get(key)
                if target_section:
                    messages.append(
                        f"{label} [{section}] defines '{key}', but this key belongs under [{target_section}]."
                    )
                else:
                    messages.append(f"{label} [{section}] defines unused key '{key}'.")
    return messages


def _resolve_level(level_value: object | None) -> int:
    mapping = logging.getLevelNamesMapping()
    if level_value is None:
        return mapping.get(DEFAULT_LOG_LEVEL, logging.INFO)
    if isinstance(level_value, int):
        return level_value
    text = str(level_value).strip()
    if not text:
        return mapping.get(DEFAULT_LOG_LEVEL, logging.INFO)
    upper = text.upper()
    if upper.isdigit():
        return int(upper)
    if upper not in mapping:
        raise ConfigurationError(f"Unknown log level: {level_value}", setting="LOG_LEVEL")
    return mapping[upper]


def _resolve_server_env(config_data: dict[str, Any], local_data: dict[str, Any]) -> dict[str, str]:
    env: dict[str, str] = {}
    for layer in (config_data, local_data):
        table = _get_section(_get_section(layer, SERVER_SECTION), "env")
        env.update({str(key): str(value) for key, value in table.items()})
    return env


@dataclass(frozen=True)
class ServerInputs:
    """Command-line inputs describing the server under diagnosis."""

    name: str | None = None
    transport: str | None = None
    command: str | None = None
    args: str | Sequence[str] | None = None
    url: str | None = None
    cwd: str | None = None


@dataclass(frozen=True)
class RunInputs:
    """Command-line inputs that shape a doctor run."""

    connection_timeout: int | None = None
    test_timeout: int | None = None
    overall_timeout: int | None = None
    categories: str | Sequence[str] | None = None
    disabled_categories: str | Sequence[str] | None = None
    output_format: str | None = None
    output_file: str | None = None


@dataclass(frozen=True)
class LoggingInputs:
    """Inputs that influence logging configuration resolution."""

    level: str | None = None
    format: str | None = None
    file_path: str | None = None
    max_bytes: int | None = None
    backup_count: int | None = None

    def as_kwargs(self) -> dict[str, Any | None]:
        return {
            "level_override": self.level,
            "format_override": self.format,
            "file_override": self.file_path,
            "max_bytes_override": self.max_bytes,
            "backup_count_override": self.backup_count,
        }


@dataclass(frozen=True)
class LoggingSettings:
    level: int
    format: str
    file_path: str | None
    max_bytes: int
    backup_count: int

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)


@dataclass(frozen=True)
class DoctorSettings:
    """Fully resolved settings for one doctor invocation."""

    server: ServerConfig
    doctor: DoctorConfig
    config_path: str
    warnings: tuple[str, ...] = ()
    overrides: tuple[str, ...] = ()
    sources: Mapping[str, str] = field(default_factory=dict)


def _build_server_config(
    values: Mapping[str, object | None], env: dict[str, str], *, require_target: bool
) -> ServerConfig:
    transport = values.get("transport")
    if transport is not None:
        transport = str(transport).lower()
        if transport not in TRANSPORT_CHOICES:
            raise ConfigurationError(
                f"Unsupported transport: {transport}",
                hints=(f"Choose one of: {', '.join(sorted(TRANSPORT_CHOICES))}",),
                setting="SERVER_TRANSPORT",
            )

    command = values.get("command")
    url = values.get("url")
    if require_target and not command and not url:
        raise ConfigurationError(
            "No server to diagnose: provide a server command or URL",
            hints=(
                "Pass --server-command or --server-url",
                "Or define [server] command/url in the configuration file",
            ),
        )
    if transport == "stdio" and require_target and not command:
        raise ConfigurationError("The stdio transport requires a server command")
    if transport in {"sse", "http"} and require_target and not url:
        raise ConfigurationError(f"The {transport} transport requires a server URL")

    name = values.get("name") or command or url or "unknown"
    return ServerConfig(
        name=str(name),
        transport=transport,
        command=str(command) if command else None,
        args=tuple(values.get("args") or ()),  # type: ignore[arg-type]
        env=env,
        url=str(url) if url else None,
        cwd=str(values["cwd"]) if values.get("cwd") else None,
    )


def _build_doctor_config(
    timeouts: Mapping[str, object | None],
    categories: Mapping[str, object | None],
    output: Mapping[str, object | None],
) -> DoctorConfig:
    output_format = str(output.get("format") or "console").lower()
    if output_format not in OUTPUT_FORMATS:
        raise ConfigurationError(
            f"Unsupported output format: {output_format}",
            hints=(f"Choose one of: {', '.join(sorted(OUTPUT_FORMATS))}",),
            setting="OUTPUT_FORMAT",
        )
    file_value = output.get("file")
    return DoctorConfig(
        timeouts=Timeouts(
            connection=int(timeouts["connection"]),  # type: ignore[arg-type]
            test_execution=int(timeouts["test_execution"]),  # type: ignore[arg-type]
            overall=int(timeouts["overall"]),  # type: ignore[arg-type]
        ),
        categories=CategoryFilter(
            enabled=tuple(categories.get("enabled") or ()),  # type: ignore[arg-type]
            disabled=tuple(categories.get("disabled") or ()),  # type: ignore[arg-type]
        ),
        output=OutputSettings(format=output_format, file=str(file_value) if file_value else None),
    )


def resolve_doctor_settings(
    *,
    config_path: str = DEFAULT_CONFIG_FILENAME,
    server_inputs: ServerInputs | None = None,
    run_inputs: RunInputs | None = None,
    require_target: bool = True,
) -> DoctorSettings:
    """Resolve the server target and doctor configuration from every layer."""

    load_dotenv()

    overrides: list[str] = []
    sources: dict[str, str] = {}
    warnings: list[str] = []

    config_data, local_data = _load_layered_config(config_path)
    warnings.extend(_audit_config_sections(config_data, local_data))
    sections = _collect_sections(
        config_data,
        local_data,
        SERVER_SECTION,
        TIMEOUTS_SECTION,
        CATEGORIES_SECTION,
        OUTPUT_SECTION,
    )

    server_inputs = server_inputs or ServerInputs()
    run_inputs = run_inputs or RunInputs()

    if server_inputs.command and server_inputs.url:
        raise ConfigurationError(
            "Server command and server URL are mutually exclusive",
            hints=("Pass either --server-command or --server-url",),
        )

    server_values = _resolve_group(
        SERVER_SPECS,
        cli_values={
            "name": server_inputs.name,
            "transport": server_inputs.transport,
            "command": server_inputs.command,
            "args": server_inputs.args,
            "url": server_inputs.url,
            "cwd": server_inputs.cwd,
        },
        sections=sections,
        overrides=overrides,
        sources=sources,
        warnings=warnings,
    )
    # a target picked on the command line replaces the configured one wholesale
    if server_inputs.url and not server_inputs.command:
        server_values["command"] = None
        server_values["args"] = None
        sources.update({"server.command": "cli", "server.args": "cli"})
    elif server_inputs.command and not server_inputs.url:
        sources["server.url"] = "cli"
        server_values["url"] = None
    elif server_values.get("command") and server_values.get("url"):
        warnings.append("Both server command and URL are configured; using the command")
        server_values["url"] = None

    timeout_values = _resolve_group(
        TIMEOUT_SPECS,
        cli_values={
            "connection": run_inputs.connection_timeout,
            "test_execution": run_inputs.test_timeout,
            "overall": run_inputs.overall_timeout,
        },
        sections=sections,
        overrides=overrides,
        sources=sources,
        warnings=warnings,
    )
    category_values = _resolve_group(
        CATEGORY_SPECS,
        cli_values={
            "enabled": run_inputs.categories,
            "disabled": run_inputs.disabled_categories,
        },
        sections=sections,
        overrides=overrides,
        sources=sources,
        warnings=warnings,
    )
    output_values = _resolve_group(
        OUTPUT_SPECS,
        cli_values={"format": run_inputs.output_format, "file": run_inputs.output_file},
        sections=sections,
        overrides=overrides,
        sources=sources,
        warnings=warnings,
    )

    server = _build_server_config(
        server_values,
        _resolve_server_env(config_data, local_data),
        require_target=require_target,
    )
    doctor = _build_doctor_config(timeout_values, category_values, output_values)
    return DoctorSettings(
        server=server,
        doctor=doctor,
        config_path=str(config_path),
        warnings=tuple(warnings),
        overrides=tuple(overrides),
        sources=dict(sources),
    )


def resolve_logging_settings(
    *,
    config_path: str | None = None,
    level_override: str | None = None,
    format_override: str | None = None,
    file_override: str | None = None,
    max_bytes_override: int | None = None,
    backup_count_override: int | None = None,
    sources: dict[str, str] | None = None,
) -> LoggingSettings:
    sections: dict[str, dict[str, dict[str, Any]]] = {
        LOGGING_SECTION: {"config": {}, "local": {}}
    }
    if config_path:
        config_data, local_data = _load_layered_config(config_path)
        sections = _collect_sections(config_data, local_data, LOGGING_SECTION)

    resolved = _resolve_group(
        LOGGING_SPECS,
        cli_values={
            "level": level_override,
            "format": format_override,
            "file": file_override,
            "max_bytes": max_bytes_override,
            "backup_count": backup_count_override,
        },
        sections=sections,
        overrides=[],
        sources=sources,
        warnings=[],
    )

    format_value = str(resolved["format"]).lower()
    if format_value not in {LOG_FORMAT_TEXT, LOG_FORMAT_JSON}:
        raise ConfigurationError(f"Unsupported log format: {resolved['format']}", setting="LOG_FORMAT")

    file_path = resolved["file"]
    return LoggingSettings(
        level=_resolve_level(resolved["level"]),
        format=format_value,
        file_path=str(file_path) if file_path else None,
        max_bytes=int(resolved["max_bytes"]),  # type: ignore[arg-type]
        backup_count=int(resolved["backup_count"]),  # type: ignore[arg-type]
    )


def validate_categories(config: DoctorConfig, known: Iterable[str]) -> None:
    """Reject enabled or disabled category names that no registered probe carries."""

    known_set = {name.lower() for name in known}
    unknown = [
        name
        for name in (*config.categories.enabled, *config.categories.disabled)
        if name.lower() not in known_set
    ]
    if unknown:
        raise ConfigurationError(
            f"Unknown categories: {', '.join(unknown)}",
            hints=(f"Available categories: {', '.join(sorted(known_set))}",),
            categories=unknown,
        )


__all__ = [
    "CONFIG_SECTION_KEYS",
    "DEFAULT_BACKUP_COUNT",
    "DEFAULT_LOG_FORMAT",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_MAX_BYTES",
    "DoctorSettings",
    "LOG_FORMAT_JSON",
    "LOG_FORMAT_TEXT",
    "LoggingInputs",
    "LoggingSettings",
    "RunInputs",
    "ServerInputs",
    "load_config_layers",
    "local_config_path",
    "resolve_doctor_settings",
    "resolve_logging_settings",
    "validate_categories",
]
