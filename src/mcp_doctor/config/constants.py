"""Common coercion helpers and configuration constants."""

from __future__ import annotations

from collections.abc import Iterable

CONFIG_BASENAME = "mcp-doctor"
DEFAULT_CONFIG_FILENAME = f"{CONFIG_BASENAME}.toml"
LOCAL_CONFIG_FILENAME = f"{CONFIG_BASENAME}.local.toml"

ENV_PREFIX = "MCP_DOCTOR_"


def coerce_positive_int(candidate: object | None, *, default: int | None = None) -> int:
    """Coerce ``candidate`` into a positive integer, enforcing strict validation."""

    if candidate is None:
        if default is None:
            raise ValueError("No integer value provided and no default specified")
        return default

    if isinstance(candidate, bool):
        raise ValueError(f"Invalid integer value: {candidate}")

    try:
        value = int(candidate)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid integer value: {candidate}") from exc

    if value <= 0:
        raise ValueError(f"Value must be positive: {candidate}")

    return value


def split_names(value: object | None) -> tuple[str, ...]:
    """Normalise a comma-separated string or an iterable into lower-case names."""

    if value is None:
        return ()
    if isinstance(value, str):
        parts: Iterable[object] = value.split(",")
    elif isinstance(value, Iterable):
        parts = value
    else:
        parts = (value,)
    names: list[str] = []
    for part in parts:
        cleaned = str(part).strip().lower()
        if cleaned and cleaned not in names:
            names.append(cleaned)
    return tuple(names)


__all__ = [
    "CONFIG_BASENAME",
    "DEFAULT_CONFIG_FILENAME",
    "ENV_PREFIX",
    "LOCAL_CONFIG_FILENAME",
    "coerce_positive_int",
    "split_names",
]
