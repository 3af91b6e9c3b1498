"""Helpers shared by the concrete probes."""

from __future__ import annotations

from collections.abc import Awaitable, Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Final

from mcp_doctor.application.probe import error_text

if TYPE_CHECKING:
    from mcp_doctor.integrations.mcp_client import DoctorClient

UNKNOWN_TOOL_NAME: Final = "mcp_doctor_nonexistent_tool_7f3a"
UNKNOWN_METHOD_NAME: Final = "mcp_doctor_definitely_missing_method"
BOGUS_ARGUMENTS: Final[Mapping[str, Any]] = {"mcp_doctor_invalid_param": "invalid_value"}

SAFE_TOOL_HINTS: Final = ("echo", "ping", "test", "hello", "version", "status")
READ_ONLY_TOOL_HINTS: Final = ("get", "read", "list", "view", "show", "check", "search", "find")
SAFE_RESOURCE_HINTS: Final = ("config", "readme", "info", "status", "help")
NOT_IMPLEMENTED_MARKERS: Final = ("not implemented", "not supported", "method not found")


def _listing(payload: Any, key: str) -> list[dict[str, Any]]:
    if not isinstance(payload, Mapping) or not isinstance(payload.get(key), list):
        raise ValueError(f"{key}/list response has no {key} list")
    return [entry for entry in payload[key] if isinstance(entry, Mapping)]


async def fetch_tools(client: DoctorClient) -> list[dict[str, Any]]:
    return _listing(await client.list_tools(), "tools")


async def fetch_resources(client: DoctorClient) -> list[dict[str, Any]]:
    return _listing(await client.list_resources(), "resources")


async def fetch_prompts(client: DoctorClient) -> list[dict[str, Any]]:
    return _listing(await client.list_prompts(), "prompts")


def duplicates(values: Iterable[Any]) -> list[Any]:
    seen: set[Any] = set()
    repeated: list[Any] = []
    for value in values:
        if value in seen and value not in repeated:
            repeated.append(value)
        seen.add(value)
    return repeated


def looks_not_implemented(reason: str) -> bool:
    lowered = reason.lower()
    return any(marker in lowered for marker in NOT_IMPLEMENTED_MARKERS)


async def rejection_reason(call: Awaitable[Any]) -> str | None:
    """Await ``call`` and return the error text it failed with, or ``None`` on success."""

    try:
        await call
    except Exception as exc:
        return error_text(exc)
    return None


def has_simple_schema(tool: Mapping[str, Any]) -> bool:
    schema = tool.get("inputSchema")
    if not isinstance(schema, Mapping):
        return False
    if schema.get("type") == "object":
        return not schema.get("required")
    return schema.get("type") in (None, "null")


def pick_tool(tools: Sequence[Mapping[str, Any]]) -> Mapping[str, Any] | None:
    """Prefer tools whose names suggest they are harmless to call."""

    for hint in SAFE_TOOL_HINTS:
        for tool in tools:
            if hint in str(tool.get("name", "")).lower():
                return tool
    for tool in tools:
        if has_simple_schema(tool):
            return tool
    return tools[0] if tools else None


def pick_resource(resources: Sequence[Mapping[str, Any]]) -> Mapping[str, Any] | None:
    for hint in SAFE_RESOURCE_HINTS:
        for resource in resources:
            if hint in str(resource.get("uri", "")).lower():
                return resource
    return resources[0] if resources else None


def sample_value(schema: Mapping[str, Any]) -> Any:
    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        return enum[0]
    kind = schema.get("type")
    if kind == "string":
        return "test"
    if kind in ("number", "integer"):
        return 1
    if kind == "boolean":
        return True
    if kind == "array":
        return []
    if kind == "object":
        return {}
    return None


def sample_tool_arguments(tool: Mapping[str, Any]) -> dict[str, Any]:
    """Fill only the required properties of a tool's input schema."""

    schema = tool.get("inputSchema")
    if not isinstance(schema, Mapping) or schema.get("type") != "object":
        return {}
    properties = schema.get("properties")
    if not isinstance(properties, Mapping):
        return {}
    required = schema.get("required") or []
    return {
        name: sample_value(properties[name])
        for name in required
        if isinstance(properties.get(name), Mapping)
    }


def sample_prompt_value(argument: Mapping[str, Any]) -> str:
    name = str(argument.get("name", "")).lower()
    description = str(argument.get("description") or "").lower()

    def mentions(word: str) -> bool:
        return word in name or word in description

    if mentions("name"):
        return "test_name"
    if mentions("file"):
        return "test.txt"
    if mentions("url"):
        return "https://example.com"
    if mentions("email"):
        return "test@example.com"
    if mentions("number"):
        return "1"
    return "test_value"


def sample_prompt_arguments(prompt: Mapping[str, Any]) -> dict[str, str]:
    arguments = prompt.get("arguments") or []
    return {
        str(argument["name"]): sample_prompt_value(argument)
        for argument in arguments
        if isinstance(argument, Mapping) and argument.get("required") and argument.get("name")
    }


def pick_prompt(prompts: Sequence[Mapping[str, Any]]) -> Mapping[str, Any] | None:
    """Prefer prompts without required arguments."""

    for prompt in prompts:
        arguments = prompt.get("arguments") or []
        if not any(isinstance(arg, Mapping) and arg.get("required") for arg in arguments):
            return prompt
    return prompts[0] if prompts else None


__all__ = [
    "BOGUS_ARGUMENTS",
    "READ_ONLY_TOOL_HINTS",
    "UNKNOWN_METHOD_NAME",
    "UNKNOWN_TOOL_NAME",
    "duplicates",
    "fetch_prompts",
    "fetch_resources",
    "fetch_tools",
    "has_simple_schema",
    "looks_not_implemented",
    "pick_prompt",
    "pick_resource",
    "pick_tool",
    "rejection_reason",
    "sample_prompt_arguments",
    "sample_tool_arguments",
    "sample_value",
]
