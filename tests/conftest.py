from __future__ import annotations

import asyncio
import copy
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from mcp_doctor.domain.models import DoctorConfig, ServerConfig, Timeouts
from mcp_doctor.infrastructure.errors import ProtocolClientError

DEFAULT_TOOLS: list[dict[str, Any]] = [
    {
        "name": "echo",
        "description": "Echo the given message back",
        "inputSchema": {
            "type": "object",
            "properties": {"message": {"type": "string"}},
            "required": ["message"],
        },
        "annotations": {"title": "Echo"},
    },
    {
        "name": "get_weather",
        "description": "Look up the weather for a city",
        "inputSchema": {
            "type": "object",
            "properties": {"city": {"type": "string"}},
            "required": ["city"],
        },
        "annotations": {"title": "Weather", "readOnlyHint": True},
    },
]

DEFAULT_RESOURCES: list[dict[str, Any]] = [
    {"uri": "config://app", "name": "App config", "mimeType": "application/json"},
    {"uri": "docs://readme", "name": "Readme", "mimeType": "text/markdown"},
]

DEFAULT_PROMPTS: list[dict[str, Any]] = [
    {
        "name": "summarize",
        "description": "Summarize a file",
        "arguments": [{"name": "file_name", "description": "File to summarize", "required": True}],
    },
]


class FakeClient:
    """In-process stand-in for :class:`mcp_doctor.integrations.mcp_client.McpClient`.

    Behaves like a well-formed server by default. ``failures`` maps a method
    name to the exception that method raises, ``delays`` maps a method name
    to seconds slept before answering.
    """

    def __init__(
        self,
        *,
        tools: list[dict[str, Any]] | None = None,
        resources: list[dict[str, Any]] | None = None,
        prompts: list[dict[str, Any]] | None = None,
        capabilities: dict[str, Any] | None = None,
        version: dict[str, Any] | None = None,
        protocol_version: str | None = "2025-06-18",
        failures: dict[str, BaseException] | None = None,
        delays: dict[str, float] | None = None,
        accept_unknown_arguments: bool = False,
    ) -> None:
        self.tools = copy.deepcopy(DEFAULT_TOOLS if tools is None else tools)
        self.resources = copy.deepcopy(DEFAULT_RESOURCES if resources is None else resources)
        self.prompts = copy.deepcopy(DEFAULT_PROMPTS if prompts is None else prompts)
        self.capabilities = capabilities if capabilities is not None else {
            "tools": {"listChanged": False},
            "resources": {},
            "prompts": {},
        }
        self.version = version if version is not None else {"name": "fake-server", "version": "1.2.3"}
        self.protocol_version = protocol_version
        self.failures = dict(failures or {})
        self.delays = dict(delays or {})
        self.accept_unknown_arguments = accept_unknown_arguments
        self.calls: list[tuple[str, Any]] = []
        self.connected = False
        self.disconnects = 0

    async def _enter(self, method: str, payload: Any = None) -> None:
        self.calls.append((method, payload))
        delay = self.delays.get(method)
        if delay:
            await asyncio.sleep(delay)
        failure = self.failures.get(method)
        if failure is not None:
            raise failure

    async def connect(self) -> None:
        await self._enter("connect")
        self.connected = True

    async def disconnect(self) -> None:
        self.disconnects += 1
        self.connected = False
        await self._enter("disconnect")

    async def ping(self) -> bool:
        await self._enter("ping")
        return True

    async def get_server_capabilities(self) -> dict[str, Any]:
        await self._enter("get_server_capabilities")
        return dict(self.capabilities)

    async def get_server_version(self) -> dict[str, Any]:
        await self._enter("get_server_version")
        return dict(self.version)

    async def get_protocol_version(self) -> str | None:
        await self._enter("get_protocol_version")
        return self.protocol_version

    async def list_tools(self) -> dict[str, Any]:
        await self._enter("list_tools")
        return {"tools": copy.deepcopy(self.tools)}

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        await self._enter("call_tool", (name, arguments))
        tool = next((entry for entry in self.tools if entry.get("name") == name), None)
        if tool is None:
            raise ProtocolClientError(f"Failed to call tool {name}: Unknown tool: {name}")
        properties = tool.get("inputSchema", {}).get("properties", {})
        unexpected = sorted(set(arguments or {}) - set(properties))
        if unexpected and not self.accept_unknown_arguments:
            raise ProtocolClientError(
                f"Failed to call tool {name}: Invalid params: unexpected {', '.join(unexpected)}"
            )
        return {"content": [{"type": "text", "text": "ok"}], "isError": False}

    async def list_resources(self) -> dict[str, Any]:
        await self._enter("list_resources")
        return {"resources": copy.deepcopy(self.resources)}

    async def read_resource(self, uri: str) -> dict[str, Any]:
        await self._enter("read_resource", uri)
        if not any(resource.get("uri") == uri for resource in self.resources):
            raise ProtocolClientError(f"Failed to read resource {uri}: Resource not found")
        return {"contents": [{"uri": uri, "text": "{}"}]}

    async def list_prompts(self) -> dict[str, Any]:
        await self._enter("list_prompts")
        return {"prompts": copy.deepcopy(self.prompts)}

    async def get_prompt(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        await self._enter("get_prompt", (name, arguments))
        prompt = next((entry for entry in self.prompts if entry.get("name") == name), None)
        if prompt is None:
            raise ProtocolClientError(f"Failed to get prompt {name}: Unknown prompt")
        missing = [
            argument["name"]
            for argument in prompt.get("arguments") or []
            if argument.get("required") and argument["name"] not in (arguments or {})
        ]
        if missing:
            raise ProtocolClientError(
                f"Failed to get prompt {name}: Missing required arguments: {', '.join(missing)}"
            )
        text = " ".join(["hi", *(str(value) for value in (arguments or {}).values())])
        return {"messages": [{"role": "user", "content": {"type": "text", "text": text}}]}

    def called(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)


@pytest.fixture
def fake_client_factory() -> Callable[..., FakeClient]:
    return FakeClient


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def doctor_config() -> DoctorConfig:
    return DoctorConfig(timeouts=Timeouts(connection=1000, test_execution=1000, overall=10_000))


@pytest.fixture
def server_config() -> ServerConfig:
    return ServerConfig(name="fake", command="fake-server")


@pytest.fixture
def fixed_times() -> tuple[datetime, datetime]:
    start = datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    return start, start + timedelta(milliseconds=1234)


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("mcp-doctor")
    group.addoption(
        "--offline",
        action="store_true",
        dest="doctor_offline",
        help="Run offline tests only (deselect tests marked 'online').",
    )
    group.addoption(
        "--online-only",
        action="store_true",
        dest="doctor_online_only",
        help="Run only tests marked 'online' (deselect offline).",
    )


def _is_integration_path(s: str) -> bool:
    s = s.replace("\\", "/")
    return s.startswith("tests/integration/") or "/tests/integration/" in s


def _mark_by_path(items: list[pytest.Item]) -> None:
    for item in items:
        node_str = str(getattr(item, "path", item.nodeid))
        marker = pytest.mark.online if _is_integration_path(node_str) else pytest.mark.offline
        item.add_marker(marker)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    _mark_by_path(items)

    offline_only = bool(config.getoption("doctor_offline"))
    online_only = bool(config.getoption("doctor_online_only"))

    if offline_only and online_only:
        raise pytest.UsageError("--offline and --online-only are mutually exclusive")

    deselect: list[pytest.Item] = []
    if online_only:
        deselect = [i for i in items if "online" not in i.keywords]
    elif offline_only:
        deselect = [i for i in items if "online" in i.keywords]

    if not deselect:
        return

    config.hook.pytest_deselected(items=deselect)
    items[:] = [i for i in items if i not in deselect]
