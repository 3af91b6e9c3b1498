from __future__ import annotations

import asyncio
from dataclasses import dataclass

import pytest
from fastmcp.client.transports import SSETransport, StdioTransport, StreamableHttpTransport

from mcp_doctor.domain.models import ServerConfig
from mcp_doctor.infrastructure.errors import ConfigurationError, ProtocolClientError
from mcp_doctor.integrations.mcp_client import DoctorClient, McpClient, build_transport, to_plain


class _Model:
    def __init__(self, payload: dict[str, object]) -> None:
        self.payload = payload
        self.dump_kwargs: dict[str, object] = {}

    def model_dump(self, **kwargs: object) -> dict[str, object]:
        self.dump_kwargs = kwargs
        return dict(self.payload)


@dataclass
class _Opaque:
    value: int


def test_to_plain_dumps_models_recursively() -> None:
    model = _Model({"name": "echo", "inputSchema": {"type": "object"}})

    plain = to_plain({"tools": [model], "count": 1, "nested": ("a", None)})

    assert plain == {
        "tools": [{"name": "echo", "inputSchema": {"type": "object"}}],
        "count": 1,
        "nested": ["a", None],
    }
    assert model.dump_kwargs == {"by_alias": True, "exclude_none": True, "mode": "json"}


def test_to_plain_stringifies_unknown_objects() -> None:
    assert to_plain(_Opaque(3)) == "_Opaque(value=3)"


def test_build_transport_for_each_kind() -> None:
    stdio = build_transport(
        ServerConfig(name="s", command="python", args=("server.py",), env={"A": "1"})
    )
    sse = build_transport(ServerConfig(name="s", url="http://localhost:8000/sse"))
    http = build_transport(ServerConfig(name="s", url="http://localhost:8000/mcp"))

    assert isinstance(stdio, StdioTransport)
    assert isinstance(sse, SSETransport)
    assert isinstance(http, StreamableHttpTransport)


@pytest.mark.parametrize(
    ("server", "message"),
    [
        (ServerConfig(name="s", transport="stdio", url="http://x/mcp"), "requires a server command"),
        (ServerConfig(name="s", transport="sse", command="python"), "requires a server URL"),
    ],
)
def test_build_transport_rejects_incomplete_targets(server: ServerConfig, message: str) -> None:
    with pytest.raises(ConfigurationError, match=message):
        build_transport(server)


def test_from_server_config_uses_server_name() -> None:
    client = McpClient.from_server_config(
        ServerConfig(name="weather", command="python"), request_timeout_ms=1500
    )

    assert isinstance(client, DoctorClient)
    assert not client.connected


@pytest.mark.asyncio
async def test_requests_require_a_connection() -> None:
    client = McpClient(object())

    with pytest.raises(ProtocolClientError, match="not connected"):
        await client.list_tools()
    with pytest.raises(ProtocolClientError, match="not connected"):
        await client.get_server_capabilities()


@pytest.mark.asyncio
async def test_disconnect_without_connection_is_a_no_op() -> None:
    client = McpClient(object())
    await client.disconnect()
    assert not client.connected


class _SlowSession:
    entered = 0
    exited = 0

    def __init__(self, transport, timeout=None) -> None:
        self.transport = transport

    async def __aenter__(self):
        type(self).entered += 1
        await asyncio.sleep(5)
        return self

    async def __aexit__(self, *exc_info) -> None:
        type(self).exited += 1


class _QuickSession(_SlowSession):
    exited = 0

    async def __aenter__(self):
        return self


@pytest.mark.asyncio
async def test_cancelled_connect_leaves_client_reusable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("mcp_doctor.integrations.mcp_client.Client", _SlowSession)
    client = McpClient(object())

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(client.connect(), 0.01)

    assert _SlowSession.entered == 1
    assert not client.connected

    monkeypatch.setattr("mcp_doctor.integrations.mcp_client.Client", _QuickSession)
    await client.connect()
    assert client.connected
    await client.disconnect()
    assert _QuickSession.exited == 1
