"""Protocol client used by the doctor, built on :class:`fastmcp.Client`.

Everything returned from this module is plain JSON-shaped data so probes never
depend on SDK model classes.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from contextlib import AsyncExitStack
from typing import Any, Protocol, TypeVar, runtime_checkable

from fastmcp import Client
from fastmcp.client.transports import (
    ClientTransport,
    SSETransport,
    StdioTransport,
    StreamableHttpTransport,
)

from mcp_doctor.domain.models import (
    TRANSPORT_HTTP,
    TRANSPORT_SSE,
    TRANSPORT_STDIO,
    ServerConfig,
)
from mcp_doctor.infrastructure.errors import ConfigurationError, ProtocolClientError
from mcp_doctor.infrastructure.logging import BoundLogger, get_logger

T = TypeVar("T")


@runtime_checkable
class DoctorClient(Protocol):
    """Surface of the protocol client that probes and the runner rely on."""

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def ping(self) -> bool: ...

    async def get_server_capabilities(self) -> dict[str, Any]: ...

    async def get_server_version(self) -> dict[str, Any]: ...

    async def get_protocol_version(self) -> str | None: ...

    async def list_tools(self) -> dict[str, Any]: ...

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]: ...

    async def list_resources(self) -> dict[str, Any]: ...

    async def read_resource(self, uri: str) -> dict[str, Any]: ...

    async def list_prompts(self) -> dict[str, Any]: ...

    async def get_prompt(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]: ...


def to_plain(value: Any) -> Any:
    """Convert SDK models (and containers of them) into JSON-shaped data."""

    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    dump = getattr(value, "model_dump", None)
    if callable(dump):
        return dump(by_alias=True, exclude_none=True, mode="json")
    if isinstance(value, dict):
        return {str(key): to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    return str(value)


def _error_reason(exc: BaseException) -> str:
    text = str(exc).strip()
    return text or exc.__class__.__name__


def _content_text(content: Any) -> str:
    parts: list[str] = []
    for block in content or ():
        if isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "\n".join(part for part in parts if part)


def build_transport(server: ServerConfig) -> ClientTransport:
    transport = server.resolved_transport()
    if transport == TRANSPORT_STDIO:
        if not server.command:
            raise ConfigurationError("The stdio transport requires a server command")
        return StdioTransport(
            command=server.command,
            args=list(server.args),
            env=dict(server.env) or None,
            cwd=server.cwd,
        )
    if not server.url:
        raise ConfigurationError(f"The {transport} transport requires a server URL")
    if transport == TRANSPORT_SSE:
        return SSETransport(server.url)
    if transport == TRANSPORT_HTTP:
        return StreamableHttpTransport(server.url)
    raise ConfigurationError(f"Unsupported transport: {transport}")


class McpClient:
    """Session wrapper exposing the requests the diagnostic probes issue."""

    def __init__(
        self,
        transport: Any,
        *,
        name: str = "mcp-doctor",
        request_timeout_ms: int | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._transport = transport
        self._name = name
        self._request_timeout = request_timeout_ms / 1000 if request_timeout_ms else None
        self._logger = logger or get_logger("mcp_doctor.client")
        self._client: Client[Any] | None = None
        self._stack: AsyncExitStack | None = None

    @classmethod
    def from_server_config(
        cls,
        server: ServerConfig,
        *,
        request_timeout_ms: int | None = None,
        logger: BoundLogger | None = None,
    ) -> McpClient:
        return cls(
            build_transport(server),
            name=server.name,
            request_timeout_ms=request_timeout_ms,
            logger=logger,
        )

    @property
    def connected(self) -> bool:
        return self._client is not None

    def _session(self) -> Client[Any]:
        if self._client is None:
            raise ProtocolClientError("Client is not connected")
        return self._client

    async def connect(self) -> None:
        if self._client is not None:
            raise ProtocolClientError("Client is already connected")
        client: Client[Any] = Client(self._transport, timeout=self._request_timeout)
        stack = AsyncExitStack()
        try:
            await stack.enter_async_context(client)
        except Exception as exc:
            await stack.aclose()
            raise ProtocolClientError(
                f"Failed to connect: {_error_reason(exc)}", server=self._name
            ) from exc
        except BaseException:
            await stack.aclose()
            raise
        self._client = client
        self._stack = stack
        self._logger.debug("doctor.client.connected", server=self._name)

    async def disconnect(self) -> None:
        stack, self._stack, self._client = self._stack, None, None
        if stack is None:
            return
        try:
            await stack.aclose()
        except Exception as exc:
            self._logger.warning(
                "doctor.client.disconnect_failed", server=self._name, error=_error_reason(exc)
            )

    async def _request(self, action: str, call: Callable[[Client[Any]], Awaitable[T]]) -> T:
        client = self._session()
        try:
            return await call(client)
        except ProtocolClientError:
            raise
        except Exception as exc:
            raise ProtocolClientError(
                f"Failed to {action}: {_error_reason(exc)}", action=action
            ) from exc

    async def ping(self) -> bool:
        return await self._request("ping server", lambda client: client.ping())

    async def get_server_capabilities(self) -> dict[str, Any]:
        capabilities = self._session().server_capabilities
        return to_plain(capabilities) or {}

    async def get_server_version(self) -> dict[str, Any]:
        info = self._session().server_info
        if info is None:
            return {}
        return {"name": getattr(info, "name", None), "version": getattr(info, "version", None)}

    async def get_protocol_version(self) -> str | None:
        client = self._session()
        version = getattr(client, "protocol_version", None)
        if version:
            return str(version)
        initialize = getattr(client, "initialize_result", None)
        negotiated = getattr(initialize, "protocol_version", None)
        return str(negotiated) if negotiated else None

    async def list_tools(self) -> dict[str, Any]:
        result = await self._request("list tools", lambda client: client.list_tools_mcp())
        payload = to_plain(result)
        payload.setdefault("tools", [])
        return payload

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        result = await self._request(
            f"call tool {name}", lambda client: client.call_tool_mcp(name, arguments or {})
        )
        payload = to_plain(result)
        if payload.get("isError"):
            reason = _content_text(payload.get("content")) or "tool reported an error"
            raise ProtocolClientError(
                f"Failed to call tool {name}: {reason}", tool=name, result=payload
            )
        return payload

    async def list_resources(self) -> dict[str, Any]:
        result = await self._request("list resources", lambda client: client.list_resources_mcp())
        payload = to_plain(result)
        payload.setdefault("resources", [])
        return payload

    async def read_resource(self, uri: str) -> dict[str, Any]:
        result = await self._request(
            f"read resource {uri}", lambda client: client.read_resource_mcp(uri)
        )
        return to_plain(result)

    async def list_prompts(self) -> dict[str, Any]:
        result = await self._request("list prompts", lambda client: client.list_prompts_mcp())
        payload = to_plain(result)
        payload.setdefault("prompts", [])
        return payload

    async def get_prompt(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        result = await self._request(
            f"get prompt {name}", lambda client: client.get_prompt_mcp(name, arguments or None)
        )
        return to_plain(result)


__all__ = ["DoctorClient", "McpClient", "build_transport", "to_plain"]
