"""Run doctor coroutines from synchronous Typer commands.

One event loop is reused across calls so that transports which cache loop
bound state (subprocess pipes, HTTP pools) survive consecutive commands in
the same process, such as repeated ``CliRunner`` invocations in tests.
"""

from __future__ import annotations

import asyncio
import atexit
import logging
import threading
from collections.abc import Awaitable
from contextlib import suppress
from typing import TypeVar

T = TypeVar("T")

_BRIDGE_LOOP: asyncio.AbstractEventLoop | None = None
_BRIDGE_LOCK = threading.Lock()
_loop_logger = logging.getLogger("mcp_doctor.loop")


def _drain(loop: asyncio.AbstractEventLoop) -> None:
    pending = [task for task in asyncio.all_tasks(loop) if not task.done()]
    if not pending:
        return
    for task in pending:
        task.cancel()
    with suppress(Exception):
        loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))


def close_sync_bridge_loop() -> None:
    """Cancel leftover tasks and close the shared loop."""

    global _BRIDGE_LOOP
    loop = _BRIDGE_LOOP
    _BRIDGE_LOOP = None
    if loop is None or loop.is_closed():
        return
    _drain(loop)
    loop.close()


atexit.register(close_sync_bridge_loop)


def await_sync(coro: Awaitable[T]) -> T:
    """Drive ``coro`` to completion on the shared loop and return its result."""

    global _BRIDGE_LOOP
    with _BRIDGE_LOCK:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError("await_sync cannot be used inside a running event loop")

        if _BRIDGE_LOOP is None or _BRIDGE_LOOP.is_closed():
            _BRIDGE_LOOP = asyncio.new_event_loop()
            _loop_logger.debug("sync_bridge.loop_created")

        loop = _BRIDGE_LOOP
        asyncio.set_event_loop(loop)
        try:
            return loop.run_until_complete(coro)
        finally:
            _drain(loop)
            asyncio.set_event_loop(None)


__all__ = ["await_sync", "close_sync_bridge_loop"]
