"""Orchestrates a doctor run: connect, execute probes under timeouts, report."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from mcp_doctor.application.probe import DiagnosticTest, elapsed_ms, error_text
from mcp_doctor.application.registry import TestRegistry
from mcp_doctor.application.report import generate_report
from mcp_doctor.config.settings import validate_categories
from mcp_doctor.domain.models import (
    DiagnosticResult,
    DoctorConfig,
    HealthReport,
    ResultStatus,
    ServerConfig,
    ServerInfo,
)
from mcp_doctor.infrastructure.errors import ConnectionFailedError, DoctorError
from mcp_doctor.infrastructure.logging import (
    BoundLogger,
    attach_run_context,
    get_logger,
    log_event,
    log_probe_event,
)
from mcp_doctor.integrations.mcp_client import DoctorClient, McpClient

ClientFactory = Callable[[ServerConfig, DoctorConfig], DoctorClient]
Clock = Callable[[], datetime]

TIMED_OUT_MESSAGE = "timed out"
OVERALL_TIMEOUT_REASON = "overall timeout exceeded"


def default_client_factory(server: ServerConfig, config: DoctorConfig) -> DoctorClient:
    return McpClient.from_server_config(server, request_timeout_ms=config.timeouts.test_execution)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DoctorRunner:
    """Run the registered probes against one server and build its health report.

    Probes run one at a time, in registry order, on a single connection.
    Only a failed connection aborts the run; every other failure becomes a
    result in the report.
    """

    def __init__(
        self,
        registry: TestRegistry,
        *,
        client_factory: ClientFactory | None = None,
        logger: BoundLogger | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._registry = registry
        self._client_factory = client_factory or default_client_factory
        self._logger = logger or get_logger("mcp_doctor.runner")
        self._clock = clock or _utcnow

    def select_tests(self, config: DoctorConfig) -> list[DiagnosticTest]:
        enabled = config.categories.enabled
        disabled = {name.strip().lower() for name in config.categories.disabled}
        if enabled:
            tests = self._registry.get_by_categories(enabled)
        else:
            tests = self._registry.get_all()
        return [test for test in tests if test.category not in disabled]

    async def run(self, server: ServerConfig, config: DoctorConfig) -> HealthReport:
        validate_categories(config, self._registry.available_categories())
        tests = self.select_tests(config)
        logger = attach_run_context(
            self._logger, server=server.name, transport=server.resolved_transport()
        )

        start_time = self._clock()
        started = time.monotonic()
        log_event(logger, "doctor.run.start", message="Starting diagnostics", probes=len(tests))

        client = await self._connect(server, config, logger)
        try:
            results = await self._execute(tests, client, config, logger, started)
            server_info = await self._server_info(client, server, logger)
        finally:
            await self._disconnect(client, logger)
        end_time = self._clock()

        report = generate_report(results, server_info, start_time, end_time)
        log_event(
            logger,
            "doctor.run.completed",
            message="Diagnostics completed",
            score=report.summary.overall_score,
            passed=report.summary.passed,
            failed=report.summary.failed,
            skipped=report.summary.skipped,
            duration_ms=report.metadata.duration,
        )
        return report

    async def _connect(
        self, server: ServerConfig, config: DoctorConfig, logger: BoundLogger
    ) -> DoctorClient:
        timeout_ms = config.timeouts.connection
        log_event(logger, "doctor.connect.start", message="Connecting to server", timeout_ms=timeout_ms)
        try:
            client = self._client_factory(server, config)
        except DoctorError:
            raise
        except Exception as exc:
            raise ConnectionFailedError(
                f"Failed to create a client for {server.name}: {error_text(exc)}",
                server=server.name,
            ) from exc

        try:
            await asyncio.wait_for(client.connect(), timeout=timeout_ms / 1000)
        except TimeoutError as exc:
            await self._disconnect(client, logger)
            log_event(logger, "doctor.connect.timeout", level=logging.ERROR, timeout_ms=timeout_ms)
            raise ConnectionFailedError(
                f"Timed out connecting to {server.name} after {timeout_ms}ms",
                hints=("Check that the server starts and answers the initialize request",),
                server=server.name,
                timeout_ms=timeout_ms,
            ) from exc
        except Exception as exc:
            await self._disconnect(client, logger)
            log_event(
                logger, "doctor.connect.failed", level=logging.ERROR, error=error_text(exc)
            )
            raise ConnectionFailedError(
                f"Failed to connect to {server.name}: {error_text(exc)}",
                hints=("Check server configuration and ensure the server is running",),
                server=server.name,
            ) from exc

        log_event(logger, "doctor.connect.ready", message="Connected to server")
        return client

    async def _disconnect(self, client: DoctorClient, logger: BoundLogger) -> None:
        try:
            await client.disconnect()
        except Exception as exc:
            log_event(
                logger, "doctor.disconnect.failed", level=logging.WARNING, error=error_text(exc)
            )

    async def _execute(
        self,
        tests: Sequence[DiagnosticTest],
        client: DoctorClient,
        config: DoctorConfig,
        logger: BoundLogger,
        started: float,
    ) -> list[DiagnosticResult]:
        deadline = started + config.timeouts.overall / 1000
        results: list[DiagnosticResult] = []
        for test in tests:
            if time.monotonic() >= deadline:
                log_probe_event(logger, "skipped", probe=test.name, reason=OVERALL_TIMEOUT_REASON)
                results.append(test.create_skipped_result(OVERALL_TIMEOUT_REASON))
                continue
            results.append(await self._run_test(test, client, config, logger))
        return results

    async def _run_test(
        self,
        test: DiagnosticTest,
        client: DoctorClient,
        config: DoctorConfig,
        logger: BoundLogger,
    ) -> DiagnosticResult:
        timeout_ms = config.timeouts.test_execution
        probe_started = time.perf_counter()
        log_probe_event(logger, "start", probe=test.name, level=logging.DEBUG)
        try:
            result = await asyncio.wait_for(test.run(client, config), timeout=timeout_ms / 1000)
        except TimeoutError:
            log_probe_event(
                logger, "timeout", probe=test.name, level=logging.WARNING, timeout_ms=timeout_ms
            )
            return DiagnosticResult(
                test_name=test.name,
                status=ResultStatus.FAILED,
                message=TIMED_OUT_MESSAGE,
                severity=test.severity,
                duration=elapsed_ms(probe_started),
                details={"timeoutMs": timeout_ms},
                recommendations=(f"Make sure the server answers within {timeout_ms}ms",),
                required_capability=test.required_capability,
            )
        except Exception as exc:
            logger.bind(event_name="doctor.probe.crashed", probe=test.name).error(
                "Probe raised past its own error handling", exc_info=True
            )
            return DiagnosticResult(
                test_name=test.name,
                status=ResultStatus.FAILED,
                message=f"Test execution failed: {error_text(exc)}",
                severity=test.severity,
                duration=elapsed_ms(probe_started),
                details={"error": error_text(exc), "type": exc.__class__.__name__},
                required_capability=test.required_capability,
            )

        if result.failed:
            log_probe_event(
                logger,
                "failed",
                probe=test.name,
                level=logging.WARNING,
                severity=result.severity.value,
                reason=result.message,
            )
        else:
            log_probe_event(
                logger, "completed", probe=test.name, status=result.status.value, duration_ms=result.duration
            )
        return result

    async def _server_info(
        self, client: DoctorClient, server: ServerConfig, logger: BoundLogger
    ) -> ServerInfo:
        version: str | None = None
        protocol_version: str | None = None
        try:
            details = await client.get_server_version()
            version = details.get("version") or None
            protocol_version = await client.get_protocol_version()
        except Exception as exc:
            log_event(
                logger, "doctor.server_info.unavailable", level=logging.DEBUG, error=error_text(exc)
            )
        return ServerInfo(
            name=server.name,
            transport=server.resolved_transport(),
            version=str(version) if version else None,
            protocol_version=protocol_version,
        )


__all__ = [
    "ClientFactory",
    "DoctorRunner",
    "OVERALL_TIMEOUT_REASON",
    "TIMED_OUT_MESSAGE",
    "default_client_factory",
]
