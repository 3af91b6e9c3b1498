"""Transport-level probes: connectivity, round trips and concurrent requests."""

from __future__ import annotations

import asyncio
import time

from mcp_doctor.application.probe import DiagnosticTest, elapsed_ms, error_text, run_subchecks
from mcp_doctor.domain.models import DiagnosticResult, DoctorConfig, Severity
from mcp_doctor.integrations.mcp_client import DoctorClient

SLOW_ROUND_TRIP_MS = 1000
LATENCY_BUDGET_S = 0.05


class TransportConnectivityProbe(DiagnosticTest):
    name = "Protocol: Transport Connectivity"
    description = "Tests transport establishment and basic communication"
    category = "protocol"
    severity = Severity.CRITICAL

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        timeout_ms = config.timeouts.connection
        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(client.list_tools(), timeout=timeout_ms / 1000)
        except TimeoutError:
            return self.create_result(
                False,
                f"Transport connection timeout after {timeout_ms}ms",
                {"timeoutMs": timeout_ms},
                [
                    "Check if the server process is running",
                    "Verify the server command and arguments",
                    "Increase the connection timeout if needed",
                ],
            )
        except Exception as exc:
            return self.create_result(
                False,
                "Transport connection failed",
                {"error": error_text(exc)},
                [
                    "Verify the server configuration",
                    "Check server process startup",
                    "Review server logs for errors",
                ],
            )

        duration = elapsed_ms(started)
        tools = response.get("tools") if isinstance(response, dict) else None
        if not isinstance(tools, list):
            return self.create_result(
                False,
                "Transport returned an invalid response format",
                {"response": response},
                ["Check the server implementation of tools/list", "Verify the JSON-RPC response format"],
            )
        return self.create_result(
            True,
            f"Transport connected successfully ({duration}ms)",
            {"connectionTime": duration, "toolsAvailable": len(tools)},
        )


class ConnectionLifecycleProbe(DiagnosticTest):
    name = "Protocol: Connection Lifecycle Management"
    description = "Tests request handling on the established connection"
    category = "protocol"
    severity = Severity.WARNING

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        started = time.perf_counter()
        try:
            alive = await client.ping()
            listing = await client.list_tools()
        except Exception as exc:
            return self.create_result(
                False,
                "Connection lifecycle test failed",
                {"error": error_text(exc)},
                [
                    "Check connection stability",
                    "Review server connection handling",
                ],
            )
        round_trip = elapsed_ms(started)
        recommendations = (
            ["Consider optimizing request handling on the live connection"]
            if round_trip > SLOW_ROUND_TRIP_MS
            else []
        )
        return self.create_result(
            True,
            "Connection lifecycle managed successfully",
            {
                "roundTripTime": round_trip,
                "pingAcknowledged": bool(alive),
                "requestSuccessful": bool(listing),
            },
            recommendations,
        )


class TransportErrorHandlingProbe(DiagnosticTest):
    name = "Protocol: Transport Error Handling"
    description = "Tests latency and handling of concurrent requests"
    category = "protocol"
    severity = Severity.WARNING

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        errors: list[str] = []
        warnings: list[str] = []

        # the request is allowed to finish; only the latency is judged
        request = asyncio.ensure_future(client.list_tools())
        try:
            done, _ = await asyncio.wait({request}, timeout=LATENCY_BUDGET_S)
            if not done:
                warnings.append("Server responds slower than 50ms; consider performance optimization")
            try:
                await request
            except Exception as exc:
                errors.append(f"Unexpected error during latency check: {error_text(exc)}")
        finally:
            if not request.done():
                request.cancel()

        outcomes = await run_subchecks(
            {
                "tools/list": client.list_tools,
                "resources/list": client.list_resources,
                "prompts/list": client.list_prompts,
            }
        )
        failed = [outcome for outcome in outcomes if not outcome.ok]
        if failed:
            warnings.append(f"{len(failed)} out of {len(outcomes)} concurrent requests failed")

        if errors:
            message = (
                f"Transport error handling issues detected "
                f"({len(errors)} errors, {len(warnings)} warnings)"
            )
        elif warnings:
            message = f"Transport working with minor issues ({len(warnings)} warnings)"
        else:
            message = "Transport error handling working correctly"

        recommendations = [f"Fix error: {error}" for error in errors]
        recommendations.extend(f"Address warning: {warning}" for warning in warnings)
        return self.create_result(
            not errors,
            message,
            {"errors": errors, "warnings": warnings},
            recommendations,
        )


__all__ = [
    "ConnectionLifecycleProbe",
    "TransportConnectivityProbe",
    "TransportErrorHandlingProbe",
]
