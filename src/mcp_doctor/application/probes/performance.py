from __future__ import annotations

import time

from mcp_doctor.application.probe import DiagnosticTest, elapsed_ms
from mcp_doctor.domain.models import DiagnosticResult, DoctorConfig, Severity
from mcp_doctor.integrations.mcp_client import DoctorClient

GOOD_RESPONSE_MS = 100
ACCEPTABLE_RESPONSE_MS = 500


class ResponseTimeProbe(DiagnosticTest):
    """Times one tools/list round trip."""

    name = "Performance: Response Time"
    description = "Measures the latency of a simple request"
    category = "performance"
    severity = Severity.INFO

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        started = time.perf_counter()
        await client.list_tools()
        latency = elapsed_ms(started)
        details = {"responseTime": latency}
        if latency < GOOD_RESPONSE_MS:
            return self.create_result(True, f"Response time is good ({latency}ms)", details)
        if latency < ACCEPTABLE_RESPONSE_MS:
            return self.create_result(
                True,
                f"Response time is acceptable ({latency}ms)",
                details,
                ["Consider caching list responses to reduce latency"],
            )
        return self.create_result(
            False,
            f"Response time is slow ({latency}ms)",
            details,
            ["Profile request handling on the server", "Avoid blocking work inside list handlers"],
        )


__all__ = ["ResponseTimeProbe"]
