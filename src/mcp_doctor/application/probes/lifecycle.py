from __future__ import annotations

from typing import Any

from mcp_doctor.application.probe import DiagnosticTest, error_text
from mcp_doctor.domain.models import DiagnosticResult, DoctorConfig, Severity
from mcp_doctor.integrations.mcp_client import DoctorClient


class InitializationFlowProbe(DiagnosticTest):
    """Checks the initialize handshake through four independent sub-checks."""

    name = "Lifecycle: Initialization Flow"
    description = "Tests the server initialization sequence and responses"
    category = "lifecycle"
    severity = Severity.CRITICAL

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        async def initialize_request() -> dict[str, Any]:
            try:
                await client.ping()
            except Exception as exc:
                raise RuntimeError(f"initialize request handling failed: {error_text(exc)}") from exc
            return {"status": "passed", "message": "Server responds to ping after initialization"}

        async def initialize_response() -> dict[str, Any]:
            try:
                capabilities = await client.get_server_capabilities()
                version = await client.get_server_version()
            except Exception as exc:
                raise RuntimeError(f"initialize response validation failed: {error_text(exc)}") from exc
            return {
                "status": "passed",
                "message": "Server provides a valid initialization response",
                "capabilities": capabilities,
                "version": version,
            }

        async def initialized_notification() -> dict[str, Any]:
            try:
                await client.list_tools()
            except Exception as exc:
                raise RuntimeError(
                    f"initialized notification acknowledgment failed: {error_text(exc)}"
                ) from exc
            return {
                "status": "passed",
                "message": "Server acknowledges initialization and accepts requests",
            }

        async def initialization_errors() -> dict[str, Any]:
            try:
                version = await client.get_server_version()
            except Exception as exc:
                raise RuntimeError(f"initialization error handling failed: {error_text(exc)}") from exc
            return {
                "status": "passed",
                "message": "Server handled initialization without errors",
                "version": version,
            }

        return await self.composite(
            {
                "InitializeRequest": initialize_request,
                "InitializeResponse": initialize_response,
                "InitializedNotification": initialized_notification,
                "InitializationErrors": initialization_errors,
            },
            success_message="Initialization flow completed successfully",
            failure_message="Initialization flow has {count} issue(s)",
            recommendations=(
                "Verify the server implements the initialization sequence",
                "Check the server's response to the initialize request",
                "Ensure the server accepts requests after the initialized notification",
            ),
        )


__all__ = ["InitializationFlowProbe"]
