"""JSON-RPC message structure, request id and error response probes."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

from mcp_doctor.application.probe import DiagnosticTest, elapsed_ms, error_text
from mcp_doctor.application.probes.support import (
    BOGUS_ARGUMENTS,
    UNKNOWN_METHOD_NAME,
    UNKNOWN_TOOL_NAME,
    fetch_tools,
    rejection_reason,
)
from mcp_doctor.domain.models import DiagnosticResult, DoctorConfig, Severity
from mcp_doctor.integrations.mcp_client import DoctorClient

TOOL_SAMPLE_SIZE = 3
NO_TOOLS = "no tools available"

ErrorScenario = Callable[[], Awaitable[str | None]]


async def _bogus_argument_call(client: DoctorClient, arguments: dict[str, Any]) -> str | None:
    """Call the first listed tool with arguments it cannot accept.

    Returns the rejection text, ``None`` when the call succeeded, or
    :data:`NO_TOOLS` when the server lists nothing to call.
    """

    tools = await fetch_tools(client)
    if not tools:
        return NO_TOOLS
    return await rejection_reason(client.call_tool(str(tools[0].get("name")), dict(arguments)))


async def _judge_rejections(
    scenarios: dict[str, ErrorScenario],
    *,
    max_length: int,
    issues: list[str],
    validations: list[str],
) -> None:
    for label, scenario in scenarios.items():
        try:
            reason = await scenario()
        except Exception as exc:
            issues.append(f"{label}: test execution failed - {error_text(exc)}")
            continue
        if reason is None:
            issues.append(f"{label}: no error returned")
        elif reason == NO_TOOLS:
            validations.append(f"{label}: skipped - no tools to test")
        elif not reason:
            issues.append(f"{label}: empty error message")
        elif len(reason) >= max_length:
            issues.append(f"{label}: error message too long ({len(reason)} chars)")
        else:
            validations.append(f"{label}: proper error message received")
            lowered = reason.lower()
            if any(marker in lowered for marker in ("not found", "unknown", "invalid")):
                validations.append(f"{label}: error message names the error type")


class MessageFormatProbe(DiagnosticTest):
    name = "Protocol: JSON-RPC Message Format Validation"
    description = "Validates JSON-RPC 2.0 message structure"
    category = "protocol"
    severity = Severity.CRITICAL

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        issues: list[str] = []
        validations: list[str] = []

        response = await client.list_tools()
        if not isinstance(response, dict):
            issues.append("Response is not a JSON object")
        else:
            tools = response.get("tools")
            if isinstance(tools, list):
                validations.append("Response contains the expected tools array")
            else:
                issues.append("Response is missing the tools field or it is not an array")
                tools = []
            if "error" in response:
                issues.append("Successful response contains an error field")
            else:
                validations.append("Successful response carries no error field")
            for index, tool in enumerate(tools[:TOOL_SAMPLE_SIZE]):
                if not isinstance(tool, dict):
                    issues.append(f"Tool {index} is not an object")
                elif not isinstance(tool.get("name"), str):
                    issues.append(f"Tool {index} is missing a string 'name' field")
                else:
                    validations.append(f"Tool {index} properly structured with name: {tool['name']}")

        reason = await rejection_reason(client.call_tool(UNKNOWN_TOOL_NAME, {}))
        if reason is None:
            issues.append("Calling an unknown tool did not return an error")
        else:
            lowered = reason.lower()
            if UNKNOWN_TOOL_NAME in reason:
                validations.append("Error responses identify the requested tool")
            elif "not found" in lowered or "unknown" in lowered:
                validations.append("Error responses indicate the missing tool")
            else:
                issues.append("Error response format unclear or non-standard")

        valid = not issues
        message = (
            f"JSON-RPC format validation passed ({len(validations)} checks)"
            if valid
            else f"JSON-RPC format issues detected ({len(issues)} issues, {len(validations)} valid)"
        )
        return self.create_result(
            valid,
            message,
            {"issues": issues, "validations": validations},
            None
            if valid
            else [
                "Ensure all responses follow the JSON-RPC 2.0 specification",
                "Validate message structure before sending responses",
                "Check error handling implementation",
            ],
        )


class RequestIdHandlingProbe(DiagnosticTest):
    name = "Protocol: Request ID Handling"
    description = "Tests that concurrent requests are matched to their responses"
    category = "protocol"
    severity = Severity.WARNING

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        issues: list[str] = []
        validations: list[str] = []

        started = time.perf_counter()
        settled = await asyncio.gather(
            client.list_tools(),
            client.list_resources(),
            client.list_prompts(),
            client.list_tools(),
            return_exceptions=True,
        )
        duration = elapsed_ms(started)

        rejected = [error_text(item) for item in settled if isinstance(item, Exception)]
        successful = len(settled) - len(rejected)
        if successful:
            validations.append(f"{successful} concurrent requests handled successfully")
        if rejected:
            timed_out = any("timeout" in reason.lower() or "timed out" in reason.lower() for reason in rejected)
            if timed_out:
                issues.append("Some requests timed out; request ids may not be tracked correctly")
            else:
                validations.append("Failed requests returned proper error messages")

        if duration > config.timeouts.test_execution:
            issues.append(f"Concurrent requests took {duration}ms, longer than expected")
        else:
            validations.append(f"Concurrent requests completed in {duration}ms")

        valid = not issues
        message = (
            f"Request ID handling validation passed ({len(validations)} checks)"
            if valid
            else f"Request ID handling issues detected ({len(issues)} issues)"
        )
        return self.create_result(
            valid,
            message,
            {
                "successful": successful,
                "failed": len(rejected),
                "duration": duration,
                "issues": issues,
                "validations": validations,
            },
            None
            if valid
            else [
                "Implement proper request id tracking",
                "Ensure concurrent requests are handled",
            ],
        )


class ErrorResponseFormatProbe(DiagnosticTest):
    name = "Protocol: Error Response Format"
    description = "Tests error response format for invalid tool calls"
    category = "protocol"
    severity = Severity.WARNING

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        issues: list[str] = []
        validations: list[str] = []
        await _judge_rejections(
            {
                "Invalid tool name": lambda: rejection_reason(client.call_tool(UNKNOWN_TOOL_NAME, {})),
                "Invalid tool arguments": lambda: _bogus_argument_call(client, BOGUS_ARGUMENTS),
            },
            max_length=500,
            issues=issues,
            validations=validations,
        )
        valid = not issues
        message = (
            f"Error response format validation passed ({len(validations)} checks)"
            if valid
            else f"Error response format issues detected ({len(issues)} issues)"
        )
        return self.create_result(
            valid,
            message,
            {"issues": issues, "validations": validations},
            None
            if valid
            else [
                "Return descriptive but concise error messages",
                "Validate inputs and reject invalid tool calls",
            ],
        )


class ErrorCodeComplianceProbe(DiagnosticTest):
    name = "Protocol: JSON-RPC Error Code Compliance"
    description = "Tests protocol-level error handling for unknown methods and bad parameters"
    category = "protocol"
    severity = Severity.WARNING

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        issues: list[str] = []
        validations: list[str] = []
        await _judge_rejections(
            {
                "Method not found (-32601)": lambda: rejection_reason(
                    client.call_tool(UNKNOWN_METHOD_NAME, {})
                ),
                "Invalid params (-32602)": lambda: _bogus_argument_call(
                    client, {"__invalid_param": None, "__another_bad_param": None}
                ),
            },
            max_length=1000,
            issues=issues,
            validations=validations,
        )

        baseline = await rejection_reason(client.list_tools())
        if baseline is None:
            validations.append("Baseline: normal operations work correctly")
        else:
            issues.append(f"Baseline test failed: {baseline}")

        valid = not issues
        message = (
            f"JSON-RPC error code validation passed ({len(validations)} checks)"
            if valid
            else f"JSON-RPC error code issues detected ({len(issues)} issues)"
        )
        return self.create_result(
            valid,
            message,
            {"issues": issues, "validations": validations},
            None
            if valid
            else [
                "Return -32601 for unknown methods",
                "Return -32602 for invalid parameters",
                "Keep error messages short and specific",
            ],
        )


__all__ = [
    "ErrorCodeComplianceProbe",
    "ErrorResponseFormatProbe",
    "MessageFormatProbe",
    "RequestIdHandlingProbe",
]
