"""Protocol version negotiation and compatibility probes."""

from __future__ import annotations

from mcp_doctor.application.probe import DiagnosticTest, error_text
from mcp_doctor.application.probes.support import looks_not_implemented, rejection_reason
from mcp_doctor.domain.models import DiagnosticResult, DoctorConfig, Severity
from mcp_doctor.integrations.mcp_client import DoctorClient


async def _check_listing_endpoint(
    label: str,
    key: str,
    call,
    *,
    findings: list[str],
    validations: list[str],
) -> None:
    try:
        response = await call()
    except Exception as exc:
        if looks_not_implemented(error_text(exc)):
            validations.append(f"{label} endpoint properly indicates it is not implemented")
        else:
            findings.append(f"{label} endpoint error handling may indicate version issues")
        return
    if isinstance(response, dict) and key in response:
        validations.append(f"{label} endpoint follows a consistent protocol format")
    else:
        findings.append(f"{label} endpoint response format is inconsistent")


class VersionNegotiationProbe(DiagnosticTest):
    name = "Protocol: Version Negotiation"
    description = "Tests negotiation of the current protocol version"
    category = "protocol"
    severity = Severity.WARNING

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        findings: list[str] = []
        validations: list[str] = []

        protocol_version = await client.get_protocol_version()
        if protocol_version:
            validations.append(f"Server negotiated protocol version {protocol_version}")
        else:
            findings.append("No negotiated protocol version reported")

        response = await client.list_tools()
        tools = response.get("tools") if isinstance(response, dict) else None
        if isinstance(tools, list):
            validations.append("Response format consistent with the current specification")
            first = tools[0] if tools else None
            if first is None:
                findings.append("No tools available to validate schema compliance")
            elif isinstance(first, dict):
                if "name" in first and "description" in first:
                    validations.append("Tools include required fields (name, description)")
                else:
                    findings.append("Tools missing standard fields; may indicate an older protocol version")
                if "inputSchema" in first:
                    validations.append("Tools include an input schema")
                else:
                    findings.append("Tools missing input schema; may indicate limited protocol support")
        else:
            findings.append("Response format may not be fully compliant")

        await _check_listing_endpoint(
            "Resources", "resources", client.list_resources, findings=findings, validations=validations
        )
        await _check_listing_endpoint(
            "Prompts", "prompts", client.list_prompts, findings=findings, validations=validations
        )

        message = (
            f"Protocol version issues detected ({len(findings)} findings, {len(validations)} validations)"
            if findings
            else f"Protocol version negotiation successful ({len(validations)} validations)"
        )
        return self.create_result(
            not findings,
            message,
            {"protocolVersion": protocol_version, "findings": findings, "validations": validations},
            [
                "Ensure the server implements the current protocol version",
                "Verify all endpoints follow a consistent format",
            ]
            if findings
            else None,
        )


class BackwardCompatibilityProbe(DiagnosticTest):
    name = "Protocol: Backward Compatibility Support"
    description = "Tests core listing endpoints that every protocol version offers"
    category = "protocol"
    severity = Severity.INFO

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        observations: list[str] = []
        checks: list[str] = []

        try:
            response = await client.list_tools()
        except Exception as exc:
            observations.append(f"List Tools: failed - {error_text(exc)}")
            response = None
        tools = response.get("tools") if isinstance(response, dict) else None
        if isinstance(tools, list):
            checks.append("List Tools: fully supported")
            first = tools[0] if tools else None
            if isinstance(first, dict) and {"name", "description", "inputSchema"} <= first.keys():
                checks.append("Server supports the modern tool schema format")
            elif isinstance(first, dict) and {"name", "description"} <= first.keys():
                checks.append("Server supports the basic tool format")
        elif response is not None:
            observations.append("List Tools: unexpected response format")

        for label, call in (("List Resources", client.list_resources), ("List Prompts", client.list_prompts)):
            reason = await rejection_reason(call())
            if reason is None:
                checks.append(f"{label}: fully supported")
            else:
                checks.append(f"{label}: not implemented (acceptable)")

        message = (
            f"Backward compatibility issues detected ({len(observations)} issues)"
            if observations
            else f"Backward compatibility checks passed ({len(checks)} checks)"
        )
        return self.create_result(
            not observations,
            message,
            {"observations": observations, "compatibilityChecks": checks},
            ["Ensure core features work across protocol versions"] if observations else None,
        )


__all__ = ["BackwardCompatibilityProbe", "VersionNegotiationProbe"]
