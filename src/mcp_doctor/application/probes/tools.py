"""Probes for the tools capability."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mcp_doctor.application.probe import DiagnosticTest, error_text
from mcp_doctor.application.probes.support import (
    BOGUS_ARGUMENTS,
    READ_ONLY_TOOL_HINTS,
    duplicates,
    fetch_tools,
    pick_tool,
    rejection_reason,
    sample_tool_arguments,
)
from mcp_doctor.domain.models import DiagnosticResult, DoctorConfig, Severity
from mcp_doctor.integrations.mcp_client import DoctorClient

NO_TOOLS_REASON = "No tools available"


class _ToolsProbe(DiagnosticTest):
    category = "features"
    required_capability = "tools"


def schema_issues(tool: Mapping[str, Any]) -> list[str]:
    """Return the structural problems of one tool definition."""

    label = tool.get("name") or "<unnamed>"
    issues: list[str] = []
    if not isinstance(tool.get("name"), str) or not tool.get("name"):
        issues.append(f"{label}: missing name")
    if not isinstance(tool.get("description"), str) or not tool.get("description"):
        issues.append(f"{label}: missing description")
    schema = tool.get("inputSchema")
    if not isinstance(schema, Mapping):
        issues.append(f"{label}: missing inputSchema")
    elif "type" not in schema:
        issues.append(f"{label}: inputSchema has no type")
    elif schema.get("type") != "object":
        issues.append(f"{label}: inputSchema type should be 'object'")
    return issues


class ToolCapabilityProbe(_ToolsProbe):
    name = "Tools: Capability Declaration"
    description = "Checks that the server answers tools/list"
    severity = Severity.CRITICAL

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        try:
            tools = await fetch_tools(client)
        except Exception as exc:
            return self.create_result(
                False,
                "Server does not support the tools capability",
                {"error": error_text(exc)},
                ["Implement the tools/list method", "Declare the tools capability during initialization"],
            )
        return self.create_result(
            True,
            f"Tools capability supported ({len(tools)} tools)",
            {"toolCount": len(tools)},
        )


class ToolListingProbe(_ToolsProbe):
    name = "Tools: Tool Listing"
    description = "Checks that at least one tool is listed and names are unique"
    severity = Severity.WARNING

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        tools = await fetch_tools(client)
        names = [str(tool.get("name")) for tool in tools]
        if not tools:
            return self.create_result(
                False,
                "Server lists no tools",
                {"toolCount": 0},
                ["Expose at least one tool or stop declaring the tools capability"],
            )
        repeated = duplicates(names)
        if repeated:
            return self.create_result(
                False,
                f"Duplicate tool names found: {', '.join(repeated)}",
                {"toolCount": len(tools), "duplicates": repeated},
                ["Give every tool a unique name"],
            )
        return self.create_result(
            True,
            f"Found {len(tools)} tools with unique names",
            {"toolCount": len(tools), "tools": names},
        )


class ToolSchemaProbe(_ToolsProbe):
    name = "Tools: Schema Validation"
    description = "Validates each tool's name, description and input schema"
    severity = Severity.WARNING

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        tools = await fetch_tools(client)
        if not tools:
            return self.create_skipped_result(NO_TOOLS_REASON)
        issues = [issue for tool in tools for issue in schema_issues(tool)]
        if issues:
            return self.create_result(
                False,
                f"Schema issues found in tool definitions ({len(issues)} issues)",
                {"issues": issues, "toolCount": len(tools)},
                [
                    "Give every tool a name and a description",
                    "Declare an inputSchema of type 'object' for every tool",
                ],
            )
        return self.create_result(
            True,
            f"All {len(tools)} tool schemas are valid",
            {"toolCount": len(tools)},
        )


class ToolExecutionProbe(_ToolsProbe):
    name = "Tools: Tool Execution"
    description = "Calls a harmless-looking tool with generated arguments"
    severity = Severity.INFO

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        tools = await fetch_tools(client)
        tool = pick_tool(tools)
        if tool is None:
            return self.create_skipped_result(NO_TOOLS_REASON)
        tool_name = str(tool.get("name"))
        arguments = sample_tool_arguments(tool)
        try:
            response = await client.call_tool(tool_name, arguments)
        except Exception as exc:
            return self.create_result(
                False,
                f"Tool '{tool_name}' execution failed",
                {"tool": tool_name, "arguments": arguments, "error": error_text(exc)},
                [
                    "Check the tool implementation for errors",
                    "Make sure the tool accepts arguments matching its input schema",
                ],
            )
        content = response.get("content") if isinstance(response, Mapping) else None
        return self.create_result(
            True,
            f"Tool '{tool_name}' executed successfully",
            {
                "tool": tool_name,
                "arguments": arguments,
                "contentItems": len(content) if isinstance(content, list) else 0,
            },
        )


class ToolErrorHandlingProbe(_ToolsProbe):
    name = "Tools: Error Handling"
    description = "Checks that a tool rejects arguments it does not declare"
    severity = Severity.INFO

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        tools = await fetch_tools(client)
        if not tools:
            return self.create_skipped_result(NO_TOOLS_REASON)
        tool_name = str(tools[0].get("name"))
        reason = await rejection_reason(client.call_tool(tool_name, dict(BOGUS_ARGUMENTS)))
        if reason is None:
            return self.create_result(
                False,
                f"Tool '{tool_name}' accepted invalid arguments",
                {"tool": tool_name},
                [
                    "Validate tool arguments against the input schema",
                    "Reject unknown parameters with a clear error",
                ],
            )
        return self.create_result(
            True,
            f"Tool '{tool_name}' rejected invalid arguments",
            {"tool": tool_name, "error": reason},
        )


class ToolAnnotationsProbe(_ToolsProbe):
    name = "Tools: Annotations Support"
    description = "Checks for title and readOnlyHint annotations"
    severity = Severity.INFO

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        tools = await fetch_tools(client)
        if not tools:
            return self.create_result(
                True,
                "No tools to check for annotations",
                {"toolCount": 0},
            )

        missing_title: list[str] = []
        missing_read_only: list[str] = []
        annotated = 0
        for tool in tools:
            tool_name = str(tool.get("name"))
            annotations = tool.get("annotations")
            if not isinstance(annotations, Mapping):
                annotations = {}
            else:
                annotated += 1
            if not annotations.get("title") and not tool.get("title"):
                missing_title.append(tool_name)
            lowered = tool_name.lower()
            if any(lowered.startswith(hint) for hint in READ_ONLY_TOOL_HINTS):
                if "readOnlyHint" not in annotations:
                    missing_read_only.append(tool_name)

        issues = [f"{name}: missing title annotation" for name in missing_title]
        issues.extend(f"{name}: read-like tool without readOnlyHint" for name in missing_read_only)
        details = {"toolCount": len(tools), "annotatedTools": annotated, "issues": issues}
        if issues:
            return self.create_result(
                False,
                f"Tool annotations incomplete ({len(issues)} issues)",
                details,
                [
                    "Add a human-readable title annotation to each tool",
                    "Mark read-only tools with readOnlyHint",
                ],
            )
        return self.create_result(True, f"All {len(tools)} tools are properly annotated", details)


__all__ = [
    "ToolAnnotationsProbe",
    "ToolCapabilityProbe",
    "ToolErrorHandlingProbe",
    "ToolExecutionProbe",
    "ToolListingProbe",
    "ToolSchemaProbe",
    "schema_issues",
]
