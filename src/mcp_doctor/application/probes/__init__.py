"""The built-in probe catalogue."""

from __future__ import annotations

from mcp_doctor.application.probe import DiagnosticTest
from mcp_doctor.application.probes.connection import (
    ConnectionLifecycleProbe,
    TransportConnectivityProbe,
    TransportErrorHandlingProbe,
)
from mcp_doctor.application.probes.jsonrpc import (
    ErrorCodeComplianceProbe,
    ErrorResponseFormatProbe,
    MessageFormatProbe,
    RequestIdHandlingProbe,
)
from mcp_doctor.application.probes.lifecycle import InitializationFlowProbe
from mcp_doctor.application.probes.performance import ResponseTimeProbe
from mcp_doctor.application.probes.prompts import (
    PromptArgumentValidationProbe,
    PromptCapabilityProbe,
    PromptListingProbe,
    PromptRetrievalProbe,
    TemplateRenderingProbe,
)
from mcp_doctor.application.probes.resources import (
    MimeTypeProbe,
    ResourceCapabilityProbe,
    ResourceListingProbe,
    ResourceNotFoundProbe,
    ResourceReadingProbe,
    UriValidationProbe,
)
from mcp_doctor.application.probes.tools import (
    ToolAnnotationsProbe,
    ToolCapabilityProbe,
    ToolErrorHandlingProbe,
    ToolExecutionProbe,
    ToolListingProbe,
    ToolSchemaProbe,
)
from mcp_doctor.application.probes.versioning import (
    BackwardCompatibilityProbe,
    VersionNegotiationProbe,
)

PROBE_TYPES: tuple[type[DiagnosticTest], ...] = (
    InitializationFlowProbe,
    TransportConnectivityProbe,
    ConnectionLifecycleProbe,
    TransportErrorHandlingProbe,
    MessageFormatProbe,
    RequestIdHandlingProbe,
    ErrorResponseFormatProbe,
    ErrorCodeComplianceProbe,
    VersionNegotiationProbe,
    BackwardCompatibilityProbe,
    ToolCapabilityProbe,
    ToolListingProbe,
    ToolSchemaProbe,
    ToolExecutionProbe,
    ToolErrorHandlingProbe,
    ToolAnnotationsProbe,
    ResourceCapabilityProbe,
    ResourceListingProbe,
    ResourceReadingProbe,
    MimeTypeProbe,
    UriValidationProbe,
    ResourceNotFoundProbe,
    PromptCapabilityProbe,
    PromptListingProbe,
    PromptRetrievalProbe,
    PromptArgumentValidationProbe,
    TemplateRenderingProbe,
    ResponseTimeProbe,
)


def default_probes() -> list[DiagnosticTest]:
    """Fresh instances of every built-in probe in execution order."""

    return [probe_type() for probe_type in PROBE_TYPES]


__all__ = ["PROBE_TYPES", "default_probes"]
