"""Protocol compliance and health diagnostics for MCP servers."""

__version__ = "0.4.0"

from mcp_doctor.application.registry import TestRegistry, build_default_registry  # noqa: E402
from mcp_doctor.application.report import extract_category, generate_report  # noqa: E402
from mcp_doctor.application.runner import DoctorRunner  # noqa: E402
from mcp_doctor.domain.models import (  # noqa: E402
    DiagnosticResult,
    DoctorConfig,
    HealthReport,
    ServerConfig,
    Severity,
)

__all__ = [
    "DiagnosticResult",
    "DoctorConfig",
    "DoctorRunner",
    "HealthReport",
    "ServerConfig",
    "Severity",
    "TestRegistry",
    "__version__",
    "build_default_registry",
    "extract_category",
    "generate_report",
]
