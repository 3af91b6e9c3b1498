"""Value types shared by the doctor engine, its probes and the renderers."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Final


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return SEVERITY_RANK[self]


SEVERITY_RANK: Final[dict[Severity, int]] = {
    Severity.CRITICAL: 0,
    Severity.WARNING: 1,
    Severity.INFO: 2,
}


class ResultStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class CategoryStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    WARNING = "warning"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DiagnosticResult:
    """Outcome of one probe execution. ``duration`` is elapsed milliseconds."""

    test_name: str
    status: ResultStatus
    message: str
    severity: Severity
    duration: int = 0
    details: Any = None
    recommendations: tuple[str, ...] = ()
    required_capability: str | None = None

    @property
    def passed(self) -> bool:
        return self.status is ResultStatus.PASSED

    @property
    def failed(self) -> bool:
        return self.status is ResultStatus.FAILED

    @property
    def skipped(self) -> bool:
        return self.status is ResultStatus.SKIPPED

    def with_duration(self, duration_ms: int) -> DiagnosticResult:
        return replace(self, duration=max(0, int(duration_ms)))

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "testName": self.test_name,
            "status": self.status.value,
            "message": self.message,
            "severity": self.severity.value,
            "duration": self.duration,
        }
        if self.details is not None:
            payload["details"] = self.details
        payload["recommendations"] = list(self.recommendations)
        if self.required_capability:
            payload["requiredCapability"] = self.required_capability
        return payload


@dataclass(frozen=True)
class CategorySummary:
    name: str
    passed: int
    failed: int
    warnings: int
    total: int
    duration: int
    status: CategoryStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "passed": self.passed,
            "failed": self.failed,
            "warnings": self.warnings,
            "total": self.total,
            "duration": self.duration,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class ServerInfo:
    name: str
    transport: str
    version: str | None = None
    protocol_version: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name, "transport": self.transport}
        if self.version:
            payload["version"] = self.version
        if self.protocol_version:
            payload["protocolVersion"] = self.protocol_version
        return payload


@dataclass(frozen=True)
class ReportMetadata:
    timestamp: str
    duration: int
    test_count: int
    skipped_count: int


@dataclass(frozen=True)
class ReportSummary:
    passed: int
    failed: int
    skipped: int
    total: int
    overall_score: int


@dataclass(frozen=True)
class HealthReport:
    server_info: ServerInfo
    metadata: ReportMetadata
    summary: ReportSummary
    categories: tuple[CategorySummary, ...]
    issues: tuple[DiagnosticResult, ...]
    results: tuple[DiagnosticResult, ...]
    server_capabilities: tuple[str, ...] = ()
    skipped_capabilities: tuple[str, ...] = ()

    @property
    def has_critical_issues(self) -> bool:
        return any(issue.severity is Severity.CRITICAL for issue in self.issues)

    def to_dict(self) -> dict[str, Any]:
        return {
            "serverInfo": self.server_info.to_dict(),
            "serverCapabilities": list(self.server_capabilities),
            "skippedCapabilities": list(self.skipped_capabilities),
            "metadata": {
                "timestamp": self.metadata.timestamp,
                "duration": self.metadata.duration,
                "testCount": self.metadata.test_count,
                "skippedTestCount": self.metadata.skipped_count,
            },
            "summary": {
                "testResults": {
                    "passed": self.summary.passed,
                    "failed": self.summary.failed,
                    "skipped": self.summary.skipped,
                    "total": self.summary.total,
                },
                "overallScore": self.summary.overall_score,
            },
            "categories": [category.to_dict() for category in self.categories],
            "issues": [issue.to_dict() for issue in self.issues],
            "results": [result.to_dict() for result in self.results],
        }


OUTPUT_FORMATS: Final[frozenset[str]] = frozenset({"console", "json"})

DEFAULT_CONNECTION_TIMEOUT_MS: Final = 5_000
DEFAULT_TEST_TIMEOUT_MS: Final = 30_000
DEFAULT_OVERALL_TIMEOUT_MS: Final = 300_000


@dataclass(frozen=True)
class Timeouts:
    connection: int = DEFAULT_CONNECTION_TIMEOUT_MS
    test_execution: int = DEFAULT_TEST_TIMEOUT_MS
    overall: int = DEFAULT_OVERALL_TIMEOUT_MS


@dataclass(frozen=True)
class CategoryFilter:
    enabled: tuple[str, ...] = ()
    disabled: tuple[str, ...] = ()


@dataclass(frozen=True)
class OutputSettings:
    format: str = "console"
    file: str | None = None


@dataclass(frozen=True)
class DoctorConfig:
    timeouts: Timeouts = field(default_factory=Timeouts)
    categories: CategoryFilter = field(default_factory=CategoryFilter)
    output: OutputSettings = field(default_factory=OutputSettings)


TRANSPORT_STDIO: Final = "stdio"
TRANSPORT_SSE: Final = "sse"
TRANSPORT_HTTP: Final = "http"
TRANSPORT_CHOICES: Final[frozenset[str]] = frozenset(
    {TRANSPORT_STDIO, TRANSPORT_SSE, TRANSPORT_HTTP}
)


@dataclass(frozen=True)
class ServerConfig:
    """Where and how to reach the server under diagnosis."""

    name: str = "unknown"
    transport: str | None = None
    command: str | None = None
    args: tuple[str, ...] = ()
    env: dict[str, str] = field(default_factory=dict)
    url: str | None = None
    cwd: str | None = None

    def resolved_transport(self) -> str:
        if self.transport:
            return self.transport
        if self.command:
            return TRANSPORT_STDIO
        if self.url and self.url.rstrip("/").endswith("/sse"):
            return TRANSPORT_SSE
        if self.url:
            return TRANSPORT_HTTP
        return TRANSPORT_STDIO


__all__ = [
    "CategoryFilter",
    "CategoryStatus",
    "CategorySummary",
    "DEFAULT_CONNECTION_TIMEOUT_MS",
    "DEFAULT_OVERALL_TIMEOUT_MS",
    "DEFAULT_TEST_TIMEOUT_MS",
    "DiagnosticResult",
    "DoctorConfig",
    "HealthReport",
    "OUTPUT_FORMATS",
    "OutputSettings",
    "ReportMetadata",
    "ReportSummary",
    "ResultStatus",
    "SEVERITY_RANK",
    "ServerConfig",
    "ServerInfo",
    "Severity",
    "TRANSPORT_CHOICES",
    "TRANSPORT_HTTP",
    "TRANSPORT_SSE",
    "TRANSPORT_STDIO",
    "Timeouts",
]
