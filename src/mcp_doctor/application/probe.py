"""Base class for diagnostic probes and the settle-all sub-check helper."""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from mcp_doctor.domain.models import DiagnosticResult, DoctorConfig, ResultStatus, Severity

if TYPE_CHECKING:
    from mcp_doctor.integrations.mcp_client import DoctorClient

SubCheck = Callable[[], Awaitable[Any]]


def error_text(exc: BaseException) -> str:
    text = str(exc).strip()
    return text or exc.__class__.__name__


def elapsed_ms(started: float) -> int:
    return max(0, round((time.perf_counter() - started) * 1000))


@dataclass(frozen=True)
class SubCheckOutcome:
    name: str
    ok: bool
    value: Any = None
    reason: str | None = None


async def run_subchecks(checks: Mapping[str, SubCheck]) -> list[SubCheckOutcome]:
    """Run every sub-check concurrently and wait for all of them to settle.

    A failing sub-check never short-circuits its siblings. Outcomes keep the
    order of ``checks``.
    """

    names = list(checks)
    settled = await asyncio.gather(
        *(checks[name]() for name in names), return_exceptions=True
    )
    outcomes: list[SubCheckOutcome] = []
    for name, outcome in zip(names, settled):
        if isinstance(outcome, Exception):
            outcomes.append(SubCheckOutcome(name=name, ok=False, reason=error_text(outcome)))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            outcomes.append(SubCheckOutcome(name=name, ok=True, value=outcome))
    return outcomes


def summarize_subchecks(outcomes: Sequence[SubCheckOutcome]) -> tuple[list[str], dict[str, Any]]:
    """Return ``"<name>: <reason>"`` issues and the successful payloads keyed by name."""

    issues = [f"{outcome.name}: {outcome.reason}" for outcome in outcomes if not outcome.ok]
    payloads = {outcome.name: outcome.value for outcome in outcomes if outcome.ok}
    return issues, payloads


class DiagnosticTest(ABC):
    """One compliance probe against a connected server.

    Subclasses set the class attributes and implement :meth:`execute`. The
    runner calls :meth:`run`, which converts any exception raised by
    ``execute`` into a failed result and stamps the elapsed time.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    category: ClassVar[str]
    severity: ClassVar[Severity]
    required_capability: ClassVar[str | None] = None

    @abstractmethod
    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        """Probe the server and describe the outcome."""

    async def run(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        started = time.perf_counter()
        try:
            result = await self.execute(client, config)
        except Exception as exc:
            result = self.create_result(
                False,
                error_text(exc),
                details={"error": error_text(exc), "type": exc.__class__.__name__},
            )
        return result.with_duration(elapsed_ms(started))

    def create_result(
        self,
        success: bool,
        message: str,
        details: Any = None,
        recommendations: Sequence[str] | None = None,
    ) -> DiagnosticResult:
        return DiagnosticResult(
            test_name=self.name,
            status=ResultStatus.PASSED if success else ResultStatus.FAILED,
            message=message,
            severity=self.severity,
            details=details,
            recommendations=tuple(recommendations or ()),
            required_capability=self.required_capability,
        )

    def create_skipped_result(self, reason: str) -> DiagnosticResult:
        return DiagnosticResult(
            test_name=self.name,
            status=ResultStatus.SKIPPED,
            message=f"Test skipped: {reason}",
            severity=self.severity,
            required_capability=self.required_capability,
        )

    async def composite(
        self,
        checks: Mapping[str, SubCheck],
        *,
        success_message: str,
        failure_message: str,
        recommendations: Sequence[str] = (),
    ) -> DiagnosticResult:
        """Build one verdict from several independently named sub-checks.

        ``failure_message`` may reference ``{count}``, the number of failing sub-checks.
        """

        issues, payloads = summarize_subchecks(await run_subchecks(checks))
        if issues:
            return self.create_result(
                False,
                failure_message.format(count=len(issues)),
                {"issues": issues, **payloads},
                recommendations,
            )
        return self.create_result(True, success_message, payloads)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name!r}>"


__all__ = [
    "DiagnosticTest",
    "SubCheck",
    "SubCheckOutcome",
    "elapsed_ms",
    "error_text",
    "run_subchecks",
    "summarize_subchecks",
]
