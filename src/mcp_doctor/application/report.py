"""Turn a list of probe results into a scored :class:`HealthReport`.

Everything in this module is pure: the same inputs always produce an equal
report. The caller supplies the run's start and end times.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Final

from mcp_doctor.domain.models import (
    CategoryStatus,
    CategorySummary,
    DiagnosticResult,
    HealthReport,
    ReportMetadata,
    ReportSummary,
    ResultStatus,
    ServerInfo,
    Severity,
)

DEFAULT_CATEGORY: Final = "general"
DEFAULT_WEIGHT: Final = 0.1

CATEGORY_WEIGHTS: Final[Mapping[str, float]] = {
    "protocol": 0.3,
    "security": 0.25,
    "performance": 0.2,
    "features": 0.15,
    "transport": 0.1,
}

SEVERITY_DEDUCTIONS: Final[Mapping[Severity, int]] = {
    Severity.CRITICAL: 30,
    Severity.WARNING: 10,
    Severity.INFO: 5,
}

_CATEGORY_PATTERN = re.compile(r"^([^:]+):")


def extract_category(test_name: str) -> str:
    """``"Protocol: Ping Check"`` -> ``"protocol"``; names without a colon are ``"general"``."""

    match = _CATEGORY_PATTERN.match(test_name)
    if match is None:
        return DEFAULT_CATEGORY
    return match.group(1).lower().strip()


def category_weight(name: str) -> float:
    return CATEGORY_WEIGHTS.get(name.lower(), DEFAULT_WEIGHT)


def category_score(results: Iterable[DiagnosticResult]) -> int:
    score = 100
    for result in results:
        if result.status is ResultStatus.FAILED:
            score -= SEVERITY_DEDUCTIONS[result.severity]
    return max(0, score)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def overall_score(grouped: Mapping[str, Sequence[DiagnosticResult]]) -> int:
    """Weighted average of the per-category scores, rounded to an integer."""

    total_score = 0.0
    total_weight = 0.0
    for name, results in grouped.items():
        if not results:
            continue
        weight = category_weight(name)
        total_score += category_score(results) * weight
        total_weight += weight
    if total_weight <= 0:
        return 0
    return min(100, max(0, _round_half_up(total_score / total_weight)))


@dataclass
class _CategoryTally:
    passed: int = 0
    failed: int = 0
    warnings: int = 0
    total: int = 0
    duration: int = 0

    def add(self, result: DiagnosticResult) -> None:
        self.total += 1
        self.duration += result.duration
        if result.status is ResultStatus.PASSED:
            self.passed += 1
        elif result.status is ResultStatus.FAILED:
            # info failures count as failed here even though they deduct less
            if result.severity is Severity.WARNING:
                self.warnings += 1
            else:
                self.failed += 1

    @property
    def status(self) -> CategoryStatus:
        if self.failed > 0:
            return CategoryStatus.FAILED
        if self.warnings > 0:
            return CategoryStatus.WARNING
        if self.passed == 0:
            return CategoryStatus.SKIPPED
        return CategoryStatus.PASSED

    def freeze(self, name: str) -> CategorySummary:
        return CategorySummary(
            name=name,
            passed=self.passed,
            failed=self.failed,
            warnings=self.warnings,
            total=self.total,
            duration=self.duration,
            status=self.status,
        )


def group_by_category(results: Iterable[DiagnosticResult]) -> dict[str, list[DiagnosticResult]]:
    grouped: dict[str, list[DiagnosticResult]] = {}
    for result in results:
        grouped.setdefault(extract_category(result.test_name), []).append(result)
    return grouped


def summarize_categories(
    grouped: Mapping[str, Sequence[DiagnosticResult]],
) -> tuple[CategorySummary, ...]:
    summaries = []
    for name in sorted(grouped):
        tally = _CategoryTally()
        for result in grouped[name]:
            tally.add(result)
        summaries.append(tally.freeze(name))
    return tuple(summaries)


def sort_issues(results: Iterable[DiagnosticResult]) -> tuple[DiagnosticResult, ...]:
    """Failed results ordered critical, warning, info; ties keep their input order."""

    failed = [result for result in results if result.status is ResultStatus.FAILED]
    return tuple(sorted(failed, key=lambda result: result.severity.rank))


def _capabilities(results: Iterable[DiagnosticResult], status: ResultStatus) -> tuple[str, ...]:
    return tuple(
        sorted(
            {
                result.required_capability
                for result in results
                if result.status is status and result.required_capability
            }
        )
    )


def _duration_ms(start_time: datetime, end_time: datetime) -> int:
    return max(0, _round_half_up((end_time - start_time).total_seconds() * 1000))


def _timestamp(start_time: datetime) -> str:
    if start_time.tzinfo is None:
        start_time = start_time.replace(tzinfo=timezone.utc)
    return start_time.astimezone(timezone.utc).isoformat(timespec="milliseconds")


def generate_report(
    results: Sequence[DiagnosticResult],
    server_info: ServerInfo,
    start_time: datetime,
    end_time: datetime,
) -> HealthReport:
    """Aggregate ``results`` into categories, a sorted issue list and a 0-100 score."""

    results = tuple(results)
    grouped = group_by_category(results)
    passed = sum(1 for result in results if result.status is ResultStatus.PASSED)
    failed = sum(1 for result in results if result.status is ResultStatus.FAILED)
    skipped = sum(1 for result in results if result.status is ResultStatus.SKIPPED)

    return HealthReport(
        server_info=server_info,
        metadata=ReportMetadata(
            timestamp=_timestamp(start_time),
            duration=_duration_ms(start_time, end_time),
            test_count=len(results),
            skipped_count=skipped,
        ),
        summary=ReportSummary(
            passed=passed,
            failed=failed,
            skipped=skipped,
            total=len(results),
            overall_score=overall_score(grouped) if results else 0,
        ),
        categories=summarize_categories(grouped),
        issues=sort_issues(results),
        results=results,
        server_capabilities=_capabilities(results, ResultStatus.PASSED),
        skipped_capabilities=_capabilities(results, ResultStatus.SKIPPED),
    )


__all__ = [
    "CATEGORY_WEIGHTS",
    "DEFAULT_CATEGORY",
    "DEFAULT_WEIGHT",
    "SEVERITY_DEDUCTIONS",
    "category_score",
    "category_weight",
    "extract_category",
    "generate_report",
    "group_by_category",
    "overall_score",
    "sort_issues",
    "summarize_categories",
]
