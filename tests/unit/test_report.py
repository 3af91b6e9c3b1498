from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mcp_doctor.application.report import (
    category_score,
    category_weight,
    extract_category,
    generate_report,
    overall_score,
    sort_issues,
)
from mcp_doctor.domain.models import (
    CategoryStatus,
    DiagnosticResult,
    ResultStatus,
    ServerInfo,
    Severity,
)

SERVER = ServerInfo(name="fake", transport="stdio", version="1.0.0")
START = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
END = START + timedelta(milliseconds=250)


def _result(
    name: str,
    status: ResultStatus = ResultStatus.PASSED,
    severity: Severity = Severity.INFO,
    duration: int = 0,
    **kwargs,
) -> DiagnosticResult:
    return DiagnosticResult(
        test_name=name,
        status=status,
        message=f"{name} {status.value}",
        severity=severity,
        duration=duration,
        **kwargs,
    )


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Protocol: Ping Check", "protocol"),
        ("NoColonHere", "general"),
        ("  Tools : Listing", "tools"),
        ("Security:", "security"),
        ("A: b: c", "a"),
    ],
)
def test_extract_category(name: str, expected: str) -> None:
    assert extract_category(name) == expected


def test_category_weight_falls_back_to_default() -> None:
    assert category_weight("protocol") == 0.3
    assert category_weight("Security") == 0.25
    assert category_weight("lifecycle") == 0.1


def test_scenario_single_category_with_critical_failure() -> None:
    results = [
        _result("Protocol: A", ResultStatus.FAILED, Severity.CRITICAL, duration=10),
        _result("Protocol: B", ResultStatus.PASSED, Severity.INFO, duration=5),
    ]

    report = generate_report(results, SERVER, START, END)

    assert len(report.categories) == 1
    protocol = report.categories[0]
    assert protocol.name == "protocol"
    assert (protocol.passed, protocol.failed, protocol.warnings, protocol.total) == (1, 1, 0, 2)
    assert protocol.duration == 15
    assert protocol.status is CategoryStatus.FAILED
    assert category_score(results) == 70
    assert report.summary.overall_score == 70


def test_warning_failure_counts_as_warning_not_failed() -> None:
    results = [
        _result("Protocol: W", ResultStatus.FAILED, Severity.WARNING),
        _result("Protocol: I", ResultStatus.FAILED, Severity.INFO),
        _result("Protocol: C", ResultStatus.FAILED, Severity.CRITICAL),
    ]

    category = generate_report(results, SERVER, START, END).categories[0]

    assert category.warnings == 1
    assert category.failed == 2


def test_issue_order_is_stable_by_severity() -> None:
    info_one = _result("Tools: info one", ResultStatus.FAILED, Severity.INFO)
    critical = _result("Tools: critical", ResultStatus.FAILED, Severity.CRITICAL)
    warning = _result("Tools: warning", ResultStatus.FAILED, Severity.WARNING)
    info_two = _result("Tools: info two", ResultStatus.FAILED, Severity.INFO)
    passed = _result("Tools: fine")

    issues = sort_issues([info_one, critical, passed, warning, info_two])

    assert [issue.test_name for issue in issues] == [
        "Tools: critical",
        "Tools: warning",
        "Tools: info one",
        "Tools: info two",
    ]


def test_empty_results_produce_zero_score() -> None:
    report = generate_report([], SERVER, START, END)

    assert report.summary.overall_score == 0
    assert report.categories == ()
    assert report.issues == ()
    assert report.metadata.test_count == 0


def test_category_score_floors_at_zero() -> None:
    results = [_result(f"Protocol: {i}", ResultStatus.FAILED, Severity.CRITICAL) for i in range(5)]
    assert category_score(results) == 0


def test_overall_score_is_weighted_average() -> None:
    grouped = {
        "protocol": [_result("Protocol: x", ResultStatus.FAILED, Severity.CRITICAL)],
        "performance": [_result("Performance: y")],
    }
    # (70 * 0.3 + 100 * 0.2) / 0.5 = 82
    assert overall_score(grouped) == 82


def test_overall_score_rounds_to_nearest_integer() -> None:
    grouped = {
        "general": [_result("a", ResultStatus.FAILED, Severity.INFO)],
        "other": [_result("Other: b")],
        "third": [_result("Third: c")],
    }
    # (95 + 100 + 100) / 3 = 98.33
    assert overall_score(grouped) == 98


def test_skipped_results_and_capabilities() -> None:
    results = [
        _result("Tools: listing", required_capability="tools"),
        _result("Prompts: listing", ResultStatus.SKIPPED, required_capability="prompts"),
        _result("Resources: listing", ResultStatus.FAILED, Severity.INFO, required_capability="resources"),
    ]

    report = generate_report(results, SERVER, START, END)

    assert report.summary.skipped == 1
    assert report.metadata.skipped_count == 1
    assert report.server_capabilities == ("tools",)
    assert report.skipped_capabilities == ("prompts",)
    prompts = next(category for category in report.categories if category.name == "prompts")
    assert prompts.status is CategoryStatus.SKIPPED
    assert prompts.total == 1


def test_categories_are_sorted_by_name() -> None:
    results = [_result("Tools: a"), _result("Lifecycle: b"), _result("Protocol: c")]
    names = [category.name for category in generate_report(results, SERVER, START, END).categories]
    assert names == ["lifecycle", "protocol", "tools"]


def test_metadata_derives_from_supplied_times() -> None:
    report = generate_report([_result("Protocol: a")], SERVER, START, END)

    assert report.metadata.duration == 250
    assert report.metadata.timestamp == "2026-01-02T03:04:05.000+00:00"


def test_generate_report_is_idempotent() -> None:
    results = [
        _result("Protocol: A", ResultStatus.FAILED, Severity.CRITICAL, duration=10),
        _result("Tools: B", ResultStatus.FAILED, Severity.WARNING, duration=3, details={"k": [1, 2]}),
        _result("Prompts: C", ResultStatus.SKIPPED),
    ]

    first = generate_report(results, SERVER, START, END)
    second = generate_report(results, SERVER, START, END)

    assert first == second
    assert first.to_dict() == second.to_dict()


def test_report_to_dict_uses_camel_case_keys() -> None:
    payload = generate_report(
        [_result("Protocol: A", ResultStatus.FAILED, Severity.CRITICAL, recommendations=("fix",))],
        SERVER,
        START,
        END,
    ).to_dict()

    assert payload["summary"]["overallScore"] == 70
    assert payload["summary"]["testResults"] == {"passed": 0, "failed": 1, "skipped": 0, "total": 1}
    assert payload["metadata"]["testCount"] == 1
    assert payload["issues"][0]["testName"] == "Protocol: A"
    assert payload["issues"][0]["recommendations"] == ["fix"]


_names = st.sampled_from(
    ["Protocol: a", "Security: b", "Performance: c", "Tools: d", "Lifecycle: e", "no colon"]
)
_results = st.builds(
    _result,
    name=_names,
    status=st.sampled_from(list(ResultStatus)),
    severity=st.sampled_from(list(Severity)),
    duration=st.integers(min_value=0, max_value=10_000),
)


@given(st.lists(_results, max_size=40))
def test_overall_score_stays_in_bounds(results: list[DiagnosticResult]) -> None:
    report = generate_report(results, SERVER, START, END)
    assert 0 <= report.summary.overall_score <= 100
    assert report.summary.total == len(results)
    assert sum(category.total for category in report.categories) == len(results)


@given(st.lists(_results, max_size=40))
def test_issues_are_exactly_the_failed_results(results: list[DiagnosticResult]) -> None:
    issues = sort_issues(results)
    assert len(issues) == sum(1 for result in results if result.failed)
    ranks = [issue.severity.rank for issue in issues]
    assert ranks == sorted(ranks)
