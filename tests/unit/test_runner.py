from __future__ import annotations

import asyncio
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone

import pytest

from mcp_doctor.application.probe import DiagnosticTest
from mcp_doctor.application.registry import TestRegistry
from mcp_doctor.application.runner import (
    OVERALL_TIMEOUT_REASON,
    TIMED_OUT_MESSAGE,
    DoctorRunner,
)
from mcp_doctor.domain.models import (
    CategoryFilter,
    DoctorConfig,
    ResultStatus,
    Severity,
    Timeouts,
)
from mcp_doctor.infrastructure.errors import ConfigurationError, ConnectionFailedError


def _probe(
    probe_name: str,
    probe_category: str,
    *,
    sleep: float = 0.0,
    probe_severity: Severity = Severity.INFO,
) -> DiagnosticTest:
    class _Probe(DiagnosticTest):
        name = probe_name
        description = "runner test probe"
        category = probe_category
        severity = probe_severity

        async def execute(self, client, config):
            if sleep:
                await asyncio.sleep(sleep)
            await client.list_tools()
            return self.create_result(True, f"{probe_name} ok")

    return _Probe()


class _CrashingProbe(DiagnosticTest):
    name = "Protocol: Crashing"
    description = "escapes its own error handling"
    category = "protocol"
    severity = Severity.CRITICAL

    async def execute(self, client, config):  # pragma: no cover - run is overridden
        raise AssertionError

    async def run(self, client, config):
        raise RuntimeError("bug in probe")


def _clock() -> Iterator[datetime]:
    start = datetime(2026, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
    yield start
    yield start + timedelta(milliseconds=500)


def _runner(registry: TestRegistry, client) -> DoctorRunner:
    times = _clock()
    return DoctorRunner(registry, client_factory=lambda server, config: client, clock=lambda: next(times))


@pytest.mark.asyncio
async def test_runs_probes_serially_and_disconnects(fake_client, server_config, doctor_config) -> None:
    registry = TestRegistry([_probe("Protocol: a", "protocol"), _probe("Tools: b", "features")])

    report = await _runner(registry, fake_client).run(server_config, doctor_config)

    assert [result.test_name for result in report.results] == ["Protocol: a", "Tools: b"]
    assert report.summary.passed == 2
    assert report.metadata.duration == 500
    assert report.metadata.timestamp == "2026-05-01T12:00:00.000+00:00"
    assert fake_client.called("connect") == 1
    assert fake_client.disconnects == 1
    assert report.server_info.version == "1.2.3"
    assert report.server_info.protocol_version == "2025-06-18"
    assert report.server_info.transport == "stdio"


@pytest.mark.asyncio
async def test_per_test_timeout_records_failed_result(fake_client, server_config) -> None:
    config = DoctorConfig(timeouts=Timeouts(connection=1000, test_execution=20, overall=10_000))
    registry = TestRegistry(
        [
            _probe("Protocol: slow", "protocol", sleep=1.0, probe_severity=Severity.WARNING),
            _probe("Protocol: fast", "protocol"),
        ]
    )

    report = await _runner(registry, fake_client).run(server_config, config)

    slow, fast = report.results
    assert slow.status is ResultStatus.FAILED
    assert slow.message == TIMED_OUT_MESSAGE
    assert slow.severity is Severity.WARNING
    assert slow.details == {"timeoutMs": 20}
    assert fast.passed


@pytest.mark.asyncio
async def test_overall_timeout_skips_remaining_probes(fake_client, server_config) -> None:
    config = DoctorConfig(timeouts=Timeouts(connection=1000, test_execution=5000, overall=20))
    registry = TestRegistry(
        [
            _probe("Protocol: first", "protocol", sleep=0.05),
            _probe("Protocol: second", "protocol"),
            _probe("Tools: third", "features"),
        ]
    )

    report = await _runner(registry, fake_client).run(server_config, config)

    first, second, third = report.results
    assert first.passed
    for skipped in (second, third):
        assert skipped.status is ResultStatus.SKIPPED
        assert skipped.message == f"Test skipped: {OVERALL_TIMEOUT_REASON}"
    assert report.summary.skipped == 2


@pytest.mark.asyncio
async def test_defensive_catch_turns_escaping_errors_into_failures(
    fake_client, server_config, doctor_config
) -> None:
    registry = TestRegistry([_CrashingProbe(), _probe("Protocol: after", "protocol")])

    report = await _runner(registry, fake_client).run(server_config, doctor_config)

    crashed, after = report.results
    assert crashed.failed
    assert crashed.message == "Test execution failed: bug in probe"
    assert crashed.severity is Severity.CRITICAL
    assert after.passed
    assert report.has_critical_issues


@pytest.mark.asyncio
async def test_probe_errors_do_not_abort_the_run(
    fake_client_factory, server_config, doctor_config
) -> None:
    client = fake_client_factory(failures={"list_tools": RuntimeError("tools/list exploded")})
    registry = TestRegistry([_probe("Protocol: a", "protocol"), _probe("Protocol: b", "protocol")])

    report = await _runner(registry, client).run(server_config, doctor_config)

    assert [result.message for result in report.results] == ["tools/list exploded"] * 2


@pytest.mark.asyncio
async def test_connection_failure_is_fatal(fake_client_factory, server_config, doctor_config) -> None:
    client = fake_client_factory(failures={"connect": RuntimeError("connection refused")})
    registry = TestRegistry([_probe("Protocol: a", "protocol")])

    with pytest.raises(ConnectionFailedError, match="connection refused"):
        await _runner(registry, client).run(server_config, doctor_config)

    assert client.disconnects == 1
    assert client.called("list_tools") == 0


@pytest.mark.asyncio
async def test_connection_timeout_is_fatal(fake_client_factory, server_config) -> None:
    client = fake_client_factory(delays={"connect": 1.0})
    config = DoctorConfig(timeouts=Timeouts(connection=20))
    registry = TestRegistry([_probe("Protocol: a", "protocol")])

    with pytest.raises(ConnectionFailedError, match="Timed out connecting to fake after 20ms"):
        await _runner(registry, client).run(server_config, config)


@pytest.mark.asyncio
async def test_unknown_category_fails_before_connecting(server_config) -> None:
    created: list[object] = []

    def factory(server, config):
        created.append(server)
        raise AssertionError("client must not be created")

    registry = TestRegistry([_probe("Protocol: a", "protocol")])
    config = DoctorConfig(categories=CategoryFilter(enabled=("protocol", "telepathy")))

    with pytest.raises(ConfigurationError, match="telepathy"):
        await DoctorRunner(registry, client_factory=factory).run(server_config, config)
    assert created == []


@pytest.mark.asyncio
async def test_category_filters_select_probes(fake_client, server_config) -> None:
    registry = TestRegistry(
        [
            _probe("Protocol: a", "protocol"),
            _probe("Tools: b", "features"),
            _probe("Prompts: c", "prompts"),
        ]
    )
    config = DoctorConfig(
        categories=CategoryFilter(enabled=("protocol", "features"), disabled=("features",))
    )

    report = await _runner(registry, fake_client).run(server_config, config)

    assert [result.test_name for result in report.results] == ["Protocol: a"]


def test_disabled_categories_ignore_case() -> None:
    registry = TestRegistry([_probe("Protocol: a", "protocol"), _probe("Tools: b", "features")])
    runner = DoctorRunner(registry)

    config = DoctorConfig(categories=CategoryFilter(disabled=(" Features",)))

    assert [test.name for test in runner.select_tests(config)] == ["Protocol: a"]


def test_select_tests_defaults_to_everything() -> None:
    registry = TestRegistry([_probe("Protocol: a", "protocol"), _probe("Tools: b", "features")])
    runner = DoctorRunner(registry)

    assert len(runner.select_tests(DoctorConfig())) == 2
    disabled = DoctorConfig(categories=CategoryFilter(disabled=("protocol",)))
    assert [test.name for test in runner.select_tests(disabled)] == ["Tools: b"]
