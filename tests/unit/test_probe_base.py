from __future__ import annotations

import asyncio

import pytest

from mcp_doctor.application.probe import (
    DiagnosticTest,
    error_text,
    run_subchecks,
    summarize_subchecks,
)
from mcp_doctor.domain.models import DoctorConfig, ResultStatus, Severity


class _CompositeProbe(DiagnosticTest):
    name = "Lifecycle: Composite"
    description = "two sub-checks"
    category = "lifecycle"
    severity = Severity.CRITICAL

    async def execute(self, client, config):
        async def healthy():
            await asyncio.sleep(0)
            return {"status": "passed", "value": 42}

        async def broken():
            raise RuntimeError("handshake rejected")

        return await self.composite(
            {"Healthy": healthy, "Broken": broken},
            success_message="all good",
            failure_message="{count} sub-check(s) failed",
            recommendations=("look at the handshake",),
        )


class _ExplodingProbe(DiagnosticTest):
    name = "Protocol: Exploding"
    description = "raises from execute"
    category = "protocol"
    severity = Severity.WARNING
    required_capability = "tools"

    async def execute(self, client, config):
        raise ValueError("no tools list")


@pytest.mark.asyncio
async def test_composite_reports_failing_subcheck_and_keeps_payloads() -> None:
    result = await _CompositeProbe().run(object(), DoctorConfig())

    assert result.status is ResultStatus.FAILED
    assert result.message == "1 sub-check(s) failed"
    assert result.details["issues"] == ["Broken: handshake rejected"]
    assert result.details["Healthy"] == {"status": "passed", "value": 42}
    assert result.recommendations == ("look at the handshake",)


@pytest.mark.asyncio
async def test_run_converts_exceptions_into_failed_results() -> None:
    result = await _ExplodingProbe().run(object(), DoctorConfig())

    assert result.failed
    assert result.message == "no tools list"
    assert result.severity is Severity.WARNING
    assert result.details == {"error": "no tools list", "type": "ValueError"}
    assert result.required_capability == "tools"
    assert result.duration >= 0


def test_create_skipped_result_prefixes_reason() -> None:
    result = _ExplodingProbe().create_skipped_result("No tools available")

    assert result.status is ResultStatus.SKIPPED
    assert result.message == "Test skipped: No tools available"
    assert result.severity is Severity.WARNING


def test_create_result_maps_success_flag() -> None:
    probe = _ExplodingProbe()
    assert probe.create_result(True, "ok").passed
    failed = probe.create_result(False, "bad", {"a": 1}, ["fix it"])
    assert failed.failed
    assert failed.recommendations == ("fix it",)


@pytest.mark.asyncio
async def test_run_subchecks_waits_for_every_check() -> None:
    finished: list[str] = []

    async def fast_failure():
        raise RuntimeError("boom")

    async def slow_success():
        await asyncio.sleep(0.01)
        finished.append("slow")
        return "done"

    outcomes = await run_subchecks({"fast": fast_failure, "slow": slow_success})

    assert finished == ["slow"]
    assert [outcome.name for outcome in outcomes] == ["fast", "slow"]
    issues, payloads = summarize_subchecks(outcomes)
    assert issues == ["fast: boom"]
    assert payloads == {"slow": "done"}


@pytest.mark.asyncio
async def test_run_subchecks_propagates_cancellation() -> None:
    async def cancelled():
        raise asyncio.CancelledError

    with pytest.raises(asyncio.CancelledError):
        await run_subchecks({"cancelled": cancelled})


def test_error_text_falls_back_to_class_name() -> None:
    assert error_text(RuntimeError("  spaced  ")) == "spaced"
    assert error_text(TimeoutError()) == "TimeoutError"
