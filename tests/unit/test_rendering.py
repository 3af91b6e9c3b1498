from __future__ import annotations

import json

from mcp_doctor import __version__
from mcp_doctor.application.rendering import format_report, report_to_json
from mcp_doctor.application.report import generate_report
from mcp_doctor.domain.models import DiagnosticResult, ResultStatus, ServerInfo, Severity

SERVER = ServerInfo(name="weather", transport="stdio", version="2.0.0", protocol_version="2025-06-18")


def _result(name, status=ResultStatus.PASSED, severity=Severity.INFO, **kwargs) -> DiagnosticResult:
    return DiagnosticResult(
        test_name=name, status=status, message=f"{name} message", severity=severity, **kwargs
    )


def _report(fixed_times, results):
    start, end = fixed_times
    return generate_report(results, SERVER, start, end)


def test_text_report_sections_appear_in_order(fixed_times) -> None:
    report = _report(
        fixed_times,
        [
            _result("Protocol: ok", duration=4, required_capability="tools"),
            _result(
                "Protocol: broken",
                ResultStatus.FAILED,
                Severity.CRITICAL,
                duration=6,
                recommendations=("Fix the handshake",),
            ),
            _result(
                "Tools: warn",
                ResultStatus.FAILED,
                Severity.WARNING,
                recommendations=("Add descriptions",),
            ),
            _result("Prompts: none", ResultStatus.SKIPPED, required_capability="prompts"),
        ],
    )

    text = format_report(report)
    lines = text.splitlines()

    assert lines[0] == f"🏥 MCP SERVER DOCTOR v{__version__}"
    assert "Diagnosing server: weather v2.0.0 (stdio)" in lines
    assert "🔍 PROTOCOL ❌ 1/2 passed (10ms)" in lines
    assert "🔍 TOOLS ⚠️ 0/1 passed (0ms)" in lines
    assert "🔍 PROMPTS ⏭️ SKIPPED (0ms)" in lines
    assert "Server Capabilities: tools ✅ | prompts ⏭️" in lines
    assert "📊 OVERALL MCP COMPLIANCE: 80/100 (1 tests skipped)" in lines
    assert "• Protocol: broken: Protocol: broken message" in lines
    assert "• Tools: warn: Tools: warn message" in lines

    order = [
        text.index("🔍 PROMPTS"),
        text.index("📊 OVERALL"),
        text.index("🚨 CRITICAL ISSUES (1)"),
        text.index("⚠️ WARNINGS (1)"),
        text.index("💡 RECOMMENDATIONS"),
        text.index("Total execution time: 1234ms"),
    ]
    assert order == sorted(order)
    assert text.index("• Fix the handshake") < text.index("• Add descriptions")


def test_clean_report_has_no_issue_sections(fixed_times) -> None:
    text = format_report(_report(fixed_times, [_result("Protocol: ok")]))

    assert "📊 OVERALL MCP COMPLIANCE: 100/100" in text
    assert "CRITICAL ISSUES" not in text
    assert "RECOMMENDATIONS" not in text
    assert "Server Capabilities: None detected" in text


def test_text_rendering_is_deterministic(fixed_times) -> None:
    results = [_result("Protocol: ok"), _result("Tools: bad", ResultStatus.FAILED, Severity.INFO)]
    assert format_report(_report(fixed_times, results)) == format_report(_report(fixed_times, results))


def test_json_rendering_round_trips_report_dict(fixed_times) -> None:
    report = _report(fixed_times, [_result("Protocol: ok", details={"toolCount": 2})])

    payload = json.loads(report_to_json(report))

    assert payload == report.to_dict()
    assert payload["serverInfo"] == {
        "name": "weather",
        "transport": "stdio",
        "version": "2.0.0",
        "protocolVersion": "2025-06-18",
    }
    assert payload["metadata"]["timestamp"] == "2026-01-02T03:04:05.678+00:00"
