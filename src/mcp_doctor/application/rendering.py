"""Plain-text and JSON renderings of a finished :class:`HealthReport`."""

from __future__ import annotations

import json
from typing import Final

from mcp_doctor import __version__
from mcp_doctor.domain.models import CategoryStatus, CategorySummary, HealthReport, Severity

RULE: Final = "━" * 80

GLYPH_PASSED: Final = "✅"
GLYPH_WARNING: Final = "⚠️"
GLYPH_FAILED: Final = "❌"
GLYPH_SKIPPED: Final = "⏭️"


def _category_line(category: CategorySummary) -> str:
    if category.status is CategoryStatus.SKIPPED:
        glyph, summary = GLYPH_SKIPPED, "SKIPPED"
    else:
        if category.failed > 0:
            glyph = GLYPH_FAILED
        elif category.warnings > 0:
            glyph = GLYPH_WARNING
        else:
            glyph = GLYPH_PASSED
        summary = f"{category.passed}/{category.total} passed"
    return f"🔍 {category.name.upper()} {glyph} {summary} ({category.duration}ms)"


def _capability_line(report: HealthReport) -> str:
    entries = [f"{name} {GLYPH_PASSED}" for name in report.server_capabilities]
    entries.extend(f"{name} {GLYPH_SKIPPED}" for name in report.skipped_capabilities)
    return f"Server Capabilities: {' | '.join(entries) or 'None detected'}"


def format_report(report: HealthReport) -> str:
    """Render ``report`` as deterministic text.

    Sections appear in a fixed order: categories, overall score, critical
    issues, warnings, recommendations, total time.
    """

    info = report.server_info
    version = f" v{info.version}" if info.version else ""
    lines = [
        f"🏥 MCP SERVER DOCTOR v{__version__}",
        f"Diagnosing server: {info.name}{version} ({info.transport})",
        f"Started: {report.metadata.timestamp}",
        "",
        RULE,
        "",
    ]
    lines.extend(_category_line(category) for category in report.categories)
    lines.extend(["", _capability_line(report), "", RULE, ""])

    skipped = report.summary.skipped
    skipped_note = f" ({skipped} tests skipped)" if skipped else ""
    lines.append(f"📊 OVERALL MCP COMPLIANCE: {report.summary.overall_score}/100{skipped_note}")

    if report.issues:
        critical = [issue for issue in report.issues if issue.severity is Severity.CRITICAL]
        warnings = [issue for issue in report.issues if issue.severity is Severity.WARNING]
        lines.append("")
        if critical:
            lines.append(f"🚨 CRITICAL ISSUES ({len(critical)})")
            lines.extend(f"• {issue.test_name}: {issue.message}" for issue in critical)
            lines.append("")
        if warnings:
            lines.append(f"⚠️ WARNINGS ({len(warnings)})")
            lines.extend(f"• {issue.test_name}: {issue.message}" for issue in warnings)

        recommendations = [rec for issue in report.issues for rec in issue.recommendations]
        if recommendations:
            lines.extend(["", "💡 RECOMMENDATIONS"])
            lines.extend(f"• {rec}" for rec in recommendations)

    lines.extend(["", f"Total execution time: {report.metadata.duration}ms"])
    return "\n".join(lines)


def report_to_json(report: HealthReport, *, indent: int = 2) -> str:
    return json.dumps(report.to_dict(), indent=indent, ensure_ascii=False, default=str)


__all__ = ["format_report", "report_to_json"]
