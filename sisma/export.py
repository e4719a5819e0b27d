# sisma/export.py
"""Export functionality for inspection reports"""

import json
from pathlib import Path
from typing import Optional

from sisma.models import Report, Severity

SEVERITY_ICON = {
    Severity.CRITICAL: '🔴',
    Severity.HIGH: '🟠',
    Severity.MEDIUM: '🟡',
    Severity.LOW: '🟢',
}

SEVERITY_ORDER = [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]


def report_to_json(report: Report) -> str:
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False)


def report_to_markdown(report: Report, compliance: Optional[float] = None) -> str:
    """Render a report as a Markdown document"""

    lines = []

    # Header
    lines.append("# Inspection Report\n")
    lines.append(f"**Report ID:** {report.report_id}\n")
    lines.append(f"**Equipment:** {report.equipment_id or 'N/A'}\n")
    lines.append(f"**Inspector:** {report.inspector_id}\n")
    lines.append(f"**Generated:** {report.timestamp}\n")
    if report.is_fallback:
        lines.append("\n> **Fallback report**: generated locally because the AI service was unavailable.\n")

    if compliance is not None:
        lines.append(f"\n**Compliance:** {compliance:.2f}%\n")

    lines.append("\n## Summary\n")
    lines.append(f"{report.summary}\n")

    # Non-conformities, most severe first
    lines.append("\n## Non-Conformities\n")
    if not report.non_conformities:
        lines.append("No non-conformities found.\n")
    else:
        ranked = sorted(report.non_conformities, key=lambda nc: SEVERITY_ORDER.index(nc.severity))
        lines.append("\n| Severity | Question | Suggested Action |\n")
        lines.append("|---|---|---|\n")
        for nc in ranked:
            action = nc.suggested_action.replace("|", "\\|").replace("\n", " ")
            lines.append(f"| {SEVERITY_ICON[nc.severity]} {nc.severity.value} | `{nc.question_id}` | {action} |\n")

    # Answers
    lines.append("\n## Answers\n")
    labels = {2: "Conforms", 1: "Non-conforming", 0: "N/A"}
    for answer in report.answers:
        line = f"- `{answer.question_id}`: {labels[answer.value]}"
        if answer.comment:
            line += f" ({answer.comment})"
        lines.append(line + "\n")

    if report.attachments:
        lines.append("\n## Attachments\n")
        for url in report.attachments:
            lines.append(f"- {url}\n")

    lines.append(f"\n[Download PDF report (simulated link)]({report.pdf_url})\n")

    return ''.join(lines)


def export_report_markdown(report: Report, output_path: str, compliance: Optional[float] = None) -> None:
    """Export report to Markdown format"""
    Path(output_path).write_text(report_to_markdown(report, compliance), encoding='utf-8')


def export_report_json(report: Report, output_path: str) -> None:
    """Export full report to JSON format"""
    Path(output_path).write_text(report_to_json(report), encoding='utf-8')
