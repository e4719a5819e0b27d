from __future__ import annotations

import json

from sisma.checklist import build_fallback_report
from sisma.export import export_report_json, export_report_markdown, report_to_json, report_to_markdown
from sisma.models import NonConformity, Severity


def test_json_uses_exact_field_names(generated_report):
    data = json.loads(report_to_json(generated_report))

    assert list(data) == [
        "report_id", "equipment_id", "inspector_id", "timestamp", "answers",
        "summary", "non_conformities", "attachments", "pdf_url",
    ]
    assert data["non_conformities"][0] == {
        "question_id": "q2_pressure_gauge",
        "severity": "HIGH",
        "suggested_action": "Recharge or replace the extinguisher.",
    }


def test_markdown_lists_non_conformities_by_severity(generated_report):
    report = generated_report.model_copy(update={"non_conformities": [
        NonConformity(question_id="low_one", severity=Severity.LOW, suggested_action="later"),
        NonConformity(question_id="crit_one", severity=Severity.CRITICAL, suggested_action="now | today"),
    ]})

    md = report_to_markdown(report, compliance=66.666)

    assert "**Compliance:** 66.67%" in md
    assert md.index("crit_one") < md.index("low_one")
    assert "now \\| today" in md
    assert report.pdf_url in md


def test_markdown_marks_fallback_reports(submission):
    md = report_to_markdown(build_fallback_report(submission))

    assert "Fallback report" in md
    assert "https://example.com/photo1.jpg" in md


def test_markdown_without_non_conformities(generated_report):
    md = report_to_markdown(generated_report.model_copy(update={"non_conformities": []}))

    assert "No non-conformities found." in md


def test_exports_write_files(tmp_path, generated_report):
    json_path = tmp_path / "report.json"
    md_path = tmp_path / "report.md"

    export_report_json(generated_report, str(json_path))
    export_report_markdown(generated_report, str(md_path), 100.0)

    assert json.loads(json_path.read_text(encoding="utf-8"))["report_id"] == generated_report.report_id
    assert "**Compliance:** 100.00%" in md_path.read_text(encoding="utf-8")
