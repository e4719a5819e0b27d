from __future__ import annotations

import json

import pytest

import main
from sisma.checklist import EXAMPLE_CHECKLIST


@pytest.fixture
def checklist_file(tmp_path):
    path = tmp_path / "checklist.json"
    path.write_text(json.dumps(EXAMPLE_CHECKLIST), encoding="utf-8")
    return path


def test_offline_checklist_writes_fallback_report(tmp_path, checklist_file, capsys):
    out = tmp_path / "report.json"
    md = tmp_path / "report.md"

    code = main.main(["--provider", "offline", "checklist", str(checklist_file),
                      "--output", str(out), "--markdown", str(md)])

    assert code == 0
    report = json.loads(out.read_text(encoding="utf-8"))
    assert report["report_id"].startswith("fallback-")
    assert [nc["question_id"] for nc in report["non_conformities"]] == ["q2_pressure_gauge"]
    assert md.exists()
    stdout = capsys.readouterr().out
    assert "Compliance: 66.67%" in stdout
    assert "fallback report" in stdout


def test_checklist_validation_error_exit_code(tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"inspection_id": "i", "equipment_id": "e", "inspector_id": "u"}), encoding="utf-8")

    code = main.main(["--provider", "offline", "checklist", str(path)])

    assert code == main.EXIT_VALIDATION
    assert "answers" in capsys.readouterr().err


def test_missing_checklist_file(tmp_path, capsys):
    assert main.main(["checklist", str(tmp_path / "nope.json")]) == 1
    assert "File not found" in capsys.readouterr().err


def test_ask_canned_question(capsys):
    code = main.main(["--provider", "offline", "ask", "What is the minimum width of the parking strip?"])

    assert code == 0
    assert "8 meters" in capsys.readouterr().out


def test_ask_offline_without_canned_answer(capsys):
    assert main.main(["--provider", "offline", "ask", "What is an exit route?"]) == 1
    assert "No generative backend" in capsys.readouterr().err


def test_image_command(tmp_path, png_bytes, monkeypatch, capsys):
    monkeypatch.setenv("SISMA_IMAGE_DELAY", "0")
    image = tmp_path / "photo.png"
    image.write_bytes(png_bytes)
    annotated = tmp_path / "annotated.png"

    code = main.main(["image", str(image), "--annotated", str(annotated)])

    assert code == 0
    assert '"class": "no_helmet"' in capsys.readouterr().out
    assert annotated.read_bytes().startswith(b"\x89PNG")


def test_provider_after_subcommand(tmp_path, checklist_file, capsys):
    out = tmp_path / "report.json"

    code = main.main(["checklist", str(checklist_file), "--provider", "offline", "--output", str(out)])

    assert code == 0
    assert json.loads(out.read_text(encoding="utf-8"))["report_id"].startswith("fallback-")
    assert "Generator: offline" in capsys.readouterr().out


def test_provider_position_parses_the_same():
    parser = main.build_parser()

    before = parser.parse_args(["--provider", "openai", "ask", "q"])
    after = parser.parse_args(["ask", "q", "--provider", "openai"])
    neither = parser.parse_args(["ask", "q"])

    assert before.provider == after.provider == "openai"
    assert neither.provider is None
