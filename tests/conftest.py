from __future__ import annotations

import copy
import io

import pytest
from PIL import Image

from sisma.checklist import EXAMPLE_CHECKLIST, parse_submission
from sisma.models import NonConformity, Report, Severity


@pytest.fixture
def checklist_data():
    return copy.deepcopy(EXAMPLE_CHECKLIST)


@pytest.fixture
def submission(checklist_data):
    return parse_submission(checklist_data)


@pytest.fixture
def generated_report(submission):
    """A report as a well-behaved generator would return it"""
    return Report(
        report_id="7d0f9b7e-5b0e-4a43-9d55-0c7f7b2f3c11",
        equipment_id=submission.equipment_id,
        inspector_id=submission.inspector_id,
        timestamp="2026-10-17T12:00:00.000Z",
        answers=list(submission.answers),
        summary="Extinguisher inspected; pressure gauge out of range.",
        non_conformities=[
            NonConformity(
                question_id="q2_pressure_gauge",
                severity=Severity.HIGH,
                suggested_action="Recharge or replace the extinguisher.",
            )
        ],
        attachments=["https://example.com/photo1.jpg"],
        pdf_url="https://example.com/report.pdf",
    )


def _image_bytes(fmt: str, size=(320, 240)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color=(40, 40, 40)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return _image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return _image_bytes("JPEG")


@pytest.fixture
def gif_bytes():
    return _image_bytes("GIF")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real credentials and .env overrides out of the tests"""
    for name in (
        "SISMA_PROVIDER", "GEMINI_API_KEY", "API_KEY", "OPENAI_API_KEY",
        "SISMA_GEMINI_MODEL", "SISMA_OPENAI_MODEL", "SISMA_TEMPERATURE",
        "SISMA_REQUEST_TIMEOUT", "SISMA_IMAGE_DELAY", "SISMA_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("sisma.config.load_dotenv", lambda *a, **k: False)
