#sisma/checklist.py
"""Checklist validation, compliance scoring and report delivery with fallback"""
from __future__ import annotations
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from sisma.errors import ChecklistValidationError, GenerationError
from sisma.llm_analysis import ReportGenerator
from sisma.models import (
    CONFORMS,
    NON_CONFORMING,
    NOT_APPLICABLE,
    ChecklistAnswer,
    ChecklistEvaluation,
    ChecklistSubmission,
    NonConformity,
    Report,
    Severity,
)

logger = logging.getLogger(__name__)

FALLBACK_PREFIX = "fallback-"
FALLBACK_SEVERITY = Severity.CRITICAL
FALLBACK_ACTION = (
    "Fallback action: isolate the area, notify maintenance, open a work order "
    "and replace the part within 24h."
)
FALLBACK_SUMMARY = (
    "Fallback report: inspection completed with critical non-conformities "
    "identified. Immediate action is required."
)
FALLBACK_PDF_URL = "https://example.com/fallback_report.pdf"

EXAMPLE_CHECKLIST: Dict[str, Any] = {
    "inspection_id": "insp_12345",
    "equipment_id": "ext-001-floor-2",
    "inspector_id": "user_abcde",
    "answers": [
        {"question_id": "q1_valve_check", "value": 2, "comment": "Valve in good condition."},
        {"question_id": "q2_pressure_gauge", "value": 1, "comment": "Gauge needle in the red zone.",
         "photo": "https://example.com/photo1.jpg"},
        {"question_id": "q3_hose_condition", "value": 2},
        {"question_id": "q4_seal_integrity", "value": 0, "comment": "Not applicable to this model."},
    ],
}


def parse_submission(data: Union[str, bytes, Dict[str, Any]]) -> ChecklistSubmission:
    """
    Parse raw checklist input (JSON text or an already-decoded mapping).
    Raises ChecklistValidationError before anything else is attempted.
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise ChecklistValidationError(
                "Invalid JSON. Check the syntax.",
                [f"line {e.lineno}, column {e.colno}: {e.msg}"],
            ) from e

    if not isinstance(data, dict):
        raise ChecklistValidationError(
            "Checklist must be a JSON object.",
            [f"got {type(data).__name__}"],
        )

    try:
        return ChecklistSubmission.model_validate(data)
    except ValidationError as e:
        errors = []
        for err in e.errors():
            loc = ".".join(str(p) for p in err["loc"]) or "checklist"
            errors.append(f"{loc}: {err['msg']}")
        raise ChecklistValidationError("Checklist failed validation.", errors) from e


def compute_compliance(answers: Sequence[ChecklistAnswer]) -> float:
    """
    Percentage of applicable answers (value != 0) that fully conform.
    With no applicable answers the checklist counts as fully compliant.
    """
    applicable = [a for a in answers if a.value != NOT_APPLICABLE]
    if not applicable:
        return 100.0
    conforming = [a for a in applicable if a.value == CONFORMS]
    return 100.0 * len(conforming) / len(applicable)


def non_conforming_answers(answers: Sequence[ChecklistAnswer]) -> List[ChecklistAnswer]:
    return [a for a in answers if a.value == NON_CONFORMING]


def collect_attachments(answers: Sequence[ChecklistAnswer]) -> List[str]:
    """Photo URLs in answer order, duplicates kept"""
    return [a.photo for a in answers if a.photo]


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_fallback_report(submission: ChecklistSubmission) -> Report:
    """Deterministic local report used whenever the generator cannot deliver"""
    non_conformities = [
        NonConformity(
            question_id=a.question_id,
            severity=FALLBACK_SEVERITY,
            suggested_action=FALLBACK_ACTION,
        )
        for a in non_conforming_answers(submission.answers)
    ]

    return Report(
        report_id=f"{FALLBACK_PREFIX}{uuid.uuid4()}",
        equipment_id=submission.equipment_id,
        inspector_id=submission.inspector_id,
        timestamp=_utc_timestamp(),
        answers=list(submission.answers),
        summary=FALLBACK_SUMMARY,
        non_conformities=non_conformities,
        attachments=collect_attachments(submission.answers),
        pdf_url=FALLBACK_PDF_URL,
    )


def check_report_against_submission(report: Report, submission: ChecklistSubmission) -> None:
    """
    Raise GenerationError when the derived lists of a generated report do not
    match the submission. Severities and summary text are not inspected.
    """
    expected_ids = [a.question_id for a in non_conforming_answers(submission.answers)]
    got_ids = [nc.question_id for nc in report.non_conformities]
    if got_ids != expected_ids:
        raise GenerationError(
            f"non_conformities {got_ids} do not match non-conforming answers {expected_ids}"
        )

    expected_attachments = collect_attachments(submission.answers)
    if report.attachments != expected_attachments:
        raise GenerationError(
            f"attachments {report.attachments} do not match answer photos {expected_attachments}"
        )


class ChecklistEvaluator:
    """Scores a submission and delivers a report, preferring the generator"""

    def __init__(self, generator: Optional[ReportGenerator] = None):
        self.generator = generator

    def generate_report(self, submission: ChecklistSubmission) -> Tuple[Report, str]:
        """
        Single attempt at the generator; any failure yields the fallback report.
        Returns the report and the name of whoever delivered it ("fallback" or the generator's name).
        """
        if self.generator is not None:
            try:
                report = self.generator.generate(submission)
                check_report_against_submission(report, submission)
                logger.info("Report %s delivered by %s", report.report_id, self.generator.name)
                return report, self.generator.name
            except Exception as e:
                logger.warning("Report generation via %s failed, using fallback: %s",
                               getattr(self.generator, "name", "generator"), e)
        else:
            logger.info("No report generator configured, using fallback")

        report = build_fallback_report(submission)
        logger.info("Fallback report %s delivered", report.report_id)
        return report, "fallback"

    def evaluate(self, data: Union[str, bytes, Dict[str, Any], ChecklistSubmission]) -> ChecklistEvaluation:
        """Validate, score and report; validation errors propagate to the caller"""
        submission = data if isinstance(data, ChecklistSubmission) else parse_submission(data)

        compliance = compute_compliance(submission.answers)
        report, provider = self.generate_report(submission)

        return ChecklistEvaluation(
            compliance=compliance,
            report=report,
            fallback=provider == "fallback",
            provider=provider,
        )
