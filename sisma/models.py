#sisma/models.py
from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


# 2 = conforms, 1 = non-conforming, 0 = not applicable
AnswerValue = Literal[0, 1, 2]
CONFORMS = 2
NON_CONFORMING = 1
NOT_APPLICABLE = 0


class ChecklistAnswer(BaseModel):
    # unknown keys are kept so answers echo back unchanged in the report
    model_config = ConfigDict(extra="allow")

    question_id: str
    value: AnswerValue
    comment: Optional[str] = None
    photo: Optional[str] = None

    @field_validator("question_id")
    @classmethod
    def question_id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("question_id must not be empty")
        return v

    @field_validator("value", mode="before")
    @classmethod
    def value_is_plain_int(cls, v: Any) -> Any:
        # bool is an int subclass; true/false must not pass as 1/0
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError("value must be the integer 0, 1 or 2")
        return v


class ChecklistSubmission(BaseModel):
    model_config = ConfigDict(extra="allow")

    inspection_id: str
    equipment_id: Optional[str]
    inspector_id: str
    answers: List[ChecklistAnswer]

    @model_validator(mode="after")
    def unique_question_ids(self) -> "ChecklistSubmission":
        seen = set()
        duplicates = []
        for answer in self.answers:
            if answer.question_id in seen and answer.question_id not in duplicates:
                duplicates.append(answer.question_id)
            seen.add(answer.question_id)
        if duplicates:
            raise ValueError(f"duplicate question_id values: {', '.join(duplicates)}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


class NonConformity(BaseModel):
    question_id: str
    severity: Severity
    suggested_action: str

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, v: Any) -> Any:
        # generators sometimes answer "critical" instead of "CRITICAL"
        if isinstance(v, str):
            return v.strip().upper()
        return v


class Report(BaseModel):
    report_id: str
    equipment_id: Optional[str]
    inspector_id: str
    timestamp: str
    answers: List[ChecklistAnswer]
    summary: str
    non_conformities: List[NonConformity]
    attachments: List[str]
    pdf_url: str

    @property
    def is_fallback(self) -> bool:
        return self.report_id.startswith("fallback-")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


class Detection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    label: str = Field(alias="class")
    bbox: Tuple[int, int, int, int]
    score: float = Field(ge=0.0, le=1.0)


class ImageAnalysisResult(BaseModel):
    detections: List[Detection] = Field(default_factory=list)
    flagged: bool
    suggested_action: str

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ChecklistEvaluation(BaseModel):
    """Compliance score plus the report delivered for one submission"""
    compliance: float
    report: Report
    fallback: bool = False
    provider: str = "fallback"
