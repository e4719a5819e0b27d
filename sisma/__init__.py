"""
SISMA inspection assistant: normative Q&A, image hazard screening and
checklist compliance reports
"""

from .errors import (
    SismaError,
    ChecklistValidationError,
    GenerationError,
    AssistantError,
    ImageAnalysisError,
    ConfigurationError,
)
from .models import (
    ChecklistAnswer,
    ChecklistSubmission,
    NonConformity,
    Report,
    Severity,
    Detection,
    ImageAnalysisResult,
    ChecklistEvaluation,
)
from .config import SismaConfig, configure_logging
from .checklist import ChecklistEvaluator, parse_submission, compute_compliance, build_fallback_report
from .llm_analysis import LLMProvider, build_report_generator, build_responder
from .assistant import NormativeAssistant
from .image_analysis import MockImageAnalyzer, annotate_image
from .export import report_to_json, report_to_markdown, export_report_json, export_report_markdown

__all__ = [
    'SismaError',
    'ChecklistValidationError',
    'GenerationError',
    'AssistantError',
    'ImageAnalysisError',
    'ConfigurationError',
    'ChecklistAnswer',
    'ChecklistSubmission',
    'NonConformity',
    'Report',
    'Severity',
    'Detection',
    'ImageAnalysisResult',
    'ChecklistEvaluation',
    'SismaConfig',
    'configure_logging',
    'ChecklistEvaluator',
    'parse_submission',
    'compute_compliance',
    'build_fallback_report',
    'LLMProvider',
    'build_report_generator',
    'build_responder',
    'NormativeAssistant',
    'MockImageAnalyzer',
    'annotate_image',
    'report_to_json',
    'report_to_markdown',
    'export_report_json',
    'export_report_markdown',
]

__version__ = "1.0.0"
