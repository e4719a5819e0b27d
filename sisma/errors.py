# sisma/errors.py
"""Exception hierarchy shared by the evaluator, collaborators and UI"""
from __future__ import annotations
from typing import List, Optional


class SismaError(Exception):
    """Base class for every error raised by the sisma package"""


class ChecklistValidationError(SismaError):
    """Checklist input could not be parsed into a well-formed submission"""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        base = super().__str__()
        if not self.errors:
            return base
        return base + "\n" + "\n".join(f"  - {e}" for e in self.errors)


class GenerationError(SismaError):
    """External report generator failed (transport, timeout, bad response)"""


class AssistantError(SismaError):
    """Free-text responder could not produce an answer"""


class ImageAnalysisError(SismaError):
    """Image could not be read or analyzed"""


class ConfigurationError(SismaError):
    """Runtime configuration is invalid"""
