# sisma/llm_analysis.py
"""
Generative backends for the inspection assistant (Gemini or OpenAI).
Provides structured report generation and free-text normative answers.
"""
from __future__ import annotations
import json
import logging
from enum import Enum
from typing import Any, Dict, Optional, Protocol

from pydantic import ValidationError

from sisma.config import SismaConfig
from sisma.errors import GenerationError
from sisma.models import ChecklistSubmission, Report

logger = logging.getLogger(__name__)


class LLMProvider(Enum):
    GEMINI = "gemini"
    OPENAI = "openai"
    OFFLINE = "offline"


class ReportGenerator(Protocol):
    """Anything that turns a submission into a Report or raises GenerationError"""
    name: str

    def generate(self, submission: ChecklistSubmission) -> Report:
        ...


class TextResponder(Protocol):
    """Anything that answers a prompt with free text"""
    name: str

    def respond(self, prompt: str) -> str:
        ...


# Gemini structured-output schema (OpenAPI subset); field names are consumed downstream verbatim
REPORT_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "report_id": {"type": "STRING", "description": "A UUID v4 for the report."},
        "equipment_id": {"type": "STRING", "nullable": True, "description": "Inspected equipment ID."},
        "inspector_id": {"type": "STRING", "description": "Inspector ID."},
        "timestamp": {"type": "STRING", "description": "ISO-8601 timestamp of report generation."},
        "answers": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "question_id": {"type": "STRING"},
                    "value": {"type": "INTEGER"},
                    "comment": {"type": "STRING", "nullable": True},
                    "photo": {"type": "STRING", "nullable": True},
                },
            },
        },
        "summary": {"type": "STRING", "description": "Concise summary of the equipment state and the inspection."},
        "non_conformities": {
            "type": "ARRAY",
            "description": "Every non-conformity found (answers with value 1).",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "question_id": {"type": "STRING"},
                    "severity": {"type": "STRING", "description": "Severity: CRITICAL, HIGH, MEDIUM or LOW."},
                    "suggested_action": {"type": "STRING", "description": "Clear step-by-step corrective action."},
                },
                "required": ["question_id", "severity", "suggested_action"],
            },
        },
        "attachments": {"type": "ARRAY", "items": {"type": "STRING"}, "description": "Attachment URLs such as photos."},
        "pdf_url": {"type": "STRING", "description": "Simulated link to the generated PDF."},
    },
    "required": [
        "report_id", "inspector_id", "timestamp", "answers", "summary",
        "non_conformities", "attachments", "pdf_url",
    ],
}


def _get_report_system_prompt() -> str:
    """System prompt defining the generator's role and output format"""
    return f"""You are a technical assistant for the SISMA fire-safety inspection system.
You turn inspection checklist data into a complete JSON report.

Rules:
- 'summary' is a short paragraph describing the inspection outcome.
- Every answer with 'value' equal to 1 is a non-conformity, in the same order as the answers.
- Give each non-conformity a 'severity' (CRITICAL, HIGH, MEDIUM or LOW). Questions about
  critical safety items such as valves or pressure are CRITICAL.
- Give each non-conformity a clear, objective 'suggested_action'.
- 'attachments' lists every photo URL found in the answers, in order.
- Generate a UUID for 'report_id' and use the current time in ISO-8601 for 'timestamp'.
- 'pdf_url' is a placeholder link.

You must respond with valid JSON matching this schema:
{json.dumps(REPORT_SCHEMA, indent=2)}"""


def _build_report_prompt(submission: ChecklistSubmission) -> str:
    """Build the user prompt with checklist data"""
    data = json.dumps(submission.to_dict(), indent=2, ensure_ascii=False)
    return f"""Analyze the following SISMA inspection checklist and generate the report.

CHECKLIST DATA:
{data}"""


def _strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_report(text: str) -> Report:
    """Parse a generator response into a Report, raising GenerationError"""
    try:
        payload = json.loads(_strip_code_fences(text or ""))
    except json.JSONDecodeError as e:
        raise GenerationError(f"Response is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise GenerationError("Response JSON is not an object")
    try:
        return Report.model_validate(payload)
    except ValidationError as e:
        raise GenerationError(f"Response does not match the report schema: {e}") from e


def call_gemini_api(prompt: str, config: SismaConfig, json_output: bool = False,
                    response_schema: Optional[Dict[str, Any]] = None) -> str:
    """
    Call Google Gemini and return the response text.
    With json_output, a response_schema constrains the returned JSON.
    Requires GEMINI_API_KEY (or API_KEY).
    """
    try:
        import google.generativeai as genai
    except ImportError:
        raise ImportError("Google Generative AI library not installed. Run: pip install google-generativeai")

    if not config.gemini_api_key:
        raise ValueError("GEMINI_API_KEY environment variable not set")

    genai.configure(api_key=config.gemini_api_key)
    model = genai.GenerativeModel(config.gemini_model)

    config_kwargs: Dict[str, Any] = {"temperature": config.temperature}
    if json_output:
        config_kwargs["response_mime_type"] = "application/json"
        if response_schema is not None:
            config_kwargs["response_schema"] = response_schema
    else:
        config_kwargs["response_mime_type"] = "text/plain"

    generation_config = genai.types.GenerationConfig(**config_kwargs)
    response = model.generate_content(
        prompt,
        generation_config=generation_config,
        request_options={"timeout": config.request_timeout},
    )
    return response.text


def call_openai_api(system_prompt: str, prompt: str, config: SismaConfig,
                    json_output: bool = False) -> str:
    """
    Call OpenAI chat completions and return the message content.
    Requires OPENAI_API_KEY.
    """
    try:
        import openai
    except ImportError:
        raise ImportError("OpenAI library not installed. Run: pip install openai")

    if not config.openai_api_key:
        raise ValueError("OPENAI_API_KEY environment variable not set")

    client = openai.OpenAI(api_key=config.openai_api_key, timeout=config.request_timeout)

    kwargs: Dict[str, Any] = {}
    if json_output:
        kwargs["response_format"] = {"type": "json_object"}

    response = client.chat.completions.create(
        model=config.openai_model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ],
        temperature=config.temperature,
        **kwargs,
    )
    return response.choices[0].message.content or ""


class GeminiReportGenerator:
    name = LLMProvider.GEMINI.value

    def __init__(self, config: SismaConfig):
        self.config = config

    def generate(self, submission: ChecklistSubmission) -> Report:
        prompt = f"{_get_report_system_prompt()}\n\n{_build_report_prompt(submission)}\n\nRespond with valid JSON only."
        try:
            text = call_gemini_api(prompt, self.config, json_output=True, response_schema=REPORT_SCHEMA)
        except Exception as e:
            raise GenerationError(f"Gemini request failed: {e}") from e
        return parse_report(text)


class OpenAIReportGenerator:
    name = LLMProvider.OPENAI.value

    def __init__(self, config: SismaConfig):
        self.config = config

    def generate(self, submission: ChecklistSubmission) -> Report:
        try:
            text = call_openai_api(
                _get_report_system_prompt(),
                _build_report_prompt(submission),
                self.config,
                json_output=True,
            )
        except Exception as e:
            raise GenerationError(f"OpenAI request failed: {e}") from e
        return parse_report(text)


class GeminiResponder:
    name = LLMProvider.GEMINI.value

    def __init__(self, config: SismaConfig):
        self.config = config

    def respond(self, prompt: str) -> str:
        return call_gemini_api(prompt, self.config)


class OpenAIResponder:
    name = LLMProvider.OPENAI.value

    def __init__(self, config: SismaConfig):
        self.config = config

    def respond(self, prompt: str) -> str:
        return call_openai_api(
            "You are a technical assistant specialized in fire-safety regulations.",
            prompt,
            self.config,
        )


def build_report_generator(config: SismaConfig) -> Optional[ReportGenerator]:
    """Concrete generator for the configured provider, None when offline"""
    provider = LLMProvider(config.provider)
    if provider == LLMProvider.GEMINI:
        return GeminiReportGenerator(config)
    if provider == LLMProvider.OPENAI:
        return OpenAIReportGenerator(config)
    return None


def build_responder(config: SismaConfig) -> Optional[TextResponder]:
    """Concrete free-text responder for the configured provider, None when offline"""
    provider = LLMProvider(config.provider)
    if provider == LLMProvider.GEMINI:
        return GeminiResponder(config)
    if provider == LLMProvider.OPENAI:
        return OpenAIResponder(config)
    return None
