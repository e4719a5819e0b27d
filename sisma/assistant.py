# sisma/assistant.py
"""Normative assistant: free-text questions about fire-safety regulations"""
from __future__ import annotations
import logging
import re
import unicodedata
from typing import Optional

from sisma.errors import AssistantError
from sisma.llm_analysis import TextResponder

logger = logging.getLogger(__name__)

EXAMPLE_QUESTION = (
    "What is the minimum width of the fire-engine parking strip according to NT 010/08 CBMCE?"
)

DISCLAIMER = "Disclaimer: This is technical guidance and does not replace a legal opinion or the responsible engineer."

# Demo query answered without calling the model
PARKING_STRIP_ANSWER = f"""The minimum width of the fire-engine parking strip is 8 meters.

Source: NT 010/08 CBMCE, section 4 (page 3).
Recommendation: Measure the strip with a measuring tape and document it with a panoramic photo of the area.
{DISCLAIMER}"""

# Both a width term and a parking term must appear
_MIN_WIDTH_RE = re.compile(r"(largura minima|minimum width)", re.IGNORECASE)
_PARKING_RE = re.compile(r"(estacionamento|parking)", re.IGNORECASE)


def _fold(text: str) -> str:
    # "largura mínima" and "largura minima" must both match
    normalized = unicodedata.normalize("NFKD", text)
    return "".join(c for c in normalized if not unicodedata.combining(c))


def build_normative_prompt(question: str) -> str:
    return f"""You are a technical assistant specialized in the SISMA system.
Answer the following question about fire-safety regulations,
based on hypothetical technical knowledge.

Answer format:
1. Short, direct answer.
2. Source citation (e.g. "NT 010/08 CBMCE, section 4 (page 3)").
3. Practical recommendation (1-2 sentences).
4. Mandatory legal disclaimer.

User question: "{question}"
"""


class NormativeAssistant:
    """Wraps a TextResponder with the normative prompt and the demo shortcut"""

    def __init__(self, responder: Optional[TextResponder] = None):
        self.responder = responder

    def ask(self, question: str) -> str:
        if not question or not question.strip():
            raise AssistantError("Please enter a question.")

        folded = _fold(question)
        if _MIN_WIDTH_RE.search(folded) and _PARKING_RE.search(folded):
            return PARKING_STRIP_ANSWER

        if self.responder is None:
            raise AssistantError("No generative backend is configured. Set SISMA_PROVIDER and an API key.")

        try:
            answer = self.responder.respond(build_normative_prompt(question.strip()))
        except Exception as e:
            logger.error("Normative response via %s failed: %s",
                         getattr(self.responder, "name", "responder"), e)
            raise AssistantError("Failed to communicate with the generative AI model.") from e

        if not answer or not answer.strip():
            raise AssistantError("The generative AI model returned an empty answer.")
        return answer.strip()
