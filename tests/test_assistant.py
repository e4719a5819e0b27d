from __future__ import annotations

import pytest

from sisma.assistant import EXAMPLE_QUESTION, PARKING_STRIP_ANSWER, NormativeAssistant
from sisma.errors import AssistantError

from tests.fakes import FakeResponder


@pytest.mark.parametrize("question", ["", "   ", "\n"])
def test_blank_question_is_rejected(question):
    responder = FakeResponder(answer="unused")

    with pytest.raises(AssistantError, match="enter a question"):
        NormativeAssistant(responder).ask(question)

    assert responder.prompts == []


@pytest.mark.parametrize("question", [
    EXAMPLE_QUESTION,
    "Qual a largura mínima para faixa de estacionamento de viaturas?",
    "qual a largura minima da faixa de estacionamento?",
    "MINIMUM WIDTH of a parking strip for fire engines",
])
def test_parking_strip_question_uses_canned_answer(question):
    responder = FakeResponder(error=AssertionError("must not be called"))

    answer = NormativeAssistant(responder).ask(question)

    assert answer == PARKING_STRIP_ANSWER
    assert "NT 010/08 CBMCE" in answer
    assert responder.prompts == []


def test_question_is_forwarded_with_answer_format():
    responder = FakeResponder(answer="  Hydrants must be inspected yearly.\n")

    answer = NormativeAssistant(responder).ask("How often are hydrants inspected?")

    assert answer == "Hydrants must be inspected yearly."
    prompt = responder.prompts[0]
    assert 'User question: "How often are hydrants inspected?"' in prompt
    assert "Source citation" in prompt
    assert "disclaimer" in prompt


def test_responder_failure_becomes_assistant_error():
    responder = FakeResponder(error=ConnectionError("refused"))

    with pytest.raises(AssistantError, match="Failed to communicate") as exc:
        NormativeAssistant(responder).ask("What is an exit route?")

    assert isinstance(exc.value.__cause__, ConnectionError)


def test_empty_model_answer_is_an_error():
    with pytest.raises(AssistantError, match="empty answer"):
        NormativeAssistant(FakeResponder(answer="  ")).ask("What is an exit route?")


def test_offline_assistant_still_serves_canned_answer():
    assistant = NormativeAssistant(None)

    assert assistant.ask(EXAMPLE_QUESTION) == PARKING_STRIP_ANSWER
    with pytest.raises(AssistantError, match="No generative backend"):
        assistant.ask("What is an exit route?")


@pytest.mark.parametrize("question", [
    "What is the minimum width of an exit door?",
    "Qual a largura mínima de uma escada de emergência?",
    "Where should fire engines park during an inspection?",
])
def test_other_width_or_parking_questions_reach_the_model(question):
    responder = FakeResponder(answer="Ask the local code.")

    answer = NormativeAssistant(responder).ask(question)

    assert answer == "Ask the local code."
    assert len(responder.prompts) == 1
    assert question in responder.prompts[0]
