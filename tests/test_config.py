from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from sisma.config import SismaConfig, configure_logging
from sisma.errors import ConfigurationError


def test_defaults():
    config = SismaConfig.from_env()

    assert config.provider == "gemini"
    assert config.gemini_model == "gemini-2.5-flash"
    assert config.openai_model == "gpt-4o"
    assert config.request_timeout == 60.0
    assert config.image_analysis_delay == 1.5


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SISMA_PROVIDER", "OpenAI")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("SISMA_REQUEST_TIMEOUT", "5")
    monkeypatch.setenv("SISMA_LOG_LEVEL", "debug")

    config = SismaConfig.from_env()

    assert config.provider == "openai"
    assert config.openai_api_key == "sk-test"
    assert config.request_timeout == 5.0
    assert config.log_level == "DEBUG"


def test_legacy_api_key_variable(monkeypatch):
    monkeypatch.setenv("API_KEY", "legacy")

    assert SismaConfig.from_env().gemini_api_key == "legacy"


def test_gemini_key_wins_over_legacy_variable(monkeypatch):
    monkeypatch.setenv("API_KEY", "legacy")
    monkeypatch.setenv("GEMINI_API_KEY", "current")

    assert SismaConfig.from_env().gemini_api_key == "current"


@pytest.mark.parametrize("name,value", [
    ("SISMA_PROVIDER", "anthropic"),
    ("SISMA_REQUEST_TIMEOUT", "0"),
    ("SISMA_REQUEST_TIMEOUT", "soon"),
    ("SISMA_LOG_LEVEL", "LOUD"),
])
def test_invalid_values_raise_configuration_error(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        SismaConfig.from_env()


def test_config_is_frozen():
    config = SismaConfig()

    with pytest.raises(ValidationError):
        config.provider = "openai"


def test_configure_logging_is_idempotent():
    root = logging.getLogger()
    before = len(root.handlers)

    configure_logging("INFO")
    configure_logging("INFO")

    added = [h for h in root.handlers if getattr(h, "_sisma", False)]
    assert len(added) == 1
    assert len(root.handlers) <= before + 1
