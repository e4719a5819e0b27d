"""
Runtime configuration for the SISMA inspection assistant.

Values come from the environment (optionally a local .env file) and are
parsed once at startup. The Streamlit sidebar may overwrite API keys in the
environment, after which the UI reloads the configuration.
"""
from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from sisma.errors import ConfigurationError

PROVIDERS = {"gemini", "openai", "offline"}

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class SismaConfig(BaseModel):
    """Environment-driven settings, frozen after construction"""

    provider: str = Field(
        "gemini",
        description="Generative backend: gemini, openai or offline",
    )

    gemini_api_key: str = Field("", description="Google Gemini API key")
    gemini_model: str = Field("gemini-2.5-flash", description="Gemini model name")

    openai_api_key: str = Field("", description="OpenAI API key")
    openai_model: str = Field("gpt-4o", description="OpenAI model name")

    temperature: float = Field(0.1, ge=0.0, le=2.0)

    request_timeout: float = Field(
        60.0,
        description="Seconds before an outbound generation call is abandoned",
    )

    image_analysis_delay: float = Field(
        1.5,
        ge=0.0,
        description="Simulated latency of the mocked image analyzer",
    )

    log_level: str = Field("INFO")

    model_config = {
        "frozen": True,
    }

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in PROVIDERS:
            raise ValueError(
                f"Unsupported provider '{v}'. Allowed values: {sorted(PROVIDERS)}"
            )
        return v

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.strip().upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"Unknown log level '{v}'")
        return v

    @classmethod
    def from_env(cls) -> "SismaConfig":
        """
        Load configuration from environment variables.

        A .env file in the working directory is read first; variables already
        present in the environment win.
        """
        load_dotenv()

        try:
            return cls(
                provider=os.getenv("SISMA_PROVIDER", "gemini"),
                # API_KEY is the variable name the web demo used
                gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", ""),
                gemini_model=os.getenv("SISMA_GEMINI_MODEL", "gemini-2.5-flash"),
                openai_api_key=os.getenv("OPENAI_API_KEY", ""),
                openai_model=os.getenv("SISMA_OPENAI_MODEL", "gpt-4o"),
                temperature=float(os.getenv("SISMA_TEMPERATURE", "0.1")),
                request_timeout=float(os.getenv("SISMA_REQUEST_TIMEOUT", "60")),
                image_analysis_delay=float(os.getenv("SISMA_IMAGE_DELAY", "1.5")),
                log_level=os.getenv("SISMA_LOG_LEVEL", "INFO"),
            )
        except ValueError as e:
            # pydantic.ValidationError subclasses ValueError
            raise ConfigurationError(f"Invalid configuration: {e}") from e


def configure_logging(level: str = "INFO") -> None:
    """Install one stream handler on the root logger (idempotent)"""
    root = logging.getLogger()
    root.setLevel(level)
    if not any(getattr(h, "_sisma", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._sisma = True
        root.addHandler(handler)
