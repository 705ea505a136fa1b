from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Extraction configuration loaded from environment variables."""

    log_level: str = Field(
        default="INFO",
        description="Log level for the textevents loggers (DEBUG/INFO/WARNING/ERROR/CRITICAL)",
    )
    default_event_name: str = Field(
        default="Reminder",
        description="Name used when no usable label can be derived from the text",
    )
    languages: List[str] = Field(
        default_factory=lambda: ["en", "de"],
        description="Languages handed to the natural-language date search",
    )
    context_window: int = Field(
        default=200,
        description="Characters scanned on each side of a natural-language match for keywords and times",
        ge=20,
        le=2_000,
    )
    max_name_length: int = Field(
        default=80,
        description="Upper bound for names assembled from several lines",
        ge=10,
        le=500,
    )
    name_lines_before: int = Field(
        default=3,
        description="Lines above a date searched for a label",
        ge=0,
        le=10,
    )
    name_lines_after: int = Field(
        default=2,
        description="Lines below a date searched for a label",
        ge=0,
        le=10,
    )
    fallback_hour: int = Field(
        default=9,
        description="Hour of day for natural-language dates without a recognizable time",
        ge=0,
        le=23,
    )
    ocr_language: str = Field(
        default="deu+eng",
        description="Tesseract language codes used by the image recognizer",
    )
    ocr_timeout_seconds: int = Field(
        default=15,
        description="Timeout for a single Tesseract invocation",
        ge=1,
        le=120,
    )
    ocr_max_dimension: int = Field(
        default=2400,
        description="Images are downscaled so their longest side does not exceed this value",
        ge=256,
        le=10_000,
    )

    model_config = SettingsConfigDict(
        env_prefix="TEXTEVENTS_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @field_validator("languages", mode="before")
    @classmethod
    def _split_languages(cls, value):
        if isinstance(value, str):
            return [code.strip() for code in value.split(",") if code.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        candidate = value.upper()
        if candidate not in LOG_LEVELS:
            logging.getLogger("textevents.settings").warning(
                "Unknown log level '%s', falling back to INFO.", value
            )
            return "INFO"
        return candidate


settings = Settings()


def configure_logging(level: Optional[str] = None) -> int:
    """Apply ``level`` (or ``settings.log_level``) to the ``textevents`` loggers."""
    name = (level or settings.log_level).upper()
    numeric = getattr(logging, name, logging.INFO) if name in LOG_LEVELS else logging.INFO
    logging.basicConfig(level=numeric)
    logging.getLogger("textevents").setLevel(numeric)
    return numeric
