"""Pydantic v2 settings for the RCS engine, read from env vars prefixed RCS_."""

from __future__ import annotations

import functools
import logging

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rcs.models import ScoreWeights


class Settings(BaseSettings):
    """All configuration lives here; no hardcoded values elsewhere."""

    model_config = SettingsConfigDict(
        env_prefix="RCS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── Storage ──────────────────────────────────────────────────────────────
    db_path: str = "~/.rcs/references.db"

    # ── Scoring weights ───────────────────────────────────────────────────────
    authenticity_weight: float = Field(default=0.4, ge=0.0)
    relevance_weight: float = Field(default=0.3, ge=0.0)
    clarity_weight: float = Field(default=0.2, ge=0.0)
    sentiment_weight: float = Field(default=0.1, ge=0.0)

    # ── Percentile / batch ────────────────────────────────────────────────────
    default_percentile: int = Field(default=50, ge=0, le=100)
    batch_chunk_size: int = Field(default=10, ge=1)

    # ── Scheduling ────────────────────────────────────────────────────────────
    recalc_cron: str = "0 3 * * *"

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool = False

    # ── Field validators ──────────────────────────────────────────────────────

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            raise ValueError(f"log_level must be one of {valid}")
        return upper

    @field_validator("recalc_cron")
    @classmethod
    def validate_cron(cls, v: str) -> str:
        if len(v.split()) != 5:
            raise ValueError(f"recalc_cron must have 5 fields, got {v!r}")
        return v

    # ── Model validators ──────────────────────────────────────────────────────

    @model_validator(mode="after")
    def validate_weights_sum(self) -> "Settings":
        """The four component weights must equal 1.0 (±0.001 tolerance)."""
        total = (
            self.authenticity_weight
            + self.relevance_weight
            + self.clarity_weight
            + self.sentiment_weight
        )
        if abs(total - 1.0) > 1e-3:
            raise ValueError(
                f"authenticity_weight + relevance_weight + clarity_weight + "
                f"sentiment_weight must sum to 1.0, got {total:.4f}"
            )
        return self

    def weights(self) -> ScoreWeights:
        """Return the configured weight set as an immutable ScoreWeights."""
        return ScoreWeights(
            authenticity=self.authenticity_weight,
            relevance=self.relevance_weight,
            clarity=self.clarity_weight,
            sentiment=self.sentiment_weight,
        )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached Settings singleton."""
    return Settings()


def get_log_level(settings: Settings) -> int:
    return getattr(logging, settings.log_level, logging.INFO)
