"""Pydantic models and enums for the Reference Credibility Score engine."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ReferenceStatus(str, Enum):
    """Lifecycle status of a reference check, owned by the host application."""

    PENDING = "pending"
    COMPLETED = "completed"
    DECLINED = "declined"
    EXPIRED = "expired"


class Grade(str, Enum):
    A_PLUS = "A+"
    A = "A"
    A_MINUS = "A-"
    B_PLUS = "B+"
    B = "B"
    B_MINUS = "B-"
    C_PLUS = "C+"
    C = "C"
    C_MINUS = "C-"
    D = "D"
    F = "F"


class Badge(str, Enum):
    OUTSTANDING = "Outstanding"
    EXCELLENT = "Excellent"
    VERY_GOOD = "Very Good"
    GOOD = "Good"
    AVERAGE = "Average"
    FAIR = "Fair"
    NEEDS_IMPROVEMENT = "Needs Improvement"


class Submission(BaseModel):
    """Read-only view of one reference check as seen by the scorer.

    ``responses`` maps question id to the referrer's answer.  ``None`` means the
    referrer has not answered anything yet, which is different from ``{}``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    role: str = ""
    responses: Optional[Dict[str, Optional[str]]] = None
    questions: List[str] = Field(default_factory=list)
    submitted_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    deepfake_probability: Optional[float] = None
    status: ReferenceStatus = ReferenceStatus.COMPLETED
    seeker_id: Optional[str] = None

    def has_responses(self) -> bool:
        return bool(self.responses)

    def response_values(self) -> List[Optional[str]]:
        """Answers in insertion order; unanswered entries stay ``None``."""
        if not self.responses:
            return []
        return list(self.responses.values())


class ScoreWeights(BaseModel):
    """Weight applied to each component when computing the overall score."""

    model_config = ConfigDict(frozen=True)

    authenticity: float = Field(default=0.4, ge=0.0)
    relevance: float = Field(default=0.3, ge=0.0)
    clarity: float = Field(default=0.2, ge=0.0)
    sentiment: float = Field(default=0.1, ge=0.0)

    @model_validator(mode="after")
    def validate_sum(self) -> "ScoreWeights":
        """Weights must equal 1.0 (±0.001 tolerance)."""
        total = self.authenticity + self.relevance + self.clarity + self.sentiment
        if abs(total - 1.0) > 1e-3:
            raise ValueError(f"score weights must sum to 1.0, got {total:.4f}")
        return self

    def as_dict(self) -> Dict[str, float]:
        return self.model_dump()


class ScoreBreakdown(BaseModel):
    """The four component scores, each within [0, 100]."""

    model_config = ConfigDict(frozen=True)

    authenticity: float = Field(ge=0.0, le=100.0)
    relevance: float = Field(ge=0.0, le=100.0)
    clarity: float = Field(ge=0.0, le=100.0)
    sentiment: float = Field(ge=0.0, le=100.0)

    def weighted_sum(self, weights: ScoreWeights) -> float:
        return (
            self.authenticity * weights.authenticity
            + self.relevance * weights.relevance
            + self.clarity * weights.clarity
            + self.sentiment * weights.sentiment
        )


class RcsResult(BaseModel):
    """Outcome of scoring one submission.  Built fresh on every call."""

    model_config = ConfigDict(frozen=True)

    submission_id: str
    overall: float
    breakdown: ScoreBreakdown
    raw_scores: ScoreBreakdown
    weights: ScoreWeights
    percentile: int = Field(ge=0, le=100)
    grade: Grade
    badge: Badge

    @property
    def raw_overall(self) -> float:
        """Unrounded weighted sum, the value grade, badge and percentile use."""
        return self.raw_scores.weighted_sum(self.weights)


class ItemFailure(BaseModel):
    """One submission that could not be rescored during a batch run."""

    submission_id: str
    reason: str


class BatchSummary(BaseModel):
    """Counts returned by a batch recalculation."""

    total: int = 0
    updated: int = 0
    failed: int = 0
    failures: List[ItemFailure] = Field(default_factory=list)

    @property
    def failed_ids(self) -> List[str]:
        return [f.submission_id for f in self.failures]
