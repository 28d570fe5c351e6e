"""Pure scoring functions for the Reference Credibility Score."""

from __future__ import annotations

from rcs.scoring.aggregator import Aggregator
from rcs.scoring.components import (
    score_authenticity,
    score_clarity,
    score_relevance,
    score_sentiment,
)
from rcs.scoring.grading import badge_for, grade_for, round_half_up
from rcs.scoring.percentile import PercentileRanker, percentile_of

__all__ = [
    "Aggregator",
    "PercentileRanker",
    "badge_for",
    "grade_for",
    "percentile_of",
    "round_half_up",
    "score_authenticity",
    "score_clarity",
    "score_relevance",
    "score_sentiment",
]
