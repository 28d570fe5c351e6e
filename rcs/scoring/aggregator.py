"""Combines component scores into an RcsResult."""

from __future__ import annotations

from typing import Optional

from rcs.models import RcsResult, ScoreBreakdown, ScoreWeights, Submission
from rcs.scoring.components import (
    score_authenticity,
    score_clarity,
    score_relevance,
    score_sentiment,
)
from rcs.scoring.grading import badge_for, grade_for, round_half_up


class Aggregator:
    """Weighted-sum aggregation with grade/badge labelling.

    Grade, badge and percentile are always derived from the unrounded
    overall score; only the values exposed for display are rounded.
    """

    def __init__(self, weights: Optional[ScoreWeights] = None) -> None:
        self.weights = weights or ScoreWeights()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def breakdown(self, submission: Submission) -> ScoreBreakdown:
        """Run the four component scorers; they share no state."""
        return ScoreBreakdown(
            authenticity=score_authenticity(submission),
            relevance=score_relevance(submission),
            clarity=score_clarity(submission),
            sentiment=score_sentiment(submission),
        )

    def combine(self, raw: ScoreBreakdown) -> float:
        return raw.weighted_sum(self.weights)

    def build_result(
        self,
        submission_id: str,
        raw: ScoreBreakdown,
        percentile: int,
    ) -> RcsResult:
        overall = self.combine(raw)
        return RcsResult(
            submission_id=submission_id,
            overall=round_half_up(overall),
            breakdown=self._rounded(raw),
            raw_scores=raw,
            weights=self.weights,
            percentile=percentile,
            grade=grade_for(overall),
            badge=badge_for(overall),
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _rounded(raw: ScoreBreakdown) -> ScoreBreakdown:
        return ScoreBreakdown(
            authenticity=round_half_up(raw.authenticity),
            relevance=round_half_up(raw.relevance),
            clarity=round_half_up(raw.clarity),
            sentiment=round_half_up(raw.sentiment),
        )
