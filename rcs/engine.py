"""RCS orchestrator: find → score → rank → persist, single and batch."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Iterable, List, Optional

from rcs.config import Settings
from rcs.errors import SubmissionNotFound
from rcs.models import BatchSummary, ItemFailure, RcsResult, ScoreWeights, Submission
from rcs.scoring.aggregator import Aggregator
from rcs.scoring.percentile import DEFAULT_PERCENTILE, PercentileRanker, percentile_of
from rcs.storage.base import SubmissionStore

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 10


class RcsCalculator:
    """Scores reference checks against a SubmissionStore.

    Single-submission calls propagate persistence errors to the caller.
    Batch runs absorb every per-item error and report it in the summary.
    """

    def __init__(
        self,
        store: SubmissionStore,
        weights: Optional[ScoreWeights] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        default_percentile: int = DEFAULT_PERCENTILE,
    ) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self.store = store
        self.aggregator = Aggregator(weights)
        self.ranker = PercentileRanker(store, default=default_percentile)
        self.chunk_size = chunk_size
        self.default_percentile = default_percentile

    @classmethod
    def from_settings(cls, config: Settings, store: SubmissionStore) -> "RcsCalculator":
        return cls(
            store=store,
            weights=config.weights(),
            chunk_size=config.batch_chunk_size,
            default_percentile=config.default_percentile,
        )

    @property
    def weights(self) -> ScoreWeights:
        return self.aggregator.weights

    # ------------------------------------------------------------------
    # Pure scoring
    # ------------------------------------------------------------------

    def compute(self, submission: Submission, population: Iterable[float] = ()) -> RcsResult:
        """Score *submission* against an in-hand population; no I/O."""
        raw = self.aggregator.breakdown(submission)
        overall = self.aggregator.combine(raw)
        percentile = percentile_of(overall, population, self.default_percentile)
        return self.aggregator.build_result(submission.id, raw, percentile)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def score_submission(self, submission_id: str) -> RcsResult:
        """Score one stored reference and persist the result.

        Raises SubmissionNotFound for unknown ids; persistence errors propagate.
        """
        start = time.perf_counter()
        submission = await self.store.find_submission(submission_id)
        if submission is None:
            logger.error("submission_not_found", extra={"submission_id": submission_id})
            raise SubmissionNotFound(submission_id)

        result = await self._score_and_persist(submission)

        logger.info(
            "rcs_scored",
            extra={
                "submission_id": submission_id,
                "overall": result.overall,
                "grade": result.grade.value,
                "elapsed_ms": round((time.perf_counter() - start) * 1000, 1),
            },
        )
        return result

    async def recalculate_batch(self, requester_id: Optional[str] = None) -> BatchSummary:
        """Rescore every completed reference, optionally for one requester.

        Items run concurrently within a chunk of ``chunk_size``; chunks run
        one after another, so at most ``chunk_size`` items are in flight.
        """
        start = time.perf_counter()
        submission_ids = await self.store.list_submission_ids(requester_id)
        total = len(submission_ids)
        logger.info(
            "batch_started",
            extra={"total": total, "requester_id": requester_id, "chunk_size": self.chunk_size},
        )

        failures: List[ItemFailure] = []
        for offset in range(0, total, self.chunk_size):
            chunk = submission_ids[offset:offset + self.chunk_size]
            outcomes = await asyncio.gather(*(self._recalculate_one(sid) for sid in chunk))
            failures.extend(f for f in outcomes if f is not None)

        summary = BatchSummary(
            total=total,
            updated=total - len(failures),
            failed=len(failures),
            failures=failures,
        )
        logger.info(
            "batch_completed",
            extra={
                "total": summary.total,
                "updated": summary.updated,
                "failed": summary.failed,
                "elapsed_ms": round((time.perf_counter() - start) * 1000, 1),
            },
        )
        return summary

    def score_submission_sync(self, submission_id: str) -> RcsResult:
        """Synchronous wrapper around score_submission() for CLI use."""
        return asyncio.run(self.score_submission(submission_id))

    def recalculate_batch_sync(self, requester_id: Optional[str] = None) -> BatchSummary:
        """Synchronous wrapper around recalculate_batch() for CLI/scheduler use."""
        return asyncio.run(self.recalculate_batch(requester_id))

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _score_and_persist(self, submission: Submission) -> RcsResult:
        raw = self.aggregator.breakdown(submission)
        overall = self.aggregator.combine(raw)
        percentile = await self.ranker.rank(overall)
        result = self.aggregator.build_result(submission.id, raw, percentile)
        await self.store.persist_result(submission.id, result)
        return result

    async def _recalculate_one(self, submission_id: str) -> Optional[ItemFailure]:
        """Load, score and persist one reference; return None on success, or the recorded failure."""
        try:
            submission = await self.store.find_submission(submission_id)
            if submission is None:
                raise SubmissionNotFound(submission_id)
            await self._score_and_persist(submission)
        except Exception as exc:
            logger.error(
                "batch_item_failed",
                extra={"submission_id": submission_id, "error": str(exc)},
                exc_info=True,
            )
            return ItemFailure(
                submission_id=submission_id,
                reason=str(exc) or type(exc).__name__,
            )
        return None
