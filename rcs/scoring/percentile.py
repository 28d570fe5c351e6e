"""Percentile ranking of an overall score against completed references."""

from __future__ import annotations

import bisect
import logging
import math
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from rcs.storage.base import SubmissionStore

logger = logging.getLogger(__name__)

DEFAULT_PERCENTILE = 50


def percentile_of(
    score: float,
    population: Iterable[float],
    default: int = DEFAULT_PERCENTILE,
) -> int:
    """round(100 * |{p : p < score}| / |population|), or *default* when empty.

    Ties with *score* do not count as below it.
    """
    ordered = sorted(float(p) for p in population if p is not None)
    if not ordered:
        return default

    below = bisect.bisect_left(ordered, score)
    return int(math.floor(100 * below / len(ordered) + 0.5))


class PercentileRanker:
    """Ranks a score against the store's population; never raises."""

    def __init__(self, store: "SubmissionStore", default: int = DEFAULT_PERCENTILE) -> None:
        self.store = store
        self.default = default

    async def rank(self, score: float, requester_id: Optional[str] = None) -> int:
        try:
            population = await self.store.list_population_scores(requester_id)
        except Exception as exc:
            logger.error(
                "population_unavailable",
                extra={"error": str(exc), "fallback": self.default},
                exc_info=True,
            )
            return self.default
        return percentile_of(score, population, self.default)
