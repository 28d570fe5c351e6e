"""Abstract store contract the RCS engine reads from and writes to."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from rcs.models import RcsResult, Submission


class SubmissionStore(ABC):
    """Contract every reference store must implement.

    Methods are coroutines so a store may perform real I/O; the batch
    recalculator runs several of them concurrently.
    """

    @abstractmethod
    async def find_submission(self, submission_id: str) -> Optional[Submission]:
        """Return the submission, or None if the id does not resolve."""

    @abstractmethod
    async def list_population_scores(self, requester_id: Optional[str] = None) -> List[float]:
        """Overall scores of completed references that have been scored."""

    @abstractmethod
    async def list_submission_ids(self, requester_id: Optional[str] = None) -> List[str]:
        """Ids of completed submissions, optionally restricted to one requester."""

    @abstractmethod
    async def persist_result(self, submission_id: str, result: RcsResult) -> None:
        """Write *result* back onto the stored reference."""
