"""Dict-backed SubmissionStore for embedding the engine and for tests."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from rcs.models import RcsResult, ReferenceStatus, Submission
from rcs.storage.base import SubmissionStore


class InMemoryStore(SubmissionStore):
    """Keeps submissions and their latest results in plain dicts."""

    def __init__(self, submissions: Iterable[Submission] = ()) -> None:
        self.submissions: Dict[str, Submission] = {}
        self.results: Dict[str, RcsResult] = {}
        for submission in submissions:
            self.add(submission)

    def add(self, submission: Submission) -> None:
        self.submissions[submission.id] = submission

    async def find_submission(self, submission_id: str) -> Optional[Submission]:
        return self.submissions.get(submission_id)

    async def list_population_scores(self, requester_id: Optional[str] = None) -> List[float]:
        scores: List[float] = []
        for sid, result in self.results.items():
            submission = self.submissions.get(sid)
            if submission is None or submission.status != ReferenceStatus.COMPLETED:
                continue
            if requester_id and submission.seeker_id != requester_id:
                continue
            scores.append(result.raw_overall)
        return scores

    async def list_submission_ids(self, requester_id: Optional[str] = None) -> List[str]:
        return [
            s.id
            for s in self.submissions.values()
            if s.status == ReferenceStatus.COMPLETED
            and (not requester_id or s.seeker_id == requester_id)
        ]

    async def persist_result(self, submission_id: str, result: RcsResult) -> None:
        self.results[submission_id] = result
