"""Synthetic reference-check generator for demos and end-to-end testing."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from rcs.models import ReferenceStatus, Submission
from rcs.scoring.keywords import NEGATIVE_TERMS, POSITIVE_TERMS, ROLE_KEYWORDS

# ---------------------------------------------------------------------------
# Answer templates.  {keyword} is filled from the role keyword table and
# {praise}/{concern} from the sentiment term lists, so generated references
# exercise the real scoring tables.
# ---------------------------------------------------------------------------

_STRONG_TEMPLATES: List[str] = [
    "I worked with {name} for three years and the quality of their {keyword} work was "
    "consistently high. They were {praise} with stakeholders and I would hire them again.",
    "{name} took ownership of our {keyword} efforts during a difficult migration window, "
    "kept everyone informed, and finished ahead of plan. Truly {praise}.",
    "Across several releases {name} showed strong judgement in {keyword}. "
    "Colleagues described them as {praise}, and the numbers backed that up.",
]

_MIXED_TEMPLATES: List[str] = [
    "{name} was capable at {keyword} but reviewers kept using the word \"{concern}\" about deadlines.",
    "Their {keyword} skills were fine, although feedback mentioned \"{concern}\" communication at times.",
]

_WEAK_TEMPLATES: List[str] = [
    "ok",
    "NO COMMENT ON THIS CANDIDATE AT ALL",
    "they were there ### ??? @@@",
]

QUESTIONS: List[str] = [
    "How long did you work together?",
    "Describe their main strengths.",
    "Where could they improve?",
    "Would you work with them again?",
]

ROLES: List[str] = [
    "Software Developer",
    "Senior Software Engineer",
    "Product Designer",
    "Engineering Manager",
    "Data Analyst",
    "Account Executive",
]

_NAMES = ["Alex", "Sam", "Jordan", "Taylor", "Morgan", "Riley", "Casey", "Jamie"]

SEEKERS = ["seeker-001", "seeker-002", "seeker-003", "seeker-004"]


def _keywords_for(role: str) -> List[str]:
    role_lower = role.lower()
    words: List[str] = []
    for fragment, keywords in ROLE_KEYWORDS.items():
        if fragment in role_lower:
            words.extend(keywords)
    return words or ["client", "delivery"]


class SyntheticReferenceGenerator:
    """Generate realistic fake Submission data.

    Args:
        count: Number of references to generate (default 50).
        seed: Random seed for reproducibility (default None = random).
    """

    def __init__(self, count: int = 50, seed: Optional[int] = None) -> None:
        self.count = count
        self.seed = seed
        self._rng = random.Random(seed)

    def generate(self) -> List[Submission]:
        """Generate a batch of synthetic references.

        Approximately:
        - 60% strong, fully answered, positive references
        - 20% mixed references with concerns and a missing answer
        - 10% weak references (terse, shouty or noisy answers)
        - 10% references that are not completed (pending/declined/expired)

        Seekers are assigned round-robin.
        """
        submissions: List[Submission] = []
        now = datetime.utcnow()

        for i in range(self.count):
            seeker = SEEKERS[i % len(SEEKERS)]
            role = self._rng.choice(ROLES)
            bucket = self._rng.random()

            status = ReferenceStatus.COMPLETED
            if bucket < 0.60:
                responses = self._answers(role, _STRONG_TEMPLATES, len(QUESTIONS))
            elif bucket < 0.80:
                responses = self._answers(role, _MIXED_TEMPLATES, len(QUESTIONS) - 1)
            elif bucket < 0.90:
                responses = {
                    f"q{n + 1}": self._rng.choice(_WEAK_TEMPLATES) for n in range(len(QUESTIONS))
                }
            else:
                status = self._rng.choice(
                    [ReferenceStatus.PENDING, ReferenceStatus.DECLINED, ReferenceStatus.EXPIRED]
                )
                responses = None

            created = now - timedelta(days=self._rng.randint(1, 90))
            submitted = None
            if status == ReferenceStatus.COMPLETED and self._rng.random() > 0.1:
                submitted = created + timedelta(hours=self._rng.randint(1, 72))

            deepfake = None
            if status == ReferenceStatus.COMPLETED:
                deepfake = round(self._rng.uniform(0.0, 0.35), 3)

            submissions.append(
                Submission(
                    id=f"ref-{i:04d}",
                    seeker_id=seeker,
                    role=role,
                    status=status,
                    questions=list(QUESTIONS),
                    responses=responses,
                    submitted_at=submitted,
                    created_at=created,
                    deepfake_probability=deepfake,
                )
            )

        return submissions

    def _answers(self, role: str, templates: List[str], answered: int) -> Dict[str, Optional[str]]:
        keywords = _keywords_for(role)
        name = self._rng.choice(_NAMES)
        answers: Dict[str, Optional[str]] = {}
        for n in range(answered):
            template = self._rng.choice(templates)
            answers[f"q{n + 1}"] = template.format(
                name=name,
                keyword=self._rng.choice(keywords),
                praise=self._rng.choice(POSITIVE_TERMS),
                concern=self._rng.choice(NEGATIVE_TERMS),
            )
        return answers
