"""The four RCS component scorers.

Each scorer is a pure function ``Submission -> float`` clamped to [0, 100]:

    authenticity  = 100 - deepfake_probability*100 - 10 (unsubmitted)
                    - missing_answer_ratio * 20
    relevance     = 80 + length band (-30 / -10 / +10) + min(10, 2 * keyword hits)
    clarity       = 85 - per-answer penalties (no sentence, special chars, all caps)
    sentiment     = 75 + 3 * positive terms - 5 * negative terms

Relevance and clarity are 0 when nothing was answered; sentiment stays at
its neutral 75.
"""

from __future__ import annotations

import re
from typing import List

from rcs.models import Submission
from rcs.scoring.keywords import (
    NEGATIVE_TERM_POINTS,
    NEGATIVE_TERMS,
    POSITIVE_TERM_POINTS,
    POSITIVE_TERMS,
    ROLE_KEYWORDS,
    count_terms,
)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_SPECIAL_CHARS = re.compile(r"[^a-zA-Z0-9\s.,!?-]")

MIN_SCORE = 0.0
MAX_SCORE = 100.0


def clamp(value: float, low: float = MIN_SCORE, high: float = MAX_SCORE) -> float:
    return max(low, min(high, value))


def _joined_text(submission: Submission) -> str:
    return " ".join(v or "" for v in submission.response_values()).lower()


# ---------------------------------------------------------------------------
# Authenticity
# ---------------------------------------------------------------------------


def score_authenticity(submission: Submission) -> float:
    score = 100.0

    if submission.deepfake_probability:
        score -= submission.deepfake_probability * 100

    if submission.submitted_at is None:
        score -= 10

    # An empty mapping still counts as "responses present": every question
    # is then unanswered.
    if submission.responses is not None and submission.questions:
        answered = len(submission.responses)
        expected = len(submission.questions)
        if answered < expected:
            score -= (expected - answered) / expected * 20

    return clamp(score)


# ---------------------------------------------------------------------------
# Relevance
# ---------------------------------------------------------------------------


def extract_role_keywords(role: str) -> List[str]:
    """Keywords for every table fragment found in *role*, then the role's own words."""
    role_lower = role.lower()
    keywords: List[str] = []
    for fragment, words in ROLE_KEYWORDS.items():
        if fragment in role_lower:
            keywords.extend(words)
    # whitespace split: an empty role adds no empty-string keyword
    keywords.extend(role.split())
    return keywords


def _length_adjustment(avg_length: float) -> float:
    if avg_length < 50:
        return -30
    if avg_length > 500:
        return -10
    if 100 <= avg_length <= 300:
        return 10
    # 50-100 and 300-500 are left unadjusted on purpose.
    return 0


def score_relevance(submission: Submission) -> float:
    if not submission.has_responses():
        return 0.0

    values = submission.response_values()
    avg_length = sum(len(v or "") for v in values) / len(values)

    score = 80.0 + _length_adjustment(avg_length)

    text = _joined_text(submission)
    matches = sum(1 for kw in extract_role_keywords(submission.role) if kw.lower() in text)
    score += min(10, matches * 2)

    return clamp(score)


# ---------------------------------------------------------------------------
# Clarity
# ---------------------------------------------------------------------------


def _clarity_penalty(response: str) -> float:
    penalty = 0.0

    sentences = [s for s in _SENTENCE_SPLIT.split(response) if s.strip()]
    if not sentences:
        penalty += 10

    if len(_SPECIAL_CHARS.findall(response)) > len(response) * 0.1:
        penalty += 5

    if response == response.upper() and len(response) > 20:
        penalty += 5

    return penalty


def score_clarity(submission: Submission) -> float:
    if not submission.has_responses():
        return 0.0

    score = 85.0
    for response in submission.response_values():
        if not response:
            continue
        score -= _clarity_penalty(response)

    return clamp(score)


# ---------------------------------------------------------------------------
# Sentiment
# ---------------------------------------------------------------------------


def score_sentiment(submission: Submission) -> float:
    score = 75.0
    if not submission.has_responses():
        return score

    text = _joined_text(submission)
    score += count_terms(text, POSITIVE_TERMS) * POSITIVE_TERM_POINTS
    score -= count_terms(text, NEGATIVE_TERMS) * NEGATIVE_TERM_POINTS

    return clamp(score)
