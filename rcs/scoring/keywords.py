"""Keyword tables used by the relevance and sentiment scorers."""

from __future__ import annotations

from typing import Dict, List

# ---------------------------------------------------------------------------
# Role fragment → keywords expected in a relevant answer.
# A role may contain several fragments ("Engineering Manager"), in which
# case the keyword lists are concatenated in table order.
# ---------------------------------------------------------------------------

ROLE_KEYWORDS: Dict[str, List[str]] = {
    "developer": ["code", "programming", "software", "technical", "debug"],
    "manager": ["team", "leadership", "project", "coordination", "planning"],
    "designer": ["creative", "design", "visual", "ui", "ux", "user"],
    "engineer": ["technical", "engineering", "system", "architecture", "solution"],
    "analyst": ["data", "analysis", "metrics", "reporting", "insights"],
}

# ---------------------------------------------------------------------------
# Sentiment terms.  Each term contributes once when it appears anywhere in
# the combined, lower-cased answers.
# ---------------------------------------------------------------------------

POSITIVE_TERMS: List[str] = [
    "excellent",
    "outstanding",
    "great",
    "amazing",
    "highly recommend",
    "exceptional",
    "skilled",
    "professional",
    "talented",
    "dedicated",
    "reliable",
    "trustworthy",
]

NEGATIVE_TERMS: List[str] = [
    "poor",
    "weak",
    "lacking",
    "difficult",
    "problems",
    "issues",
    "concerns",
    "not recommend",
    "avoid",
]

POSITIVE_TERM_POINTS = 3.0
NEGATIVE_TERM_POINTS = 5.0


def count_terms(text: str, terms: List[str]) -> int:
    """Return how many entries of *terms* occur as substrings of *text*."""
    return sum(1 for term in terms if term in text)
