"""Grade and badge threshold tables plus display rounding."""

from __future__ import annotations

import math
from typing import List, Tuple

from rcs.models import Badge, Grade

# Descending; the first threshold the score reaches wins.
GRADE_THRESHOLDS: List[Tuple[float, Grade]] = [
    (95, Grade.A_PLUS),
    (90, Grade.A),
    (85, Grade.A_MINUS),
    (80, Grade.B_PLUS),
    (75, Grade.B),
    (70, Grade.B_MINUS),
    (65, Grade.C_PLUS),
    (60, Grade.C),
    (55, Grade.C_MINUS),
    (50, Grade.D),
]

BADGE_THRESHOLDS: List[Tuple[float, Badge]] = [
    (95, Badge.OUTSTANDING),
    (90, Badge.EXCELLENT),
    (80, Badge.VERY_GOOD),
    (70, Badge.GOOD),
    (60, Badge.AVERAGE),
    (50, Badge.FAIR),
]


def grade_for(score: float) -> Grade:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return Grade.F


def badge_for(score: float) -> Badge:
    for threshold, badge in BADGE_THRESHOLDS:
        if score >= threshold:
            return badge
    return Badge.NEEDS_IMPROVEMENT


def round_half_up(value: float, ndigits: int = 1) -> float:
    """floor(value * 10**ndigits + 0.5) / 10**ndigits, so 0.25 -> 0.3."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor
