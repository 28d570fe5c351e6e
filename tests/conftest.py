"""Shared pytest fixtures for the RCS test suite."""

from __future__ import annotations

import os
import random
from datetime import datetime
from typing import List

import pytest

# Ensure no real env vars bleed in during tests
for _key in [k for k in os.environ if k.startswith("RCS_")]:
    del os.environ[_key]

# ─── Anti-Flake Guardrails ───


@pytest.fixture(autouse=True)
def _deterministic_seed():
    """Reset random seed before every test to prevent ordering-dependent flakes."""
    random.seed(42)
    yield


@pytest.fixture()
def tmp_db(tmp_path):
    """Return a Database instance backed by a temporary file."""
    from rcs.storage.database import Database

    db = Database(str(tmp_path / "test_refs.db"))
    yield db
    db.close()


@pytest.fixture()
def mock_settings(tmp_path):
    """Return a Settings instance with safe test defaults."""
    from rcs.config import Settings

    return Settings(
        db_path=str(tmp_path / "test.db"),
        log_level="DEBUG",
        _env_file=None,
    )


QUESTIONS = ["q1", "q2", "q3"]

# Three answers of 138, 135 and 141 characters: only periods and commas,
# "excellent" is the single sentiment term, and "system", "engineering"
# and "engineer" are the only keywords for a Software Engineer.
STRONG_ANSWERS = {
    "q1": (
        "Maria owned the system design for our billing platform and delivered "
        "every milestone on schedule. Her engineering judgement was excellent."
    ),
    "q2": (
        "She mentored two new hires through their first quarter and kept the "
        "release backlog tidy during a very busy period for the whole group."
    ),
    "q3": (
        "Stakeholders trusted her estimates, and she communicated tradeoffs "
        "clearly in planning meetings, even when the news was not what they wanted."
    ),
}


def make_submission(**overrides):
    """Helper to create a Submission with sensible defaults."""
    from rcs.models import Submission

    data = dict(
        id="ref-1",
        role="Software Engineer",
        responses=dict(STRONG_ANSWERS),
        questions=list(QUESTIONS),
        submitted_at=datetime(2024, 1, 10, 9, 0, 0),
        created_at=datetime(2024, 1, 9, 9, 0, 0),
        deepfake_probability=0.1,
        seeker_id="seeker-1",
    )
    data.update(overrides)
    return Submission(**data)


@pytest.fixture()
def strong_submission():
    return make_submission()


@pytest.fixture()
def population_submissions() -> List:
    """Twelve completed references for one seeker plus two for another."""
    subs = [make_submission(id=f"ref-{i:02d}", seeker_id="seeker-1") for i in range(12)]
    subs += [make_submission(id=f"other-{i}", seeker_id="seeker-2") for i in range(2)]
    return subs
