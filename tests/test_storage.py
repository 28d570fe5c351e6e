"""Tests for the SQLite reference store and the in-memory store."""

from __future__ import annotations

import asyncio
import json
import os

import pytest

from conftest import make_submission
from rcs.engine import RcsCalculator
from rcs.errors import InvalidRecord, PersistenceError, PopulationUnavailable
from rcs.models import ReferenceStatus
from rcs.storage.memory import InMemoryStore


def _run(coro):
    return asyncio.run(coro)


class TestDatabaseInit:
    def test_creates_tables(self, tmp_db):
        tables = tmp_db._conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        ).fetchall()
        assert "reference_checks" in {row[0] for row in tables}

    def test_wal_mode_enabled(self, tmp_db):
        mode = tmp_db._conn.execute("PRAGMA journal_mode").fetchone()[0]
        assert mode == "wal"

    def test_file_permissions(self, tmp_db):
        assert os.stat(tmp_db.path).st_mode & 0o777 == 0o600


class TestSubmissionRoundTrip:
    def test_find_returns_stored_submission(self, tmp_db, strong_submission):
        tmp_db.upsert_submission(strong_submission)
        found = _run(tmp_db.find_submission(strong_submission.id))
        assert found == strong_submission

    def test_find_unknown_returns_none(self, tmp_db):
        assert _run(tmp_db.find_submission("nope")) is None

    def test_null_responses_preserved(self, tmp_db):
        sub = make_submission(id="r-null", responses=None, submitted_at=None)
        tmp_db.upsert_submission(sub)
        found = _run(tmp_db.find_submission("r-null"))
        assert found.responses is None
        assert found.submitted_at is None

    def test_null_answer_values_preserved(self, tmp_db):
        sub = make_submission(id="r-gap", responses={"q1": "Solid.", "q2": None})
        tmp_db.upsert_submission(sub)
        found = _run(tmp_db.find_submission("r-gap"))
        assert found.responses == {"q1": "Solid.", "q2": None}

    def test_upsert_updates_fields(self, tmp_db, strong_submission):
        tmp_db.upsert_submission(strong_submission)
        tmp_db.upsert_submission(strong_submission.model_copy(update={"role": "Data Analyst"}))
        found = _run(tmp_db.find_submission(strong_submission.id))
        assert found.role == "Data Analyst"

    def test_list_submission_ids_completed_and_scoped(self, tmp_db):
        tmp_db.upsert_submission(make_submission(id="a", seeker_id="s1"))
        tmp_db.upsert_submission(make_submission(id="b", seeker_id="s2"))
        tmp_db.upsert_submission(
            make_submission(id="c", seeker_id="s1", status=ReferenceStatus.EXPIRED)
        )
        assert set(_run(tmp_db.list_submission_ids())) == {"a", "b"}
        assert _run(tmp_db.list_submission_ids("s1")) == ["a"]


def _corrupt(db, submission_id, column, value):
    db._conn.execute(
        f"UPDATE reference_checks SET {column} = ? WHERE id = ?", (value, submission_id)
    )
    db._conn.commit()


class TestUnreadableRows:
    @pytest.mark.parametrize(
        "column,value",
        [
            ("responses", '["a"]'),
            ("responses", '{"q1": 5}'),
            ("responses", "not json"),
            ("questions", "{broken"),
            ("submitted_at", "yesterday"),
        ],
    )
    def test_find_raises_invalid_record(self, tmp_db, column, value):
        tmp_db.upsert_submission(make_submission(id="bad"))
        _corrupt(tmp_db, "bad", column, value)
        with pytest.raises(InvalidRecord, match="bad"):
            _run(tmp_db.find_submission("bad"))

    def test_invalid_record_is_value_error(self, tmp_db):
        tmp_db.upsert_submission(make_submission(id="bad"))
        _corrupt(tmp_db, "bad", "responses", "not json")
        with pytest.raises(ValueError):
            _run(tmp_db.find_submission("bad"))

    @pytest.mark.parametrize("value", ['["a"]', '{"q1": 5}', "not json"])
    def test_batch_isolates_bad_row(self, tmp_db, value):
        for i in range(3):
            tmp_db.upsert_submission(make_submission(id=f"ref-{i}"))
        _corrupt(tmp_db, "ref-1", "responses", value)

        summary = RcsCalculator(tmp_db).recalculate_batch_sync()

        assert (summary.total, summary.updated, summary.failed) == (3, 2, 1)
        assert summary.failed_ids == ["ref-1"]
        assert tmp_db.get_result_row("ref-0")["rcs_score"] == pytest.approx(89.6)
        assert tmp_db.get_result_row("ref-1")["rcs_score"] is None

    def test_single_score_of_bad_row_raises(self, tmp_db):
        tmp_db.upsert_submission(make_submission(id="bad"))
        _corrupt(tmp_db, "bad", "responses", '["a"]')
        with pytest.raises(InvalidRecord):
            RcsCalculator(tmp_db).score_submission_sync("bad")
        assert tmp_db.get_result_row("bad")["rcs_score"] is None


class TestPersistResult:
    def test_persist_writes_score_columns(self, tmp_db, strong_submission):
        tmp_db.upsert_submission(strong_submission)
        result = RcsCalculator(tmp_db).compute(strong_submission)
        _run(tmp_db.persist_result(strong_submission.id, result))

        row = tmp_db.get_result_row(strong_submission.id)
        assert row["rcs_score"] == pytest.approx(89.6)
        assert row["ai_authenticity_score"] == pytest.approx(90.0)
        assert row["rcs_grade"] == "A-"
        assert row["rcs_badge"] == "Very Good"
        assert json.loads(row["rcs_breakdown"])["weights"]["authenticity"] == 0.4
        assert row["scored_at"]

    def test_persist_unknown_id_raises(self, tmp_db, strong_submission):
        result = RcsCalculator(tmp_db).compute(strong_submission)
        with pytest.raises(PersistenceError):
            _run(tmp_db.persist_result("ghost", result))

    def test_rescoring_keeps_submission_fields(self, tmp_db, strong_submission):
        tmp_db.upsert_submission(strong_submission)
        RcsCalculator(tmp_db).score_submission_sync(strong_submission.id)
        tmp_db.upsert_submission(strong_submission)
        assert tmp_db.get_result_row(strong_submission.id)["rcs_score"] is not None


class TestPopulation:
    def test_population_only_completed_and_scored(self, tmp_db):
        calc = RcsCalculator(tmp_db)
        tmp_db.upsert_submission(make_submission(id="scored"))
        tmp_db.upsert_submission(make_submission(id="unscored"))
        tmp_db.upsert_submission(make_submission(id="pending", status=ReferenceStatus.PENDING))
        calc.score_submission_sync("scored")
        calc.score_submission_sync("pending")

        scores = _run(tmp_db.list_population_scores())
        assert scores == [pytest.approx(89.6)]

    def test_population_error_wrapped(self, tmp_db):
        tmp_db._conn.close()
        with pytest.raises(PopulationUnavailable):
            _run(tmp_db.list_population_scores())

    def test_batch_over_database(self, tmp_db):
        for i in range(12):
            tmp_db.upsert_submission(make_submission(id=f"r{i:02d}", seeker_id="s1"))
        summary = RcsCalculator(tmp_db).recalculate_batch_sync("s1")
        assert (summary.total, summary.updated, summary.failed) == (12, 12, 0)
        assert len(_run(tmp_db.list_population_scores("s1"))) == 12


class TestStats:
    def test_empty_stats(self, tmp_db):
        s = tmp_db.get_stats()
        assert s["reference_count"] == 0
        assert s["scored"] == 0
        assert s["mean_score"] is None

    def test_stats_after_scoring(self, tmp_db):
        tmp_db.upsert_submission(make_submission(id="a"))
        tmp_db.upsert_submission(make_submission(id="b", responses={}, deepfake_probability=None))
        tmp_db.upsert_submission(make_submission(id="c", status=ReferenceStatus.DECLINED))
        RcsCalculator(tmp_db).recalculate_batch_sync()

        s = tmp_db.get_stats()
        assert s["reference_count"] == 3
        assert s["completed"] == 2
        assert s["scored"] == 2
        assert s["grade_distribution"] == {"A-": 1, "F": 1}
        assert s["mean_score"] == pytest.approx(64.55, abs=0.06)


class TestInMemoryStore:
    def test_population_scoped_by_requester(self):
        store = InMemoryStore(
            [make_submission(id="a", seeker_id="s1"), make_submission(id="b", seeker_id="s2")]
        )
        RcsCalculator(store).recalculate_batch_sync()
        assert len(_run(store.list_population_scores())) == 2
        assert len(_run(store.list_population_scores("s2"))) == 1
