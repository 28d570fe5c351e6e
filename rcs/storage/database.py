"""SQLite WAL-mode reference store for the RCS engine."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from rcs.errors import InvalidRecord, PersistenceError, PopulationUnavailable
from rcs.models import RcsResult, ReferenceStatus, Submission
from rcs.scoring.grading import grade_for
from rcs.storage.base import SubmissionStore

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.utcnow().replace(tzinfo=timezone.utc).isoformat()


def _iso_or_none(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class Database(SubmissionStore):
    """Thin SQLite wrapper with WAL mode and parameterised queries.

    The DB file is created with permissions 0600 (owner r/w only).
    Contract methods are coroutines but run their queries inline: each one
    completes without yielding, so concurrent callers never interleave
    statements on the shared connection.
    """

    def __init__(self, path: str = "~/.rcs/references.db") -> None:
        self.path = str(Path(path).expanduser().resolve())
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = self._open()
        self._migrate()

    # ------------------------------------------------------------------
    # Connection helpers
    # ------------------------------------------------------------------

    def _open(self) -> sqlite3.Connection:
        """Open connection; create file with 0600 perms if new."""
        is_new = not Path(self.path).exists()
        conn = sqlite3.connect(self.path, check_same_thread=False)
        if is_new:
            os.chmod(self.path, 0o600)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA synchronous = NORMAL")
        return conn

    def close(self) -> None:
        """Close the underlying connection."""
        if self._conn:
            self._conn.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Schema migration
    # ------------------------------------------------------------------

    def _migrate(self) -> None:
        """Create tables if they do not yet exist."""
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS reference_checks (
                id                   TEXT    PRIMARY KEY,
                seeker_id            TEXT,
                role                 TEXT    NOT NULL DEFAULT '',
                status               TEXT    NOT NULL DEFAULT 'pending'
                                     CHECK (status IN ('pending','completed','declined','expired')),
                questions            TEXT    NOT NULL DEFAULT '[]',
                responses            TEXT,
                deepfake_probability REAL,
                submitted_at         TEXT,
                created_at           TEXT    NOT NULL DEFAULT '',
                rcs_score            REAL,
                ai_authenticity_score REAL,
                rcs_breakdown        TEXT,
                rcs_grade            TEXT,
                rcs_badge            TEXT,
                rcs_percentile       INTEGER,
                scored_at            TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_refs_status_score
                ON reference_checks(status, rcs_score);
            CREATE INDEX IF NOT EXISTS idx_refs_seeker
                ON reference_checks(seeker_id);
            """
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Reference CRUD
    # ------------------------------------------------------------------

    def upsert_submission(self, submission: Submission) -> None:
        """Insert or replace the reference fields; existing scores are kept."""
        self._conn.execute(
            """
            INSERT INTO reference_checks (
                id, seeker_id, role, status, questions, responses,
                deepfake_probability, submitted_at, created_at
            ) VALUES (?,?,?,?,?,?,?,?,?)
            ON CONFLICT(id) DO UPDATE SET
                seeker_id = excluded.seeker_id,
                role = excluded.role,
                status = excluded.status,
                questions = excluded.questions,
                responses = excluded.responses,
                deepfake_probability = excluded.deepfake_probability,
                submitted_at = excluded.submitted_at,
                created_at = excluded.created_at
            """,
            (
                submission.id,
                submission.seeker_id,
                submission.role,
                submission.status.value,
                json.dumps(submission.questions),
                json.dumps(submission.responses) if submission.responses is not None else None,
                submission.deepfake_probability,
                _iso_or_none(submission.submitted_at),
                submission.created_at.isoformat(),
            ),
        )
        self._conn.commit()

    def get_result_row(self, submission_id: str) -> Optional[Dict[str, object]]:
        """Return the persisted score columns for one reference, if any."""
        row = self._conn.execute(
            """
            SELECT rcs_score, ai_authenticity_score, rcs_breakdown,
                   rcs_grade, rcs_badge, rcs_percentile, scored_at
              FROM reference_checks
             WHERE id = ?
            """,
            (submission_id,),
        ).fetchone()
        return dict(row) if row else None

    # ------------------------------------------------------------------
    # SubmissionStore contract
    # ------------------------------------------------------------------

    async def find_submission(self, submission_id: str) -> Optional[Submission]:
        row = self._conn.execute(
            "SELECT * FROM reference_checks WHERE id = ?", (submission_id,)
        ).fetchone()
        return self._row_to_submission(row) if row else None

    async def list_population_scores(self, requester_id: Optional[str] = None) -> List[float]:
        query = (
            "SELECT rcs_score FROM reference_checks "
            "WHERE status = 'completed' AND rcs_score IS NOT NULL"
        )
        params: tuple = ()
        if requester_id:
            query += " AND seeker_id = ?"
            params = (requester_id,)
        try:
            rows = self._conn.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            raise PopulationUnavailable(str(exc)) from exc
        return [float(row["rcs_score"]) for row in rows]

    async def list_submission_ids(self, requester_id: Optional[str] = None) -> List[str]:
        query = "SELECT id FROM reference_checks WHERE status = 'completed'"
        params: tuple = ()
        if requester_id:
            query += " AND seeker_id = ?"
            params = (requester_id,)
        rows = self._conn.execute(query + " ORDER BY created_at", params).fetchall()
        return [row["id"] for row in rows]

    async def persist_result(self, submission_id: str, result: RcsResult) -> None:
        try:
            cur = self._conn.execute(
                """
                UPDATE reference_checks
                   SET rcs_score = ?, ai_authenticity_score = ?, rcs_breakdown = ?,
                       rcs_grade = ?, rcs_badge = ?, rcs_percentile = ?, scored_at = ?
                 WHERE id = ?
                """,
                (
                    result.raw_overall,
                    result.raw_scores.authenticity,
                    json.dumps(
                        {
                            "breakdown": result.breakdown.model_dump(),
                            "weights": result.weights.as_dict(),
                        }
                    ),
                    result.grade.value,
                    result.badge.value,
                    result.percentile,
                    _now_iso(),
                    submission_id,
                ),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"failed to persist {submission_id}: {exc}") from exc
        if cur.rowcount == 0:
            raise PersistenceError(f"no reference row for {submission_id}")

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def get_stats(self) -> dict:
        """Return a dict with store statistics."""
        total = self._conn.execute("SELECT COUNT(*) FROM reference_checks").fetchone()[0]
        by_status = {
            row["status"]: row["n"]
            for row in self._conn.execute(
                "SELECT status, COUNT(*) AS n FROM reference_checks GROUP BY status"
            ).fetchall()
        }
        scores = [
            float(row[0])
            for row in self._conn.execute(
                "SELECT rcs_score FROM reference_checks "
                "WHERE status = 'completed' AND rcs_score IS NOT NULL"
            ).fetchall()
        ]
        grades: Dict[str, int] = {}
        for score in scores:
            key = grade_for(score).value
            grades[key] = grades.get(key, 0) + 1
        last_row = self._conn.execute("SELECT MAX(scored_at) FROM reference_checks").fetchone()

        return {
            "reference_count": total,
            "completed": by_status.get(ReferenceStatus.COMPLETED.value, 0),
            "scored": len(scores),
            "mean_score": round(sum(scores) / len(scores), 1) if scores else None,
            "grade_distribution": grades,
            "last_scored": last_row[0] if last_row else None,
        }

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_submission(row: sqlite3.Row) -> Submission:
        """Convert a DB row to a Submission.

        Raises InvalidRecord when a JSON column, a timestamp or the resulting
        model does not validate; nothing is silently replaced by a default.
        """
        d = dict(row)

        def _parse(value: Optional[str]) -> Optional[datetime]:
            return datetime.fromisoformat(value) if value else None

        # JSONDecodeError and pydantic's ValidationError are both ValueErrors
        try:
            responses = json.loads(d["responses"]) if d.get("responses") is not None else None
            return Submission(
                id=d["id"],
                seeker_id=d.get("seeker_id"),
                role=d.get("role") or "",
                status=ReferenceStatus(d.get("status") or "pending"),
                questions=json.loads(d.get("questions") or "[]"),
                responses=responses,
                deepfake_probability=d.get("deepfake_probability"),
                submitted_at=_parse(d.get("submitted_at")),
                created_at=_parse(d.get("created_at")) or datetime.utcnow(),
            )
        except ValueError as exc:
            logger.warning("reference_row_unreadable", extra={"id": d.get("id"), "error": str(exc)})
            raise InvalidRecord(f"Unreadable reference {d.get('id')}: {exc}") from exc
