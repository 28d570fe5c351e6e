"""Reference stores the RCS engine can read from and write to."""

from __future__ import annotations

from rcs.storage.base import SubmissionStore
from rcs.storage.database import Database
from rcs.storage.memory import InMemoryStore

__all__ = ["Database", "InMemoryStore", "SubmissionStore"]
