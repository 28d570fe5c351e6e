"""Exception types raised by the RCS engine and its stores."""

from __future__ import annotations


class RcsError(Exception):
    """Base class for every error this package raises."""


class SubmissionNotFound(RcsError, LookupError):
    """The requested submission id does not resolve to a stored reference."""

    def __init__(self, submission_id: str) -> None:
        super().__init__(f"Reference not found: {submission_id}")
        self.submission_id = submission_id


class PopulationUnavailable(RcsError):
    """The store could not produce the population of completed scores."""


class PersistenceError(RcsError):
    """Writing a computed result back to the store failed."""


class InvalidRecord(RcsError, ValueError):
    """A stored reference row cannot be read back as a Submission."""
