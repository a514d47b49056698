"""Exception hierarchy for follow-up and retry submission.

Dismissing the retry confirmation is not an error and has no class here;
it is reported as a ``Cancelled`` decision instead.
"""
from __future__ import annotations


class ResubmitError(Exception):
    """Base exception for all submission errors."""


class SubmissionError(ResubmitError):
    """The sessions API rejected or failed to accept an attempt."""
    def __init__(
        self,
        session_id: str,
        message: str | None = None,
        status: int | None = None,
    ):
        self.session_id = session_id
        self.message = message
        self.status = status
        super().__init__(message or f"Submission to session {session_id} failed")
