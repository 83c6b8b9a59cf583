"""Submission store seam.

Business records live elsewhere; the engine only needs to look submissions up
by id or job.  :class:`InMemorySubmissionStore` serves hosts without their own
store and the tests.
"""

from __future__ import annotations

import threading
from typing import Iterable, Optional, Protocol

from .models import FormSubmission


class SubmissionNotFound(LookupError):
    def __init__(self, submission_id: str):
        super().__init__(f"Submission not found: {submission_id}")
        self.submission_id = submission_id


class SubmissionStore(Protocol):
    def get(self, submission_id: str) -> Optional[FormSubmission]:
        ...

    def list_for_job(self, job_id: str) -> list[FormSubmission]:
        ...


class InMemorySubmissionStore:
    def __init__(self, submissions: Iterable[FormSubmission] = ()) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, FormSubmission] = {s.id: s for s in submissions}

    def add(self, submission: FormSubmission) -> FormSubmission:
        with self._lock:
            self._items[submission.id] = submission
        return submission

    def get(self, submission_id: str) -> Optional[FormSubmission]:
        return self._items.get(submission_id)

    def require(self, submission_id: str) -> FormSubmission:
        submission = self.get(submission_id)
        if submission is None:
            raise SubmissionNotFound(submission_id)
        return submission

    def list_for_job(self, job_id: str) -> list[FormSubmission]:
        return [s for s in list(self._items.values()) if s.job_id == job_id]


__all__ = ["InMemorySubmissionStore", "SubmissionNotFound", "SubmissionStore"]
