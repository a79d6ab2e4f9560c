"""
In-memory submission repository.

GOVERNANCE:
- No persistent storage (demo only)
- Answers are frozen once a questionnaire leaves draft
- Callers get copies; only the repository mutates stored records
"""

import logging
import threading
import uuid
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Any, Optional, Protocol

from api.models.questionnaire import merge_answers
from api.models.submission import Submission, SubmissionStatus
from config import get_settings

logger = logging.getLogger(__name__)


def new_submission_id() -> str:
    return f"sub-{uuid.uuid4().hex[:12]}"


class ImmutableSubmissionError(ValueError):
    """Attempt to change the answers of a submission that is no longer a draft."""


class SubmissionRepository(Protocol):
    """Storage seam for submissions; swap for a transactional store."""

    def create(self, submission: Submission) -> Submission: ...

    def get(self, submission_id: str) -> Optional[Submission]: ...

    def get_by_session(self, session_id: str) -> Optional[Submission]: ...

    def save_draft(
        self, session_id: str, answers: dict[str, Any], current_step: int
    ) -> Submission: ...

    def submit(self, submission: Submission) -> Submission: ...

    def update(self, submission: Submission) -> Submission: ...

    def delete(self, submission_id: str) -> bool: ...

    def list(
        self,
        status: Optional[SubmissionStatus] = None,
        has_red_flags: Optional[bool] = None,
    ) -> list[Submission]: ...

    def count_by_status(self) -> dict[str, int]: ...


class InMemorySubmissionRepository:
    """Process-local submission store guarded by a lock."""

    def __init__(self, draft_expiration_days: Optional[int] = None):
        if draft_expiration_days is None:
            draft_expiration_days = get_settings().draft_expiration_days
        self._draft_ttl = timedelta(days=draft_expiration_days)
        self._submissions: dict[str, Submission] = {}
        self._lock = threading.Lock()

    def _live(self, submission: Optional[Submission]) -> Optional[Submission]:
        if submission is None or submission.is_expired():
            return None
        return submission

    def _for_session(self, session_id: str) -> list[Submission]:
        """Live records of a session; expired drafts are dropped on the way."""
        records = []
        for submission in list(self._submissions.values()):
            if submission.session_id != session_id:
                continue
            if submission.is_expired():
                del self._submissions[submission.id]
                logger.info("Expired draft %s dropped", submission.id)
                continue
            records.append(submission)
        return records

    def _find_by_session(self, session_id: str) -> Optional[Submission]:
        records = self._for_session(session_id)
        for submission in records:
            if submission.status != SubmissionStatus.DRAFT:
                return submission
        return records[0] if records else None

    def create(self, submission: Submission) -> Submission:
        """
        Store a new submission.

        Raises:
            KeyError: duplicate ID, or the session already has a live record
        """
        with self._lock:
            if submission.id in self._submissions:
                raise KeyError(f"Submission {submission.id} already exists")
            if self._for_session(submission.session_id):
                raise KeyError(f"Session {submission.session_id} already has a submission")
            self._submissions[submission.id] = submission.model_copy(deep=True)
        return submission.model_copy(deep=True)

    def get(self, submission_id: str) -> Optional[Submission]:
        """Retrieve a submission by ID."""
        with self._lock:
            submission = self._live(self._submissions.get(submission_id))
            return submission.model_copy(deep=True) if submission else None

    def get_by_session(self, session_id: str) -> Optional[Submission]:
        """Retrieve the submission belonging to a patient session."""
        with self._lock:
            submission = self._find_by_session(session_id)
            return submission.model_copy(deep=True) if submission else None

    def save_draft(
        self, session_id: str, answers: dict[str, Any], current_step: int
    ) -> Submission:
        """
        Auto-save a draft, creating it on first save.

        Sections in `answers` are merged into the stored ones; an expired
        draft is replaced by a fresh one.

        Raises:
            ImmutableSubmissionError: the session was already submitted
        """
        now = datetime.utcnow()
        with self._lock:
            existing = self._find_by_session(session_id)
            if existing is not None and existing.status != SubmissionStatus.DRAFT:
                raise ImmutableSubmissionError(
                    "Vragenlijst is al ingediend en kan niet meer worden gewijzigd"
                )

            if existing is None:
                existing = Submission(
                    id=new_submission_id(),
                    session_id=session_id,
                    created_at=now,
                )
                self._submissions[existing.id] = existing
                logger.info("Draft %s created", existing.id)

            existing.answers = merge_answers(existing.answers, answers)
            existing.current_step = current_step
            existing.updated_at = now
            existing.expires_at = now + self._draft_ttl
            return existing.model_copy(deep=True)

    def submit(self, submission: Submission) -> Submission:
        """
        Store a submitted questionnaire, finalizing the session's draft.

        The check for an earlier submission and the write happen under one
        lock hold. The draft is replaced by `submission`, which keeps the
        draft's creation time.

        Raises:
            ImmutableSubmissionError: the session was already submitted
        """
        with self._lock:
            records = self._for_session(submission.session_id)
            if any(r.status != SubmissionStatus.DRAFT for r in records):
                raise ImmutableSubmissionError("Deze vragenlijst is al ingediend")
            for draft in records:
                submission.created_at = min(submission.created_at, draft.created_at)
                del self._submissions[draft.id]
            self._submissions[submission.id] = submission.model_copy(deep=True)
        logger.info("Submission %s stored for session %s", submission.id, submission.session_id)
        return submission.model_copy(deep=True)

    def update(self, submission: Submission) -> Submission:
        """
        Replace a stored submission.

        Raises:
            KeyError: unknown submission
            ImmutableSubmissionError: answers changed on a non-draft record
        """
        with self._lock:
            stored = self._submissions.get(submission.id)
            if stored is None:
                raise KeyError(f"Submission {submission.id} not found")
            if stored.status != SubmissionStatus.DRAFT and stored.answers != submission.answers:
                raise ImmutableSubmissionError(
                    "Antwoorden van een ingediende vragenlijst kunnen niet worden gewijzigd"
                )
            self._submissions[submission.id] = submission.model_copy(deep=True)
        return submission.model_copy(deep=True)

    def delete(self, submission_id: str) -> bool:
        """Remove a submission. Returns False if it did not exist."""
        with self._lock:
            return self._submissions.pop(submission_id, None) is not None

    def list(
        self,
        status: Optional[SubmissionStatus] = None,
        has_red_flags: Optional[bool] = None,
    ) -> list[Submission]:
        """
        List submissions newest first.

        Drafts are only included when explicitly requested with
        `status=DRAFT`. Records are ordered by submission time, falling
        back to the last update for drafts.
        """
        with self._lock:
            results = [
                s.model_copy(deep=True)
                for s in self._submissions.values()
                if self._live(s) is not None
            ]

        if status is None:
            results = [s for s in results if s.status != SubmissionStatus.DRAFT]
        else:
            results = [s for s in results if s.status == status]
        if has_red_flags is not None:
            results = [s for s in results if s.has_red_flags == has_red_flags]

        results.sort(key=lambda s: s.submitted_at or s.updated_at, reverse=True)
        return results

    def count_by_status(self) -> dict[str, int]:
        """Count live submissions by status."""
        counts = {status.value: 0 for status in SubmissionStatus}
        with self._lock:
            for submission in self._submissions.values():
                if self._live(submission) is not None:
                    counts[submission.status.value] += 1
        return counts


@lru_cache
def get_repository() -> SubmissionRepository:
    """Get the process-wide repository instance."""
    return InMemorySubmissionRepository()
