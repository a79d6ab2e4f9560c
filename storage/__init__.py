"""Submission storage."""

from storage.submissions import (
    ImmutableSubmissionError,
    InMemorySubmissionRepository,
    SubmissionRepository,
    get_repository,
    new_submission_id,
)

__all__ = [
    "SubmissionRepository",
    "InMemorySubmissionRepository",
    "ImmutableSubmissionError",
    "get_repository",
    "new_submission_id",
]
