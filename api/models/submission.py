"""
Submission, red flag and HHSB models.

GOVERNANCE:
- Answers are frozen once a questionnaire is submitted
- Only a therapist moves a submission past `submitted`
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class SubmissionStatus(str, Enum):
    """Submission lifecycle."""

    DRAFT = "draft"  # Patient still filling in
    SUBMITTED = "submitted"  # Waiting for therapist
    REVIEWED = "reviewed"  # Therapist has read it
    IMPORTED = "imported"  # Imported into the intake workflow


# Each status may only advance to the next one
NEXT_STATUS = {
    SubmissionStatus.DRAFT: SubmissionStatus.SUBMITTED,
    SubmissionStatus.SUBMITTED: SubmissionStatus.REVIEWED,
    SubmissionStatus.REVIEWED: SubmissionStatus.IMPORTED,
}


class InvalidTransitionError(ValueError):
    """Status change not allowed by the lifecycle."""


class RedFlagSeverity(str, Enum):
    """Red flag severity."""

    LOW = "low"  # Consider referral
    MEDIUM = "medium"  # Consult GP within 24-48 hours
    HIGH = "high"  # Immediate referral


class RedFlag(BaseModel):
    """A triggered red-flag rule."""

    id: str
    label: str
    severity: RedFlagSeverity
    matched_text: str
    triggered_by: str
    recommendation: Optional[str] = None


class HHSBDocument(BaseModel):
    """Questionnaire projected into Hulpvraag / Historie / Stoornissen / Beperkingen."""

    hulpvraag: str
    historie: str
    stoornissen: str
    beperkingen: str
    anamnese_summary: str
    red_flags: list[RedFlag] = Field(default_factory=list)
    red_flags_summary: str
    full_structured_text: str
    structured_at: datetime = Field(default_factory=datetime.utcnow)


class Submission(BaseModel):
    """A pre-intake questionnaire from first draft save to import."""

    id: str
    session_id: str
    status: SubmissionStatus = SubmissionStatus.DRAFT
    answers: dict[str, Any] = Field(default_factory=dict)
    current_step: int = 0

    # Populated on submit
    red_flags: list[RedFlag] = Field(default_factory=list)
    hhsb: Optional[HHSBDocument] = None
    consent_given: bool = False
    consent_audit_hash: Optional[str] = None

    # Therapist handling
    therapist_id: Optional[str] = None
    therapist_notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    expires_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    imported_at: Optional[datetime] = None

    @property
    def has_red_flags(self) -> bool:
        return len(self.red_flags) > 0

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Only drafts expire."""
        if self.status != SubmissionStatus.DRAFT or self.expires_at is None:
            return False
        return (now or datetime.utcnow()) > self.expires_at

    def transition_to(self, status: SubmissionStatus, now: Optional[datetime] = None) -> None:
        """Advance the status one step and stamp the matching timestamp."""
        if NEXT_STATUS.get(self.status) != status:
            raise InvalidTransitionError(
                f"Status kan niet van '{self.status.value}' naar '{status.value}' gaan"
            )
        now = now or datetime.utcnow()
        self.status = status
        self.updated_at = now
        if status == SubmissionStatus.SUBMITTED:
            self.submitted_at = now
            self.expires_at = None
        elif status == SubmissionStatus.REVIEWED:
            self.reviewed_at = now
        elif status == SubmissionStatus.IMPORTED:
            self.imported_at = now
