"""
Pre-intake draft auto-save routes.

GOVERNANCE:
- Drafts are patient-owned and expire after a configured number of days
- No clinical interpretation of partial answers
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.models.questionnaire import DraftAnswers, completion_percentage
from api.models.submission import Submission, SubmissionStatus
from clinical.errors import not_found, validation_error
from storage import ImmutableSubmissionError, SubmissionRepository, get_repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/pre-intake/drafts", tags=["pre-intake"])


class SaveDraftRequest(BaseModel):
    """Auto-save payload sent while the patient fills in the form."""

    session_id: str = Field(..., min_length=1, max_length=100)
    answers: DraftAnswers = Field(default_factory=DraftAnswers)
    current_step: int = Field(0, ge=0, le=20)


class DraftResponse(BaseModel):
    """Draft state returned to the patient form."""

    session_id: str
    answers: dict
    current_step: int
    completion_percentage: int
    updated_at: datetime
    expires_at: datetime


class DraftEnvelope(BaseModel):
    success: bool = True
    draft: DraftResponse


@router.post("", response_model=DraftEnvelope)
def save_draft(
    request: SaveDraftRequest,
    repository: SubmissionRepository = Depends(get_repository),
):
    """
    Save (or create) the draft for a session.

    Sections sent are merged into the stored answers; omitted sections
    are kept.
    """
    try:
        draft = repository.save_draft(
            request.session_id,
            request.answers.model_dump(exclude_none=True),
            request.current_step,
        )
    except ImmutableSubmissionError as exc:
        raise validation_error(
            str(exc), suggestions=["Start een nieuwe vragenlijst"]
        ) from exc

    return DraftEnvelope(draft=_to_response(draft))


@router.get("/{session_id}", response_model=DraftEnvelope)
def get_draft(
    session_id: str,
    repository: SubmissionRepository = Depends(get_repository),
):
    """Load the draft for a session; expired drafts are not returned."""
    draft = repository.get_by_session(session_id)
    if draft is None or draft.status != SubmissionStatus.DRAFT:
        raise not_found("Geen concept gevonden voor deze sessie")
    return DraftEnvelope(draft=_to_response(draft))


@router.delete("/{session_id}")
def delete_draft(
    session_id: str,
    repository: SubmissionRepository = Depends(get_repository),
):
    """Discard the draft for a session."""
    draft = repository.get_by_session(session_id)
    if draft is None or draft.status != SubmissionStatus.DRAFT:
        raise not_found("Geen concept gevonden voor deze sessie")
    repository.delete(draft.id)
    logger.info("Draft %s deleted", draft.id)
    return {"success": True}


def _to_response(draft: Submission) -> DraftResponse:
    return DraftResponse(
        session_id=draft.session_id,
        answers=draft.answers,
        current_step=draft.current_step,
        completion_percentage=completion_percentage(draft.answers),
        updated_at=draft.updated_at,
        expires_at=draft.expires_at,
    )
