"""
Questionnaire submission and therapist handling routes.

GOVERNANCE:
- Consent is required before a questionnaire is accepted
- Red flags are computed on submit, never hidden from the therapist
- Review and import record the therapist ID
"""

import hashlib
import logging
import uuid
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field, ValidationError

from api.models.questionnaire import QuestionnaireAnswers
from api.models.review import ImportDecision, PatientInfo, ReviewDecision
from api.models.submission import (
    HHSBDocument,
    InvalidTransitionError,
    Submission,
    SubmissionStatus,
)
from clinical.errors import ApiError, from_exception, not_found, validation_error
from clinical.hhsb_mapper import extract_key_summary, map_to_hhsb
from clinical.red_flags import (
    calculate_age,
    count_by_severity,
    detect_red_flags,
    has_high_severity,
)
from config import get_settings
from storage import (
    ImmutableSubmissionError,
    SubmissionRepository,
    get_repository,
    new_submission_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["submissions"])


class SubmitQuestionnaireRequest(BaseModel):
    """Final questionnaire submission."""

    answers: dict[str, Any]
    session_id: Optional[str] = Field(None, max_length=100)
    consent_given: bool = False


class SubmissionEnvelope(BaseModel):
    success: bool = True
    submission: Submission


class SubmissionSummary(BaseModel):
    """Submission card for the therapist list (no full answers)."""

    id: str
    session_id: str
    status: SubmissionStatus
    patient_name: Optional[str]
    key_summary: Optional[dict[str, Any]]
    red_flag_count: int
    severity_counts: dict[str, int]
    has_high_severity_flags: bool
    submitted_at: Optional[datetime]
    updated_at: datetime


class SubmissionListResponse(BaseModel):
    success: bool = True
    submissions: list[SubmissionSummary]
    total: int
    limit: int
    offset: int


class HHSBResponse(BaseModel):
    success: bool = True
    submission_id: str
    status: SubmissionStatus
    hhsb: HHSBDocument


class ImportResponse(BaseModel):
    success: bool = True
    submission: Submission
    patient_info: PatientInfo


def consent_audit_hash(
    submission_id: str, timestamp: datetime, ip: str, user_agent: str
) -> str:
    """Tamper-evident fingerprint of a consent event."""
    payload = f"{submission_id}|{timestamp.isoformat()}|{ip}|{user_agent}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@router.post("/submit-questionnaire", response_model=SubmissionEnvelope, status_code=201)
def submit_questionnaire(
    request: SubmitQuestionnaireRequest,
    http_request: Request,
    repository: SubmissionRepository = Depends(get_repository),
):
    """
    Submit a completed questionnaire.

    GOVERNANCE:
    - Rejects the submission unless consent is given
    - Lists every missing or invalid field; the draft stays a draft
    - Red flags are detected before the record is stored
    """
    if not request.consent_given:
        raise validation_error(
            "Toestemming is vereist om de vragenlijst in te dienen",
            suggestions=["Geef toestemming voor het verwerken van uw gegevens"],
        )

    try:
        answers = QuestionnaireAnswers.model_validate(request.answers)
    except ValidationError as exc:
        raise ApiError(from_exception(exc)) from exc

    now = datetime.utcnow()
    submission = Submission(
        id=new_submission_id(),
        session_id=request.session_id or str(uuid.uuid4()),
        created_at=now,
    )
    submission.answers = answers.model_dump(mode="json")
    submission.red_flags = detect_red_flags(answers)
    submission.consent_given = True
    submission.consent_audit_hash = consent_audit_hash(
        submission.id,
        now,
        http_request.client.host if http_request.client else "unknown",
        http_request.headers.get("user-agent", "unknown"),
    )
    submission.transition_to(SubmissionStatus.SUBMITTED, now)

    try:
        stored = repository.submit(submission)
    except ImmutableSubmissionError as exc:
        raise validation_error(
            str(exc), suggestions=["Start een nieuwe vragenlijst"]
        ) from exc

    logger.info(
        "Submission %s received with %d red flag(s); consent audit %s",
        stored.id,
        len(stored.red_flags),
        stored.consent_audit_hash,
    )
    if has_high_severity(stored.red_flags):
        logger.warning("Submission %s has high severity red flags", stored.id)

    return SubmissionEnvelope(submission=stored)


@router.get("/submissions", response_model=SubmissionListResponse)
def list_submissions(
    status: Optional[SubmissionStatus] = None,
    has_red_flags: Optional[bool] = Query(None, alias="hasRedFlags"),
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    repository: SubmissionRepository = Depends(get_repository),
):
    """
    List submissions newest first.

    GOVERNANCE:
    - For therapist use only
    - Drafts are hidden unless `status=draft` is requested
    """
    settings = get_settings()
    limit = min(limit or settings.submissions_default_limit, settings.submissions_max_limit)

    submissions = repository.list(status=status, has_red_flags=has_red_flags)
    page = submissions[offset : offset + limit]

    return SubmissionListResponse(
        submissions=[_summarize(s) for s in page],
        total=len(submissions),
        limit=limit,
        offset=offset,
    )


@router.get("/submissions/stats/counts")
def get_submission_counts(repository: SubmissionRepository = Depends(get_repository)):
    """Get counts of submissions by status."""
    return repository.count_by_status()


@router.get("/submissions/{submission_id}", response_model=SubmissionEnvelope)
def get_submission(
    submission_id: str,
    repository: SubmissionRepository = Depends(get_repository),
):
    """Get one submission by submission ID or session ID."""
    return SubmissionEnvelope(submission=_load(repository, submission_id))


@router.post("/submissions/{submission_id}/process-hhsb", response_model=HHSBResponse)
def process_hhsb(
    submission_id: str,
    repository: SubmissionRepository = Depends(get_repository),
):
    """
    Structure a submitted questionnaire as an HHSB document.

    GOVERNANCE:
    - Deterministic field mapping, no generated text
    - A submitted questionnaire is marked reviewed once structured
    """
    submission = _load(repository, submission_id)
    if submission.status == SubmissionStatus.DRAFT:
        raise validation_error("Een concept kan niet worden verwerkt; dien de vragenlijst eerst in")

    try:
        submission.hhsb = map_to_hhsb(submission.answers, submission.red_flags)
    except ValidationError as exc:
        raise ApiError(from_exception(exc)) from exc

    if submission.status == SubmissionStatus.SUBMITTED:
        submission.transition_to(SubmissionStatus.REVIEWED)
    else:
        submission.updated_at = datetime.utcnow()
    repository.update(submission)
    logger.info("Submission %s structured as HHSB", submission.id)

    return HHSBResponse(
        submission_id=submission.id,
        status=submission.status,
        hhsb=submission.hhsb,
    )


@router.post("/submissions/{submission_id}/review", response_model=SubmissionEnvelope)
def review_submission(
    submission_id: str,
    decision: ReviewDecision,
    repository: SubmissionRepository = Depends(get_repository),
):
    """
    Mark a submission as reviewed.

    GOVERNANCE:
    - Requires therapist_id
    - Only a submitted questionnaire can be reviewed
    """
    submission = _load(repository, submission_id)
    _advance(submission, SubmissionStatus.REVIEWED)
    submission.therapist_id = decision.therapist_id
    submission.therapist_notes = decision.notes

    stored = repository.update(submission)
    logger.info("Submission %s reviewed by %s", stored.id, decision.therapist_id)
    return SubmissionEnvelope(submission=stored)


@router.post("/submissions/{submission_id}/import", response_model=ImportResponse)
def import_submission(
    submission_id: str,
    decision: ImportDecision,
    repository: SubmissionRepository = Depends(get_repository),
):
    """
    Import a reviewed submission into the intake workflow.

    GOVERNANCE:
    - Requires therapist_id
    - Only a reviewed questionnaire can be imported
    """
    submission = _load(repository, submission_id)
    _advance(submission, SubmissionStatus.IMPORTED)
    submission.therapist_id = decision.therapist_id

    stored = repository.update(submission)
    logger.info("Submission %s imported by %s", stored.id, decision.therapist_id)

    answers = QuestionnaireAnswers.model_validate(stored.answers)
    return ImportResponse(
        submission=stored,
        patient_info=PatientInfo(
            full_name=answers.personalia.full_name,
            age=calculate_age(answers.personalia.birth_date),
            gender=answers.personalia.gender,
            main_complaint=answers.complaint.main_complaint,
        ),
    )


def _load(repository: SubmissionRepository, submission_id: str) -> Submission:
    submission = repository.get(submission_id) or repository.get_by_session(submission_id)
    if submission is None:
        raise not_found(f"Vragenlijst {submission_id} niet gevonden")
    return submission


def _advance(submission: Submission, status: SubmissionStatus) -> None:
    try:
        submission.transition_to(status)
    except InvalidTransitionError as exc:
        raise validation_error(str(exc)) from exc


def _summarize(submission: Submission) -> SubmissionSummary:
    patient_name = None
    key_summary = None
    if submission.status != SubmissionStatus.DRAFT:
        answers = QuestionnaireAnswers.model_validate(submission.answers)
        patient_name = answers.personalia.full_name
        key_summary = extract_key_summary(answers)

    return SubmissionSummary(
        id=submission.id,
        session_id=submission.session_id,
        status=submission.status,
        patient_name=patient_name,
        key_summary=key_summary,
        red_flag_count=len(submission.red_flags),
        severity_counts=count_by_severity(submission.red_flags),
        has_high_severity_flags=has_high_severity(submission.red_flags),
        submitted_at=submission.submitted_at,
        updated_at=submission.updated_at,
    )
