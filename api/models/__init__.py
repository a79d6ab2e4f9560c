"""API models."""

from api.models.diagnosis import (
    CodeDetails,
    CodeValidation,
    SuggestCodesRequest,
    SuggestedCode,
    ValidateCodeRequest,
)
from api.models.questionnaire import DraftAnswers, QuestionnaireAnswers
from api.models.review import ImportDecision, PatientInfo, ReviewDecision
from api.models.submission import (
    HHSBDocument,
    RedFlag,
    RedFlagSeverity,
    Submission,
    SubmissionStatus,
)

__all__ = [
    "QuestionnaireAnswers",
    "DraftAnswers",
    "Submission",
    "SubmissionStatus",
    "RedFlag",
    "RedFlagSeverity",
    "HHSBDocument",
    "ReviewDecision",
    "ImportDecision",
    "PatientInfo",
    "ValidateCodeRequest",
    "SuggestCodesRequest",
    "CodeValidation",
    "CodeDetails",
    "SuggestedCode",
]
