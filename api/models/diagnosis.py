"""Diagnosis code request and response models."""

import re
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from clinical.code_validator import CodeSuggestion, ValidationResult
from clinical.dcsph_tables import DiagnosisCodeEntry

_SUSPICIOUS_PATTERNS = [
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"<iframe", re.IGNORECASE),
    re.compile(r"eval\(", re.IGNORECASE),
]


class ValidateCodeRequest(BaseModel):
    """Either a single `code` or a list of `codes`; values are untyped."""

    code: Optional[Any] = None
    codes: Optional[Any] = None


class SuggestCodesRequest(BaseModel):
    """Free-text complaint description."""

    query: str = Field(..., min_length=3, max_length=1000)

    @field_validator("query")
    @classmethod
    def reject_markup(cls, v: str) -> str:
        """Plain text only."""
        if any(pattern.search(v) for pattern in _SUSPICIOUS_PATTERNS):
            raise ValueError("Ongeldige karakters in vraag")
        return v


class CodeValidation(BaseModel):
    """Validation verdict for one code."""

    code: Any
    is_valid: bool
    reasons: list[str]
    suggestions: list[str]
    category: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_result(cls, result: ValidationResult) -> "CodeValidation":
        return cls(
            code=result.code,
            is_valid=result.is_valid,
            reasons=result.reasons,
            suggestions=result.suggestions,
            category=result.category,
            description=result.description,
        )


class CodeDetails(BaseModel):
    """Knowledge base entry for a code."""

    code: str
    category: str
    description: str
    is_valid: bool
    location_code: str
    location_description: str
    pathology_code: str
    pathology_description: str
    region: str

    @classmethod
    def from_entry(cls, entry: DiagnosisCodeEntry) -> "CodeDetails":
        return cls(
            code=entry.code,
            category=entry.category,
            description=entry.description,
            is_valid=entry.is_valid,
            location_code=entry.location_code,
            location_description=entry.location_description,
            pathology_code=entry.pathology_code,
            pathology_description=entry.pathology_description,
            region=entry.region,
        )


class SuggestedCode(BaseModel):
    """A scored code suggestion."""

    code: str
    description: str
    category: str
    confidence: float
    rationale: str

    @classmethod
    def from_suggestion(cls, suggestion: CodeSuggestion) -> "SuggestedCode":
        return cls(
            code=suggestion.entry.code,
            description=suggestion.entry.description,
            category=suggestion.entry.category,
            confidence=suggestion.confidence,
            rationale=suggestion.rationale,
        )
