"""
Therapist action models.

GOVERNANCE:
- Every review and import records the therapist ID
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ReviewDecision(BaseModel):
    """Therapist marks a submitted questionnaire as reviewed."""

    therapist_id: str = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("therapist_id")
    @classmethod
    def strip_therapist_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Therapeut ID is verplicht")
        return v


class ImportDecision(BaseModel):
    """Therapist imports a reviewed questionnaire into the intake workflow."""

    therapist_id: str = Field(..., min_length=1)


class PatientInfo(BaseModel):
    """Patient header handed to the intake workflow on import."""

    full_name: str
    age: int
    gender: Optional[str] = None
    main_complaint: Optional[str] = None
