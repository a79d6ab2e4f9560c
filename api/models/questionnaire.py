"""
Pre-intake questionnaire models.

Sections follow the LOFTIG (complaint) and SCEGS (goals) interview frames.
Field constraints mirror what the patient-facing form enforces.
"""

from datetime import date
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

BodyRegion = Literal[
    "head",
    "neck",
    "shoulder-left",
    "shoulder-right",
    "arm-left",
    "arm-right",
    "elbow-left",
    "elbow-right",
    "hand-left",
    "hand-right",
    "upper-back",
    "lower-back",
    "chest",
    "abdomen",
    "hip-left",
    "hip-right",
    "leg-left",
    "leg-right",
    "knee-left",
    "knee-right",
    "ankle-left",
    "ankle-right",
    "foot-left",
    "foot-right",
]

Frequency = Literal["constant", "daily", "weekly", "occasionally"]
Duration = Literal["<1week", "1-4weeks", "1-3months", ">3months"]
MoodImpact = Literal["not", "little", "moderate", "much"]
ActivityCategory = Literal[
    "work", "sports", "household", "driving", "sleeping", "hobbies", "social", "other"
]

BODY_REGION_LABELS: dict[str, str] = {
    "head": "Hoofd",
    "neck": "Nek",
    "shoulder-left": "Schouder Links",
    "shoulder-right": "Schouder Rechts",
    "arm-left": "Arm Links",
    "arm-right": "Arm Rechts",
    "elbow-left": "Elleboog Links",
    "elbow-right": "Elleboog Rechts",
    "hand-left": "Hand Links",
    "hand-right": "Hand Rechts",
    "upper-back": "Bovenrug",
    "lower-back": "Onderrug",
    "chest": "Borst",
    "abdomen": "Buik",
    "hip-left": "Heup Links",
    "hip-right": "Heup Rechts",
    "leg-left": "Been Links",
    "leg-right": "Been Rechts",
    "knee-left": "Knie Links",
    "knee-right": "Knie Rechts",
    "ankle-left": "Enkel Links",
    "ankle-right": "Enkel Rechts",
    "foot-left": "Voet Links",
    "foot-right": "Voet Rechts",
}

FREQUENCY_LABELS = {
    "constant": "Constant",
    "daily": "Dagelijks",
    "weekly": "Wekelijks",
    "occasionally": "Af en toe",
}

DURATION_LABELS = {
    "<1week": "Minder dan 1 week",
    "1-4weeks": "1 tot 4 weken",
    "1-3months": "1 tot 3 maanden",
    ">3months": "Meer dan 3 maanden",
}

MOOD_IMPACT_LABELS = {
    "not": "Niet",
    "little": "Weinig",
    "moderate": "Matig",
    "much": "Veel",
}

ACTIVITY_LABELS = {
    "work": "Werk",
    "sports": "Sport",
    "household": "Huishouden",
    "driving": "Autorijden",
    "sleeping": "Slapen",
    "hobbies": "Hobby's",
    "social": "Sociale activiteiten",
    "other": "Anders",
}

SECTIONS = (
    "personalia",
    "complaint",
    "red_flags",
    "medical_history",
    "goals",
    "functional_limitations",
)

SeverityScore = Annotated[int, Field(ge=0, le=10)]


class Personalia(BaseModel):
    """Personal details."""

    full_name: str = Field(..., min_length=2, max_length=100)
    gender: Optional[Literal["man", "vrouw"]] = None
    birth_date: date
    phone: str = Field(..., max_length=20, pattern=r"^(\+31|0)[0-9]{9}$|^[0-9]{10}$")
    email: str = Field(..., max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    insurance: str = Field(..., min_length=1)
    insurance_number: Optional[str] = None

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: date) -> date:
        """Birth date must be in the past and plausible."""
        today = date.today()
        if v > today:
            raise ValueError("Geboortedatum kan niet in de toekomst liggen")
        if today.year - v.year > 120:
            raise ValueError("Voer een geldige geboortedatum in")
        return v


class Complaint(BaseModel):
    """Complaint section (LOFTIG)."""

    locations: list[BodyRegion] = Field(..., min_length=1, max_length=10)
    main_complaint: Optional[str] = Field(None, max_length=1000)
    onset: str = Field(..., min_length=10, max_length=500)
    frequency: Frequency
    duration: Duration
    intensity: int = Field(..., ge=0, le=10)
    has_occurred_before: bool
    previous_occurrence_details: Optional[str] = Field(None, max_length=500)


class RedFlagScreening(BaseModel):
    """Screening questions; region-specific answers keyed by question key."""

    unexplained_weight_loss: bool
    night_sweats_or_fever: bool
    bladder_bowel_problems: bool
    feeling_very_ill: bool
    pain_not_decreasing_with_rest: bool
    region_specific: dict[str, bool] = Field(default_factory=dict)


class MedicalHistory(BaseModel):
    """Medical background."""

    has_recent_surgeries: bool
    surgery_details: Optional[str] = Field(None, max_length=500)
    takes_medication: bool
    medications: list[Annotated[str, Field(max_length=100)]] = Field(
        default_factory=list, max_length=20
    )
    other_conditions: Optional[str] = Field(None, max_length=1000)
    smoking_status: Literal["yes", "no", "stopped"]
    alcohol_consumption: Literal["never", "sometimes", "regularly"]


class Goals(BaseModel):
    """Goals section (SCEGS)."""

    treatment_goals: str = Field(..., min_length=10, max_length=500)
    thoughts_on_cause: str = Field(..., min_length=5, max_length=300)
    mood_impact: MoodImpact
    limited_activities: str = Field(..., min_length=5, max_length=500)


class FunctionalLimitations(BaseModel):
    """Limited activities with a 0-10 severity each."""

    limited_activity_categories: list[ActivityCategory] = Field(
        ..., min_length=1, max_length=8
    )
    custom_activity: Optional[str] = Field(None, max_length=100)
    severity_scores: dict[str, SeverityScore] = Field(default_factory=dict)


class QuestionnaireAnswers(BaseModel):
    """A complete questionnaire, as required for submission."""

    personalia: Personalia
    complaint: Complaint
    red_flags: RedFlagScreening
    medical_history: MedicalHistory
    goals: Goals
    functional_limitations: FunctionalLimitations


class DraftAnswers(BaseModel):
    """Partial answers saved while the patient fills in the form."""

    model_config = ConfigDict(extra="forbid")

    personalia: Optional[dict[str, Any]] = None
    complaint: Optional[dict[str, Any]] = None
    red_flags: Optional[dict[str, Any]] = None
    medical_history: Optional[dict[str, Any]] = None
    goals: Optional[dict[str, Any]] = None
    functional_limitations: Optional[dict[str, Any]] = None


def merge_answers(existing: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    """
    Merge a draft save into the stored answers.

    Sections are merged key by key; keys absent from the new save are kept.
    """
    merged = {section: dict(values) for section, values in existing.items()}
    for section, values in incoming.items():
        if values is None:
            continue
        merged.setdefault(section, {}).update(values)
    return merged


def completion_percentage(answers: dict[str, Any]) -> int:
    """Share of sections that would pass validation on their own."""
    section_models = QuestionnaireAnswers.model_fields
    complete = 0
    for section in SECTIONS:
        values = answers.get(section)
        if not values:
            continue
        model = section_models[section].annotation
        try:
            model.model_validate(values)
        except ValueError:
            continue
        complete += 1
    return round(complete / len(SECTIONS) * 100)
