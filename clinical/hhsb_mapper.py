"""
Projection of questionnaire answers into the HHSB note format.

HHSB: Hulpvraag (help question), Historie (history), Stoornissen
(impairments), Beperkingen (limitations). Which answer feeds which section
is fixed by HHSB_SECTIONS below.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional, Union

from api.models.questionnaire import (
    ACTIVITY_LABELS,
    BODY_REGION_LABELS,
    DURATION_LABELS,
    FREQUENCY_LABELS,
    MOOD_IMPACT_LABELS,
    QuestionnaireAnswers,
)
from api.models.submission import HHSBDocument, RedFlag
from clinical.red_flags import calculate_age, format_red_flags

NOT_FILLED = "Niet ingevuld"


@dataclass(frozen=True)
class SectionField:
    """One heading in a section, fed by the answer at `source`."""

    heading: str
    source: str
    render: Callable[[Any, date], str]


def _text(value: Optional[str], today: date) -> str:
    return value.strip() if value and value.strip() else NOT_FILLED


def _label(labels: dict[str, str]) -> Callable[[Any, date], str]:
    return lambda value, today: labels.get(value, value)


def format_locations(locations: list[str]) -> str:
    """Dutch enumeration: "A", "A en B", "A, B en C"."""
    if not locations:
        return NOT_FILLED
    labels = [BODY_REGION_LABELS.get(location, location) for location in locations]
    if len(labels) == 1:
        return labels[0]
    return f"{', '.join(labels[:-1])} en {labels[-1]}"


def _locations(value: list[str], today: date) -> str:
    return format_locations(value)


def _age(value: date, today: date) -> str:
    return f"{calculate_age(value, today)} jaar oud"


def _previous_occurrences(complaint, today: date) -> str:
    if not complaint.has_occurred_before:
        return "Nee, dit is de eerste keer."
    details = complaint.previous_occurrence_details
    return f"Ja. {details.strip() if details and details.strip() else 'Geen details verstrekt.'}"


def _medical_history(history, today: date) -> str:
    lines = []
    if history.has_recent_surgeries:
        lines.append(f"- Recente operaties: {_text(history.surgery_details, today)}")
    if history.takes_medication and history.medications:
        lines.append(f"- Medicatie: {', '.join(history.medications)}")
    if history.other_conditions and history.other_conditions.strip():
        lines.append(f"- Andere aandoeningen: {history.other_conditions.strip()}")
    smoking = {"yes": "Ja", "stopped": "Gestopt"}.get(history.smoking_status, "Nee")
    alcohol = {"never": "Nooit", "regularly": "Regelmatig"}.get(
        history.alcohol_consumption, "Soms"
    )
    lines.append(f"- Roken: {smoking}")
    lines.append(f"- Alcohol: {alcohol}")
    return "\n".join(lines)


def _graded(score: int, grades: tuple[str, str, str], none: str = "") -> str:
    if score >= 7:
        return grades[0]
    if score >= 4:
        return grades[1]
    if score > 0:
        return grades[2]
    return none


def _intensity(value: int, today: date) -> str:
    grade = _graded(value, ("Ernstige pijn", "Matige pijn", "Lichte pijn"), "Geen pijn")
    return f"{value}/10 ({grade})"


def _limitations(limitations, today: date) -> str:
    lines = []
    for activity in limitations.limited_activity_categories:
        score = limitations.severity_scores.get(activity, 0)
        if activity == "other" and limitations.custom_activity:
            label = limitations.custom_activity
        else:
            label = ACTIVITY_LABELS.get(activity, activity)
        line = f"- {label}: Beperking {score}/10"
        grade = _graded(score, ("Ernstig beperkt", "Matig beperkt", "Licht beperkt"))
        if grade:
            line += f" ({grade})"
        lines.append(line)
    return "\n".join(lines)


HHSB_SECTIONS: dict[str, tuple[str, list[SectionField]]] = {
    "hulpvraag": (
        "Hulpvraag van de Patiënt",
        [
            SectionField("Behandeldoelen", "goals.treatment_goals", _text),
            SectionField("Gedachten over de oorzaak", "goals.thoughts_on_cause", _text),
            SectionField("Invloed op stemming", "goals.mood_impact", _label(MOOD_IMPACT_LABELS)),
            SectionField(
                "Activiteiten die niet meer mogelijk zijn", "goals.limited_activities", _text
            ),
        ],
    ),
    "historie": (
        "Anamnese en Historie",
        [
            SectionField("Patiënt", "personalia.birth_date", _age),
            SectionField("Locatie van de klacht", "complaint.locations", _locations),
            SectionField("Hoofdklacht", "complaint.main_complaint", _text),
            SectionField("Hoe de klacht is ontstaan", "complaint.onset", _text),
            SectionField("Frequentie", "complaint.frequency", _label(FREQUENCY_LABELS)),
            SectionField("Duur van de klacht", "complaint.duration", _label(DURATION_LABELS)),
            SectionField("Eerdere voorvallen", "complaint", _previous_occurrences),
            SectionField("Medische voorgeschiedenis", "medical_history", _medical_history),
        ],
    ),
    "stoornissen": (
        "Stoornissen",
        [
            SectionField("Pijnintensiteit (VAS)", "complaint.intensity", _intensity),
            SectionField("Aangedane regio's", "complaint.locations", _locations),
            SectionField(
                "Frequentie van symptomen", "complaint.frequency", _label(FREQUENCY_LABELS)
            ),
        ],
    ),
    "beperkingen": (
        "Beperkingen",
        [
            SectionField("Beperkte activiteiten", "functional_limitations", _limitations),
        ],
    ),
}


def _resolve(answers: QuestionnaireAnswers, path: str) -> Any:
    value: Any = answers
    for part in path.split("."):
        value = getattr(value, part)
    return value


def render_section(name: str, answers: QuestionnaireAnswers, today: date) -> str:
    """Render one HHSB section as markdown-style text."""
    title, fields = HHSB_SECTIONS[name]
    blocks = [f"**{title}**"]
    for section_field in fields:
        value = _resolve(answers, section_field.source)
        blocks.append(f"**{section_field.heading}:**\n{section_field.render(value, today)}")
    return "\n\n".join(blocks)


def anamnese_summary(answers: QuestionnaireAnswers, today: date) -> str:
    """One-sentence overview of the complaint."""
    complaint = answers.complaint
    age = calculate_age(answers.personalia.birth_date, today)
    duration = DURATION_LABELS.get(complaint.duration, complaint.duration).lower()
    return (
        f"{age}-jarige patiënt met klachten ter hoogte van "
        f"{format_locations(complaint.locations)}, bestaande sinds {duration}, "
        f"met een pijnintensiteit van {complaint.intensity}/10."
    )


def map_to_hhsb(
    answers: Union[QuestionnaireAnswers, Mapping[str, Any]],
    red_flags: list[RedFlag],
    reference_date: Optional[date] = None,
) -> HHSBDocument:
    """
    Map a complete questionnaire to an HHSB document.

    Args:
        answers: Validated answers, or a raw mapping to validate first
        red_flags: Output of the red flag detector, embedded as-is
        reference_date: Date used for age calculation (defaults to today)

    Raises:
        pydantic.ValidationError: listing every missing or invalid field
            when a raw mapping is incomplete
    """
    if not isinstance(answers, QuestionnaireAnswers):
        answers = QuestionnaireAnswers.model_validate(answers)
    today = reference_date or date.today()

    sections = {name: render_section(name, answers, today) for name in HHSB_SECTIONS}
    red_flags_summary = format_red_flags(red_flags)
    full_text = "\n\n---\n\n".join(
        [*sections.values(), f"**Rode vlaggen**\n\n{red_flags_summary}"]
    )

    return HHSBDocument(
        hulpvraag=sections["hulpvraag"],
        historie=sections["historie"],
        stoornissen=sections["stoornissen"],
        beperkingen=sections["beperkingen"],
        anamnese_summary=anamnese_summary(answers, today),
        red_flags=list(red_flags),
        red_flags_summary=red_flags_summary,
        full_structured_text=full_text,
    )


def extract_key_summary(
    answers: QuestionnaireAnswers, reference_date: Optional[date] = None
) -> dict[str, Any]:
    """Headline facts for the therapist's submission list."""
    locations = answers.complaint.locations
    return {
        "age": calculate_age(answers.personalia.birth_date, reference_date),
        "primary_location": BODY_REGION_LABELS.get(locations[0], locations[0]),
        "pain_score": answers.complaint.intensity,
        "duration": DURATION_LABELS.get(answers.complaint.duration, answers.complaint.duration),
        "has_multiple_locations": len(locations) > 1,
        "location_count": len(locations),
    }
