"""
Rule-based red flag detection for pre-intake questionnaires.

Rules follow the DTF (Directe Toegang Fysiotherapie) screening guidance.
Each rule fires at most once and flags come back in rule definition order.

GOVERNANCE:
- Exact and keyword rules only, no fuzzy matching or learning
- Flags prompt the therapist; they never block or diagnose
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from api.models.questionnaire import QuestionnaireAnswers
from api.models.submission import RedFlag, RedFlagSeverity
from config import get_settings


@dataclass(frozen=True)
class RuleContext:
    """Values derived once per detection run."""

    age: int
    age_threshold: int
    high_intensity: int


Matcher = Callable[[QuestionnaireAnswers, RuleContext], Optional[str]]


@dataclass(frozen=True)
class RedFlagRule:
    """A trigger rule; the matcher returns the matched text or None."""

    id: str
    label: str
    severity: RedFlagSeverity
    triggered_by: str
    recommendation: str
    matcher: Matcher


def calculate_age(birth_date: date, reference_date: Optional[date] = None) -> int:
    """Age in whole years on the reference date."""
    today = reference_date or date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def _screening(field_name: str) -> Matcher:
    def match(answers: QuestionnaireAnswers, ctx: RuleContext) -> Optional[str]:
        if getattr(answers.red_flags, field_name) is True:
            return f"red_flags.{field_name}: ja"
        return None

    return match


def _region(regions: tuple[str, ...], key: str) -> Matcher:
    def match(answers: QuestionnaireAnswers, ctx: RuleContext) -> Optional[str]:
        if not any(region in answers.complaint.locations for region in regions):
            return None
        if answers.red_flags.region_specific.get(key) is True:
            return f"red_flags.region_specific.{key}: ja"
        return None

    return match


_FREE_TEXT_FIELDS = (
    ("complaint", "main_complaint"),
    ("complaint", "onset"),
    ("complaint", "previous_occurrence_details"),
    ("medical_history", "surgery_details"),
    ("medical_history", "other_conditions"),
    ("goals", "treatment_goals"),
    ("goals", "thoughts_on_cause"),
    ("goals", "limited_activities"),
)


def _keywords(phrases: tuple[str, ...]) -> Matcher:
    def match(answers: QuestionnaireAnswers, ctx: RuleContext) -> Optional[str]:
        for section, field_name in _FREE_TEXT_FIELDS:
            text = getattr(getattr(answers, section), field_name) or ""
            lowered = text.lower()
            for phrase in phrases:
                index = lowered.find(phrase)
                if index >= 0:
                    return text[index : index + len(phrase)]
        return None

    return match


def _age_with_weight_loss(answers: QuestionnaireAnswers, ctx: RuleContext) -> Optional[str]:
    if ctx.age > ctx.age_threshold and answers.red_flags.unexplained_weight_loss:
        return f"leeftijd {ctx.age} + onverklaarbaar gewichtsverlies"
    return None


def _night_symptoms_with_constant_pain(
    answers: QuestionnaireAnswers, ctx: RuleContext
) -> Optional[str]:
    if answers.red_flags.night_sweats_or_fever and answers.complaint.frequency == "constant":
        return "nachtelijk zweten/koorts + constante pijn"
    return None


def _unrelenting_severe_pain(answers: QuestionnaireAnswers, ctx: RuleContext) -> Optional[str]:
    intensity = answers.complaint.intensity
    if answers.red_flags.pain_not_decreasing_with_rest and intensity >= ctx.high_intensity:
        return f"pijn niet minder bij rust + intensiteit {intensity}/10"
    return None


def _cauda_equina(answers: QuestionnaireAnswers, ctx: RuleContext) -> Optional[str]:
    locations = answers.complaint.locations
    if answers.red_flags.bladder_bowel_problems and any(
        region in locations for region in ("lower-back", "hip-left", "hip-right")
    ):
        return "blaas-/darmproblemen + lage rug/heup"
    return None


def _chronic_severe_pain(answers: QuestionnaireAnswers, ctx: RuleContext) -> Optional[str]:
    complaint = answers.complaint
    if (
        complaint.duration == ">3months"
        and complaint.intensity >= ctx.high_intensity
        and complaint.frequency == "constant"
    ):
        return f">3 maanden, {complaint.intensity}/10, constant"
    return None


RED_FLAG_RULES: list[RedFlagRule] = [
    # Screening questions asked to every patient
    RedFlagRule(
        id="unexplained_weight_loss",
        label="Onverklaarbaar gewichtsverlies",
        severity=RedFlagSeverity.HIGH,
        triggered_by="red_flags.unexplained_weight_loss",
        recommendation="Doorverwijzing naar huisarts voor nader onderzoek",
        matcher=_screening("unexplained_weight_loss"),
    ),
    RedFlagRule(
        id="systemic_symptoms",
        label="Nachtelijk zweten of koorts",
        severity=RedFlagSeverity.MEDIUM,
        triggered_by="red_flags.night_sweats_or_fever",
        recommendation="Overleg met huisarts binnen 24 uur",
        matcher=_screening("night_sweats_or_fever"),
    ),
    RedFlagRule(
        id="bladder_bowel_dysfunction",
        label="Problemen met plassen of ontlasting",
        severity=RedFlagSeverity.HIGH,
        triggered_by="red_flags.bladder_bowel_problems",
        recommendation="Directe doorverwijzing naar spoedeisende hulp",
        matcher=_screening("bladder_bowel_problems"),
    ),
    RedFlagRule(
        id="general_malaise",
        label="Zich zeer ziek of zwak voelen",
        severity=RedFlagSeverity.MEDIUM,
        triggered_by="red_flags.feeling_very_ill",
        recommendation="Overleg met huisarts",
        matcher=_screening("feeling_very_ill"),
    ),
    RedFlagRule(
        id="unrelenting_pain",
        label="Pijn die niet vermindert bij rust",
        severity=RedFlagSeverity.LOW,
        triggered_by="red_flags.pain_not_decreasing_with_rest",
        recommendation="Medische evaluatie adviseren",
        matcher=_screening("pain_not_decreasing_with_rest"),
    ),
    # Region-specific screening questions
    RedFlagRule(
        id="cardiac_respiratory",
        label="Pijn op de borst samen met kortademigheid",
        severity=RedFlagSeverity.HIGH,
        triggered_by="red_flags.region_specific.chest_pain_with_shortness",
        recommendation="Directe doorverwijzing naar spoedeisende hulp",
        matcher=_region(("chest",), "chest_pain_with_shortness"),
    ),
    RedFlagRule(
        id="sudden_severe_headache",
        label="Plotselinge, ernstige hoofdpijn",
        severity=RedFlagSeverity.HIGH,
        triggered_by="red_flags.region_specific.sudden_severe_headache",
        recommendation="Directe medische evaluatie vereist",
        matcher=_region(("head",), "sudden_severe_headache"),
    ),
    RedFlagRule(
        id="saddle_anesthesia",
        label="Gevoelsverlies in het zitvlak of de genitale streek",
        severity=RedFlagSeverity.HIGH,
        triggered_by="red_flags.region_specific.saddle_anesthesia",
        recommendation="Directe doorverwijzing naar spoedeisende hulp",
        matcher=_region(("lower-back",), "saddle_anesthesia"),
    ),
    # Combinations of answers
    RedFlagRule(
        id="age_weight_loss_combo",
        label="Oudere patiënt met onverklaarbaar gewichtsverlies",
        severity=RedFlagSeverity.HIGH,
        triggered_by="combination: age + weight_loss",
        recommendation="Directe doorverwijzing naar huisarts voor nader onderzoek (mogelijke maligniteit)",
        matcher=_age_with_weight_loss,
    ),
    RedFlagRule(
        id="night_symptoms_infection",
        label="Nachtelijke symptomen (zweten/koorts) in combinatie met constante pijn",
        severity=RedFlagSeverity.MEDIUM,
        triggered_by="combination: night_sweats + constant_pain",
        recommendation="Overleg met huisarts binnen 24 uur (mogelijke infectie)",
        matcher=_night_symptoms_with_constant_pain,
    ),
    RedFlagRule(
        id="unrelenting_severe_pain",
        label="Pijn vermindert niet bij rust en is zeer intens",
        severity=RedFlagSeverity.MEDIUM,
        triggered_by="combination: unrelenting_pain + high_intensity",
        recommendation="Medische evaluatie adviseren binnen 48 uur",
        matcher=_unrelenting_severe_pain,
    ),
    RedFlagRule(
        id="cauda_equina_syndrome",
        label="Blaas-/darmprobleem in combinatie met lage rug- of heupklachten",
        severity=RedFlagSeverity.HIGH,
        triggered_by="combination: bladder_bowel + lower_back",
        recommendation="DIRECTE doorverwijzing naar spoedeisende hulp (mogelijke Cauda Equina)",
        matcher=_cauda_equina,
    ),
    RedFlagRule(
        id="chronic_severe_pain",
        label="Chronische ernstige pijn (>3 maanden, constant, hoge intensiteit)",
        severity=RedFlagSeverity.LOW,
        triggered_by="duration: >3months + high_intensity + constant",
        recommendation="Overweeg multidisciplinaire pijnbehandeling of doorverwijzing naar pijnspecialist",
        matcher=_chronic_severe_pain,
    ),
    # Trigger phrases in free text
    RedFlagRule(
        id="reported_weight_loss",
        label="Gewichtsverlies genoemd in de toelichting",
        severity=RedFlagSeverity.HIGH,
        triggered_by="free_text: gewichtsverlies",
        recommendation="Doorverwijzing naar huisarts voor nader onderzoek",
        matcher=_keywords(("gewichtsverlies", "afgevallen", "kilo's kwijt")),
    ),
    RedFlagRule(
        id="reported_night_pain",
        label="Nachtpijn genoemd in de toelichting",
        severity=RedFlagSeverity.MEDIUM,
        triggered_by="free_text: nachtpijn",
        recommendation="Uitvragen tijdens intake; bij aanhouden overleg met huisarts",
        matcher=_keywords(("nachtpijn", "'s nachts pijn", "pijn in de nacht", "wakker van de pijn")),
    ),
    RedFlagRule(
        id="neurological_deficit",
        label="Neurologische uitval genoemd in de toelichting",
        severity=RedFlagSeverity.HIGH,
        triggered_by="free_text: neurologische uitval",
        recommendation="Directe medische evaluatie vereist",
        matcher=_keywords(("krachtsverlies", "verlamming", "gevoelloos", "tintelingen in beide benen")),
    ),
    RedFlagRule(
        id="malignancy_history",
        label="Kanker in de voorgeschiedenis",
        severity=RedFlagSeverity.HIGH,
        triggered_by="free_text: maligniteit",
        recommendation="Overleg met huisarts of behandelend specialist",
        matcher=_keywords(("kanker", "tumor", "maligniteit", "uitzaaiingen", "chemotherapie")),
    ),
    RedFlagRule(
        id="recent_trauma",
        label="Recent trauma genoemd in de toelichting",
        severity=RedFlagSeverity.MEDIUM,
        triggered_by="free_text: trauma",
        recommendation="Overweeg beeldvorming ter uitsluiting van een fractuur",
        matcher=_keywords(("ongeluk", "ongeval", "aanrijding", "val van", "gevallen op")),
    ),
    RedFlagRule(
        id="reported_fever",
        label="Koorts genoemd in de toelichting",
        severity=RedFlagSeverity.MEDIUM,
        triggered_by="free_text: koorts",
        recommendation="Overleg met huisarts binnen 24 uur",
        matcher=_keywords(("koorts",)),
    ),
]


def detect_red_flags(
    answers: QuestionnaireAnswers, reference_date: Optional[date] = None
) -> list[RedFlag]:
    """
    Evaluate every rule against a complete questionnaire.

    Args:
        answers: Validated questionnaire
        reference_date: Date used for age calculation (defaults to today)

    Returns:
        One flag per matching rule, in rule definition order
    """
    settings = get_settings()
    ctx = RuleContext(
        age=calculate_age(answers.personalia.birth_date, reference_date),
        age_threshold=settings.age_red_flag_threshold,
        high_intensity=settings.high_intensity_threshold,
    )

    flags = []
    for rule in RED_FLAG_RULES:
        matched = rule.matcher(answers, ctx)
        if matched is None:
            continue
        flags.append(
            RedFlag(
                id=rule.id,
                label=rule.label,
                severity=rule.severity,
                matched_text=matched,
                triggered_by=rule.triggered_by,
                recommendation=rule.recommendation,
            )
        )
    return flags


def has_high_severity(flags: list[RedFlag]) -> bool:
    return any(flag.severity == RedFlagSeverity.HIGH for flag in flags)


def count_by_severity(flags: list[RedFlag]) -> dict[str, int]:
    """Flag counts per severity, every severity present."""
    counts = {severity.value: 0 for severity in RedFlagSeverity}
    for flag in flags:
        counts[flag.severity.value] += 1
    return counts


_SEVERITY_HEADINGS = [
    (RedFlagSeverity.HIGH, "Hoog (direct handelen)"),
    (RedFlagSeverity.MEDIUM, "Middel (overleg binnen 24-48 uur)"),
    (RedFlagSeverity.LOW, "Laag (doorverwijzing overwegen)"),
]


def format_red_flags(flags: list[RedFlag]) -> str:
    """Therapist-facing summary grouped by severity."""
    if not flags:
        return "Geen rode vlaggen gedetecteerd."

    blocks = []
    for severity, heading in _SEVERITY_HEADINGS:
        group = [flag for flag in flags if flag.severity == severity]
        if not group:
            continue
        lines = [f"**{heading}:**"]
        for flag in group:
            lines.append(f"- {flag.label}")
            if flag.recommendation:
                lines.append(f"  -> {flag.recommendation}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)
