"""
DCSPH code validation and keyword-based code suggestions.

GOVERNANCE:
- Rule-based only, no LLM reasoning
- Suggestions are subject to therapist review
"""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from clinical.dcsph_tables import (
    KNOWLEDGE_BASE,
    LOCATION_CODES,
    PATHOLOGY_CODES,
    DiagnosisCodeEntry,
    LocationCode,
    PathologyCode,
    get_entry,
    get_location,
    get_pathology,
)

_CODE_PATTERN = re.compile(r"[0-9]{4}")


@dataclass
class ValidationResult:
    """Outcome of validating one code."""

    code: Any
    is_valid: bool
    reasons: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    category: Optional[str] = None
    description: Optional[str] = None


@dataclass
class CodeSuggestion:
    """A candidate code for a free-text complaint."""

    entry: DiagnosisCodeEntry
    confidence: float
    rationale: str


@dataclass
class SuggestionResult:
    """Result of a free-text code query."""

    suggestions: list[CodeSuggestion]
    needs_clarification: bool
    confidence: float
    clarifying_question: Optional[str] = None


def is_well_formed(code: Any) -> bool:
    """True when the value is a 4-digit string."""
    return isinstance(code, str) and _CODE_PATTERN.fullmatch(code) is not None


def validate_code(code: Any) -> ValidationResult:
    """
    Validate a single DCSPH code.

    Args:
        code: Raw value from the request, not necessarily a string

    Returns:
        A validation result with every reason the code was rejected, or the
        category and description of the matching entry.
    """
    if not isinstance(code, str) or not code:
        return _invalid(code, "Code moet een string zijn")

    if len(code) != 4:
        return _invalid(code, "DCSPH code moet exact 4 cijfers bevatten")

    if not is_well_formed(code):
        return _invalid(code, "DCSPH code mag alleen cijfers bevatten")

    location_code, pathology_code = code[:2], code[2:]
    reasons = []
    if get_location(location_code) is None:
        reasons.append(f"Locatiecode {location_code} bestaat niet in DCSPH tabel A")
    if get_pathology(pathology_code) is None:
        reasons.append(f"Pathologiecode {pathology_code} bestaat niet in DCSPH tabel B")
    if reasons:
        return ValidationResult(
            code=code,
            is_valid=False,
            reasons=reasons,
            suggestions=_suggestions_for(reasons),
        )

    entry = get_entry(code)
    if not entry.is_valid:
        return ValidationResult(
            code=code,
            is_valid=False,
            reasons=[
                f"Combinatie van {entry.location_description} met "
                f"{entry.pathology_description} is klinisch niet logisch"
            ],
            suggestions=[
                f"Overweeg {alternative.code}: {alternative.description}"
                for alternative in valid_codes_for_location(location_code)[:3]
            ],
            category=entry.category,
            description=entry.description,
        )

    return ValidationResult(
        code=code,
        is_valid=True,
        category=entry.category,
        description=entry.description,
    )


def validate_codes(codes: list[Any]) -> list[ValidationResult]:
    """Validate each code independently, preserving input order."""
    return [validate_code(code) for code in codes]


def get_code_details(code: Any) -> Optional[DiagnosisCodeEntry]:
    """Return the knowledge base entry for a well-formed code."""
    if not is_well_formed(code):
        return None
    return get_entry(code)


def _invalid(code: Any, reason: str) -> ValidationResult:
    return ValidationResult(
        code=code,
        is_valid=False,
        reasons=[reason],
        suggestions=_suggestions_for([reason]),
    )


def _suggestions_for(reasons: list[str]) -> list[str]:
    suggestions = []
    for reason in reasons:
        if "4 cijfers" in reason:
            suggestions.append("DCSPH codes bestaan uit exact 4 cijfers")
            suggestions.append("Voorbeeld: 7920 (79=locatie, 20=pathologie)")
        elif "alleen cijfers" in reason:
            suggestions.append("Gebruik alleen cijfers (0-9)")
            suggestions.append("Geen letters, spaties of speciale tekens")
        elif "Locatiecode" in reason:
            suggestions.append("Controleer de eerste 2 cijfers (locatiecode)")
            suggestions.append("Raadpleeg DCSPH Tabel A voor geldige locatiecodes")
        elif "Pathologiecode" in reason:
            suggestions.append("Controleer de laatste 2 cijfers (pathologiecode)")
            suggestions.append("Raadpleeg DCSPH Tabel B voor geldige pathologiecodes")

    if not suggestions:
        suggestions.append("Controleer het formaat van de DCSPH code")
        suggestions.append('Geef de code op als tekst, bijvoorbeeld "7920"')
    return suggestions


def valid_codes_for_location(location_code: str) -> list[DiagnosisCodeEntry]:
    """All logical combinations for a location, in table B order."""
    entries = [get_entry(location_code + pathology.code) for pathology in PATHOLOGY_CODES]
    return [entry for entry in entries if entry is not None and entry.is_valid]


def valid_codes_for_pathology(pathology_code: str) -> list[DiagnosisCodeEntry]:
    """All logical combinations for a pathology, in table A order."""
    entries = [get_entry(location.code + pathology_code) for location in LOCATION_CODES]
    return [entry for entry in entries if entry is not None and entry.is_valid]


def search_by_description(term: str) -> list[DiagnosisCodeEntry]:
    """Case-insensitive substring search over logical combinations."""
    needle = term.lower().strip()
    return [
        entry
        for entry in KNOWLEDGE_BASE.values()
        if entry.is_valid and needle in entry.description.lower()
    ]


def knowledge_base_stats() -> dict:
    """Counts of table rows and valid combinations."""
    theoretical = len(LOCATION_CODES) * len(PATHOLOGY_CODES)
    valid = sum(1 for entry in KNOWLEDGE_BASE.values() if entry.is_valid)
    return {
        "total_locations": len(LOCATION_CODES),
        "total_pathologies": len(PATHOLOGY_CODES),
        "theoretical_combinations": theoretical,
        "valid_combinations": valid,
        "coverage": round(valid / theoretical * 100, 2),
    }


# Free-text suggestions

DUTCH_MEDICAL_TERMS: dict[str, list[str]] = {
    # Body regions
    "knie": ["knie", "patella", "meniscus", "kruisband"],
    "rug": ["rug", "lumbaal", "lumbo", "wervelkolom", "lenden"],
    "nek": ["nek", "cervicaal", "hals", "nekwervels"],
    "schouder": ["schouder", "humerus", "clavicula", "scapula"],
    "elleboog": ["elleboog", "epicondyl", "olecranon"],
    "pols": ["pols", "carpaal", "radius", "ulna"],
    "heup": ["heup", "coxae", "femoraal", "trochanter"],
    "enkel": ["enkel", "malleolus", "talus", "voetwortel"],
    "voet": ["voet", "teen", "metatarsaal", "calcaneus"],
    # Pathology terms
    "pijn": ["pijn", "algie", "doloreus"],
    "zwelling": ["zwelling", "oedeem", "hydrops"],
    "ontsteking": ["ontsteking", "itis", "inflammatie"],
    "overbelasting": ["overbelasting", "tendinitis", "tendinopathie"],
    "slijtage": ["slijtage", "artrose", "degeneratie"],
    "trauma": ["trauma", "letsel", "contusie", "distorsie"],
    "breuk": ["breuk", "fractuur", "fracturen"],
    "zenuw": ["zenuw", "neuraal", "radiculair", "paresthesie"],
    "spier": ["spier", "myaal", "contractuur", "atrofie"],
}

# Pattern name words are matched against the query; codes are (locations, pathologies)
SYMPTOM_PATTERNS: dict[str, tuple[list[str], list[str]]] = {
    "kniepijn_vooraan": (["79"], ["20", "21", "22"]),
    "rugpijn_onderrug": (["34", "35"], ["27", "26", "23"]),
    "nekpijn": (["30", "31"], ["38", "27", "26"]),
    "schouderpijn": (["13", "21"], ["20", "21", "26"]),
}

PATTERN_CONFIDENCE = 0.9
MAX_SUGGESTIONS = 3


def normalize_query(query: str) -> str:
    """Lowercase, drop punctuation, collapse whitespace."""
    text = re.sub(r"[.,;:!?]", " ", query.lower().strip())
    return re.sub(r"\s+", " ", text).strip()


def extract_keywords(query: str) -> list[str]:
    """Words longer than two characters plus their synonym groups."""
    words = [word for word in query.split(" ") if len(word) > 2]
    keywords = list(words)
    for word in words:
        for term, synonyms in DUTCH_MEDICAL_TERMS.items():
            if any(synonym in word or word in synonym for synonym in synonyms):
                keywords.append(term)
                keywords.extend(synonyms)
    return list(dict.fromkeys(keywords))


def _rank_by_keywords(rows, keywords: list[str]) -> list:
    normalized = [keyword.lower().strip() for keyword in keywords]
    scored = []
    for row in rows:
        text = row.description.lower()
        hits = sum(1 for keyword in normalized if keyword in text)
        if hits:
            scored.append((hits, row))
    scored.sort(key=lambda item: item[0], reverse=True)
    return [row for _, row in scored]


def find_locations_by_keywords(keywords: list[str]) -> list[LocationCode]:
    """Table A rows whose description contains any keyword, best first."""
    return _rank_by_keywords(LOCATION_CODES, keywords)


def find_pathologies_by_keywords(keywords: list[str]) -> list[PathologyCode]:
    """Table B rows whose description contains any keyword, best first."""
    return _rank_by_keywords(PATHOLOGY_CODES, keywords)


def generate_rationale(location: LocationCode, pathology: PathologyCode) -> str:
    """Short Dutch explanation for a location/pathology pairing."""
    location_text = location.description.lower()
    pathology_text = pathology.description.lower()
    rationale = f"{pathology.description} in de {location_text}."

    if "tendinitis" in pathology_text and "knie" in location_text:
        rationale += " Overbelasting van pees structuren rond het kniegewricht past bij deze klachtenpresentatie."
    elif "artrose" in pathology_text and ("heup" in location_text or "knie" in location_text):
        rationale += " Degeneratieve gewrichtsveranderingen zijn vaak zichtbaar in dragende gewrichten."
    elif "fractuur" in pathology_text or "fracturen" in pathology_text:
        rationale += " Botbreuk in deze regio past bij het traumamechanisme."
    elif "distorsie" in pathology_text or "contusie" in pathology_text:
        rationale += " Weke delen trauma in deze regio is consistent met het beschreven letsel."
    elif "hnp" in pathology_text and "wervelkolom" in location_text:
        rationale += " Discuspathologie in dit wervelkolomsegment past bij het uitstralingspatroon."

    return rationale


def generate_code_suggestions(
    locations: list[LocationCode],
    pathologies: list[PathologyCode],
    max_suggestions: int = MAX_SUGGESTIONS,
) -> list[CodeSuggestion]:
    """Combine the top ranked locations and pathologies into scored codes."""
    suggestions = []
    for i, location in enumerate(locations[:5]):
        for j, pathology in enumerate(pathologies[:5]):
            entry = get_entry(location.code + pathology.code)
            if entry is None or not entry.is_valid:
                continue
            location_confidence = max(0.5, 1 - i * 0.1)
            pathology_confidence = max(0.5, 1 - j * 0.1)
            suggestions.append(
                CodeSuggestion(
                    entry=entry,
                    confidence=round((location_confidence + pathology_confidence) / 2, 2),
                    rationale=generate_rationale(location, pathology),
                )
            )
    suggestions.sort(key=lambda s: s.confidence, reverse=True)
    return suggestions[:max_suggestions]


def _match_symptom_pattern(query: str) -> Optional[tuple[list[str], list[str]]]:
    for pattern, codes in SYMPTOM_PATTERNS.items():
        words = pattern.split("_")
        hits = sum(1 for word in words if word in query)
        if hits >= math.ceil(len(words) * 0.6):
            return codes
    return None


def _suggestions_from_pattern(codes: tuple[list[str], list[str]]) -> SuggestionResult:
    location_codes, pathology_codes = codes
    suggestions = []
    for location_code in location_codes:
        for pathology_code in pathology_codes:
            entry = get_entry(location_code + pathology_code)
            if entry is None or not entry.is_valid:
                continue
            suggestions.append(
                CodeSuggestion(
                    entry=entry,
                    confidence=PATTERN_CONFIDENCE,
                    rationale=(
                        f"{entry.pathology_description} in de "
                        f"{entry.location_description.lower()}. "
                        "Deze combinatie past goed bij de beschreven klachten."
                    ),
                )
            )
    return SuggestionResult(
        suggestions=suggestions[:MAX_SUGGESTIONS],
        needs_clarification=False,
        confidence=PATTERN_CONFIDENCE,
    )


def _clarifying_question(
    query: str, locations: list[LocationCode], pathologies: list[PathologyCode]
) -> Optional[str]:
    if not locations:
        return (
            "In welke lichaamsregio bevinden de klachten zich? "
            "(bijvoorbeeld: knie, onderrug, nek, schouder)"
        )
    if not pathologies:
        return (
            "Wat voor type klacht betreft het? "
            "(bijvoorbeeld: pijn, zwelling, stijfheid, bewegingsbeperking)"
        )
    if len(locations) > 5 and len(query.split(" ")) < 4:
        return "Kunt u specifieker aangeven waar precies de klachten zich bevinden?"
    return None


def suggest_codes(query: str) -> SuggestionResult:
    """
    Suggest DCSPH codes for a free-text complaint description.

    Known symptom patterns win outright. Otherwise keywords (expanded with
    Dutch medical synonyms) rank table A and table B rows, and the best
    combinations are returned, or a clarifying question when the query
    does not pin down a location or a pathology.
    """
    normalized = normalize_query(query)

    pattern = _match_symptom_pattern(normalized)
    if pattern is not None:
        return _suggestions_from_pattern(pattern)

    keywords = extract_keywords(normalized)
    locations = find_locations_by_keywords(keywords)
    pathologies = find_pathologies_by_keywords(keywords)

    question = _clarifying_question(normalized, locations, pathologies)
    if question is not None:
        return SuggestionResult(
            suggestions=[],
            needs_clarification=True,
            confidence=0.0,
            clarifying_question=question,
        )

    suggestions = generate_code_suggestions(locations, pathologies)
    confidence = (
        round(sum(s.confidence for s in suggestions) / len(suggestions), 2)
        if suggestions
        else 0.0
    )
    return SuggestionResult(
        suggestions=suggestions,
        needs_clarification=False,
        confidence=confidence,
    )
