"""
Free-text code suggestion tests
"""
from clinical.code_validator import (
    MAX_SUGGESTIONS,
    PATTERN_CONFIDENCE,
    extract_keywords,
    find_locations_by_keywords,
    find_pathologies_by_keywords,
    normalize_query,
    suggest_codes,
)


class TestQueryProcessing:

    def test_normalize_query(self):
        assert normalize_query("  Pijn in de KNIE!!  ") == "pijn in de knie"

    def test_extract_keywords_expands_synonyms(self):
        keywords = extract_keywords("fractuur pols")
        assert "breuk" in keywords
        assert "fracturen" in keywords
        assert "radius" in keywords

    def test_find_pathologies_by_keywords(self):
        pathologies = find_pathologies_by_keywords(["artrose"])
        assert pathologies[0].code == "23"

    def test_find_locations_by_keywords(self):
        locations = find_locations_by_keywords(["wervelkolom"])
        assert locations
        assert all("wervel" in location.description.lower() for location in locations)


class TestSuggestCodes:

    def test_symptom_pattern_wins(self):
        result = suggest_codes("Ik heb al een week nekpijn")
        assert result.needs_clarification is False
        assert result.confidence == PATTERN_CONFIDENCE
        assert [s.entry.code for s in result.suggestions] == ["3038", "3027", "3026"]

    def test_unknown_location_asks_clarifying_question(self):
        result = suggest_codes("ik voel me erg moe")
        assert result.needs_clarification is True
        assert result.suggestions == []
        assert "lichaamsregio" in result.clarifying_question

    def test_keyword_suggestions_are_valid_and_ranked(self):
        result = suggest_codes("artrose van de wervelkolom")
        assert result.needs_clarification is False
        assert 0 < len(result.suggestions) <= MAX_SUGGESTIONS
        confidences = [s.confidence for s in result.suggestions]
        assert confidences == sorted(confidences, reverse=True)
        assert all(s.entry.is_valid for s in result.suggestions)
        assert all(s.rationale for s in result.suggestions)
