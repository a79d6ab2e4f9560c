"""
HHSB mapping tests
"""
from datetime import date

import pytest
from pydantic import ValidationError

from api.models.questionnaire import QuestionnaireAnswers
from clinical.hhsb_mapper import (
    HHSB_SECTIONS,
    extract_key_summary,
    format_locations,
    map_to_hhsb,
)
from clinical.red_flags import detect_red_flags

REFERENCE_DATE = date(2025, 6, 1)


class TestMapToHHSB:
    """Section projection"""

    def test_complete_answers_map_without_error(self, answers):
        document = map_to_hhsb(answers, [], REFERENCE_DATE)
        assert document.hulpvraag.startswith("**Hulpvraag van de Patiënt**")
        assert "Weer zonder pijn kunnen werken en sporten" in document.hulpvraag
        assert "39 jaar oud" in document.historie
        assert "Onderrug" in document.historie
        assert "5/10 (Matige pijn)" in document.stoornissen
        assert "Beperking 8/10 (Ernstig beperkt)" in document.beperkingen
        assert "Paracetamol" in document.historie

    def test_raw_mapping_is_accepted(self, answers_data):
        document = map_to_hhsb(answers_data, [], REFERENCE_DATE)
        assert "Onderrug" in document.stoornissen

    def test_anamnese_summary(self, answers):
        document = map_to_hhsb(answers, [], REFERENCE_DATE)
        assert document.anamnese_summary == (
            "39-jarige patiënt met klachten ter hoogte van Onderrug, bestaande sinds "
            "1 tot 4 weken, met een pijnintensiteit van 5/10."
        )

    def test_red_flags_embedded(self, answers_data):
        answers_data["complaint"]["main_complaint"] = "Pijn sinds chemotherapie"
        answers = QuestionnaireAnswers.model_validate(answers_data)
        flags = detect_red_flags(answers, REFERENCE_DATE)
        document = map_to_hhsb(answers, flags, REFERENCE_DATE)
        assert [f.id for f in document.red_flags] == ["malignancy_history"]
        assert "**Hoog (direct handelen):**" in document.red_flags_summary
        assert document.full_structured_text.endswith(document.red_flags_summary)

    def test_no_red_flags_summary(self, answers):
        document = map_to_hhsb(answers, [], REFERENCE_DATE)
        assert document.red_flags_summary == "Geen rode vlaggen gedetecteerd."

    def test_full_text_joins_all_sections(self, answers):
        document = map_to_hhsb(answers, [], REFERENCE_DATE)
        parts = document.full_structured_text.split("\n\n---\n\n")
        assert len(parts) == len(HHSB_SECTIONS) + 1
        assert parts[0] == document.hulpvraag
        assert parts[3] == document.beperkingen

    def test_missing_field_is_listed(self, answers_data):
        del answers_data["goals"]["treatment_goals"]
        with pytest.raises(ValidationError) as exc_info:
            map_to_hhsb(answers_data, [])
        assert "goals.treatment_goals" in str(exc_info.value)

    def test_every_missing_field_is_listed(self, answers_data):
        del answers_data["personalia"]["email"]
        del answers_data["complaint"]["intensity"]
        del answers_data["functional_limitations"]
        with pytest.raises(ValidationError) as exc_info:
            map_to_hhsb(answers_data, [])
        locations = {".".join(str(p) for p in e["loc"]) for e in exc_info.value.errors()}
        assert {
            "personalia.email",
            "complaint.intensity",
            "functional_limitations",
        } <= locations


class TestFormatting:

    def test_format_locations(self):
        assert format_locations([]) == "Niet ingevuld"
        assert format_locations(["neck"]) == "Nek"
        assert format_locations(["neck", "head"]) == "Nek en Hoofd"
        assert format_locations(["neck", "head", "chest"]) == "Nek, Hoofd en Borst"

    def test_key_summary(self, answers):
        summary = extract_key_summary(answers, REFERENCE_DATE)
        assert summary == {
            "age": 39,
            "primary_location": "Onderrug",
            "pain_score": 5,
            "duration": "1 tot 4 weken",
            "has_multiple_locations": False,
            "location_count": 1,
        }

