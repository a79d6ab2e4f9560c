"""
Red flag detection tests
"""
from datetime import date

from api.models.questionnaire import QuestionnaireAnswers
from api.models.submission import RedFlag, RedFlagSeverity
from clinical.red_flags import (
    RED_FLAG_RULES,
    calculate_age,
    count_by_severity,
    detect_red_flags,
    format_red_flags,
    has_high_severity,
)


REFERENCE_DATE = date(2025, 6, 1)


def _answers(data, **overrides):
    for path, value in overrides.items():
        section, field = path.split("__")
        data[section][field] = value
    return QuestionnaireAnswers.model_validate(data)


class TestDetectRedFlags:
    """Rule evaluation"""

    def test_clean_answers_have_no_flags(self, answers):
        assert detect_red_flags(answers, REFERENCE_DATE) == []

    def test_screening_question(self, answers_data):
        answers = _answers(answers_data, red_flags__feeling_very_ill=True)
        flags = detect_red_flags(answers, REFERENCE_DATE)
        assert [f.id for f in flags] == ["general_malaise"]
        assert flags[0].severity == RedFlagSeverity.MEDIUM
        assert flags[0].matched_text == "red_flags.feeling_very_ill: ja"

    def test_region_question_needs_region(self, answers_data):
        answers_data["red_flags"]["region_specific"] = {"chest_pain_with_shortness": True}
        flags = detect_red_flags(_answers(answers_data), REFERENCE_DATE)
        assert flags == []

        answers_data["complaint"]["locations"] = ["chest"]
        flags = detect_red_flags(_answers(answers_data), REFERENCE_DATE)
        assert [f.id for f in flags] == ["cardiac_respiratory"]

    def test_high_severity_keyword_yields_one_flag_per_rule(self, answers_data):
        """Two phrases of the same rule still produce a single flag"""
        answers = _answers(
            answers_data,
            complaint__main_complaint="Veel gewichtsverlies, ben 5 kilo afgevallen",
        )
        flags = detect_red_flags(answers, REFERENCE_DATE)
        assert [f.id for f in flags] == ["reported_weight_loss"]
        assert flags[0].severity == RedFlagSeverity.HIGH
        assert flags[0].matched_text == "gewichtsverlies"

    def test_keyword_match_is_case_insensitive(self, answers_data):
        answers = _answers(answers_data, medical_history__other_conditions="Vorig jaar KANKER gehad")
        flags = detect_red_flags(answers, REFERENCE_DATE)
        assert [f.id for f in flags] == ["malignancy_history"]
        assert flags[0].matched_text == "KANKER"

    def test_goal_texts_are_scanned(self, answers_data):
        answers = _answers(answers_data, goals__thoughts_on_cause="Misschien kanker?")
        flags = detect_red_flags(answers, REFERENCE_DATE)
        assert [f.id for f in flags] == ["malignancy_history"]
        assert flags[0].matched_text == "kanker"

        answers = _answers(
            answers_data,
            goals__thoughts_on_cause="Verkeerd getild",
            goals__limited_activities="Lopen sinds ik koorts had",
        )
        assert [f.id for f in detect_red_flags(answers, REFERENCE_DATE)] == ["reported_fever"]

    def test_several_rules_on_same_text(self, answers_data):
        answers = _answers(
            answers_data,
            complaint__main_complaint="Krachtsverlies na chemotherapie, ook koorts",
        )
        ids = [f.id for f in detect_red_flags(answers, REFERENCE_DATE)]
        assert ids == ["neurological_deficit", "malignancy_history", "reported_fever"]

    def test_cauda_equina_combination(self, answers_data):
        answers = _answers(answers_data, red_flags__bladder_bowel_problems=True)
        ids = [f.id for f in detect_red_flags(answers, REFERENCE_DATE)]
        assert ids == ["bladder_bowel_dysfunction", "cauda_equina_syndrome"]

    def test_age_combination_uses_threshold(self, answers_data):
        answers_data["red_flags"]["unexplained_weight_loss"] = True
        answers_data["personalia"]["birth_date"] = "1960-01-01"
        ids = [f.id for f in detect_red_flags(_answers(answers_data), REFERENCE_DATE)]
        assert ids == ["unexplained_weight_loss", "age_weight_loss_combo"]

        answers_data["personalia"]["birth_date"] = "1990-01-01"
        ids = [f.id for f in detect_red_flags(_answers(answers_data), REFERENCE_DATE)]
        assert ids == ["unexplained_weight_loss"]

    def test_intensity_combinations(self, answers_data):
        answers = _answers(
            answers_data,
            red_flags__pain_not_decreasing_with_rest=True,
            complaint__intensity=8,
            complaint__frequency="constant",
            complaint__duration=">3months",
        )
        ids = [f.id for f in detect_red_flags(answers, REFERENCE_DATE)]
        assert ids == ["unrelenting_pain", "unrelenting_severe_pain", "chronic_severe_pain"]

    def test_output_follows_rule_order(self, answers_data):
        answers_data["red_flags"] = {
            "unexplained_weight_loss": True,
            "night_sweats_or_fever": True,
            "bladder_bowel_problems": True,
            "feeling_very_ill": True,
            "pain_not_decreasing_with_rest": True,
            "region_specific": {},
        }
        answers_data["complaint"]["main_complaint"] = "Koorts en nachtpijn"
        flags = detect_red_flags(_answers(answers_data), REFERENCE_DATE)
        rule_order = [rule.id for rule in RED_FLAG_RULES]
        positions = [rule_order.index(f.id) for f in flags]
        assert positions == sorted(positions)

    def test_deterministic(self, answers_data):
        answers = _answers(answers_data, complaint__onset="Na een ongeluk met de fiets")
        assert detect_red_flags(answers, REFERENCE_DATE) == detect_red_flags(
            answers, REFERENCE_DATE
        )


class TestHelpers:
    """Age and summaries"""

    def test_calculate_age_before_birthday(self):
        assert calculate_age(date(1985, 6, 15), date(2025, 6, 14)) == 39
        assert calculate_age(date(1985, 6, 15), date(2025, 6, 15)) == 40

    def test_count_and_high_severity(self):
        flags = [
            RedFlag(id="a", label="A", severity="high", matched_text="x", triggered_by="x"),
            RedFlag(id="b", label="B", severity="low", matched_text="y", triggered_by="y"),
        ]
        assert count_by_severity(flags) == {"low": 1, "medium": 0, "high": 1}
        assert has_high_severity(flags) is True
        assert has_high_severity(flags[1:]) is False

    def test_format_groups_by_severity(self):
        flags = [
            RedFlag(id="b", label="Laag", severity="low", matched_text="y", triggered_by="y"),
            RedFlag(
                id="a",
                label="Hoog",
                severity="high",
                matched_text="x",
                triggered_by="x",
                recommendation="Verwijs door",
            ),
        ]
        text = format_red_flags(flags)
        assert text.index("**Hoog (direct handelen):**") < text.index(
            "**Laag (doorverwijzing overwegen):**"
        )
        assert "- Hoog\n  -> Verwijs door" in text
        assert "Middel" not in text

    def test_format_empty(self):
        assert format_red_flags([]) == "Geen rode vlaggen gedetecteerd."
