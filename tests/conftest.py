"""
Test configuration and fixtures
"""
import copy

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.models.questionnaire import QuestionnaireAnswers
from storage import InMemorySubmissionRepository, get_repository


# Complete questionnaire that triggers no red flags
COMPLETE_ANSWERS = {
    "personalia": {
        "full_name": "Jan de Vries",
        "gender": "man",
        "birth_date": "1985-06-15",
        "phone": "0612345678",
        "email": "jan@example.nl",
        "insurance": "Zilveren Kruis",
        "insurance_number": "123456789",
    },
    "complaint": {
        "locations": ["lower-back"],
        "main_complaint": "Zeurende pijn onder in de rug",
        "onset": "Begonnen na het tillen van een zware doos",
        "frequency": "daily",
        "duration": "1-4weeks",
        "intensity": 5,
        "has_occurred_before": False,
    },
    "red_flags": {
        "unexplained_weight_loss": False,
        "night_sweats_or_fever": False,
        "bladder_bowel_problems": False,
        "feeling_very_ill": False,
        "pain_not_decreasing_with_rest": False,
        "region_specific": {},
    },
    "medical_history": {
        "has_recent_surgeries": False,
        "takes_medication": True,
        "medications": ["Paracetamol"],
        "smoking_status": "no",
        "alcohol_consumption": "sometimes",
    },
    "goals": {
        "treatment_goals": "Weer zonder pijn kunnen werken en sporten",
        "thoughts_on_cause": "Verkeerd getild",
        "mood_impact": "little",
        "limited_activities": "Tuinieren en lang zitten",
    },
    "functional_limitations": {
        "limited_activity_categories": ["work", "sports"],
        "severity_scores": {"work": 6, "sports": 8},
    },
}


@pytest.fixture
def answers_data():
    """Raw complete answers, safe to mutate"""
    return copy.deepcopy(COMPLETE_ANSWERS)


@pytest.fixture
def answers(answers_data):
    """Validated complete answers"""
    return QuestionnaireAnswers.model_validate(answers_data)


@pytest.fixture
def repository():
    """Fresh in-memory repository"""
    return InMemorySubmissionRepository(draft_expiration_days=30)


@pytest.fixture
def client(repository):
    """Test client bound to the fresh repository"""
    app.dependency_overrides[get_repository] = lambda: repository
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def submit(client, answers_data):
    """Submit a questionnaire and return the stored submission"""

    def _submit(answers=None, session_id=None):
        payload = {"answers": answers or answers_data, "consent_given": True}
        if session_id:
            payload["session_id"] = session_id
        response = client.post("/v1/submit-questionnaire", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["submission"]

    return _submit
