"""
Diagnosis code endpoint tests
"""


class TestHealthEndpoints:
    """Service info"""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root_lists_endpoints(self, client):
        data = client.get("/").json()
        assert "submissions" in data["endpoints"]


class TestValidateCode:
    """POST /v1/validate-code"""

    def test_single_code(self, client):
        response = client.post("/v1/validate-code", json={"code": "7920"})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["code"] == "7920"
        assert data["validation"]["is_valid"] is True
        assert data["validation"]["category"] == "degeneratief"

    def test_single_invalid_code_is_not_an_error(self, client):
        response = client.post("/v1/validate-code", json={"code": "0000"})
        assert response.status_code == 200
        assert response.json()["validation"]["is_valid"] is False

    def test_non_string_code(self, client):
        response = client.post("/v1/validate-code", json={"code": 7920})
        assert response.status_code == 200
        assert response.json()["validation"]["reasons"] == ["Code moet een string zijn"]

    def test_batch(self, client):
        codes = ["7920", "abc", "7920", "0000"]
        response = client.post("/v1/validate-code", json={"codes": codes})
        assert response.status_code == 200
        data = response.json()
        assert data["code_count"] == 4
        assert [v["code"] for v in data["validations"]] == codes
        assert [v["is_valid"] for v in data["validations"]] == [True, False, True, False]

    def test_missing_parameters(self, client):
        response = client.post("/v1/validate-code", json={})
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["kind"] == "VALIDATION_ERROR"
        assert error["recoverable"] is True
        assert error["suggestions"]

    def test_codes_must_be_a_list(self, client):
        response = client.post("/v1/validate-code", json={"codes": "7920"})
        assert response.status_code == 400

    def test_code_takes_precedence_over_codes(self, client):
        response = client.post("/v1/validate-code", json={"code": "7920", "codes": ["0000"]})
        assert response.status_code == 200
        data = response.json()
        assert data["code"] == "7920"
        assert "validations" not in data

    def test_empty_code_is_missing(self, client):
        response = client.post("/v1/validate-code", json={"code": ""})
        assert response.status_code == 400
        assert response.json()["error"]["kind"] == "VALIDATION_ERROR"

    def test_empty_code_falls_back_to_codes(self, client):
        response = client.post("/v1/validate-code", json={"code": "", "codes": ["7920"]})
        assert response.status_code == 200
        assert response.json()["code_count"] == 1


class TestLookupCode:
    """GET /v1/validate-code/{code}"""

    def test_known_code(self, client):
        response = client.get("/v1/validate-code/7920")
        assert response.status_code == 200
        data = response.json()
        assert data["validation"]["is_valid"] is True
        assert data["details"]["location_code"] == "79"
        assert data["details"]["pathology_code"] == "20"

    def test_malformed_code(self, client):
        response = client.get("/v1/validate-code/79x0")
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "DCSPH code mag alleen cijfers bevatten"

    def test_absent_code(self, client):
        response = client.get("/v1/validate-code/0000")
        assert response.status_code == 404
        error = response.json()["error"]
        assert error["kind"] == "NOT_FOUND"
        assert response.json()["success"] is False

    def test_illogical_code_has_details(self, client):
        response = client.get("/v1/validate-code/7940")
        assert response.status_code == 200
        data = response.json()
        assert data["validation"]["is_valid"] is False
        assert data["details"]["is_valid"] is False


class TestCodeSearch:
    """Search, suggest and stats"""

    def test_search(self, client):
        response = client.get("/v1/diagnosis-codes/search", params={"q": "artrose"})
        assert response.status_code == 200
        results = response.json()["results"]
        assert 0 < len(results) <= 20

    def test_search_requires_query(self, client):
        response = client.get("/v1/diagnosis-codes/search")
        assert response.status_code == 400
        assert response.json()["error"]["details"][0]["field"] == "q"

    def test_suggest(self, client):
        response = client.post("/v1/diagnosis-codes/suggest", json={"query": "nekpijn na een val"})
        assert response.status_code == 200
        data = response.json()
        assert data["needs_clarification"] is False
        assert data["suggestions"][0]["code"] == "3038"

    def test_suggest_rejects_markup(self, client):
        response = client.post(
            "/v1/diagnosis-codes/suggest", json={"query": "<script>alert(1)</script>"}
        )
        assert response.status_code == 400

    def test_stats(self, client):
        data = client.get("/v1/diagnosis-codes/stats").json()
        assert data["success"] is True
        assert data["valid_combinations"] > 0


class TestUnexpectedErrors:
    """Unhandled exceptions become UNKNOWN_ERROR"""

    def test_internal_error_envelope(self, monkeypatch):
        from fastapi.testclient import TestClient

        from api.main import app
        from api.routes import diagnosis_codes

        def broken():
            raise RuntimeError("table corrupt")

        monkeypatch.setattr(diagnosis_codes, "knowledge_base_stats", broken)
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/v1/diagnosis-codes/stats")
        assert response.status_code == 500
        error = response.json()["error"]
        assert error["kind"] == "UNKNOWN_ERROR"
        assert error["recoverable"] is False
        assert "table corrupt" not in error["message"]
