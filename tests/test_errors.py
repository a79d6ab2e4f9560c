"""
Error envelope tests
"""
import pytest
from pydantic import BaseModel, ValidationError

from clinical.errors import (
    ApiError,
    ErrorKind,
    build_error,
    error_body,
    field_errors,
    from_exception,
    not_found,
    validation_error,
)


class _Payload(BaseModel):
    name: str
    age: int


class TestBuildError:
    """Envelope construction"""

    @pytest.mark.parametrize(
        "kind,status,recoverable",
        [
            (ErrorKind.VALIDATION_ERROR, 400, True),
            (ErrorKind.NOT_FOUND, 404, True),
            (ErrorKind.UNKNOWN_ERROR, 500, False),
        ],
    )
    def test_kind_mapping(self, kind, status, recoverable):
        envelope = build_error(kind, "Er ging iets mis")
        assert envelope.kind == kind
        assert envelope.status_code == status
        assert envelope.recoverable is recoverable
        assert envelope.suggestions == []

    def test_accepts_kind_as_string(self):
        assert build_error("NOT_FOUND", "x").kind == ErrorKind.NOT_FOUND

    def test_never_raises_on_bad_kind(self):
        envelope = build_error("NO_SUCH_KIND", "x")
        assert envelope.kind == ErrorKind.UNKNOWN_ERROR
        assert envelope.recoverable is False

    def test_suggestions_are_kept(self):
        envelope = build_error(ErrorKind.VALIDATION_ERROR, "x", suggestions=["a", "b"])
        assert envelope.suggestions == ["a", "b"]


class TestFromException:
    """Exception classification"""

    def test_api_error_keeps_envelope(self):
        exc = not_found("Niet gevonden")
        assert from_exception(exc) is exc.envelope

    def test_pydantic_error_lists_every_field(self):
        with pytest.raises(ValidationError) as exc_info:
            _Payload.model_validate({})
        envelope = from_exception(exc_info.value)
        assert envelope.kind == ErrorKind.VALIDATION_ERROR
        assert [d.field for d in envelope.details] == ["name", "age"]
        assert "name, age" in envelope.message
        assert all(d.message == "Dit veld is verplicht" for d in envelope.details)

    def test_anything_else_is_unknown(self):
        envelope = from_exception(RuntimeError("boom"))
        assert envelope.kind == ErrorKind.UNKNOWN_ERROR
        assert "boom" not in envelope.message


class TestHelpers:

    def test_validation_error_is_api_error(self):
        exc = validation_error("Ongeldig", suggestions=["Probeer opnieuw"])
        assert isinstance(exc, ApiError)
        assert exc.envelope.status_code == 400

    def test_field_errors_strip_location_prefix(self):
        errors = [
            {"loc": ("body", "answers", "personalia"), "msg": "Field required", "type": "missing"},
            {"loc": ("query", "limit"), "msg": "too small", "type": "greater_than_equal"},
        ]
        details = field_errors(errors)
        assert [d.field for d in details] == ["answers.personalia", "limit"]
        assert details[1].message == "too small"

    def test_error_body(self):
        body = error_body(build_error(ErrorKind.NOT_FOUND, "Weg"))
        assert body["success"] is False
        assert body["error"]["kind"] == "NOT_FOUND"
        assert body["error"]["recoverable"] is True
        assert isinstance(body["error"]["timestamp"], str)
