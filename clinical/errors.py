"""
Uniform error envelope for every failure the API reports.

Builders in this module never raise: whatever goes in, an ErrorEnvelope
comes out.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Error kinds and their HTTP mapping."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


HTTP_STATUS = {
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNKNOWN_ERROR: 500,
}

RECOVERABLE = {
    ErrorKind.VALIDATION_ERROR: True,
    ErrorKind.NOT_FOUND: True,
    ErrorKind.UNKNOWN_ERROR: False,
}

UNKNOWN_MESSAGE = "Er is een onbekende fout opgetreden. Probeer het later opnieuw."


class FieldError(BaseModel):
    """One failing input field."""

    field: str
    message: str


class ErrorEnvelope(BaseModel):
    """Error payload returned under the `error` key."""

    kind: ErrorKind
    message: str
    recoverable: bool
    suggestions: list[str] = Field(default_factory=list)
    details: list[FieldError] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]


class ApiError(Exception):
    """Raised by route handlers; rendered by the app-level handler."""

    def __init__(self, envelope: ErrorEnvelope):
        super().__init__(envelope.message)
        self.envelope = envelope


def build_error(
    kind: ErrorKind,
    message: str,
    suggestions: Optional[list[str]] = None,
    details: Optional[list[FieldError]] = None,
) -> ErrorEnvelope:
    """Build an envelope; recoverability follows from the kind."""
    try:
        kind = ErrorKind(kind)
        return ErrorEnvelope(
            kind=kind,
            message=str(message),
            recoverable=RECOVERABLE[kind],
            suggestions=[str(s) for s in suggestions or []],
            details=list(details or []),
        )
    except Exception:
        logger.exception("Could not build error envelope for kind %r", kind)
        return ErrorEnvelope(
            kind=ErrorKind.UNKNOWN_ERROR,
            message=UNKNOWN_MESSAGE,
            recoverable=False,
        )


def validation_error(
    message: str,
    suggestions: Optional[list[str]] = None,
    details: Optional[list[FieldError]] = None,
) -> ApiError:
    return ApiError(build_error(ErrorKind.VALIDATION_ERROR, message, suggestions, details))


def not_found(message: str, suggestions: Optional[list[str]] = None) -> ApiError:
    return ApiError(build_error(ErrorKind.NOT_FOUND, message, suggestions))


def field_errors(errors: list[dict[str, Any]]) -> list[FieldError]:
    """
    Convert pydantic/FastAPI error dicts into FieldErrors.

    The leading "body"/"query"/"path" location segment is dropped so the
    field path matches the payload the client sent.
    """
    result = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ())]
        if location and location[0] in ("body", "query", "path"):
            location = location[1:]
        message = error.get("msg", "Ongeldige waarde")
        if error.get("type") == "missing":
            message = "Dit veld is verplicht"
        result.append(FieldError(field=".".join(location) or "body", message=message))
    return result


def from_exception(exc: BaseException) -> ErrorEnvelope:
    """Classify any exception into an envelope."""
    try:
        if isinstance(exc, ApiError):
            return exc.envelope

        if isinstance(exc, ValidationError):
            details = field_errors(exc.errors())
            return build_error(
                ErrorKind.VALIDATION_ERROR,
                "Controleer de volgende velden: "
                + ", ".join(detail.field for detail in details),
                suggestions=["Vul alle verplichte velden in en probeer opnieuw"],
                details=details,
            )

        return build_error(ErrorKind.UNKNOWN_ERROR, UNKNOWN_MESSAGE)
    except Exception:
        logger.exception("Could not classify %s", type(exc).__name__)
        return build_error(ErrorKind.UNKNOWN_ERROR, UNKNOWN_MESSAGE)


def error_body(envelope: ErrorEnvelope) -> dict:
    """JSON body for an error response."""
    return {"success": False, "error": envelope.model_dump(mode="json")}
