"""
FastAPI application for the Hysio pre-intake service.

GOVERNANCE:
- All clinical decisions by licensed physiotherapists
- Red flags are surfaced, never acted on automatically
- Every failure is returned as the uniform error envelope
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import diagnosis_codes_router, drafts_router, submissions_router
from clinical.errors import (
    ApiError,
    ErrorEnvelope,
    ErrorKind,
    build_error,
    error_body,
    field_errors,
    from_exception,
)
from config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Hysio Pre-intake API",
    description="DCSPH code validation, pre-intake questionnaires and HHSB structuring",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(diagnosis_codes_router)
app.include_router(drafts_router)
app.include_router(submissions_router)


def _error_response(envelope: ErrorEnvelope) -> JSONResponse:
    return JSONResponse(status_code=envelope.status_code, content=error_body(envelope))


@app.exception_handler(ApiError)
async def handle_api_error(request: Request, exc: ApiError):
    return _error_response(exc.envelope)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    details = field_errors(exc.errors())
    envelope = build_error(
        ErrorKind.VALIDATION_ERROR,
        "Controleer de volgende velden: " + ", ".join(d.field for d in details),
        suggestions=["Vul alle verplichte velden in en probeer opnieuw"],
        details=details,
    )
    return _error_response(envelope)


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(from_exception(exc))


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "hysio_pre_intake"}


@app.get("/")
def root():
    """Root endpoint with API info."""
    return {
        "service": "Hysio Pre-intake API",
        "version": "1.0.0",
        "governance": "All clinical decisions by licensed physiotherapists",
        "endpoints": {
            "validate_code": "/v1/validate-code",
            "diagnosis_codes": "/v1/diagnosis-codes",
            "drafts": "/v1/pre-intake/drafts",
            "submit": "/v1/submit-questionnaire",
            "submissions": "/v1/submissions",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
