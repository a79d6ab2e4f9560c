"""
DCSPH diagnosis code routes.

GOVERNANCE:
- Validation against the static DCSPH tables only
- Suggestions are rule-based and subject to therapist review
"""

from typing import Any, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from api.models.diagnosis import (
    CodeDetails,
    CodeValidation,
    SuggestCodesRequest,
    SuggestedCode,
    ValidateCodeRequest,
)
from clinical.code_validator import (
    get_code_details,
    is_well_formed,
    knowledge_base_stats,
    search_by_description,
    suggest_codes,
    validate_code,
    validate_codes,
)
from clinical.errors import not_found, validation_error

router = APIRouter(prefix="/v1", tags=["diagnosis-codes"])

SEARCH_LIMIT = 20


class SingleValidationResponse(BaseModel):
    success: bool = True
    code: Any
    validation: CodeValidation


class BatchValidationResponse(BaseModel):
    success: bool = True
    code_count: int
    validations: list[CodeValidation]


class CodeLookupResponse(BaseModel):
    success: bool = True
    validation: CodeValidation
    details: CodeDetails


class SearchResponse(BaseModel):
    success: bool = True
    query: str
    results: list[CodeDetails]


class SuggestResponse(BaseModel):
    success: bool = True
    suggestions: list[SuggestedCode]
    needs_clarification: bool
    confidence: float
    clarifying_question: Optional[str] = None


@router.post(
    "/validate-code",
    response_model=SingleValidationResponse | BatchValidationResponse,
)
def validate_diagnosis_code(request: ValidateCodeRequest):
    """
    Validate one code (`code`) or a batch (`codes`).

    `code` takes precedence; an empty `code` counts as absent.

    A batch returns one verdict per input in input order, duplicates
    included.
    """
    if request.code not in (None, ""):
        return SingleValidationResponse(
            code=request.code,
            validation=CodeValidation.from_result(validate_code(request.code)),
        )

    if isinstance(request.codes, list):
        results = validate_codes(request.codes)
        return BatchValidationResponse(
            code_count=len(results),
            validations=[CodeValidation.from_result(r) for r in results],
        )

    raise validation_error(
        "Geef een code of een lijst met codes op",
        suggestions=['Gebruik {"code": "7920"} of {"codes": ["7920", "1520"]}'],
    )


@router.get("/validate-code/{code}", response_model=CodeLookupResponse)
def lookup_diagnosis_code(code: str):
    """Validate a code and return its knowledge base entry."""
    if not is_well_formed(code):
        result = validate_code(code)
        raise validation_error(result.reasons[0], suggestions=result.suggestions)

    details = get_code_details(code)
    if details is None:
        result = validate_code(code)
        raise not_found(
            f"Code {code} komt niet voor in de DCSPH tabellen",
            suggestions=result.suggestions,
        )

    return CodeLookupResponse(
        validation=CodeValidation.from_result(validate_code(code)),
        details=CodeDetails.from_entry(details),
    )


@router.get("/diagnosis-codes/search", response_model=SearchResponse)
def search_diagnosis_codes(q: str = Query(..., min_length=2, max_length=100)):
    """Search valid codes by description."""
    results = search_by_description(q)[:SEARCH_LIMIT]
    return SearchResponse(query=q, results=[CodeDetails.from_entry(e) for e in results])


@router.post("/diagnosis-codes/suggest", response_model=SuggestResponse)
def suggest_diagnosis_codes(request: SuggestCodesRequest):
    """
    Suggest codes for a free-text complaint.

    GOVERNANCE:
    - Rule-based keyword matching, no LLM
    - Returns a clarifying question instead of guessing
    """
    result = suggest_codes(request.query)
    return SuggestResponse(
        suggestions=[SuggestedCode.from_suggestion(s) for s in result.suggestions],
        needs_clarification=result.needs_clarification,
        confidence=result.confidence,
        clarifying_question=result.clarifying_question,
    )


@router.get("/diagnosis-codes/stats")
def get_knowledge_base_stats():
    """Size and coverage of the DCSPH knowledge base."""
    return {"success": True, **knowledge_base_stats()}
