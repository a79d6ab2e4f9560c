"""API routes."""

from api.routes.diagnosis_codes import router as diagnosis_codes_router
from api.routes.drafts import router as drafts_router
from api.routes.submissions import router as submissions_router

__all__ = ["diagnosis_codes_router", "drafts_router", "submissions_router"]
