"""Answer and navigation endpoints.

Edits are accepted verbatim; validation only happens on ``advance`` (and
again at submission).  A blocked advance returns 422 with the per-field
errors and leaves the step unchanged.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from healthsurvey_core.models.state import PipelineView
from healthsurvey_core.pipeline import SurveyPipeline

from healthsurvey_server.dependencies import get_session

router = APIRouter(tags=["steps"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class SetFieldRequest(BaseModel):
    """Body for PUT /sessions/{session_id}/fields/{group}."""
    value: Any = None


class ToggleSymptomRequest(BaseModel):
    """Body for PUT /sessions/{session_id}/symptoms/{name}."""
    included: bool


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.put("/sessions/{session_id}/fields/{group}")
async def set_field(
    group: str,
    body: SetFieldRequest,
    session: SurveyPipeline = Depends(get_session),
) -> PipelineView:
    """Store a field value.  404 for unknown fields, 400 for derived ones."""
    session.set_field(group, body.value)
    return session.state()


@router.put("/sessions/{session_id}/symptoms/{name}")
async def toggle_symptom(
    name: str,
    body: ToggleSymptomRequest,
    session: SurveyPipeline = Depends(get_session),
) -> PipelineView:
    session.toggle_symptom(name, body.included)
    return session.state()


@router.post("/sessions/{session_id}/advance")
async def advance(session: SurveyPipeline = Depends(get_session)) -> PipelineView:
    """Validate the current step and move forward (422 if incomplete)."""
    session.advance()
    return session.state()


@router.post("/sessions/{session_id}/retreat")
async def retreat(session: SurveyPipeline = Depends(get_session)) -> PipelineView:
    session.retreat()
    return session.state()


@router.post("/sessions/{session_id}/reset")
async def reset(session: SurveyPipeline = Depends(get_session)) -> PipelineView:
    session.reset()
    return session.state()
