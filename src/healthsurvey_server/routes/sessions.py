"""Session management endpoints — create, get, close sessions.

A session lives in memory for as long as its questionnaire view is open.
Closing it discards the answers.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from healthsurvey_core.models.state import PipelineView
from healthsurvey_core.pipeline import SurveyPipeline

from healthsurvey_server.dependencies import get_registry, get_session
from healthsurvey_server.registry import SessionRegistry

router = APIRouter(tags=["sessions"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class CreateSessionRequest(BaseModel):
    """Body for POST /sessions.  ``session_id`` is generated when omitted."""
    session_id: str | None = None


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/sessions", status_code=201)
async def create_session(
    body: CreateSessionRequest,
    registry: SessionRegistry = Depends(get_registry),
) -> PipelineView:
    """Open a new survey session at the first step.

    Raises 409 if ``session_id`` is already in use.
    """
    return registry.create(body.session_id).state()


@router.get("/sessions/{session_id}")
async def get_session_state(
    session: SurveyPipeline = Depends(get_session),
) -> PipelineView:
    """Current step, answers, field errors, availability, and last result."""
    return session.state()


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_registry),
) -> None:
    """Close the session.  Returns 404 if it does not exist."""
    registry.close(session_id)
