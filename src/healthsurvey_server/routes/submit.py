"""Submission endpoints.

``submit`` re-validates every step, encodes the answers and posts them to
the classifier.  It is refused with 422 unless the survey is on its final
step, with 503 while the classifier is not online, and with 409 while
another submission for the same session is pending.
Transport and classifier failures are not HTTP errors here: they come back
as a ``PredictionFailure`` result.
"""

from fastapi import APIRouter, Depends

from healthsurvey_core.models.result import PredictionResult
from healthsurvey_core.pipeline import SurveyPipeline

from healthsurvey_server.dependencies import get_session

router = APIRouter(tags=["submit"])


@router.post("/sessions/{session_id}/submit")
async def submit(session: SurveyPipeline = Depends(get_session)) -> PredictionResult:
    return await session.submit()


@router.post("/sessions/{session_id}/acknowledge")
async def acknowledge(
    session: SurveyPipeline = Depends(get_session),
) -> PredictionResult | None:
    """Return the last result once and reset the answers for a new survey."""
    return session.acknowledge()
