"""Session state models — the contract between the SDK and presentation.

  - AvailabilityState: tri-state status of the remote classifier
  - SurveyState: immutable snapshot of one questionnaire session
  - PipelineView: snapshot + availability + last prediction result
"""

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from healthsurvey_core.models.result import PredictionResult


class AvailabilityState(str, enum.Enum):
    """Remote classifier availability as last observed by the monitor."""

    CHECKING = "checking"
    ONLINE = "online"
    OFFLINE = "offline"


class SurveyState(BaseModel):
    """Point-in-time view of a questionnaire session.

    ``errors`` holds the per-field failures from the most recent
    ``advance()``; it is empty after a successful advance or a retreat.
    """

    model_config = ConfigDict(frozen=True)

    step: int
    step_id: str
    step_name: str
    step_count: int
    values: dict[str, Any]
    derived: dict[str, str | None]
    symptoms: list[str]
    errors: dict[str, str] = {}


class PipelineView(BaseModel):
    """Everything the presentation layer renders for one session."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    survey: SurveyState
    availability: AvailabilityState
    submitting: bool = False
    last_result: PredictionResult | None = None
