"""Prediction result models.

A submission ends in exactly one of two immutable shapes:

  - PredictionSuccess: the classifier's label and probability
  - PredictionFailure: a human-readable cause, plus the HTTP status when
    the service answered with a non-2xx response

The ``PredictionResult`` union covers both so callers can dispatch on ``type``.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PredictionSuccess(BaseModel):
    """Classifier answered with a (possibly partially populated) prediction."""

    model_config = ConfigDict(frozen=True)

    type: Literal["prediction"] = "prediction"
    prediction: str
    probability: float = Field(ge=0.0, le=1.0)


class PredictionFailure(BaseModel):
    """Submission failed; ``detail`` is safe to show to the user."""

    model_config = ConfigDict(frozen=True)

    type: Literal["error"] = "error"
    detail: str
    status_code: int | None = None


PredictionResult = PredictionSuccess | PredictionFailure
