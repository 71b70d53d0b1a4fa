"""Typed models for the survey SDK."""

from healthsurvey_core.models.result import (
    PredictionFailure,
    PredictionResult,
    PredictionSuccess,
)
from healthsurvey_core.models.schema import (
    NumericField,
    QuestionGroup,
    StepDefinition,
    SurveySchema,
)
from healthsurvey_core.models.state import (
    AvailabilityState,
    PipelineView,
    SurveyState,
)

__all__ = [
    "AvailabilityState",
    "NumericField",
    "PipelineView",
    "PredictionFailure",
    "PredictionResult",
    "PredictionSuccess",
    "QuestionGroup",
    "StepDefinition",
    "SurveySchema",
    "SurveyState",
]
