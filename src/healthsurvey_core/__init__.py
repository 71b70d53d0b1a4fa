"""healthsurvey_core — multi-step health survey SDK.

Public API:
    SurveyPipeline         — one questionnaire session, edits through submission
    open_survey            — async context manager building the full stack
    AnswerStateController  — answer state + step pointer with validation
    FeatureVectorEncoder   — closed-schema one-hot encoder
    AvailabilityMonitor    — polls the classifier status endpoint
    SubmissionClient       — posts feature vectors to /predict
    SchemaStore            — loads the survey schema table

Derived fields:
    bmi_bucket, blood_pressure_bucket, compute_derived

Models:
    AvailabilityState, SurveyState, PipelineView,
    PredictionResult, PredictionSuccess, PredictionFailure
"""

from healthsurvey_core.client import SubmissionClient
from healthsurvey_core.controller import AnswerStateController
from healthsurvey_core.derived import blood_pressure_bucket, bmi_bucket, compute_derived
from healthsurvey_core.encoder import FeatureVectorEncoder
from healthsurvey_core.errors import (
    AvailabilityError,
    ServiceUnavailableError,
    SessionClosedError,
    SubmissionError,
    SubmissionInProgressError,
    SubmissionRejectedError,
    SurveyError,
    ValidationError,
)
from healthsurvey_core.models import (
    AvailabilityState,
    PipelineView,
    PredictionFailure,
    PredictionResult,
    PredictionSuccess,
    SurveyState,
)
from healthsurvey_core.monitor import AvailabilityMonitor
from healthsurvey_core.pipeline import SurveyPipeline, open_survey
from healthsurvey_core.schema import SchemaStore

__all__ = [
    # Orchestration
    "SurveyPipeline",
    "open_survey",
    # Components
    "AnswerStateController",
    "AvailabilityMonitor",
    "FeatureVectorEncoder",
    "SchemaStore",
    "SubmissionClient",
    # Derived fields
    "blood_pressure_bucket",
    "bmi_bucket",
    "compute_derived",
    # Models
    "AvailabilityState",
    "PipelineView",
    "PredictionFailure",
    "PredictionResult",
    "PredictionSuccess",
    "SurveyState",
    # Errors
    "AvailabilityError",
    "ServiceUnavailableError",
    "SessionClosedError",
    "SubmissionError",
    "SubmissionInProgressError",
    "SubmissionRejectedError",
    "SurveyError",
    "ValidationError",
]
