"""SubmissionClient — posts a feature vector to ``/predict``.

Submission is gated on the monitor currently reporting ``online``
(otherwise :class:`ServiceUnavailableError`, with nothing sent).  The
client holds no per-session state, so one instance is shared by every
session; the one-in-flight rule is enforced by each
:class:`~healthsurvey_core.pipeline.SurveyPipeline`.

Once a request is sent, every outcome becomes a :class:`PredictionResult`:
a :class:`PredictionSuccess` for a usable payload, a
:class:`PredictionFailure` for transport errors, non-2xx responses, and
malformed payloads.  Nothing is retried automatically.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from healthsurvey_core.constants import (
    ERROR_EXCERPT_CHARS,
    PREDICT_PATH,
    UNKNOWN_PREDICTION,
    UNKNOWN_PROBABILITY,
)
from healthsurvey_core.errors import (
    ServiceUnavailableError,
    SubmissionError,
)
from healthsurvey_core.models.result import (
    PredictionFailure,
    PredictionResult,
    PredictionSuccess,
)
from healthsurvey_core.monitor import AvailabilityMonitor

logger = logging.getLogger(__name__)


def parse_prediction(payload: Any) -> PredictionSuccess:
    """Build a success result from a decoded ``/predict`` body.

    Missing (or null) fields fall back to sentinels; present fields of the
    wrong type, or a probability outside [0, 1], raise
    :class:`SubmissionError`.
    """
    if not isinstance(payload, dict):
        raise SubmissionError("Prediction service returned a non-object payload")

    prediction = payload.get("prediction")
    if prediction is None:
        prediction = UNKNOWN_PREDICTION
    elif not isinstance(prediction, str):
        raise SubmissionError(f"Malformed prediction label: {prediction!r}")

    probability = payload.get("probability")
    if probability is None:
        probability = UNKNOWN_PROBABILITY
    elif isinstance(probability, bool) or not isinstance(probability, (int, float)):
        raise SubmissionError(f"Malformed probability: {probability!r}")
    elif not 0 <= probability <= 1:
        raise SubmissionError(f"Probability out of range: {probability!r}")

    return PredictionSuccess(prediction=prediction, probability=float(probability))


class SubmissionClient:
    """Sends feature vectors to the remote classifier.

    Args:
        http: client whose ``base_url`` points at the classifier
        monitor: availability monitor consulted before every submission
    """

    def __init__(self, http: httpx.AsyncClient, monitor: AvailabilityMonitor) -> None:
        self._http = http
        self._monitor = monitor

    async def submit(self, vector: dict[str, int]) -> PredictionResult:
        """Post *vector* and return the interpreted result.

        Raises :class:`ServiceUnavailableError` without sending anything
        when the monitor is not online.
        """
        if not self._monitor.is_online:
            raise ServiceUnavailableError(
                f"Prediction service is {self._monitor.state.value}; submission disabled"
            )

        try:
            result = await self._post(vector)
        except SubmissionError as exc:
            logger.warning("Submission failed: %s", exc)
            return PredictionFailure(detail=str(exc), status_code=exc.status_code)

        logger.info(
            "Prediction received: %s (p=%.3f)", result.prediction, result.probability,
        )
        return result

    async def _post(self, vector: dict[str, int]) -> PredictionSuccess:
        try:
            response = await self._http.post(PREDICT_PATH, json=vector)
        except httpx.HTTPError as exc:
            raise SubmissionError(f"Could not reach prediction service: {exc}") from exc

        if not response.is_success:
            excerpt = response.text[:ERROR_EXCERPT_CHARS]
            raise SubmissionError(
                f"Prediction service returned HTTP {response.status_code}: {excerpt}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise SubmissionError("Prediction service returned malformed JSON") from exc
        return parse_prediction(payload)
