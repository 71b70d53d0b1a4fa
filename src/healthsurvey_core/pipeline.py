"""SurveyPipeline — one questionnaire session from first edit to prediction.

Wraps an :class:`AnswerStateController` and adds the final submission:

    edits ──► controller (derived buckets recomputed synchronously)
    advance ─► per-step validation
    submit ──► validate all steps ─► encode ─► SubmissionClient (gated on
               the monitor being online) ─► PredictionResult

The monitor and submission client are shared resources; a pipeline only
borrows them.  The one-submission-in-flight rule is per pipeline.  ``open_survey()`` builds the whole stack for standalone use
and owns its teardown.

Usage::

    async with open_survey("http://classifier:8000") as survey:
        survey.set_field("age", "40+")
        ...
        survey.advance()
        result = await survey.submit()
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import httpx

from healthsurvey_core.client import SubmissionClient
from healthsurvey_core.constants import POLL_INTERVAL_SECONDS, REQUEST_TIMEOUT_SECONDS
from healthsurvey_core.controller import AnswerStateController
from healthsurvey_core.encoder import FeatureVectorEncoder
from healthsurvey_core.errors import (
    SessionClosedError,
    SubmissionInProgressError,
    ValidationError,
)
from healthsurvey_core.models.result import PredictionResult
from healthsurvey_core.models.state import PipelineView
from healthsurvey_core.monitor import AvailabilityMonitor
from healthsurvey_core.schema import SchemaStore

logger = logging.getLogger(__name__)


class SurveyPipeline:
    """Orchestrates one questionnaire session.

    Args:
        store: the loaded :class:`SchemaStore`
        monitor: shared availability monitor
        client: shared submission client
        session_id: identifier for logging and presentation; random if omitted
    """

    def __init__(
        self,
        store: SchemaStore,
        monitor: AvailabilityMonitor,
        client: SubmissionClient,
        *,
        session_id: str | None = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self._store = store
        self._monitor = monitor
        self._client = client
        self._controller = AnswerStateController(store)
        self._encoder = FeatureVectorEncoder(store)
        self._closed = False
        self._submitting = False
        self.last_result: PredictionResult | None = None

    @property
    def controller(self) -> AnswerStateController:
        return self._controller

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def submitting(self) -> bool:
        return self._submitting

    @property
    def can_submit(self) -> bool:
        """Whether the presentation should enable the final submit action."""
        return (
            not self._closed
            and not self._submitting
            and self._monitor.is_online
            and self._controller.is_final_step
        )

    def state(self) -> PipelineView:
        return PipelineView(
            session_id=self.session_id,
            survey=self._controller.snapshot(),
            availability=self._monitor.state,
            submitting=self._submitting,
            last_result=self.last_result,
        )

    # ==================================================================
    # Answer editing — proxied to the controller
    # ==================================================================

    def set_field(self, group: str, value: Any) -> None:
        self._ensure_open()
        self._controller.set_field(group, value)

    def toggle_symptom(self, name: str, included: bool) -> None:
        self._ensure_open()
        self._controller.toggle_symptom(name, included)

    def advance(self) -> int:
        self._ensure_open()
        return self._controller.advance()

    def retreat(self) -> int:
        self._ensure_open()
        return self._controller.retreat()

    def reset(self) -> None:
        self._ensure_open()
        self._controller.reset()
        self.last_result = None

    # ==================================================================
    # Submission
    # ==================================================================

    def build_vector(self) -> dict[str, int]:
        """Validate every step and encode the current answers."""
        self._controller.validate_all()
        return self._encoder.encode(self._controller.answers, self._controller.symptoms)

    async def submit(self) -> PredictionResult:
        """Re-validate, encode and submit the answers.

        Checked in order, each without any network call:

          1. ``ValidationError`` if any step is incomplete
          2. ``ValidationError`` if the survey is not on its final step
          3. ``SubmissionInProgressError`` if this session already has a
             submission pending (other sessions are unaffected)
          4. ``ServiceUnavailableError`` from the client when the service
             is not online

        If the session is closed while the request is in flight, the
        result is returned but not kept as ``last_result``.
        """
        self._ensure_open()
        vector = self.build_vector()

        if not self._controller.is_final_step:
            step = self._controller.step
            raise ValidationError(
                step,
                self._store.step(step).id,
                {"step": "submission is only available from the final step"},
                message="Submission is only available from the final step",
            )
        if self._submitting:
            raise SubmissionInProgressError(
                f"Session {self.session_id} already has a submission in flight"
            )

        self._submitting = True
        try:
            result = await self._client.submit(vector)
        finally:
            self._submitting = False

        if self._closed:
            logger.info("Session %s closed during submission; result discarded", self.session_id)
            return result
        self.last_result = result
        return result

    def acknowledge(self) -> PredictionResult | None:
        """Hand the last result to the caller once and start a fresh survey."""
        self._ensure_open()
        result, self.last_result = self.last_result, None
        if result is not None:
            self._controller.reset()
        return result

    def close(self) -> None:
        """End the session.  Answers are discarded; later calls raise."""
        if self._closed:
            return
        self._closed = True
        self._controller.reset()
        self.last_result = None
        logger.info("Session %s closed", self.session_id)

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError(f"Session {self.session_id} is closed")


# ======================================================================
# Standalone stack
# ======================================================================


@asynccontextmanager
async def open_survey(
    endpoint: str,
    *,
    store: SchemaStore | None = None,
    interval: float = POLL_INTERVAL_SECONDS,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[SurveyPipeline]:
    """Build client, monitor and pipeline; tear them down on exit.

    The monitor is activated on entry (one probe before the body runs)
    and deactivated on exit, before the HTTP client is closed.
    """
    if store is None:
        store = SchemaStore.default()

    async with httpx.AsyncClient(
        base_url=endpoint, timeout=timeout, transport=transport,
    ) as http:
        monitor = AvailabilityMonitor(http, interval=interval)
        client = SubmissionClient(http, monitor)
        pipeline = SurveyPipeline(store, monitor, client)
        await monitor.activate()
        try:
            yield pipeline
        finally:
            pipeline.close()
            await monitor.deactivate()
