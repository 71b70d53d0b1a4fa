"""In-memory registry of open survey sessions.

Each session is a :class:`SurveyPipeline` sharing the server-wide schema,
monitor, and submission client.  Removing a session closes it, which
discards its answers; a submission still in flight for it completes but its
result is not kept.

Sessions abandoned without a ``DELETE`` expire after ``ttl_seconds`` of
inactivity.  Every lookup counts as activity; idle sessions are swept
whenever a session is created or looked up.  ``ttl_seconds=0`` disables
expiry.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from healthsurvey_core.client import SubmissionClient
from healthsurvey_core.monitor import AvailabilityMonitor
from healthsurvey_core.pipeline import SurveyPipeline
from healthsurvey_core.schema import SchemaStore

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Creates, looks up, expires, and closes survey sessions by id.

    Args:
        store: the loaded schema shared by every session
        monitor: server-wide availability monitor
        client: stateless submission client shared by every session
        ttl_seconds: idle time after which a session is closed; 0 disables
        clock: monotonic time source (injectable for tests)
    """

    def __init__(
        self,
        store: SchemaStore,
        monitor: AvailabilityMonitor,
        client: SubmissionClient,
        *,
        ttl_seconds: float = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._monitor = monitor
        self._client = client
        self._ttl = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, SurveyPipeline] = {}
        self._touched: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, session_id: str | None = None) -> SurveyPipeline:
        self.evict_idle()
        if session_id is not None and session_id in self._sessions:
            raise ValueError(f"Session already exists: session_id={session_id}")
        pipeline = SurveyPipeline(
            self._store, self._monitor, self._client, session_id=session_id,
        )
        self._sessions[pipeline.session_id] = pipeline
        self._touched[pipeline.session_id] = self._clock()
        logger.info("Session %s created", pipeline.session_id)
        return pipeline

    def get(self, session_id: str) -> SurveyPipeline:
        self.evict_idle()
        pipeline = self._sessions.get(session_id)
        if pipeline is None:
            raise ValueError(f"Session not found: session_id={session_id}")
        self._touched[session_id] = self._clock()
        return pipeline

    def close(self, session_id: str) -> None:
        pipeline = self._sessions.pop(session_id, None)
        if pipeline is None:
            raise ValueError(f"Session not found: session_id={session_id}")
        self._touched.pop(session_id, None)
        pipeline.close()

    def close_all(self) -> None:
        for pipeline in self._sessions.values():
            pipeline.close()
        self._sessions.clear()
        self._touched.clear()

    def evict_idle(self) -> int:
        """Close sessions idle for longer than the TTL; return how many.

        A session with a submission in flight is never evicted.
        """
        if self._ttl <= 0:
            return 0
        cutoff = self._clock() - self._ttl
        expired = [
            session_id
            for session_id, touched in self._touched.items()
            if touched < cutoff and not self._sessions[session_id].submitting
        ]
        for session_id in expired:
            self._touched.pop(session_id)
            self._sessions.pop(session_id).close()
        if expired:
            logger.info(
                "Evicted %d idle session(s) (ttl=%.0fs)", len(expired), self._ttl,
            )
        return len(expired)
