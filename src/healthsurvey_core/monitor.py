"""AvailabilityMonitor — polls the classifier's status endpoint.

Lifecycle::

    monitor = AvailabilityMonitor(http)      # state: checking
    await monitor.activate()                 # probe now, then every 5 s
    ...                                      # state flips online/offline
    await monitor.deactivate()               # timer cancelled, state frozen

Every probe outcome is reflected in ``state``; a failed probe is never
raised to the caller.  Polling keeps running whatever the current state so
that recovery (and renewed outages) are always picked up.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

from healthsurvey_core.constants import ONLINE_STATUS, POLL_INTERVAL_SECONDS, STATUS_PATH
from healthsurvey_core.errors import AvailabilityError
from healthsurvey_core.models.state import AvailabilityState

logger = logging.getLogger(__name__)

StateListener = Callable[[AvailabilityState], None]


class AvailabilityMonitor:
    """Tracks whether the remote classifier currently accepts submissions.

    Args:
        http: client whose ``base_url`` points at the classifier
        interval: seconds between probes while active
        on_change: optional callback invoked with the new state on each
            transition; exceptions it raises are logged, never propagated
        sleep: awaitable used to wait between probes (injectable for tests)
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        interval: float = POLL_INTERVAL_SECONDS,
        on_change: StateListener | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._http = http
        self._interval = interval
        self._on_change = on_change
        self._sleep = sleep
        self._state = AvailabilityState.CHECKING
        self._task: asyncio.Task | None = None
        self._closed = False
        self.last_error: str | None = None

    @property
    def state(self) -> AvailabilityState:
        return self._state

    @property
    def is_online(self) -> bool:
        return self._state is AvailabilityState.ONLINE

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    # ==================================================================
    # Lifecycle
    # ==================================================================

    async def activate(self) -> None:
        """Probe immediately, then keep polling in a background task."""
        if self._closed:
            raise RuntimeError("AvailabilityMonitor has been deactivated")
        if self.active:
            return
        await self.probe()
        self._task = asyncio.get_running_loop().create_task(self._poll_loop())
        logger.info("Availability polling started (every %.1fs)", self._interval)

    async def deactivate(self) -> None:
        """Cancel the pending probe/timer.  No transitions happen afterwards."""
        self._closed = True
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Availability polling stopped")

    async def __aenter__(self) -> AvailabilityMonitor:
        await self.activate()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.deactivate()

    # ==================================================================
    # Probing
    # ==================================================================

    async def probe(self) -> AvailabilityState:
        """Run one status probe and apply the outcome."""
        try:
            await self._fetch_status()
        except AvailabilityError as exc:
            self.last_error = str(exc)
            self._apply(AvailabilityState.OFFLINE)
        else:
            self.last_error = None
            self._apply(AvailabilityState.ONLINE)
        return self._state

    async def _fetch_status(self) -> None:
        """Raise :class:`AvailabilityError` unless the service reports online."""
        try:
            response = await self._http.get(STATUS_PATH)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise AvailabilityError(f"Status probe failed: {exc}") from exc
        except ValueError as exc:
            raise AvailabilityError("Status probe returned malformed JSON") from exc

        if not isinstance(payload, dict):
            raise AvailabilityError("Status probe returned a non-object payload")
        status = payload.get("status")
        if status != ONLINE_STATUS:
            raise AvailabilityError(f"Service reported status {status!r}")

    async def _poll_loop(self) -> None:
        # Runs until cancelled by deactivate(); no probe failure ends it.
        while True:
            await self._sleep(self._interval)
            try:
                await self.probe()
            except Exception as exc:
                logger.exception("Availability probe failed unexpectedly")
                self.last_error = f"Status probe failed: {exc!r}"
                self._apply(AvailabilityState.OFFLINE)

    def _apply(self, new_state: AvailabilityState) -> None:
        if self._closed:
            return
        if new_state is self._state:
            return
        previous, self._state = self._state, new_state
        if new_state is AvailabilityState.OFFLINE:
            logger.warning(
                "Prediction service %s -> %s: %s",
                previous.value, new_state.value, self.last_error,
            )
        else:
            logger.info("Prediction service %s -> %s", previous.value, new_state.value)
        if self._on_change is not None:
            try:
                self._on_change(new_state)
            except Exception:
                logger.exception("Availability listener failed on %s", new_state.value)
