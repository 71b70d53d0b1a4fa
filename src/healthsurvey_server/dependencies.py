"""FastAPI dependency injection — provides the registry, store, and monitor.

All three are created once in the lifespan handler and stashed on
``app.state``.
"""

from fastapi import Request

from healthsurvey_core.monitor import AvailabilityMonitor
from healthsurvey_core.pipeline import SurveyPipeline
from healthsurvey_core.schema import SchemaStore

from healthsurvey_server.registry import SessionRegistry


def get_registry(request: Request) -> SessionRegistry:
    """Return the session registry singleton from ``app.state``."""
    return request.app.state.registry


def get_store(request: Request) -> SchemaStore:
    """Return the SchemaStore singleton from ``app.state``."""
    return request.app.state.store


def get_monitor(request: Request) -> AvailabilityMonitor:
    """Return the shared AvailabilityMonitor from ``app.state``."""
    return request.app.state.monitor


def get_session(session_id: str, request: Request) -> SurveyPipeline:
    """Resolve the ``{session_id}`` path parameter to an open session."""
    return get_registry(request).get(session_id)
