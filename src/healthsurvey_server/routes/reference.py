"""Reference endpoints — schema table and classifier availability."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from healthsurvey_core.models.schema import SurveySchema
from healthsurvey_core.models.state import AvailabilityState
from healthsurvey_core.monitor import AvailabilityMonitor
from healthsurvey_core.schema import SchemaStore

from healthsurvey_server.dependencies import get_monitor, get_store

router = APIRouter(tags=["reference"])


class AvailabilityResponse(BaseModel):
    status: AvailabilityState
    detail: str | None = None


@router.get("/reference/schema")
async def get_schema(store: SchemaStore = Depends(get_store)) -> SurveySchema:
    """Groups, labels, symptoms, and step layout for rendering the form."""
    return store.schema


@router.get("/availability")
async def get_availability(
    monitor: AvailabilityMonitor = Depends(get_monitor),
) -> AvailabilityResponse:
    """Last observed classifier status (``checking``/``online``/``offline``)."""
    return AvailabilityResponse(status=monitor.state, detail=monitor.last_error)
