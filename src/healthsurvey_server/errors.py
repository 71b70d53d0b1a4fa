"""Global exception handlers — map SDK exceptions to HTTP status codes.

Routes stay on the happy path; these handlers translate:

  - ValidationError           → 422 with the offending step and fields
  - ServiceUnavailableError   → 503 (classifier not online)
  - SubmissionInProgressError → 409
  - SessionClosedError        → 410
  - other ValueError          → 404 / 409 / 400 by message keyword
  - KeyError                  → 404
  - anything else             → 500
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from healthsurvey_core.errors import (
    ServiceUnavailableError,
    SessionClosedError,
    SubmissionInProgressError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# --- Keyword patterns in ValueError messages and their HTTP status codes ---
# Checked in order; first match wins.
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    ("already exists", 409),
    ("not found", 404),
]

# --- Client-safe messages keyed by HTTP status code ---
_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Resource already exists",
    400: "Invalid request",
}


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Report which step is incomplete and why, so the form can highlight it."""
    logger.info("Validation failed at %s: %s", request.url, exc)
    return JSONResponse(
        status_code=422,
        content={
            "detail": str(exc),
            "step": exc.step,
            "step_id": exc.step_id,
            "errors": exc.errors,
        },
    )


async def service_unavailable_handler(
    request: Request, exc: ServiceUnavailableError,
) -> JSONResponse:
    logger.info("Submission rejected at %s: %s", request.url, exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


async def submission_in_progress_handler(
    request: Request, exc: SubmissionInProgressError,
) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


async def session_closed_handler(request: Request, exc: SessionClosedError) -> JSONResponse:
    return JSONResponse(status_code=410, content={"detail": "Session is closed"})


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map ``ValueError`` to 404 / 409 / 400 by message keyword.

    The raw message is logged server-side but never sent to the client.
    """
    msg = str(exc)
    status = 400  # default
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    safe_detail = _SAFE_MESSAGES.get(status, "Invalid request")
    return JSONResponse(status_code=status, content={"detail": safe_detail})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (e.g. unknown field or group) to 404."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
