"""Exception hierarchy for the survey SDK.

  - ValidationError: a required field is missing or malformed, or the
    survey is submitted before reaching its final step (recoverable)
  - AvailabilityError: a status probe failed; only ever reflected as
    ``offline`` by the monitor, never raised to callers
  - SubmissionError: a /predict call failed; converted into a
    ``PredictionFailure`` by the submission client
  - SubmissionRejectedError: a submission was refused before any network
    call (service not online, or another submission still in flight)
"""

from __future__ import annotations


class SurveyError(Exception):
    """Base class for all SDK errors."""


class ValidationError(SurveyError, ValueError):
    """Required fields of a step are empty or invalid.

    Args:
        step: zero-based index of the offending step
        step_id: schema id of the offending step (e.g. ``basic_info``)
        errors: field id -> human-readable reason
        message: overrides the default "incomplete" message
    """

    def __init__(
        self,
        step: int,
        step_id: str,
        errors: dict[str, str],
        message: str | None = None,
    ) -> None:
        self.step = step
        self.step_id = step_id
        self.errors = dict(errors)
        if message is None:
            fields = ", ".join(sorted(self.errors))
            message = f"Step {step_id!r} is incomplete: {fields}"
        super().__init__(message)


class AvailabilityError(SurveyError):
    """Status probe failed or reported a non-online status."""


class SubmissionError(SurveyError):
    """Prediction request failed.

    ``status_code`` is set when the service answered with a non-2xx status.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class SubmissionRejectedError(SurveyError):
    """Submission refused before any request was sent."""


class ServiceUnavailableError(SubmissionRejectedError):
    """The prediction service is not currently reported as online."""


class SubmissionInProgressError(SubmissionRejectedError):
    """Another submission is still in flight."""


class SessionClosedError(SurveyError):
    """Operation attempted on a survey session that has been closed."""
