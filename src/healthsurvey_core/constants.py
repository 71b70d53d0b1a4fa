"""Survey constants shared across the SDK.

These values are referenced by the controller, monitor, and submission
client.  Several can be overridden via environment variables so that
deployments can tune polling and error reporting without code changes.
"""

import os

# Seconds between availability probes while a monitor is active.
# Overridable via SURVEY_POLL_INTERVAL env var.
POLL_INTERVAL_SECONDS = float(os.getenv("SURVEY_POLL_INTERVAL", "5"))

# Per-request timeout (seconds) for the remote classifier.
# Overridable via SURVEY_REQUEST_TIMEOUT env var.
REQUEST_TIMEOUT_SECONDS = float(os.getenv("SURVEY_REQUEST_TIMEOUT", "10"))

# Max characters of a non-2xx response body carried in a failure descriptor.
# Overridable via SURVEY_ERROR_EXCERPT_CHARS env var.
ERROR_EXCERPT_CHARS = int(os.getenv("SURVEY_ERROR_EXCERPT_CHARS", "200"))

# Remote endpoint paths (relative to the configured base URL).
STATUS_PATH = "/api/status"
PREDICT_PATH = "/predict"

# Value the status endpoint reports when the classifier accepts submissions.
ONLINE_STATUS = "online"

# Sentinels for a partially-populated success payload.
UNKNOWN_PREDICTION = "Unknown Disease"
UNKNOWN_PROBABILITY = 0.0

# Raw numeric inputs and the derived groups that depend on them.
DERIVED_INPUTS: dict[str, tuple[str, ...]] = {
    "bmi": ("weight", "height"),
    "blood_pressure": ("systolic",),
}

# Bundled schema table (relative to the package directory).
DEFAULT_SCHEMA_FILE = "data/survey_v1.yaml"
