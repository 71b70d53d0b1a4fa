"""healthsurvey_server — FastAPI REST API for the health survey SDK.

Exposes survey sessions as an HTTP API: answer editing, step navigation,
availability status, and availability-gated prediction submission.
"""
