"""HTTP API tests — FastAPI TestClient with a fake classifier transport.

The lifespan handler runs inside the TestClient context, so the monitor's
first probe has completed (against the fake) before any request is made.
"""

import pytest
from fastapi.testclient import TestClient

from healthsurvey_server.app import create_app
from healthsurvey_server.config import ServerSettings

from helpers.answers import VALID_STEP1, VALID_STEP2
from helpers.classifier import BASE_URL, FakeClassifier

API = "/api/v1"


def _client(fake: FakeClassifier) -> TestClient:
    settings = ServerSettings(survey_endpoint=BASE_URL, log_level="WARNING")
    return TestClient(create_app(settings, transport=fake.transport()))


@pytest.fixture
def fake():
    return FakeClassifier("online")


@pytest.fixture
def api(fake):
    with _client(fake) as client:
        yield client


def _create(api, session_id="s1") -> dict:
    resp = api.post(f"{API}/sessions", json={"session_id": session_id})
    assert resp.status_code == 201, resp.text
    return resp.json()


def _fill(api, session_id, answers):
    for field_id, value in answers.items():
        resp = api.put(f"{API}/sessions/{session_id}/fields/{field_id}", json={"value": value})
        assert resp.status_code == 200, resp.text


def _complete(api, session_id="s1"):
    _fill(api, session_id, VALID_STEP1)
    assert api.post(f"{API}/sessions/{session_id}/advance").status_code == 200
    _fill(api, session_id, VALID_STEP2)
    assert api.post(f"{API}/sessions/{session_id}/advance").status_code == 200
    resp = api.put(f"{API}/sessions/{session_id}/symptoms/Headache", json={"included": True})
    assert resp.status_code == 200


# =====================================================================
# Sessions
# =====================================================================


class TestSessions:

    def test_create_session(self, api):
        body = _create(api)
        assert body["session_id"] == "s1"
        assert body["survey"]["step"] == 0
        assert body["survey"]["step_id"] == "basic_info"
        assert body["availability"] == "online"
        assert body["last_result"] is None

    def test_generated_session_id(self, api):
        resp = api.post(f"{API}/sessions", json={})
        assert resp.status_code == 201
        assert resp.json()["session_id"]

    def test_duplicate_session_is_conflict(self, api):
        _create(api)
        assert api.post(f"{API}/sessions", json={"session_id": "s1"}).status_code == 409

    def test_unknown_session_is_not_found(self, api):
        assert api.get(f"{API}/sessions/nope").status_code == 404

    def test_close_session(self, api):
        _create(api)
        assert api.delete(f"{API}/sessions/s1").status_code == 204
        assert api.get(f"{API}/sessions/s1").status_code == 404
        assert api.delete(f"{API}/sessions/s1").status_code == 404


# =====================================================================
# Editing and navigation
# =====================================================================


class TestSteps:

    def test_numeric_edit_updates_derived(self, api):
        _create(api)
        _fill(api, "s1", {"weight": 70, "height": 175})
        resp = api.put(f"{API}/sessions/s1/fields/systolic", json={"value": "135"})
        derived = resp.json()["survey"]["derived"]
        assert derived == {"bmi": ">=18.5", "blood_pressure": ">130/80"}

    def test_unknown_field_is_not_found(self, api):
        _create(api)
        resp = api.put(f"{API}/sessions/s1/fields/blood_type", json={"value": "O+"})
        assert resp.status_code == 404

    def test_derived_field_is_bad_request(self, api):
        _create(api)
        resp = api.put(f"{API}/sessions/s1/fields/bmi", json={"value": ">=25"})
        assert resp.status_code == 400

    def test_blocked_advance_reports_fields(self, api):
        _create(api)
        _fill(api, "s1", {"age": "40+"})
        resp = api.post(f"{API}/sessions/s1/advance")
        assert resp.status_code == 422
        body = resp.json()
        assert body["step"] == 0
        assert body["step_id"] == "basic_info"
        assert "gender" in body["errors"]
        assert "age" not in body["errors"]

        state = api.get(f"{API}/sessions/s1").json()
        assert state["survey"]["step"] == 0
        assert "gender" in state["survey"]["errors"]

    def test_advance_and_retreat(self, api):
        _create(api)
        _fill(api, "s1", VALID_STEP1)
        assert api.post(f"{API}/sessions/s1/advance").json()["survey"]["step"] == 1
        assert api.post(f"{API}/sessions/s1/retreat").json()["survey"]["step"] == 0
        assert api.post(f"{API}/sessions/s1/retreat").json()["survey"]["step"] == 0

    def test_reset(self, api):
        _create(api)
        _complete(api)
        body = api.post(f"{API}/sessions/s1/reset").json()
        assert body["survey"]["step"] == 0
        assert body["survey"]["values"] == {}


# =====================================================================
# Submission
# =====================================================================


class TestSubmit:

    def test_submit_and_acknowledge(self, api, fake):
        _create(api)
        _complete(api)
        resp = api.post(f"{API}/sessions/s1/submit")
        assert resp.status_code == 200, resp.text
        assert resp.json() == {
            "type": "prediction",
            "prediction": "Chronic kidney disease",
            "probability": 0.82,
        }
        assert fake.last_vector()["Headache"] == 1

        state = api.get(f"{API}/sessions/s1").json()
        assert state["last_result"]["type"] == "prediction"

        ack = api.post(f"{API}/sessions/s1/acknowledge")
        assert ack.json()["prediction"] == "Chronic kidney disease"
        state = api.get(f"{API}/sessions/s1").json()
        assert state["last_result"] is None
        assert state["survey"]["step"] == 0

    def test_submission_failure_is_a_result(self, api, fake):
        fake.predict_status = 500
        fake.predict_text = "internal error"
        _create(api)
        _complete(api)
        resp = api.post(f"{API}/sessions/s1/submit")
        assert resp.status_code == 200
        body = resp.json()
        assert body["type"] == "error"
        assert body["status_code"] == 500

    def test_incomplete_submission_is_rejected(self, api, fake):
        _create(api)
        resp = api.post(f"{API}/sessions/s1/submit")
        assert resp.status_code == 422
        assert fake.predict_calls == 0

    def test_submission_before_final_step_is_rejected(self, api, fake):
        _create(api)
        _fill(api, "s1", {**VALID_STEP1, **VALID_STEP2})
        resp = api.post(f"{API}/sessions/s1/submit")
        assert resp.status_code == 422
        assert resp.json()["step_id"] == "basic_info"
        assert "final step" in resp.json()["detail"]
        assert fake.predict_calls == 0

    def test_sessions_submit_one_after_another(self, api, fake):
        for session_id in ("a", "b"):
            _create(api, session_id)
            _complete(api, session_id)
        assert api.post(f"{API}/sessions/a/submit").json()["type"] == "prediction"
        assert api.post(f"{API}/sessions/b/submit").json()["type"] == "prediction"
        assert fake.predict_calls == 2

    def test_submission_rejected_while_offline(self):
        fake = FakeClassifier(status=None)
        with _client(fake) as api:
            assert api.get(f"{API}/availability").json()["status"] == "offline"
            _create(api)
            _complete(api)
            resp = api.post(f"{API}/sessions/s1/submit")
        assert resp.status_code == 503
        assert fake.predict_calls == 0


# =====================================================================
# Reference / health
# =====================================================================


def test_availability(api):
    assert api.get(f"{API}/availability").json() == {"status": "online", "detail": None}


def test_schema_reference(api):
    body = api.get(f"{API}/reference/schema").json()
    assert [s["id"] for s in body["steps"]] == ["basic_info", "quantities", "symptoms"]
    assert "Headache" in body["symptoms"]


def test_health(api):
    assert api.get("/health").json() == {"status": "ok", "classifier": "online"}
