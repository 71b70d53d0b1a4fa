"""SubmissionClient tests — gating, payload parsing, failure descriptors."""

import asyncio

import pydantic
import pytest

from healthsurvey_core.client import SubmissionClient, parse_prediction
from healthsurvey_core.constants import ERROR_EXCERPT_CHARS
from healthsurvey_core.errors import (
    ServiceUnavailableError,
    SubmissionError,
)
from healthsurvey_core.models.result import PredictionFailure, PredictionSuccess
from healthsurvey_core.monitor import AvailabilityMonitor

from helpers.classifier import FakeClassifier

VECTOR = {"40+": 1, "Male": 1, "Female": 0, "Headache": 1}


async def _online_client(http) -> SubmissionClient:
    monitor = AvailabilityMonitor(http)
    await monitor.probe()
    return SubmissionClient(http, monitor)


# =====================================================================
# Gating
# =====================================================================


class TestGating:

    @pytest.mark.asyncio
    async def test_rejected_while_checking(self):
        fake = FakeClassifier("online")
        async with fake.client() as http:
            client = SubmissionClient(http, AvailabilityMonitor(http))
            with pytest.raises(ServiceUnavailableError, match="checking"):
                await client.submit(VECTOR)
        assert fake.predict_calls == 0

    @pytest.mark.asyncio
    async def test_rejected_while_offline(self):
        fake = FakeClassifier(status=None)
        async with fake.client() as http:
            monitor = AvailabilityMonitor(http)
            await monitor.probe()
            client = SubmissionClient(http, monitor)
            with pytest.raises(ServiceUnavailableError, match="offline"):
                await client.submit(VECTOR)
        assert fake.predict_calls == 0, "No network call may be made while offline"

    @pytest.mark.asyncio
    async def test_shared_client_allows_concurrent_submissions(self):
        """The client keeps no in-flight state; the per-session gate lives in the pipeline."""
        fake = FakeClassifier("online")
        fake.predict_gate = asyncio.Event()
        async with fake.client() as http:
            client = await _online_client(http)
            first = asyncio.create_task(client.submit(VECTOR))
            second = asyncio.create_task(client.submit(VECTOR))
            for _ in range(50):
                if fake.predict_calls == 2:
                    break
                await asyncio.sleep(0)
            assert fake.predict_calls == 2

            fake.predict_gate.set()
            results = await asyncio.gather(first, second)

        assert all(isinstance(r, PredictionSuccess) for r in results)

    @pytest.mark.asyncio
    async def test_usable_again_after_failure(self):
        fake = FakeClassifier("online")
        fake.predict_error = True
        async with fake.client() as http:
            client = await _online_client(http)
            assert isinstance(await client.submit(VECTOR), PredictionFailure)
            fake.predict_error = False
            assert isinstance(await client.submit(VECTOR), PredictionSuccess)


# =====================================================================
# Request and response handling
# =====================================================================


class TestSubmit:

    @pytest.mark.asyncio
    async def test_posts_vector_as_json_body(self):
        fake = FakeClassifier("online")
        async with fake.client() as http:
            client = await _online_client(http)
            result = await client.submit(VECTOR)

        request = fake.predict_requests[0]
        assert request.method == "POST"
        assert request.headers["content-type"] == "application/json"
        assert fake.last_vector() == VECTOR
        assert result == PredictionSuccess(prediction="Chronic kidney disease", probability=0.82)

    @pytest.mark.asyncio
    async def test_partial_payload_uses_sentinels(self):
        fake = FakeClassifier("online")
        fake.predict_json = {}
        async with fake.client() as http:
            client = await _online_client(http)
            result = await client.submit(VECTOR)
        assert result == PredictionSuccess(prediction="Unknown Disease", probability=0.0)

    @pytest.mark.asyncio
    async def test_non_2xx_carries_status_and_truncated_excerpt(self):
        fake = FakeClassifier("online")
        fake.predict_status = 500
        fake.predict_text = "x" * (ERROR_EXCERPT_CHARS * 3)
        async with fake.client() as http:
            client = await _online_client(http)
            result = await client.submit(VECTOR)

        assert isinstance(result, PredictionFailure)
        assert result.status_code == 500
        assert "HTTP 500" in result.detail
        assert "x" * ERROR_EXCERPT_CHARS in result.detail
        assert "x" * (ERROR_EXCERPT_CHARS + 1) not in result.detail

    @pytest.mark.asyncio
    async def test_network_failure_becomes_failure_result(self):
        fake = FakeClassifier("online")
        fake.predict_error = True
        async with fake.client() as http:
            client = await _online_client(http)
            result = await client.submit(VECTOR)
        assert isinstance(result, PredictionFailure)
        assert result.status_code is None
        assert "Could not reach" in result.detail

    @pytest.mark.asyncio
    async def test_non_json_success_body(self):
        fake = FakeClassifier("online")
        fake.predict_text = "OK"
        async with fake.client() as http:
            client = await _online_client(http)
            result = await client.submit(VECTOR)
        assert isinstance(result, PredictionFailure)
        assert "malformed" in result.detail

    @pytest.mark.asyncio
    async def test_failures_are_not_retried(self):
        fake = FakeClassifier("online")
        fake.predict_status = 502
        fake.predict_text = "bad gateway"
        async with fake.client() as http:
            client = await _online_client(http)
            await client.submit(VECTOR)
        assert fake.predict_calls == 1


# =====================================================================
# parse_prediction
# =====================================================================


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"prediction": "Gout", "probability": 1}, ("Gout", 1.0)),
        ({"prediction": "Gout", "probability": 0}, ("Gout", 0.0)),
        ({"prediction": None, "probability": None}, ("Unknown Disease", 0.0)),
        ({"probability": 0.4}, ("Unknown Disease", 0.4)),
        ({"prediction": "Gout"}, ("Gout", 0.0)),
    ],
)
def test_parse_prediction_accepts(payload, expected):
    result = parse_prediction(payload)
    assert (result.prediction, result.probability) == expected


@pytest.mark.parametrize(
    "payload",
    [
        [],
        "Gout",
        {"prediction": 42, "probability": 0.5},
        {"prediction": "Gout", "probability": "high"},
        {"prediction": "Gout", "probability": True},
        {"prediction": "Gout", "probability": 1.5},
        {"prediction": "Gout", "probability": -0.1},
    ],
)
def test_parse_prediction_rejects_malformed(payload):
    with pytest.raises(SubmissionError):
        parse_prediction(payload)


def test_results_are_immutable():
    result = PredictionSuccess(prediction="Gout", probability=0.5)
    with pytest.raises(pydantic.ValidationError):
        result.probability = 0.9
