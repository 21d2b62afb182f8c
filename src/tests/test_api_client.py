# tests/test_api_client.py

from unittest.mock import Mock, patch

import pytest
import requests

from api_client import NarrativeClient
from conftest import make_facility, make_metrics
from anomaly_detection import AnomalyDetector


def fake_response(status_code=200, payload=None, text=None):
    response = Mock()
    response.status_code = status_code
    response.text = text if text is not None else ("{}" if payload is None else "x")
    response.json.return_value = payload or {}
    return response


@pytest.fixture
def client():
    return NarrativeClient("http://narrator.local/", api_key="secret", retry_delay=0)


def test_generate_returns_response_text(client):
    with patch("api_client.requests.post") as post:
        post.return_value = fake_response(payload={"response": "Compressor fouling"})
        text = client.generate("Why?", {"facility": "gosp-1"})

    assert text == "Compressor fouling"
    args, kwargs = post.call_args
    assert args[0] == "http://narrator.local/api/narrative"
    assert kwargs["json"] == {"prompt": "Why?", "context": {"facility": "gosp-1"}}
    assert kwargs["headers"]["API-KEY"] == "secret"


def test_generate_retries_failed_status(client):
    with patch("api_client.requests.post") as post:
        post.return_value = fake_response(status_code=503, text="unavailable")
        assert client.generate("Why?", {}) is None

    assert post.call_count == 3


def test_generate_recovers_after_a_failure(client):
    with patch("api_client.requests.post") as post:
        post.side_effect = [
            requests.exceptions.ConnectionError("refused"),
            fake_response(payload={"response": "ok"}),
        ]
        assert client.generate("Why?", {}) == "ok"

    assert post.call_count == 2


def test_generate_gives_up_on_request_errors(client):
    with patch("api_client.requests.post") as post:
        post.side_effect = requests.exceptions.Timeout("slow")
        assert client.generate("Why?", {}) is None

    assert post.call_count == 3


def test_empty_body_yields_none(client):
    with patch("api_client.requests.post") as post:
        post.return_value = fake_response(text="")
        assert client.generate("Why?", {}) is None


def test_missing_response_field_yields_none(client):
    with patch("api_client.requests.post") as post:
        post.return_value = fake_response(payload={"other": 1})
        assert client.generate("Why?", {}) is None


def test_no_api_key_header_without_key():
    client = NarrativeClient("http://narrator.local")
    assert "API-KEY" not in client.headers


def test_explain_anomaly_sends_serialized_context(client):
    facility = make_facility("pump-1", "pump", name="Main Pump")
    anomaly = AnomalyDetector().detect(
        make_metrics(co2_emissions=150.0), make_metrics(), facility
    )[0]

    with patch("api_client.requests.post") as post:
        post.return_value = fake_response(payload={"response": "Seal leak"})
        assert client.explain_anomaly(anomaly, facility) == "Seal leak"

    context = post.call_args.kwargs["json"]["context"]
    assert context["anomaly"]["type"] == "co2_spike"
    assert context["facility"]["category"] == "pump"
    assert isinstance(context["anomaly"]["timestamp"], str)
