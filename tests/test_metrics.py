"""
Tests for Prometheus metrics.

Tests cover:
- ConvertMetrics counters on a private registry
- /metrics exposition after real requests
- Outcome counts per request result (delivered, rejected, failed)
- send_failed when the client connection drops mid-stream
"""
from __future__ import annotations

import asyncio
import re

import pytest

from tts_convert.api.routes import ArtifactResponse
from tts_convert.core.metrics import OUTCOMES, ConvertMetrics, metrics
from tts_convert.tts.provider import BaseSpeechProvider
from tts_convert.tts.providers.fake_provider import FAKE_MP3_BYTES

URL = "/api/text-to-speech/convert"


class _DownProvider(BaseSpeechProvider):
    name = "down"

    def synthesize(self, text, model, voice):
        raise RuntimeError("provider unavailable")


def _outcome_count(text: str, outcome: str) -> float:
    """Value of tts_convert_requests_total for one outcome (0 if absent)."""
    m = re.search(rf'^tts_convert_requests_total\{{outcome="{outcome}"\}} (\S+)$', text, re.MULTILINE)
    return float(m.group(1)) if m else 0.0


def _global_count(outcome: str) -> float:
    return _outcome_count(metrics.get_metrics_response()[0].decode(), outcome)


@pytest.fixture
def fresh_metrics() -> ConvertMetrics:
    return ConvertMetrics()


class TestMetricsModule:
    """Test metrics module functionality."""

    def test_metrics_instance_exists(self):
        assert metrics is not None
        assert isinstance(metrics.enabled, bool)

    def test_outcomes(self):
        assert OUTCOMES == ("delivered", "rejected", "failed", "send_failed")

    def test_record_calls_do_not_raise(self, fresh_metrics):
        for outcome in OUTCOMES:
            fresh_metrics.record_outcome(outcome, 0.2)
        fresh_metrics.record_outcome("rejected")
        fresh_metrics.record_provider_call("ok", 1.1)
        fresh_metrics.record_provider_call("error", 30.0)
        fresh_metrics.record_error("provider")
        fresh_metrics.record_error("storage")
        fresh_metrics.record_audio_bytes(417)
        fresh_metrics.record_audio_bytes(0)

    def test_response_contains_counters(self, fresh_metrics):
        pytest.importorskip("prometheus_client")
        fresh_metrics.record_outcome("delivered", 0.9)
        fresh_metrics.record_error("storage")
        content, content_type = fresh_metrics.get_metrics_response()
        text = content.decode()
        assert 'tts_convert_requests_total{outcome="delivered"} 1.0' in text
        assert 'tts_convert_provider_errors_total{kind="storage"} 1.0' in text
        assert content_type.startswith("text/plain")

    def test_instances_are_isolated(self):
        """Private registries: two instances never share counters."""
        pytest.importorskip("prometheus_client")
        a, b = ConvertMetrics(), ConvertMetrics()
        a.record_outcome("failed")
        text = b.get_metrics_response()[0].decode()
        assert 'tts_convert_requests_total{outcome="failed"}' not in text


class TestMetricsEndpoint:
    """Test the /metrics endpoint."""

    def test_metrics_endpoint(self, client):
        pytest.importorskip("prometheus_client")
        client.post("/api/text-to-speech/convert", json={"text": "count me"})
        r = client.get("/metrics")
        assert r.status_code == 200
        assert 'tts_convert_requests_total{outcome="delivered"}' in r.text

    def test_outcome_per_request_result(self, client, make_client):
        """One request of each kind moves exactly its own counter."""
        pytest.importorskip("prometheus_client")
        before = {o: _outcome_count(client.get("/metrics").text, o) for o in OUTCOMES}

        assert client.post(URL, json={"text": "deliver me"}).status_code == 200
        assert client.post(URL, json={}).status_code == 400
        assert make_client(_DownProvider()).post(URL, json={"text": "fail me"}).status_code == 500

        after = client.get("/metrics").text
        assert _outcome_count(after, "delivered") - before["delivered"] == 1
        assert _outcome_count(after, "rejected") - before["rejected"] == 1
        assert _outcome_count(after, "failed") - before["failed"] == 1
        assert _outcome_count(after, "send_failed") == before["send_failed"]


class TestSendFailure:
    """A connection that drops after the status line is sent."""

    @staticmethod
    def _run(response, send):
        scope = {
            "type": "http",
            "method": "GET",
            "path": URL,
            "headers": [],
            "asgi": {"version": "3.0", "spec_version": "2.4"},
            "extensions": {},
        }

        async def receive():
            return {"type": "http.request", "body": b"", "more_body": False}

        asyncio.run(response(scope, receive, send))

    def test_counts_send_failed_and_keeps_artifact(self, store):
        pytest.importorskip("prometheus_client")
        artifact = store.save(FAKE_MP3_BYTES)
        response = ArtifactResponse(
            artifact.file_path,
            request_id="rid-send",
            handler_seconds=0.1,
            media_type="audio/mpeg",
            filename=artifact.file_name,
        )
        sent = []

        async def send(message):
            if message["type"] == "http.response.body":
                raise ConnectionResetError("client went away")
            sent.append(message)

        failed_before = _global_count("send_failed")
        delivered_before = _global_count("delivered")

        with pytest.raises(ConnectionResetError):
            self._run(response, send)

        assert [m["type"] for m in sent] == ["http.response.start"]
        assert _global_count("send_failed") - failed_before == 1
        assert _global_count("delivered") == delivered_before
        assert store.exists(artifact.file_path)

    def test_completed_send_counts_delivered(self, store):
        pytest.importorskip("prometheus_client")
        artifact = store.save(FAKE_MP3_BYTES)
        response = ArtifactResponse(
            artifact.file_path,
            request_id="rid-ok",
            handler_seconds=0.1,
            media_type="audio/mpeg",
            filename=artifact.file_name,
        )
        body = []

        async def send(message):
            if message["type"] == "http.response.body":
                body.append(message["body"])

        delivered_before = _global_count("delivered")
        self._run(response, send)

        assert b"".join(body) == FAKE_MP3_BYTES
        assert _global_count("delivered") - delivered_before == 1
