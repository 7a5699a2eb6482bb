"""Application factory and lifespan wiring tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from src.tweetdesk.config import get_settings
from src.tweetdesk.main import create_app
from src.tweetdesk.tweets.lifecycle import TweetLifecycleManager
from src.tweetdesk.tweets.repository import JsonFileRecordStore
from src.tweetdesk.tweets.transcripts import TranscriptService


@pytest.fixture
def isolated_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


def test_lifespan_wires_services(isolated_settings):
    app = create_app()

    with TestClient(app) as client:
        assert isinstance(app.state.record_store, JsonFileRecordStore)
        assert isinstance(app.state.lifecycle_manager, TweetLifecycleManager)
        assert isinstance(app.state.transcript_service, TranscriptService)

        response = client.get("/health")
        assert response.status_code == 200
        assert response.headers["X-Request-ID"]


def test_transcript_list_reads_from_data_dir(isolated_settings):
    app = create_app()

    with TestClient(app) as client:
        response = client.get("/api/transcripts")

    assert response.status_code == 200
    assert response.json() == []
    assert (isolated_settings / "data" / "transcripts.json").exists()


def test_metrics_endpoint(isolated_settings):
    app = create_app()

    with TestClient(app) as client:
        client.get("/health")
        response = client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert "tweet_transitions_total" in response.text
