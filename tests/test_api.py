"""HTTP API integration tests.

Builds a FastAPI app with the real routers and services wired to the
InMemoryRecordStore double, a mocked LLM and a mocked X gateway. Requests go
through httpx's ASGI transport on the test's event loop, so background
generation can be awaited with ``queue.drain()``.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.tweetdesk.api.v1.router import router as v1_router
from src.tweetdesk.config import Settings
from src.tweetdesk.tweets.errors import GatewayUnavailable, PublishFailed
from src.tweetdesk.tweets.generation import (
    GenerationAdapter,
    GenerationQueue,
    ResponseParser,
)
from src.tweetdesk.tweets.repository import RecordKind
from src.tweetdesk.tweets.transcripts import TranscriptService


MODEL_OUTPUT = (
    "Here are your tweets:\n"
    + json.dumps([
        {"category": "Governance", "content": "Two-week comment window for proposals #governance"},
        {"category": "Community", "content": "Grant applications open April 1 #grants"},
    ])
)

CREDENTIALS_JSON = {
    "apiKey": "key",
    "apiSecret": "secret",
    "accessToken": "token",
    "accessSecret": "token-secret",
}

TRANSCRIPT_JSON = {
    "title": "Community Council",
    "date": "2025-03-12",
    "content": "Chair: the council adopted the new review process.",
}


def _create_test_app(store, lifecycle, gateway, llm=None, **settings_overrides) -> FastAPI:
    """Create a test FastAPI app with services on app.state."""
    if llm is None:
        llm = MagicMock()
        llm.completion = AsyncMock(return_value={
            "content": MODEL_OUTPUT,
            "model": "claude-sonnet-4-20250514",
            "usage": {},
        })

    settings = Settings(**settings_overrides)
    queue = GenerationQueue(
        store=store,
        adapter=GenerationAdapter(llm),
        parser=ResponseParser(),
        lifecycle=lifecycle,
    )

    app = FastAPI()
    app.include_router(v1_router)

    app.state.settings = settings
    app.state.record_store = store
    app.state.publish_gateway = gateway
    app.state.lifecycle_manager = lifecycle
    app.state.generation_queue = queue
    app.state.transcript_service = TranscriptService(
        store=store,
        queue=queue,
        lifecycle=lifecycle,
        max_chars=settings.MAX_TRANSCRIPT_CHARS,
    )
    return app


def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


async def _create_with_tweets(client: AsyncClient, app: FastAPI) -> tuple[dict, list[dict]]:
    response = await client.post("/api/transcripts", json=TRANSCRIPT_JSON)
    assert response.status_code == 201, response.text
    transcript = response.json()["transcript"]

    await app.state.generation_queue.drain()

    response = await client.get(f"/api/transcripts/{transcript['id']}/tweets")
    assert response.status_code == 200
    return transcript, response.json()


@pytest.fixture
def app(store, lifecycle, gateway) -> FastAPI:
    return _create_test_app(store, lifecycle, gateway)


# ── Health ───────────────────────────────────────────────────────────────────


async def test_health(app):
    async with _client(app) as client:
        response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == "1.0.0"
    assert "environment" in data


async def test_readiness_reports_missing_llm_keys(store, lifecycle, gateway, tmp_path):
    app = _create_test_app(
        store, lifecycle, gateway,
        DATA_DIR=str(tmp_path), ANTHROPIC_API_KEY="", OPENAI_API_KEY="",
    )
    async with _client(app) as client:
        response = await client.get("/health/ready")

    assert response.status_code == 200
    assert response.json()["checks"]["llm"] == "no_keys"


# ── Transcripts ──────────────────────────────────────────────────────────────


class TestTranscriptEndpoints:
    async def test_create_returns_transcript_and_schedules_generation(self, app):
        async with _client(app) as client:
            transcript, tweets = await _create_with_tweets(client, app)

            assert transcript["title"] == "Community Council"
            assert transcript["generationStatus"] == "pending"
            assert "createdAt" in transcript
            assert len(tweets) == 2
            assert {t["state"] for t in tweets} == {"draft"}
            assert {t["transcriptId"] for t in tweets} == {transcript["id"]}

            response = await client.get(f"/api/transcripts/{transcript['id']}")
            assert response.json()["generationStatus"] == "succeeded"
            assert response.json()["tweetCount"] == 2

    async def test_list_transcripts_in_insertion_order(self, app):
        async with _client(app) as client:
            first = (await client.post("/api/transcripts", json=TRANSCRIPT_JSON)).json()
            second = (await client.post(
                "/api/transcripts", json={**TRANSCRIPT_JSON, "title": "Second"}
            )).json()
            await app.state.generation_queue.drain()

            response = await client.get("/api/transcripts")

        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [
            first["transcript"]["id"],
            second["transcript"]["id"],
        ]

    @pytest.mark.parametrize("missing", ["title", "date", "content"])
    async def test_create_requires_every_field(self, app, missing):
        body = {k: v for k, v in TRANSCRIPT_JSON.items() if k != missing}
        async with _client(app) as client:
            response = await client.post("/api/transcripts", json=body)
        assert response.status_code == 422

    async def test_create_rejects_blank_field(self, app):
        async with _client(app) as client:
            response = await client.post(
                "/api/transcripts", json={**TRANSCRIPT_JSON, "title": "   "}
            )
        assert response.status_code == 422

    async def test_create_rejects_oversized_content(self, store, lifecycle, gateway):
        app = _create_test_app(store, lifecycle, gateway, MAX_TRANSCRIPT_CHARS=10)
        async with _client(app) as client:
            response = await client.post("/api/transcripts", json=TRANSCRIPT_JSON)

        assert response.status_code == 413
        assert response.json()["detail"]["reason"] == "transcript_too_large"

    async def test_get_missing_transcript(self, app):
        async with _client(app) as client:
            response = await client.get("/api/transcripts/missing")
            tweets_response = await client.get("/api/transcripts/missing/tweets")

        assert response.status_code == 404
        assert response.json()["detail"] == {
            "success": False,
            "reason": "not_found",
            "message": "Transcript not found: missing",
        }
        assert tweets_response.status_code == 404

    async def test_generation_failure_shows_on_transcript(self, store, lifecycle, gateway):
        llm = MagicMock()
        llm.completion = AsyncMock(side_effect=RuntimeError("provider down"))
        app = _create_test_app(store, lifecycle, gateway, llm=llm)

        async with _client(app) as client:
            transcript, tweets = await _create_with_tweets(client, app)
            response = await client.get(f"/api/transcripts/{transcript['id']}")

        assert tweets == []
        assert response.json()["generationStatus"] == "failed"
        assert "provider down" in response.json()["generationError"]

    async def test_tweets_by_category(self, app):
        async with _client(app) as client:
            transcript, _ = await _create_with_tweets(client, app)
            response = await client.get(
                f"/api/transcripts/{transcript['id']}/tweets/by-category"
            )

        assert response.status_code == 200
        assert list(response.json()) == ["Governance", "Community"]

    async def test_sample_transcript(self, store, lifecycle, gateway, tmp_path):
        sample = tmp_path / "sample.txt"
        sample.write_text("Chair: Welcome everyone.", encoding="utf-8")
        app = _create_test_app(
            store, lifecycle, gateway, SAMPLE_TRANSCRIPT_PATH=str(sample)
        )

        async with _client(app) as client:
            response = await client.get("/api/transcripts/sample/transcript")

        assert response.status_code == 200
        assert response.json() == {"content": "Chair: Welcome everyone."}

    async def test_sample_transcript_missing(self, store, lifecycle, gateway, tmp_path):
        app = _create_test_app(
            store, lifecycle, gateway,
            SAMPLE_TRANSCRIPT_PATH=str(tmp_path / "absent.txt"),
        )
        async with _client(app) as client:
            response = await client.get("/api/transcripts/sample/transcript")

        assert response.status_code == 404


# ── Tweets ───────────────────────────────────────────────────────────────────


class TestTweetEndpoints:
    async def test_edit_then_send(self, app):
        async with _client(app) as client:
            _, tweets = await _create_with_tweets(client, app)
            tweet_id = tweets[0]["id"]

            edited = await client.put(
                f"/api/tweets/{tweet_id}/edit", json={"content": "Rewritten #gov"}
            )
            assert edited.status_code == 200
            assert edited.json()["success"] is True
            assert edited.json()["tweet"]["state"] == "edited"
            assert "updatedAt" in edited.json()["tweet"]

            sent = await client.post(f"/api/tweets/{tweet_id}/send")
            assert sent.status_code == 200
            assert sent.json()["tweet"]["state"] == "sent"
            assert sent.json()["tweet"]["content"] == "Rewritten #gov"
            assert "xPostId" not in sent.json()["tweet"]

    @pytest.mark.parametrize("content", ["", "   "])
    async def test_edit_blank_content(self, app, stored_tweet, content):
        async with _client(app) as client:
            response = await client.put(
                f"/api/tweets/{stored_tweet.id}/edit", json={"content": content}
            )
        assert response.status_code == 400
        assert response.json()["detail"]["reason"] == "invalid_content"

    async def test_edit_missing_tweet(self, app):
        async with _client(app) as client:
            response = await client.put("/api/tweets/missing/edit", json={"content": "x"})
        assert response.status_code == 404
        assert response.json()["detail"]["reason"] == "not_found"

    async def test_sent_tweet_rejects_edit_send_delete(self, app, stored_tweet):
        async with _client(app) as client:
            await client.post(f"/api/tweets/{stored_tweet.id}/send")

            responses = [
                await client.put(f"/api/tweets/{stored_tweet.id}/edit", json={"content": "x"}),
                await client.post(f"/api/tweets/{stored_tweet.id}/send"),
                await client.post(
                    f"/api/tweets/send-to-x/{stored_tweet.id}", json=CREDENTIALS_JSON
                ),
                await client.delete(f"/api/tweets/{stored_tweet.id}"),
            ]

        for response in responses:
            assert response.status_code == 400
            assert response.json()["detail"]["reason"] == "already_sent"

    async def test_blank_edit_of_sent_tweet(self, app, stored_tweet):
        async with _client(app) as client:
            await client.post(f"/api/tweets/{stored_tweet.id}/send")
            response = await client.put(
                f"/api/tweets/{stored_tweet.id}/edit", json={"content": "  "}
            )

        assert response.status_code == 400
        assert response.json()["detail"]["reason"] == "already_sent"

    async def test_send_to_x(self, app, gateway, stored_tweet):
        async with _client(app) as client:
            response = await client.post(
                f"/api/tweets/send-to-x/{stored_tweet.id}", json=CREDENTIALS_JSON
            )

        assert response.status_code == 200
        tweet = response.json()["tweet"]
        assert tweet["state"] == "sent"
        assert tweet["xPostId"] == "1790000000000000001"
        credentials = gateway.publish.await_args.args[1]
        assert credentials.access_secret == "token-secret"

    async def test_send_to_x_missing_credentials(self, app, gateway, stored_tweet):
        async with _client(app) as client:
            response = await client.post(
                f"/api/tweets/send-to-x/{stored_tweet.id}",
                json={**CREDENTIALS_JSON, "accessSecret": ""},
            )

        assert response.status_code == 400
        assert response.json()["detail"]["reason"] == "invalid_credentials"
        gateway.publish.assert_not_awaited()

    async def test_send_to_x_checks_credentials_before_lookup(self, app, gateway):
        async with _client(app) as client:
            incomplete = await client.post(
                "/api/tweets/send-to-x/missing", json={"apiKey": "key"}
            )
            complete = await client.post(
                "/api/tweets/send-to-x/missing", json=CREDENTIALS_JSON
            )

        assert incomplete.status_code == 400
        assert incomplete.json()["detail"]["reason"] == "invalid_credentials"
        assert complete.status_code == 404
        assert complete.json()["detail"]["reason"] == "not_found"
        gateway.publish.assert_not_awaited()

    async def test_send_to_x_publish_failure(self, app, gateway, store, stored_tweet):
        gateway.publish.side_effect = PublishFailed("Failed to post to X: 403 Forbidden")

        async with _client(app) as client:
            response = await client.post(
                f"/api/tweets/send-to-x/{stored_tweet.id}", json=CREDENTIALS_JSON
            )

        assert response.status_code == 502
        assert response.json()["detail"]["reason"] == "publish_failed"
        assert await store.get_by_id(RecordKind.TWEETS, stored_tweet.id) == stored_tweet

    async def test_delete(self, app, stored_tweet):
        async with _client(app) as client:
            first = await client.delete(f"/api/tweets/{stored_tweet.id}")
            second = await client.delete(f"/api/tweets/{stored_tweet.id}")
            edit = await client.put(
                f"/api/tweets/{stored_tweet.id}/edit", json={"content": "x"}
            )

        assert first.status_code == 200
        assert first.json() == {"success": True, "message": "Tweet successfully deleted"}
        assert second.status_code == 404
        assert second.json()["detail"]["reason"] == "not_found"
        assert edit.status_code == 404


# ── Credential Validation ────────────────────────────────────────────────────


class TestCredentialValidation:
    @pytest.mark.parametrize(
        "path", ["/api/tweets/validate-x-creds", "/api/auth/validate-x-credentials"]
    )
    async def test_valid_credentials(self, app, gateway, path):
        async with _client(app) as client:
            response = await client.post(path, json=CREDENTIALS_JSON)

        assert response.status_code == 200
        assert response.json() == {"success": True, "isValid": True}
        gateway.validate_credentials.assert_awaited_once()

    async def test_rejected_credentials(self, app, gateway):
        gateway.validate_credentials.return_value = False
        async with _client(app) as client:
            response = await client.post("/api/tweets/validate-x-creds", json=CREDENTIALS_JSON)

        assert response.json() == {"success": True, "isValid": False}

    async def test_missing_fields(self, app, gateway):
        async with _client(app) as client:
            response = await client.post(
                "/api/auth/validate-x-credentials", json={"apiKey": "key"}
            )

        assert response.status_code == 400
        assert response.json()["detail"]["reason"] == "invalid_credentials"
        gateway.validate_credentials.assert_not_awaited()

    async def test_gateway_unavailable(self, app, gateway):
        gateway.validate_credentials.side_effect = GatewayUnavailable("X API unavailable")
        async with _client(app) as client:
            response = await client.post("/api/tweets/validate-x-creds", json=CREDENTIALS_JSON)

        assert response.status_code == 503
        assert response.json()["detail"]["reason"] == "gateway_unavailable"


# ── Operator Gate ────────────────────────────────────────────────────────────


class TestOperatorGate:
    async def test_routes_open_when_gate_disabled(self, app):
        async with _client(app) as client:
            response = await client.get("/api/transcripts")
        assert response.status_code == 200

    async def test_gate_requires_token(self, store, lifecycle, gateway):
        app = _create_test_app(store, lifecycle, gateway, AUTH_ENABLED=True)
        async with _client(app) as client:
            response = await client.get("/api/transcripts")
            bad = await client.get(
                "/api/transcripts", headers={"Authorization": "Bearer not-a-jwt"}
            )

        assert response.status_code == 401
        assert bad.status_code == 401

    async def test_login_then_access(self, store, lifecycle, gateway):
        app = _create_test_app(store, lifecycle, gateway, AUTH_ENABLED=True)
        defaults = Settings()

        async with _client(app) as client:
            login = await client.post(
                "/api/auth/login",
                json={"email": defaults.ADMIN_EMAIL, "password": defaults.ADMIN_PASSWORD},
            )
            assert login.status_code == 200
            token = login.json()["token"]

            response = await client.get(
                "/api/transcripts", headers={"Authorization": f"Bearer {token}"}
            )
        assert response.status_code == 200

    async def test_login_wrong_password(self, app):
        async with _client(app) as client:
            response = await client.post(
                "/api/auth/login", json={"email": "admin@example.com", "password": "nope"}
            )
        assert response.status_code == 401

    async def test_credential_validation_is_never_gated(self, store, lifecycle, gateway):
        app = _create_test_app(store, lifecycle, gateway, AUTH_ENABLED=True)
        async with _client(app) as client:
            response = await client.post("/api/tweets/validate-x-creds", json=CREDENTIALS_JSON)
        assert response.status_code == 200
