"""V1 API router -- aggregates all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from src.tweetdesk.api.v1 import auth, health, transcripts, tweets

router = APIRouter()

router.include_router(health.router)
router.include_router(auth.router)
router.include_router(transcripts.router)
router.include_router(tweets.router)
