"""Shared test doubles and fixtures.

Provides:
- InMemoryRecordStore: RecordStore test double with the same semantics as
  the JSON file store (insertion order, bool-returning replace/remove)
- A mocked publish gateway (AsyncMock methods)
- A TweetLifecycleManager wired to both
- A stored draft tweet
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.tweetdesk.tweets.errors import StoreUnavailable
from src.tweetdesk.tweets.lifecycle import TweetLifecycleManager
from src.tweetdesk.tweets.repository import RecordKind
from src.tweetdesk.tweets.schemas import Tweet


class InMemoryRecordStore:
    """In-memory test double for JsonFileRecordStore.

    Mirrors the RecordStore interface. Set ``fail_writes`` to make every
    mutation raise StoreUnavailable.
    """

    def __init__(self) -> None:
        self.records: dict[RecordKind, list] = {kind: [] for kind in RecordKind}
        self.fail_writes = False

    async def list_all(self, kind: RecordKind) -> list:
        return list(self.records[kind])

    async def get_by_id(self, kind: RecordKind, record_id: str):
        for entity in self.records[kind]:
            if entity.id == record_id:
                return entity
        return None

    async def append(self, kind: RecordKind, entity) -> None:
        self._check_writable()
        self.records[kind].append(entity)

    async def replace(self, kind: RecordKind, record_id: str, entity) -> bool:
        self._check_writable()
        for index, existing in enumerate(self.records[kind]):
            if existing.id == record_id:
                self.records[kind][index] = entity
                return True
        return False

    async def remove_by_id(self, kind: RecordKind, record_id: str) -> bool:
        self._check_writable()
        before = len(self.records[kind])
        self.records[kind] = [r for r in self.records[kind] if r.id != record_id]
        return len(self.records[kind]) != before

    def _check_writable(self) -> None:
        if self.fail_writes:
            raise StoreUnavailable("Simulated store failure")


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def gateway() -> MagicMock:
    mock = MagicMock()
    mock.publish = AsyncMock(return_value="1790000000000000001")
    mock.validate_credentials = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def lifecycle(store, gateway) -> TweetLifecycleManager:
    return TweetLifecycleManager(store, gateway)


@pytest.fixture
def stored_tweet(store) -> Tweet:
    tweet = Tweet(
        transcript_id="t-1",
        category="Governance",
        content="New proposal review process adopted! #governance",
    )
    store.records[RecordKind.TWEETS].append(tweet)
    return tweet
