"""Record store -- id-keyed collections of transcripts and tweets.

Two independent collections, each loaded in full per operation. Every
mutation is a full read-modify-write of the collection; nothing is
serialized across concurrent callers, so the last write wins.

RecordStore is the interface the services depend on. JsonFileRecordStore
backs it with one pretty-printed JSON array per kind under a data
directory; blocking file I/O runs in asyncio.to_thread(). Tests substitute
an in-memory fake.
"""

from __future__ import annotations

import asyncio
import json
import os
from enum import Enum
from pathlib import Path
from typing import Protocol

import structlog
from pydantic import ValidationError

from src.tweetdesk.tweets.errors import StoreUnavailable
from src.tweetdesk.tweets.schemas import CamelModel, Transcript, Tweet

logger = structlog.get_logger(__name__)


class RecordKind(str, Enum):
    """The two collections held by the store."""

    TRANSCRIPTS = "transcripts"
    TWEETS = "tweets"


ENTITY_TYPES: dict[RecordKind, type[CamelModel]] = {
    RecordKind.TRANSCRIPTS: Transcript,
    RecordKind.TWEETS: Tweet,
}


class RecordStore(Protocol):
    """Append/read/update/delete of records in one collection per kind."""

    async def list_all(self, kind: RecordKind) -> list: ...

    async def get_by_id(self, kind: RecordKind, record_id: str): ...

    async def append(self, kind: RecordKind, entity: CamelModel) -> None: ...

    async def replace(
        self, kind: RecordKind, record_id: str, entity: CamelModel
    ) -> bool: ...

    async def remove_by_id(self, kind: RecordKind, record_id: str) -> bool: ...


# ── JSON File Store ──────────────────────────────────────────────────────────


class JsonFileRecordStore:
    """RecordStore backed by ``<data_dir>/<kind>.json`` files.

    A missing directory or file is created as an empty collection on first
    access. Writes go to a sibling temp file that is then renamed over the
    collection file, so a crash never leaves a half-written collection.

    Args:
        data_dir: Directory holding transcripts.json and tweets.json.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self._data_dir = Path(data_dir)

    def path_for(self, kind: RecordKind) -> Path:
        return self._data_dir / f"{kind.value}.json"

    # ── Reads ────────────────────────────────────────────────────────────

    async def list_all(self, kind: RecordKind) -> list:
        """Return every record of ``kind`` in insertion order.

        Raises:
            StoreUnavailable: If the file cannot be read or is not a JSON
                array of valid records.
        """
        raw = await asyncio.to_thread(self._read_raw, kind)
        entity_type = ENTITY_TYPES[kind]
        try:
            return [entity_type.model_validate(item) for item in raw]
        except ValidationError as exc:
            logger.error(
                "store.invalid_record",
                kind=kind.value,
                path=str(self.path_for(kind)),
                error=str(exc),
            )
            raise StoreUnavailable(
                f"Stored {kind.value} contain an invalid record"
            ) from exc

    async def get_by_id(self, kind: RecordKind, record_id: str):
        for entity in await self.list_all(kind):
            if entity.id == record_id:
                return entity
        return None

    # ── Mutations ────────────────────────────────────────────────────────

    async def append(self, kind: RecordKind, entity: CamelModel) -> None:
        records = await self.list_all(kind)
        records.append(entity)
        await self._write_all(kind, records)

    async def replace(
        self, kind: RecordKind, record_id: str, entity: CamelModel
    ) -> bool:
        records = await self.list_all(kind)
        for index, existing in enumerate(records):
            if existing.id == record_id:
                records[index] = entity
                await self._write_all(kind, records)
                return True
        return False

    async def remove_by_id(self, kind: RecordKind, record_id: str) -> bool:
        records = await self.list_all(kind)
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            return False
        await self._write_all(kind, remaining)
        return True

    # ── File I/O (runs in worker threads) ────────────────────────────────

    async def _write_all(self, kind: RecordKind, records: list) -> None:
        payload = [record.to_record() for record in records]
        await asyncio.to_thread(self._write_raw, kind, payload)

    def _read_raw(self, kind: RecordKind) -> list[dict]:
        path = self.path_for(kind)
        try:
            if not path.exists():
                self._write_raw(kind, [])
                logger.info("store.collection_initialized", path=str(path))
                return []
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("store.read_failed", path=str(path), error=str(exc))
            raise StoreUnavailable(f"Failed to read {kind.value}") from exc

        if not isinstance(data, list):
            logger.error("store.not_a_collection", path=str(path))
            raise StoreUnavailable(f"Stored {kind.value} is not a JSON array")
        return data

    def _write_raw(self, kind: RecordKind, payload: list[dict]) -> None:
        path = self.path_for(kind)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            logger.error("store.write_failed", path=str(path), error=str(exc))
            raise StoreUnavailable(f"Failed to write {kind.value}") from exc
