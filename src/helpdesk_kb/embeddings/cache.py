"""SQLite-backed embedding cache keyed by model and text."""

from __future__ import annotations

import hashlib
import json

import aiosqlite

CREATE_CACHE_TABLE = """
CREATE TABLE IF NOT EXISTS embedding_cache (
    cache_key TEXT PRIMARY KEY,
    model TEXT NOT NULL,
    embedding TEXT NOT NULL
)
"""


class EmbeddingCache:
    def __init__(self, db_path: str, model: str) -> None:
        self._db_path = db_path
        self._model = model

    async def initialize(self) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(CREATE_CACHE_TABLE)
            await db.commit()

    async def get(self, text: str) -> list[float] | None:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute(
                "SELECT embedding FROM embedding_cache WHERE cache_key = ?",
                (self._key(text),),
            ) as cursor:
                row = await cursor.fetchone()
                if row is None:
                    return None
                return json.loads(row[0])

    async def put(self, text: str, embedding: list[float]) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO embedding_cache (cache_key, model, embedding) VALUES (?, ?, ?)",
                (self._key(text), self._model, json.dumps(embedding)),
            )
            await db.commit()

    def _key(self, text: str) -> str:
        # Same text under a different model must not share a vector
        return hashlib.sha256(f"{self._model}\x00{text}".encode("utf-8")).hexdigest()
