"""SQLite-backed store of cited Slack messages."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

import aiosqlite

from helpdesk_kb.config.constants import UNKNOWN_USER
from helpdesk_kb.models.domain import Citation
from helpdesk_kb.storage.migrations import initialize_db


class SQLiteCitationStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await initialize_db(self._db_path)

    async def create_citation(
        self, permalink: str, content: str, timestamp: str, username: str
    ) -> Citation:
        citation = Citation(
            id=str(uuid4()),
            permalink=permalink,
            content=content,
            timestamp=timestamp,
            username=username or UNKNOWN_USER,
        )
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT INTO citations (id, permalink, content, timestamp, username, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    citation.id,
                    citation.permalink,
                    citation.content,
                    citation.timestamp,
                    citation.username,
                    citation.created_at.isoformat(),
                ),
            )
            await db.commit()
        return citation

    async def get_citations(self, citation_ids: list[str]) -> list[Citation]:
        if not citation_ids:
            return []
        placeholders = ",".join("?" for _ in citation_ids)
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                f"SELECT * FROM citations WHERE id IN ({placeholders})",
                citation_ids,
            ) as cursor:
                rows = await cursor.fetchall()
        by_id = {row["id"]: self._row_to_citation(row) for row in rows}
        return [by_id[cid] for cid in citation_ids if cid in by_id]

    async def count_citations(self) -> int:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute("SELECT COUNT(*) FROM citations") as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0

    @staticmethod
    def _row_to_citation(row: aiosqlite.Row) -> Citation:
        return Citation(
            id=row["id"],
            permalink=row["permalink"],
            content=row["content"],
            timestamp=row["timestamp"],
            username=row["username"],
            created_at=datetime.fromisoformat(row["created_at"]).astimezone(timezone.utc),
        )
