"""SQLite-backed store of mined question/answer records and their embeddings."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from uuid import uuid4

import aiosqlite

from helpdesk_kb.models.domain import StoredQuestion
from helpdesk_kb.storage.migrations import initialize_db


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SQLiteQuestionStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await initialize_db(self._db_path)

    async def create_question(
        self,
        question: str,
        answer: str,
        citation_ids: list[str],
        embedding: list[float],
    ) -> StoredQuestion:
        record = StoredQuestion(
            id=str(uuid4()),
            question=question,
            answer=answer,
            citation_ids=list(citation_ids),
            embedding=list(embedding),
        )
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT INTO questions (id, question, answer, citation_ids, embedding, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.question,
                    record.answer,
                    json.dumps(record.citation_ids),
                    json.dumps(record.embedding),
                    record.created_at.isoformat(),
                ),
            )
            await db.commit()
        return record

    async def get_question(self, question_id: str) -> StoredQuestion | None:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM questions WHERE id = ?", (question_id,)
            ) as cursor:
                row = await cursor.fetchone()
                if row is None:
                    return None
                return self._row_to_question(row)

    async def get_questions_by_ids(self, question_ids: list[str]) -> dict[str, StoredQuestion]:
        if not question_ids:
            return {}
        placeholders = ",".join("?" for _ in question_ids)
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                f"SELECT * FROM questions WHERE id IN ({placeholders})",
                question_ids,
            ) as cursor:
                rows = await cursor.fetchall()
                return {row["id"]: self._row_to_question(row) for row in rows}

    async def get_all_questions(self) -> list[StoredQuestion]:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute("SELECT * FROM questions ORDER BY created_at") as cursor:
                rows = await cursor.fetchall()
                return [self._row_to_question(row) for row in rows]

    async def browse_questions(
        self, page: int = 1, limit: int = 10, search: str = ""
    ) -> tuple[list[StoredQuestion], int]:
        """Return one page of questions (newest first) and the total match count."""
        where = ""
        params: list = []
        if search:
            where = "WHERE question LIKE ? ESCAPE '\\' OR answer LIKE ? ESCAPE '\\'"
            pattern = _like_pattern(search)
            params = [pattern, pattern]

        offset = (max(page, 1) - 1) * limit
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(f"SELECT COUNT(*) FROM questions {where}", params) as cursor:
                row = await cursor.fetchone()
                total = row[0] if row else 0
            async with db.execute(
                f"SELECT * FROM questions {where} ORDER BY created_at DESC LIMIT ? OFFSET ?",
                [*params, limit, offset],
            ) as cursor:
                rows = await cursor.fetchall()
        return [self._row_to_question(row) for row in rows], total

    async def count_questions(self) -> int:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute("SELECT COUNT(*) FROM questions") as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0

    @staticmethod
    def _row_to_question(row: aiosqlite.Row) -> StoredQuestion:
        return StoredQuestion(
            id=row["id"],
            question=row["question"],
            answer=row["answer"],
            citation_ids=json.loads(row["citation_ids"]),
            embedding=json.loads(row["embedding"]),
            created_at=datetime.fromisoformat(row["created_at"]).astimezone(timezone.utc),
        )
