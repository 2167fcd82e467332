"""Idempotent database schema creation."""

from __future__ import annotations

import aiosqlite

CITATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS citations (
    id TEXT PRIMARY KEY,
    permalink TEXT NOT NULL,
    content TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    username TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""

QUESTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS questions (
    id TEXT PRIMARY KEY,
    question TEXT NOT NULL,
    answer TEXT NOT NULL,
    citation_ids TEXT NOT NULL DEFAULT '[]',
    embedding TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""

QUESTIONS_CREATED_INDEX = """
CREATE INDEX IF NOT EXISTS idx_questions_created_at ON questions(created_at)
"""


async def initialize_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(CITATIONS_TABLE)
        await db.execute(QUESTIONS_TABLE)
        await db.execute(QUESTIONS_CREATED_INDEX)
        await db.commit()
