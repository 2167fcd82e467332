"""Ingest every already-resolved thread in a Slack channel."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from slack_sdk.web.async_client import AsyncWebClient

from helpdesk_kb.config.settings import Settings
from helpdesk_kb.embeddings.cache import EmbeddingCache
from helpdesk_kb.embeddings.cached_embedder import CachedEmbedder
from helpdesk_kb.embeddings.factory import create_embedder
from helpdesk_kb.generation.openai_provider import OpenAIChatModel
from helpdesk_kb.ingestion.pipeline import IngestionPipeline
from helpdesk_kb.observability.logger import setup_logging
from helpdesk_kb.parsing.thread_parser import ThreadParser
from helpdesk_kb.slack.platform import SlackPlatform
from helpdesk_kb.storage.sqlite_citation_store import SQLiteCitationStore
from helpdesk_kb.storage.sqlite_question_store import SQLiteQuestionStore
from helpdesk_kb.vectorstore.faiss_index import FAISSQuestionIndex


async def main(channel_id: str, limit: int | None) -> None:
    settings = Settings()
    setup_logging(settings.log_level, settings.log_json)
    for path in [settings.sqlite_db_path, settings.embedding_cache_db_path]:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    citation_store = SQLiteCitationStore(settings.sqlite_db_path)
    await citation_store.initialize()
    question_store = SQLiteQuestionStore(settings.sqlite_db_path)
    await question_store.initialize()

    raw_embedder = create_embedder(settings)
    cache = EmbeddingCache(settings.embedding_cache_db_path, model=raw_embedder.model)
    await cache.initialize()

    # A running server catches its own index up from the database on its next search
    question_index = FAISSQuestionIndex(dimensions=settings.embedding_dimensions)

    llm = OpenAIChatModel(
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        temperature=settings.llm_temperature,
        app_title=settings.llm_app_title,
    )
    chat = SlackPlatform(AsyncWebClient(token=settings.slack_bot_token))
    pipeline = IngestionPipeline(
        thread_parser=ThreadParser(llm=llm),
        embedder=CachedEmbedder(delegate=raw_embedder, cache=cache),
        citation_store=citation_store,
        question_store=question_store,
        question_index=question_index,
        chat=chat,
    )

    threads = 0
    stored = 0
    async for thread_ts in chat.list_resolved_threads(channel_id, settings.resolved_reaction):
        if limit is not None and threads >= limit:
            break
        thread = await chat.fetch_thread(channel_id, thread_ts)
        report = await pipeline.ingest_thread(channel_id, thread)
        threads += 1
        stored += report.questions_stored
        print(f"  {thread_ts}: {report.questions_stored}/{report.pairs_found} pairs stored")

    print(f"Done: {threads} threads, {stored} questions stored")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--channel", help="Channel id (defaults to HELPDESK_SLACK_CHANNEL_ID)")
    parser.add_argument("--limit", type=int, default=None, help="Maximum threads to ingest")
    args = parser.parse_args()
    channel = args.channel or Settings().slack_channel_id
    if not channel:
        parser.error("--channel is required when HELPDESK_SLACK_CHANNEL_ID is unset")
    asyncio.run(main(channel, args.limit))
