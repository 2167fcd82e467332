"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from slack_bolt.adapter.fastapi.async_handler import AsyncSlackRequestHandler
from slack_bolt.async_app import AsyncApp
from slack_sdk.web.async_client import AsyncWebClient

from helpdesk_kb.answering.engine import AnswerEngine
from helpdesk_kb.answering.reply_codecs import create_codec
from helpdesk_kb.api.auth import router as auth_router
from helpdesk_kb.api.middleware import RequestContextMiddleware
from helpdesk_kb.api.routes_answer import router as answer_router
from helpdesk_kb.api.routes_citations import router as citations_router
from helpdesk_kb.api.routes_health import router as health_router
from helpdesk_kb.api.routes_ingest import router as ingest_router
from helpdesk_kb.api.routes_questions import router as questions_router
from helpdesk_kb.api.routes_slack import router as slack_router
from helpdesk_kb.config.settings import Settings
from helpdesk_kb.embeddings.cache import EmbeddingCache
from helpdesk_kb.embeddings.cached_embedder import CachedEmbedder
from helpdesk_kb.embeddings.factory import create_embedder
from helpdesk_kb.generation.openai_provider import OpenAIChatModel
from helpdesk_kb.ingestion.pipeline import IngestionPipeline
from helpdesk_kb.observability.logger import get_logger, setup_logging
from helpdesk_kb.parsing.thread_parser import ThreadParser
from helpdesk_kb.retrieval.similarity_search import SimilaritySearch
from helpdesk_kb.slack.handlers import SlackEventHandlers, register_handlers
from helpdesk_kb.slack.platform import SlackPlatform
from helpdesk_kb.storage.sqlite_citation_store import SQLiteCitationStore
from helpdesk_kb.storage.sqlite_question_store import SQLiteQuestionStore
from helpdesk_kb.vectorstore.faiss_index import FAISSQuestionIndex

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_json)

    # Ensure data directories exist
    for path in [settings.sqlite_db_path, settings.embedding_cache_db_path]:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    # Storage
    citation_store = SQLiteCitationStore(settings.sqlite_db_path)
    await citation_store.initialize()
    question_store = SQLiteQuestionStore(settings.sqlite_db_path)
    await question_store.initialize()

    # Embedding (with cache)
    raw_embedder = create_embedder(settings)
    embedding_cache = EmbeddingCache(settings.embedding_cache_db_path, model=raw_embedder.model)
    await embedding_cache.initialize()
    embedder = CachedEmbedder(delegate=raw_embedder, cache=embedding_cache)

    # Vector index, rebuilt from the question store
    question_index = FAISSQuestionIndex(dimensions=settings.embedding_dimensions)
    question_index.rebuild(await question_store.get_all_questions())

    # LLM
    llm = OpenAIChatModel(
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        temperature=settings.llm_temperature,
        app_title=settings.llm_app_title,
    )

    # Retrieval and answering
    similarity_search = SimilaritySearch(
        index=question_index,
        question_store=question_store,
        citation_store=citation_store,
        embedder=embedder,
    )
    answer_engine = AnswerEngine(
        llm=llm,
        searcher=similarity_search,
        codec=create_codec(settings.answer_style),
    )
    thread_parser = ThreadParser(llm=llm)

    # Slack
    slack_app = None
    if settings.slack_enabled:
        slack_app = AsyncApp(
            token=settings.slack_bot_token,
            signing_secret=settings.slack_signing_secret,
        )
        chat = SlackPlatform(slack_app.client)
    else:
        logger.warning("slack_not_configured")
        chat = SlackPlatform(AsyncWebClient(token=settings.slack_bot_token or None))

    ingest_pipeline = IngestionPipeline(
        thread_parser=thread_parser,
        embedder=embedder,
        citation_store=citation_store,
        question_store=question_store,
        question_index=question_index,
        chat=chat,
    )

    if slack_app is not None:
        handlers = SlackEventHandlers(
            engine=answer_engine,
            ingestion=ingest_pipeline,
            chat=chat,
            channel_id=settings.slack_channel_id,
            resolved_reaction=settings.resolved_reaction,
        )
        register_handlers(slack_app, handlers)
        app.state.slack_handler = AsyncSlackRequestHandler(slack_app)

    # Attach to app state
    app.state.citation_store = citation_store
    app.state.question_store = question_store
    app.state.question_index = question_index
    app.state.embedder = embedder
    app.state.similarity_search = similarity_search
    app.state.answer_engine = answer_engine
    app.state.thread_parser = thread_parser
    app.state.ingest_pipeline = ingest_pipeline

    logger.info(
        "startup_complete",
        questions=await question_store.count_questions(),
        citations=await citation_store.count_citations(),
        index_size=question_index.size,
        answer_style=settings.answer_style,
        slack=slack_app is not None,
    )

    yield

    logger.info("shutdown_complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(
        title="Helpdesk KB",
        version="1.0.0",
        description="Slack help-desk knowledge base with retrieval-augmented answers",
        lifespan=lifespan,
    )
    app.state.settings = settings if settings is not None else Settings()
    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(answer_router, tags=["ai"])
    app.include_router(questions_router, tags=["questions"])
    app.include_router(citations_router, tags=["citations"])
    app.include_router(ingest_router, tags=["ingest"])
    app.include_router(slack_router, tags=["slack"])
    return app
