"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from helpdesk_kb.answering.engine import AnswerEngine
from helpdesk_kb.config.settings import Settings
from helpdesk_kb.ingestion.pipeline import IngestionPipeline
from helpdesk_kb.parsing.thread_parser import ThreadParser
from helpdesk_kb.protocols.embedder import Embedder
from helpdesk_kb.retrieval.similarity_search import SimilaritySearch
from helpdesk_kb.storage.sqlite_citation_store import SQLiteCitationStore
from helpdesk_kb.storage.sqlite_question_store import SQLiteQuestionStore
from helpdesk_kb.vectorstore.faiss_index import FAISSQuestionIndex


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_answer_engine(request: Request) -> AnswerEngine:
    return request.app.state.answer_engine


def get_thread_parser(request: Request) -> ThreadParser:
    return request.app.state.thread_parser


def get_ingest_pipeline(request: Request) -> IngestionPipeline:
    return request.app.state.ingest_pipeline


def get_similarity_search(request: Request) -> SimilaritySearch:
    return request.app.state.similarity_search


def get_embedder(request: Request) -> Embedder:
    return request.app.state.embedder


def get_question_store(request: Request) -> SQLiteQuestionStore:
    return request.app.state.question_store


def get_citation_store(request: Request) -> SQLiteCitationStore:
    return request.app.state.citation_store


def get_question_index(request: Request) -> FAISSQuestionIndex:
    return request.app.state.question_index
