"""HTTP API tests against an app wired with temp stores and fake models."""

from __future__ import annotations

import json

import httpx
import pytest
from conftest import FakeChatModel, FakeChatPlatform, FakeEmbedder

from helpdesk_kb.answering.engine import AnswerEngine
from helpdesk_kb.answering.reply_codecs import JsonReplyCodec
from helpdesk_kb.api.app import create_app
from helpdesk_kb.generation.messages import ModelMessage
from helpdesk_kb.ingestion.pipeline import IngestionPipeline
from helpdesk_kb.parsing.thread_parser import ThreadParser
from helpdesk_kb.retrieval.similarity_search import SimilaritySearch
from helpdesk_kb.vectorstore.faiss_index import FAISSQuestionIndex

AUTH = {"X-API-Key": "test-api-key"}


@pytest.fixture
def llm():
    return FakeChatModel([])


@pytest.fixture
def app(settings, llm, question_store, citation_store):
    app = create_app(settings)
    index = FAISSQuestionIndex(dimensions=3)
    embedder = FakeEmbedder(vectors={"reset password": [1.0, 0.0, 0.0]})
    search = SimilaritySearch(index, question_store, citation_store, embedder=embedder)
    parser = ThreadParser(llm)

    # ASGITransport does not run the lifespan, so wire state directly
    app.state.citation_store = citation_store
    app.state.question_store = question_store
    app.state.question_index = index
    app.state.embedder = embedder
    app.state.similarity_search = search
    app.state.answer_engine = AnswerEngine(llm, search, JsonReplyCodec())
    app.state.thread_parser = parser
    app.state.ingest_pipeline = IngestionPipeline(
        thread_parser=parser,
        embedder=embedder,
        citation_store=citation_store,
        question_store=question_store,
        question_index=index,
        chat=FakeChatPlatform(),
    )
    return app


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def _script(llm: FakeChatModel, *payloads: dict) -> None:
    llm.script(*(ModelMessage(content=json.dumps(p)) for p in payloads))


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "question_count": 0,
        "citation_count": 0,
        "index_size": 0,
    }
    assert "X-Request-ID" in response.headers


async def test_requires_api_key(client):
    response = await client.post("/ai/answer", json={"question": "q?"})
    assert response.status_code == 401
    response = await client.post("/ai/answer", json={"question": "q?"}, headers={"X-API-Key": "bad"})
    assert response.status_code == 401


async def test_bearer_token_flow(client):
    response = await client.post("/auth/token", json={"api_key": "test-api-key"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    response = await client.get(
        "/questions/browse", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 200


async def test_answer(client, llm):
    _script(llm, {"type": "answer", "content": "Use SSO.", "sources": ["https://x/1"]})
    response = await client.post("/ai/answer", json={"question": "How do I log in?"}, headers=AUTH)
    assert response.status_code == 200
    assert response.json() == {"answer": "Use SSO.", "hasAnswer": True, "sources": ["https://x/1"]}


async def test_answer_rejects_blank_question(client):
    response = await client.post("/ai/answer", json={"question": "   "}, headers=AUTH)
    assert response.status_code == 400


async def test_parse_qas(client, llm):
    _script(
        llm,
        {"qa_pairs": [{"question": "Q? [#1]", "answer": "A [#2]", "citations": [1, 2]}]},
    )
    response = await client.post(
        "/ai/parse-qas",
        json={"thread": [{"user": "U1", "text": "Q?", "ts": "1.1"}, {"user": "U2", "text": "A"}]},
        headers=AUTH,
    )
    assert response.status_code == 200
    assert response.json() == {"qa_pairs": [{"question": "Q?", "answer": "A", "citations": [1, 2]}]}


async def test_create_and_search_questions(client):
    response = await client.post(
        "/citations",
        json={"permalink": "https://x/p1", "content": "Try SSO", "timestamp": "1.1"},
        headers=AUTH,
    )
    assert response.status_code == 200
    citation = response.json()
    assert citation["username"] == "Unknown User"

    response = await client.post(
        "/questions",
        json={
            "question": "How do I log in?",
            "answer": "Use SSO.",
            "citationIds": [citation["id"]],
            "embedding": [1.0, 0.0, 0.0],
        },
        headers=AUTH,
    )
    assert response.status_code == 200
    question_id = response.json()["id"]

    response = await client.post(
        "/questions/search", json={"embedding": [1.0, 0.1, 0.0]}, headers=AUTH
    )
    assert response.status_code == 200
    results = response.json()["results"]
    assert [r["id"] for r in results] == [question_id]
    assert results[0]["citationDetails"][0]["permalink"] == "https://x/p1"

    response = await client.get("/citations", params={"ids": citation["id"]}, headers=AUTH)
    assert [c["id"] for c in response.json()] == [citation["id"]]


async def test_create_question_rejects_wrong_dimensions(client):
    response = await client.post(
        "/questions",
        json={"question": "Q?", "answer": "A", "embedding": [1.0, 0.0]},
        headers=AUTH,
    )
    assert response.status_code == 400


async def test_browse_pagination(client, question_store):
    for i in range(3):
        await question_store.create_question(
            question=f"Question {i}?", answer="A", citation_ids=[], embedding=[1.0, 0.0, 0.0]
        )
    response = await client.get("/questions/browse", params={"page": 1, "limit": 2}, headers=AUTH)
    body = response.json()
    assert len(body["questions"]) == 2
    assert body["pagination"] == {
        "page": 1,
        "limit": 2,
        "total": 3,
        "totalPages": 2,
        "hasNext": True,
        "hasPrev": False,
    }


async def test_embeddings(client):
    response = await client.post("/embeddings", json={"text": "reset password"}, headers=AUTH)
    assert response.status_code == 200
    assert response.json() == {"embedding": [1.0, 0.0, 0.0]}


async def test_ingest_thread(client, llm):
    _script(
        llm,
        {"qa_pairs": [{"question": "How do I log in?", "answer": "Use SSO.", "citations": [1]}]},
    )
    response = await client.post(
        "/ingest/thread",
        json={"channel_id": "C_HELP", "thread": [{"user": "U1", "text": "How?", "ts": "1.1"}]},
        headers=AUTH,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["questions_stored"] == 1
    assert body["citations_stored"] == 1

    health = (await client.get("/health")).json()
    assert health["index_size"] == 1


async def test_slack_events_unconfigured(client):
    response = await client.post("/slack/events", json={"type": "url_verification"})
    assert response.status_code == 503
