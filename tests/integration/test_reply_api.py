"""
Integration tests for the HTTP API.

Drives the FastAPI app through TestClient with the reply service and the
knowledge store swapped in via dependency overrides. The app lifespan is
not started, so no database or OpenAI access happens.

Run with:
    pytest tests/integration/test_reply_api.py -v
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from pydantic_ai.models.test import TestModel

from api.dependencies import get_knowledge_store, get_reply_service
from main import app
from pipeline.orchestrator import ReplySuggestionService
from pipeline.steps.intent_classifier.main import IntentClassifierStep
from pipeline.steps.knowledge_retrieval.main import KnowledgeRetrievalStep
from pipeline.steps.reply_synthesizer.main import ReplySynthesizerStep


pytestmark = pytest.mark.integration

AI_REPLY = "Thanks for getting in touch! Happy to set up a time: https://cal.com/example"

VALID_EMAIL = {
    "subject": "Thank you for the demo",
    "body": "It was great to see the product in action.",
    "from": "lead@acme.com",
    "to": ["me@example.com"],
    "date": "2024-01-01T00:00:00Z",
}


# ===================================================================
# FIXTURES
# ===================================================================

@pytest.fixture
def store(make_store):
    """Never initialized, so the store is disconnected."""
    return make_store(reachable=False)


@pytest.fixture
def service(store):
    return ReplySuggestionService(
        knowledge_store=store,
        classifier=IntentClassifierStep(model=TestModel(custom_output_text="Sender thanks us for the demo.")),
        retrieval=KnowledgeRetrievalStep(store),
        synthesizer=ReplySynthesizerStep(model=TestModel(custom_output_text=AI_REPLY)),
    )


@pytest.fixture
def client(service, store):
    app.dependency_overrides[get_reply_service] = lambda: service
    app.dependency_overrides[get_knowledge_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


class BrokenService:
    async def suggest_replies(self, email):
        raise RuntimeError("serializer exploded")

    async def get_stats(self):
        raise RuntimeError("count query failed")


@pytest.fixture
def broken_client():
    app.dependency_overrides[get_reply_service] = lambda: BrokenService()
    yield TestClient(app)
    app.dependency_overrides.clear()


# ===================================================================
# TESTS - POST /api/suggest-replies
# ===================================================================

def test_suggest_replies_returns_suggestions(client):
    response = client.post("/api/suggest-replies", json=VALID_EMAIL)

    assert response.status_code == 200
    body = response.json()

    assert body["success"] is True
    assert body["email_id"] == VALID_EMAIL["subject"]
    datetime.fromisoformat(body["generated_at"].replace("Z", "+00:00"))

    ids = [s["id"] for s in body["suggestions"]]
    assert ids[0].startswith("ai_")
    assert ids[1].startswith("quick_")

    ai = body["suggestions"][0]
    assert ai["content"] == AI_REPLY
    assert ai["confidence"] == 0.8
    assert ai["metadata"] == {
        "category": "sales_demo",
        "tone": "professional",
        "action_required": True,
        "estimated_response_time": "immediate",
    }
    assert set(ai["context"]) == {"relevantKnowledge", "matchedTemplate", "reasoning"}
    assert len(ai["context"]["relevantKnowledge"]) == 3
    assert ai["context"]["matchedTemplate"]["category"] == "job_interview"


@pytest.mark.parametrize("missing", ["subject", "body", "from"])
def test_suggest_replies_rejects_missing_field(client, missing):
    payload = {k: v for k, v in VALID_EMAIL.items() if k != missing}

    response = client.post("/api/suggest-replies", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required email fields: subject, body, from"}


def test_suggest_replies_rejects_empty_field(client):
    response = client.post("/api/suggest-replies", json={**VALID_EMAIL, "body": ""})

    assert response.status_code == 400


def test_suggest_replies_without_body_returns_400(client):
    response = client.post("/api/suggest-replies")

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required email fields: subject, body, from"}


def test_suggest_replies_wrongly_typed_recipients_returns_400(client):
    response = client.post("/api/suggest-replies", json={**VALID_EMAIL, "to": "bob@co.com"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required email fields: subject, body, from"}


def test_suggest_replies_malformed_json_returns_400(client):
    response = client.post(
        "/api/suggest-replies",
        content=b'{"subject": "Hi",',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required email fields: subject, body, from"}


def test_suggest_replies_optional_fields_can_be_omitted(client):
    payload = {"subject": "Hello", "body": "Quick question", "from": "a@b.co"}

    response = client.post("/api/suggest-replies", json=payload)

    assert response.status_code == 200
    assert [s["id"].split("_")[0] for s in response.json()["suggestions"]] == ["ai"]


def test_suggest_replies_unexpected_error_returns_500(broken_client):
    response = broken_client.post("/api/suggest-replies", json=VALID_EMAIL)

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to generate reply suggestions",
        "details": "serializer exploded",
    }


# ===================================================================
# TESTS - GET /api/rag-stats
# ===================================================================

def test_rag_stats_disconnected(client, store):
    response = client.get("/api/rag-stats")

    assert response.status_code == 200
    body = response.json()
    assert body["knowledgeItems"] == 0
    assert body["replyTemplates"] == 0
    assert body["status"] == "disconnected"
    assert body["ragService"] == "active"
    assert body["embeddingModel"] == store.embedding_provider.model
    assert "llmModel" in body


def test_rag_stats_error_returns_500(broken_client):
    response = broken_client.get("/api/rag-stats")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to get RAG statistics", "details": "count query failed"}


def test_routes_unavailable_before_startup():
    app.dependency_overrides.clear()
    client = TestClient(app)

    response = client.get("/api/rag-stats")

    assert response.status_code == 503


# ===================================================================
# TESTS - Knowledge management
# ===================================================================

def test_add_knowledge_when_disconnected(client):
    response = client.post("/api/knowledge", json={
        "content": "Support is available 9am-5pm CET.",
        "category": "support_hours",
        "metadata": {"type": "faq", "tags": ["support"]},
    })

    assert response.status_code == 201
    body = response.json()
    assert body["id"]
    assert body["persisted"] is False


def test_add_reply_template_when_disconnected(client):
    response = client.post("/api/reply-templates", json={
        "scenario": "Partnership inquiry",
        "template": "Thanks for reaching out about a partnership! {{meeting_link}}",
        "variables": ["meeting_link"],
        "category": "collaboration",
    })

    assert response.status_code == 201
    assert response.json()["persisted"] is False


def test_add_knowledge_validates_type(client):
    response = client.post("/api/knowledge", json={
        "content": "Something",
        "category": "misc",
        "metadata": {"type": "not-a-type"},
    })

    assert response.status_code == 422


# ===================================================================
# TESTS - Health and root
# ===================================================================

def test_health_degraded_without_store():
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["vector_store"] == "disconnected"


def test_root_lists_docs():
    body = TestClient(app).get("/").json()

    assert body["docs"] == "/docs"
    assert body["health"] == "/health"
