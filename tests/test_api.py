#!/usr/bin/env python3
"""
API Endpoint Tests

PURPOSE:
    Drives the FastAPI app through TestClient with the provider replaced by
    FakeLLM and the database by in-memory SQLite.

TEST COVERAGE:
    - Envelope shape, validation errors and unknown routes
    - AI endpoints
    - Knowledge endpoints
    - Conversation and analytics endpoints
"""

import sys
import os
import unittest

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from support_backend.app.ai_service import AIService
from support_backend.app.dependencies import (
    get_ai_service,
    get_ai_service_provider,
    get_knowledge_service,
    rate_limiter,
)
from support_backend.app.knowledge import KnowledgeService
from support_backend.app.llm_client import LLMConfigurationError, LLMServiceError
from support_backend.app.main import app
from support_backend.data.database import create_tables, get_db
from fakes import FakeLLM, make_choices

SENTIMENT_REPLY = '{"score": -0.85, "label": "negative", "confidence": 0.95}'
QUALITY_REPLY = '{"overall": 9, "clarity": 9, "completeness": 9, "tone": 9, "accuracy": 9, "actionability": 9}'

REQUEST_BODY = {
    "conversationHistory": [
        {"id": "m1", "content": "My package never arrived", "sender": "customer", "timestamp": "2024-01-01T10:00:00Z"},
    ],
    "customerProfile": {
        "id": "cust-1",
        "name": "Dana Smith",
        "email": "dana@example.com",
        "tier": "enterprise",
        "previousInteractions": 2,
        "averageSentiment": -0.2,
        "preferredTone": "professional",
    },
    "tone": "professional",
    "includeKnowledge": False,
}


class ApiTestCase(unittest.TestCase):

    def setUp(self):
        self.llm = FakeLLM(choices=make_choices("Option A", "Option B", "Option C"))
        self.knowledge = KnowledgeService(llm_client=self.llm, embedding_delay=0)
        self.ai = AIService(llm_client=self.llm, knowledge_service=self.knowledge, model="test-model")

        engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
        create_tables(bind=engine)
        Session = sessionmaker(bind=engine)

        def override_db():
            db = Session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_db
        app.dependency_overrides[get_ai_service] = lambda: self.ai
        app.dependency_overrides[get_ai_service_provider] = lambda: (lambda: self.ai)
        app.dependency_overrides[get_knowledge_service] = lambda: self.knowledge
        rate_limiter.reset()
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        rate_limiter.reset()


class TestAppEndpoints(ApiTestCase):

    def test_health(self):
        body = self.client.get("/health").json()
        self.assertEqual(body["status"], "ok")
        self.assertTrue(body["timestamp"].endswith("Z"))

    def test_api_index(self):
        body = self.client.get("/api").json()
        self.assertEqual(body["endpoints"]["knowledge"], "/api/knowledge/*")

    def test_unknown_route(self):
        response = self.client.get("/api/nothing-here")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Endpoint not found"})

    def test_validation_error(self):
        response = self.client.post("/api/ai/generate-response", json={"tone": "professional"})
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error"], "Invalid request data")
        self.assertIsInstance(body["details"], list)

    def test_unconfigured_provider(self):
        def unconfigured():
            raise LLMConfigurationError("OPENAI_API_KEY environment variable is required")

        app.dependency_overrides[get_ai_service] = unconfigured
        response = self.client.post("/api/ai/evaluate-response", json={"response": "hi", "context": "x"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "AI service is not configured")


class TestAiEndpoints(ApiTestCase):

    def test_generate_response(self):
        response = self.client.post("/api/ai/generate-response", json=REQUEST_BODY)
        self.assertEqual(response.status_code, 200)

        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual([o["content"] for o in body["data"]], ["Option A", "Option B", "Option C"])
        self.assertEqual(body["data"][0]["tone"], "professional")
        self.assertTrue(body["metadata"]["requestId"].startswith("req_"))
        self.assertEqual(body["metadata"]["model"], "test-model")
        self.assertIn("timestamp", body["metadata"])

    def test_generate_response_failure(self):
        self.llm.choices = LLMServiceError("provider down", 503)
        response = self.client.post("/api/ai/generate-response", json=REQUEST_BODY)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "Failed to generate response")

    def test_analyze_sentiment(self):
        self.llm.replies = [SENTIMENT_REPLY]
        response = self.client.post("/api/ai/analyze-sentiment", json={
            "message": "This is the third time I am asking!",
            "conversationContext": [{"sender": "agent", "content": "Sorry for the wait"}],
            "customerId": "cust-1",
        })

        body = response.json()
        self.assertEqual(body["data"]["label"], "negative")
        self.assertEqual(body["metadata"]["insights"]["priority"], "critical")
        self.assertTrue(body["metadata"]["insights"]["needsAttention"])
        prompt, _ = self.llm.calls[0]
        self.assertIn("Context: agent: Sorry for the wait", prompt)

    def test_analyze_sentiment_batch(self):
        self.llm.replies = [SENTIMENT_REPLY, "not json"]
        response = self.client.post("/api/ai/analyze-sentiment/batch", json={
            "messages": [{"id": "x", "text": "Awful"}, {"id": "y", "text": "Fine"}],
        })

        body = response.json()
        self.assertEqual(body["metadata"]["count"], 2)
        self.assertEqual(body["data"][0]["sentiment"]["score"], -0.85)
        self.assertEqual(body["data"][1]["sentiment"]["label"], "neutral")

    def test_empty_batch_rejected(self):
        response = self.client.post("/api/ai/analyze-sentiment/batch", json={"messages": []})
        self.assertEqual(response.status_code, 400)

    def test_evaluate_response(self):
        self.llm.replies = [QUALITY_REPLY]
        response = self.client.post("/api/ai/evaluate-response", json={
            "response": "We have refunded your order.",
            "context": "Customer asked for a refund",
        })

        body = response.json()
        self.assertEqual(body["data"]["overall"], 9)
        self.assertEqual(body["metadata"]["qualityLevel"], "excellent")
        self.assertEqual(body["metadata"]["qualityColor"], "green")

    def test_ai_health(self):
        body = self.client.get("/api/ai/health").json()
        self.assertEqual(body["status"], "operational")
        self.assertTrue(body["features"]["sentimentAnalysis"])


class TestKnowledgeEndpoints(ApiTestCase):

    def test_list_articles(self):
        body = self.client.get("/api/knowledge/articles").json()
        self.assertEqual(body["metadata"]["totalCount"], 5)
        self.assertNotIn("embedding", body["data"][0])
        self.assertIn("lastUpdated", body["data"][0])

    def test_get_article(self):
        body = self.client.get("/api/knowledge/articles/article-1").json()
        self.assertEqual(body["data"]["category"], "Returns & Refunds")

        response = self.client.get("/api/knowledge/articles/missing")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"success": False, "error": "Article not found"})

    def test_categories(self):
        body = self.client.get("/api/knowledge/categories").json()
        self.assertEqual(body["metadata"]["count"], 5)

        body = self.client.get("/api/knowledge/categories/Returns%20%26%20Refunds/articles").json()
        self.assertEqual(body["metadata"]["category"], "Returns & Refunds")
        self.assertEqual([a["id"] for a in body["data"]], ["article-1"])

    def test_create_article(self):
        response = self.client.post("/api/knowledge/articles", json={
            "title": "Gift cards",
            "content": "Gift cards never expire.",
            "category": "Billing",
            "tags": ["gift"],
        })
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()["data"]["id"].startswith("article-"))
        self.assertEqual(len(self.knowledge.articles), 6)

    def test_search(self):
        self.llm.embeddings = {"refund": [1.0, 0.0, 0.0], "How to Process Returns": [1.0, 0.1, 0.0]}
        response = self.client.post("/api/knowledge/search", json={"query": "refund", "limit": 2})

        body = response.json()
        self.assertEqual([a["id"] for a in body["data"]], ["article-1"])
        self.assertGreater(body["data"][0]["relevanceScore"], 0.9)
        self.assertEqual(body["metadata"]["query"], "refund")
        self.assertEqual(body["metadata"]["resultsCount"], 1)

    def test_search_requires_query(self):
        self.assertEqual(self.client.post("/api/knowledge/search", json={"query": ""}).status_code, 400)

    def test_knowledge_health(self):
        body = self.client.get("/api/knowledge/health").json()
        self.assertEqual(body["stats"]["totalArticles"], 5)
        self.assertEqual(body["stats"]["categories"], 5)


class TestConversationEndpoints(ApiTestCase):

    def create(self, **overrides):
        body = {
            "customerId": "cust-1",
            "category": "shipping",
            "assignedAgent": "agent-7",
            "messages": [{"content": "Where is my order?", "sender": "customer",
                          "timestamp": "2024-01-01T10:00:00Z"}],
        }
        body.update(overrides)
        response = self.client.post("/api/conversations", json=body)
        self.assertEqual(response.status_code, 201)
        return response.json()["data"]

    def test_create_and_get(self):
        created = self.create()
        self.assertEqual(created["priority"], "medium")
        self.assertEqual(created["status"], "open")

        body = self.client.get(f"/api/conversations/{created['id']}").json()
        self.assertEqual(body["data"]["customerId"], "cust-1")
        self.assertEqual(body["data"]["messages"][0]["content"], "Where is my order?")

    def test_get_missing(self):
        response = self.client.get("/api/conversations/missing")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Conversation not found")

    def test_list_with_pagination(self):
        for i in range(3):
            self.create(customerId=f"cust-{i}")
        self.create(customerId="done", status="resolved")

        body = self.client.get("/api/conversations", params={"status": "open", "pageSize": 2}).json()
        self.assertEqual(len(body["data"]), 2)
        self.assertEqual(body["metadata"]["totalCount"], 3)
        self.assertTrue(body["metadata"]["hasNextPage"])

        body = self.client.get("/api/conversations", params={"status": "open", "pageSize": 2, "page": 2}).json()
        self.assertFalse(body["metadata"]["hasNextPage"])

    def test_page_size_capped(self):
        self.assertEqual(self.client.get("/api/conversations", params={"pageSize": 500}).status_code, 400)

    def test_update(self):
        created = self.create()
        response = self.client.patch(f"/api/conversations/{created['id']}", json={"status": "resolved"})
        self.assertEqual(response.json()["data"]["status"], "resolved")

        response = self.client.patch("/api/conversations/missing", json={"status": "resolved"})
        self.assertEqual(response.status_code, 404)

    def test_add_message_with_sentiment(self):
        created = self.create()
        self.llm.replies = [SENTIMENT_REPLY]

        response = self.client.post(
            f"/api/conversations/{created['id']}/messages",
            params={"analyzeSentiment": "true"},
            json={"content": "I want a refund now", "sender": "customer"},
        )

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["data"]["sentiment"]["score"], -0.85)
        self.assertEqual(body["metadata"]["priority"], "critical")
        prompt, _ = self.llm.calls[0]
        self.assertIn("Context: customer: Where is my order?", prompt)

    def test_agent_message_not_scored(self):
        created = self.create()
        response = self.client.post(
            f"/api/conversations/{created['id']}/messages",
            params={"analyzeSentiment": "true"},
            json={"content": "Refund issued", "sender": "agent", "qualityScore": 8.5},
        )
        self.assertEqual(response.status_code, 201)
        self.assertNotIn("sentiment", response.json()["data"])
        self.assertEqual(self.llm.calls, [])

    def test_message_to_missing_conversation(self):
        response = self.client.post("/api/conversations/missing/messages", json={"content": "hi", "sender": "customer"})
        self.assertEqual(response.status_code, 404)


class TestAnalyticsEndpoints(ApiTestCase):

    def test_dashboard(self):
        for category in ("billing", "billing", "shipping"):
            self.client.post("/api/conversations", json={
                "customerId": "c",
                "category": category,
                "assignedAgent": "agent-1",
                "messages": [
                    {"content": "Help", "sender": "customer", "timestamp": "2024-01-01T10:00:00Z"},
                    {"content": "On it", "sender": "agent", "timestamp": "2024-01-01T10:01:00Z", "qualityScore": 8},
                ],
            })

        body = self.client.get("/api/analytics/dashboard").json()
        data = body["data"]
        self.assertEqual(data["totalConversations"], 3)
        self.assertEqual(data["averageResponseTime"], 60.0)
        self.assertEqual(data["topCategories"][0], {"category": "billing", "count": 2})
        self.assertEqual(data["agentPerformance"][0]["conversationsHandled"], 3)
        self.assertEqual(data["responseQualityTrend"], [{"date": "2024-01-01", "score": 8.0}])

    def test_trend_endpoints(self):
        body = self.client.get("/api/analytics/sentiment-trend", params={"days": 7}).json()
        self.assertEqual(body["data"], [])
        self.assertEqual(body["metadata"]["days"], 7)

        self.assertEqual(self.client.get("/api/analytics/quality-trend", params={"days": 0}).status_code, 400)


if __name__ == '__main__':
    unittest.main()
