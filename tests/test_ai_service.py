#!/usr/bin/env python3
"""
AI Service Tests

TEST COVERAGE:
    - Reply generation defaults, ids and failures
    - Knowledge lookup for replies
    - Sentiment and quality scoring with fallbacks and caching
"""

import sys
import os
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from support_backend.app.ai_service import AIService, AIServiceError
from support_backend.app.cache import MemoryBackend, TTLCache
from support_backend.app.llm_client import LLMServiceError
from support_backend.schemas.io_models import BatchSentimentItem, SentimentLabel
from fakes import FakeLLM, make_article, make_choices, make_message, make_request

SENTIMENT_REPLY = '{"score": -0.6, "label": "negative", "confidence": 0.9, "emotions": {"anger": 0.7}}'
QUALITY_REPLY = ('{"clarity": 8, "completeness": 7, "tone": 9, "accuracy": 8, "actionability": 6, '
                 '"suggestions": ["Add a timeline"]}')


class FakeKnowledge:
    def __init__(self, articles=None, error=None):
        self.articles = articles or []
        self.error = error
        self.requests = []

    def search_articles(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.articles


def make_service(llm, cache=None, knowledge=None):
    return AIService(llm_client=llm, cache=cache, knowledge_service=knowledge,
                     model="reply-model", sentiment_model="sentiment-model", quality_model="quality-model")


class TestGenerateResponse(unittest.TestCase):

    def test_three_options(self):
        llm = FakeLLM(choices=make_choices("Sorry about that", "We can help", "Let me check"))
        options = make_service(llm).generate_response(make_request())

        self.assertEqual([o.content for o in options], ["Sorry about that", "We can help", "Let me check"])
        self.assertTrue(all(o.id.startswith("response_") for o in options))
        self.assertEqual(len({o.id for o in options}), 3)
        self.assertTrue(all(o.tone.value == "empathetic" for o in options))

        _, kwargs = llm.calls[0]
        self.assertEqual(kwargs, {"model": "reply-model", "temperature": 0.7, "max_tokens": 500, "n": 3})

    def test_explicit_zero_temperature_is_kept(self):
        llm = FakeLLM(choices=make_choices("ok"))
        make_service(llm).generate_response(make_request(temperature=0, max_tokens=120))

        _, kwargs = llm.calls[0]
        self.assertEqual(kwargs["temperature"], 0)
        self.assertEqual(kwargs["max_tokens"], 120)

    def test_provider_failure(self):
        llm = FakeLLM(choices=LLMServiceError("boom", 503))
        with self.assertRaises(AIServiceError) as ctx:
            make_service(llm).generate_response(make_request())
        self.assertEqual(str(ctx.exception), "Failed to generate AI response")

    def test_knowledge_articles_in_prompt(self):
        knowledge = FakeKnowledge([make_article("a1", "Damaged item replacement", "Returns")])
        llm = FakeLLM(choices=make_choices("ok"))
        messages = [
            make_message("Hi", "customer", 0),
            make_message("Hello, how can I help?", "agent", 1),
            make_message("The vase arrived broken", "customer", 2),
        ]

        make_service(llm, knowledge=knowledge).generate_response(make_request(messages, include_knowledge=True))

        self.assertEqual(knowledge.requests[0].query, "The vase arrived broken")
        self.assertEqual(knowledge.requests[0].limit, 3)
        prompt, _ = llm.calls[0]
        self.assertIn("Damaged item replacement", prompt)

    def test_knowledge_skipped_when_not_requested(self):
        knowledge = FakeKnowledge([make_article("a1", "Damaged item replacement", "Returns")])
        llm = FakeLLM(choices=make_choices("ok"))
        make_service(llm, knowledge=knowledge).generate_response(make_request(include_knowledge=False))
        self.assertEqual(knowledge.requests, [])

    def test_knowledge_failure_does_not_block_reply(self):
        knowledge = FakeKnowledge(error=RuntimeError("index down"))
        llm = FakeLLM(choices=make_choices("ok"))
        options = make_service(llm, knowledge=knowledge).generate_response(make_request(include_knowledge=True))
        self.assertEqual(len(options), 1)


class TestSentiment(unittest.TestCase):

    def test_parses_reply(self):
        llm = FakeLLM(replies=[SENTIMENT_REPLY])
        sentiment = make_service(llm).analyze_sentiment("This is unacceptable", "agent: Hello")

        self.assertEqual(sentiment.score, -0.6)
        self.assertEqual(sentiment.label, SentimentLabel.negative)
        self.assertEqual(sentiment.emotions.anger, 0.7)
        prompt, kwargs = llm.calls[0]
        self.assertIn("Context: agent: Hello", prompt)
        self.assertEqual(kwargs, {"model": "sentiment-model", "temperature": 0.3, "max_tokens": 200})

    def test_unparseable_reply_falls_back_to_neutral(self):
        sentiment = make_service(FakeLLM(replies=["not json"])).analyze_sentiment("hmm")
        self.assertEqual((sentiment.score, sentiment.label.value, sentiment.confidence), (0, "neutral", 0.5))

    def test_out_of_range_score_falls_back(self):
        reply = '{"score": 4, "label": "positive", "confidence": 0.9}'
        sentiment = make_service(FakeLLM(replies=[reply])).analyze_sentiment("great")
        self.assertEqual(sentiment.label.value, "neutral")

    def test_cached_by_message_and_context(self):
        llm = FakeLLM(replies=[SENTIMENT_REPLY, SENTIMENT_REPLY])
        service = make_service(llm, cache=TTLCache(MemoryBackend(), default_ttl=300))

        first = service.analyze_sentiment("Where is my refund?")
        second = service.analyze_sentiment("Where is my refund?")
        self.assertEqual(first, second)
        self.assertEqual(len(llm.calls), 1)

        service.analyze_sentiment("Where is my refund?", "agent: Hi")
        self.assertEqual(len(llm.calls), 2)

    def test_fallback_is_not_cached(self):
        llm = FakeLLM(replies=[LLMServiceError("down"), SENTIMENT_REPLY])
        service = make_service(llm, cache=TTLCache(MemoryBackend(), default_ttl=300))

        self.assertEqual(service.analyze_sentiment("Still waiting").label.value, "neutral")
        self.assertEqual(service.analyze_sentiment("Still waiting").label.value, "negative")

    def test_batch(self):
        llm = FakeLLM(replies=[SENTIMENT_REPLY, "garbage"])
        items = [
            BatchSentimentItem(id="a", text="Terrible", context=[{"sender": "agent", "content": "Hi"}]),
            BatchSentimentItem(id="b", text="Okay"),
        ]
        results = make_service(llm).analyze_sentiment_batch(items)

        self.assertEqual([r["id"] for r in results], ["a", "b"])
        self.assertEqual(results[0]["sentiment"].score, -0.6)
        self.assertEqual(results[1]["sentiment"].score, 0)


class TestQuality(unittest.TestCase):

    def test_overall_computed_when_missing(self):
        llm = FakeLLM(replies=[QUALITY_REPLY])
        score = make_service(llm).evaluate_response_quality("We will ship today.", "Late order")

        self.assertEqual(score.overall, 7.6)
        self.assertEqual(score.suggestions, ["Add a timeline"])
        _, kwargs = llm.calls[0]
        self.assertEqual(kwargs, {"model": "quality-model", "temperature": 0.2, "max_tokens": 300})

    def test_failure_returns_default_scores(self):
        score = make_service(FakeLLM(replies=[LLMServiceError("down")])).evaluate_response_quality("x", "y")
        self.assertEqual(score.overall, 7)
        self.assertEqual(score.actionability, 7)
        self.assertEqual(score.suggestions, ["Unable to evaluate response quality"])


if __name__ == '__main__':
    unittest.main()
