#!/usr/bin/env python3
"""
AI service for the support dashboard.

Reply drafting, sentiment analysis and response-quality scoring, all
delegated to the chat model. Scoring calls degrade to fixed fallback values
instead of failing the request.
"""

import time
from typing import Any, Dict, List, Optional, Sequence

from .cache import QUALITY_PREFIX, SENTIMENT_PREFIX, TTLCache, make_key
from .config import Config
from .knowledge import KnowledgeService
from .llm_client import LLMClient
from .postprocess import calculate_confidence, normalize_quality, parse_json_reply
from .prompt_builder import (
    build_quality_prompt,
    build_response_prompt,
    build_sentiment_prompt,
    format_conversation_context,
)
from ..schemas.io_models import (
    AIResponseOption,
    AIResponseRequest,
    BatchSentimentItem,
    KnowledgeArticle,
    KnowledgeSearchRequest,
    ResponseQualityScore,
    SentimentData,
    Sender,
)
from ..utils.logger import get_logger
from ..utils.security import preview

logger = get_logger("ai")

RESPONSE_OPTION_COUNT = 3
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 500
KNOWLEDGE_ARTICLE_LIMIT = 3


class AIServiceError(Exception):
    """Raised when reply generation fails."""


def neutral_sentiment() -> SentimentData:
    return SentimentData(score=0, label="neutral", confidence=0.5)


def default_quality_score() -> ResponseQualityScore:
    return ResponseQualityScore(
        overall=7,
        clarity=7,
        completeness=7,
        tone=7,
        accuracy=7,
        actionability=7,
        suggestions=["Unable to evaluate response quality"],
    )


class AIService:
    """Generates, scores and evaluates support replies through the LLM."""

    def __init__(self, llm_client: LLMClient = None, cache: Optional[TTLCache] = None,
                 knowledge_service: Optional[KnowledgeService] = None, model: str = None,
                 sentiment_model: str = None, quality_model: str = None):
        self.llm = llm_client or LLMClient()
        self.cache = cache
        self.knowledge_service = knowledge_service
        self.model = model or Config.OPENAI_MODEL
        self.sentiment_model = sentiment_model or Config.OPENAI_SENTIMENT_MODEL
        self.quality_model = quality_model or Config.OPENAI_QUALITY_MODEL

    def _knowledge_for(self, request: AIResponseRequest) -> List[KnowledgeArticle]:
        """Articles matching the latest customer message, or none."""
        if not request.include_knowledge or self.knowledge_service is None:
            return []

        customer_messages = [m for m in request.conversation_history if m.sender == Sender.customer]
        if not customer_messages:
            return []

        try:
            return self.knowledge_service.search_articles(
                KnowledgeSearchRequest(query=customer_messages[-1].content, limit=KNOWLEDGE_ARTICLE_LIMIT)
            )
        except Exception as e:
            logger.warning("Knowledge lookup for reply generation failed: %s", e)
            return []

    def generate_response(self, request: AIResponseRequest) -> List[AIResponseOption]:
        """
        Draft candidate replies for the agent.

        Args:
            request: Conversation, customer profile and tone settings

        Returns:
            One option per returned choice

        Raises:
            AIServiceError: If the provider call fails
        """
        articles = self._knowledge_for(request)
        prompt = build_response_prompt(request, articles)

        temperature = request.temperature if request.temperature is not None else DEFAULT_TEMPERATURE
        max_tokens = request.max_tokens if request.max_tokens is not None else DEFAULT_MAX_TOKENS

        logger.info(
            "Generating %d %s replies for %s tier customer (%d knowledge articles)",
            RESPONSE_OPTION_COUNT, request.tone.value, request.customer_profile.tier.value, len(articles),
        )
        try:
            choices = self.llm.chat_completion(
                prompt,
                model=self.model,
                temperature=temperature,
                max_tokens=max_tokens,
                n=RESPONSE_OPTION_COUNT,
            )
        except Exception as e:
            logger.error("Reply generation failed: %s", e)
            raise AIServiceError("Failed to generate AI response") from e

        stamp = int(time.time() * 1000)
        return [
            AIResponseOption(
                id=f"response_{stamp}_{index}",
                content=(choice.get("message") or {}).get("content") or "",
                tone=request.tone,
                confidence=calculate_confidence(choice),
            )
            for index, choice in enumerate(choices)
        ]

    def _score_sentiment(self, message: str, context: str) -> SentimentData:
        reply = self.llm.complete(
            build_sentiment_prompt(message, context),
            model=self.sentiment_model,
            temperature=0.3,
            max_tokens=200,
        )
        return SentimentData(**parse_json_reply(reply))

    def analyze_sentiment(self, message: str, context: str = "") -> SentimentData:
        """
        Score the sentiment of a customer message.

        Args:
            message: Customer message
            context: Optional "sender: content" transcript

        Returns:
            Parsed sentiment, or a neutral reading if the call or parse fails
        """
        logger.info("Analyzing sentiment for '%s'", preview(message))
        try:
            if self.cache is None:
                return self._score_sentiment(message, context)
            key = make_key(SENTIMENT_PREFIX, self.sentiment_model, message, context)
            cached = self.cache.get_or_fetch(key, lambda: self._score_sentiment(message, context).model_dump(mode="json"))
            return SentimentData(**cached)
        except Exception as e:
            logger.error("Sentiment analysis error: %s", e)
            return neutral_sentiment()

    def analyze_sentiment_batch(self, items: Sequence[BatchSentimentItem]) -> List[Dict[str, Any]]:
        results = []
        for item in items:
            context = format_conversation_context(item.context or [])
            results.append({"id": item.id, "sentiment": self.analyze_sentiment(item.text, context)})
        return results

    def _score_quality(self, response: str, context: str) -> ResponseQualityScore:
        reply = self.llm.complete(
            build_quality_prompt(response, context),
            model=self.quality_model,
            temperature=0.2,
            max_tokens=300,
        )
        return ResponseQualityScore(**normalize_quality(parse_json_reply(reply)))

    def evaluate_response_quality(self, response: str, context: str) -> ResponseQualityScore:
        """
        Score a support reply on five 1-10 criteria.

        Args:
            response: Reply text to evaluate
            context: What the reply answers

        Returns:
            Parsed scores, or neutral default scores if the call or parse fails
        """
        try:
            if self.cache is None:
                return self._score_quality(response, context)
            key = make_key(QUALITY_PREFIX, self.quality_model, response, context)
            cached = self.cache.get_or_fetch(key, lambda: self._score_quality(response, context).model_dump(mode="json"))
            return ResponseQualityScore(**cached)
        except Exception as e:
            logger.error("Quality evaluation error: %s", e)
            return default_quality_score()
