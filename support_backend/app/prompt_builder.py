#!/usr/bin/env python3
"""
Prompt builder module for the support dashboard.

This module constructs the reply-generation, sentiment and quality prompts
sent to the LLM.
"""

from typing import Any, Iterable, Sequence

from ..schemas.io_models import AIResponseRequest, KnowledgeArticle, Message, ResponseTone

RECENT_MESSAGE_COUNT = 5

TONE_INSTRUCTIONS = {
    ResponseTone.professional: "Use formal language, be respectful and authoritative. Avoid casual expressions.",
    ResponseTone.casual: "Use friendly, conversational language. Be approachable and relatable.",
    ResponseTone.empathetic: "Show understanding and compassion. Acknowledge emotions and provide reassurance.",
    ResponseTone.technical: "Use precise, detailed explanations. Include technical terms when appropriate.",
}

SENTIMENT_SCHEMA = """{
  "score": -1 to 1 (negative to positive),
  "label": "positive" | "neutral" | "negative",
  "confidence": 0 to 1,
  "emotions": {
    "anger": 0 to 1,
    "joy": 0 to 1,
    "fear": 0 to 1,
    "sadness": 0 to 1,
    "surprise": 0 to 1
  }
}"""

QUALITY_SCHEMA = """{
  "overall": average of all scores,
  "clarity": 1-10,
  "completeness": 1-10,
  "tone": 1-10,
  "accuracy": 1-10,
  "actionability": 1-10,
  "suggestions": ["suggestion1", "suggestion2"]
}"""


def get_tone_instructions(tone) -> str:
    try:
        tone = ResponseTone(tone)
    except ValueError:
        return TONE_INSTRUCTIONS[ResponseTone.professional]
    return TONE_INSTRUCTIONS[tone]


def _enum_value(value) -> str:
    return getattr(value, "value", value)


def format_conversation_context(items: Iterable[Any]) -> str:
    """
    Render conversation entries as "sender: content" lines.

    Args:
        items: Message models or dicts with sender/content keys

    Returns:
        Newline-joined transcript; entries of any other shape are skipped
    """
    lines = []
    for item in items or []:
        if isinstance(item, Message):
            lines.append(f"{item.sender.value}: {item.content}")
        elif isinstance(item, dict) and "content" in item:
            lines.append(f"{item.get('sender', 'unknown')}: {item['content']}")
    return "\n".join(lines)


def _format_articles(articles: Sequence[KnowledgeArticle]) -> str:
    blocks = []
    for i, article in enumerate(articles, 1):
        blocks.append(f"Article {i} ({article.category}): {article.title}\n{article.content}")
    return "\n\n".join(blocks)


def build_response_prompt(request: AIResponseRequest, knowledge_articles: Sequence[KnowledgeArticle] = ()) -> str:
    """
    Build the prompt for drafting an agent reply.

    Args:
        request: Reply generation request
        knowledge_articles: Articles to ground the reply in, used only when
            the request asks for knowledge

    Returns:
        Complete prompt text
    """
    profile = request.customer_profile
    tone = _enum_value(request.tone)
    tier = _enum_value(profile.tier)

    messages_context = format_conversation_context(request.conversation_history[-RECENT_MESSAGE_COUNT:])

    knowledge_section = ""
    if request.include_knowledge:
        knowledge_section = "Include relevant knowledge base information if applicable."
        if knowledge_articles:
            knowledge_section += f"\n\nKnowledge Base:\n{_format_articles(knowledge_articles)}"

    return f"""You are an AI assistant helping a customer support agent craft responses.

Customer Profile:
- Name: {profile.name}
- Tier: {tier}
- Previous interactions: {profile.previous_interactions}
- Preferred tone: {_enum_value(profile.preferred_tone)}

Recent Conversation:
{messages_context}

Instructions:
{get_tone_instructions(request.tone)}

Task: Generate a {tone} response that:
1. Acknowledges the customer's concern
2. Provides a helpful solution
3. Maintains appropriate tone for {tier} tier customer
4. Includes clear next steps

{knowledge_section}

Response:"""


def build_sentiment_prompt(message: str, context: str = "") -> str:
    context_line = f"Context: {context}\n" if context else ""
    return f"""Analyze the sentiment of this customer message. Respond with ONLY a valid JSON object, no markdown formatting or code blocks.

Required JSON structure:
{SENTIMENT_SCHEMA}

{context_line}Message: "{message}\""""


def build_quality_prompt(response: str, context: str) -> str:
    return f"""Evaluate this customer support response on the following criteria (1-10 scale). Respond with ONLY a valid JSON object, no markdown formatting or code blocks.

Required JSON structure:
{QUALITY_SCHEMA}

Context: {context}
Response: "{response}\""""
