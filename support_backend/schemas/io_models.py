"""Pydantic models for the AI and knowledge-base API.

Attributes are snake_case in Python and camelCase on the wire; every model
accepts either spelling on input.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self, **kwargs) -> Dict[str, Any]:
        """JSON-ready dict with camelCase keys and unset optionals dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True, **kwargs)


class Sender(str, Enum):
    customer = "customer"
    agent = "agent"
    ai = "ai"

class CustomerTier(str, Enum):
    basic = "basic"
    premium = "premium"
    enterprise = "enterprise"

class ResponseTone(str, Enum):
    professional = "professional"
    casual = "casual"
    empathetic = "empathetic"
    technical = "technical"

class Priority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"

class ConversationStatus(str, Enum):
    open = "open"
    in_progress = "in_progress"
    resolved = "resolved"
    closed = "closed"

class SentimentLabel(str, Enum):
    positive = "positive"
    neutral = "neutral"
    negative = "negative"


class Emotions(ApiModel):
    anger: float = Field(0.0, ge=0, le=1)
    joy: float = Field(0.0, ge=0, le=1)
    fear: float = Field(0.0, ge=0, le=1)
    sadness: float = Field(0.0, ge=0, le=1)
    surprise: float = Field(0.0, ge=0, le=1)

class SentimentData(ApiModel):
    score: float = Field(..., ge=-1, le=1)
    label: SentimentLabel
    confidence: float = Field(..., ge=0, le=1)
    emotions: Emotions = Field(default_factory=Emotions)

class Message(ApiModel):
    id: str
    content: str
    sender: Sender
    timestamp: datetime
    sentiment: Optional[Any] = None
    metadata: Optional[Dict[str, Any]] = None

class CustomerProfile(ApiModel):
    id: str
    name: str
    email: str
    tier: CustomerTier
    previous_interactions: int
    average_sentiment: float
    preferred_tone: ResponseTone

class ResponseQualityScore(ApiModel):
    overall: float
    clarity: float
    completeness: float
    tone: float
    accuracy: float
    actionability: float
    suggestions: List[str] = Field(default_factory=list)

class AIResponseRequest(ApiModel):
    conversation_history: List[Message]
    customer_profile: CustomerProfile
    tone: ResponseTone
    include_knowledge: bool
    max_tokens: Optional[int] = Field(None, gt=0)
    temperature: Optional[float] = Field(None, ge=0, le=2)

class AIResponseOption(ApiModel):
    id: str
    content: str
    tone: ResponseTone
    confidence: float
    quality_score: Optional[ResponseQualityScore] = None

class SentimentRequest(ApiModel):
    message: str
    conversation_context: Optional[List[Any]] = None
    customer_id: str

class BatchSentimentItem(ApiModel):
    id: str
    text: str
    context: Optional[List[Any]] = None

class BatchSentimentRequest(ApiModel):
    messages: List[BatchSentimentItem] = Field(..., min_length=1)

class EvaluateResponseRequest(ApiModel):
    response: str
    context: str


class KnowledgeArticle(ApiModel):
    id: str
    title: str
    content: str
    category: str
    tags: List[str] = Field(default_factory=list)
    relevance_score: Optional[float] = None
    last_updated: datetime
    embedding: Optional[List[float]] = None

class KnowledgeSearchRequest(ApiModel):
    query: str = Field(..., min_length=1)
    limit: int = Field(5, ge=1)
    categories: Optional[List[str]] = None
    min_relevance: float = Field(0.7, ge=0, le=1)

class ArticleCreate(ApiModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
