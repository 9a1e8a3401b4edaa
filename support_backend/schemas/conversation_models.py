"""Conversation and analytics models.

- Enums are shared with the ORM layer so invalid statuses never reach the DB.
- Timestamps are optional on input; the store fills in the current UTC time.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from .io_models import (
    ApiModel,
    ConversationStatus,
    Message,
    Priority,
    SentimentData,
    Sender,
)

class MessageCreate(ApiModel):
    content: str = Field(..., min_length=1)
    sender: Sender
    timestamp: Optional[datetime] = None
    sentiment: Optional[SentimentData] = None
    quality_score: Optional[float] = Field(None, ge=0, le=10)
    metadata: Optional[Dict[str, Any]] = None

class ConversationCreate(ApiModel):
    customer_id: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    priority: Priority = Priority.medium
    status: ConversationStatus = ConversationStatus.open
    assigned_agent: Optional[str] = None
    messages: List[MessageCreate] = Field(default_factory=list)

class ConversationUpdate(ApiModel):
    category: Optional[str] = Field(None, min_length=1)
    priority: Optional[Priority] = None
    status: Optional[ConversationStatus] = None
    assigned_agent: Optional[str] = None

class Conversation(ApiModel):
    id: str
    customer_id: str
    messages: List[Message] = Field(default_factory=list)
    category: str
    priority: Priority
    status: ConversationStatus
    assigned_agent: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TrendPoint(ApiModel):
    date: str
    score: float

class CategoryCount(ApiModel):
    category: str
    count: int

class AgentPerformance(ApiModel):
    agent_id: str
    name: str
    avg_quality: float
    response_time: float
    conversations_handled: int

class AnalyticsData(ApiModel):
    total_conversations: int
    average_response_time: float
    sentiment_trend: List[TrendPoint] = Field(default_factory=list)
    response_quality_trend: List[TrendPoint] = Field(default_factory=list)
    top_categories: List[CategoryCount] = Field(default_factory=list)
    agent_performance: List[AgentPerformance] = Field(default_factory=list)
