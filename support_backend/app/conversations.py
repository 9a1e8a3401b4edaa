#!/usr/bin/env python3
"""
Conversation storage for the support dashboard.

This module persists support conversations and their messages with
SQLAlchemy and converts records to API models.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from .insights import higher_priority, sentiment_priority
from ..data.models import ConversationRecord, MessageRecord
from ..schemas.conversation_models import (
    Conversation,
    ConversationCreate,
    ConversationUpdate,
    MessageCreate,
)
from ..schemas.io_models import ConversationStatus, Message, Priority, SentimentData
from ..utils.logger import get_logger

logger = get_logger("conversations")


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> datetime:
    """Normalize a timestamp to naive UTC; None means now."""
    if value is None:
        return utcnow()
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ConversationStore:
    """CRUD operations over conversations and messages."""

    def __init__(self, db: Session):
        self.db = db

    def list_conversations(self, status: Optional[ConversationStatus] = None, priority: Optional[Priority] = None,
                           page: int = 1, page_size: int = 20) -> Tuple[List[ConversationRecord], int]:
        """
        List conversations, most recently updated first.

        Args:
            status: Only conversations in this status
            priority: Only conversations with this priority
            page: 1-based page number
            page_size: Conversations per page

        Returns:
            (conversations on the page, total matching conversations)
        """
        query = self.db.query(ConversationRecord)
        if status is not None:
            query = query.filter(ConversationRecord.status == status)
        if priority is not None:
            query = query.filter(ConversationRecord.priority == priority)

        total = query.count()
        items = (
            query.order_by(ConversationRecord.updated_at.desc(), ConversationRecord.id)
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return items, total

    def all_conversations(self) -> List[ConversationRecord]:
        return self.db.query(ConversationRecord).all()

    def get_conversation(self, conversation_id: str) -> Optional[ConversationRecord]:
        return self.db.get(ConversationRecord, conversation_id)

    def _new_message(self, data: MessageCreate, sentiment: Optional[SentimentData]) -> MessageRecord:
        sentiment = sentiment or data.sentiment
        return MessageRecord(
            id=str(uuid.uuid4()),
            content=data.content,
            sender=data.sender,
            timestamp=to_naive_utc(data.timestamp),
            sentiment=sentiment.model_dump(mode="json") if sentiment else None,
            sentiment_score=sentiment.score if sentiment else None,
            quality_score=data.quality_score,
            meta=data.metadata,
        )

    def create_conversation(self, data: ConversationCreate) -> ConversationRecord:
        now = utcnow()
        record = ConversationRecord(
            id=str(uuid.uuid4()),
            customer_id=data.customer_id,
            category=data.category,
            priority=data.priority,
            status=data.status,
            assigned_agent=data.assigned_agent,
            created_at=now,
            updated_at=now,
        )
        for message in data.messages:
            record.messages.append(self._new_message(message, None))

        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        logger.info("Created conversation %s for customer %s", record.id, record.customer_id)
        return record

    def update_conversation(self, conversation_id: str, data: ConversationUpdate) -> Optional[ConversationRecord]:
        record = self.get_conversation(conversation_id)
        if record is None:
            return None

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field != "assigned_agent":
                continue
            setattr(record, field, value)
        record.updated_at = utcnow()

        self.db.commit()
        self.db.refresh(record)
        return record

    def add_message(self, conversation_id: str, data: MessageCreate,
                    sentiment: Optional[SentimentData] = None) -> Optional[MessageRecord]:
        """
        Append a message to a conversation.

        Args:
            conversation_id: Target conversation
            data: Message payload
            sentiment: Sentiment computed by the caller; overrides data.sentiment

        Returns:
            The stored message, or None if the conversation does not exist
        """
        record = self.get_conversation(conversation_id)
        if record is None:
            return None

        message = self._new_message(data, sentiment)
        record.messages.append(message)
        record.updated_at = utcnow()

        if message.sentiment_score is not None:
            escalated = higher_priority(record.priority, sentiment_priority(message.sentiment_score))
            if escalated != record.priority:
                logger.info("Escalating conversation %s from %s to %s",
                            record.id, Priority(record.priority).value, escalated.value)
                record.priority = escalated

        self.db.commit()
        self.db.refresh(message)
        return message


def message_to_schema(record: MessageRecord) -> Message:
    return Message(
        id=record.id,
        content=record.content,
        sender=record.sender,
        timestamp=record.timestamp,
        sentiment=record.sentiment,
        metadata=record.meta,
    )


def conversation_to_schema(record: ConversationRecord) -> Conversation:
    return Conversation(
        id=record.id,
        customer_id=record.customer_id,
        messages=[message_to_schema(m) for m in record.messages],
        category=record.category,
        priority=record.priority,
        status=record.status,
        assigned_agent=record.assigned_agent,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )
