"""Conversation routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..ai_service import AIService
from ..conversations import ConversationStore, conversation_to_schema, message_to_schema
from ..dependencies import get_ai_service_provider
from ..prompt_builder import format_conversation_context
from ..responses import failure, success
from ...data.database import get_db
from ...schemas.conversation_models import ConversationCreate, ConversationUpdate, MessageCreate
from ...schemas.io_models import ConversationStatus, Priority, Sender
from ...utils.logger import get_logger

logger = get_logger("routes.conversations")

router = APIRouter(prefix="/api/conversations", tags=["conversations"])

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
SENTIMENT_CONTEXT_MESSAGES = 5


@router.get("")
def list_conversations(
    status: Optional[ConversationStatus] = None,
    priority: Optional[Priority] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, alias="pageSize"),
    db: Session = Depends(get_db),
):
    items, total = ConversationStore(db).list_conversations(status, priority, page, page_size)
    return success(
        [conversation_to_schema(c) for c in items],
        page=page,
        pageSize=page_size,
        totalCount=total,
        hasNextPage=page * page_size < total,
    )


@router.post("", status_code=201)
def create_conversation(data: ConversationCreate, db: Session = Depends(get_db)):
    record = ConversationStore(db).create_conversation(data)
    return success(conversation_to_schema(record))


@router.get("/{conversation_id}")
def get_conversation(conversation_id: str, db: Session = Depends(get_db)):
    record = ConversationStore(db).get_conversation(conversation_id)
    if record is None:
        return failure(404, "Conversation not found")
    return success(conversation_to_schema(record))


@router.patch("/{conversation_id}")
def update_conversation(conversation_id: str, data: ConversationUpdate, db: Session = Depends(get_db)):
    record = ConversationStore(db).update_conversation(conversation_id, data)
    if record is None:
        return failure(404, "Conversation not found")
    return success(conversation_to_schema(record))


def _analyze(service: AIService, store: ConversationStore, conversation_id: str, data: MessageCreate):
    record = store.get_conversation(conversation_id)
    history = [
        {"sender": Sender(m.sender).value, "content": m.content}
        for m in record.messages[-SENTIMENT_CONTEXT_MESSAGES:]
    ]
    return service.analyze_sentiment(data.content, format_conversation_context(history))


@router.post("/{conversation_id}/messages", status_code=201)
def add_message(
    conversation_id: str,
    data: MessageCreate,
    analyze_sentiment: bool = Query(False, alias="analyzeSentiment"),
    db: Session = Depends(get_db),
    ai_service_provider=Depends(get_ai_service_provider),
):
    store = ConversationStore(db)
    if store.get_conversation(conversation_id) is None:
        return failure(404, "Conversation not found")

    sentiment = None
    if analyze_sentiment and data.sender == Sender.customer and data.sentiment is None:
        try:
            sentiment = _analyze(ai_service_provider(), store, conversation_id, data)
        except Exception as e:
            # message is still stored, just without a score
            logger.error("Sentiment scoring for conversation %s failed: %s", conversation_id, e)

    message = store.add_message(conversation_id, data, sentiment)
    record = store.get_conversation(conversation_id)
    return success(
        message_to_schema(message),
        conversationId=conversation_id,
        priority=Priority(record.priority).value,
    )
