from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Enum, JSON, Text
from sqlalchemy.orm import relationship

from .database import Base
from ..schemas.io_models import ConversationStatus, Priority, Sender

class ConversationRecord(Base):
    __tablename__ = "conversations"

    id = Column(String, primary_key=True, index=True)
    customer_id = Column(String, index=True, nullable=False)
    category = Column(String, nullable=False)
    priority = Column(Enum(Priority), nullable=False, default=Priority.medium)
    status = Column(Enum(ConversationStatus), nullable=False, default=ConversationStatus.open)
    assigned_agent = Column(String, index=True, nullable=True)
    created_at = Column(DateTime, nullable=False)  # naive UTC
    updated_at = Column(DateTime, nullable=False)

    messages = relationship(
        "MessageRecord",
        back_populates="conversation",
        order_by="MessageRecord.timestamp",
        cascade="all, delete-orphan",
    )

class MessageRecord(Base):
    __tablename__ = "messages"

    id = Column(String, primary_key=True, index=True)
    conversation_id = Column(String, ForeignKey("conversations.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    sender = Column(Enum(Sender), nullable=False)
    timestamp = Column(DateTime, nullable=False)
    sentiment = Column(JSON, nullable=True)  # full SentimentData payload
    sentiment_score = Column(Float, nullable=True)
    quality_score = Column(Float, nullable=True)
    meta = Column("metadata", JSON, nullable=True)

    conversation = relationship("ConversationRecord", back_populates="messages")
