"""SQLAlchemy engine, session factory and declarative base for conversation storage."""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from ..app.config import Config
from ..utils.logger import get_logger

logger = get_logger("db")

def build_engine(database_url: str = None):
    """Create an engine; SQLite connections are shared across request threads."""
    url = database_url or Config.DATABASE_URL
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)

engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """Request-scoped session, closed once the response is done."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

def create_tables(bind=None):
    """Create the conversation and message tables if they are missing."""
    # models register themselves on Base.metadata when imported
    from .models import ConversationRecord, MessageRecord  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Conversation tables ready on %s", (bind or engine).url)

if __name__ == "__main__":
    create_tables()
