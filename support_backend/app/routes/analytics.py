"""Analytics routes computed over stored conversations."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..analytics import build_dashboard, quality_trend, sentiment_trend
from ..conversations import ConversationStore
from ..responses import success
from ...data.database import get_db

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/dashboard")
def dashboard(days: Optional[int] = Query(None, ge=1), db: Session = Depends(get_db)):
    conversations = ConversationStore(db).all_conversations()
    return success(build_dashboard(conversations, days), days=days)


@router.get("/sentiment-trend")
def get_sentiment_trend(days: Optional[int] = Query(None, ge=1), db: Session = Depends(get_db)):
    points = sentiment_trend(ConversationStore(db).all_conversations(), days)
    return success(points, days=days, count=len(points))


@router.get("/quality-trend")
def get_quality_trend(days: Optional[int] = Query(None, ge=1), db: Session = Depends(get_db)):
    points = quality_trend(ConversationStore(db).all_conversations(), days)
    return success(points, days=days, count=len(points))
