"""Derived labels for sentiment and quality scores."""
from typing import Any, Dict

from ..schemas.io_models import Priority, SentimentData

SENTIMENT_THRESHOLDS = {
    "critical": -0.8,
    "negative": -0.3,
    "neutral_low": -0.1,
    "neutral_high": 0.1,
    "positive": 0.3,
}

QUALITY_SCORE_THRESHOLDS = {
    "excellent": 8.5,
    "good": 7.0,
    "fair": 5.5,
    "poor": 4.0,
}

PRIORITY_RANK = {
    Priority.low: 0,
    Priority.medium: 1,
    Priority.high: 2,
    Priority.critical: 3,
}


def sentiment_priority(score: float) -> Priority:
    if score <= SENTIMENT_THRESHOLDS["critical"]:
        return Priority.critical
    if score <= SENTIMENT_THRESHOLDS["negative"]:
        return Priority.high
    if score <= SENTIMENT_THRESHOLDS["neutral_low"]:
        return Priority.medium
    return Priority.low


def describe_sentiment(sentiment: SentimentData) -> Dict[str, Any]:
    score = sentiment.score

    if score <= SENTIMENT_THRESHOLDS["negative"]:
        color = "red"
    elif score <= SENTIMENT_THRESHOLDS["neutral_high"]:
        color = "yellow"
    else:
        color = "green"

    # single reading, so the trend is only a hint
    if sentiment.confidence < 0.5:
        trend = "stable"
    elif score > 0:
        trend = "improving"
    elif score < SENTIMENT_THRESHOLDS["negative"]:
        trend = "declining"
    else:
        trend = "stable"

    return {
        "priority": sentiment_priority(score).value,
        "color": color,
        "trend": trend,
        "isPositive": score > SENTIMENT_THRESHOLDS["positive"],
        "isNegative": score < SENTIMENT_THRESHOLDS["negative"],
        "isCritical": score <= SENTIMENT_THRESHOLDS["critical"],
        "needsAttention": score <= SENTIMENT_THRESHOLDS["negative"],
    }


def quality_level(score: float) -> str:
    if score >= QUALITY_SCORE_THRESHOLDS["excellent"]:
        return "excellent"
    if score >= QUALITY_SCORE_THRESHOLDS["good"]:
        return "good"
    if score >= QUALITY_SCORE_THRESHOLDS["fair"]:
        return "fair"
    return "poor"


def quality_color(score: float) -> str:
    return {"excellent": "green", "good": "blue", "fair": "yellow", "poor": "red"}[quality_level(score)]


def higher_priority(current: Priority, candidate: Priority) -> Priority:
    """The more urgent of two priorities."""
    if PRIORITY_RANK[Priority(candidate)] > PRIORITY_RANK[Priority(current)]:
        return Priority(candidate)
    return Priority(current)
