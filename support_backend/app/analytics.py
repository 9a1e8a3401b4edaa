"""Dashboard analytics computed from stored conversations.

Every function takes plain conversation records, so they work the same on
ORM rows and on test doubles with matching attributes.
"""
from collections import OrderedDict, defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from ..schemas.conversation_models import AgentPerformance, AnalyticsData, CategoryCount, TrendPoint
from ..schemas.io_models import Sender

RESPONDERS = (Sender.agent, Sender.ai)


def _sender(message) -> Sender:
    return Sender(message.sender)


def _response_times(conversation) -> List[float]:
    """Seconds from each customer message to the next agent/ai message."""
    times = []
    waiting_since = None
    for message in sorted(conversation.messages, key=lambda m: m.timestamp):
        sender = _sender(message)
        if sender == Sender.customer:
            if waiting_since is None:
                waiting_since = message.timestamp
        elif sender in RESPONDERS and waiting_since is not None:
            times.append((message.timestamp - waiting_since).total_seconds())
            waiting_since = None
    return times


def _mean(values: List[float]) -> float:
    return round(sum(values) / len(values), 2) if values else 0.0


def average_response_time(conversations: Iterable) -> float:
    times = []
    for conversation in conversations:
        times.extend(_response_times(conversation))
    return _mean(times)


def _utc_today() -> date:
    # stored timestamps are naive UTC
    return datetime.now(timezone.utc).date()


def _daily_trend(conversations: Iterable, attribute: str, days: Optional[int], today: Optional[date]) -> List[TrendPoint]:
    cutoff = None
    if days is not None:
        cutoff = (today or _utc_today()) - timedelta(days=days - 1)

    buckets: Dict[str, List[float]] = defaultdict(list)
    for conversation in conversations:
        for message in conversation.messages:
            value = getattr(message, attribute)
            if value is None:
                continue
            day = message.timestamp.date()
            if cutoff is not None and day < cutoff:
                continue
            buckets[day.isoformat()].append(value)

    return [TrendPoint(date=day, score=_mean(values)) for day, values in sorted(buckets.items())]


def sentiment_trend(conversations: Iterable, days: Optional[int] = None, today: Optional[date] = None) -> List[TrendPoint]:
    return _daily_trend(conversations, "sentiment_score", days, today)


def quality_trend(conversations: Iterable, days: Optional[int] = None, today: Optional[date] = None) -> List[TrendPoint]:
    return _daily_trend(conversations, "quality_score", days, today)


def top_categories(conversations: Iterable, limit: int = 5) -> List[CategoryCount]:
    counts: Dict[str, int] = OrderedDict()
    for conversation in conversations:
        counts[conversation.category] = counts.get(conversation.category, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [CategoryCount(category=c, count=n) for c, n in ranked[:limit]]


def agent_performance(conversations: Iterable) -> List[AgentPerformance]:
    by_agent = OrderedDict()
    for conversation in conversations:
        if conversation.assigned_agent:
            by_agent.setdefault(conversation.assigned_agent, []).append(conversation)

    results = []
    for agent_id, handled in by_agent.items():
        qualities = [
            m.quality_score
            for c in handled
            for m in c.messages
            if _sender(m) in RESPONDERS and m.quality_score is not None
        ]
        results.append(AgentPerformance(
            agent_id=agent_id,
            name=agent_id,
            avg_quality=_mean(qualities),
            response_time=average_response_time(handled),
            conversations_handled=len(handled),
        ))
    return results


def build_dashboard(conversations: Iterable, days: Optional[int] = None, today: Optional[date] = None) -> AnalyticsData:
    conversations = list(conversations)
    return AnalyticsData(
        total_conversations=len(conversations),
        average_response_time=average_response_time(conversations),
        sentiment_trend=sentiment_trend(conversations, days, today),
        response_quality_trend=quality_trend(conversations, days, today),
        top_categories=top_categories(conversations),
        agent_performance=agent_performance(conversations),
    )
