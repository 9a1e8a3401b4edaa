"""Lazily built service singletons, exposed as FastAPI dependencies.

Services are constructed on first use so the app starts without provider
credentials; a missing key surfaces as LLMConfigurationError on the first
request that needs the provider.
"""
import threading

from .ai_service import AIService
from .cache import TTLCache, create_cache
from .knowledge import KnowledgeService
from .llm_client import LLMClient
from .rate_limit import RateLimiter

_lock = threading.RLock()
_instances = {}

rate_limiter = RateLimiter()


def _singleton(name, factory):
    with _lock:
        if name not in _instances:
            _instances[name] = factory()
        return _instances[name]


def get_cache() -> TTLCache:
    return _singleton("cache", create_cache)


def get_llm_client() -> LLMClient:
    return _singleton("llm", LLMClient)


def get_knowledge_service() -> KnowledgeService:
    return _singleton("knowledge", lambda: KnowledgeService(llm_client=get_llm_client(), cache=get_cache()))


def get_ai_service() -> AIService:
    return _singleton("ai", lambda: AIService(
        llm_client=get_llm_client(),
        cache=get_cache(),
        knowledge_service=get_knowledge_service(),
    ))


def get_ai_service_provider():
    """Deferred access to the AI service for routes that only sometimes need it."""
    return get_ai_service
