#!/usr/bin/env python3
"""
Configuration management for the support dashboard backend.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Config:
    """Configuration class for the application."""

    # OpenAI-compatible provider
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4-turbo-preview")
    OPENAI_SENTIMENT_MODEL = os.getenv("OPENAI_SENTIMENT_MODEL", "gpt-3.5-turbo")
    OPENAI_QUALITY_MODEL = os.getenv("OPENAI_QUALITY_MODEL", "gpt-4-turbo-preview")
    OPENAI_EMBEDDING_MODEL = os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small")

    # Outbound call policy
    LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", 30))
    LLM_MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", 3))
    LLM_RETRY_BACKOFF_SECONDS = float(os.getenv("LLM_RETRY_BACKOFF_SECONDS", 2.0))
    EMBEDDING_DELAY_SECONDS = float(os.getenv("EMBEDDING_DELAY_SECONDS", 0.1))

    # HTTP server
    PORT = int(os.getenv("PORT", 3001))
    CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:3000")
    RATE_LIMIT_WINDOW_MS = int(os.getenv("RATE_LIMIT_WINDOW_MS", 900000))  # 15 minutes
    RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", 100))
    API_VERSION = "1.0.0"

    # Cache Configuration
    CACHE_BACKEND = os.getenv("CACHE_BACKEND", "memory").lower()
    CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", 300))
    CACHE_STALE_GRACE_SECONDS = int(os.getenv("CACHE_STALE_GRACE_SECONDS", 3600))

    # Redis Configuration
    REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))
    REDIS_DB = int(os.getenv("REDIS_DB", 0))

    # Database Configuration
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./support_dashboard.db")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def summary(cls) -> dict:
        """Non-secret view of the active settings, for startup logging."""
        return {
            "model": cls.OPENAI_MODEL,
            "sentiment_model": cls.OPENAI_SENTIMENT_MODEL,
            "quality_model": cls.OPENAI_QUALITY_MODEL,
            "embedding_model": cls.OPENAI_EMBEDDING_MODEL,
            "api_key_set": bool(cls.OPENAI_API_KEY),
            "cache_backend": cls.CACHE_BACKEND,
            "database_url": cls.DATABASE_URL,
            "cors_origin": cls.CORS_ORIGIN,
        }

    @classmethod
    def validate(cls):
        """Validate settings that would otherwise fail at request time."""
        problems = []

        if cls.CACHE_BACKEND not in ("memory", "redis"):
            problems.append(f"CACHE_BACKEND must be 'memory' or 'redis', got '{cls.CACHE_BACKEND}'")
        if cls.RATE_LIMIT_WINDOW_MS <= 0:
            problems.append("RATE_LIMIT_WINDOW_MS must be positive")
        if cls.RATE_LIMIT_MAX_REQUESTS <= 0:
            problems.append("RATE_LIMIT_MAX_REQUESTS must be positive")
        if cls.LLM_MAX_RETRIES < 1:
            problems.append("LLM_MAX_RETRIES must be at least 1")

        if problems:
            raise ValueError(f"Invalid configuration: {'; '.join(problems)}")

        return True
