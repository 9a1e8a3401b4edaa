#!/usr/bin/env python3
"""
LLM client for the support dashboard backend.

Thin wrapper over the OpenAI-compatible REST API (chat completions and
embeddings) with retry on rate limits and transient server errors.
"""

import time
import requests
from typing import Any, Dict, List, Optional

from .config import Config
from ..utils.logger import get_logger

logger = get_logger("llm")

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class LLMConfigurationError(Exception):
    """Raised when the provider cannot be used because it is not configured."""


class LLMServiceError(Exception):
    """Raised when the provider call fails or returns an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LLMClient:
    """Client for chat completions and embeddings."""

    def __init__(self, api_key: str = None, base_url: str = None, timeout: float = None,
                 max_retries: int = None, backoff: float = None):
        self.api_key = api_key or Config.OPENAI_API_KEY
        self.base_url = (base_url or Config.OPENAI_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else Config.LLM_TIMEOUT_SECONDS
        self.max_retries = max_retries if max_retries is not None else Config.LLM_MAX_RETRIES
        self.backoff = backoff if backoff is not None else Config.LLM_RETRY_BACKOFF_SECONDS

        if not self.api_key:
            raise LLMConfigurationError("OPENAI_API_KEY environment variable is required")
        if self.max_retries < 1:
            raise LLMConfigurationError(f"max_retries must be at least 1, got {self.max_retries}")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _retry_delay(self, response: Optional[requests.Response], attempt: int) -> float:
        if response is not None and "Retry-After" in response.headers:
            try:
                return max(0.0, float(response.headers["Retry-After"]))
            except ValueError:
                pass
        return max(0.0, self.backoff * attempt)

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON payload to the provider, retrying transient failures.

        Args:
            path: Endpoint path relative to the base URL
            payload: JSON body

        Returns:
            Decoded JSON response body
        """
        url = f"{self.base_url}/{path}"
        last_err: Optional[LLMServiceError] = None

        for attempt in range(1, self.max_retries + 1):
            response = None
            try:
                response = requests.post(url, headers=self._headers(), json=payload, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                last_err = LLMServiceError(f"Request to {path} failed: {e}")
                logger.warning("Provider call to %s failed on attempt %d: %s", path, attempt, e)
            else:
                if response.status_code in RETRYABLE_STATUS:
                    last_err = LLMServiceError(
                        f"Provider returned {response.status_code} for {path}",
                        status_code=response.status_code,
                    )
                    logger.warning("Provider returned %d for %s on attempt %d", response.status_code, path, attempt)
                elif response.status_code >= 400:
                    raise LLMServiceError(
                        f"Provider returned {response.status_code} for {path}: {response.text[:200]}",
                        status_code=response.status_code,
                    )
                else:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise LLMServiceError(f"Provider returned invalid JSON for {path}") from e

            if attempt < self.max_retries:
                delay = self._retry_delay(response, attempt)
                logger.debug("Backing off for %.2fs before retrying %s", delay, path)
                time.sleep(delay)

        logger.error("Exhausted %d attempts for %s", self.max_retries, path)
        raise last_err

    def chat_completion(self, prompt: str, model: str = None, temperature: float = 0.7,
                        max_tokens: int = 500, n: int = 1) -> List[Dict[str, Any]]:
        """
        Run a single-turn chat completion.

        Args:
            prompt: User message content
            model: Model name, defaults to the configured response model
            temperature: Sampling temperature
            max_tokens: Completion token limit
            n: Number of choices to request

        Returns:
            The provider's list of choices
        """
        payload = {
            "model": model or Config.OPENAI_MODEL,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if n > 1:
            payload["n"] = n

        data = self._post("chat/completions", payload)
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise LLMServiceError("No choices in chat completion response")
        return choices

    def complete(self, prompt: str, **kwargs) -> str:
        """Return the text of the first choice."""
        choices = self.chat_completion(prompt, **kwargs)
        content = (choices[0].get("message") or {}).get("content")
        if not content:
            raise LLMServiceError("Empty chat completion response")
        return content

    def create_embedding(self, text: str, model: str = None) -> List[float]:
        """
        Embed a single text.

        Args:
            text: Text to embed
            model: Embedding model, defaults to the configured one

        Returns:
            Embedding vector as a list of floats
        """
        data = self._post("embeddings", {
            "model": model or Config.OPENAI_EMBEDDING_MODEL,
            "input": text,
        })
        try:
            return [float(x) for x in data["data"][0]["embedding"]]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMServiceError(f"Error parsing embedding response: {e}") from e
