#!/usr/bin/env python3
"""
HTTP client for the support dashboard API.

Wraps the AI and knowledge endpoints and normalizes every failure into
APIError(code, message, details).
"""

import os
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

DEFAULT_BASE_URL = os.getenv("SUPPORT_API_BASE_URL", "http://localhost:3001/api")


class APIError(Exception):
    """Normalized API failure."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details if details is not None else {}

    def __repr__(self):
        return f"APIError(code={self.code!r}, message={self.message!r})"


def _error_from_response(response: requests.Response) -> APIError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = body.get("error") or response.reason or "An error occurred"
    details = body.get("details") or {}
    return APIError(str(response.status_code), message, details)


class SupportApiClient:
    """Client for the AI and knowledge-base endpoints."""

    def __init__(self, base_url: str = None, timeout: float = 30):
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout

    def _request(self, method: str, path: str, json: Any = None) -> Dict[str, Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = requests.request(
                method,
                url,
                json=json,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise APIError("UNKNOWN", str(e) or "An error occurred") from e

        if response.status_code >= 400:
            raise _error_from_response(response)
        try:
            return response.json()
        except ValueError as e:
            raise APIError(str(response.status_code), "Invalid JSON in response") from e

    def _data(self, method: str, path: str, json: Any = None) -> Any:
        return self._request(method, path, json)["data"]

    # AI endpoints

    def generate_response(self, request: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        Draft reply options.

        Args:
            request: AIResponseRequest body (camelCase keys)

        Returns:
            List of reply options
        """
        return self._data("POST", "/ai/generate-response", request)

    def analyze_sentiment(self, message: str, conversation_context: Optional[List[Any]] = None,
                          customer_id: str = "anonymous") -> Dict[str, Any]:
        body = {
            "message": message,
            "conversationContext": conversation_context,
            "customerId": customer_id,
        }
        return self._data("POST", "/ai/analyze-sentiment", body)

    def evaluate_response(self, response_text: str, context: str) -> Dict[str, Any]:
        return self._data("POST", "/ai/evaluate-response", {"response": response_text, "context": context})

    def ai_health_check(self) -> Dict[str, Any]:
        return self._request("GET", "/ai/health")

    # Knowledge endpoints

    def search_articles(self, query: str, limit: int = None, categories: Optional[List[str]] = None,
                        min_relevance: float = None) -> List[Dict[str, Any]]:
        body: Dict[str, Any] = {"query": query}
        if limit is not None:
            body["limit"] = limit
        if categories is not None:
            body["categories"] = categories
        if min_relevance is not None:
            body["minRelevance"] = min_relevance
        return self._data("POST", "/knowledge/search", body)

    def get_all_articles(self) -> List[Dict[str, Any]]:
        return self._data("GET", "/knowledge/articles")

    def get_article_by_id(self, article_id: str) -> Dict[str, Any]:
        return self._data("GET", f"/knowledge/articles/{quote(article_id, safe='')}")

    def get_categories(self) -> List[str]:
        return self._data("GET", "/knowledge/categories")

    def get_articles_by_category(self, category: str) -> List[Dict[str, Any]]:
        return self._data("GET", f"/knowledge/categories/{quote(category, safe='')}/articles")

    def knowledge_health_check(self) -> Dict[str, Any]:
        return self._request("GET", "/knowledge/health")


def main():
    """Main function for checking a running API."""
    client = SupportApiClient()
    try:
        print("AI service:", client.ai_health_check().get("status"))
        print("Knowledge base:", client.knowledge_health_check().get("stats"))
        print("Categories:", client.get_categories())
    except APIError as e:
        print(f"Error {e.code}: {e.message}")

if __name__ == "__main__":
    main()
