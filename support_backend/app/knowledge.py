#!/usr/bin/env python3
"""
Knowledge base module for the support dashboard.

This module holds the in-memory article set and answers semantic searches
by cosine similarity between provider embeddings.
"""

import time
from datetime import datetime
from typing import List, Optional, Sequence

import numpy as np

from .cache import EMBEDDING_PREFIX, KNOWLEDGE_PREFIX, TTLCache, make_key
from .config import Config
from .llm_client import LLMClient
from ..data.sample_articles import load_sample_articles
from ..schemas.io_models import ArticleCreate, KnowledgeArticle, KnowledgeSearchRequest
from ..utils.logger import get_logger
from ..utils.security import preview

logger = get_logger("knowledge")


def cosine_similarity(vector_a: Sequence[float], vector_b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Args:
        vector_a: First vector
        vector_b: Second vector

    Returns:
        Similarity in [-1, 1]; 0.0 for empty, mismatched or zero vectors
    """
    if len(vector_a) != len(vector_b) or len(vector_a) == 0:
        return 0.0

    a = np.asarray(vector_a, dtype=float)
    b = np.asarray(vector_b, dtype=float)
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(a, b) / (norm_a * norm_b))


def _embedding_text(title: str, content: str) -> str:
    return f"{title}\n\n{content}"


class KnowledgeService:
    """Semantic search over a small in-memory article set."""

    def __init__(self, llm_client: LLMClient = None, cache: Optional[TTLCache] = None,
                 embedding_delay: float = None, articles: Optional[List[KnowledgeArticle]] = None,
                 embedding_model: str = None):
        self.llm = llm_client or LLMClient()
        self.cache = cache
        self.embedding_delay = embedding_delay if embedding_delay is not None else Config.EMBEDDING_DELAY_SECONDS
        self.embedding_model = embedding_model or Config.OPENAI_EMBEDDING_MODEL
        self.articles: List[KnowledgeArticle] = articles if articles is not None else load_sample_articles()

    @staticmethod
    def _public(article: KnowledgeArticle, **updates) -> KnowledgeArticle:
        """Copy of an article without its embedding."""
        return article.model_copy(update={"embedding": None, **updates})

    def generate_embedding(self, text: str) -> List[float]:
        """Embed text, returning an empty vector when the provider fails."""
        try:
            return self.llm.create_embedding(text, model=self.embedding_model)
        except Exception as e:
            logger.error("Embedding generation error: %s", e)
            return []

    def _query_embedding(self, query: str) -> List[float]:
        def fetch():
            return self.llm.create_embedding(query, model=self.embedding_model)

        if self.cache is None:
            return fetch()
        return self.cache.get_or_fetch(make_key(EMBEDDING_PREFIX, self.embedding_model, query), fetch)

    def _ensure_article_embeddings(self) -> bool:
        """Embed articles that lack a vector; False if any is still missing one."""
        for article in self.articles:
            if not article.embedding:
                article.embedding = self.generate_embedding(_embedding_text(article.title, article.content))
                # stay under the provider's rate limit
                if self.embedding_delay:
                    time.sleep(self.embedding_delay)
        return all(article.embedding for article in self.articles)

    def search_articles(self, request: KnowledgeSearchRequest) -> List[KnowledgeArticle]:
        """
        Rank articles by semantic similarity to a query.

        Args:
            request: Search parameters

        Returns:
            At most `limit` articles scoring at least `min_relevance`, best
            first, each carrying its relevance score; empty on any failure
        """
        cache_key = make_key(KNOWLEDGE_PREFIX, request.model_dump(mode="json"))
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return [KnowledgeArticle(**row) for row in cached]

        try:
            logger.info("Searching knowledge base for '%s'", preview(request.query))
            query_embedding = self._query_embedding(request.query)
            complete = self._ensure_article_embeddings()

            results = []
            for article in self.articles:
                score = cosine_similarity(query_embedding, article.embedding or [])
                if score < request.min_relevance:
                    continue
                if request.categories and article.category not in request.categories:
                    continue
                results.append(self._public(article, relevance_score=score))

            results.sort(key=lambda a: a.relevance_score, reverse=True)
            results = results[:request.limit]
        except Exception as e:
            logger.error("Knowledge search error: %s", e)
            return []

        if self.cache is not None and complete:
            self.cache.set(cache_key, [a.model_dump(mode="json") for a in results])
        elif not complete:
            logger.warning("Some articles have no embedding yet; search results not cached")
        logger.debug("Knowledge search returned %d articles", len(results))
        return results

    def get_all_articles(self) -> List[KnowledgeArticle]:
        return [self._public(a) for a in self.articles]

    def get_article_by_id(self, article_id: str) -> Optional[KnowledgeArticle]:
        for article in self.articles:
            if article.id == article_id:
                return self._public(article)
        return None

    def get_categories(self) -> List[str]:
        return list(dict.fromkeys(a.category for a in self.articles))

    def get_articles_by_category(self, category: str) -> List[KnowledgeArticle]:
        return [self._public(a) for a in self.articles if a.category == category]

    def add_article(self, data: ArticleCreate) -> KnowledgeArticle:
        """
        Add an article and embed it right away.

        Args:
            data: Title, content, category and tags

        Returns:
            The stored article without its embedding
        """
        article = KnowledgeArticle(
            id=f"article-{int(time.time() * 1000)}",
            title=data.title,
            content=data.content,
            category=data.category,
            tags=list(data.tags),
            last_updated=datetime.now(),
            embedding=self.generate_embedding(_embedding_text(data.title, data.content)),
        )
        self.articles.append(article)

        # earlier result lists no longer cover the full article set
        if self.cache is not None:
            self.cache.clear(KNOWLEDGE_PREFIX)

        logger.info("Added knowledge article %s in %s", article.id, article.category)
        return self._public(article)


def main():
    """Main function for trying the knowledge service against the provider."""
    try:
        service = KnowledgeService()
        print("Knowledge service initialized successfully")

        query = "customer wants a refund for a damaged item"
        print(f"\nSearching for: {query}")
        results = service.search_articles(KnowledgeSearchRequest(query=query, min_relevance=0.2))

        print(f"\nFound {len(results)} results:")
        for i, article in enumerate(results):
            print(f"{i+1}. Score: {article.relevance_score:.4f}")
            print(f"   Title: {article.title}")
            print(f"   Category: {article.category}")
            print()

    except Exception as e:
        print(f"Error: {e}")

if __name__ == "__main__":
    main()
