"""Knowledge base routes."""
from urllib.parse import unquote

from fastapi import APIRouter, Depends

from ..dependencies import get_knowledge_service
from ..knowledge import KnowledgeService
from ..responses import failure, iso_now, request_id, success
from ...schemas.io_models import ArticleCreate, KnowledgeSearchRequest
from ...utils.logger import get_logger

logger = get_logger("routes.knowledge")

router = APIRouter(prefix="/api/knowledge", tags=["knowledge"])


@router.post("/search")
def search(request: KnowledgeSearchRequest, service: KnowledgeService = Depends(get_knowledge_service)):
    try:
        articles = service.search_articles(request)
        return success(articles, requestId=request_id("search"), query=request.query, resultsCount=len(articles))
    except Exception as e:
        logger.error("Knowledge search error: %s", e)
        return failure(500, "Failed to search knowledge base", str(e))


@router.get("/articles")
def list_articles(service: KnowledgeService = Depends(get_knowledge_service)):
    try:
        articles = service.get_all_articles()
        return success(articles, totalCount=len(articles))
    except Exception as e:
        logger.error("Get articles error: %s", e)
        return failure(500, "Failed to retrieve articles", str(e))


@router.post("/articles", status_code=201)
def create_article(data: ArticleCreate, service: KnowledgeService = Depends(get_knowledge_service)):
    try:
        article = service.add_article(data)
        return success(article)
    except Exception as e:
        logger.error("Create article error: %s", e)
        return failure(500, "Failed to create article", str(e))


@router.get("/articles/{article_id}")
def get_article(article_id: str, service: KnowledgeService = Depends(get_knowledge_service)):
    try:
        article = service.get_article_by_id(article_id)
    except Exception as e:
        logger.error("Get article error: %s", e)
        return failure(500, "Failed to retrieve article", str(e))

    if article is None:
        return failure(404, "Article not found")
    return success(article)


@router.get("/categories")
def list_categories(service: KnowledgeService = Depends(get_knowledge_service)):
    try:
        categories = service.get_categories()
        return success(categories, count=len(categories))
    except Exception as e:
        logger.error("Get categories error: %s", e)
        return failure(500, "Failed to retrieve categories", str(e))


@router.get("/categories/{category}/articles")
def list_articles_by_category(category: str, service: KnowledgeService = Depends(get_knowledge_service)):
    try:
        category = unquote(category)
        articles = service.get_articles_by_category(category)
        return success(articles, category=category, count=len(articles))
    except Exception as e:
        logger.error("Get articles by category error: %s", e)
        return failure(500, "Failed to retrieve articles by category", str(e))


@router.get("/health")
def health(service: KnowledgeService = Depends(get_knowledge_service)):
    articles = service.get_all_articles()
    categories = service.get_categories()
    return {
        "success": True,
        "service": "Knowledge Base Service",
        "status": "operational",
        "stats": {
            "totalArticles": len(articles),
            "categories": len(categories),
            "categoryList": categories,
        },
        "features": {
            "semanticSearch": True,
            "categoryFiltering": True,
            "embeddings": True,
        },
        "timestamp": iso_now(),
    }
