"""AI routes: reply generation, sentiment analysis and quality evaluation."""
from fastapi import APIRouter, Depends

from ..ai_service import AIService
from ..dependencies import get_ai_service
from ..insights import describe_sentiment, quality_color, quality_level
from ..prompt_builder import format_conversation_context
from ..responses import failure, iso_now, request_id, success
from ...schemas.io_models import (
    AIResponseRequest,
    BatchSentimentRequest,
    EvaluateResponseRequest,
    SentimentRequest,
)
from ...utils.logger import get_logger

logger = get_logger("routes.ai")

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/generate-response")
def generate_response(request: AIResponseRequest, service: AIService = Depends(get_ai_service)):
    try:
        responses = service.generate_response(request)
        return success(responses, requestId=request_id("req"), model=service.model)
    except Exception as e:
        logger.error("Generate response error: %s", e)
        return failure(500, "Failed to generate response", str(e))


@router.post("/analyze-sentiment")
def analyze_sentiment(request: SentimentRequest, service: AIService = Depends(get_ai_service)):
    try:
        context = format_conversation_context(request.conversation_context or [])
        sentiment = service.analyze_sentiment(request.message, context)
        return success(sentiment, requestId=request_id("sentiment"), insights=describe_sentiment(sentiment))
    except Exception as e:
        logger.error("Sentiment analysis error: %s", e)
        return failure(500, "Failed to analyze sentiment", str(e))


@router.post("/analyze-sentiment/batch")
def analyze_sentiment_batch(request: BatchSentimentRequest, service: AIService = Depends(get_ai_service)):
    try:
        results = service.analyze_sentiment_batch(request.messages)
        return success(results, requestId=request_id("sentiment_batch"), count=len(results))
    except Exception as e:
        logger.error("Batch sentiment analysis error: %s", e)
        return failure(500, "Failed to analyze sentiment", str(e))


@router.post("/evaluate-response")
def evaluate_response(request: EvaluateResponseRequest, service: AIService = Depends(get_ai_service)):
    try:
        score = service.evaluate_response_quality(request.response, request.context)
        return success(
            score,
            requestId=request_id("quality"),
            qualityLevel=quality_level(score.overall),
            qualityColor=quality_color(score.overall),
        )
    except Exception as e:
        logger.error("Quality evaluation error: %s", e)
        return failure(500, "Failed to evaluate response quality", str(e))


@router.get("/health")
def health():
    return {
        "success": True,
        "service": "AI Service",
        "status": "operational",
        "features": {
            "responseGeneration": True,
            "sentimentAnalysis": True,
            "qualityEvaluation": True,
        },
        "timestamp": iso_now(),
    }
