#!/usr/bin/env python3
"""
Main FastAPI application for the AI support dashboard backend.
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Config
from .dependencies import rate_limiter
from .llm_client import LLMConfigurationError
from .rate_limit import RateLimitExceeded
from .responses import failure, iso_now
from .routes import ai, analytics, conversations, knowledge
from ..data.database import create_tables
from ..utils.logger import get_logger

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    Config.validate()
    settings = Config.summary()
    logger.info("Starting support API with %s", settings)
    if not settings["api_key_set"]:
        logger.warning("OPENAI_API_KEY is not set; AI and knowledge endpoints will fail until it is")
    create_tables()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="AI Support Dashboard API",
    description="LLM-backed reply drafting, sentiment, quality scoring and knowledge search",
    version=Config.API_VERSION,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[Config.CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)

for module in (ai, knowledge, conversations, analytics):
    app.include_router(module.router, dependencies=[Depends(rate_limiter)])


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return failure(400, "Invalid request data", details=jsonable_encoder(exc.errors()))


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=429, content={"error": exc.detail})


@app.exception_handler(LLMConfigurationError)
async def llm_configuration_handler(request: Request, exc: LLMConfigurationError):
    logger.error("Provider not configured: %s", exc)
    return failure(500, "AI service is not configured", str(exc))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Something went wrong!"})


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok", "timestamp": iso_now()}


@app.get("/api")
def api_index():
    """API documentation endpoint."""
    return {
        "message": "AI Support Dashboard API",
        "version": Config.API_VERSION,
        "endpoints": {
            "health": "/health",
            "ai": "/api/ai/*",
            "knowledge": "/api/knowledge/*",
            "conversations": "/api/conversations/*",
            "analytics": "/api/analytics/*",
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=Config.PORT)
