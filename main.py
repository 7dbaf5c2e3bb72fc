"""
Main FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
import logfire

from config import settings
from database import get_db_info
from observability.logfire_config import LogfireConfig
from pipeline import create_reply_pipeline
from services.embeddings import EmbeddingProvider
from services.knowledge_store import KnowledgeStore
from api.routes import replies_router, knowledge_router, suggest_replies_validation_handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Initialize Logfire first so we can use structured logging
    LogfireConfig.initialize(token=settings.logfire_token)

    # Startup logging
    logfire.info(
        "Starting OneBox Reply Assistant",
        environment=settings.environment,
        debug=settings.debug,
        llm_model=settings.llm_model,
        embedding_model=settings.embedding_model,
    )

    db_info = get_db_info()
    logfire.info("Vector store database", url=db_info['url'], status=db_info['status'])

    # A store that cannot connect stays in fallback mode; startup never fails on it
    embedding_provider = EmbeddingProvider()
    knowledge_store = KnowledgeStore(embedding_provider)
    await knowledge_store.initialize()

    app.state.knowledge_store = knowledge_store
    app.state.reply_service = create_reply_pipeline(knowledge_store)

    logfire.info(
        "OneBox Reply Assistant startup complete",
        vector_store="connected" if knowledge_store.is_connected else "fallback",
    )

    yield

    # Shutdown
    logfire.info("Shutting down OneBox Reply Assistant")


# Initialize FastAPI app
app = FastAPI(
    title="OneBox Reply Assistant API",
    description="RAG-based reply suggestions for incoming emails",
    version="1.0.0",
    lifespan=lifespan,
    debug=settings.debug,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Health Check Endpoints
# ============================================================================

@app.get("/health", tags=["Health"])
async def health_check(request: Request) -> Dict[str, str]:
    """
    Health check endpoint for load balancers and monitoring.

    Reports "degraded" when the vector store is unavailable and retrieval
    is served from the static fallback context.

    Returns:
        dict: Health status of the application and vector store
    """
    store = getattr(request.app.state, "knowledge_store", None)
    connected = bool(store is not None and store.is_connected)

    return {
        "status": "healthy" if connected else "degraded",
        "service": "onebox-reply-assistant",
        "version": "1.0.0",
        "vector_store": "connected" if connected else "disconnected",
        "environment": settings.environment,
    }


@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    """
    Root endpoint - API information.

    Returns:
        dict: Basic API information
    """
    return {
        "name": "OneBox Reply Assistant API",
        "version": "1.0.0",
        "description": "RAG-based reply suggestions for incoming emails",
        "docs": "/docs",
        "health": "/health",
    }


# ============================================================================
# API Routers
# ============================================================================

# Reply suggestion and stats endpoints
app.include_router(replies_router)

# Knowledge base management endpoints
app.include_router(knowledge_router)

# Suggest route answers malformed bodies with its fixed 400 message
app.add_exception_handler(RequestValidationError, suggest_replies_validation_handler)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
