"""Main FastAPI application."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import structlog

from config import settings
from logging_config import configure_logging
from api import chat, fixit, parts, verify
from agent.client import is_configured
from store import init_store, get_store

# Setup logging
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    configure_logging(settings.log_level, settings.environment)
    logger.info("Starting DIY-AI Fix-It API", model=settings.ai_model, mock_mode=not is_configured())
    init_store()
    yield
    logger.info("Shutting down")


# Create FastAPI app
app = FastAPI(
    title="DIY-AI Fix-It API",
    description="Backend API for the DIY-AI Fix-It household repair assistant",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(fixit.router, prefix="/api/fixit", tags=["fixit"])
app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
app.include_router(parts.router, prefix="/api/parts", tags=["parts"])
app.include_router(verify.router, prefix="/api/verify", tags=["verify"])


@app.get("/")
async def root():
    """Root endpoint - simple health check."""
    return {
        "status": "ok",
        "service": "DIY-AI Fix-It API",
        "version": "1.0.0",
        "message": "API is running"
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "ai_service": "configured" if is_configured() else "mock",
        "model": settings.ai_model,
        "active_sessions": len(get_store()),
        "environment": settings.environment
    }


if __name__ == "__main__":
    import uvicorn
    import os
    # Use PORT from environment (Railway/Render) or fallback to config
    port = int(os.getenv("PORT", settings.port))
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=port,
        reload=settings.environment == "development"
    )
