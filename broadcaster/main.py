"""
Broadcaster TV - playback client with a remote-control API.

Discovers live channels on a Broadcaster server, keeps one of them playing,
and exposes zapping, retry and the program guide over HTTP.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from broadcaster.config import get_settings
from broadcaster.rate_limit import limiter
from broadcaster.routers import guide, player, server
from broadcaster.services.session import get_session

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("Starting Broadcaster TV...")

    session = await get_session()
    await session.start()
    if session.config:
        logger.info(f"Resumed server {session.config.base_url}")

    yield

    logger.info("Shutting down Broadcaster TV...")
    session.shutdown()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Live channel playback client with a remote-control API",
    lifespan=lifespan
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(server.router)
app.include_router(player.router)
app.include_router(guide.router)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    session = await get_session()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "configured": session.config is not None,
    }


# Error handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "broadcaster.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
