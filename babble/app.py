"""
Babble Microservice
Main application entry point

Exposes the Markov chain brain over HTTP: learning, forgetting,
seeded replies and random sentences.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from babble.config import Settings, settings as default_settings
from babble.services.brain import ChainBrain
from babble.utils.logger import setup_logger

# Setup logging
logger = setup_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI app; ``settings`` defaults to the environment-loaded ones."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifecycle manager for the chain brain"""
        logger.info("[BOOT] Starting Babble...")
        logger.info(f"[BOOT] Chain store: {settings.CHAIN_DB_PATH} (order {settings.CHAIN_ORDER})")

        brain = None
        try:
            Path(settings.CHAIN_DB_PATH).parent.mkdir(parents=True, exist_ok=True)
            brain = ChainBrain(
                settings.CHAIN_DB_PATH,
                order=settings.CHAIN_ORDER,
                max_words=settings.MAX_WORDS,
                idle_timeout=settings.CONNECTION_IDLE_TIMEOUT,
            )
            app.state.brain = brain
            app.state.frontends = {}
            logger.info("[BOOT] Babble ready!")
            yield
        except Exception as e:
            logger.error(f"[ERR] Failed to initialize: {e}", exc_info=True)
            raise
        finally:
            logger.info("[SHUTDOWN] Cleaning up...")
            if brain is not None:
                brain.close()
            app.state.brain = None
            logger.info("[SHUTDOWN] Babble stopped")

    app = FastAPI(
        title="Babble",
        description="Persistent Markov chain chat brain",
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.brain = None
    app.state.frontends = {}

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"[ERR] Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "ok": False,
                "error": {
                    "code": "BABBLE_ERROR",
                    "message": "Internal server error occurred",
                    "details": {"type": type(exc).__name__},
                },
            },
        )

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "ok": True,
            "data": {
                "status": "healthy" if app.state.brain is not None else "starting",
                "order": settings.CHAIN_ORDER,
                "max_words": settings.MAX_WORDS,
            },
        }

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "endpoints": {
                "health": "/health",
                "docs": "/docs",
                "markov": "/markov/*",
            },
        }

    from babble.api.routers import markov_router

    app.include_router(markov_router.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "babble.app:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG,
        log_level=default_settings.LOG_LEVEL.lower(),
    )
