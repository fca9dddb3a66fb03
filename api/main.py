"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import SessionMiddleware
from api.session_store import sessions
from api.routers import data_source, profiling, visualizations
from config.settings import Config

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    """Configure root logging once for the API process."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Periodic cleanup of expired sessions."""
    async def _cleanup_loop():
        while True:
            await asyncio.sleep(300)  # every 5 minutes
            removed = sessions.cleanup_expired()
            if removed:
                logger.info("Removed %d expired session(s)", removed)

    task = asyncio.create_task(_cleanup_loop())
    yield
    task.cancel()


config = Config.load()
_configure_logging(config.app.log_level)

app = FastAPI(
    title=config.app.title,
    version="0.1.0",
    lifespan=lifespan,
)

# CORS - allow the dashboard dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config.app.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Session cookie middleware
app.add_middleware(SessionMiddleware)

# Register routers
app.include_router(data_source.router)
app.include_router(profiling.router)
app.include_router(visualizations.router)


@app.get("/health")
def health():
    return {"status": "healthy"}
