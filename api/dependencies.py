"""
FastAPI dependency-injection helpers.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Request, HTTPException

from api.session_store import SessionData, sessions
from config.settings import Config
from db.connection import DatabaseClient
from integrations.narrative import NarrativeClient


def get_session_data(request: Request) -> SessionData:
    """Return the current session, creating one if needed."""
    session_id: str = request.state.session_id
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=401, detail="Session expired")
    return session


def require_data(request: Request) -> SessionData:
    """Like get_session_data but also asserts a dataset is loaded."""
    session = get_session_data(request)
    if not session.has_data:
        raise HTTPException(status_code=400, detail="No dataset loaded")
    return session


@lru_cache()
def get_store() -> DatabaseClient:
    """Shared client for the hosted tabular store."""
    return DatabaseClient(Config.load().db)


def get_narrative_client() -> Optional[NarrativeClient]:
    """Narrative endpoint client, or None when no endpoint is configured."""
    app_config = Config.load().app
    if not app_config.narrative_url:
        return None
    return NarrativeClient(app_config.narrative_url, timeout=app_config.narrative_timeout)
