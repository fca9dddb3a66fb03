"""
In-memory session store keyed by UUID.

Each session holds the loaded rows, the active filter selections and the
latest insight report. Sessions expire after a period of inactivity.
"""

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from config.settings import Config
from core.insights import Insight

logger = logging.getLogger(__name__)


@dataclass
class SessionData:
    """Per-session presentation state owned by the API layer."""

    config: Config = field(default_factory=Config.load)
    raw_rows: Optional[List[Dict[str, Any]]] = None
    current_rows: Optional[List[Dict[str, Any]]] = None
    insight: Optional[Insight] = None
    dataset_name: Optional[str] = None
    source: Optional[str] = None
    active_filters: List[Dict[str, Any]] = field(default_factory=list)
    last_accessed: float = field(default_factory=time.time)

    @property
    def has_data(self) -> bool:
        return self.current_rows is not None and self.insight is not None


class SessionStore:
    """Thread-safe map of session id to SessionData with idle expiry."""

    def __init__(self, ttl: Callable[[], int], clock: Callable[[], float] = time.time):
        self._ttl = ttl
        self._clock = clock
        self._sessions: Dict[str, SessionData] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> int:
        return self._ttl()

    def create(self) -> str:
        session_id = str(uuid.uuid4())
        with self._lock:
            self._sessions[session_id] = SessionData(last_accessed=self._clock())
        logger.debug("Created session %s", session_id)
        return session_id

    def get(self, session_id: Optional[str]) -> Optional[SessionData]:
        """Return the live session and refresh its idle timer."""
        if not session_id:
            return None
        now = self._clock()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if now - session.last_accessed > self.ttl:
                del self._sessions[session_id]
                return None
            session.last_accessed = now
            return session

    def drop(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def cleanup_expired(self) -> int:
        """Remove expired sessions. Returns number removed."""
        now = self._clock()
        ttl = self.ttl
        with self._lock:
            expired = [
                sid for sid, s in self._sessions.items()
                if now - s.last_accessed > ttl
            ]
            for sid in expired:
                del self._sessions[sid]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


def session_ttl() -> int:
    return Config.load().app.session_ttl


sessions = SessionStore(ttl=session_ttl)
