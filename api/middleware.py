"""
Session cookie middleware.

Resolves the workspace for each request from an HTTP-only cookie, opening a
fresh one when the cookie is missing or its session has expired.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from api.session_store import SessionStore, sessions

SESSION_COOKIE = "session_id"


class SessionMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, store: SessionStore = sessions, cookie_name: str = SESSION_COOKIE):
        super().__init__(app)
        self.store = store
        self.cookie_name = cookie_name

    async def dispatch(self, request: Request, call_next):
        session_id = request.cookies.get(self.cookie_name)
        if self.store.get(session_id) is None:
            session_id = self.store.create()

        request.state.session_id = session_id
        response: Response = await call_next(request)

        response.set_cookie(
            key=self.cookie_name,
            value=session_id,
            httponly=True,
            samesite="lax",
            max_age=self.store.ttl,
        )
        return response
