# estate_portal/core/middleware.py
import logging

from fastapi import status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from estate_portal.core.config import Settings
from estate_portal.core.sessions import SessionHandle, SessionStore, SessionStoreError

logger = logging.getLogger(__name__)


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Attach a SessionHandle to every request and keep the cookie in sync.

    Before the route:
      - request.state.session = handle for the cookie id (or a new, empty one)

    After the route:
      - unsaved changes are flushed (a store failure here is a 503)
      - otherwise the existing record's expiry is pushed forward (inactivity TTL);
        a store failure here is logged and the response is kept
      - the cookie is (re)issued with a fresh max-age, or dropped if its id
        no longer exists in the store
    """

    def __init__(self, app, store: SessionStore, settings: Settings):
        super().__init__(app)
        self.store = store
        self.settings = settings

    async def dispatch(self, request: Request, call_next) -> Response:
        cookie_name = self.settings.SESSION_COOKIE_NAME
        incoming_id = request.cookies.get(cookie_name)

        handle = SessionHandle(
            self.store,
            incoming_id,
            ttl_seconds=self.settings.SESSION_TTL_SECONDS,
        )
        request.state.session = handle

        response = await call_next(request)

        if handle.modified:
            try:
                await handle.flush()
            except SessionStoreError as exc:
                logger.error(f"Session store failure after {request.url.path}: {exc}")
                return JSONResponse(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    content={"detail": "Session service unavailable"},
                )
            live = True
        elif handle.saved:
            live = True
        else:
            try:
                live = await handle.touch()
            except SessionStoreError as exc:
                logger.warning(f"Could not extend session after {request.url.path}: {exc}")
                return response

        if live and handle.id is not None:
            response.set_cookie(
                key=cookie_name,
                value=handle.id,
                max_age=self.settings.SESSION_TTL_SECONDS,
                httponly=True,
                secure=self.settings.SESSION_COOKIE_SECURE,
                samesite=self.settings.SESSION_COOKIE_SAMESITE,
                path="/",
            )
        elif incoming_id is not None:
            response.delete_cookie(key=cookie_name, path="/")

        return response
