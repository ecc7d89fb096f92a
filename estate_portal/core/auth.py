# estate_portal/core/auth.py
import logging
import uuid

from fastapi import Depends, HTTPException, Request, status
from sqlmodel import Session

from estate_portal.core import gate
from estate_portal.core.gate import AuthError
from estate_portal.core.session_auth import clear
from estate_portal.core.sessions import SessionHandle
from estate_portal.database import get_session
from estate_portal.models.user import User
from estate_portal.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

user_repo = UserRepository()


class LoginRedirect(Exception):
    """
    Raised by auth dependencies when nobody is logged in.

    The app turns it into a 303 redirect to the login page.
    """

    def __init__(self, location: str):
        super().__init__(location)
        self.location = location


def _login_path(request: Request) -> str:
    return request.app.state.settings.LOGIN_PATH


def get_web_session(request: Request) -> SessionHandle:
    """
    The session handle attached by SessionMiddleware.

    Raises:
        RuntimeError: if the middleware is not installed.
    """
    handle = getattr(request.state, "session", None)
    if handle is None:
        raise RuntimeError("SessionMiddleware is not installed")
    return handle


async def get_current_user(
    request: Request,
    web_session: SessionHandle = Depends(get_web_session),
    session: Session = Depends(get_session),
) -> User:
    """
    Enforce a logged-in session and load the user's row.

    A session pointing at a deleted user is logged out and redirected to
    the login page like any anonymous visitor.

    Raises:
        LoginRedirect: if the session is anonymous or its user is gone.
    """
    result = await gate.require_authenticated(web_session)
    if not result.ok:
        raise LoginRedirect(_login_path(request))

    user = user_repo.get_by_id(session, result.principal_id)
    if user is None:
        logger.info(f"Session user {result.principal_id} no longer exists; clearing session")
        await clear(web_session)
        raise LoginRedirect(_login_path(request))
    return user


async def require_auth(current_user: User = Depends(get_current_user)) -> uuid.UUID:
    """
    Enforce a logged-in session whose user still exists.

    Returns:
        The logged-in user's id.
    """
    return current_user.id


async def require_admin(
    web_session: SessionHandle = Depends(get_web_session),
    current_user: User = Depends(get_current_user),
) -> uuid.UUID:
    """
    Enforce an Admin session.

    The role comes from the session snapshot, not from the user row; the
    row is only loaded to make sure the account still exists.

    Returns:
        The logged-in admin's id.

    Raises:
        LoginRedirect: if the session is anonymous or its user is gone.
        HTTPException(403): if the session role is not Admin.
    """
    result = await gate.require_admin(web_session)
    if result.error is AuthError.FORBIDDEN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user.id
