# estate_portal/core/session_auth.py
"""
Authentication state kept in the session.

A session is either anonymous or authenticated as (user id, role). The two
keys below are written together by establish() and removed together by
clear(); a session holding only one of them is treated by the gate as not
having the missing one.

The role is a snapshot taken at login: changing a user's role does not
affect sessions that are already logged in until they log in again.
"""
import logging
import uuid

from estate_portal.core.sessions import SessionHandle
from estate_portal.models.user import Role

logger = logging.getLogger(__name__)

USER_ID_KEY = "user_id"
USER_LEVEL_KEY = "user_level"


async def resolve_principal(session: SessionHandle) -> uuid.UUID | None:
    """
    Return the logged-in user's id, or None for an anonymous session.

    A missing, non-string or unparsable value is anonymous. Store failures
    (SessionStoreError) are not swallowed.
    """
    raw = await session.get(USER_ID_KEY)
    if not isinstance(raw, str):
        return None
    try:
        return uuid.UUID(raw)
    except ValueError:
        return None


async def resolve_role(session: SessionHandle) -> Role | None:
    """Return the role snapshot, or None if absent or not a known role."""
    raw = await session.get(USER_LEVEL_KEY)
    if not isinstance(raw, str):
        return None
    try:
        return Role(raw)
    except ValueError:
        return None


async def establish(session: SessionHandle, principal_id: uuid.UUID, role: Role) -> None:
    """
    Log a user into the session.

    Caller must have verified the credentials already. The session moves to
    a fresh id (a pre-login cookie cannot be reused to ride the login) and
    both keys are persisted in one write before this returns.
    """
    await session.cycle_id()
    await session.set(USER_ID_KEY, str(principal_id))
    await session.set(USER_LEVEL_KEY, Role(role).value)
    await session.flush()
    logger.info(f"Session established for user {principal_id} ({Role(role).value})")


async def clear(session: SessionHandle) -> None:
    """
    Log the session out. Safe to call on an anonymous session.

    The removal is flushed before returning, so later reads in the same
    request, and the next request, see an anonymous session.
    """
    user_id = await session.remove(USER_ID_KEY)
    level = await session.remove(USER_LEVEL_KEY)
    if user_id is None and level is None:
        return
    await session.flush()
    logger.info(f"Session cleared for user {user_id}")
