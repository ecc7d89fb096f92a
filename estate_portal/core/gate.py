# estate_portal/core/gate.py
"""
Access decisions for dashboard operations.

Checks return an AuthResult instead of raising, so callers always see
which of the two outcomes they got:

  - UNAUTHORIZED: nobody is logged in (send them to the login page)
  - FORBIDDEN:    logged in, but not an Admin (deny this action only)

SessionStoreError is not an access decision and propagates unchanged.
"""
import enum
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from estate_portal.core.session_auth import resolve_principal, resolve_role
from estate_portal.core.sessions import SessionHandle
from estate_portal.models.user import Role

T = TypeVar("T")


class AuthError(str, enum.Enum):
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class AuthResult:
    principal_id: uuid.UUID | None = None
    error: AuthError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def allow(cls, principal_id: uuid.UUID) -> "AuthResult":
        return cls(principal_id=principal_id)

    @classmethod
    def deny(cls, error: AuthError) -> "AuthResult":
        return cls(error=error)


@dataclass(frozen=True)
class GuardOutcome(Generic[T]):
    """Result of guarded(): either the operation's value or the denial."""

    auth: AuthResult
    value: T | None = None

    @property
    def ok(self) -> bool:
        return self.auth.ok


async def require_authenticated(session: SessionHandle) -> AuthResult:
    principal_id = await resolve_principal(session)
    if principal_id is None:
        return AuthResult.deny(AuthError.UNAUTHORIZED)
    return AuthResult.allow(principal_id)


async def require_admin(session: SessionHandle) -> AuthResult:
    """
    Admin-only check.

    Anonymous -> UNAUTHORIZED. Logged in with any role other than Admin
    (or with no role snapshot at all) -> FORBIDDEN.
    """
    result = await require_authenticated(session)
    if not result.ok:
        return result
    if await resolve_role(session) != Role.ADMIN:
        return AuthResult.deny(AuthError.FORBIDDEN)
    return result


async def guarded(
    check: Awaitable[AuthResult],
    operation: Callable[[uuid.UUID], Awaitable[T]],
) -> GuardOutcome[T]:
    """
    Run `operation` only if `check` allows it.

    The check is awaited to completion first; on denial the operation is
    never started.

    This is the entry point for code that holds a SessionHandle outside a
    FastAPI route (jobs, scripts, other frameworks). HTTP routes use the
    dependencies in core/auth.py instead, which also map the outcome to a
    redirect or a 403 and reject sessions whose user row is gone.

        outcome = await guarded(require_admin(session), lambda uid: delete(uid))
    """
    result = await check
    if not result.ok:
        return GuardOutcome(auth=result)
    value = await operation(result.principal_id)
    return GuardOutcome(auth=result, value=value)
