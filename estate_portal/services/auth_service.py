# estate_portal/services/auth_service.py
import logging

from sqlmodel import Session

from estate_portal.core.security import (
    DUMMY_HASH,
    hash_password,
    is_encodable,
    needs_rehash,
    verify_password_async,
)
from estate_portal.core.session_auth import clear, establish
from estate_portal.core.sessions import SessionHandle
from estate_portal.models.user import Role, User
from estate_portal.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


class InvalidCredentials(Exception):
    """Unknown user name or wrong password; deliberately not told apart."""


class AuthService:
    """
    Login / logout orchestration.

    Responsibilities:
      - verify credentials against the users table
      - move the session between anonymous and logged in
      - create the first admin account on an empty database
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    async def authenticate(self, session: Session, name: str, password: str) -> User:
        """
        Return the user whose name and password match.

        An unknown name still pays for one Argon2 verification, so response
        time does not reveal which names exist.

        Raises:
            InvalidCredentials: on any mismatch.
        """
        # A name that cannot be encoded matches no stored user
        user = self.repo.get_by_name(session, name.strip()) if is_encodable(name) else None
        stored_hash = user.password if user is not None else DUMMY_HASH
        valid = await verify_password_async(password, stored_hash)

        if user is None or not valid:
            logger.info(f"Failed login attempt for name={name!r}")
            raise InvalidCredentials()

        if needs_rehash(user.password):
            user.password = hash_password(password)
            self.repo.update(session, user)
            logger.info(f"Upgraded password hash for user {user.id}")

        return user

    async def login(
        self,
        session: Session,
        web_session: SessionHandle,
        name: str,
        password: str,
    ) -> User:
        """
        Verify credentials, then log the session in.

        Nothing is written to the session unless verification succeeds.
        """
        user = await self.authenticate(session, name, password)
        await establish(web_session, user.id, Role(user.role))
        logger.info(f"User {user.name!r} logged in")
        return user

    async def logout(self, web_session: SessionHandle) -> None:
        await clear(web_session)

    def bootstrap_admin(self, session: Session, name: str, password: str) -> User | None:
        """
        Create an Admin account if the users table is empty.

        Returns:
            The new admin, or None if any user already exists.
        """
        if self.repo.count(session) > 0:
            return None
        admin = User(name=name.strip(), password=hash_password(password), role=Role.ADMIN.value)
        admin = self.repo.create(session, admin)
        logger.info(f"Bootstrapped admin account {admin.name!r}")
        return admin
