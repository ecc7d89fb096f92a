# estate_portal/services/user_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from estate_portal.core.security import hash_password
from estate_portal.models.user import User
from estate_portal.repositories.user_repo import UserRepository
from estate_portal.schemas.user import (
    UserCreate,
    UserNameUpdate,
    UserPasswordUpdate,
    UserRoleUpdate,
)

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for dashboard accounts.

    Responsibilities:
      - enforce app rules (unique names, no self role change / self delete)
      - hash passwords before they reach the repository
      - map domain errors to HTTP errors

    Admin-only operations are enforced at the router via require_admin.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Helpers -----

    def _ensure_name_free(
        self,
        session: Session,
        name: str,
        exclude_id: uuid.UUID | None = None,
    ) -> None:
        existing = self.repo.get_by_name(session, name)
        if existing is not None and existing.id != exclude_id:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User name already taken",
            )

    def _save(self, session: Session, user: User, *, new: bool = False) -> User:
        """
        Insert or update a user, mapping a unique-name violation to 409.

        Covers the window between _ensure_name_free and the commit, when a
        concurrent request takes the same name.
        """
        try:
            if new:
                return self.repo.create(session, user)
            return self.repo.update(session, user)
        except IntegrityError:
            session.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="User name already taken",
            )

    @staticmethod
    def _hash(password: str) -> str:
        try:
            return hash_password(password)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid password: {exc}",
            )

    # ----- Reads -----

    def list_users(self, session: Session, skip: int, limit: int) -> list[User]:
        return self.repo.list(session, skip=skip, limit=limit)

    def count_users(self, session: Session) -> int:
        return self.repo.count(session)

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        """
        Get a user by id.

        Raises:
            HTTPException(404): if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return user

    # ----- Admin operations -----

    def create_user(self, session: Session, payload: UserCreate) -> User:
        self._ensure_name_free(session, payload.name)
        user = User(
            name=payload.name,
            password=self._hash(payload.password),
            role=payload.role.value,
        )
        user = self._save(session, user, new=True)
        logger.info(f"Created user {user.name!r} ({payload.role.value})")
        return user

    def update_name(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: UserNameUpdate,
    ) -> User:
        user = self.get_user(session, user_id)
        if payload.name != user.name:
            self._ensure_name_free(session, payload.name, exclude_id=user.id)
            user.name = payload.name
        return self._save(session, user)

    def update_password(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: UserPasswordUpdate,
    ) -> User:
        user = self.get_user(session, user_id)
        user.password = self._hash(payload.password)
        return self.repo.update(session, user)

    def update_role(
        self,
        session: Session,
        actor_id: uuid.UUID,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> User:
        """
        Change a user's role.

        Live sessions of that user keep their old role until they log in
        again.

        Raises:
            HTTPException(400): if an admin targets their own account.
        """
        if actor_id == user_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot change your own role",
            )
        user = self.get_user(session, user_id)
        user.role = payload.role.value
        user = self.repo.update(session, user)
        logger.info(f"User {user_id} role set to {payload.role.value} by {actor_id}")
        return user

    def delete_user(
        self,
        session: Session,
        actor_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> None:
        if actor_id == user_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot delete your own account",
            )
        user = self.get_user(session, user_id)
        self.repo.delete(session, user)
        logger.info(f"User {user_id} deleted by {actor_id}")
