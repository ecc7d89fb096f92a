# estate_portal/routers/users.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from estate_portal.core.auth import require_admin, require_auth
from estate_portal.database import get_session
from estate_portal.repositories.user_repo import UserRepository
from estate_portal.schemas.estate import CountRead
from estate_portal.schemas.user import (
    UserCreate,
    UserNameUpdate,
    UserPasswordUpdate,
    UserRead,
    UserRoleUpdate,
)
from estate_portal.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


# -------- Dashboard reads (any logged-in user) --------


@router.get(
    "",
    response_model=list[UserRead],
    dependencies=[Depends(require_auth)],
)
def list_users(
    session: Session = Depends(get_session),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
):
    """
    List users, newest first.

    Pagination via skip/limit.
    """
    return service.list_users(session, skip, limit)


@router.get(
    "/count",
    response_model=CountRead,
    dependencies=[Depends(require_auth)],
)
def count_users(session: Session = Depends(get_session)):
    return CountRead(count=service.count_users(session))


@router.get(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_auth)],
)
def get_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a specific user by id.
    """
    return service.get_user(session, user_id)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_user(
    payload: UserCreate,
    session: Session = Depends(get_session),
):
    """
    Add a dashboard account (admin only).
    """
    return service.create_user(session, payload)


@router.patch(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def update_user_name(
    user_id: uuid.UUID,
    payload: UserNameUpdate,
    session: Session = Depends(get_session),
):
    """
    Rename a user (admin only).
    """
    return service.update_name(session, user_id, payload)


@router.patch(
    "/{user_id}/password",
    response_model=UserRead,
    dependencies=[Depends(require_admin)],
)
def update_user_password(
    user_id: uuid.UUID,
    payload: UserPasswordUpdate,
    session: Session = Depends(get_session),
):
    """
    Set a new password for a user (admin only).
    """
    return service.update_password(session, user_id, payload)


@router.patch("/{user_id}/role", response_model=UserRead)
def change_role(
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
    admin_id: uuid.UUID = Depends(require_admin),
):
    """
    Update a user's role (admin only).

    Allowed roles: Admin, User. Admins cannot change their own role.
    """
    return service.update_role(session, admin_id, user_id, payload)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
    admin_id: uuid.UUID = Depends(require_admin),
):
    """
    Delete a user (admin only). Admins cannot delete themselves.
    """
    service.delete_user(session, admin_id, user_id)
    return None
