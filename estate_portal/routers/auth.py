# estate_portal/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from estate_portal.core.auth import get_current_user, get_web_session
from estate_portal.core.sessions import SessionHandle
from estate_portal.database import get_session
from estate_portal.models.user import User
from estate_portal.repositories.user_repo import UserRepository
from estate_portal.schemas.auth import LoginRequest, MessageResponse
from estate_portal.schemas.user import UserRead
from estate_portal.services.auth_service import AuthService, InvalidCredentials

router = APIRouter(prefix="/auth", tags=["Auth"])

repo = UserRepository()
service = AuthService(repo)


@router.post("/login", response_model=UserRead)
async def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
    web_session: SessionHandle = Depends(get_web_session),
):
    """
    Log in with name + password.

    On success the session cookie is re-issued with a new id.
    Wrong password and unknown name produce the same 401.
    """
    try:
        return await service.login(session, web_session, payload.name, payload.password)
    except InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="username or password is wrong",
        )


@router.post("/logout", response_model=MessageResponse)
async def logout(web_session: SessionHandle = Depends(get_web_session)):
    """
    Log out. Always succeeds, including for visitors who are not logged in.
    """
    await service.logout(web_session)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)):
    """
    Return the logged-in user's account.

    Auth:
      - Requires a logged-in session (anonymous -> redirect to login).
    """
    return current_user
