# estate_portal/routers/dashboard.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from estate_portal.core.auth import get_current_user
from estate_portal.database import get_session
from estate_portal.models.user import User
from estate_portal.repositories.estate_repo import EstateRepository
from estate_portal.repositories.user_repo import UserRepository
from estate_portal.schemas.dashboard import DashboardSummary

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

user_repo = UserRepository()
estate_repo = EstateRepository()


@router.get("", response_model=DashboardSummary)
def dashboard_home(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    Dashboard landing data: who is logged in and how much there is to manage.

    The role shown is the account's current role; admin-only actions are
    still decided by the role held in the session.
    """
    return DashboardSummary(
        user_id=current_user.id,
        name=current_user.name,
        role=current_user.role,
        users_count=user_repo.count(session),
        estates_count=estate_repo.count(session),
    )
