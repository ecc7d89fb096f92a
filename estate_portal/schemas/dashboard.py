# estate_portal/schemas/dashboard.py
import uuid

from sqlmodel import SQLModel

from estate_portal.models.user import Role


class DashboardSummary(SQLModel):
    """Landing data for the dashboard home page."""

    user_id: uuid.UUID
    name: str
    role: Role
    users_count: int
    estates_count: int
