# estate_portal/models/web_session.py
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class WebSession(SQLModel, table=True):
    """
    Persisted server-side session (cookie "id" -> row).

    `data` holds the session keys as a JSON object; the auth layer only
    writes `user_id` and `user_level` there.

    `expires_at` is naive UTC and slides forward on every request that
    carries the cookie.
    """

    __tablename__ = "web_sessions"

    id: str = Field(
        primary_key=True,
        max_length=64,
        description="Opaque session token carried in the cookie",
    )

    data: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )

    expires_at: datetime = Field(
        index=True,
        description="Inactivity deadline (UTC, naive)",
    )
