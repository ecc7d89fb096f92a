# estate_portal/models/user.py
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String
from sqlmodel import SQLModel, Field


class Role(str, enum.Enum):
    """
    Application role.

    Stored as PascalCase text ("Admin" / "User"), which is also the value
    written into the session as the role snapshot.
    """

    ADMIN = "Admin"
    USER = "User"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """
    Dashboard account.

    Identity:
      - id: UUID assigned at creation, never changes
      - name: unique login handle

    `password` is an Argon2 PHC string and must never leave the
    repository/service layer (read schemas do not have the field).
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=50,
        unique=True,
        index=True,
        description="Login handle (unique)",
    )

    password: str = Field(
        description="Argon2 hash of the password",
    )

    role: Role = Field(
        default=Role.USER,
        sa_type=String(16),
        index=True,
        description="Application role: Admin | User",
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=utcnow,
        description="Last modification timestamp (UTC)",
    )
