# estate_portal/schemas/user.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from estate_portal.models.user import Role


def _strip_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty")
    return v


class UserRead(SQLModel):
    """
    Response schema returned to clients.

    Never carries the password hash.
    """

    id: uuid.UUID
    name: str
    role: Role
    created_at: datetime
    updated_at: datetime


class UserCreate(SQLModel):
    """
    Admin payload for adding a dashboard account.

    The password is hashed by the service; it is never stored as given.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=50)
    password: str = Field(min_length=1, max_length=256)
    role: Role = Role.USER

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return _strip_name(v)


class UserNameUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=50)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return _strip_name(v)


class UserPasswordUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    password: str = Field(min_length=1, max_length=256)


class UserRoleUpdate(SQLModel):
    """
    Admin-only role update schema.
    """

    model_config = ConfigDict(extra="forbid")
    role: Role
