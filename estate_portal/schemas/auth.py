# estate_portal/schemas/auth.py
from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class LoginRequest(SQLModel):
    """Credentials posted by the login form."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=256)


class MessageResponse(SQLModel):
    message: str
