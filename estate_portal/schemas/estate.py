# estate_portal/schemas/estate.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class EstateRead(SQLModel):
    """
    Estate representation for clients (public catalog and dashboard).
    """

    id: uuid.UUID
    name: str
    address: str
    description: str | None = None
    image_url: str | None = None
    price_in_cents: int
    space_in_meters: int
    created_at: datetime
    updated_at: datetime


class EstateCreate(SQLModel):
    """
    Payload for creating an estate.

    - image_url is optional: the image is usually uploaded afterwards
      through the image endpoint.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    address: str = Field(max_length=255)
    description: str | None = None
    image_url: str | None = None
    price_in_cents: int = Field(ge=0)
    space_in_meters: int = Field(gt=0)

    @field_validator("name", "address")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class EstateUpdate(SQLModel):
    """
    Partial update payload for estates.
    All fields are optional; fields left out are not touched.
    Only description and image_url accept an explicit null (clears them).
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    address: str | None = Field(default=None, max_length=255)
    description: str | None = None
    image_url: str | None = None  # allow manual override if needed
    price_in_cents: int | None = Field(default=None, ge=0)
    space_in_meters: int | None = Field(default=None, gt=0)

    @field_validator("name", "address", "price_in_cents", "space_in_meters")
    @classmethod
    def not_null(cls, v):
        # Only runs for values actually sent; omitted fields keep the default.
        if v is None:
            raise ValueError("field cannot be null")
        return v

    @field_validator("name", "address")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class CountRead(SQLModel):
    count: int
