# estate_portal/models/estate.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from estate_portal.models.user import utcnow


class Estate(SQLModel, table=True):
    """
    A property listing shown in the public catalog.

    Money is kept in integer cents and area in whole square meters, so
    nothing here is a float.
    """

    __tablename__ = "estates"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        index=True,
        description="Listing title",
    )

    address: str = Field(
        max_length=255,
        description="Street address / area",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    image_url: str | None = Field(
        default=None,
        description="Public URL of the listing image",
    )

    price_in_cents: int = Field(
        ge=0,
        description="Asking price in cents",
    )

    space_in_meters: int = Field(
        gt=0,
        description="Floor area in square meters",
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        index=True,
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=utcnow,
        description="Last modification timestamp (UTC)",
    )
