# estate_portal/services/estate_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from estate_portal.core.storage_utils import ImageStorage, generate_filename
from estate_portal.models.estate import Estate
from estate_portal.repositories.estate_repo import EstateRepository
from estate_portal.schemas.estate import EstateCreate, EstateUpdate

logger = logging.getLogger(__name__)


# --- Image config ---

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class EstateService:
    """
    Business logic for Estate listings.

    Responsibilities:
      - validation beyond pydantic
      - image upload/delete orchestration with Supabase Storage
      - admin-only operations (enforced at router via require_admin)
    """

    def __init__(self, repo: EstateRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _validate_and_get_ext(content_type: str, file_bytes: bytes) -> str:
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Unsupported image type. Allowed: JPEG, PNG, WEBP.",
            )

        if not file_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Uploaded image is empty.",
            )

        if len(file_bytes) > MAX_IMAGE_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="Image too large (max 5MB).",
            )

        return ALLOWED_IMAGE_CONTENT_TYPES[content_type]

    # ----- Estates -----

    def list_estates(self, session: Session, skip: int = 0, limit: int = 50) -> list[Estate]:
        return self.repo.list(session, skip=skip, limit=limit)

    def count_estates(self, session: Session) -> int:
        return self.repo.count(session)

    def get_estate(self, session: Session, estate_id: uuid.UUID) -> Estate:
        estate = self.repo.get_by_id(session, estate_id)
        if not estate:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Estate not found",
            )
        return estate

    def create_estate(self, session: Session, payload: EstateCreate) -> Estate:
        estate = Estate(
            name=payload.name,
            address=payload.address,
            description=payload.description,
            image_url=payload.image_url,
            price_in_cents=payload.price_in_cents,
            space_in_meters=payload.space_in_meters,
        )
        estate = self.repo.create(session, estate)
        logger.info(f"Created estate {estate.id} ({estate.name!r})")
        return estate

    def update_estate(
        self,
        session: Session,
        estate_id: uuid.UUID,
        payload: EstateUpdate,
        storage: ImageStorage | None = None,
    ) -> Estate:
        """
        Partial update of an estate: only fields present in the payload change.

        An explicit null clears `description` or `image_url`. When
        `image_url` changes, the previously stored image is deleted
        (best-effort, and only if it lives in our bucket).
        """
        estate = self.get_estate(session, estate_id)
        old_url = estate.image_url

        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(estate, field, value)

        estate = self.repo.update(session, estate)

        if old_url and old_url != estate.image_url and storage is not None:
            storage.delete_public_url(old_url)

        return estate

    def delete_estate(
        self,
        session: Session,
        estate_id: uuid.UUID,
        storage: ImageStorage | None = None,
    ) -> None:
        """
        Delete an estate row, then its stored image (best-effort).
        """
        estate = self.get_estate(session, estate_id)
        image_url = estate.image_url

        self.repo.delete(session, estate)
        logger.info(f"Deleted estate {estate_id}")

        if image_url and storage is not None:
            storage.delete_public_url(image_url)

    # ----- Image -----

    def set_image(
        self,
        session: Session,
        storage: ImageStorage,
        estate_id: uuid.UUID,
        content_type: str,
        file_bytes: bytes,
    ) -> Estate:
        """
        Upload or replace the image of an estate.

        - Validates content type + size.
        - Uploads under a new random name: estates/<estate_id>/<uuid>.<ext>
        - Points the row at the new URL, then deletes the old object.
        """
        estate = self.get_estate(session, estate_id)
        ext = self._validate_and_get_ext(content_type, file_bytes)

        path = f"estates/{estate.id}/{generate_filename(ext)}"
        new_url = storage.upload(path, file_bytes, content_type)

        old_url = estate.image_url
        estate.image_url = new_url
        estate = self.repo.update(session, estate)

        if old_url and old_url != new_url:
            storage.delete_public_url(old_url)

        return estate
