# estate_portal/routers/estates.py
import uuid

from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    Query,
    UploadFile,
    status,
)
from sqlmodel import Session

from estate_portal.core.auth import require_admin, require_auth
from estate_portal.core.storage_utils import (
    ImageStorage,
    get_optional_storage,
    get_storage,
)
from estate_portal.database import get_session
from estate_portal.repositories.estate_repo import EstateRepository
from estate_portal.schemas.estate import (
    CountRead,
    EstateCreate,
    EstateRead,
    EstateUpdate,
)
from estate_portal.services.estate_service import EstateService

router = APIRouter(prefix="/estates", tags=["Estates"])

repo = EstateRepository()
service = EstateService(repo)


# -------- Public endpoints --------


@router.get("", response_model=list[EstateRead])
def list_estates(
    session: Session = Depends(get_session),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
):
    """
    Public catalog, newest first.
    """
    return service.list_estates(session, skip=skip, limit=limit)


@router.get(
    "/count",
    response_model=CountRead,
    dependencies=[Depends(require_auth)],
)
def count_estates(session: Session = Depends(get_session)):
    return CountRead(count=service.count_estates(session))


@router.get("/{estate_id}", response_model=EstateRead)
def get_estate(
    estate_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single estate by id.

    - Public endpoint (estate details page).
    """
    return service.get_estate(session, estate_id)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=EstateRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_estate(
    payload: EstateCreate,
    session: Session = Depends(get_session),
):
    """
    Create a new estate (admin only).
    """
    return service.create_estate(session, payload)


@router.patch(
    "/{estate_id}",
    response_model=EstateRead,
    dependencies=[Depends(require_admin)],
)
def update_estate(
    estate_id: uuid.UUID,
    payload: EstateUpdate,
    session: Session = Depends(get_session),
    storage: ImageStorage | None = Depends(get_optional_storage),
):
    """
    Update an existing estate (admin only).

    - Omitted fields are left as they are.
    - `description` and `image_url` can be cleared with null.
    """
    return service.update_estate(session, estate_id, payload, storage)


@router.delete(
    "/{estate_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_estate(
    estate_id: uuid.UUID,
    session: Session = Depends(get_session),
    storage: ImageStorage | None = Depends(get_optional_storage),
):
    """
    Delete an estate and its stored image (admin only).
    """
    service.delete_estate(session, estate_id, storage)
    return None


@router.post(
    "/{estate_id}/image",
    response_model=EstateRead,
    dependencies=[Depends(require_admin)],
    summary="Upload or replace the image of an estate",
)
def upload_estate_image(
    estate_id: uuid.UUID,
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
    storage: ImageStorage = Depends(get_storage),
):
    """
    Upload a new image for the estate.

    - Accepts JPEG, PNG, WEBP (max 5MB).
    - Replaces (and deletes) any previous image.
    """
    if not file.content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing content-type for uploaded file",
        )

    file_bytes = file.file.read()
    return service.set_image(
        session=session,
        storage=storage,
        estate_id=estate_id,
        content_type=file.content_type,
        file_bytes=file_bytes,
    )
