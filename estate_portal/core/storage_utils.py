# estate_portal/core/storage_utils.py
import logging
import uuid

from fastapi import HTTPException, Request, status
from supabase import Client

logger = logging.getLogger(__name__)


class ImageStorage:
    """
    Estate images in a Supabase Storage bucket.

    One instance per app, created at startup and reached through the
    `get_storage` dependency.
    """

    def __init__(self, client: Client, bucket: str = "assets"):
        self.client = client
        self.bucket = bucket

    def upload(self, path: str, file_bytes: bytes, content_type: str) -> str:
        """
        Upload raw bytes and return the object's public URL.

        If a file already exists at this path, it will be overwritten
        thanks to the 'upsert' option.

        Args:
            path: Full object path inside the bucket.
                  Example: "estates/<uuid>/<uuid>.png"
            file_bytes: File content in bytes.
            content_type: MIME type stored with the object.

        Raises:
            Any exception raised by Supabase client if upload fails.
        """
        self.client.storage.from_(self.bucket).upload(
            path,
            file_bytes,
            {"upsert": "true", "content-type": content_type},
        )
        return self.client.storage.from_(self.bucket).get_public_url(path)

    def delete(self, path: str) -> None:
        """Delete an object by its path relative to the bucket."""
        # Supabase Python client expects a list of paths.
        self.client.storage.from_(self.bucket).remove([path])

    def extract_path_from_public_url(self, url: str) -> str | None:
        """
        Given a public URL, extract the object path relative to the bucket.

        Example:
            https://<proj>.supabase.co/storage/v1/object/public/assets/estates/e/x.png
            -> 'estates/e/x.png'
        """
        return extract_path_from_public_url(url, self.bucket)

    def delete_public_url(self, url: str) -> None:
        """
        Best-effort delete of a file by its public URL.

        No-op if the URL does not belong to this bucket (e.g. an external
        image link typed in by an admin). Failures are logged, not raised.
        """
        path = self.extract_path_from_public_url(url)
        if not path:
            return
        try:
            self.delete(path)
        except Exception as exc:
            logger.warning(f"Could not delete storage object {path}: {exc}")


def extract_path_from_public_url(url: str, bucket: str) -> str | None:
    marker = f"/storage/v1/object/public/{bucket}/"
    idx = url.find(marker)
    if idx == -1:
        return None
    path = url[idx + len(marker) :]
    # get_public_url may append an empty query string
    return path.split("?", 1)[0] or None


def generate_filename(ext: str) -> str:
    """
    Generate a random filename using UUID4.

    Args:
        ext: File extension without dot (e.g. "png", "jpg")

    Returns:
        A filename like "<uuid4>.png"
    """
    return f"{uuid.uuid4()}.{ext}"


def get_storage(request: Request) -> ImageStorage:
    """
    FastAPI dependency returning the app's ImageStorage.

    Raises:
        HTTPException(503): if storage is not configured.
    """
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Image storage is not configured",
        )
    return storage


def get_optional_storage(request: Request) -> ImageStorage | None:
    """Like get_storage, but None instead of 503 when storage is off."""
    return getattr(request.app.state, "storage", None)
