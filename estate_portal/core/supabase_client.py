# estate_portal/core/supabase_client.py
from supabase import create_client, Client

from estate_portal.core.config import Settings


def supabase_admin(settings: Settings) -> Client:
    """
    Create a Supabase client with the service role key.

    Use cases:
      - uploading estate images to the storage bucket
      - deleting replaced / orphaned images

    WARNING:
      - Never expose service role key to frontend.
      - Only backend should call this.

    Raises:
        RuntimeError: if SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is not set.
    """
    if not settings.SUPABASE_URL:
        raise RuntimeError("Missing SUPABASE_URL in .env")
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Missing SUPABASE_SERVICE_ROLE_KEY in .env")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
