import logging

from supabase import create_client, Client
from bento.config import settings

logger = logging.getLogger(__name__)


def get_supabase_client() -> Client:
    """
    Client for the learned-preference table.

    Preferences are written server-side on every category edit, so the
    service role key is required rather than the anon key.

    Raises:
        ValueError: SUPABASE_URL or SUPABASE_SERVICE_KEY is not configured
    """
    missing = [
        name for name, value in (
            ("SUPABASE_URL", settings.SUPABASE_URL),
            ("SUPABASE_SERVICE_KEY", settings.SUPABASE_SERVICE_KEY),
        )
        if not value
    ]
    if missing:
        raise ValueError(
            f"Preference backend 'supabase' needs {', '.join(missing)} to be set"
        )

    logger.info("Connecting preference store", extra={
        "table": settings.PREFERENCE_TABLE
    })
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
