from __future__ import annotations

from functools import lru_cache

from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from app.config import settings
from app.utils.logging import get_logger

logger = get_logger(__name__)


def _require_credentials() -> tuple[str, str]:
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise RuntimeError(
            "Missing Supabase configuration. Set APP_SUPABASE_URL and APP_SUPABASE_ANON_KEY."
        )
    return settings.supabase_url, settings.supabase_anon_key


@lru_cache(maxsize=1)
def get_session_supabase_client() -> Client:
    """Return the long-lived client backing an interactive session.

    It persists the session and refreshes tokens on its own, so auth state
    change notifications keep arriving for the lifetime of the process.
    """
    logger.debug("Initializing session Supabase client")
    url, anon_key = _require_credentials()
    return create_client(
        url,
        anon_key,
        options=ClientOptions(auto_refresh_token=True, persist_session=True),
    )


def create_request_supabase_client(bearer_token: str | None = None) -> Client:
    """Create a request-scoped Supabase client using the anon key.

    If a JWT is provided, set it as the PostgREST bearer so that RLS policies
    are enforced for all table operations in this request.
    """
    logger.debug("Creating request-scoped Supabase client")
    url, anon_key = _require_credentials()

    client = create_client(
        url,
        anon_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
    if bearer_token:
        client.postgrest.auth(bearer_token)
    return client
