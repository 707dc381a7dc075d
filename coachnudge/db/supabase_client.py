"""
Supabase client construction.
Uses the service-role key: the scheduler and the callback run without an end user.
"""
from supabase import create_client, Client, ClientOptions

from coachnudge.config import Settings


def create_supabase(settings: Settings) -> Client:
    options = ClientOptions(
        postgrest_client_timeout=settings.http_timeout,
        auto_refresh_token=False,
        persist_session=False,
    )
    return create_client(settings.supabase_url, settings.supabase_key, options=options)
