"""
Supabase client factory.

Uses the service role key: booking rows are read and written on behalf
of the authenticated app, row-level policies are enforced upstream.
"""

from supabase import create_client, Client

from app.config import get_settings


class SupabaseNotConfiguredError(Exception):
    """Raised when the Supabase URL or service role key is missing."""

    def __init__(self):
        self.message = "Supabase is not configured (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)"
        super().__init__(self.message)


def get_supabase_client() -> Client:
    """Get Supabase client with service role key for database operations."""
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise SupabaseNotConfiguredError()
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
    )
