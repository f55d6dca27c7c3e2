"""
Supabase client factory.

The sync layer runs on behalf of a single active client session. The client
is created with the publishable key; when session tokens are supplied they
are attached so Row Level Security scopes every query to that user.
Without a session the client is anonymous and the auth lookup returns no
user, which the coordinator treats as "not logged in".
"""

import logging
from typing import Optional

from supabase import Client, create_client

from ledgersync.config import settings

logger = logging.getLogger(__name__)


def get_supabase_client(
    access_token: Optional[str] = None,
    refresh_token: Optional[str] = None,
) -> Client:
    """
    Create a Supabase client, optionally bound to a user session.

    Args:
        access_token: The user's JWT access token from Supabase Auth.
        refresh_token: Refresh token for the same session. Falls back to the
            access token, which is enough for short-lived processes.

    Returns:
        A Supabase client. Authenticated when a token was given.
    """
    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )

    if access_token:
        client.auth.set_session(access_token, refresh_token or access_token)
        logger.debug("Created Supabase client bound to a user session (RLS enforced)")
    else:
        logger.debug("Created anonymous Supabase client (no session)")

    return client
