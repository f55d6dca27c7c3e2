"""
Resolve the acting user of the active Supabase session.

Credential entry and OAuth redirects happen outside this package; all the
sync layer needs is "who is logged in right now, if anyone".
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from supabase import Client

logger = logging.getLogger(__name__)


@dataclass
class AuthenticatedUser:
    """
    The user the active session belongs to.

    Attributes:
        user_id: The user's UUID (auth.uid() in RLS policies)
        email: The user's email, when the auth server returns one
    """
    user_id: str
    email: Optional[str] = None


class AuthProvider(Protocol):
    async def get_current_user(self) -> Optional[AuthenticatedUser]:
        ...


class SessionAuthProvider:
    """Look up the session user through the Supabase auth API."""

    def __init__(self, client: Client) -> None:
        self.client = client

    async def get_current_user(self) -> Optional[AuthenticatedUser]:
        """
        Return the logged-in user, or None.

        A missing session, an expired token and an unreachable auth server
        all mean "no user" here; the failure is logged, not raised.
        """
        try:
            response = self.client.auth.get_user()
        except Exception as e:
            logger.warning(f"Failed to resolve the session user: {e}")
            return None

        user = getattr(response, "user", None) if response is not None else None
        if user is None or not getattr(user, "id", None):
            logger.debug("No authenticated user in the current session")
            return None

        return AuthenticatedUser(user_id=str(user.id), email=getattr(user, "email", None))
