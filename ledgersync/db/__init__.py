"""
Database access layer for the ledger sync service.

All remote operations go through RemoteStore, which is scoped by Row Level
Security to the session user and always filters by user_id as well.

Includes:
- Supabase client initialization
- RemoteStore, the table contract consumed by the sync services
"""

from .client import get_supabase_client
from .remote_store import RemoteStore

__all__ = ["get_supabase_client", "RemoteStore"]
