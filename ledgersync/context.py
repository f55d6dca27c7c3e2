"""
Explicit wiring of the sync layer.

SyncContext builds every service once, in dependency order, and hands out
references; nothing in the package is a module-level singleton. The
owner (the FastAPI lifespan, a CLI, a test) calls startup() before use and
shutdown() when done.
"""

import logging

from ledgersync.auth.session import AuthProvider, SessionAuthProvider
from ledgersync.config import Settings
from ledgersync.db.client import get_supabase_client
from ledgersync.db.remote_store import RemoteStore
from ledgersync.services.activity_log import SyncActivityLog
from ledgersync.services.domain_service import DomainRegistry
from ledgersync.services.event_bus import EventBus
from ledgersync.services.reset_service import ResetService
from ledgersync.services.sync_service import SyncService
from ledgersync.services.verification_service import VerificationService
from ledgersync.storage.local_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)

logger = logging.getLogger(__name__)


class SyncContext:
    def __init__(
        self,
        remote_store: RemoteStore,
        auth_provider: AuthProvider,
        local_store: KeyValueStore,
        activity_log_size: int = 100,
        has_session: bool = False,
    ) -> None:
        self.remote_store = remote_store
        self.auth_provider = auth_provider
        self.local_store = local_store
        self.has_session = has_session

        self.event_bus = EventBus()
        self.verification = VerificationService(remote_store)
        self.sync = SyncService(
            remote_store=remote_store,
            auth_provider=auth_provider,
            event_bus=self.event_bus,
            verification=self.verification,
        )
        self.domains = DomainRegistry.build(local_store, self.sync)
        self.reset = ResetService(self.domains, local_store, self.event_bus)
        self.activity_log = SyncActivityLog(activity_log_size)
        self._started = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "SyncContext":
        client = get_supabase_client(
            settings.SUPABASE_ACCESS_TOKEN or None,
            settings.SUPABASE_REFRESH_TOKEN or None,
        )
        local_store: KeyValueStore
        if settings.LOCAL_STORE_PATH:
            local_store = JsonFileKeyValueStore(settings.LOCAL_STORE_PATH)
        else:
            local_store = InMemoryKeyValueStore()

        return cls(
            remote_store=RemoteStore(client),
            auth_provider=SessionAuthProvider(client),
            local_store=local_store,
            activity_log_size=settings.ACTIVITY_LOG_SIZE,
            has_session=settings.has_session,
        )

    @property
    def started(self) -> bool:
        return self._started

    async def startup(self) -> None:
        if self._started:
            return
        self.activity_log.attach(self.event_bus)
        await self.domains.load_all()
        self._started = True
        logger.info("Sync context started")

    async def shutdown(self) -> None:
        if not self._started:
            return
        self.activity_log.detach(self.event_bus)
        self.event_bus.clear()
        self._started = False
        logger.info("Sync context stopped")
