"""
Service layer for the ledger sync service.

- identity_service: identifier generation, validation and normalization
- event_bus: synchronous in-process publish/subscribe
- verification_service: read-after-write / read-after-delete checks
- sync_service: the sync coordinator (upsert, delete, batch)
- domain_service: per-kind in-memory collections backed by the local store
- reset_service: full reset and default-data pruning
- activity_log: recent sync events for the UI
"""

from .activity_log import SyncActivityLog
from .domain_service import DomainRegistry, DomainService, SyncGateway
from .event_bus import EventBus, Events
from .reset_service import ResetService, is_default_entity, is_reserved_key
from .sync_service import SyncService
from .verification_service import VerificationCheck, VerificationService

__all__ = [
    "SyncActivityLog",
    "DomainRegistry",
    "DomainService",
    "SyncGateway",
    "EventBus",
    "Events",
    "ResetService",
    "is_default_entity",
    "is_reserved_key",
    "SyncService",
    "VerificationCheck",
    "VerificationService",
]
