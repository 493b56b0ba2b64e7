from .client import MirrorClient
from .engine import SyncEngine, SyncState
from .events import EventBus, SyncEvent, SyncEventType
from .migrations import STORE_MIGRATIONS, StoreMigration, run_store_migrations
from .seed import seed_defaults

__all__ = [
    "MirrorClient",
    "SyncEngine",
    "SyncState",
    "EventBus",
    "SyncEvent",
    "SyncEventType",
    "StoreMigration",
    "STORE_MIGRATIONS",
    "run_store_migrations",
    "seed_defaults",
]
