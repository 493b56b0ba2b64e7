"""
AcadCentral Department Portal
Sync engine: startup hydration, migration and push, then live mirroring

    COLD -> HYDRATING -> MIGRATING -> PUSHING -> LIVE
                 |                       |
                 +------> DEGRADED <-----+

The mirror is authoritative only during hydration; afterwards the Local
Store is, and every write to a synced collection is pushed to the mirror
in the background. DEGRADED is terminal for the process lifetime.
"""

import asyncio
import concurrent.futures
import json
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Union

from ..config import get_settings
from ..exceptions import MirrorUnavailableException, SyncException
from ..store import LocalStore, keys
from .client import MirrorClient
from .events import EventBus, SyncEvent, SyncEventType
from .migrations import STORE_MIGRATIONS, StoreMigration, run_store_migrations
from .seed import seed_defaults

logger = logging.getLogger(__name__)

PushHandle = Union[asyncio.Task, concurrent.futures.Future]


class SyncState(str, Enum):
    COLD = "cold"
    HYDRATING = "hydrating"
    MIGRATING = "migrating"
    PUSHING = "pushing"
    LIVE = "live"
    DEGRADED = "degraded"


# Valid state transitions
SYNC_TRANSITIONS = {
    SyncState.COLD: {SyncState.HYDRATING},
    SyncState.HYDRATING: {SyncState.MIGRATING, SyncState.DEGRADED},
    SyncState.MIGRATING: {SyncState.PUSHING},
    SyncState.PUSHING: {SyncState.LIVE, SyncState.DEGRADED},
    SyncState.LIVE: set(),
    SyncState.DEGRADED: set(),
}


class SyncEngine:
    """
    Drives one Local Store through the startup protocol and mirrors its
    writes afterwards.

    Live pushes never block or fail the local write. Each one runs as a
    task on the engine's event loop; ``push_collection`` returns it so a
    caller may await the outcome (``True`` on success), and every outcome
    is also published on the event bus.
    """

    def __init__(
        self,
        store: LocalStore,
        client: Optional[MirrorClient] = None,
        events: Optional[EventBus] = None,
        migrations: Sequence[StoreMigration] = STORE_MIGRATIONS,
        seeder: Callable[[LocalStore], None] = seed_defaults,
        hydration_timeout: Optional[float] = None,
    ):
        self.store = store
        self.client = client or MirrorClient()
        self.events = events or EventBus()
        self.migrations = migrations
        self.seeder = seeder
        self.hydration_timeout = (
            hydration_timeout if hydration_timeout is not None
            else get_settings().HYDRATION_TIMEOUT_SECONDS
        )

        self._state = SyncState.COLD
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._pending: Set[PushHandle] = set()
        self._subscribed = False

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_live(self) -> bool:
        return self._state == SyncState.LIVE

    async def _transition(self, new_state: SyncState) -> None:
        if new_state not in SYNC_TRANSITIONS[self._state]:
            raise SyncException(
                f"Invalid sync transition {self._state.value} -> {new_state.value}",
                sync_type="state",
            )
        old_state = self._state
        self._state = new_state
        logger.debug(f"[SyncEngine] {old_state.value} -> {new_state.value}")
        await self.events.emit(
            SyncEventType.STATE_CHANGED,
            from_state=old_state.value,
            to_state=new_state.value,
        )

    # --- startup ---------------------------------------------------------

    async def start(self) -> SyncState:
        """Run hydrate -> migrate -> push once; returns the resulting state"""
        if self._state != SyncState.COLD:
            raise SyncException("Sync engine already started", sync_type="startup")

        self._loop = asyncio.get_running_loop()
        self.store.subscribe(self._on_store_write)
        self._subscribed = True

        await self._transition(SyncState.HYDRATING)
        if await self._hydrate():
            await self._transition(SyncState.MIGRATING)
            await self._migrate()
            await self._transition(SyncState.PUSHING)
            if await self._push_snapshot():
                await self._transition(SyncState.LIVE)
                logger.info("✅ Real-time mirror sync enabled")
            else:
                await self._transition(SyncState.DEGRADED)
        else:
            await self._transition(SyncState.DEGRADED)
            await self._migrate()

        return self._state

    async def _hydrate(self) -> bool:
        try:
            data = await self.client.fetch_all(timeout=self.hydration_timeout)
        except MirrorUnavailableException as e:
            logger.warning(f"⚠️ Mirror unavailable, using the Local Store only: {e.message}")
            await self.events.emit(SyncEventType.HYDRATION_FAILED, error=e.message)
            return False

        hydrated = []
        for key, value in data.items():
            if key in keys.SYNC_KEYS:
                # Straight to the store: hydration must not echo back to the mirror
                self.store.write_json(key, value, notify=False)
                hydrated.append(key)

        logger.info(f"✅ Local Store hydrated from mirror ({len(hydrated)} collections)")
        await self.events.emit(SyncEventType.HYDRATED, collections=hydrated)
        return True

    async def _migrate(self) -> None:
        applied = run_store_migrations(self.store, self.migrations)
        self.seeder(self.store)
        await self.events.emit(SyncEventType.MIGRATED, versions=applied)

    def snapshot(self) -> Dict[str, Any]:
        """Every synced collection present in the store, decoded where possible"""
        snapshot = {}
        for key in keys.COLLECTION_KEYS:
            raw = self.store.get_item(key)
            if not raw:
                continue
            try:
                snapshot[key] = json.loads(raw)
            except ValueError:
                snapshot[key] = raw
        return snapshot

    async def _push_snapshot(self) -> bool:
        snapshot = self.snapshot()
        try:
            response = await self.client.sync_all(snapshot)
        except MirrorUnavailableException as e:
            logger.warning(f"⚠️ Post-migration push failed, staying local-only: {e.message}")
            await self.events.emit(SyncEventType.SNAPSHOT_PUSH_FAILED, error=e.message)
            return False

        await self.events.emit(
            SyncEventType.SNAPSHOT_PUSHED,
            collections=len(snapshot),
            total=response.get("total"),
        )
        return True

    # --- live sync -------------------------------------------------------

    def _on_store_write(self, key: str, value: str) -> Optional[PushHandle]:
        if self._state != SyncState.LIVE or key not in keys.SYNC_KEYS:
            return None
        return self._schedule(key, self._push(key, value))

    def push_collection(self, key: str) -> Optional[PushHandle]:
        """Push one collection's current contents now; None unless live and synced"""
        if self._state != SyncState.LIVE or key not in keys.SYNC_KEYS:
            return None
        value = self.store.get_item(key)
        if value is None:
            return None
        return self._schedule(key, self._push(key, value))

    def _schedule(self, key: str, coro) -> Optional[PushHandle]:
        """
        Run a push on the engine's loop. When the loop is gone the push is
        dropped and reported as PUSH_FAILED; the writer never sees an error.
        """
        loop = self._loop
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if loop is not None and running is loop:
            handle = loop.create_task(coro)
        else:
            if loop is None or loop.is_closed():
                coro.close()
                self._report_unscheduled(key, "sync event loop is closed")
                return None
            try:
                # Written from another thread: hand the push to the engine's loop
                handle = asyncio.run_coroutine_threadsafe(coro, loop)
            except RuntimeError as e:
                coro.close()
                self._report_unscheduled(key, str(e))
                return None

        self._pending.add(handle)
        handle.add_done_callback(self._pending.discard)
        return handle

    def _report_unscheduled(self, key: str, reason: str) -> None:
        logger.warning(f"⚠️ Live push of {key} not scheduled: {reason}")
        self.events.publish_sync(
            SyncEvent(type=SyncEventType.PUSH_FAILED, key=key, data={"error": reason})
        )

    async def _push(self, key: str, value: str) -> bool:
        try:
            response = await self.client.sync(key, value)
        except MirrorUnavailableException as e:
            logger.warning(f"⚠️ Live push of {key} failed: {e.message}")
            await self.events.emit(SyncEventType.PUSH_FAILED, key=key, error=e.message)
            return False

        await self.events.emit(
            SyncEventType.PUSH_SUCCEEDED,
            key=key,
            count=response.get("count"),
            skipped=response.get("skipped", False),
        )
        return True

    def pending_pushes(self) -> List[PushHandle]:
        return list(self._pending)

    async def wait_for_pending(self) -> List[bool]:
        """Wait for every in-flight push, including ones scheduled meanwhile"""
        outcomes = []
        while self._pending:
            handles = [
                asyncio.wrap_future(h) if isinstance(h, concurrent.futures.Future) else h
                for h in list(self._pending)
            ]
            outcomes.extend(await asyncio.gather(*handles))
        return outcomes

    async def close(self) -> None:
        """Stop mirroring, let in-flight pushes finish and close the client"""
        if self._subscribed:
            self.store.unsubscribe(self._on_store_write)
            self._subscribed = False
        await self.wait_for_pending()
        await self.client.aclose()


__all__ = ["SyncState", "SyncEngine", "SYNC_TRANSITIONS", "PushHandle"]
