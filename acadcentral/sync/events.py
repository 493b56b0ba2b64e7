"""
AcadCentral Department Portal
Sync event bus: the observable side of startup sync and live pushes

Publishers:  SyncEngine (state changes, hydration, pushes)
Subscribers: anything that wants to know whether the mirror kept up
"""

import asyncio
import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from ..utils.helpers import format_timestamp, utc_now

logger = logging.getLogger(__name__)


class SyncEventType(str, Enum):
    """All events published by the sync engine"""

    # State events
    STATE_CHANGED = "state_changed"

    # Startup events
    HYDRATED = "hydrated"
    HYDRATION_FAILED = "hydration_failed"
    MIGRATED = "migrated"
    SNAPSHOT_PUSHED = "snapshot_pushed"
    SNAPSHOT_PUSH_FAILED = "snapshot_push_failed"

    # Live sync events
    PUSH_SUCCEEDED = "push_succeeded"
    PUSH_FAILED = "push_failed"


@dataclass
class SyncEvent:
    """An event in the sync lifecycle"""
    type: SyncEventType
    key: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "key": self.key,
            "data": self.data,
            "timestamp": format_timestamp(self.timestamp),
        }


# Handlers may be plain callables or coroutine functions
SyncEventHandler = Callable[[SyncEvent], Any]


class EventBus:
    """
    Pub/sub for sync events.

    - Subscribe per event type or to everything with "*"
    - Sync and async handlers
    - Bounded event history
    """

    def __init__(self, max_history: int = 500):
        self._lock = threading.Lock()
        self._handlers: Dict[SyncEventType, List[SyncEventHandler]] = defaultdict(list)
        self._wildcard_handlers: List[SyncEventHandler] = []
        self._history: List[SyncEvent] = []
        self._max_history = max_history

    def subscribe(self, event_type: Union[SyncEventType, str], handler: SyncEventHandler) -> None:
        with self._lock:
            if event_type == "*":
                self._wildcard_handlers.append(handler)
            else:
                self._handlers[SyncEventType(event_type)].append(handler)

    def unsubscribe(self, event_type: Union[SyncEventType, str], handler: SyncEventHandler) -> None:
        with self._lock:
            if event_type == "*":
                handlers = self._wildcard_handlers
            else:
                handlers = self._handlers[SyncEventType(event_type)]
            if handler in handlers:
                handlers.remove(handler)

    async def publish(self, event: SyncEvent) -> None:
        """
        Record the event and call its handlers: type handlers first, then
        wildcard handlers. A failing handler is logged and does not stop
        the others.
        """
        with self._lock:
            self._history.append(event)
            if len(self._history) > self._max_history:
                self._history = self._history[-self._max_history:]
            handlers = list(self._handlers[event.type]) + list(self._wildcard_handlers)

        for handler in handlers:
            try:
                result = handler(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"[EventBus] Handler error for {event.type.value}: {e}")

    def publish_sync(self, event: SyncEvent) -> None:
        """
        Publish from non-async code: scheduled on the running loop if there
        is one, otherwise run to completion here.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.publish(event))
            return
        loop.create_task(self.publish(event))

    async def emit(
        self,
        event_type: SyncEventType,
        key: Optional[str] = None,
        **data: Any
    ) -> SyncEvent:
        event = SyncEvent(type=event_type, key=key, data=data)
        await self.publish(event)
        return event

    def history(
        self,
        event_type: Optional[SyncEventType] = None,
        limit: Optional[int] = None
    ) -> List[SyncEvent]:
        """Recorded events, oldest first, optionally filtered by type"""
        with self._lock:
            events = list(self._history)
        if event_type is not None:
            events = [e for e in events if e.type == event_type]
        if limit is not None:
            events = events[-limit:]
        return events

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()


__all__ = ["SyncEventType", "SyncEvent", "SyncEventHandler", "EventBus"]
