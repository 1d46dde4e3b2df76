"""Best-effort push of data and config changes to live listeners."""

from __future__ import annotations

import logging
from functools import lru_cache
from threading import Lock
from typing import Callable, List, Protocol, Union

from models.records import ConfigUpdateEvent, DataUpdateEvent
from settings import get_settings

logger = logging.getLogger(__name__)

Event = Union[DataUpdateEvent, ConfigUpdateEvent]
Listener = Callable[[Event], None]


class Notifier(Protocol):
    def subscribe(self, listener: Listener) -> None: ...

    def unsubscribe(self, listener: Listener) -> None: ...

    def publish(self, event: Event) -> None: ...

    @property
    def listener_count(self) -> int: ...


class BroadcastNotifier:
    """Registry of listeners; every published event goes to all of them."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []
        self._lock = Lock()

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def subscribe(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    def publish(self, event: Event) -> None:
        """Deliver ``event`` to a snapshot of the current listeners."""

        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception as exc:  # noqa: BLE001 - delivery is best effort
                logger.warning(
                    "Dropping event for failing listener",
                    extra={"event": event.name, "reason": str(exc)},
                )
        logger.debug(
            "Published event",
            extra={"event": event.name, "listener_count": len(listeners)},
        )


class NullNotifier:
    """Used when live connections are unavailable; drops everything."""

    @property
    def listener_count(self) -> int:
        return 0

    def subscribe(self, listener: Listener) -> None:
        return None

    def unsubscribe(self, listener: Listener) -> None:
        return None

    def publish(self, event: Event) -> None:
        return None


@lru_cache
def build_default_notifier() -> Notifier:
    if get_settings().realtime_enabled:
        return BroadcastNotifier()
    return NullNotifier()
