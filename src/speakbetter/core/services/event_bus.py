"""Event bus - thread-safe publish/subscribe

Usage:
    bus = EventBus()
    listener_id = bus.subscribe(Events.RECORDING_STOPPED, on_stopped)
    bus.emit(Events.RECORDING_STOPPED, {"duration": 4.2})
    bus.unsubscribe(Events.RECORDING_STOPPED, listener_id)

Listeners run synchronously on the emitting thread. A listener that raises is
logged and skipped; the remaining listeners still run.
"""

import threading
import time
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from ...utils import app_logger


@dataclass
class EventListener:
    """Registered listener"""

    id: str
    callback: Callable[[Any], None]
    is_once: bool = False
    created_at: float = field(default_factory=time.time)
    call_count: int = 0


@dataclass
class EventStats:
    """Per-event counters"""

    name: str
    emit_count: int = 0
    error_count: int = 0
    last_emitted: float = 0.0


class EventBus:
    """In-process event bus"""

    def __init__(self):
        self._listeners: Dict[str, List[EventListener]] = defaultdict(list)
        self._stats: Dict[str, EventStats] = {}
        self._lock = threading.RLock()
        self._enabled = True

    def subscribe(
        self, event_name: str, callback: Callable[[Any], None], is_once: bool = False
    ) -> str:
        """Subscribe to an event

        Returns:
            Listener id for ``unsubscribe``
        """
        with self._lock:
            listener = EventListener(id=str(uuid.uuid4()), callback=callback, is_once=is_once)
            self._listeners[event_name].append(listener)
            return listener.id

    def once(self, event_name: str, callback: Callable[[Any], None]) -> str:
        return self.subscribe(event_name, callback, is_once=True)

    def unsubscribe(self, event_name: str, listener_id: str) -> bool:
        with self._lock:
            listeners = self._listeners.get(event_name, [])
            remaining = [l for l in listeners if l.id != listener_id]
            removed = len(remaining) < len(listeners)
            self._listeners[event_name] = remaining
            return removed

    def emit(self, event_name: str, data: Any = None) -> None:
        """Deliver ``data`` to every listener of ``event_name``"""
        if not self._enabled:
            return

        with self._lock:
            stats = self._stats.setdefault(event_name, EventStats(event_name))
            stats.emit_count += 1
            stats.last_emitted = time.time()
            listeners = list(self._listeners.get(event_name, []))
            once_ids = {l.id for l in listeners if l.is_once}
            if once_ids:
                self._listeners[event_name] = [
                    l for l in self._listeners[event_name] if l.id not in once_ids
                ]

        for listener in listeners:
            try:
                listener.callback(data)
                listener.call_count += 1
            except Exception as e:
                with self._lock:
                    stats.error_count += 1
                app_logger.log_error(
                    e, "event_listener", {"event_name": event_name, "listener_id": listener.id}
                )

    def get_listener_count(self, event_name: str) -> int:
        with self._lock:
            return len(self._listeners.get(event_name, []))

    def get_event_stats(self, event_name: str) -> EventStats:
        with self._lock:
            return self._stats.get(event_name, EventStats(event_name))

    def clear_all_listeners(self) -> None:
        with self._lock:
            self._listeners.clear()

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False


class Events:
    """Event name constants"""

    # Recording
    RECORDING_STATE_CHANGED = "recording_state_changed"
    RECORDING_STARTED = "recording_started"
    RECORDING_PAUSED = "recording_paused"
    RECORDING_RESUMED = "recording_resumed"
    RECORDING_STOPPED = "recording_stopped"
    RECORDING_CANCELLED = "recording_cancelled"
    RECORDING_INTERRUPTED = "recording_interrupted"
    RECORDING_AUTO_STOPPED = "recording_auto_stopped"
    AUDIO_LEVEL_UPDATE = "audio_level_update"

    # Visualization contexts
    CONTEXT_CREATED = "context_created"
    CONTEXT_RELEASED = "context_released"
    CONTEXT_LEAK_DETECTED = "context_leak_detected"
    MEMORY_PRESSURE_CHANGED = "memory_pressure_changed"


__all__ = ["EventBus", "EventListener", "EventStats", "Events"]
