"""Visualization context lifecycle manager

Tracks host drawing surfaces behind integer handles, reports contexts that
sit idle for too long and sheds half of them under critical memory
pressure.
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence

from ...utils import ContextReleasedError, LogCategory, PeriodicTask, app_logger
from ...visualization.pipeline import RenderResult, VisualizationPipeline
from ...visualization.primitives import DrawSink, PrimitiveRecorder, replay
from ...visualization.quality import MemoryPressure, MemoryPressureMonitor
from ..base.lifecycle_component import LifecycleComponent
from .config import ConfigKeys
from .config.constants import Lifecycle
from .event_bus import EventBus, Events


class SurfaceProvider(ABC):
    """Creates and releases host drawing surfaces"""

    @abstractmethod
    def create_surface(self, width: float, height: float) -> DrawSink:
        pass

    @abstractmethod
    def release_surface(self, surface: DrawSink) -> None:
        pass


class RecorderSurfaceProvider(SurfaceProvider):
    """Headless surfaces that record the calls replayed onto them"""

    def create_surface(self, width: float, height: float) -> PrimitiveRecorder:
        return PrimitiveRecorder(width, height)

    def release_surface(self, surface: DrawSink) -> None:
        if isinstance(surface, PrimitiveRecorder):
            surface.reset()


@dataclass
class ContextSlot:
    handle: int
    surface: Optional[DrawSink]
    width: float
    height: float
    created_at: float
    last_used_at: float
    active: bool = True
    leak_reported: bool = False

    @property
    def size(self) -> tuple:
        return (self.width, self.height)


class ContextLifecycleManager(LifecycleComponent):
    """Arena of visualization contexts

    Handles come from a counter and are never reused. Only active slots stay
    in the arena; a handle below the counter that is no longer there was
    released, so draws against it fail with ``ContextReleasedError``. The
    periodic sweep only try-locks the arena and skips its tick when the lock
    is busy.
    """

    def __init__(
        self,
        pipeline: Optional[VisualizationPipeline] = None,
        surface_provider: Optional[SurfaceProvider] = None,
        event_service: Optional[EventBus] = None,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = Lifecycle.SWEEP_INTERVAL,
        idle_timeout: float = Lifecycle.IDLE_TIMEOUT,
        memory_monitor: Optional[MemoryPressureMonitor] = None,
    ):
        super().__init__("ContextLifecycleManager")
        self._pipeline = pipeline or VisualizationPipeline()
        self._surfaces = surface_provider or RecorderSurfaceProvider()
        self._events = event_service or EventBus()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._idle_timeout = idle_timeout
        self._memory_monitor = memory_monitor

        self._lock = threading.Lock()
        # Active slots only, oldest first
        self._slots: Dict[int, ContextSlot] = {}
        self._next_handle = 0
        self._sweep_task: Optional[PeriodicTask] = None
        self._skipped_sweeps = 0

    @classmethod
    def from_config(
        cls,
        config,
        pipeline: Optional[VisualizationPipeline] = None,
        surface_provider: Optional[SurfaceProvider] = None,
        event_service: Optional[EventBus] = None,
        memory_monitor: Optional[MemoryPressureMonitor] = None,
    ) -> "ContextLifecycleManager":
        return cls(
            pipeline=pipeline,
            surface_provider=surface_provider,
            event_service=event_service,
            sweep_interval=config.get_setting(
                ConfigKeys.LIFECYCLE_SWEEP_INTERVAL, Lifecycle.SWEEP_INTERVAL
            ),
            idle_timeout=config.get_setting(
                ConfigKeys.LIFECYCLE_IDLE_TIMEOUT, Lifecycle.IDLE_TIMEOUT
            ),
            memory_monitor=memory_monitor or MemoryPressureMonitor.from_config(config),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _do_start(self) -> bool:
        self._sweep_task = PeriodicTask(
            "context-sweep", self._sweep_interval, self._on_sweep_timer
        )
        self._sweep_task.start()
        return True

    def _do_stop(self) -> bool:
        if self._sweep_task is not None:
            self._sweep_task.stop()
            self._sweep_task = None
        self.release_all()
        return True

    # ------------------------------------------------------------------
    # Contexts
    # ------------------------------------------------------------------

    def create_context(
        self, width: Optional[float] = None, height: Optional[float] = None
    ) -> int:
        """Create a surface and return its handle"""
        width = width or self._pipeline.style.width
        height = height or self._pipeline.style.height
        surface = self._surfaces.create_surface(width, height)

        now = self._clock()
        with self._lock:
            handle = self._next_handle
            self._next_handle += 1
            self._slots[handle] = ContextSlot(
                handle=handle,
                surface=surface,
                width=width,
                height=height,
                created_at=now,
                last_used_at=now,
            )

        app_logger.log_lifecycle_event(
            "Visualization context created",
            {"handle": handle, "width": width, "height": height},
        )
        self._events.emit(
            Events.CONTEXT_CREATED, {"handle": handle, "width": width, "height": height}
        )
        return handle

    def _deactivate(self, slot: ContextSlot) -> None:
        """Drop from the arena; lock must be held"""
        slot.active = False
        self._slots.pop(slot.handle, None)

    def _finish_release(self, slots: Sequence[ContextSlot], reason: str) -> None:
        for slot in slots:
            surface, slot.surface = slot.surface, None
            try:
                self._surfaces.release_surface(surface)
            except Exception as e:
                app_logger.log_error(e, "context_release_surface", {"handle": slot.handle})
            app_logger.log_lifecycle_event(
                "Visualization context released", {"handle": slot.handle, "reason": reason}
            )
            self._events.emit(
                Events.CONTEXT_RELEASED, {"handle": slot.handle, "reason": reason}
            )

    def release(self, handle: int) -> bool:
        """Release a context; releasing twice is allowed

        Returns:
            True if this call released it
        """
        with self._lock:
            slot = self._slot(handle)
            if slot is None:
                return False
            self._deactivate(slot)
        self._finish_release([slot], "explicit")
        return True

    def release_all(self) -> List[int]:
        with self._lock:
            released = list(self._slots.values())
            for slot in released:
                self._deactivate(slot)
        self._finish_release(released, "shutdown")
        return [slot.handle for slot in released]

    def _slot(self, handle: int) -> Optional[ContextSlot]:
        if isinstance(handle, int):
            return self._slots.get(handle)
        return None

    def _was_issued(self, handle: int) -> bool:
        return isinstance(handle, int) and 0 <= handle < self._next_handle

    def _touch(self, handle: int) -> ContextSlot:
        with self._lock:
            slot = self._slot(handle)
            if slot is None:
                if self._was_issued(handle):
                    raise ContextReleasedError(handle)
                raise ContextReleasedError(
                    handle, f"Unknown visualization context {handle}"
                )
            slot.last_used_at = self._clock()
            slot.leak_reported = False
            return slot

    def _present(self, slot: ContextSlot, result: RenderResult) -> RenderResult:
        with self._lock:
            # Released between render and replay
            if not slot.active:
                raise ContextReleasedError(slot.handle)
            if result.primitives:
                replay(result.primitives, slot.surface)
        return result

    def draw(self, handle: int, samples, spec, tier=None, visible: bool = True) -> RenderResult:
        """Render ``samples`` through the pipeline onto the context's surface

        Raises:
            ContextReleasedError: the handle was released (or never existed)
        """
        slot = self._touch(handle)
        result = self._pipeline.render(
            samples,
            spec,
            tier=tier,
            visible=visible,
            style=self._slot_style(slot),
        )
        return self._present(slot, result)

    def draw_word_timings(
        self,
        handle: int,
        word_timings,
        current_time: float,
        total_duration: float,
        tier=None,
        visible: bool = True,
    ) -> RenderResult:
        slot = self._touch(handle)
        result = self._pipeline.render_word_timings(
            word_timings,
            current_time,
            total_duration,
            tier=tier,
            visible=visible,
            style=self._slot_style(slot),
        )
        return self._present(slot, result)

    def _slot_style(self, slot: ContextSlot):
        style = self._pipeline.style
        if (style.width, style.height) == slot.size:
            return style
        return replace(style, width=slot.width, height=slot.height)

    def surface(self, handle: int) -> DrawSink:
        with self._lock:
            slot = self._slot(handle)
            if slot is None:
                raise ContextReleasedError(handle)
            return slot.surface

    # ------------------------------------------------------------------
    # Sweep and memory pressure
    # ------------------------------------------------------------------

    def sweep(self, now: Optional[float] = None) -> Optional[List[int]]:
        """Report contexts idle longer than the timeout

        Each context is reported once per idle period. Returns the handles
        reported by this sweep, or None if the arena was busy.
        """
        if not self._lock.acquire(blocking=False):
            self._skipped_sweeps += 1
            return None
        try:
            now = self._clock() if now is None else now
            leaked = []
            for slot in self._slots.values():
                if (
                    not slot.leak_reported
                    and now - slot.last_used_at > self._idle_timeout
                ):
                    slot.leak_reported = True
                    leaked.append((slot.handle, now - slot.last_used_at))
        finally:
            self._lock.release()

        for handle, idle_seconds in leaked:
            app_logger.warning(
                "Visualization context idle, possible leak",
                LogCategory.LIFECYCLE,
                context={"handle": handle, "idle_seconds": round(idle_seconds, 1)},
                component="lifecycle",
            )
            self._events.emit(
                Events.CONTEXT_LEAK_DETECTED,
                {"handle": handle, "idle_seconds": idle_seconds},
            )
        return [handle for handle, _ in leaked]

    def handle_memory_pressure(self, level: MemoryPressure) -> List[int]:
        """Apply a memory pressure level

        The level is forwarded to the pipeline's tier policy. At CRITICAL,
        the older half of the active contexts (rounded down) is released.

        Returns:
            Handles released by this call
        """
        self._pipeline.set_memory_pressure(level)
        self._events.emit(Events.MEMORY_PRESSURE_CHANGED, {"level": level.name})

        if level is not MemoryPressure.CRITICAL:
            return []

        with self._lock:
            active = list(self._slots.values())
            released = active[: len(active) // 2]
            for slot in released:
                self._deactivate(slot)

        app_logger.warning(
            "Critical memory pressure, releasing visualization contexts",
            LogCategory.LIFECYCLE,
            context={"active": len(active), "released": len(released)},
            component="lifecycle",
        )
        self._finish_release(released, "memory_pressure")
        return [slot.handle for slot in released]

    def _on_sweep_timer(self) -> None:
        self.sweep()
        if self._memory_monitor is not None:
            level = self._memory_monitor.poll()
            if level is not None:
                self.handle_memory_pressure(level)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def active_handles(self) -> List[int]:
        with self._lock:
            return list(self._slots)

    def is_active(self, handle: int) -> bool:
        with self._lock:
            return self._slot(handle) is not None

    def stats(self) -> Dict[str, int]:
        with self._lock:
            active = len(self._slots)
            return {
                "created": self._next_handle,
                "active": active,
                "released": self._next_handle - active,
                "leaks_reported": sum(
                    1 for slot in self._slots.values() if slot.leak_reported
                ),
                "skipped_sweeps": self._skipped_sweeps,
            }
