"""Thread-backed periodic timer with error handling"""

import threading
from typing import Callable, Optional

from .unified_logger import app_logger


class PeriodicTask:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread

    Exceptions raised by the callback are routed to ``error_callback`` (or
    logged) and the timer keeps running.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        callback: Callable[[], None],
        error_callback: Optional[Callable[[Exception], None]] = None,
    ):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")

        self._name = name
        self._interval = interval
        self._callback = callback
        self._error_callback = error_callback
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def _safe_callback(self) -> None:
        try:
            self._callback()
        except Exception as e:
            if self._error_callback:
                try:
                    self._error_callback(e)
                except Exception as inner_e:
                    app_logger.log_error(inner_e, f"{self._name}_error_callback")
            else:
                app_logger.log_error(e, f"{self._name}_callback")

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            self._safe_callback()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run, name=self._name, daemon=True
            )
            self._thread.start()

    def stop(self, timeout: float = 1.0) -> None:
        """Stop the timer; safe to call from inside the callback"""
        with self._lock:
            thread = self._thread
            self._thread = None
        self._stop_event.set()

        # Joining our own thread would deadlock
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def is_active(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    @property
    def interval(self) -> float:
        return self._interval
