"""Unified logging - one interface, category routing, tracing built in

All logging in speakbetter goes through this module. Records are handed to
loguru with ``category`` and ``component`` bound as extras, so any loguru sink
an application adds can filter or format on them.

As a library, speakbetter keeps its records disabled until the host opts in,
either with ``logger.configure(config_service)`` (console/file settings) or
directly with ``loguru.logger.enable("speakbetter")``.

Usage:
    from speakbetter.utils import logger

    logger.info("Pipeline ready", LogCategory.VISUALIZATION)
    logger.performance("render", 0.004, details={"tier": "minimal"})

    with logger.trace("stop_recording") as trace:
        ...
        trace.checkpoint("buffers_joined")
"""

import threading
import time
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from loguru import logger as _loguru

_PACKAGE = "speakbetter"

# Records stay silent until the host enables the package namespace
_loguru.disable(_PACKAGE)


class LogLevel(Enum):
    """Log levels"""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class LogCategory(Enum):
    """Log categories (used for filtering and routing)"""

    AUDIO = "audio"
    RECORDING = "recording"
    METRICS = "metrics"
    VISUALIZATION = "visualization"
    LIFECYCLE = "lifecycle"
    STARTUP = "startup"
    ERROR = "error"
    PERFORMANCE = "performance"


@dataclass
class TraceContext:
    """Performance trace context"""

    trace_id: str
    operation: str
    component: str = ""
    start_time: float = field(default_factory=time.time)
    parameters: Dict[str, Any] = field(default_factory=dict)
    checkpoints: List[Dict[str, Any]] = field(default_factory=list)

    def checkpoint(self, name: str, data: Dict[str, Any] = None) -> None:
        self.checkpoints.append(
            {
                "name": name,
                "timestamp": time.time(),
                "elapsed": time.time() - self.start_time,
                "data": data or {},
            }
        )

    def duration(self) -> float:
        return time.time() - self.start_time


_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[category]: <13} | "
    "{extra[component]} | {message} | {extra[context]}"
)


class UnifiedLogger:
    """Unified logger - singleton"""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, "_initialized"):
            return

        self._initialized = True
        self._config_service = None
        self._min_level = LogLevel.INFO
        self._console_output_enabled = False
        self._enabled_categories = set(LogCategory)
        self._file_sink_id: Optional[int] = None
        self._lock = threading.RLock()
        self._trace_counter = 0

    def configure(self, config_service) -> None:
        """Load logging settings from a config service and install sinks

        Args:
            config_service: anything exposing ``get_setting(key, default)``
        """
        self._config_service = config_service

        level_str = config_service.get_setting("logging.level", "INFO")
        self._min_level = self._string_to_log_level(level_str)

        categories = config_service.get_setting("logging.enabled_categories", [])
        if categories:
            try:
                self._enabled_categories = {LogCategory(cat) for cat in categories}
            except ValueError as e:
                self.warning(
                    "Unknown log category in config, keeping all categories",
                    LogCategory.STARTUP,
                    {"categories": categories, "error": str(e)},
                )
                self._enabled_categories = set(LogCategory)
        else:
            self._enabled_categories = set(LogCategory)

        self.set_console_output(
            bool(config_service.get_setting("logging.console_output", False))
        )

        log_file = config_service.get_setting("logging.file", None)
        if log_file:
            self.add_file_sink(log_file)

    def add_file_sink(self, path: str, rotation: str = "5 MB") -> None:
        """Write every speakbetter record to ``path`` (rotated by loguru)"""
        with self._lock:
            if self._file_sink_id is not None:
                _loguru.remove(self._file_sink_id)
            self._file_sink_id = _loguru.add(
                path,
                format=_FILE_FORMAT,
                rotation=rotation,
                encoding="utf-8",
                filter=lambda record: "category" in record["extra"],
            )
            _loguru.enable(_PACKAGE)

    def remove_file_sink(self) -> None:
        with self._lock:
            if self._file_sink_id is None:
                return
            _loguru.remove(self._file_sink_id)
            self._file_sink_id = None
            if not self._console_output_enabled:
                _loguru.disable(_PACKAGE)

    @staticmethod
    def _string_to_log_level(level_str: str) -> LogLevel:
        try:
            return LogLevel[str(level_str).upper()]
        except KeyError:
            return LogLevel.INFO

    def set_log_level(self, level: Union[str, LogLevel]) -> None:
        with self._lock:
            if isinstance(level, str):
                self._min_level = self._string_to_log_level(level)
            else:
                self._min_level = level

    def set_console_output(self, enabled: bool) -> None:
        """Toggle delivery of speakbetter records to loguru's handlers"""
        with self._lock:
            self._console_output_enabled = enabled
            if enabled or self._file_sink_id is not None:
                _loguru.enable(_PACKAGE)
            else:
                _loguru.disable(_PACKAGE)

    def set_enabled_categories(self, categories: List[LogCategory]) -> None:
        with self._lock:
            self._enabled_categories = set(categories)

    def get_log_level(self) -> LogLevel:
        return self._min_level

    def is_debug_enabled(self) -> bool:
        return self._min_level == LogLevel.DEBUG

    def _should_log(self, level: LogLevel, category: LogCategory) -> bool:
        # PERFORMANCE bypasses the level check
        if category != LogCategory.PERFORMANCE and level.value < self._min_level.value:
            return False
        return category in self._enabled_categories

    def _write_log(
        self,
        level: LogLevel,
        category: LogCategory,
        message: str,
        context: Dict[str, Any] = None,
        component: str = None,
    ) -> None:
        if not self._should_log(level, category):
            return

        _loguru.bind(
            category=category.value,
            component=component or "",
            context=context or {},
        ).log(level.name, message)

    # ============ Public API ============

    def debug(self, message: str, category: LogCategory = LogCategory.STARTUP,
              context: Dict[str, Any] = None, component: str = None) -> None:
        self._write_log(LogLevel.DEBUG, category, message, context, component)

    def info(self, message: str, category: LogCategory = LogCategory.STARTUP,
             context: Dict[str, Any] = None, component: str = None) -> None:
        self._write_log(LogLevel.INFO, category, message, context, component)

    def warning(self, message: str, category: LogCategory = LogCategory.ERROR,
                context: Dict[str, Any] = None, component: str = None) -> None:
        self._write_log(LogLevel.WARNING, category, message, context, component)

    def error(self, message: str, exception: Exception = None,
              category: LogCategory = LogCategory.ERROR,
              context: Dict[str, Any] = None, component: str = None) -> None:
        ctx = dict(context or {})
        if exception:
            ctx["exception"] = str(exception)
            ctx["exception_type"] = type(exception).__name__
        self._write_log(LogLevel.ERROR, category, message, ctx, component)

    def critical(self, message: str, exception: Exception = None,
                 category: LogCategory = LogCategory.ERROR,
                 context: Dict[str, Any] = None, component: str = None) -> None:
        ctx = dict(context or {})
        if exception:
            ctx["exception"] = str(exception)
            ctx["exception_type"] = type(exception).__name__
        self._write_log(LogLevel.CRITICAL, category, message, ctx, component)

    def performance(self, operation: str, duration: float,
                    details: Dict[str, Any] = None) -> None:
        ctx = dict(details or {})
        ctx["duration"] = f"{duration:.3f}s"
        self.info(
            f"Performance: {operation} - {duration:.3f}s",
            LogCategory.PERFORMANCE,
            ctx,
            "performance",
        )

    @contextmanager
    def trace(self, operation: str, component: str = "",
              parameters: Dict[str, Any] = None):
        """Trace an operation: start/complete records plus failures"""
        with self._lock:
            self._trace_counter += 1
            trace_id = f"trace_{self._trace_counter:04d}"

        trace_ctx = TraceContext(
            trace_id=trace_id,
            operation=operation,
            component=component,
            parameters=parameters or {},
        )

        self.debug(f"Starting {operation}", LogCategory.PERFORMANCE,
                   {"trace_id": trace_id, "parameters": parameters}, component)
        try:
            yield trace_ctx
        except Exception as e:
            trace_ctx.checkpoint("error", {"error": str(e), "type": type(e).__name__})
            self.error(f"Operation {operation} failed", e, LogCategory.ERROR,
                       {"trace_id": trace_id}, component)
            raise
        finally:
            duration = trace_ctx.duration()
            self.info(
                f"Completed {operation} in {duration:.3f}s",
                LogCategory.PERFORMANCE,
                {
                    "trace_id": trace_id,
                    "duration": f"{duration:.3f}s",
                    "checkpoints": len(trace_ctx.checkpoints),
                },
                component,
            )


logger = UnifiedLogger()


class AppLoggerAdapter:
    """Event-style helpers used across controllers and services"""

    def __init__(self, logger_instance: UnifiedLogger):
        self._logger = logger_instance

    def debug(self, message: str, category: LogCategory = LogCategory.STARTUP,
              context: Dict[str, Any] = None, component: str = None) -> None:
        self._logger.debug(message, category, context, component)

    def info(self, message: str, category: LogCategory = LogCategory.STARTUP,
             context: Dict[str, Any] = None, component: str = None) -> None:
        self._logger.info(message, category, context, component)

    def warning(self, message: str, category: LogCategory = LogCategory.ERROR,
                context: Dict[str, Any] = None, component: str = None) -> None:
        self._logger.warning(message, category, context, component)

    def log_audio_event(self, event: str, details: Dict[str, Any] = None) -> None:
        self._logger.info(f"Audio: {event}", LogCategory.AUDIO, details, "audio")

    def log_recording_event(self, event: str, details: Dict[str, Any] = None) -> None:
        self._logger.info(f"Recording: {event}", LogCategory.RECORDING, details, "recording")

    def log_visualization_event(self, event: str, details: Dict[str, Any] = None) -> None:
        self._logger.debug(
            f"Visualization: {event}", LogCategory.VISUALIZATION, details, "visualization"
        )

    def log_lifecycle_event(self, event: str, details: Dict[str, Any] = None) -> None:
        self._logger.info(f"Lifecycle: {event}", LogCategory.LIFECYCLE, details, "lifecycle")

    def log_state_change(self, machine: str, old_state: Any, new_state: Any,
                         context: Dict[str, Any] = None) -> None:
        old_name = getattr(old_state, "name", str(old_state))
        new_name = getattr(new_state, "name", str(new_state))
        details = {"machine": machine, "from": old_name, "to": new_name}
        if context:
            details.update(context)
        self._logger.info(
            f"State change: {machine} {old_name} -> {new_name}",
            LogCategory.RECORDING,
            details,
            machine,
        )

    def log_error(self, error: Exception, context: str,
                  details: Dict[str, Any] = None) -> None:
        tb_str = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        ctx = {"traceback": tb_str, "error_details": str(error)}
        if details:
            ctx.update(details)
        self._logger.error(f"Error in {context}", error, LogCategory.ERROR, ctx, context)

    def performance(self, operation: str, duration: float,
                    details: Dict[str, Any] = None) -> None:
        self._logger.performance(operation, duration, details)

    def trace(self, operation: str, component: str = "",
              parameters: Dict[str, Any] = None):
        return self._logger.trace(operation, component, parameters)

    def is_debug_enabled(self) -> bool:
        return self._logger.is_debug_enabled()


app_logger = AppLoggerAdapter(logger)


__all__ = [
    "logger",
    "app_logger",
    "AppLoggerAdapter",
    "UnifiedLogger",
    "LogLevel",
    "LogCategory",
    "TraceContext",
]
