"""Utility package"""

from .exceptions import (
    AlreadyRecordingError,
    AudioProcessingError,
    AudioRecordingError,
    BackgroundRestrictedError,
    ComponentStateError,
    ConfigurationError,
    ContextReleasedError,
    DecodeFailureError,
    ErrorCategory,
    ErrorSeverity,
    NotPlayingError,
    NotRecordingError,
    PermissionDeniedError,
    RecordingInterruptedError,
    SpeakBetterError,
    UnsupportedVisualizationTypeError,
    wrap_exception,
)
from .periodic import PeriodicTask
from .unified_logger import LogCategory, LogLevel, app_logger, logger

__all__ = [
    # Logging
    "logger",
    "app_logger",
    "LogCategory",
    "LogLevel",
    # Timers
    "PeriodicTask",
    # Exceptions
    "SpeakBetterError",
    "ErrorCategory",
    "ErrorSeverity",
    "PermissionDeniedError",
    "AlreadyRecordingError",
    "NotRecordingError",
    "BackgroundRestrictedError",
    "RecordingInterruptedError",
    "AudioRecordingError",
    "AudioProcessingError",
    "NotPlayingError",
    "DecodeFailureError",
    "ContextReleasedError",
    "UnsupportedVisualizationTypeError",
    "ComponentStateError",
    "ConfigurationError",
    "wrap_exception",
]
