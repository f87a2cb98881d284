"""Exception hierarchy for speakbetter

Provides structured error handling with context information,
error codes, and recovery suggestions.
"""

import time
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorSeverity(Enum):
    """Error severity levels"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for better classification"""

    CONFIGURATION = "configuration"
    AUDIO = "audio"
    RECORDING = "recording"
    PLAYBACK = "playback"
    CODEC = "codec"
    VISUALIZATION = "visualization"
    LIFECYCLE = "lifecycle"
    SYSTEM = "system"


class SpeakBetterError(Exception):
    """Base exception for speakbetter

    Provides structured error information including:
    - Error codes for programmatic handling
    - Context information for debugging
    - Severity levels for appropriate response
    - Recovery suggestions for user guidance
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[List[str]] = None,
        original_exception: Optional[Exception] = None,
    ):
        """
        Args:
            message: Human-readable error message
            error_code: Unique error code for programmatic handling
            category: Error category for classification
            severity: Error severity level
            context: Additional context information
            recovery_suggestions: List of suggested recovery actions
            original_exception: Original exception if this is a wrapper
        """
        super().__init__(message)

        self.message = message
        self.category = category
        self.severity = severity
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        self.original_exception = original_exception
        self.timestamp = time.time()
        self.error_code = error_code or self._generate_error_code()

        if "component" not in self.context:
            self.context["component"] = self.__class__.__name__

    def _generate_error_code(self) -> str:
        """Default error code derived from the class name"""
        name = self.__class__.__name__
        if name.endswith("Error") and name != "Error":
            name = name[: -len("Error")]
        return "".join(
            f"_{ch}" if ch.isupper() and i else ch for i, ch in enumerate(name)
        ).upper()

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "context": self.context,
            "recovery_suggestions": self.recovery_suggestions,
            "timestamp": self.timestamp,
            "exception_type": self.__class__.__name__,
            "original_exception": str(self.original_exception)
            if self.original_exception
            else None,
        }

    def get_user_message(self) -> str:
        """Get user-friendly error message with recovery suggestions"""
        user_msg = self.message
        if self.recovery_suggestions:
            suggestions = "\n".join(
                f"• {suggestion}" for suggestion in self.recovery_suggestions
            )
            user_msg += f"\n\nSuggested actions:\n{suggestions}"
        return user_msg

    def is_recoverable(self) -> bool:
        """Check if error is potentially recoverable"""
        return (
            len(self.recovery_suggestions) > 0
            and self.severity != ErrorSeverity.CRITICAL
        )


# =============================================================================
# Recording Exceptions
# =============================================================================


class PermissionDeniedError(SpeakBetterError):
    """Microphone access was not granted"""

    def __init__(self, message: str = "Microphone permission was not granted", **kwargs):
        super().__init__(
            message=message,
            category=ErrorCategory.RECORDING,
            severity=kwargs.pop("severity", ErrorSeverity.HIGH),
            recovery_suggestions=kwargs.pop(
                "recovery_suggestions",
                [
                    "Allow microphone access in the system privacy settings",
                    "Request permission again before starting a recording",
                ],
            ),
            **kwargs,
        )


class AlreadyRecordingError(SpeakBetterError):
    """A session is already recording or paused"""

    def __init__(self, message: str = "A recording session is already active", **kwargs):
        super().__init__(
            message=message,
            category=ErrorCategory.RECORDING,
            severity=kwargs.pop("severity", ErrorSeverity.LOW),
            recovery_suggestions=kwargs.pop(
                "recovery_suggestions",
                ["Stop or cancel the current recording first"],
            ),
            **kwargs,
        )


class NotRecordingError(SpeakBetterError):
    """Operation needs an active (or paused) session"""

    def __init__(self, message: str = "No recording session is active", **kwargs):
        super().__init__(
            message=message,
            category=ErrorCategory.RECORDING,
            severity=kwargs.pop("severity", ErrorSeverity.LOW),
            **kwargs,
        )


class BackgroundRestrictedError(SpeakBetterError):
    """Host reports the app is in the background"""

    def __init__(
        self, message: str = "Recording is not allowed while in the background", **kwargs
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.RECORDING,
            severity=kwargs.pop("severity", ErrorSeverity.MEDIUM),
            recovery_suggestions=kwargs.pop(
                "recovery_suggestions",
                ["Bring the application to the foreground and try again"],
            ),
            **kwargs,
        )


class RecordingInterruptedError(SpeakBetterError):
    """Session was torn down by an external interruption"""

    def __init__(
        self,
        message: str = "Recording was interrupted",
        reason: str = "unknown",
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        context["reason"] = reason
        self.reason = reason

        super().__init__(
            message=message,
            category=ErrorCategory.RECORDING,
            severity=kwargs.pop("severity", ErrorSeverity.MEDIUM),
            context=context,
            recovery_suggestions=kwargs.pop(
                "recovery_suggestions",
                ["Start a new recording once the interruption has ended"],
            ),
            **kwargs,
        )


class AudioRecordingError(SpeakBetterError):
    """Capture device failure"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            category=ErrorCategory.AUDIO,
            severity=kwargs.pop("severity", ErrorSeverity.HIGH),
            recovery_suggestions=kwargs.pop(
                "recovery_suggestions",
                [
                    "Check microphone connection and permissions",
                    "Verify audio device is not in use by another application",
                ],
            ),
            **kwargs,
        )


class AudioProcessingError(SpeakBetterError):
    """Invalid audio data handed to a codec or processing step"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            category=ErrorCategory.CODEC,
            severity=kwargs.pop("severity", ErrorSeverity.MEDIUM),
            **kwargs,
        )


# =============================================================================
# Playback and Codec Exceptions
# =============================================================================


class NotPlayingError(SpeakBetterError):
    """Playback operation needs an active playback"""

    def __init__(self, message: str = "Audio is not playing", **kwargs):
        super().__init__(
            message=message,
            category=ErrorCategory.PLAYBACK,
            severity=kwargs.pop("severity", ErrorSeverity.LOW),
            **kwargs,
        )


class DecodeFailureError(SpeakBetterError):
    """Audio bytes could not be decoded"""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            category=ErrorCategory.CODEC,
            severity=kwargs.pop("severity", ErrorSeverity.MEDIUM),
            recovery_suggestions=kwargs.pop(
                "recovery_suggestions",
                ["Verify the data is a 16-bit PCM WAV file"],
            ),
            **kwargs,
        )


# =============================================================================
# Visualization Exceptions
# =============================================================================


class ContextReleasedError(SpeakBetterError):
    """Draw attempted against a released visualization context"""

    def __init__(self, handle: int, message: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        context["handle"] = handle
        self.handle = handle

        super().__init__(
            message=message or f"Visualization context {handle} has been released",
            category=ErrorCategory.VISUALIZATION,
            severity=kwargs.pop("severity", ErrorSeverity.LOW),
            context=context,
            recovery_suggestions=kwargs.pop(
                "recovery_suggestions",
                ["Create a new visualization context"],
            ),
            **kwargs,
        )


class UnsupportedVisualizationTypeError(SpeakBetterError):
    """No renderer exists for the requested visualization"""

    def __init__(self, visualization_type: Any, **kwargs):
        context = kwargs.pop("context", {})
        context["visualization_type"] = repr(visualization_type)
        self.visualization_type = visualization_type

        super().__init__(
            message=kwargs.pop(
                "message", f"Unsupported visualization type: {visualization_type!r}"
            ),
            category=ErrorCategory.VISUALIZATION,
            severity=kwargs.pop("severity", ErrorSeverity.MEDIUM),
            context=context,
            **kwargs,
        )


# =============================================================================
# Lifecycle and Configuration Exceptions
# =============================================================================


class ComponentStateError(SpeakBetterError):
    """Component is not in the state an operation requires"""

    def __init__(
        self,
        message: str,
        component_name: str = "unknown",
        current_state: str = "unknown",
        expected_state: str = "unknown",
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        context.update(
            {
                "component_name": component_name,
                "current_state": current_state,
                "expected_state": expected_state,
            }
        )

        super().__init__(
            message=message,
            category=ErrorCategory.LIFECYCLE,
            severity=kwargs.pop("severity", ErrorSeverity.MEDIUM),
            context=context,
            **kwargs,
        )


class ConfigurationError(SpeakBetterError):
    """Invalid configuration value"""

    def __init__(self, message: str, key: str = "unknown", **kwargs):
        context = kwargs.pop("context", {})
        context["key"] = key

        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=kwargs.pop("severity", ErrorSeverity.LOW),
            context=context,
            recovery_suggestions=kwargs.pop(
                "recovery_suggestions",
                ["Check the configuration file", "Reset to default values"],
            ),
            **kwargs,
        )


# =============================================================================
# Utility Functions
# =============================================================================


def wrap_exception(
    original_exception: Exception, message: str = None, exception_type: type = None
) -> SpeakBetterError:
    """Wrap a standard exception in the SpeakBetterError hierarchy

    Args:
        original_exception: Original exception to wrap
        message: Optional custom message
        exception_type: Exception type to use for wrapping

    Returns:
        Wrapped exception
    """
    if isinstance(original_exception, SpeakBetterError):
        return original_exception

    if exception_type is None:
        exception_type = SpeakBetterError

    if message is None:
        message = str(original_exception)

    return exception_type(
        message=message,
        original_exception=original_exception,
        context={"original_type": type(original_exception).__name__},
    )
