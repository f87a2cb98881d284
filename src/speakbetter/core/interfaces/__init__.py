"""Interfaces for collaborators the core consumes"""

from .capture import (
    CaptureConfig,
    ChunkCallback,
    CloseCallback,
    ICaptureDevice,
    ICaptureStream,
    RecordingOptions,
)
from .host import ForegroundHost, IHostEnvironment
from .state import RecorderPhase, RecordingState

__all__ = [
    "CaptureConfig",
    "ChunkCallback",
    "CloseCallback",
    "ICaptureDevice",
    "ICaptureStream",
    "RecordingOptions",
    "IHostEnvironment",
    "ForegroundHost",
    "RecorderPhase",
    "RecordingState",
]
