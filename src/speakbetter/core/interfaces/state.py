"""Recording state definitions"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from ...utils import SpeakBetterError


class RecorderPhase(Enum):
    """Recording state machine phases

    IDLE -> PERMISSION_PENDING -> RECORDING <-> PAUSED -> STOPPING -> IDLE.
    Cancellation and interruption return to IDLE from any phase.
    """

    IDLE = auto()
    PERMISSION_PENDING = auto()
    RECORDING = auto()
    PAUSED = auto()
    STOPPING = auto()

    @property
    def is_active(self) -> bool:
        """Recording or paused"""
        return self in (RecorderPhase.RECORDING, RecorderPhase.PAUSED)


@dataclass
class RecordingState:
    """Live session state, written only by the RecordingController"""

    is_recording: bool = False
    duration_seconds: float = 0.0
    audio_level: float = 0.0
    is_processing: bool = False
    is_silent: bool = False
    error: Optional[SpeakBetterError] = None

    def to_dict(self) -> dict:
        return {
            "is_recording": self.is_recording,
            "duration_seconds": self.duration_seconds,
            "audio_level": self.audio_level,
            "is_processing": self.is_processing,
            "is_silent": self.is_silent,
            "error": self.error.to_dict() if self.error else None,
        }
