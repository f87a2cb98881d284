"""Controllers"""

from .recording_controller import RecordingController

__all__ = ["RecordingController"]
