"""Audio: sample buffers, PCM/WAV codec, capture and playback"""

from . import codec
from .buffer import WAV_MIME_TYPE, AudioSampleBuffer, EncodedAudio
from .capture import PyAudioCaptureDevice, PyAudioCaptureStream
from .playback import PlaybackSession
from .processor import AudioProcessor

__all__ = [
    "codec",
    "WAV_MIME_TYPE",
    "AudioSampleBuffer",
    "EncodedAudio",
    "AudioProcessor",
    "PyAudioCaptureDevice",
    "PyAudioCaptureStream",
    "PlaybackSession",
]
