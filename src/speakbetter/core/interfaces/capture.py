"""Capture device interfaces"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from ..services.config import ConfigKeys
from ..services.config.constants import Audio

ChunkCallback = Callable[[np.ndarray], None]
CloseCallback = Callable[[Optional[Exception]], None]


@dataclass(frozen=True)
class CaptureConfig:
    """Parameters a capture stream is opened with"""

    sample_rate: int = Audio.DEFAULT_SAMPLE_RATE
    channels: int = 1
    chunk_size: int = Audio.DEFAULT_CHUNK_SIZE


@dataclass
class RecordingOptions:
    """Per-session recording options"""

    max_duration: Optional[float] = Audio.MAX_RECORDING_DURATION
    auto_stop: bool = True
    silence_threshold: float = Audio.SILENCE_THRESHOLD
    sample_rate: int = Audio.DEFAULT_SAMPLE_RATE
    channels: int = 1
    chunk_size: int = Audio.DEFAULT_CHUNK_SIZE
    normalize: bool = False
    reduce_noise: bool = False

    @classmethod
    def from_config(cls, config) -> "RecordingOptions":
        return cls(
            max_duration=config.get_setting(
                ConfigKeys.RECORDING_MAX_DURATION, Audio.MAX_RECORDING_DURATION
            ),
            auto_stop=config.get_setting(ConfigKeys.RECORDING_AUTO_STOP, True),
            silence_threshold=config.get_setting(
                ConfigKeys.RECORDING_SILENCE_THRESHOLD, Audio.SILENCE_THRESHOLD
            ),
            sample_rate=config.get_setting(
                ConfigKeys.RECORDING_SAMPLE_RATE, Audio.DEFAULT_SAMPLE_RATE
            ),
            channels=config.get_setting(ConfigKeys.RECORDING_CHANNELS, 1),
            chunk_size=config.get_setting(
                ConfigKeys.RECORDING_CHUNK_SIZE, Audio.DEFAULT_CHUNK_SIZE
            ),
            normalize=config.get_setting(ConfigKeys.RECORDING_NORMALIZE, False),
            reduce_noise=config.get_setting(ConfigKeys.RECORDING_REDUCE_NOISE, False),
        )

    def capture_config(self) -> CaptureConfig:
        return CaptureConfig(
            sample_rate=self.sample_rate,
            channels=self.channels,
            chunk_size=self.chunk_size,
        )


class ICaptureStream(ABC):
    """Open capture stream

    The stream pushes float32 chunks to the ``on_chunk`` callback it was
    opened with and fires ``on_close`` exactly once when it ends, passing the
    device error if it ended abnormally.
    """

    @abstractmethod
    def pause(self) -> None:
        """Stop delivering chunks until ``resume``"""

    @abstractmethod
    def resume(self) -> None:
        """Continue delivering chunks"""

    @abstractmethod
    def close(self, timeout: float) -> None:
        """Flush buffered samples (at most ``timeout`` seconds) and release the device"""

    @abstractmethod
    def abort(self) -> None:
        """Release the device immediately, dropping anything not yet delivered"""


class ICaptureDevice(ABC):
    """Microphone abstraction"""

    @abstractmethod
    def request_access(self) -> bool:
        """Ask for microphone access

        Returns:
            True if access is granted
        """

    @abstractmethod
    def open(
        self,
        config: CaptureConfig,
        on_chunk: ChunkCallback,
        on_close: CloseCallback,
    ) -> ICaptureStream:
        """Open a stream and begin delivering chunks"""
