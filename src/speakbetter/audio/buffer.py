"""Captured-audio containers"""

from dataclasses import dataclass

import numpy as np

WAV_MIME_TYPE = "audio/wav"


@dataclass
class AudioSampleBuffer:
    """Owned block of samples

    ``samples`` is float32 in [-1, 1]; mono buffers are 1-D, multi-channel
    buffers are shaped ``(frames, channels)``. Whoever holds the buffer owns
    the array; producers hand over their reference on return.
    """

    samples: np.ndarray
    sample_rate: int
    channel_count: int = 1

    def __post_init__(self):
        self.samples = np.asarray(self.samples)
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.channel_count < 1:
            raise ValueError(f"channel_count must be >= 1, got {self.channel_count}")
        if self.channel_count > 1 and self.samples.size and (
            self.samples.ndim != 2 or self.samples.shape[1] != self.channel_count
        ):
            raise ValueError(
                f"multi-channel samples must be shaped (frames, {self.channel_count})"
            )

    @classmethod
    def empty(cls, sample_rate: int, channel_count: int = 1) -> "AudioSampleBuffer":
        shape = (0,) if channel_count == 1 else (0, channel_count)
        return cls(np.zeros(shape, dtype=np.float32), sample_rate, channel_count)

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[0]) if self.samples.ndim else 0

    @property
    def duration(self) -> float:
        return self.frame_count / self.sample_rate

    def channel(self, index: int) -> np.ndarray:
        """Samples of one channel as a 1-D array"""
        if not 0 <= index < self.channel_count:
            raise IndexError(f"channel {index} out of range for {self.channel_count} channels")
        if self.channel_count == 1:
            return self.samples
        return self.samples[:, index]

    def mono(self) -> np.ndarray:
        """Channel average (the buffer itself when already mono)"""
        if self.channel_count == 1:
            return self.samples
        return self.samples.mean(axis=1).astype(np.float32)


@dataclass(frozen=True)
class EncodedAudio:
    """Serialized audio bytes plus their MIME tag"""

    data: bytes
    mime_type: str = WAV_MIME_TYPE

    def __len__(self) -> int:
        return len(self.data)
