"""Conversion of captured audio into the 0..255 domain renderers draw from"""

from typing import Union

import numpy as np
from scipy import fft, signal

from ..audio.buffer import AudioSampleBuffer
from ..audio.codec import float_to_byte_samples
from ..utils import AudioProcessingError

DEFAULT_FFT_SIZE = 2048
MIN_DECIBELS = -100.0
MAX_DECIBELS = -30.0

SampleSource = Union[AudioSampleBuffer, np.ndarray, list]


def _mono(samples: SampleSource) -> np.ndarray:
    if isinstance(samples, AudioSampleBuffer):
        return samples.mono()
    array = np.asarray(samples)
    if array.ndim > 1:
        return array.mean(axis=1)
    return array


def to_byte_samples(samples: SampleSource) -> np.ndarray:
    """Time-domain bytes: floats are mapped from [-1, 1], bytes pass through"""
    array = _mono(samples)
    if array.dtype == np.uint8:
        return array
    if np.issubdtype(array.dtype, np.floating):
        return float_to_byte_samples(array)
    if np.issubdtype(array.dtype, np.integer):
        return np.clip(array, 0, 255).astype(np.uint8)
    raise AudioProcessingError(f"Unsupported sample dtype: {array.dtype}")


def frequency_bytes(
    samples: SampleSource,
    fft_size: int = DEFAULT_FFT_SIZE,
    min_decibels: float = MIN_DECIBELS,
    max_decibels: float = MAX_DECIBELS,
) -> np.ndarray:
    """Byte magnitudes of the most recent ``fft_size`` samples

    Blackman-windowed FFT scaled so ``min_decibels`` maps to 0 and
    ``max_decibels`` to 255. Returns ``fft_size // 2`` bins.
    """
    if fft_size < 2 or fft_size & (fft_size - 1):
        raise AudioProcessingError(f"fft_size must be a power of two, got {fft_size}")

    array = _mono(samples)
    if array.dtype == np.uint8:
        array = (array.astype(np.float64) - 128.0) / 128.0
    frame = np.zeros(fft_size, dtype=np.float64)
    tail = np.asarray(array[-fft_size:], dtype=np.float64)
    if tail.size:
        frame[-tail.size:] = tail

    window = signal.windows.blackman(fft_size)
    spectrum = fft.rfft(frame * window)[: fft_size // 2]
    magnitude = np.abs(spectrum) / fft_size
    decibels = 20 * np.log10(np.maximum(magnitude, 1e-12))

    scaled = (decibels - min_decibels) / (max_decibels - min_decibels) * 255.0
    return np.clip(np.floor(scaled), 0, 255).astype(np.uint8)
