"""PCM / WAV codec

Converts between float sample buffers and 16-bit little-endian PCM, builds
the 44-byte RIFF/WAVE header, and provides the sample-scaling helpers the
visualization pipeline draws from.
"""

import io
import struct
import wave
from pathlib import Path
from typing import Union

import numpy as np

from ..utils import AudioProcessingError, DecodeFailureError, app_logger
from .buffer import AudioSampleBuffer, EncodedAudio

WAV_HEADER_SIZE = 44
PCM_FORMAT_CODE = 1
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8

_NEGATIVE_SCALE = 0x8000
_POSITIVE_SCALE = 0x7FFF

# RIFF, size, WAVE, "fmt ", fmt size, format, channels, rate, byte rate,
# block align, bits per sample, "data", data size
_HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")


def float_to_pcm16(samples: np.ndarray) -> np.ndarray:
    """Scale float samples to signed 16-bit integers

    Samples are clamped to [-1, 1]; negatives scale by 0x8000 and the rest by
    0x7FFF, truncating toward zero.
    """
    clipped = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    scaled = np.where(clipped < 0, clipped * _NEGATIVE_SCALE, clipped * _POSITIVE_SCALE)
    return np.trunc(scaled).astype("<i2")


def float_to_pcm16_bytes(samples: np.ndarray) -> bytes:
    """Little-endian 16-bit PCM bytes for ``samples``"""
    return float_to_pcm16(samples).tobytes()


def pcm16_to_float(data: Union[bytes, bytearray, np.ndarray]) -> np.ndarray:
    """Inverse of :func:`float_to_pcm16`

    Returns float64 so a sample survives the round trip within one LSB;
    callers building an :class:`AudioSampleBuffer` cast to float32.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        if len(data) % BYTES_PER_SAMPLE:
            raise DecodeFailureError(
                f"PCM16 payload has odd length {len(data)}",
                context={"length": len(data)},
            )
        pcm = np.frombuffer(bytes(data), dtype="<i2")
    else:
        pcm = np.asarray(data, dtype=np.int16)

    values = pcm.astype(np.float64)
    return np.where(values < 0, values / _NEGATIVE_SCALE, values / _POSITIVE_SCALE)


def interleave(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    """Alternate two channels L, R, L, R... into one buffer"""
    left = np.asarray(left)
    right = np.asarray(right)
    if left.shape != right.shape or left.ndim != 1:
        raise AudioProcessingError(
            "Channels must be 1-D arrays of equal length",
            context={"left": left.shape, "right": right.shape},
        )

    result = np.empty(left.size + right.size, dtype=np.result_type(left, right))
    result[0::2] = left
    result[1::2] = right
    return result


def build_wav_header(data_length: int, sample_rate: int, channel_count: int) -> bytes:
    """44-byte PCM WAV header for ``data_length`` bytes of 16-bit samples"""
    if data_length < 0 or sample_rate <= 0 or channel_count <= 0:
        raise AudioProcessingError(
            "Invalid WAV header parameters",
            context={
                "data_length": data_length,
                "sample_rate": sample_rate,
                "channel_count": channel_count,
            },
        )

    block_align = channel_count * BYTES_PER_SAMPLE
    return _HEADER_STRUCT.pack(
        b"RIFF",
        36 + data_length,
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT_CODE,
        channel_count,
        sample_rate,
        sample_rate * block_align,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_length,
    )


def encode_wav(buffer: AudioSampleBuffer) -> EncodedAudio:
    """Serialize a sample buffer as a 16-bit PCM WAV file in memory"""
    if buffer.channel_count == 1:
        frames = buffer.samples.reshape(-1)
    elif buffer.channel_count == 2:
        frames = interleave(buffer.channel(0), buffer.channel(1))
    else:
        # Row-major (frames, channels) is already interleaved
        frames = buffer.samples.reshape(-1)

    payload = float_to_pcm16_bytes(frames)
    header = build_wav_header(len(payload), buffer.sample_rate, buffer.channel_count)

    app_logger.log_audio_event(
        "WAV encoded",
        {
            "frames": buffer.frame_count,
            "channels": buffer.channel_count,
            "sample_rate": buffer.sample_rate,
            "bytes": len(header) + len(payload),
        },
    )
    return EncodedAudio(header + payload)


def decode_wav(data: bytes) -> AudioSampleBuffer:
    """Parse 16-bit PCM WAV bytes back into a sample buffer

    Raises:
        DecodeFailureError: malformed container or unsupported sample format
    """
    if len(data) < WAV_HEADER_SIZE or data[:4] != b"RIFF" or data[8:12] != b"WAVE":
        raise DecodeFailureError(
            "Data is not a RIFF/WAVE container", context={"length": len(data)}
        )

    try:
        with wave.open(io.BytesIO(data), "rb") as wav_file:
            channels = wav_file.getnchannels()
            sample_width = wav_file.getsampwidth()
            sample_rate = wav_file.getframerate()
            raw = wav_file.readframes(wav_file.getnframes())
    except (wave.Error, EOFError, struct.error) as e:
        raise DecodeFailureError(
            f"Malformed WAV data: {e}", original_exception=e
        ) from e

    if sample_width != BYTES_PER_SAMPLE:
        raise DecodeFailureError(
            f"Unsupported sample width: {sample_width} bytes",
            context={"sample_width": sample_width},
        )

    usable = len(raw) - len(raw) % (BYTES_PER_SAMPLE * channels)
    samples = pcm16_to_float(raw[:usable]).astype(np.float32)
    if channels > 1:
        samples = samples.reshape(-1, channels)

    return AudioSampleBuffer(samples, sample_rate, channels)


def save_wav(path: Union[str, Path], buffer: AudioSampleBuffer) -> Path:
    """Write ``buffer`` to ``path`` as a WAV file"""
    path = Path(path)
    encoded = encode_wav(buffer)
    path.write_bytes(encoded.data)
    app_logger.log_audio_event(
        "Audio saved to file",
        {"file_path": str(path), "duration": buffer.duration, "bytes": len(encoded)},
    )
    return path


def downsample(samples: np.ndarray, target_count: int) -> np.ndarray:
    """Reduce ``samples`` to exactly ``target_count`` values by bin averaging

    ``bin_size = len // target_count``; each output value is the mean of one
    contiguous bin, truncated to an integer for integer input. Inputs not
    longer than ``target_count`` are returned unchanged.
    """
    samples = np.asarray(samples)
    if target_count <= 0:
        raise ValueError(f"target_count must be positive, got {target_count}")
    if samples.size <= target_count:
        return samples

    bin_size = samples.size // target_count
    bins = samples[: bin_size * target_count].reshape(target_count, bin_size)
    means = bins.mean(axis=1)

    if np.issubdtype(samples.dtype, np.integer):
        return np.trunc(means).astype(samples.dtype)
    return means.astype(samples.dtype)


def float_to_byte_samples(samples: np.ndarray) -> np.ndarray:
    """Map float samples in [-1, 1] onto 0..255 with ``floor((x + 1) / 2 * 255)``"""
    clipped = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    return np.floor((clipped + 1.0) / 2.0 * 255.0).astype(np.uint8)
