"""Audio post-processing"""

from typing import Sequence

import numpy as np
from scipy import signal

from ..core.services.config.constants import Audio
from ..utils import AudioProcessingError, app_logger


class AudioProcessor:
    """Level measurement and optional clean-up of stopped recordings"""

    def __init__(self, sample_rate: int = Audio.DEFAULT_SAMPLE_RATE):
        self.sample_rate = sample_rate

    @staticmethod
    def rms_level(chunks: Sequence[np.ndarray]) -> float:
        """RMS of the given chunks, clamped to [0, 1]"""
        if not chunks:
            return 0.0
        audio = np.concatenate([np.asarray(c, dtype=np.float32).reshape(-1) for c in chunks])
        if audio.size == 0:
            return 0.0
        return float(min(1.0, np.sqrt(np.mean(audio.astype(np.float64) ** 2))))

    def normalize_audio(
        self, audio_data: np.ndarray, target_level: float = Audio.NORMALIZE_TARGET_RMS
    ) -> np.ndarray:
        """Scale to ``target_level`` RMS without clipping"""
        if len(audio_data) == 0:
            return audio_data

        try:
            rms = np.sqrt(np.mean(audio_data.astype(np.float64) ** 2))
            if rms <= 0:
                return audio_data

            gain = min(target_level / rms, Audio.NORMALIZE_MAX_GAIN)
            normalized = audio_data * gain

            max_val = np.max(np.abs(normalized))
            if max_val > 1.0:
                normalized = normalized / max_val

            app_logger.log_audio_event(
                "Audio normalized",
                {
                    "original_rms": float(rms),
                    "gain": float(gain),
                    "final_max": float(np.max(np.abs(normalized))),
                },
            )
            return normalized.astype(np.float32)

        except (ValueError, FloatingPointError) as e:
            raise AudioProcessingError(
                f"Failed to normalize audio: {e}", original_exception=e
            ) from e

    def apply_noise_reduction(
        self, audio_data: np.ndarray, cutoff_hz: float = Audio.NOISE_HIGHPASS_HZ
    ) -> np.ndarray:
        """4th-order Butterworth high-pass to strip low-frequency rumble"""
        if len(audio_data) == 0:
            return audio_data

        nyquist = self.sample_rate / 2
        if cutoff_hz >= nyquist:
            app_logger.log_audio_event(
                "Noise reduction skipped (cutoff above Nyquist)",
                {"cutoff_hz": cutoff_hz, "sample_rate": self.sample_rate},
            )
            return audio_data

        sos = signal.butter(4, cutoff_hz, "hp", fs=self.sample_rate, output="sos")
        filtered = signal.sosfilt(sos, audio_data, axis=0)

        app_logger.log_audio_event(
            "Noise reduction applied",
            {"samples": len(audio_data), "cutoff_hz": cutoff_hz},
        )
        return filtered.astype(np.float32)

    def get_audio_statistics(self, audio_data: np.ndarray) -> dict:
        """Summary statistics of a mono buffer"""
        if len(audio_data) == 0:
            return {}

        return {
            "duration": len(audio_data) / self.sample_rate,
            "sample_count": len(audio_data),
            "sample_rate": self.sample_rate,
            "rms": float(np.sqrt(np.mean(audio_data**2))),
            "peak": float(np.max(np.abs(audio_data))),
            "zero_crossings": int(np.sum(np.diff(np.signbit(audio_data)))),
        }
