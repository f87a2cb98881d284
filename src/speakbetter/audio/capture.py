"""PyAudio capture device

Install with the ``capture`` extra (``pip install speakbetter[capture]``).
"""

import threading
import time
from typing import Optional

import numpy as np

from ..core.base.lifecycle_component import LifecycleComponent
from ..core.interfaces import (
    CaptureConfig,
    ChunkCallback,
    CloseCallback,
    ICaptureDevice,
    ICaptureStream,
)
from ..utils import AudioRecordingError, app_logger, wrap_exception
from .codec import pcm16_to_float

try:
    import pyaudio
except ImportError:  # optional extra
    pyaudio = None


class PyAudioCaptureStream(ICaptureStream):
    """Reader thread over a blocking PyAudio input stream"""

    def __init__(
        self,
        stream,
        config: CaptureConfig,
        on_chunk: ChunkCallback,
        on_close: CloseCallback,
    ):
        self._stream = stream
        self._config = config
        self._on_chunk = on_chunk
        self._on_close = on_close

        self._running = True
        self._deliver = True
        self._resume_event = threading.Event()
        self._resume_event.set()
        self._close_lock = threading.Lock()
        self._closed = False

        self._thread = threading.Thread(
            target=self._read_loop, name="pyaudio-capture", daemon=True
        )
        self._thread.start()

    def _read_loop(self) -> None:
        chunk_count = 0
        error: Optional[Exception] = None
        try:
            while self._running:
                if not self._resume_event.wait(timeout=0.05):
                    continue

                try:
                    data = self._stream.read(
                        self._config.chunk_size, exception_on_overflow=False
                    )
                except OSError as stream_error:
                    if self._running:
                        error = wrap_exception(
                            stream_error, "Audio stream read failed", AudioRecordingError
                        )
                        app_logger.log_error(stream_error, "capture_stream_read")
                    break

                chunk = pcm16_to_float(data).astype(np.float32)
                if self._config.channels > 1:
                    chunk = chunk.reshape(-1, self._config.channels)
                chunk_count += 1

                if self._deliver:
                    try:
                        self._on_chunk(chunk)
                    except Exception as callback_error:
                        app_logger.log_error(callback_error, "capture_chunk_callback")
        finally:
            self._release()
            app_logger.log_audio_event(
                "Capture thread ended", {"chunks_captured": chunk_count}
            )
            try:
                self._on_close(error)
            except Exception as callback_error:
                app_logger.log_error(callback_error, "capture_close_callback")

    def _release(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        try:
            self._stream.stop_stream()
            self._stream.close()
        except OSError as e:
            app_logger.log_error(e, "capture_stream_close")

    def pause(self) -> None:
        self._resume_event.clear()

    def resume(self) -> None:
        self._resume_event.set()

    def close(self, timeout: float) -> None:
        start = time.time()
        self._running = False
        self._resume_event.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
        app_logger.log_audio_event(
            "Capture stream closed",
            {
                "join_duration_ms": (time.time() - start) * 1000,
                "thread_alive": self._thread.is_alive(),
            },
        )

    def abort(self) -> None:
        self._deliver = False
        self._running = False
        self._resume_event.set()


class PyAudioCaptureDevice(LifecycleComponent, ICaptureDevice):
    """Microphone input through PortAudio"""

    def __init__(self, device_index: Optional[int] = None):
        super().__init__("PyAudioCaptureDevice")
        self._device_index = device_index
        self._audio = None

    def _do_start(self) -> bool:
        if pyaudio is None:
            raise AudioRecordingError(
                "PyAudio is not installed",
                recovery_suggestions=["pip install speakbetter[capture]"],
            )
        self._audio = pyaudio.PyAudio()
        app_logger.log_audio_event(
            "Audio system initialized", {"device_index": self._device_index}
        )
        return True

    def _do_stop(self) -> bool:
        if self._audio is not None:
            try:
                self._audio.terminate()
            finally:
                self._audio = None
        return True

    def request_access(self) -> bool:
        """PortAudio has no permission prompt; access means an input device exists"""
        if not self.start():
            return False
        try:
            if self._device_index is None:
                info = self._audio.get_default_input_device_info()
            else:
                info = self._audio.get_device_info_by_index(self._device_index)
        except (OSError, ValueError) as e:
            app_logger.log_error(e, "capture_request_access")
            return False
        return info.get("maxInputChannels", 0) > 0

    def open(
        self,
        config: CaptureConfig,
        on_chunk: ChunkCallback,
        on_close: CloseCallback,
    ) -> PyAudioCaptureStream:
        if not self.start():
            raise AudioRecordingError("Audio system could not be initialized")

        try:
            stream = self._audio.open(
                format=pyaudio.paInt16,
                channels=config.channels,
                rate=config.sample_rate,
                input=True,
                input_device_index=self._device_index,
                frames_per_buffer=config.chunk_size,
            )
        except OSError as e:
            raise wrap_exception(
                e, f"Failed to open capture device: {e}", AudioRecordingError
            ) from e

        app_logger.log_audio_event(
            "Capture stream opened",
            {
                "device_index": self._device_index,
                "sample_rate": config.sample_rate,
                "channels": config.channels,
                "chunk_size": config.chunk_size,
            },
        )
        return PyAudioCaptureStream(stream, config, on_chunk, on_close)

    def get_audio_devices(self) -> list:
        """Input-capable devices as dicts (index, name, channels, sample_rate)"""
        if not self.start():
            return []
        devices = []
        for i in range(self._audio.get_device_count()):
            info = self._audio.get_device_info_by_index(i)
            if info["maxInputChannels"] > 0:
                devices.append(
                    {
                        "index": i,
                        "name": info["name"],
                        "channels": info["maxInputChannels"],
                        "sample_rate": info["defaultSampleRate"],
                    }
                )
        return devices
