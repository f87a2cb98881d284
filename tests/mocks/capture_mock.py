"""Mock capture device, stream, host and clock"""
from typing import Callable, List, Optional

import numpy as np

from speakbetter.core.interfaces import (
    CaptureConfig,
    ICaptureDevice,
    ICaptureStream,
    IHostEnvironment,
)


class ManualClock:
    """Monotonic clock that only moves when told to"""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MockHost(IHostEnvironment):
    def __init__(self):
        self.backgrounded = False

    def is_backgrounded(self) -> bool:
        return self.backgrounded


class MockCaptureStream(ICaptureStream):
    """Stream driven by the test: ``push`` delivers a chunk synchronously"""

    def __init__(self, config: CaptureConfig, on_chunk, on_close):
        self.config = config
        self._on_chunk = on_chunk
        self._on_close = on_close
        self.paused = False
        self.closed = False
        self.aborted = False
        self.close_timeout = None
        # Delivered during close(), like samples still buffered in a device
        self.pending_on_close: List[np.ndarray] = []

    def push(self, chunk) -> None:
        if self.paused or self.closed or self.aborted:
            return
        self._on_chunk(np.asarray(chunk, dtype=np.float32))

    def fail(self, error: Optional[Exception] = None) -> None:
        """Device went away"""
        self.closed = True
        self._on_close(error or OSError("device unplugged"))

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def close(self, timeout: float) -> None:
        self.close_timeout = timeout
        for chunk in self.pending_on_close:
            self._on_chunk(np.asarray(chunk, dtype=np.float32))
        self.pending_on_close = []
        self.closed = True
        self._on_close(None)

    def abort(self) -> None:
        self.aborted = True
        self._on_close(None)


class MockCaptureDevice(ICaptureDevice):
    """Capture device with hooks into the permission prompt and open()"""

    def __init__(self, grant: bool = True):
        self.grant = grant
        self.access_requests = 0
        self.streams: List[MockCaptureStream] = []
        self.open_error: Optional[Exception] = None
        # Runs inside request_access(), while start() waits on the prompt
        self.on_access: Optional[Callable[[], None]] = None
        # Runs inside open(), after the stream exists
        self.on_open: Optional[Callable[[MockCaptureStream], None]] = None

    def request_access(self) -> bool:
        self.access_requests += 1
        if self.on_access is not None:
            self.on_access()
        return self.grant

    def open(self, config: CaptureConfig, on_chunk, on_close) -> MockCaptureStream:
        if self.open_error is not None:
            raise self.open_error
        stream = MockCaptureStream(config, on_chunk, on_close)
        self.streams.append(stream)
        if self.on_open is not None:
            self.on_open(stream)
        return stream

    @property
    def stream(self) -> Optional[MockCaptureStream]:
        return self.streams[-1] if self.streams else None
