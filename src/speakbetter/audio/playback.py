"""Playback position tracking for a stopped recording"""

import threading
import time
from typing import Callable, Optional, Union

from ..utils import NotPlayingError, app_logger
from .buffer import AudioSampleBuffer


class PlaybackSession:
    """Clock-driven playback position

    Audio output itself belongs to the host; this only keeps track of where
    playback is so the word-timing overlay can follow it. Position is clamped
    to ``[0, duration]`` and playback stops on its own at the end.
    """

    def __init__(
        self,
        source: Union[AudioSampleBuffer, float],
        clock: Callable[[], float] = time.monotonic,
    ):
        if isinstance(source, AudioSampleBuffer):
            self._duration = source.duration
        else:
            self._duration = max(0.0, float(source))
        self._clock = clock
        self._lock = threading.Lock()
        self._position = 0.0
        self._playing_since: Optional[float] = None

    @property
    def duration(self) -> float:
        return self._duration

    def _position_at(self, now: float) -> float:
        position = self._position
        if self._playing_since is not None:
            position += now - self._playing_since
        return min(max(position, 0.0), self._duration)

    def _settle(self) -> None:
        # Playback that ran past the end is finished
        if self._playing_since is None:
            return
        now = self._clock()
        position = self._position_at(now)
        if position >= self._duration:
            self._position = self._duration
            self._playing_since = None

    def play(self) -> None:
        """Start or continue playback; restarts from zero once finished"""
        with self._lock:
            self._settle()
            if self._playing_since is not None:
                return
            if self._position >= self._duration:
                self._position = 0.0
            self._playing_since = self._clock()
            app_logger.log_audio_event("Playback started", {"position": self._position})

    def pause(self) -> None:
        with self._lock:
            self._settle()
            if self._playing_since is None:
                raise NotPlayingError()
            self._position = self._position_at(self._clock())
            self._playing_since = None
            app_logger.log_audio_event("Playback paused", {"position": self._position})

    def seek(self, seconds: float) -> None:
        with self._lock:
            target = min(max(float(seconds), 0.0), self._duration)
            self._position = target
            if self._playing_since is not None:
                self._playing_since = self._clock()

    def stop(self) -> None:
        with self._lock:
            self._position = 0.0
            self._playing_since = None

    @property
    def current_time(self) -> float:
        with self._lock:
            self._settle()
            if self._playing_since is None:
                return self._position
            return self._position_at(self._clock())

    @property
    def is_playing(self) -> bool:
        with self._lock:
            self._settle()
            return self._playing_since is not None
