"""Recording controller

Runs the record/pause/resume/stop/cancel state machine on top of an
``ICaptureDevice`` and materializes the captured chunks into an
``AudioSampleBuffer`` on stop.
"""

import dataclasses
import threading
import time
from functools import partial
from typing import Any, Callable, List, Optional, Tuple

import numpy as np

from ...audio.buffer import AudioSampleBuffer
from ...audio.processor import AudioProcessor
from ...utils import (
    AlreadyRecordingError,
    AudioRecordingError,
    BackgroundRestrictedError,
    LogCategory,
    NotRecordingError,
    PeriodicTask,
    PermissionDeniedError,
    RecordingInterruptedError,
    SpeakBetterError,
    app_logger,
    wrap_exception,
)
from ..interfaces import (
    ForegroundHost,
    ICaptureDevice,
    ICaptureStream,
    IHostEnvironment,
    RecorderPhase,
    RecordingOptions,
    RecordingState,
)
from ..services.config import ConfigKeys
from ..services.config.constants import Audio
from ..services.event_bus import EventBus, Events


class RecordingController:
    """Recording state machine

    Responsibilities:
    - Own the capture stream of the (single) active session
    - Serialize every ``RecordingState`` mutation through ``_transition``
    - Sample live duration and level, auto-stop at ``max_duration``
    - Publish each transition on the event bus

    Every mutation happens under one lock. Events are queued while the lock
    is held and emitted after it is released, so listeners may call back into
    the controller. Each session carries a number; callbacks from a stream
    or a pending ``start()`` whose session was cancelled or interrupted are
    recognized as stale and dropped.
    """

    def __init__(
        self,
        capture_device: ICaptureDevice,
        host: Optional[IHostEnvironment] = None,
        options: Optional[RecordingOptions] = None,
        event_service: Optional[EventBus] = None,
        processor: Optional[AudioProcessor] = None,
        clock: Callable[[], float] = time.monotonic,
        sampler_interval: float = Audio.SAMPLER_INTERVAL_MS / 1000,
        finalize_timeout: float = Audio.FINALIZE_TIMEOUT,
        on_auto_stop: Optional[Callable[[AudioSampleBuffer], None]] = None,
    ):
        self._device = capture_device
        self._host = host or ForegroundHost()
        self._default_options = options or RecordingOptions()
        self._events = event_service or EventBus()
        self._processor = processor
        self._clock = clock
        self._sampler_interval = sampler_interval
        self._finalize_timeout = finalize_timeout
        self._on_auto_stop = on_auto_stop

        self._lock = threading.RLock()
        self._phase = RecorderPhase.IDLE
        self._state = RecordingState()
        self._session = 0
        self._permission_granted = False
        self._options = self._default_options
        self._stream: Optional[ICaptureStream] = None
        self._chunks: List[np.ndarray] = []
        self._sampler: Optional[PeriodicTask] = None
        self._pending_events: List[Tuple[str, Any]] = []

        self._started_at = 0.0
        self._paused_at: Optional[float] = None
        self._paused_total = 0.0

        app_logger.log_recording_event(
            "RecordingController initialized",
            {
                "sampler_interval": sampler_interval,
                "finalize_timeout": finalize_timeout,
            },
        )

    @classmethod
    def from_config(
        cls,
        config,
        capture_device: ICaptureDevice,
        host: Optional[IHostEnvironment] = None,
        event_service: Optional[EventBus] = None,
        on_auto_stop: Optional[Callable[[AudioSampleBuffer], None]] = None,
    ) -> "RecordingController":
        interval_ms = config.get_setting(
            ConfigKeys.RECORDING_SAMPLER_INTERVAL_MS, Audio.SAMPLER_INTERVAL_MS
        )
        return cls(
            capture_device,
            host=host,
            options=RecordingOptions.from_config(config),
            event_service=event_service,
            sampler_interval=interval_ms / 1000,
            finalize_timeout=config.get_setting(
                ConfigKeys.RECORDING_FINALIZE_TIMEOUT, Audio.FINALIZE_TIMEOUT
            ),
            on_auto_stop=on_auto_stop,
        )

    # ------------------------------------------------------------------
    # State plumbing
    # ------------------------------------------------------------------

    def _transition(
        self,
        new_phase: Optional[RecorderPhase] = None,
        event: Optional[str] = None,
        data: Any = None,
        **changes: Any,
    ) -> None:
        """Apply a phase change and/or state field updates; lock must be held"""
        for name, value in changes.items():
            setattr(self._state, name, value)

        if new_phase is not None and new_phase is not self._phase:
            old_phase = self._phase
            self._phase = new_phase
            app_logger.log_state_change(
                "recording", old_phase, new_phase, {"session": self._session}
            )
            self._pending_events.append(
                (
                    Events.RECORDING_STATE_CHANGED,
                    {
                        "old_phase": old_phase.name,
                        "new_phase": new_phase.name,
                        "state": dataclasses.replace(self._state),
                    },
                )
            )

        if event is not None:
            self._pending_events.append((event, data))

    def _flush_events(self) -> None:
        with self._lock:
            pending, self._pending_events = self._pending_events, []
        for event_name, data in pending:
            self._events.emit(event_name, data)

    def _elapsed(self, now: float) -> float:
        paused = self._paused_total
        if self._paused_at is not None:
            paused += now - self._paused_at
        return max(0.0, now - self._started_at - paused)

    def _start_sampler(self) -> None:
        # A fresh task per session: a sampler stopped from its own thread
        # may still be finishing its last tick.
        self._sampler = PeriodicTask(
            "recording-sampler", self._sampler_interval, self.tick
        )
        self._sampler.start()

    def _stop_sampler(self) -> None:
        with self._lock:
            sampler, self._sampler = self._sampler, None
        if sampler is not None:
            sampler.stop()

    @staticmethod
    def _abort_stream(stream: Optional[ICaptureStream]) -> None:
        if stream is None:
            return
        try:
            stream.abort()
        except Exception as e:
            app_logger.log_error(e, "recording_abort_stream")

    def _raise_for_stale(self) -> None:
        """Outcome of a call whose session was torn down underneath it"""
        error = self._state.error
        if isinstance(error, RecordingInterruptedError):
            raise error

    # ------------------------------------------------------------------
    # Permission
    # ------------------------------------------------------------------

    def _acquire_access(self) -> bool:
        try:
            granted = bool(self._device.request_access())
        except SpeakBetterError:
            raise
        except Exception as e:
            raise wrap_exception(
                e, f"Microphone access request failed: {e}", AudioRecordingError
            ) from e

        with self._lock:
            if granted:
                self._permission_granted = True
        app_logger.log_recording_event("Microphone access requested", {"granted": granted})
        return granted

    def request_permission(self) -> bool:
        """Ask for microphone access once; later calls return the cached grant"""
        with self._lock:
            if self._permission_granted:
                return True
        return self._acquire_access()

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    def start(self, options: Optional[RecordingOptions] = None) -> None:
        """Begin a session

        Raises:
            AlreadyRecordingError: a session is active or starting
            BackgroundRestrictedError: the host is in the background
            PermissionDeniedError: microphone access was refused
            RecordingInterruptedError: interrupted before capture began
            AudioRecordingError: the device failed to open
        """
        with self._lock:
            if self._phase is not RecorderPhase.IDLE:
                raise AlreadyRecordingError(context={"phase": self._phase.name})
            if self._host.is_backgrounded():
                raise BackgroundRestrictedError()

            self._session += 1
            session = self._session
            self._options = options or self._default_options
            self._chunks = []
            self._state = RecordingState()
            self._paused_at = None
            self._paused_total = 0.0
            self._transition(RecorderPhase.PERMISSION_PENDING)
            needs_prompt = not self._permission_granted
        self._flush_events()

        # The prompt may block; cancel() and handle_interruption() stay
        # reachable while it is pending.
        try:
            granted = self._acquire_access() if needs_prompt else True
        except SpeakBetterError:
            with self._lock:
                if session == self._session:
                    self._transition(RecorderPhase.IDLE)
            self._flush_events()
            raise

        with self._lock:
            if session != self._session:
                self._raise_for_stale()
                return
            if not granted:
                self._transition(RecorderPhase.IDLE)
        if not granted:
            self._flush_events()
            raise PermissionDeniedError()

        capture_config = self._options.capture_config()
        try:
            stream = self._device.open(
                capture_config,
                partial(self._on_chunk, session),
                partial(self._on_stream_closed, session),
            )
        except Exception as e:
            with self._lock:
                if session == self._session:
                    self._transition(RecorderPhase.IDLE)
            self._flush_events()
            app_logger.log_error(e, "recording_open_device")
            if isinstance(e, SpeakBetterError):
                raise
            raise wrap_exception(
                e, f"Failed to open capture device: {e}", AudioRecordingError
            ) from e

        with self._lock:
            stale = session != self._session
            if not stale:
                self._stream = stream
                self._started_at = self._clock()
                self._transition(
                    RecorderPhase.RECORDING,
                    event=Events.RECORDING_STARTED,
                    data={
                        "session": session,
                        "sample_rate": capture_config.sample_rate,
                        "channels": capture_config.channels,
                    },
                    is_recording=True,
                )
                self._start_sampler()

        if stale:
            self._abort_stream(stream)
            with self._lock:
                self._raise_for_stale()
            return

        self._flush_events()
        app_logger.log_recording_event(
            "Recording started",
            {
                "session": session,
                "max_duration": self._options.max_duration,
                "auto_stop": self._options.auto_stop,
            },
        )

    def stop(self) -> AudioSampleBuffer:
        """End the session and hand the captured audio to the caller

        Raises:
            NotRecordingError: nothing is recording or paused
            RecordingInterruptedError: interrupted while finalizing
        """
        return self._stop()

    def _stop(self, expected_session: Optional[int] = None) -> AudioSampleBuffer:
        with self._lock:
            if not self._phase.is_active or (
                expected_session is not None and expected_session != self._session
            ):
                raise NotRecordingError(context={"phase": self._phase.name})

            session = self._session
            now = self._clock()
            duration = self._elapsed(now)
            stream, self._stream = self._stream, None
            self._transition(
                RecorderPhase.STOPPING,
                is_recording=False,
                is_processing=True,
                duration_seconds=duration,
            )
        self._flush_events()
        self._stop_sampler()

        # Bounded flush of whatever the device still holds
        if stream is not None:
            try:
                stream.close(self._finalize_timeout)
            except Exception as e:
                app_logger.log_error(e, "recording_close_stream")

        with self._lock:
            if session != self._session:
                self._raise_for_stale()
                raise NotRecordingError("Recording was cancelled while stopping")
            chunks, self._chunks = self._chunks, []
            options = self._options

        buffer = self._assemble(chunks, options)

        with self._lock:
            if session != self._session:
                self._raise_for_stale()
                raise NotRecordingError("Recording was cancelled while stopping")
            self._transition(
                RecorderPhase.IDLE,
                event=Events.RECORDING_STOPPED,
                data={
                    "session": session,
                    "duration": duration,
                    "frames": buffer.frame_count,
                },
                is_processing=False,
            )
        self._flush_events()

        app_logger.log_recording_event(
            "Recording stopped",
            {"session": session, "duration": duration, "frames": buffer.frame_count},
        )
        return buffer

    def _assemble(
        self, chunks: List[np.ndarray], options: RecordingOptions
    ) -> AudioSampleBuffer:
        if not chunks:
            return AudioSampleBuffer.empty(options.sample_rate, options.channels)

        audio = np.concatenate(chunks, axis=0).astype(np.float32)
        processor = self._processor or AudioProcessor(options.sample_rate)

        if options.reduce_noise:
            audio = processor.apply_noise_reduction(audio)
        if options.normalize:
            audio = processor.normalize_audio(audio)

        buffer = AudioSampleBuffer(audio, options.sample_rate, options.channels)
        app_logger.log_audio_event(
            "Recording assembled",
            {"chunks": len(chunks), **processor.get_audio_statistics(buffer.mono())},
        )
        return buffer

    def pause(self) -> None:
        with self._lock:
            if self._phase is not RecorderPhase.RECORDING:
                raise NotRecordingError(
                    "Only an active recording can be paused",
                    context={"phase": self._phase.name},
                )
            now = self._clock()
            self._paused_at = now
            if self._stream is not None:
                self._stream.pause()
            self._transition(
                RecorderPhase.PAUSED,
                event=Events.RECORDING_PAUSED,
                data={"session": self._session},
                duration_seconds=self._elapsed(now),
            )
        self._flush_events()

    def resume(self) -> None:
        with self._lock:
            if self._phase is RecorderPhase.RECORDING:
                raise AlreadyRecordingError("Recording is not paused")
            if self._phase is not RecorderPhase.PAUSED:
                raise NotRecordingError(
                    "Only a paused recording can be resumed",
                    context={"phase": self._phase.name},
                )
            if self._host.is_backgrounded():
                raise BackgroundRestrictedError()

            now = self._clock()
            self._paused_total += now - self._paused_at
            self._paused_at = None
            if self._stream is not None:
                self._stream.resume()
            self._transition(
                RecorderPhase.RECORDING,
                event=Events.RECORDING_RESUMED,
                data={"session": self._session},
            )
        self._flush_events()

    def cancel(self) -> None:
        """Discard the session; never raises, no-op when idle"""
        with self._lock:
            if self._phase is RecorderPhase.IDLE:
                return
            old_phase = self._phase
            self._session += 1
            stream, self._stream = self._stream, None
            self._chunks = []
            self._state = RecordingState()
            self._paused_at = None
            self._transition(
                RecorderPhase.IDLE,
                event=Events.RECORDING_CANCELLED,
                data={"from_phase": old_phase.name},
            )
        self._stop_sampler()
        self._abort_stream(stream)
        self._flush_events()
        app_logger.log_recording_event("Recording cancelled", {"from_phase": old_phase.name})

    def handle_interruption(self, reason: str = "unknown") -> bool:
        """Tear the session down because of an external interruption

        Reachable from any thread and in any non-idle phase, including while
        ``start()`` is waiting on the permission prompt.

        Returns:
            True if a session was interrupted
        """
        return self._interrupt(reason)

    def _interrupt(self, reason: str, expected_session: Optional[int] = None) -> bool:
        with self._lock:
            if self._phase is RecorderPhase.IDLE:
                return False
            if expected_session is not None and expected_session != self._session:
                return False

            old_phase = self._phase
            error = RecordingInterruptedError(
                f"Recording interrupted: {reason}", reason=reason
            )
            self._session += 1
            stream, self._stream = self._stream, None
            self._chunks = []
            self._state = RecordingState(error=error)
            self._paused_at = None
            self._transition(
                RecorderPhase.IDLE,
                event=Events.RECORDING_INTERRUPTED,
                data={"reason": reason, "from_phase": old_phase.name, "error": error},
            )
        self._stop_sampler()
        self._abort_stream(stream)
        self._flush_events()

        app_logger.warning(
            "Recording interrupted",
            LogCategory.RECORDING,
            context={"reason": reason, "from_phase": old_phase.name},
            component="recording",
        )
        return True

    def notify_backgrounded(self) -> bool:
        """Host went to the background; pauses an active recording

        Returns:
            True if a recording was paused
        """
        try:
            self.pause()
        except NotRecordingError:
            return False
        app_logger.log_recording_event("Paused because the host went to the background")
        return True

    # ------------------------------------------------------------------
    # Capture callbacks
    # ------------------------------------------------------------------

    def _on_chunk(self, session: int, chunk: np.ndarray) -> None:
        with self._lock:
            if session != self._session:
                return
            # Chunks flushed by close() still belong to the recording
            if self._phase not in (RecorderPhase.RECORDING, RecorderPhase.STOPPING):
                return
            self._chunks.append(chunk)
            if len(self._chunks) == 1:
                self._transition(audio_level=AudioProcessor.rms_level([chunk]))

    def _on_stream_closed(self, session: int, error: Optional[Exception]) -> None:
        with self._lock:
            unexpected = session == self._session and self._phase.is_active
        if not unexpected:
            return
        if error is not None:
            app_logger.log_error(error, "recording_stream_closed")
        self._interrupt("device_closed", expected_session=session)

    # ------------------------------------------------------------------
    # Live sampling
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """One live-state sampling pass; the sampler runs this every interval"""
        auto_stop_session = None
        with self._lock:
            if self._phase is not RecorderPhase.RECORDING:
                return

            duration = self._elapsed(self._clock())
            if self._chunks:
                level = AudioProcessor.rms_level(
                    self._chunks[-Audio.LEVEL_WINDOW_CHUNKS:]
                )
            else:
                level = self._state.audio_level
            is_silent = level < self._options.silence_threshold

            self._transition(
                event=Events.AUDIO_LEVEL_UPDATE,
                data={"level": level, "duration": duration, "is_silent": is_silent},
                duration_seconds=duration,
                audio_level=level,
                is_silent=is_silent,
            )

            max_duration = self._options.max_duration
            if self._options.auto_stop and max_duration and duration >= max_duration:
                auto_stop_session = self._session
        self._flush_events()

        if auto_stop_session is not None:
            self._auto_stop(auto_stop_session)

    def _auto_stop(self, session: int) -> None:
        app_logger.log_recording_event(
            "Max duration reached, stopping", {"session": session}
        )
        try:
            buffer = self._stop(expected_session=session)
        except (NotRecordingError, RecordingInterruptedError) as e:
            app_logger.log_recording_event(
                "Auto-stop superseded", {"session": session, "reason": str(e)}
            )
            return

        self._events.emit(
            Events.RECORDING_AUTO_STOPPED,
            {"session": session, "buffer": buffer, "duration": buffer.duration},
        )
        if self._on_auto_stop is not None:
            try:
                self._on_auto_stop(buffer)
            except Exception as e:
                app_logger.log_error(e, "recording_auto_stop_callback")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_state(self) -> RecordingState:
        """Snapshot copy of the live state"""
        with self._lock:
            return dataclasses.replace(self._state)

    @property
    def phase(self) -> RecorderPhase:
        with self._lock:
            return self._phase

    @property
    def is_recording(self) -> bool:
        with self._lock:
            return self._phase is RecorderPhase.RECORDING

    @property
    def permission_granted(self) -> bool:
        with self._lock:
            return self._permission_granted

    def shutdown(self) -> None:
        self.cancel()
        self._stop_sampler()
        app_logger.log_recording_event("RecordingController shut down")
