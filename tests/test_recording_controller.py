"""RecordingController state machine tests

The sampler thread is parked on a long interval; tests drive live sampling
by calling ``tick()`` after moving the manual clock.
"""

import numpy as np
import pytest

from speakbetter.core.controllers import RecordingController
from speakbetter.core.interfaces import CaptureConfig, RecorderPhase, RecordingOptions, RecordingState
from speakbetter.core.services import Events
from speakbetter.utils import (
    AlreadyRecordingError,
    AudioRecordingError,
    BackgroundRestrictedError,
    NotRecordingError,
    PermissionDeniedError,
    RecordingInterruptedError,
)

from conftest import event_names, tone


class TestStart:
    """Starting a session"""

    def test_start_enters_recording(self, controller, capture_device):
        """Test start() moves IDLE -> RECORDING and opens one stream"""
        controller.start()

        assert controller.phase is RecorderPhase.RECORDING
        assert controller.is_recording is True
        assert controller.get_state().is_recording is True
        assert len(capture_device.streams) == 1

    def test_start_emits_transitions_in_order(self, controller, recorded_events):
        """Test start() publishes both phase changes and RECORDING_STARTED"""
        controller.start()

        assert event_names(recorded_events) == [
            Events.RECORDING_STATE_CHANGED,
            Events.RECORDING_STATE_CHANGED,
            Events.RECORDING_STARTED,
        ]
        phases = [
            (data["old_phase"], data["new_phase"])
            for name, data in recorded_events
            if name == Events.RECORDING_STATE_CHANGED
        ]
        assert phases == [("IDLE", "PERMISSION_PENDING"), ("PERMISSION_PENDING", "RECORDING")]

    def test_start_while_recording_raises_and_keeps_state(self, controller, capture_device, clock):
        """Test a second start() fails with AlreadyRecording and changes nothing"""
        controller.start()
        capture_device.stream.push(tone())
        clock.advance(1.5)
        controller.tick()
        before = controller.get_state()

        with pytest.raises(AlreadyRecordingError):
            controller.start()

        assert controller.phase is RecorderPhase.RECORDING
        assert controller.get_state() == before
        assert len(capture_device.streams) == 1

    def test_start_while_paused_raises(self, controller):
        """Test start() is refused while a session is paused"""
        controller.start()
        controller.pause()

        with pytest.raises(AlreadyRecordingError):
            controller.start()
        assert controller.phase is RecorderPhase.PAUSED

    def test_start_uses_session_options(self, controller, capture_device):
        """Test options passed to start() reach the capture stream"""
        controller.start(RecordingOptions(sample_rate=48000, channels=2, chunk_size=512))

        assert capture_device.stream.config == CaptureConfig(
            sample_rate=48000, channels=2, chunk_size=512
        )

    def test_start_from_background_is_restricted(self, controller, host, capture_device):
        """Test start() fails while the host is backgrounded"""
        host.backgrounded = True

        with pytest.raises(BackgroundRestrictedError):
            controller.start()

        assert controller.phase is RecorderPhase.IDLE
        assert capture_device.access_requests == 0

    def test_open_failure_returns_to_idle(self, controller, capture_device):
        """Test a device that fails to open surfaces AudioRecordingError"""
        capture_device.open_error = OSError("device busy")

        with pytest.raises(AudioRecordingError):
            controller.start()

        assert controller.phase is RecorderPhase.IDLE
        assert controller.get_state().is_recording is False


class TestPermission:
    """Microphone access"""

    def test_denied_permission(self, controller, capture_device):
        """Test start() raises PermissionDenied and stays idle"""
        capture_device.grant = False

        with pytest.raises(PermissionDeniedError):
            controller.start()

        assert controller.phase is RecorderPhase.IDLE
        assert capture_device.streams == []

    def test_grant_is_cached(self, controller, capture_device):
        """Test the prompt is shown once across sessions"""
        controller.start()
        controller.stop()
        controller.start()

        assert capture_device.access_requests == 1
        assert controller.permission_granted is True

    def test_request_permission_ahead_of_start(self, controller, capture_device):
        """Test request_permission() primes the grant for start()"""
        assert controller.request_permission() is True
        assert controller.request_permission() is True

        controller.start()
        assert capture_device.access_requests == 1

    def test_request_permission_denied(self, controller, capture_device):
        """Test a refused prompt is not cached"""
        capture_device.grant = False

        assert controller.request_permission() is False
        assert controller.request_permission() is False
        assert capture_device.access_requests == 2


class TestStop:
    """Stopping and materializing the recording"""

    def test_stop_returns_captured_audio(self, controller, capture_device, clock):
        """Test stop() concatenates every chunk into one buffer"""
        controller.start()
        for _ in range(3):
            capture_device.stream.push(tone(1600))
        clock.advance(2.0)

        buffer = controller.stop()

        assert buffer.frame_count == 4800
        assert buffer.sample_rate == 44100
        assert controller.phase is RecorderPhase.IDLE
        state = controller.get_state()
        assert state.is_recording is False
        assert state.is_processing is False
        assert state.duration_seconds == pytest.approx(2.0)

    def test_stop_flushes_device_buffer(self, controller, capture_device):
        """Test samples still held by the device at stop are kept"""
        controller.start()
        stream = capture_device.stream
        stream.push(tone(1600))
        stream.pending_on_close = [tone(800)]

        buffer = controller.stop()

        assert buffer.frame_count == 2400
        assert stream.closed is True
        assert stream.close_timeout == 0.5

    def test_stop_without_audio_returns_empty_buffer(self, controller):
        """Test stopping before any chunk arrived yields zero frames"""
        controller.start()

        buffer = controller.stop()

        assert buffer.frame_count == 0
        assert buffer.duration == 0.0

    def test_stop_when_idle_raises(self, controller):
        """Test stop() without a session raises NotRecording"""
        with pytest.raises(NotRecordingError):
            controller.stop()

    def test_stop_emits_processing_then_idle(self, controller, recorded_events):
        """Test STOPPING is published before RECORDING_STOPPED"""
        controller.start()
        recorded_events.clear()

        controller.stop()

        names = event_names(recorded_events)
        assert names[-1] == Events.RECORDING_STOPPED
        stopping = recorded_events[0][1]
        assert stopping["new_phase"] == "STOPPING"
        assert stopping["state"].is_processing is True

    def test_normalize_option(self, controller, capture_device):
        """Test a quiet recording is scaled up when normalize is on"""
        controller.start(RecordingOptions(normalize=True))
        capture_device.stream.push(tone(1600, amplitude=0.01))

        buffer = controller.stop()

        assert np.max(np.abs(buffer.samples)) > 0.05
        assert np.max(np.abs(buffer.samples)) <= 1.0


class TestPauseResume:
    """Pause and resume"""

    def test_pause_and_resume(self, controller, capture_device, recorded_events):
        """Test RECORDING -> PAUSED -> RECORDING with the stream following"""
        controller.start()
        controller.pause()

        assert controller.phase is RecorderPhase.PAUSED
        assert capture_device.stream.paused is True

        controller.resume()

        assert controller.phase is RecorderPhase.RECORDING
        assert capture_device.stream.paused is False
        assert Events.RECORDING_PAUSED in event_names(recorded_events)
        assert Events.RECORDING_RESUMED in event_names(recorded_events)

    def test_paused_time_not_counted(self, controller, clock):
        """Test duration excludes time spent paused"""
        controller.start()
        clock.advance(1.0)
        controller.pause()
        assert controller.get_state().duration_seconds == pytest.approx(1.0)

        clock.advance(5.0)
        controller.resume()
        clock.advance(1.0)
        controller.tick()

        assert controller.get_state().duration_seconds == pytest.approx(2.0)

    def test_stop_while_paused(self, controller, clock, recorded_events):
        """Test a paused session can be stopped directly"""
        controller.start()
        clock.advance(1.0)
        controller.pause()
        clock.advance(10.0)

        controller.stop()

        stopped = [data for name, data in recorded_events if name == Events.RECORDING_STOPPED]
        assert stopped[0]["duration"] == pytest.approx(1.0)
        assert controller.phase is RecorderPhase.IDLE

    def test_pause_requires_recording(self, controller):
        """Test pause() outside RECORDING raises NotRecording"""
        with pytest.raises(NotRecordingError):
            controller.pause()

        controller.start()
        controller.pause()
        with pytest.raises(NotRecordingError):
            controller.pause()

    def test_resume_while_recording_raises(self, controller):
        """Test resume() on a running session raises AlreadyRecording"""
        controller.start()

        with pytest.raises(AlreadyRecordingError):
            controller.resume()

    def test_resume_when_idle_raises(self, controller):
        """Test resume() without a session raises NotRecording"""
        with pytest.raises(NotRecordingError):
            controller.resume()

    def test_resume_from_background_is_restricted(self, controller, host):
        """Test resume() stays paused while the host is backgrounded"""
        controller.start()
        controller.pause()
        host.backgrounded = True

        with pytest.raises(BackgroundRestrictedError):
            controller.resume()
        assert controller.phase is RecorderPhase.PAUSED

    def test_notify_backgrounded_pauses(self, controller):
        """Test the host going to the background pauses a running session"""
        assert controller.notify_backgrounded() is False

        controller.start()
        assert controller.notify_backgrounded() is True
        assert controller.phase is RecorderPhase.PAUSED
        assert controller.notify_backgrounded() is False


class TestCancel:
    """Cancellation"""

    def test_cancel_discards_session(self, controller, capture_device, recorded_events):
        """Test cancel() returns to IDLE, aborts the stream and resets state"""
        controller.start()
        capture_device.stream.push(tone())

        controller.cancel()

        assert controller.phase is RecorderPhase.IDLE
        assert capture_device.stream.aborted is True
        assert controller.get_state() == RecordingState()
        assert Events.RECORDING_CANCELLED in event_names(recorded_events)

    def test_cancel_when_idle_is_noop(self, controller, recorded_events):
        """Test cancel() without a session does nothing"""
        controller.cancel()

        assert controller.phase is RecorderPhase.IDLE
        assert recorded_events == []

    def test_stop_after_cancel_raises(self, controller):
        """Test a cancelled session cannot be stopped"""
        controller.start()
        controller.cancel()

        with pytest.raises(NotRecordingError):
            controller.stop()

    def test_stale_chunks_are_dropped(self, controller, capture_device):
        """Test chunks from a cancelled session never reach the next one"""
        controller.start()
        old_stream = capture_device.stream
        controller.cancel()

        controller.start()
        old_stream._on_chunk(tone(4000))
        capture_device.stream.push(tone(1600))

        assert controller.stop().frame_count == 1600

    def test_cancel_during_permission_prompt(self, controller, capture_device):
        """Test cancelling while the prompt is pending ends start() quietly"""
        capture_device.on_access = controller.cancel

        controller.start()

        assert controller.phase is RecorderPhase.IDLE
        assert capture_device.streams == []


class TestInterruption:
    """External interruptions"""

    def test_interruption_while_recording(self, controller, capture_device, recorded_events):
        """Test an interruption tears the session down and records the error"""
        controller.start()

        assert controller.handle_interruption("phone_call") is True

        assert controller.phase is RecorderPhase.IDLE
        assert capture_device.stream.aborted is True
        error = controller.get_state().error
        assert isinstance(error, RecordingInterruptedError)
        assert error.reason == "phone_call"
        interrupted = [d for n, d in recorded_events if n == Events.RECORDING_INTERRUPTED]
        assert interrupted[0]["reason"] == "phone_call"
        assert interrupted[0]["from_phase"] == "RECORDING"

    def test_interruption_when_idle(self, controller):
        """Test an interruption without a session reports nothing to do"""
        assert controller.handle_interruption("phone_call") is False

    def test_interruption_during_permission_prompt(self, controller, capture_device):
        """Test start() raises Interrupted when interrupted at the prompt"""
        capture_device.on_access = lambda: controller.handle_interruption("audio_focus_lost")

        with pytest.raises(RecordingInterruptedError) as exc_info:
            controller.start()

        assert exc_info.value.reason == "audio_focus_lost"
        assert controller.phase is RecorderPhase.IDLE
        assert capture_device.streams == []

    def test_interruption_while_opening(self, controller, capture_device):
        """Test a stream opened for an interrupted session is aborted"""
        capture_device.on_open = lambda stream: controller.handle_interruption("route_change")

        with pytest.raises(RecordingInterruptedError):
            controller.start()

        assert capture_device.stream.aborted is True
        assert controller.phase is RecorderPhase.IDLE

    def test_device_loss_interrupts(self, controller, capture_device, recorded_events):
        """Test a stream closing underneath a session interrupts it"""
        controller.start()

        capture_device.stream.fail()

        assert controller.phase is RecorderPhase.IDLE
        assert controller.get_state().error.reason == "device_closed"
        assert event_names(recorded_events).count(Events.RECORDING_INTERRUPTED) == 1

    def test_new_session_after_interruption(self, controller):
        """Test a fresh start() clears the previous error"""
        controller.start()
        controller.handle_interruption("phone_call")

        controller.start()

        assert controller.get_state().error is None
        assert controller.phase is RecorderPhase.RECORDING


class TestLiveSampling:
    """Level, silence and auto-stop"""

    def test_first_chunk_seeds_level(self, controller, capture_device):
        """Test the level is available before the sampler runs"""
        controller.start()
        capture_device.stream.push(tone(1600, amplitude=0.5))

        assert controller.get_state().audio_level == pytest.approx(0.5 / np.sqrt(2), abs=1e-3)

    def test_tick_updates_level_and_duration(self, controller, capture_device, clock, recorded_events):
        """Test tick() publishes level, duration and silence"""
        controller.start()
        capture_device.stream.push(tone(1600, amplitude=0.5))
        clock.advance(0.75)

        controller.tick()

        state = controller.get_state()
        assert state.duration_seconds == pytest.approx(0.75)
        assert state.is_silent is False
        updates = [d for n, d in recorded_events if n == Events.AUDIO_LEVEL_UPDATE]
        assert updates[-1]["level"] == pytest.approx(state.audio_level)

    def test_silence_detected(self, controller, capture_device):
        """Test a level under the threshold flags silence"""
        controller.start()
        capture_device.stream.push(np.zeros(1600, dtype=np.float32))

        controller.tick()

        assert controller.get_state().is_silent is True

    def test_level_uses_recent_chunks(self, controller, capture_device):
        """Test only the last few chunks feed the live level"""
        controller.start()
        capture_device.stream.push(tone(1600, amplitude=0.9))
        for _ in range(5):
            capture_device.stream.push(np.zeros(1600, dtype=np.float32))

        controller.tick()

        assert controller.get_state().audio_level == 0.0

    def test_tick_outside_recording_is_noop(self, controller, recorded_events):
        """Test tick() does nothing when idle or paused"""
        controller.tick()
        controller.start()
        controller.pause()
        recorded_events.clear()

        controller.tick()

        assert recorded_events == []

    def test_auto_stop_at_max_duration(self, controller, capture_device, clock, event_bus):
        """Test the session stops itself once max_duration is reached"""
        stopped = []
        event_bus.subscribe(Events.RECORDING_AUTO_STOPPED, stopped.append)
        controller.start()
        capture_device.stream.push(tone(1600))
        clock.advance(60.0)

        controller.tick()

        assert controller.phase is RecorderPhase.IDLE
        assert len(stopped) == 1
        assert stopped[0]["buffer"].frame_count == 1600

    def test_auto_stop_callback(self, capture_device, clock):
        """Test on_auto_stop receives the finished buffer"""
        received = []
        ctrl = RecordingController(
            capture_device,
            options=RecordingOptions(max_duration=5.0),
            clock=clock,
            sampler_interval=3600,
            on_auto_stop=received.append,
        )
        try:
            ctrl.start()
            capture_device.stream.push(tone(800))
            clock.advance(5.0)
            ctrl.tick()
        finally:
            ctrl.shutdown()

        assert len(received) == 1
        assert received[0].frame_count == 800

    def test_auto_stop_disabled(self, controller, clock):
        """Test sessions run past max_duration when auto_stop is off"""
        controller.start(RecordingOptions(max_duration=1.0, auto_stop=False))
        clock.advance(10.0)

        controller.tick()

        assert controller.phase is RecorderPhase.RECORDING


class TestFromConfig:
    """Construction from configuration"""

    def test_configured_sample_rate(self, config, capture_device):
        """Test recording settings flow into the capture stream"""
        config.set_setting("recording.sample_rate", 22050)
        config.set_setting("recording.chunk_size", 256)
        ctrl = RecordingController.from_config(config, capture_device)
        try:
            ctrl.start()
            assert capture_device.stream.config.sample_rate == 22050
            assert capture_device.stream.config.chunk_size == 256
        finally:
            ctrl.shutdown()
