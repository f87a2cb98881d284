"""pytest configuration and global fixtures"""
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from speakbetter.core.controllers import RecordingController
from speakbetter.core.interfaces import RecordingOptions
from speakbetter.core.services import ConfigService, EventBus, Events

from mocks import ManualClock, MockCaptureDevice, MockHost

ALL_EVENTS = [
    value for name, value in vars(Events).items()
    if not name.startswith("_") and isinstance(value, str)
]


# ============= Mock Fixtures =============

@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def host():
    return MockHost()


@pytest.fixture
def capture_device():
    return MockCaptureDevice()


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def recorded_events(event_bus):
    """Every (event_name, data) pair emitted on the bus, in order"""
    received = []
    for event_name in ALL_EVENTS:
        event_bus.subscribe(
            event_name, lambda data, name=event_name: received.append((name, data))
        )
    return received


@pytest.fixture
def config():
    """Defaults only, no file on disk"""
    return ConfigService()


# ============= Controller Fixtures =============

@pytest.fixture
def recording_options():
    return RecordingOptions(max_duration=60.0, auto_stop=True, silence_threshold=0.01)


@pytest.fixture
def controller(capture_device, host, clock, event_bus, recording_options):
    """Controller whose sampler never fires on its own; tests call tick()"""
    ctrl = RecordingController(
        capture_device,
        host=host,
        options=recording_options,
        event_service=event_bus,
        clock=clock,
        sampler_interval=3600,
        finalize_timeout=0.5,
    )
    yield ctrl
    ctrl.shutdown()


# ============= Helpers =============

def tone(frames=1600, amplitude=0.5, sample_rate=16000, frequency=440.0):
    """Float32 sine chunk"""
    t = np.arange(frames) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


def event_names(recorded):
    return [name for name, _ in recorded]
