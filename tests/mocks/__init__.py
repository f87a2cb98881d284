"""Mock object library"""
from .capture_mock import ManualClock, MockCaptureDevice, MockCaptureStream, MockHost

__all__ = [
    'ManualClock',
    'MockCaptureDevice',
    'MockCaptureStream',
    'MockHost',
]
