"""Core services

Configuration, events and visualization-context lifecycle.
"""

from .config import ConfigKeys, ConfigService
from .event_bus import EventBus, Events

__all__ = [
    "ConfigKeys",
    "ConfigService",
    "EventBus",
    "Events",
]
