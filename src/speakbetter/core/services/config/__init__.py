"""Configuration module"""

from .config_defaults import get_default_config
from .config_keys import ConfigKeys
from .config_service import ConfigService
from .constants import Audio, Lifecycle, Metrics, Visualization

__all__ = [
    "ConfigService",
    "ConfigKeys",
    "get_default_config",
    "Audio",
    "Lifecycle",
    "Metrics",
    "Visualization",
]
