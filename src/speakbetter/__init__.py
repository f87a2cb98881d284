"""SpeakBetter - speech coaching core

Recording state machine, speech delivery metrics, visualization draw
primitives and a PCM16/WAV codec.
"""

__version__ = "0.3.0"
__description__ = "SpeakBetter"

from .analysis import MetricsEngine, SpeechMetrics, WordTiming, generate_feedback
from .audio import AudioSampleBuffer, codec
from .core.container import ServiceContainer, create_container
from .core.controllers import RecordingController
from .core.services.context_lifecycle_manager import ContextLifecycleManager
from .utils import SpeakBetterError, app_logger
from .visualization import QualityTier, VisualizationPipeline

__all__ = [
    "AudioSampleBuffer",
    "codec",
    "ContextLifecycleManager",
    "MetricsEngine",
    "RecordingController",
    "ServiceContainer",
    "SpeakBetterError",
    "SpeechMetrics",
    "QualityTier",
    "VisualizationPipeline",
    "WordTiming",
    "app_logger",
    "create_container",
    "generate_feedback",
]
