"""Visualization: draw primitives, quality policy and the rendering pipeline

``qt_sink`` is not imported here; it needs the optional PySide6 dependency.
"""

from .pipeline import RenderResult, VisualizationPipeline
from .primitives import (
    Clear,
    DrawSink,
    FillPath,
    FillRect,
    FillText,
    LinearGradient,
    PrimitiveRecorder,
    StrokePath,
    replay,
)
from .quality import (
    DeviceCapabilities,
    MemoryPressure,
    MemoryPressureMonitor,
    PowerMode,
    QualityProfile,
    QualityTier,
    RenderEnvironment,
    profile_for,
    resolve_tier,
)
from .sources import frequency_bytes, to_byte_samples
from .specs import (
    FrequencySpec,
    SpectrogramSpec,
    VisualizationType,
    VolumeSpec,
    WaveformSpec,
    spec_for,
)
from .style import VisualizationStyle

__all__ = [
    "VisualizationPipeline",
    "RenderResult",
    "VisualizationStyle",
    # Primitives
    "Clear",
    "FillRect",
    "StrokePath",
    "FillPath",
    "FillText",
    "LinearGradient",
    "DrawSink",
    "PrimitiveRecorder",
    "replay",
    # Quality
    "QualityTier",
    "QualityProfile",
    "DeviceCapabilities",
    "PowerMode",
    "MemoryPressure",
    "MemoryPressureMonitor",
    "RenderEnvironment",
    "profile_for",
    "resolve_tier",
    # Kinds
    "VisualizationType",
    "WaveformSpec",
    "FrequencySpec",
    "VolumeSpec",
    "SpectrogramSpec",
    "spec_for",
    # Sources
    "to_byte_samples",
    "frequency_bytes",
]
