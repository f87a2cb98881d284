"""Visualization kinds

Each kind is its own frozen dataclass carrying the options only it uses;
renderers are registered per class.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..core.services.config.constants import Visualization
from ..utils import UnsupportedVisualizationTypeError


class VisualizationType(Enum):
    WAVEFORM = "waveform"
    FREQUENCY = "frequency"
    VOLUME = "volume"
    SPECTROGRAM = "spectrogram"


@dataclass(frozen=True)
class WaveformSpec:
    mirror: bool = False


@dataclass(frozen=True)
class FrequencySpec:
    bar_count: int = Visualization.BAR_COUNT
    bar_width: Optional[float] = Visualization.BAR_WIDTH
    bar_gap: float = Visualization.BAR_GAP
    bar_radius: float = Visualization.BAR_RADIUS
    mirror: bool = False


@dataclass(frozen=True)
class VolumeSpec:
    bar_radius: float = Visualization.BAR_RADIUS


@dataclass(frozen=True)
class SpectrogramSpec:
    pass


VisualizationSpec = Union[WaveformSpec, FrequencySpec, VolumeSpec, SpectrogramSpec]

_DEFAULT_SPECS = {
    VisualizationType.WAVEFORM: WaveformSpec,
    VisualizationType.FREQUENCY: FrequencySpec,
    VisualizationType.VOLUME: VolumeSpec,
    VisualizationType.SPECTROGRAM: SpectrogramSpec,
}


def spec_for(
    visualization_type: Union[str, VisualizationType], **options
) -> VisualizationSpec:
    """Build the spec for a type name such as ``"frequency"``

    Raises:
        UnsupportedVisualizationTypeError: unknown type
    """
    try:
        kind = VisualizationType(
            visualization_type.value
            if isinstance(visualization_type, VisualizationType)
            else str(visualization_type).lower()
        )
    except ValueError:
        raise UnsupportedVisualizationTypeError(visualization_type) from None
    return _DEFAULT_SPECS[kind](**options)
