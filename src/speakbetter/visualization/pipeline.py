"""Visualization pipeline

Turns a sample buffer plus a quality policy into draw primitives. Calls
hold no state between them and never block, so they are safe to run from
a render loop.
"""

import dataclasses
import time
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from ..analysis.metrics import WordTiming
from ..audio import codec
from ..core.services.config import ConfigKeys
from ..core.services.config.constants import Visualization
from ..utils import app_logger
from .primitives import Primitive
from .quality import (
    DeviceCapabilities,
    MemoryPressure,
    PowerMode,
    QualityTier,
    RenderEnvironment,
    profile_for,
    resolve_tier,
)
from .renderers import draw_background, draw_grid, draw_visualization
from .sources import SampleSource, to_byte_samples
from .specs import (
    FrequencySpec,
    VisualizationSpec,
    VisualizationType,
    VolumeSpec,
    spec_for,
)
from .style import VisualizationStyle
from .word_overlay import draw_word_timings, visible_words


@dataclass(frozen=True)
class RenderResult:
    """Primitives of one call plus what they were rendered from"""

    primitives: Tuple[Primitive, ...]
    tier: QualityTier
    sample_count: int = 0
    word_count: int = 0

    def __len__(self) -> int:
        return len(self.primitives)

    def __iter__(self):
        return iter(self.primitives)


class VisualizationPipeline:
    def __init__(
        self,
        style: Optional[VisualizationStyle] = None,
        capabilities: Optional[DeviceCapabilities] = None,
        default_tier: QualityTier = QualityTier.STANDARD,
        environment: Optional[RenderEnvironment] = None,
        frequency_spec: Optional[FrequencySpec] = None,
        volume_spec: Optional[VolumeSpec] = None,
    ):
        self.style = style or VisualizationStyle()
        self.capabilities = capabilities
        self.default_tier = QualityTier.from_name(default_tier)
        self._environment = environment or RenderEnvironment()
        # Used when render() is given a type name instead of a spec
        self._default_specs = {
            FrequencySpec: frequency_spec or FrequencySpec(),
            VolumeSpec: volume_spec or VolumeSpec(),
        }

    @classmethod
    def from_config(
        cls, config, capabilities: Optional[DeviceCapabilities] = None
    ) -> "VisualizationPipeline":
        bar_radius = config.get_setting(
            ConfigKeys.VISUALIZATION_BAR_RADIUS, Visualization.BAR_RADIUS
        )
        return cls(
            style=VisualizationStyle.from_config(config),
            capabilities=capabilities,
            default_tier=QualityTier.from_name(
                config.get_setting(ConfigKeys.VISUALIZATION_DEFAULT_TIER, "standard")
            ),
            frequency_spec=FrequencySpec(
                bar_count=config.get_setting(
                    ConfigKeys.VISUALIZATION_BAR_COUNT, Visualization.BAR_COUNT
                ),
                bar_width=config.get_setting(
                    ConfigKeys.VISUALIZATION_BAR_WIDTH, Visualization.BAR_WIDTH
                ),
                bar_gap=config.get_setting(
                    ConfigKeys.VISUALIZATION_BAR_GAP, Visualization.BAR_GAP
                ),
                bar_radius=bar_radius,
            ),
            volume_spec=VolumeSpec(bar_radius=bar_radius),
        )

    @property
    def environment(self) -> RenderEnvironment:
        return self._environment

    def set_memory_pressure(self, level: MemoryPressure) -> None:
        if level is not self._environment.memory_pressure:
            app_logger.log_visualization_event(
                "Memory pressure changed",
                {"from": self._environment.memory_pressure.name, "to": level.name},
            )
        self._environment = dataclasses.replace(self._environment, memory_pressure=level)

    def set_power_mode(self, mode: PowerMode) -> None:
        self._environment = dataclasses.replace(self._environment, power_mode=mode)

    def default_spec(
        self, visualization_type: Union[VisualizationType, str]
    ) -> VisualizationSpec:
        """Spec for a type name, carrying the configured bar geometry"""
        spec = spec_for(visualization_type)
        return self._default_specs.get(type(spec), spec)

    def resolve_tier(self, tier: Optional[Union[QualityTier, str]] = None) -> QualityTier:
        return resolve_tier(
            explicit=QualityTier.from_name(tier) if tier is not None else None,
            capabilities=self.capabilities,
            default=self.default_tier,
            environment=self._environment,
        )

    def render(
        self,
        samples: SampleSource,
        spec: Union[VisualizationSpec, VisualizationType, str],
        tier: Optional[Union[QualityTier, str]] = None,
        visible: bool = True,
        style: Optional[VisualizationStyle] = None,
    ) -> RenderResult:
        """Draw primitives for one frame

        Raises:
            UnsupportedVisualizationTypeError: no renderer for ``spec``
        """
        if isinstance(spec, (str, VisualizationType)):
            spec = self.default_spec(spec)
        resolved = self.resolve_tier(tier)
        if not visible:
            return RenderResult((), resolved)

        start = time.perf_counter()
        style = style or self.style
        profile = profile_for(resolved)

        data = to_byte_samples(samples)
        if profile.max_samples is not None and len(data) > profile.max_samples:
            data = codec.downsample(data, profile.max_samples)

        primitives = draw_background(style)
        if style.show_grid and profile.show_grid:
            primitives.extend(draw_grid(style))
        primitives.extend(draw_visualization(spec, data, style, profile))

        app_logger.log_visualization_event(
            "Frame rendered",
            {
                "spec": type(spec).__name__,
                "tier": resolved.name,
                "samples": len(data),
                "primitives": len(primitives),
                "duration_ms": (time.perf_counter() - start) * 1000,
            },
        )
        return RenderResult(tuple(primitives), resolved, sample_count=len(data))

    def render_word_timings(
        self,
        word_timings: Sequence[WordTiming],
        current_time: float,
        total_duration: float,
        tier: Optional[Union[QualityTier, str]] = None,
        visible: bool = True,
        style: Optional[VisualizationStyle] = None,
    ) -> RenderResult:
        resolved = self.resolve_tier(tier)
        if not visible:
            return RenderResult((), resolved)

        style = style or self.style
        limit = profile_for(resolved).word_limit
        words = visible_words(word_timings or [], current_time, limit)

        primitives = draw_background(style)
        primitives.extend(draw_word_timings(words, current_time, total_duration, style))
        return RenderResult(tuple(primitives), resolved, word_count=len(words))
