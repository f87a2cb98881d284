"""Canvas size and colours shared by every renderer"""

from dataclasses import dataclass, field
from typing import Tuple

from ..core.services.config import ConfigKeys
from ..core.services.config.constants import Visualization


@dataclass(frozen=True)
class VisualizationStyle:
    width: float = Visualization.DEFAULT_WIDTH
    height: float = Visualization.DEFAULT_HEIGHT
    background_color: str = Visualization.BACKGROUND_COLOR
    foreground_color: str = Visualization.FOREGROUND_COLOR
    grid_color: str = Visualization.GRID_COLOR
    show_grid: bool = False
    line_width: float = Visualization.LINE_WIDTH
    normalization_factor: float = Visualization.NORMALIZATION_FACTOR
    # Any colours here replace the foreground with a vertical gradient
    gradient: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_config(cls, config) -> "VisualizationStyle":
        return cls(
            width=config.get_setting(
                ConfigKeys.VISUALIZATION_WIDTH, Visualization.DEFAULT_WIDTH
            ),
            height=config.get_setting(
                ConfigKeys.VISUALIZATION_HEIGHT, Visualization.DEFAULT_HEIGHT
            ),
            background_color=config.get_setting(
                ConfigKeys.VISUALIZATION_BACKGROUND_COLOR, Visualization.BACKGROUND_COLOR
            ),
            foreground_color=config.get_setting(
                ConfigKeys.VISUALIZATION_FOREGROUND_COLOR, Visualization.FOREGROUND_COLOR
            ),
            grid_color=config.get_setting(
                ConfigKeys.VISUALIZATION_GRID_COLOR, Visualization.GRID_COLOR
            ),
            show_grid=config.get_setting(ConfigKeys.VISUALIZATION_SHOW_GRID, False),
            line_width=config.get_setting(
                ConfigKeys.VISUALIZATION_LINE_WIDTH, Visualization.LINE_WIDTH
            ),
            normalization_factor=config.get_setting(
                ConfigKeys.VISUALIZATION_NORMALIZATION_FACTOR,
                Visualization.NORMALIZATION_FACTOR,
            ),
            gradient=tuple(
                config.get_setting(ConfigKeys.VISUALIZATION_GRADIENT, []) or ()
            ),
        )

    @property
    def has_gradient(self) -> bool:
        return len(self.gradient) > 0
