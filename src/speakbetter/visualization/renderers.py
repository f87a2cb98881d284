"""Per-kind renderers

``draw_visualization`` dispatches on the spec class. Every renderer takes
byte-domain samples (0..255) already reduced for the quality tier and
returns primitives in draw order.
"""

import math
from functools import singledispatch
from typing import List

import numpy as np

from ..core.services.config.constants import Visualization
from ..utils import UnsupportedVisualizationTypeError
from .primitives import (
    Clear,
    FillRect,
    FillText,
    LinearGradient,
    Primitive,
    StrokePath,
    Style,
)
from .quality import QualityProfile
from .specs import FrequencySpec, SpectrogramSpec, VolumeSpec, WaveformSpec
from .style import VisualizationStyle


def _gradient(
    style: VisualizationStyle, x0: float, y0: float, x1: float, y1: float
) -> LinearGradient:
    count = len(style.gradient)
    stops = tuple((index / count, color) for index, color in enumerate(style.gradient))
    return LinearGradient(x0, y0, x1, y1, stops)


def draw_background(style: VisualizationStyle) -> List[Primitive]:
    primitives: List[Primitive] = [Clear(style.width, style.height)]
    if style.background_color != "transparent":
        primitives.append(
            FillRect(0, 0, style.width, style.height, style.background_color)
        )
    return primitives


def draw_grid(style: VisualizationStyle) -> List[Primitive]:
    width, height = style.width, style.height
    lines: List[Primitive] = []

    rows = Visualization.GRID_HORIZONTAL_LINES
    for i in range(1, rows):
        y = i * height / rows
        lines.append(StrokePath(((0, y), (width, y)), style.grid_color, 1))

    columns = Visualization.GRID_VERTICAL_LINES
    for i in range(1, columns):
        x = i * width / columns
        lines.append(StrokePath(((x, 0), (x, height)), style.grid_color, 1))

    return lines


@singledispatch
def draw_visualization(
    spec, data: np.ndarray, style: VisualizationStyle, profile: QualityProfile
) -> List[Primitive]:
    raise UnsupportedVisualizationTypeError(spec)


@draw_visualization.register
def _(spec: WaveformSpec, data, style, profile):
    width, height = style.width, style.height
    center = height / 2
    factor = style.normalization_factor or 1.0

    points = [(0.0, center)]
    count = len(data)
    if count:
        slice_width = width / count
        values = data.astype(np.float64) / 128.0
        points.extend(
            (i * slice_width, center + center * (value - 1) * factor)
            for i, value in enumerate(values)
        )
        if spec.mirror:
            points.extend(
                (i * slice_width, center - center * (values[i] - 1) * factor)
                for i in range(count - 1, -1, -1)
            )
    if not (count and spec.mirror):
        points.append((width, center))

    stroke: Style = style.foreground_color
    if style.has_gradient:
        stroke = _gradient(style, 0, 0, 0, height)
    return [StrokePath(tuple(points), stroke, style.line_width)]


@draw_visualization.register
def _(spec: FrequencySpec, data, style, profile):
    width, height = style.width, style.height
    factor = style.normalization_factor or 1.0

    bar_count = spec.bar_count or Visualization.BAR_COUNT
    if profile.max_bar_count is not None:
        bar_count = min(bar_count, profile.max_bar_count)

    step = len(data) // bar_count
    bar_width = spec.bar_width or (width / bar_count - spec.bar_gap)
    fill: Style = style.foreground_color
    if style.has_gradient:
        fill = _gradient(style, 0, 0, 0, height)

    bars: List[Primitive] = []
    for i in range(bar_count):
        bucket = data[i * step:(i + 1) * step]
        value = float(bucket.mean()) if len(bucket) else 0.0
        bar_height = value / 255.0 * height * factor
        x = i * (bar_width + spec.bar_gap)

        if spec.mirror:
            y = height / 2 - bar_height / 2
            radius = spec.bar_radius if spec.bar_radius > 0 else 0.0
        else:
            y = height - bar_height
            radius = spec.bar_radius if bar_height > spec.bar_radius * 2 else 0.0
        bars.append(FillRect(x, y, bar_width, bar_height, fill, radius))

    return bars


@draw_visualization.register
def _(spec: VolumeSpec, data, style, profile):
    width, height = style.width, style.height
    factor = style.normalization_factor or 1.0

    level = float(data.mean()) / 255.0 if len(data) else 0.0
    bar_width = width * Visualization.VOLUME_BAR_RATIO
    bar_height = level * height * factor
    fill: Style = style.foreground_color
    if style.has_gradient:
        fill = _gradient(style, 0, height, 0, 0)

    return [
        FillRect(
            (width - bar_width) / 2,
            height - bar_height,
            bar_width,
            bar_height,
            fill,
            max(spec.bar_radius, 0.0),
        ),
        FillText(
            f"{math.floor(level * 100 + 0.5)}%",
            width / 2,
            10,
            Visualization.VOLUME_TEXT_COLOR,
            Visualization.VOLUME_FONT,
            align="center",
            baseline="top",
        ),
    ]


@draw_visualization.register
def _(spec: SpectrogramSpec, data, style, profile):
    count = len(data)
    if not count:
        return []

    bin_width = style.width / count
    strips: List[Primitive] = []
    for i, value in enumerate(data):
        intensity = float(value) / 255.0
        color = "rgb({}, {}, {})".format(
            math.floor(intensity * 255),
            math.floor((1 - intensity) * 100),
            math.floor((1 - intensity) * 255),
        )
        strips.append(FillRect(i * bin_width, 0, bin_width + 1, style.height, color))
    return strips
