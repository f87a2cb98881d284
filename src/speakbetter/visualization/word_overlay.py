"""Word-timing overlay: timeline, time markers, words and a playhead"""

import math
from typing import List, Optional, Sequence

from ..analysis.metrics import WordTiming
from ..core.services.config.constants import Visualization
from .primitives import FillPath, FillText, Primitive, StrokePath
from .style import VisualizationStyle

TIMELINE_OFFSET = 20
TICK_LENGTH = 5
LABEL_OFFSET = 5
UNDERLINE_OFFSET = 5
PLAYHEAD_HALF_WIDTH = 5
PLAYHEAD_HEAD_HEIGHT = 10


def format_marker(seconds: float) -> str:
    """M:SS"""
    return f"{math.floor(seconds / 60)}:{math.floor(seconds % 60):02d}"


def visible_words(
    word_timings: Sequence[WordTiming], current_time: float, limit: Optional[int]
) -> List[WordTiming]:
    """At most ``limit`` consecutive words, centred on the playback position"""
    words = list(word_timings)
    if limit is None or len(words) <= limit:
        return words

    current = next(
        (i for i, timing in enumerate(words) if timing.end_time >= current_time),
        len(words) - 1,
    )
    start = max(0, min(current - limit // 2, len(words) - limit))
    return words[start:start + limit]


def draw_word_timings(
    word_timings: Sequence[WordTiming],
    current_time: float,
    total_duration: float,
    style: VisualizationStyle,
) -> List[Primitive]:
    """Overlay primitives; empty when there is nothing to place on a timeline"""
    if not word_timings or not math.isfinite(total_duration) or total_duration <= 0:
        return []

    width, height = style.width, style.height
    scale = width / total_duration
    timeline_y = height - TIMELINE_OFFSET
    primitives: List[Primitive] = [
        StrokePath(
            ((0, timeline_y), (width, timeline_y)), Visualization.TIMELINE_COLOR, 1
        )
    ]

    step = math.ceil(total_duration / 10)
    marker = 0
    while marker <= total_duration:
        x = marker * scale
        primitives.append(
            StrokePath(
                ((x, timeline_y), (x, timeline_y + TICK_LENGTH)),
                Visualization.TIMELINE_COLOR,
                1,
            )
        )
        primitives.append(
            FillText(
                format_marker(marker),
                x,
                height - LABEL_OFFSET,
                Visualization.MARKER_COLOR,
                Visualization.MARKER_FONT,
                align="center",
            )
        )
        marker += step

    word_y = height / 2
    for timing in word_timings:
        start_x = timing.start_time * scale
        end_x = timing.end_time * scale
        is_current = timing.start_time <= current_time <= timing.end_time
        color = (
            Visualization.CURRENT_WORD_COLOR if is_current else Visualization.WORD_COLOR
        )

        primitives.append(
            FillText(
                timing.word,
                (start_x + end_x) / 2,
                word_y,
                color,
                Visualization.WORD_FONT,
                align="center",
            )
        )
        if is_current:
            underline_y = word_y + UNDERLINE_OFFSET
            primitives.append(
                StrokePath(
                    ((start_x, underline_y), (end_x, underline_y)),
                    Visualization.CURRENT_WORD_COLOR,
                    2,
                )
            )

    playhead_x = current_time * scale
    primitives.append(
        StrokePath(
            ((playhead_x, 0), (playhead_x, timeline_y)), Visualization.PLAYHEAD_COLOR, 2
        )
    )
    primitives.append(
        FillPath(
            (
                (playhead_x - PLAYHEAD_HALF_WIDTH, timeline_y),
                (playhead_x + PLAYHEAD_HALF_WIDTH, timeline_y),
                (playhead_x, timeline_y + PLAYHEAD_HEAD_HEIGHT),
            ),
            Visualization.PLAYHEAD_COLOR,
        )
    )
    return primitives
