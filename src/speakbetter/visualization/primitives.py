"""Draw primitives and the sink they are replayed onto

Renderers never touch a drawing surface. They return an ordered tuple of
immutable primitives; ``replay`` turns them into canvas-style calls on a
``DrawSink`` supplied by the host.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple, Union

Point = Tuple[float, float]
ColorStop = Tuple[float, str]


@dataclass(frozen=True)
class LinearGradient:
    x0: float
    y0: float
    x1: float
    y1: float
    stops: Tuple[ColorStop, ...]


Style = Union[str, LinearGradient]


@dataclass(frozen=True)
class Clear:
    width: float
    height: float


@dataclass(frozen=True)
class FillRect:
    x: float
    y: float
    width: float
    height: float
    style: Style
    radius: float = 0.0


@dataclass(frozen=True)
class StrokePath:
    points: Tuple[Point, ...]
    style: Style
    line_width: float = 1.0


@dataclass(frozen=True)
class FillPath:
    points: Tuple[Point, ...]
    style: Style


@dataclass(frozen=True)
class FillText:
    text: str
    x: float
    y: float
    style: Style
    font: str
    align: str = "start"
    baseline: str = "alphabetic"


Primitive = Union[Clear, FillRect, StrokePath, FillPath, FillText]


class DrawSink(ABC):
    """Canvas-style drawing target"""

    @abstractmethod
    def clear(self, width: float, height: float) -> None:
        pass

    @abstractmethod
    def create_linear_gradient(
        self, x0: float, y0: float, x1: float, y1: float, stops: Sequence[ColorStop]
    ) -> Any:
        """Return a sink-specific gradient usable as a fill or stroke style"""

    @abstractmethod
    def set_fill_style(self, style: Any) -> None:
        pass

    @abstractmethod
    def set_stroke_style(self, style: Any) -> None:
        pass

    @abstractmethod
    def set_line_width(self, width: float) -> None:
        pass

    @abstractmethod
    def begin_path(self) -> None:
        pass

    @abstractmethod
    def move_to(self, x: float, y: float) -> None:
        pass

    @abstractmethod
    def line_to(self, x: float, y: float) -> None:
        pass

    @abstractmethod
    def rect(self, x: float, y: float, width: float, height: float) -> None:
        pass

    @abstractmethod
    def rounded_rect(
        self, x: float, y: float, width: float, height: float, radius: float
    ) -> None:
        pass

    @abstractmethod
    def fill(self) -> None:
        pass

    @abstractmethod
    def stroke(self) -> None:
        pass

    @abstractmethod
    def set_font(self, font: str) -> None:
        pass

    @abstractmethod
    def set_text_align(self, align: str) -> None:
        pass

    @abstractmethod
    def set_text_baseline(self, baseline: str) -> None:
        pass

    @abstractmethod
    def fill_text(self, text: str, x: float, y: float) -> None:
        pass


def _resolve_style(style: Style, sink: DrawSink) -> Any:
    if isinstance(style, LinearGradient):
        return sink.create_linear_gradient(
            style.x0, style.y0, style.x1, style.y1, style.stops
        )
    return style


def _trace(points: Sequence[Point], sink: DrawSink) -> None:
    sink.begin_path()
    if not points:
        return
    sink.move_to(*points[0])
    for x, y in points[1:]:
        sink.line_to(x, y)


def replay(primitives: Sequence[Primitive], sink: DrawSink) -> None:
    """Execute ``primitives`` in order on ``sink``"""
    for primitive in primitives:
        if isinstance(primitive, Clear):
            sink.clear(primitive.width, primitive.height)
        elif isinstance(primitive, FillRect):
            sink.set_fill_style(_resolve_style(primitive.style, sink))
            sink.begin_path()
            if primitive.radius > 0:
                sink.rounded_rect(
                    primitive.x,
                    primitive.y,
                    primitive.width,
                    primitive.height,
                    primitive.radius,
                )
            else:
                sink.rect(primitive.x, primitive.y, primitive.width, primitive.height)
            sink.fill()
        elif isinstance(primitive, StrokePath):
            sink.set_stroke_style(_resolve_style(primitive.style, sink))
            sink.set_line_width(primitive.line_width)
            _trace(primitive.points, sink)
            sink.stroke()
        elif isinstance(primitive, FillPath):
            sink.set_fill_style(_resolve_style(primitive.style, sink))
            _trace(primitive.points, sink)
            sink.fill()
        elif isinstance(primitive, FillText):
            sink.set_fill_style(_resolve_style(primitive.style, sink))
            sink.set_font(primitive.font)
            sink.set_text_align(primitive.align)
            sink.set_text_baseline(primitive.baseline)
            sink.fill_text(primitive.text, primitive.x, primitive.y)
        else:
            raise TypeError(f"Not a draw primitive: {primitive!r}")


class PrimitiveRecorder(DrawSink):
    """Sink that records every call; the default surface for headless use"""

    def __init__(self, width: float = 0, height: float = 0):
        self.width = width
        self.height = height
        self.calls: List[Tuple[str, tuple]] = []
        self.frames = 0

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))

    def reset(self) -> None:
        self.calls = []

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def clear(self, width, height):
        # A clear starts a new frame
        self.calls = []
        self.frames += 1
        self._record("clear", width, height)

    def create_linear_gradient(self, x0, y0, x1, y1, stops):
        gradient = LinearGradient(x0, y0, x1, y1, tuple(stops))
        self._record("create_linear_gradient", x0, y0, x1, y1, tuple(stops))
        return gradient

    def set_fill_style(self, style):
        self._record("set_fill_style", style)

    def set_stroke_style(self, style):
        self._record("set_stroke_style", style)

    def set_line_width(self, width):
        self._record("set_line_width", width)

    def begin_path(self):
        self._record("begin_path")

    def move_to(self, x, y):
        self._record("move_to", x, y)

    def line_to(self, x, y):
        self._record("line_to", x, y)

    def rect(self, x, y, width, height):
        self._record("rect", x, y, width, height)

    def rounded_rect(self, x, y, width, height, radius):
        self._record("rounded_rect", x, y, width, height, radius)

    def fill(self):
        self._record("fill")

    def stroke(self):
        self._record("stroke")

    def set_font(self, font):
        self._record("set_font", font)

    def set_text_align(self, align):
        self._record("set_text_align", align)

    def set_text_baseline(self, baseline):
        self._record("set_text_baseline", baseline)

    def fill_text(self, text, x, y):
        self._record("fill_text", text, x, y)
