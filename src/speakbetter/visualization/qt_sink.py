"""QPainter draw sink

Install with the ``qt`` extra (``pip install speakbetter[qt]``).
"""

import re
from typing import Sequence

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import (
    QBrush,
    QColor,
    QFont,
    QFontMetricsF,
    QLinearGradient,
    QPainter,
    QPainterPath,
    QPen,
)

from .primitives import ColorStop, DrawSink

_RGB_RE = re.compile(
    r"rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)"
)
_FONT_SIZE_RE = re.compile(r"^(\d+(?:\.\d+)?)px$")


def parse_color(value: str) -> QColor:
    """CSS colour string (hex, name, rgb(), rgba()) to QColor"""
    match = _RGB_RE.fullmatch(value.strip())
    if match:
        red, green, blue, alpha = match.groups()
        color = QColor(int(float(red)), int(float(green)), int(float(blue)))
        if alpha is not None:
            color.setAlphaF(float(alpha))
        return color

    color = QColor(value.strip())
    if not color.isValid():
        raise ValueError(f"Unrecognized colour: {value!r}")
    return color


def parse_font(value: str) -> QFont:
    """CSS font shorthand subset: ``[bold] <size>px <family>``"""
    font = QFont()
    family = []
    for token in value.split():
        size = _FONT_SIZE_RE.match(token)
        if token == "bold":
            font.setBold(True)
        elif size:
            font.setPixelSize(max(1, round(float(size.group(1)))))
        else:
            family.append(token)
    if family:
        name = " ".join(family)
        font.setFamily(name)
        if name == "sans-serif":
            font.setStyleHint(QFont.StyleHint.SansSerif)
    return font


class QtPainterSink(DrawSink):
    """Executes canvas-style calls on an active QPainter"""

    def __init__(self, painter: QPainter):
        self._painter = painter
        self._painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        self._path = QPainterPath()
        self._brush = QBrush(QColor(0, 0, 0))
        self._pen = QPen(QColor(0, 0, 0), 1)
        self._font = QFont()
        self._text_align = "start"
        self._text_baseline = "alphabetic"

    def _to_brush(self, style) -> QBrush:
        if isinstance(style, QLinearGradient):
            return QBrush(style)
        return QBrush(parse_color(style))

    def clear(self, width, height):
        self._painter.save()
        self._painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Clear)
        self._painter.fillRect(QRectF(0, 0, width, height), Qt.GlobalColor.transparent)
        self._painter.restore()
        self._path = QPainterPath()

    def create_linear_gradient(self, x0, y0, x1, y1, stops: Sequence[ColorStop]):
        gradient = QLinearGradient(QPointF(x0, y0), QPointF(x1, y1))
        for offset, color in stops:
            gradient.setColorAt(offset, parse_color(color))
        return gradient

    def set_fill_style(self, style):
        self._brush = self._to_brush(style)

    def set_stroke_style(self, style):
        self._pen.setBrush(self._to_brush(style))

    def set_line_width(self, width):
        self._pen.setWidthF(width)

    def begin_path(self):
        self._path = QPainterPath()

    def move_to(self, x, y):
        self._path.moveTo(x, y)

    def line_to(self, x, y):
        self._path.lineTo(x, y)

    def rect(self, x, y, width, height):
        self._path.addRect(QRectF(x, y, width, height))

    def rounded_rect(self, x, y, width, height, radius):
        self._path.addRoundedRect(QRectF(x, y, width, height), radius, radius)

    def fill(self):
        self._painter.fillPath(self._path, self._brush)

    def stroke(self):
        self._painter.strokePath(self._path, self._pen)

    def set_font(self, font):
        self._font = parse_font(font)

    def set_text_align(self, align):
        self._text_align = align

    def set_text_baseline(self, baseline):
        self._text_baseline = baseline

    def fill_text(self, text, x, y):
        metrics = QFontMetricsF(self._font)
        advance = metrics.horizontalAdvance(text)
        if self._text_align == "center":
            x -= advance / 2
        elif self._text_align in ("right", "end"):
            x -= advance

        if self._text_baseline == "top":
            y += metrics.ascent()
        elif self._text_baseline == "middle":
            y += (metrics.ascent() - metrics.descent()) / 2
        elif self._text_baseline == "bottom":
            y -= metrics.descent()

        self._painter.save()
        self._painter.setFont(self._font)
        self._painter.setPen(QPen(self._brush, 1))
        self._painter.drawText(QPointF(x, y), text)
        self._painter.restore()
