"""QPainter sink tests (need the qt extra)"""

import os

import numpy as np
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
pytest.importorskip("PySide6")

from PySide6.QtGui import QColor, QGuiApplication, QImage, QPainter  # noqa: E402

from speakbetter.visualization import FrequencySpec, VisualizationPipeline, replay  # noqa: E402
from speakbetter.visualization.qt_sink import QtPainterSink, parse_color, parse_font  # noqa: E402

pytestmark = pytest.mark.qt


@pytest.fixture(scope="module")
def qt_app():
    app = QGuiApplication.instance() or QGuiApplication([])
    yield app


@pytest.fixture
def image(qt_app):
    img = QImage(300, 100, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(QColor(0, 0, 0, 0))
    return img


def paint(image, primitives):
    painter = QPainter(image)
    try:
        replay(primitives, QtPainterSink(painter))
    finally:
        painter.end()


class TestParsing:
    def test_hex_and_names(self, qt_app):
        """Test hex and named colours"""
        assert parse_color("#4A55A2") == QColor(74, 85, 162)
        assert parse_color("red") == QColor(255, 0, 0)

    def test_rgba(self, qt_app):
        """Test rgb() and rgba() functional notation"""
        assert parse_color("rgb(10, 20, 30)") == QColor(10, 20, 30)
        assert parse_color("rgba(74, 85, 162, 0.2)").alphaF() == pytest.approx(0.2, abs=0.01)

    def test_invalid_colour(self, qt_app):
        """Test garbage raises ValueError"""
        with pytest.raises(ValueError):
            parse_color("not-a-colour")

    def test_font(self, qt_app):
        """Test bold, pixel size and family"""
        font = parse_font("bold 16px sans-serif")

        assert font.bold() is True
        assert font.pixelSize() == 16


class TestPainting:
    def test_frequency_bars(self, image):
        """Test bars are filled in the foreground colour and the rest stays clear"""
        pipeline = VisualizationPipeline()
        result = pipeline.render(np.full(128, 255, dtype=np.uint8), FrequencySpec())

        paint(image, result.primitives)

        inside = image.pixelColor(1, 60)
        assert (inside.red(), inside.green(), inside.blue(), inside.alpha()) == (74, 85, 162, 255)
        assert image.pixelColor(1, 5).alpha() == 0

    def test_volume_label(self, image):
        """Test text drawing does not fail and marks pixels"""
        pipeline = VisualizationPipeline()
        result = pipeline.render(np.full(16, 255, dtype=np.uint8), "volume")

        paint(image, result.primitives)

        assert image.pixelColor(150, 60).alpha() == 255
